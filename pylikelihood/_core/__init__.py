"""
Core algorithms.
"""

from .families import DistributionModel, Normal, Poisson, Binomial, get_family
from .objective import Observations, LikelihoodObjective
from .simplex import FitResult, SimplexOptions, NelderMead, minimize_simplex
from .hessian import numerical_hessian

__all__ = [
    "DistributionModel",
    "Normal",
    "Poisson",
    "Binomial",
    "get_family",
    "Observations",
    "LikelihoodObjective",
    "FitResult",
    "SimplexOptions",
    "NelderMead",
    "minimize_simplex",
    "numerical_hessian",
]
