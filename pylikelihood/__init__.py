"""
PyLikelihood: maximum-likelihood and gradient-descent parameter estimation.

Fits Normal, Poisson and Binomial (logit) models with a Nelder-Mead
simplex, compares nested fits with a likelihood-ratio test, and trains
a single sigmoid unit by batch gradient descent.

Licensed under GPL-3.0
"""

__version__ = "1.0.0"

# Import main user-facing API
from .mle import mle, MaximumLikelihood
from .lrt import likelihood_ratio_test, LRTResult
from .neuron import SigmoidUnit, TrainResult

# Import core building blocks (for advanced users)
from ._core import (
    DistributionModel,
    Normal,
    Poisson,
    Binomial,
    get_family,
    Observations,
    LikelihoodObjective,
    FitResult,
    SimplexOptions,
    NelderMead,
    minimize_simplex,
)
from .exceptions import (
    PyLikelihoodError,
    InvalidParameter,
    NonFiniteObjective,
    InvalidComparison,
    UntrainedModel,
    DimensionMismatch,
    ConvergenceWarning,
)

__all__ = [
    'mle',
    'MaximumLikelihood',
    'likelihood_ratio_test',
    'LRTResult',
    'SigmoidUnit',
    'TrainResult',
    'DistributionModel',
    'Normal',
    'Poisson',
    'Binomial',
    'get_family',
    'Observations',
    'LikelihoodObjective',
    'FitResult',
    'SimplexOptions',
    'NelderMead',
    'minimize_simplex',
    'PyLikelihoodError',
    'InvalidParameter',
    'NonFiniteObjective',
    'InvalidComparison',
    'UntrainedModel',
    'DimensionMismatch',
    'ConvergenceWarning',
]
