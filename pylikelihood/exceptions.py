"""
Exception and warning types.

Numerical failures during an optimization run are absorbed by the
optimizer; everything else here is raised to the caller.
"""


class PyLikelihoodError(Exception):
    """Base class for all pylikelihood errors."""
    pass


class InvalidParameter(PyLikelihoodError, ValueError):
    """Parameter value outside the domain of a distribution."""
    pass


class NonFiniteObjective(PyLikelihoodError, ArithmeticError):
    """Objective evaluated to NaN or infinity."""

    def __init__(self, message: str, value: float = float('nan')):
        self.value = value
        super().__init__(message)


class InvalidComparison(PyLikelihoodError, ValueError):
    """Likelihood-ratio test requested for models that cannot be compared."""
    pass


class UntrainedModel(PyLikelihoodError, RuntimeError):
    """Prediction requested before the model was trained."""

    def __init__(self, model_name: str = ""):
        msg = f"{model_name or 'Model'} has not been trained. Call train() first."
        super().__init__(msg)


class DimensionMismatch(PyLikelihoodError, ValueError):
    """Array shapes or lengths do not agree."""
    pass


class ConvergenceWarning(UserWarning):
    """Optimizer stopped on its budget before converging."""
    pass


__all__ = [
    "PyLikelihoodError",
    "InvalidParameter",
    "NonFiniteObjective",
    "InvalidComparison",
    "UntrainedModel",
    "DimensionMismatch",
    "ConvergenceWarning",
]
