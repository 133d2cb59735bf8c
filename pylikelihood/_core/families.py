"""
Distribution families.

Each family exposes a log-density (or log-mass) evaluated in log space,
its parameter count, and the default bounds the optimizer should respect.
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from scipy.special import expit, gammaln

from ..exceptions import DimensionMismatch, InvalidParameter
from .._utils import check_params


# Smallest admissible value for scale/rate parameters during optimization
POSITIVE_LOWER_BOUND = 1e-6

LOG_2PI = np.log(2.0 * np.pi)


class DistributionModel(ABC):
    """Base class for distribution families."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Family name."""
        pass

    @abstractmethod
    def param_count(self) -> int:
        """Number of parameters."""
        pass

    @property
    @abstractmethod
    def param_names(self) -> List[str]:
        """Parameter labels, in order."""
        pass

    @property
    def bounds(self) -> List[Tuple[float, float]]:
        """Default (lower, upper) bounds per parameter."""
        return [(-np.inf, np.inf)] * self.param_count()

    @property
    def requires_design(self) -> bool:
        """Whether observations must carry a design matrix."""
        return False

    @abstractmethod
    def validate_params(self, params: np.ndarray) -> np.ndarray:
        """Check parameter length and domain, returning a float array."""
        pass

    @abstractmethod
    def log_density(self, params, y, x=None):
        """
        Log-density of observation(s) ``y`` under ``params``.

        Accepts a single observation or a batch (rows of ``y`` and ``x``);
        returns a float or an array of per-observation terms.
        """
        pass

    def validate_response(self, y: np.ndarray) -> None:
        """Check that responses lie in the support of the family."""
        if np.ndim(y) > 1:
            raise DimensionMismatch(
                f"{self.name} responses must be scalars, got shape {np.shape(y)}"
            )

    @abstractmethod
    def start_params(self, y: np.ndarray, X: Optional[np.ndarray] = None) -> np.ndarray:
        """Data-driven starting values for the optimizer."""
        pass

    @abstractmethod
    def sample(self, params, size: int, rng: np.random.Generator,
               X: Optional[np.ndarray] = None) -> np.ndarray:
        """Draw ``size`` observations from the family."""
        pass

    def __repr__(self):
        return f"{type(self).__name__}()"


class Normal(DistributionModel):
    """Normal family, params = [mean, std]."""

    @property
    def name(self) -> str:
        return "normal"

    def param_count(self) -> int:
        return 2

    @property
    def param_names(self) -> List[str]:
        return ["mean", "std"]

    @property
    def bounds(self) -> List[Tuple[float, float]]:
        return [(-np.inf, np.inf), (POSITIVE_LOWER_BOUND, np.inf)]

    def validate_params(self, params):
        params = check_params(params, 2)
        if not params[1] > 0:
            raise InvalidParameter(f"std must be positive, got {params[1]}")
        return params

    def log_density(self, params, y, x=None):
        mean, std = self.validate_params(params)
        z = (np.asarray(y, dtype=np.float64) - mean) / std
        return -0.5 * LOG_2PI - np.log(std) - 0.5 * z ** 2

    def start_params(self, y, X=None):
        std = np.std(y)
        return np.array([np.mean(y), std if std > 0 else 1.0])

    def sample(self, params, size, rng, X=None):
        mean, std = self.validate_params(params)
        return rng.normal(mean, std, size)


class Poisson(DistributionModel):
    """Poisson family, params = [rate]."""

    @property
    def name(self) -> str:
        return "poisson"

    def param_count(self) -> int:
        return 1

    @property
    def param_names(self) -> List[str]:
        return ["rate"]

    @property
    def bounds(self) -> List[Tuple[float, float]]:
        return [(POSITIVE_LOWER_BOUND, np.inf)]

    def validate_params(self, params):
        params = check_params(params, 1)
        if not params[0] > 0:
            raise InvalidParameter(f"rate must be positive, got {params[0]}")
        return params

    def validate_response(self, y):
        super().validate_response(y)
        y = np.asarray(y, dtype=np.float64)
        if np.any(y < 0) or np.any(y != np.floor(y)):
            raise ValueError("Poisson responses must be non-negative integer counts")

    def log_density(self, params, y, x=None):
        rate = self.validate_params(params)[0]
        y = np.asarray(y, dtype=np.float64)
        self.validate_response(y)
        # gammaln(y + 1) == log(y!) without forming the factorial
        return y * np.log(rate) - rate - gammaln(y + 1.0)

    def start_params(self, y, X=None):
        return np.array([max(np.mean(y), 1.0)])

    def sample(self, params, size, rng, X=None):
        rate = self.validate_params(params)[0]
        return rng.poisson(rate, size)


class Binomial(DistributionModel):
    """
    Binomial family with logit link.

    Params are regression coefficients, one per design-matrix column.
    Each observation is a ``(successes, trials)`` pair and the success
    probability for row ``x`` is ``1 / (1 + exp(-x @ params))``.
    """

    def __init__(self, n_features: int):
        if n_features < 1:
            raise ValueError(f"n_features must be positive, got {n_features}")
        self.n_features = int(n_features)

    @property
    def name(self) -> str:
        return "binomial"

    def param_count(self) -> int:
        return self.n_features

    @property
    def param_names(self) -> List[str]:
        return [f"x{i}" for i in range(self.n_features)]

    @property
    def requires_design(self) -> bool:
        return True

    def validate_params(self, params):
        return check_params(params, self.n_features)

    def validate_response(self, y):
        y = np.asarray(y, dtype=np.float64)
        if y.ndim != 2 or y.shape[1] != 2:
            raise DimensionMismatch(
                f"Binomial responses must be (successes, trials) pairs, got shape {y.shape}"
            )
        k, n = y[:, 0], y[:, 1]
        if np.any(k != np.floor(k)) or np.any(n != np.floor(n)):
            raise ValueError("Binomial successes and trials must be integers")
        if np.any(k < 0) or np.any(k > n):
            raise ValueError("Binomial successes must satisfy 0 <= successes <= trials")

    def log_density(self, params, y, x=None):
        beta = self.validate_params(params)
        if x is None:
            raise DimensionMismatch("Binomial family requires a design row x")
        y = np.asarray(y, dtype=np.float64)
        x = np.asarray(x, dtype=np.float64)
        single = y.ndim == 1
        y = np.atleast_2d(y)
        x = np.atleast_2d(x)
        if x.shape[1] != self.n_features:
            raise DimensionMismatch(
                f"x has {x.shape[1]} columns, expected {self.n_features}"
            )
        if x.shape[0] != y.shape[0]:
            raise DimensionMismatch(
                f"x has {x.shape[0]} rows but y has {y.shape[0]}"
            )
        self.validate_response(y)
        k, n = y[:, 0], y[:, 1]
        eta = x @ beta
        # log p and log(1 - p) straight from the linear predictor
        log_p = -np.logaddexp(0.0, -eta)
        log_q = -np.logaddexp(0.0, eta)
        log_choose = gammaln(n + 1.0) - gammaln(k + 1.0) - gammaln(n - k + 1.0)
        out = log_choose + k * log_p + (n - k) * log_q
        return out[0] if single else out

    def start_params(self, y, X=None):
        return np.zeros(self.n_features)

    def sample(self, params, size, rng, X=None, trials=1):
        """
        Draw ``(successes, trials)`` rows for the design matrix ``X``.

        ``trials`` is a scalar or a length-``size`` array of trial counts.
        """
        beta = self.validate_params(params)
        if X is None:
            raise DimensionMismatch("Binomial sampling requires a design matrix X")
        X = np.asarray(X, dtype=np.float64)
        if X.shape != (size, self.n_features):
            raise DimensionMismatch(
                f"X must have shape ({size}, {self.n_features}), got {X.shape}"
            )
        trials = np.broadcast_to(np.asarray(trials, dtype=np.int64), (size,))
        p = expit(X @ beta)
        return np.column_stack([rng.binomial(trials, p), trials])

    def __repr__(self):
        return f"Binomial(n_features={self.n_features})"


_FAMILIES = {
    "normal": Normal,
    "gaussian": Normal,
    "poisson": Poisson,
    "binomial": Binomial,
}


def get_family(family, n_features: Optional[int] = None) -> DistributionModel:
    """
    Resolve a family name or instance.

    Parameters
    ----------
    family : str or DistributionModel
        'normal' (alias 'gaussian'), 'poisson', 'binomial', or an instance
    n_features : int, optional
        Number of design columns, required for 'binomial'
    """
    if isinstance(family, DistributionModel):
        return family
    if not isinstance(family, str) or family.lower() not in _FAMILIES:
        raise ValueError(
            f"Unknown family: '{family}'\n"
            f"Valid options: 'normal', 'poisson', 'binomial'"
        )
    cls = _FAMILIES[family.lower()]
    if cls is Binomial:
        if n_features is None:
            raise DimensionMismatch("Binomial family needs a design matrix X (n_features columns)")
        return Binomial(n_features)
    return cls()


__all__ = [
    "DistributionModel",
    "Normal",
    "Poisson",
    "Binomial",
    "get_family",
    "POSITIVE_LOWER_BOUND",
]
