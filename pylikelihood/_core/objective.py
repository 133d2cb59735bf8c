"""
Negative log-likelihood objective.

Binds a distribution family to a fixed set of observations and exposes
the result as a scalar function of the parameter vector.
"""

import numpy as np
from typing import Optional
from dataclasses import dataclass

from .families import DistributionModel
from ..exceptions import DimensionMismatch, NonFiniteObjective
from .._utils import check_array


@dataclass(frozen=True)
class Observations:
    """
    Observed data: responses plus an optional design matrix.

    Attributes
    ----------
    y : ndarray, shape (n,) or (n, 2)
        Responses. Binomial data are ``[successes, trials]`` rows.
    X : ndarray, shape (n, p), optional
        Design matrix (regressors), one row per response
    """
    y: np.ndarray
    X: Optional[np.ndarray] = None

    def __post_init__(self):
        y = np.asarray(self.y, dtype=np.float64)
        if y.ndim == 0 or y.shape[0] == 0:
            raise DimensionMismatch("Observations must contain at least one response")
        if y.ndim > 2:
            raise DimensionMismatch(f"y must be 1- or 2-dimensional, got shape {y.shape}")
        if not np.all(np.isfinite(y)):
            raise ValueError("y contains NaN or Inf")
        y = y.copy()
        y.flags.writeable = False
        object.__setattr__(self, 'y', y)

        if self.X is not None:
            X = check_array(self.X, name='X').copy()
            if X.shape[0] != y.shape[0]:
                raise DimensionMismatch(
                    f"X has {X.shape[0]} rows but y has {y.shape[0]} responses"
                )
            X.flags.writeable = False
            object.__setattr__(self, 'X', X)

    @property
    def n_obs(self) -> int:
        return self.y.shape[0]

    def __len__(self):
        return self.n_obs


class LikelihoodObjective:
    """
    Negative log-likelihood of a family over fixed observations.

    Evaluation is side-effect free: neither the parameters nor the
    observations are modified.
    """

    def __init__(self, model: DistributionModel, observations: Observations):
        """
        Parameters
        ----------
        model : DistributionModel
            Distribution family
        observations : Observations
            Observed data
        """
        if not isinstance(observations, Observations):
            observations = Observations(*observations)
        if model.requires_design and observations.X is None:
            raise DimensionMismatch(f"{model.name} family requires a design matrix X")
        if not model.requires_design and observations.X is not None:
            raise DimensionMismatch(
                f"{model.name} family takes no regressors, but a design matrix "
                f"with {observations.X.shape[1]} columns was given"
            )
        model.validate_response(observations.y)

        self.model = model
        self.observations = observations

    @property
    def n_obs(self) -> int:
        return self.observations.n_obs

    @property
    def n_params(self) -> int:
        return self.model.param_count()

    def evaluate(self, params) -> float:
        """
        Negative log-likelihood at ``params``.

        Raises
        ------
        InvalidParameter
            If ``params`` lie outside the family's domain
        NonFiniteObjective
            If any log-density term is NaN or infinite
        """
        obs = self.observations
        terms = self.model.log_density(params, obs.y, obs.X)
        with np.errstate(invalid='ignore'):
            value = -float(np.sum(terms))
        if not np.isfinite(value):
            raise NonFiniteObjective(
                f"Negative log-likelihood is {value} at params={np.asarray(params)!r}",
                value=value,
            )
        return value

    __call__ = evaluate

    def __repr__(self):
        return f"LikelihoodObjective(model={self.model!r}, n_obs={self.n_obs})"


__all__ = ["Observations", "LikelihoodObjective"]
