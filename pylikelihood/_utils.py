"""
Utility functions.
"""

import numpy as np

from .exceptions import DimensionMismatch


def check_array(X, name='X', dtype=np.float64):
    """Validate array input."""
    X = np.asarray(X, dtype=dtype)
    if X.ndim != 2:
        raise DimensionMismatch(f"{name} must be 2-dimensional, got shape {X.shape}")
    if X.shape[0] == 0:
        raise DimensionMismatch(f"{name} has no rows")
    if not np.all(np.isfinite(X)):
        raise ValueError(f"{name} contains NaN or Inf")
    return X


def check_vector(y, name='y', dtype=np.float64):
    """Validate vector input."""
    y = np.asarray(y, dtype=dtype)
    if y.ndim == 2 and y.shape[1] == 1:
        y = y[:, 0]
    if y.ndim != 1:
        raise DimensionMismatch(f"{name} must be 1-dimensional, got shape {y.shape}")
    if y.shape[0] == 0:
        raise DimensionMismatch(f"{name} is empty")
    if not np.all(np.isfinite(y)):
        raise ValueError(f"{name} contains NaN or Inf")
    return y


def check_params(params, n_params, name='params'):
    """Validate a parameter vector against its expected length."""
    params = np.asarray(params, dtype=np.float64)
    if params.ndim == 0:
        params = params.reshape(1)
    if params.ndim != 1 or params.shape[0] != n_params:
        raise DimensionMismatch(
            f"{name} must have length {n_params}, got shape {params.shape}"
        )
    return params
