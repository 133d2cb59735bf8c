"""
Finite-difference Hessian.

Used for Wald standard errors: the inverse Hessian of the negative
log-likelihood at the MLE estimates the covariance of the estimates.
"""

import numpy as np
from typing import Callable, Optional


def numerical_hessian(
    func: Callable[[np.ndarray], float],
    x: np.ndarray,
    step: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Central-difference Hessian of ``func`` at ``x``.

    Parameters
    ----------
    func : callable
        Scalar function of a parameter vector
    x : ndarray, shape (k,)
        Evaluation point
    step : float or ndarray, optional
        Step size per coordinate, default ``1e-4 * max(|x|, 1)``

    Returns
    -------
    H : ndarray, shape (k, k)
        Symmetric Hessian estimate
    """
    x = np.asarray(x, dtype=np.float64)
    k = x.shape[0]
    if step is None:
        h = 1e-4 * np.maximum(np.abs(x), 1.0)
    else:
        h = np.broadcast_to(np.asarray(step, dtype=np.float64), (k,))

    f0 = func(x)
    H = np.empty((k, k), dtype=np.float64)
    for i in range(k):
        ei = np.zeros(k)
        ei[i] = h[i]
        H[i, i] = (func(x + ei) - 2.0 * f0 + func(x - ei)) / h[i] ** 2
        for j in range(i + 1, k):
            ej = np.zeros(k)
            ej[j] = h[j]
            H[i, j] = (
                func(x + ei + ej) - func(x + ei - ej)
                - func(x - ei + ej) + func(x - ei - ej)
            ) / (4.0 * h[i] * h[j])
            H[j, i] = H[i, j]
    return H


__all__ = ["numerical_hessian"]
