"""
Nelder-Mead simplex minimization.

Derivative-free minimizer for any scalar objective of a parameter vector.
Candidates the objective rejects (invalid parameters, non-finite values)
are scored as +inf so the simplex moves away from them.
"""

import warnings
import numpy as np
from typing import Callable, Optional, Sequence, Tuple
from dataclasses import dataclass

from ..exceptions import (
    ConvergenceWarning,
    DimensionMismatch,
    InvalidParameter,
    NonFiniteObjective,
)


@dataclass(frozen=True)
class FitResult:
    """Result of a minimization run."""
    params: np.ndarray        # Best vertex found
    objective_value: float    # Objective at params (minimized NLL for likelihood fits)
    iterations: int           # Simplex iterations performed
    converged: bool           # Tolerances met before the budget ran out?
    evaluation_count: int     # Objective evaluations performed

    def __post_init__(self):
        params = np.array(self.params, dtype=np.float64)
        params.flags.writeable = False
        object.__setattr__(self, 'params', params)

    @property
    def log_likelihood(self) -> float:
        """Maximized log-likelihood, when the objective is an NLL."""
        return -self.objective_value

    @property
    def n_params(self) -> int:
        return self.params.shape[0]


@dataclass(frozen=True)
class SimplexOptions:
    """
    Configuration for :class:`NelderMead`.

    Attributes
    ----------
    max_iterations : int, optional
        Iteration budget, default ``1000 * M``
    max_evaluations : int, optional
        Objective evaluation budget, default ``1000 * M``; never exceeded,
        and must be at least ``M + 1``
    xtol : float
        Convergence tolerance on vertex spread
    ftol : float
        Convergence tolerance on objective-value spread
    initial_step : float
        Relative perturbation of non-zero coordinates for the initial simplex
    zero_step : float
        Absolute perturbation of zero coordinates for the initial simplex
    adaptive : bool
        Use dimension-dependent coefficients (Gao & Han, 2012)
    """
    max_iterations: Optional[int] = None
    max_evaluations: Optional[int] = None
    xtol: float = 1e-4
    ftol: float = 1e-4
    initial_step: float = 0.05
    zero_step: float = 0.00025
    adaptive: bool = False

    def __post_init__(self):
        for name in ('max_iterations', 'max_evaluations'):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ValueError(f"{name} must be at least 1, got {value}")
        for name in ('xtol', 'ftol', 'initial_step', 'zero_step'):
            if not getattr(self, name) > 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")


class NelderMead:
    """
    Nelder-Mead simplex minimizer.

    Algorithm:
    ---------
    Keep M+1 vertices sorted by objective value. Each iteration reflects
    the worst vertex through the centroid of the others, then expands,
    accepts, contracts or shrinks the simplex toward the best vertex.
    Bounds are enforced by clamping every candidate before evaluation.

    The algorithm contains no randomness: repeated runs with the same
    inputs give identical results.
    """

    def __init__(self, options: Optional[SimplexOptions] = None):
        self.options = options if options is not None else SimplexOptions()

    def minimize(
        self,
        objective: Callable[[np.ndarray], float],
        x0,
        bounds: Optional[Sequence[Tuple[Optional[float], Optional[float]]]] = None,
    ) -> FitResult:
        """
        Minimize ``objective`` starting from ``x0``.

        Parameters
        ----------
        objective : callable
            Scalar function of a parameter vector
        x0 : array_like, shape (M,)
            Initial guess
        bounds : sequence of (lower, upper), optional
            Per-parameter bounds; ``None`` or +-inf for an open side

        Returns
        -------
        result : FitResult
            Best vertex and run statistics
        """
        x0 = np.array(x0, dtype=np.float64).ravel()
        M = x0.shape[0]
        if M == 0:
            raise DimensionMismatch("x0 must contain at least one parameter")
        if not np.all(np.isfinite(x0)):
            raise ValueError("x0 contains NaN or Inf")
        lower, upper = _resolve_bounds(bounds, M)

        opts = self.options
        max_iter = opts.max_iterations or 1000 * M
        max_eval = opts.max_evaluations or 1000 * M

        if opts.adaptive:
            rho, chi, psi, sigma = 1.0, 1.0 + 2.0 / M, 0.75 - 1.0 / (2.0 * M), 1.0 - 1.0 / M
        else:
            rho, chi, psi, sigma = 1.0, 2.0, 0.5, 0.5

        n_eval = 0

        def clamp(x):
            return np.clip(x, lower, upper)

        def f(x):
            nonlocal n_eval
            n_eval += 1
            try:
                value = float(objective(x))
            except (InvalidParameter, NonFiniteObjective):
                return np.inf
            return value if np.isfinite(value) else np.inf

        if max_eval < M + 1:
            raise ValueError(
                f"max_evaluations ({max_eval}) cannot cover the initial simplex "
                f"of {M + 1} vertices"
            )

        # Initial simplex
        x0 = clamp(x0)
        sim = np.empty((M + 1, M), dtype=np.float64)
        sim[0] = x0
        for k in range(M):
            y = x0.copy()
            y[k] = x0[k] + _initial_step(
                x0[k], lower[k], upper[k], opts.initial_step, opts.zero_step
            )
            sim[k + 1] = clamp(y)
        fsim = np.array([f(v) for v in sim])

        order = np.argsort(fsim, kind='stable')
        sim, fsim = sim[order], fsim[order]

        iterations = 0
        converged = False
        while iterations < max_iter and n_eval < max_eval:
            if self._has_converged(sim, fsim):
                converged = True
                break

            xbar = sim[:-1].mean(axis=0)
            worst = sim[-1].copy()

            xr = clamp((1 + rho) * xbar - rho * worst)
            fr = f(xr)
            shrink = False

            if fr < fsim[0]:
                sim[-1], fsim[-1] = xr, fr
                if n_eval < max_eval:
                    xe = clamp((1 + rho * chi) * xbar - rho * chi * worst)
                    fe = f(xe)
                    if fe < fr:
                        sim[-1], fsim[-1] = xe, fe
            elif fr < fsim[-2]:
                sim[-1], fsim[-1] = xr, fr
            elif n_eval >= max_eval:
                # Budget spent: keep the reflection only if it beats the worst
                if fr < fsim[-1]:
                    sim[-1], fsim[-1] = xr, fr
            elif fr < fsim[-1]:
                # Outside contraction
                xc = clamp((1 + psi * rho) * xbar - psi * rho * worst)
                fc = f(xc)
                if fc <= fr:
                    sim[-1], fsim[-1] = xc, fc
                else:
                    shrink = True
            else:
                # Inside contraction
                xcc = clamp((1 - psi) * xbar + psi * worst)
                fcc = f(xcc)
                if fcc < fsim[-1]:
                    sim[-1], fsim[-1] = xcc, fcc
                else:
                    shrink = True

            if shrink:
                for j in range(1, M + 1):
                    if n_eval >= max_eval:
                        break
                    sim[j] = clamp(sim[0] + sigma * (sim[j] - sim[0]))
                    fsim[j] = f(sim[j])

            iterations += 1
            order = np.argsort(fsim, kind='stable')
            sim, fsim = sim[order], fsim[order]

        if not converged:
            converged = self._has_converged(sim, fsim)
        if not converged:
            warnings.warn(
                f"Nelder-Mead did not converge after {iterations} iterations "
                f"and {n_eval} evaluations; returning best point found",
                ConvergenceWarning,
                stacklevel=2,
            )

        return FitResult(
            params=sim[0],
            objective_value=float(fsim[0]),
            iterations=iterations,
            converged=bool(converged),
            evaluation_count=n_eval,
        )

    def _has_converged(self, sim: np.ndarray, fsim: np.ndarray) -> bool:
        if not np.isfinite(fsim[0]):
            return False
        with np.errstate(invalid='ignore'):
            x_spread = np.max(np.abs(sim[1:] - sim[0]))
            f_spread = np.max(np.abs(fsim[1:] - fsim[0]))
        return bool(x_spread <= self.options.xtol and f_spread <= self.options.ftol)


def _initial_step(x: float, lower: float, upper: float,
                  rel_step: float, zero_step: float) -> float:
    """Perturbation of one coordinate that keeps it within its bounds."""
    step = x * rel_step if x != 0 else zero_step
    if not lower <= x + step <= upper:
        step = -step
    if not lower <= x + step <= upper:
        # Range narrower than the step: move toward the farther bound
        span = (upper - lower) * rel_step
        step = span if upper - x >= x - lower else -span
    return step


def _resolve_bounds(bounds, M: int) -> Tuple[np.ndarray, np.ndarray]:
    """Turn a bounds sequence into lower/upper arrays (+-inf when open)."""
    lower = np.full(M, -np.inf)
    upper = np.full(M, np.inf)
    if bounds is None:
        return lower, upper
    bounds = list(bounds)
    if len(bounds) != M:
        raise DimensionMismatch(f"bounds has {len(bounds)} entries, expected {M}")
    for i, (lo, hi) in enumerate(bounds):
        if lo is not None:
            lower[i] = lo
        if hi is not None:
            upper[i] = hi
        if lower[i] > upper[i]:
            raise ValueError(f"Lower bound exceeds upper bound for parameter {i}")
    return lower, upper


def minimize_simplex(objective, x0, bounds=None, **options) -> FitResult:
    """
    Minimize ``objective`` with Nelder-Mead (convenience function).

    Keyword arguments are passed to :class:`SimplexOptions`.
    """
    return NelderMead(SimplexOptions(**options)).minimize(objective, x0, bounds=bounds)


__all__ = ["FitResult", "SimplexOptions", "NelderMead", "minimize_simplex"]
