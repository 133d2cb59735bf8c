"""
Likelihood-ratio test for nested models.
"""

import numpy as np
from dataclasses import dataclass
from scipy import stats

from ._core.simplex import FitResult
from .exceptions import InvalidComparison


@dataclass(frozen=True)
class LRTResult:
    """Likelihood-ratio test outcome."""
    statistic: float   # -2 log(L0 / L1)
    df: int            # Difference in parameter counts
    pvalue: float      # Upper tail of chi-squared(df) at statistic


def likelihood_ratio_test(
    fit_null: FitResult,
    fit_alt: FitResult,
    k_null: int,
    k_alt: int,
) -> LRTResult:
    """
    Compare two nested maximum-likelihood fits.

    Parameters
    ----------
    fit_null : FitResult
        Fit of the restricted (null) model
    fit_alt : FitResult
        Fit of the larger (alternative) model
    k_null, k_alt : int
        Parameter counts; the alternative must have strictly more

    Returns
    -------
    result : LRTResult

    Raises
    ------
    InvalidComparison
        If ``k_alt <= k_null`` or the alternative fits worse than the null

    Notes
    -----
    Both fits store the minimized *negative* log-likelihood, so
    ``2 * (nll_null - nll_alt)`` equals ``-2 log(L0 / L1)``.
    """
    if k_alt <= k_null:
        raise InvalidComparison(
            f"Alternative model must have more parameters than the null "
            f"(got k_null={k_null}, k_alt={k_alt})"
        )
    statistic = 2.0 * (fit_null.objective_value - fit_alt.objective_value)
    if not np.isfinite(statistic):
        raise InvalidComparison(f"Likelihood-ratio statistic is not finite: {statistic}")
    if statistic < 0:
        raise InvalidComparison(
            f"Likelihood-ratio statistic is negative ({statistic:.6g}): the "
            f"alternative fits worse than the null, check both optimizations"
        )
    df = int(k_alt - k_null)
    pvalue = float(stats.chi2.sf(statistic, df))
    return LRTResult(statistic=float(statistic), df=df, pvalue=pvalue)


__all__ = ["LRTResult", "likelihood_ratio_test"]
