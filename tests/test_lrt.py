"""
Test the likelihood-ratio test.
"""

import pytest
import numpy as np
from scipy import stats

from pylikelihood import (
    FitResult,
    LRTResult,
    likelihood_ratio_test,
    InvalidComparison,
)


def make_fit(nll, k):
    return FitResult(
        params=np.zeros(k),
        objective_value=nll,
        iterations=10,
        converged=True,
        evaluation_count=20,
    )


class TestLikelihoodRatioTest:
    """Test statistic, degrees of freedom and p-value."""

    def test_statistic_and_pvalue(self):
        """Test statistic = 2 * (nll_null - nll_alt) against chi-squared(df)."""
        result = likelihood_ratio_test(make_fit(110.0, 1), make_fit(100.0, 3), 1, 3)
        assert isinstance(result, LRTResult)
        assert result.statistic == pytest.approx(20.0)
        assert result.df == 2
        assert result.pvalue == pytest.approx(stats.chi2.sf(20.0, 2))

    def test_equal_fits(self):
        """Test identical likelihoods give statistic 0 and p-value 1."""
        result = likelihood_ratio_test(make_fit(50.0, 1), make_fit(50.0, 2), 1, 2)
        assert result.statistic == 0.0
        assert result.pvalue == pytest.approx(1.0)

    def test_swapped_roles_rejected(self):
        """Test swapping null and alternative without swapping nesting fails."""
        null, alt = make_fit(110.0, 1), make_fit(100.0, 3)
        likelihood_ratio_test(null, alt, 1, 3)
        with pytest.raises(InvalidComparison):
            likelihood_ratio_test(alt, null, 3, 1)

    def test_equal_param_counts_rejected(self):
        """Test models with the same parameter count are not nested."""
        with pytest.raises(InvalidComparison):
            likelihood_ratio_test(make_fit(110.0, 2), make_fit(100.0, 2), 2, 2)

    def test_negative_statistic_rejected(self):
        """Test an alternative that fits worse than the null is rejected."""
        with pytest.raises(InvalidComparison, match="negative"):
            likelihood_ratio_test(make_fit(100.0, 1), make_fit(100.5, 2), 1, 2)
