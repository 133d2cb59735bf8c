"""
Test the Nelder-Mead simplex optimizer.
"""

import dataclasses

import pytest
import numpy as np

from pylikelihood import (
    NelderMead,
    SimplexOptions,
    minimize_simplex,
    Normal,
    Observations,
    LikelihoodObjective,
    ConvergenceWarning,
    DimensionMismatch,
    InvalidParameter,
    NonFiniteObjective,
)


def quadratic(x):
    return (x[0] - 3.0) ** 2 + (x[1] + 1.0) ** 2


def rosenbrock(x):
    return (1.0 - x[0]) ** 2 + 100.0 * (x[1] - x[0] ** 2) ** 2


class TestConvergence:
    """Test convergence on known objectives."""

    @pytest.mark.parametrize("x0", [[0.0, 0.0], [10.0, 10.0], [-25.0, 4.0]])
    def test_quadratic(self, x0):
        """Test a convex quadratic converges to its minimum from any start."""
        result = NelderMead().minimize(quadratic, x0)
        assert result.converged
        np.testing.assert_allclose(result.params, [3.0, -1.0], atol=1e-3)
        assert result.objective_value < 1e-6
        assert result.iterations > 0
        assert result.evaluation_count >= result.iterations

    def test_rosenbrock(self):
        """Test the curved Rosenbrock valley."""
        result = minimize_simplex(rosenbrock, [-1.2, 1.0], xtol=1e-8, ftol=1e-10)
        assert result.converged
        np.testing.assert_allclose(result.params, [1.0, 1.0], atol=1e-3)

    def test_one_dimensional(self):
        """Test a single-parameter problem."""
        result = minimize_simplex(lambda x: (x[0] - 0.5) ** 2, [4.0])
        assert result.converged
        assert result.params[0] == pytest.approx(0.5, abs=1e-3)

    def test_adaptive_coefficients(self):
        """Test dimension-adaptive coefficients on a 5-D quadratic."""
        target = np.arange(5.0)
        result = minimize_simplex(
            lambda x: np.sum((x - target) ** 2), np.zeros(5), adaptive=True
        )
        assert result.converged
        np.testing.assert_allclose(result.params, target, atol=1e-2)


class TestDeterminism:
    """Test repeated runs agree exactly."""

    def test_identical_runs(self):
        """Test same start, objective and options give identical results."""
        options = SimplexOptions(xtol=1e-6, ftol=1e-8)
        first = NelderMead(options).minimize(rosenbrock, [-1.2, 1.0])
        second = NelderMead(options).minimize(rosenbrock, [-1.2, 1.0])
        np.testing.assert_array_equal(first.params, second.params)
        assert first.objective_value == second.objective_value
        assert first.iterations == second.iterations
        assert first.evaluation_count == second.evaluation_count


class TestBounds:
    """Test bound handling."""

    def test_clamped_to_upper_bound(self):
        """Test the optimum is clamped when it lies outside the bounds."""
        result = minimize_simplex(quadratic, [0.0, 0.0], bounds=[(None, 2.0), (None, None)])
        assert result.params[0] <= 2.0
        assert result.params[0] == pytest.approx(2.0, abs=1e-3)
        assert result.params[1] == pytest.approx(-1.0, abs=1e-3)

    def test_start_outside_bounds(self):
        """Test an out-of-bounds start is clamped before evaluation."""
        seen = []

        def objective(x):
            seen.append(x.copy())
            return quadratic(x)

        minimize_simplex(objective, [50.0, 0.0], bounds=[(0.0, 10.0), (-5.0, 5.0)])
        seen = np.array(seen)
        assert np.all(seen[:, 0] >= 0.0) and np.all(seen[:, 0] <= 10.0)
        assert np.all(seen[:, 1] >= -5.0) and np.all(seen[:, 1] <= 5.0)

    def test_start_on_upper_bound(self):
        """Test the initial simplex is not degenerate when x0 sits on a bound."""
        result = minimize_simplex(quadratic, [2.0, 0.0], bounds=[(None, 2.0), (None, None)])
        assert result.params[0] == pytest.approx(2.0, abs=1e-3)
        assert result.params[1] == pytest.approx(-1.0, abs=1e-3)

    def test_start_on_negative_lower_bound(self):
        """Test a negative start on its lower bound still moves along that axis."""
        result = minimize_simplex(
            lambda x: (x[0] + 0.5) ** 2 + (x[1] - 1.0) ** 2,
            [-1.0, 0.0],
            bounds=[(-1.0, 1.0), (None, None)],
        )
        assert result.converged
        np.testing.assert_allclose(result.params, [-0.5, 1.0], atol=1e-3)

    def test_start_in_narrow_box(self):
        """Test bounds tighter than the initial step on both sides."""
        result = minimize_simplex(
            lambda x: (x[0] - 10.01) ** 2, [10.0], bounds=[(9.99, 10.02)]
        )
        assert result.params[0] == pytest.approx(10.01, abs=1e-3)

    def test_bounds_length_checked(self):
        """Test bounds must match the parameter count."""
        with pytest.raises(DimensionMismatch):
            minimize_simplex(quadratic, [0.0, 0.0], bounds=[(0.0, 1.0)])

    def test_inverted_bounds(self):
        """Test lower > upper is rejected."""
        with pytest.raises(ValueError):
            minimize_simplex(quadratic, [0.0, 0.0], bounds=[(1.0, 0.0), (None, None)])


class TestInfeasibleCandidates:
    """Test candidates rejected by the objective."""

    def test_invalid_parameter_steers_away(self):
        """Test InvalidParameter is scored as +inf rather than raised."""
        def objective(x):
            if x[0] < 0:
                raise InvalidParameter("negative")
            return (x[0] + 1.0) ** 2

        result = minimize_simplex(objective, [5.0])
        assert 0.0 <= result.params[0] < 0.05

    def test_non_finite_steers_away(self):
        """Test NonFiniteObjective and NaN returns are scored as +inf."""
        def objective(x):
            if x[0] > 4.0:
                raise NonFiniteObjective("overflow")
            if x[1] > 4.0:
                return np.nan
            return quadratic(x)

        result = minimize_simplex(objective, [0.0, 0.0])
        np.testing.assert_allclose(result.params, [3.0, -1.0], atol=1e-3)

    def test_structural_errors_propagate(self):
        """Test DimensionMismatch is surfaced, not absorbed."""
        def objective(x):
            raise DimensionMismatch("bad shape")

        with pytest.raises(DimensionMismatch):
            minimize_simplex(objective, [0.0])


class TestBudget:
    """Test iteration and evaluation budgets."""

    def test_iteration_budget(self):
        """Test exhausting iterations returns the best point, not converged."""
        with pytest.warns(ConvergenceWarning):
            result = minimize_simplex(rosenbrock, [-1.2, 1.0], max_iterations=5)
        assert not result.converged
        assert result.iterations == 5
        assert result.objective_value <= rosenbrock(np.array([-1.2, 1.0]))

    def test_evaluation_budget(self):
        """Test exhausting evaluations stops the run."""
        with pytest.warns(ConvergenceWarning):
            result = minimize_simplex(rosenbrock, [-1.2, 1.0], max_evaluations=20)
        assert not result.converged
        assert result.evaluation_count <= 20

    @pytest.mark.parametrize("budget", [3, 4, 5, 7, 11, 16])
    def test_evaluation_budget_never_exceeded(self, budget):
        """Test expansion, contraction and shrink steps respect the budget."""
        calls = []

        def objective(x):
            calls.append(1)
            return rosenbrock(x)

        with pytest.warns(ConvergenceWarning):
            result = minimize_simplex(objective, [-1.2, 1.0], max_evaluations=budget)
        assert len(calls) == result.evaluation_count
        assert result.evaluation_count <= budget

    def test_budget_below_initial_simplex(self):
        """Test a budget that cannot evaluate the initial simplex."""
        with pytest.raises(ValueError, match="initial simplex"):
            minimize_simplex(rosenbrock, [-1.2, 1.0], max_evaluations=2)

    def test_invalid_options(self):
        """Test options are validated."""
        with pytest.raises(ValueError):
            SimplexOptions(xtol=0.0)
        with pytest.raises(ValueError):
            SimplexOptions(max_iterations=0)

    def test_empty_start(self):
        """Test an empty starting vector is rejected."""
        with pytest.raises(DimensionMismatch):
            minimize_simplex(quadratic, [])


class TestFitResult:
    """Test result immutability."""

    def test_frozen(self):
        """Test result fields and params cannot be modified."""
        result = minimize_simplex(quadratic, [0.0, 0.0])
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.converged = False
        with pytest.raises(ValueError):
            result.params[0] = 0.0
        assert result.n_params == 2
        assert result.log_likelihood == -result.objective_value


class TestNormalFit:
    """Statistical regression test: Normal parameters are recovered."""

    @pytest.mark.parametrize("mu,sigma", [(0.0, 1.0), (5.0, 2.0), (-3.0, 0.5), (12.0, 4.0)])
    def test_recovers_parameters(self, mu, sigma):
        """Test fitted (mean, std) lie within 0.5 of the truth for N = 1000."""
        rng = np.random.default_rng(2024)
        y = Normal().sample([mu, sigma], 1000, rng)
        objective = LikelihoodObjective(Normal(), Observations(y))
        result = NelderMead().minimize(objective, [0.0, 1.0], bounds=Normal().bounds)
        assert result.converged
        assert abs(result.params[0] - mu) < 0.5
        assert abs(result.params[1] - sigma) < 0.5
        # Matches the closed-form MLE
        np.testing.assert_allclose(result.params, [y.mean(), y.std()], atol=1e-2)
