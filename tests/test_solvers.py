"""
Unit tests for 1-D solvers.
"""

import math
import pytest

from ratescurve.errors import BracketNotFoundError, RootNotBracketedError, SolverError
from ratescurve.solvers import Brent, FiniteDifferenceNewtonSafe, Bisection


def cos_minus_x(x):
    return math.cos(x) - x


COS_ROOT = 0.7390851332151607


class RecordingFunction:
    """Object exposing value(x) that records every probe."""

    def __init__(self, f):
        self.f = f
        self.probes = []

    def value(self, x):
        self.probes.append(x)
        return self.f(x)


class TestAutoBracketing:
    """Tests for solve(f, accuracy, guess, step)."""

    @pytest.mark.parametrize("solver_cls", [Brent, FiniteDifferenceNewtonSafe, Bisection])
    def test_finds_sqrt2(self, solver_cls):
        """Each refinement finds the root after bracketing."""
        root = solver_cls().solve(lambda x: x * x - 2.0, 1e-12, 1.0, 0.1)
        assert abs(root - math.sqrt(2.0)) < 1e-10

    def test_guess_within_accuracy_returns_guess(self):
        """No bracketing when the guess already solves."""
        solver = Brent()
        f = RecordingFunction(lambda x: x - 1.0)
        assert solver.solve(f, 1e-12, 1.0, 0.5) == 1.0
        assert solver.evaluation_number == 1
        assert f.probes == [1.0]

    def test_positive_value_steps_down(self):
        """f(guess) > 0 seeds the lower end of the bracket."""
        f = RecordingFunction(lambda x: x - 0.5)
        root = Brent().solve(f, 1e-12, 1.0, 0.25)
        assert f.probes[1] == pytest.approx(0.75)
        assert root == pytest.approx(0.5, abs=1e-10)

    def test_negative_value_steps_up(self):
        """f(guess) < 0 seeds the upper end of the bracket."""
        f = RecordingFunction(lambda x: x - 1.5)
        Brent().solve(f, 1e-12, 1.0, 0.25)
        assert f.probes[1] == pytest.approx(1.25)

    def test_ties_expand_lower_side_first(self):
        """When both ends have the same |f| the lower end moves first."""
        f = RecordingFunction(lambda x: (x - 0.5) ** 2 - 100.0)
        Brent().solve(f, 1e-12, 0.0, 1.0)
        assert f.probes[:3] == pytest.approx([0.0, 1.0, -1.6])

    def test_growth_factor_is_configurable(self):
        f = RecordingFunction(lambda x: (x - 0.5) ** 2 - 100.0)
        Brent(growth_factor=2.0).solve(f, 1e-12, 0.0, 1.0)
        assert f.probes[2] == pytest.approx(-2.0)

    def test_flatter_side_is_expanded(self):
        """The end with the smaller |f| is pushed outward."""
        f = RecordingFunction(lambda x: x - 10.0)
        Brent().solve(f, 1e-12, 0.0, 1.0)
        # f(0) = -10, f(1) = -9: the upper end moves
        assert f.probes[2] == pytest.approx(1.0 + 1.6 * 1.0)

    def test_bracket_exhaustion_raises(self):
        """No sign change within the budget is a fatal error."""
        solver = Brent()
        with pytest.raises(BracketNotFoundError) as exc_info:
            solver.solve(lambda x: x * x + 1.0, 1e-12, 0.0, 0.1)

        err = exc_info.value
        assert isinstance(err, SolverError)
        assert err.max_evaluations == 100
        assert err.bracket[0] < err.bracket[1]
        assert err.values[0] > 0 and err.values[1] > 0

    def test_evaluation_budget_is_configurable(self):
        solver = Brent()
        solver.set_max_evaluations(5)
        f = RecordingFunction(lambda x: x * x + 1.0)
        with pytest.raises(BracketNotFoundError):
            solver.solve(f, 1e-12, 0.0, 0.1)
        assert len(f.probes) <= 6

    def test_lower_bound_clamps_probes(self):
        """Probes never leave the enforced domain."""
        solver = Brent()
        solver.set_lower_bound(0.0)
        root = solver.solve(lambda x: math.sqrt(x) - 0.1, 1e-12, 4.0, 1.0)
        assert root == pytest.approx(0.01, abs=1e-10)

    def test_upper_bound_clamps_probes(self):
        solver = Brent()
        solver.set_upper_bound(1.0)
        f = RecordingFunction(lambda x: math.sqrt(1.0 - x) - 0.1)
        root = solver.solve(f, 1e-12, 0.0, 0.5)
        assert root == pytest.approx(0.99, abs=1e-10)
        assert max(f.probes) <= 1.0

    def test_non_positive_accuracy_rejected(self):
        with pytest.raises(ValueError):
            Brent().solve(cos_minus_x, 0.0, 0.5, 0.1)


class TestExplicitBracket:
    """Tests for solve_bracketed(f, accuracy, guess, x_min, x_max)."""

    @pytest.mark.parametrize("solver_cls", [Brent, FiniteDifferenceNewtonSafe, Bisection])
    def test_finds_root(self, solver_cls):
        root = solver_cls().solve_bracketed(cos_minus_x, 1e-12, 0.5, 0.0, 1.0)
        assert abs(root - COS_ROOT) < 1e-10

    def test_accepts_value_object(self):
        f = RecordingFunction(cos_minus_x)
        root = FiniteDifferenceNewtonSafe().solve_bracketed(f, 1e-12, 0.5, 0.0, 1.0)
        assert abs(root - COS_ROOT) < 1e-10
        assert f.probes[:2] == [0.0, 1.0]

    def test_same_sign_raises(self):
        with pytest.raises(RootNotBracketedError):
            Brent().solve_bracketed(lambda x: x * x + 1.0, 1e-12, 0.5, 0.0, 1.0)

    def test_invalid_range_raises(self):
        with pytest.raises(ValueError):
            Brent().solve_bracketed(cos_minus_x, 1e-12, 0.5, 1.0, 0.0)

    def test_guess_outside_range_raises(self):
        with pytest.raises(ValueError):
            Brent().solve_bracketed(cos_minus_x, 1e-12, 1.0, 0.0, 1.0)

    def test_range_outside_domain_raises(self):
        solver = Brent()
        solver.set_lower_bound(0.5)
        with pytest.raises(ValueError):
            solver.solve_bracketed(cos_minus_x, 1e-12, 0.6, 0.0, 1.0)

    def test_endpoint_root_short_circuits(self):
        """A root on a bracket end is returned without refinement."""
        solver = Brent()
        assert solver.solve_bracketed(lambda x: x, 1e-12, 0.5, 0.0, 1.0) == 0.0
        assert solver.evaluation_number == 1
        assert solver.solve_bracketed(lambda x: x - 1.0, 1e-12, 0.5, 0.0, 1.0) == 1.0
        assert solver.evaluation_number == 2

    def test_newton_budget_exceeded_raises(self):
        """Running out of evaluations inside the refinement is an error."""
        solver = FiniteDifferenceNewtonSafe(max_evaluations=3)
        with pytest.raises(SolverError):
            solver.solve_bracketed(cos_minus_x, 1e-15, 0.5, 0.0, 1.0)

    def test_newton_is_fast_from_a_close_guess(self):
        """Warm starts converge in a handful of evaluations."""
        solver = FiniteDifferenceNewtonSafe()
        solver.solve_bracketed(cos_minus_x, 1e-12, COS_ROOT + 1e-4, 0.7, 0.8)
        assert solver.evaluation_number < 15
