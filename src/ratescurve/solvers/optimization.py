"""
Multi-dimensional optimization for the local bootstrap.

Provides:
- EndCriteria / EndCriteriaType: Budgets and termination reasons
- Constraint: NoConstraint, PositiveConstraint, BoundaryConstraint
- CostFunction: Scalar cost plus the residual vector it is built from
- Problem: Cost function + constraint + current point
- LevenbergMarquardt: Least-squares minimizer on scipy.optimize.least_squares

The minimizer reports why it stopped instead of raising; callers decide
which termination types count as success.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.optimize import least_squares

from .solver1d import EPSILON

logger = logging.getLogger(__name__)


class EndCriteriaType(Enum):
    """Reason an optimization stopped."""
    NONE = "None"
    MAX_ITERATIONS = "MaxIterations"
    STATIONARY_POINT = "StationaryPoint"
    STATIONARY_FUNCTION_VALUE = "StationaryFunctionValue"
    STATIONARY_FUNCTION_ACCURACY = "StationaryFunctionAccuracy"
    ZERO_GRADIENT_NORM = "ZeroGradientNorm"
    UNKNOWN = "Unknown"

    @property
    def is_function_stationary(self) -> bool:
        """True for a genuine function-stationarity result."""
        return self in (
            EndCriteriaType.STATIONARY_FUNCTION_VALUE,
            EndCriteriaType.STATIONARY_FUNCTION_ACCURACY,
        )


@dataclass
class EndCriteria:
    """
    Optimization budgets and tolerances.

    Attributes:
        max_iterations: Iteration budget
        max_stationary_state_iterations: Iterations allowed without progress
        root_epsilon: Tolerance on the change of the unknowns
        function_epsilon: Tolerance on the cost (and on its change)
        gradient_norm_epsilon: Tolerance on the gradient norm
    """
    max_iterations: int = 100
    max_stationary_state_iterations: Optional[int] = 10
    root_epsilon: float = 1.0e-8
    function_epsilon: float = 1.0e-8
    gradient_norm_epsilon: float = 1.0e-8

    def __post_init__(self):
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations ({self.max_iterations}) must be at least 1")


class Constraint(ABC):
    """Feasible region for the unknowns."""

    @abstractmethod
    def test(self, x: np.ndarray) -> bool:
        """True if x is feasible."""

    @abstractmethod
    def bounds(self, size: int) -> Tuple[np.ndarray, np.ndarray]:
        """Lower and upper bound vectors for a problem of the given size."""


class NoConstraint(Constraint):
    """Every point is feasible."""

    def test(self, x: np.ndarray) -> bool:
        return True

    def bounds(self, size: int) -> Tuple[np.ndarray, np.ndarray]:
        return np.full(size, -np.inf), np.full(size, np.inf)


class PositiveConstraint(Constraint):
    """All unknowns must be strictly positive."""

    def test(self, x: np.ndarray) -> bool:
        return bool(np.all(np.asarray(x) > 0.0))

    def bounds(self, size: int) -> Tuple[np.ndarray, np.ndarray]:
        return np.zeros(size), np.full(size, np.inf)


class BoundaryConstraint(Constraint):
    """All unknowns must lie in [low, high]."""

    def __init__(self, low: float, high: float):
        if not low < high:
            raise ValueError(f"invalid boundary: low ({low}) >= high ({high})")
        self.low = low
        self.high = high

    def test(self, x: np.ndarray) -> bool:
        x = np.asarray(x)
        return bool(np.all((x >= self.low) & (x <= self.high)))

    def bounds(self, size: int) -> Tuple[np.ndarray, np.ndarray]:
        return np.full(size, self.low), np.full(size, self.high)


class CostFunction(ABC):
    """
    Cost built from a residual vector.

    values(x) returns the residuals; value(x) defaults to the sum of
    their absolute values.
    """

    @abstractmethod
    def values(self, x: np.ndarray) -> np.ndarray:
        pass

    def value(self, x: np.ndarray) -> float:
        return float(np.sum(np.abs(self.values(x))))


class Problem:
    """
    Optimization problem: cost function, constraint and current point.

    Attributes:
        cost_function: The CostFunction to minimize
        constraint: Feasible region
        current_value: Current point (updated by the optimizer)
        function_value: Cost at current_value after minimize()
        function_evaluations: Number of residual evaluations so far
    """

    def __init__(
        self,
        cost_function: CostFunction,
        constraint: Constraint,
        initial_value: Sequence[float]
    ):
        self.cost_function = cost_function
        self.constraint = constraint
        self.current_value = np.array(initial_value, dtype=np.float64)
        self.function_value: Optional[float] = None
        self.function_evaluations = 0

    def values(self, x: np.ndarray) -> np.ndarray:
        self.function_evaluations += 1
        return np.asarray(self.cost_function.values(x), dtype=np.float64)

    def value(self, x: np.ndarray) -> float:
        self.function_evaluations += 1
        return self.cost_function.value(x)


class LevenbergMarquardt:
    """
    Least-squares minimizer.

    Unconstrained problems run MINPACK's Levenberg-Marquardt ("lm");
    bounded ones (e.g. PositiveConstraint) run the trust-region
    reflective method ("trf"), which is the bounded variant scipy offers.

    Attributes:
        epsfcn: Relative step for the finite-difference Jacobian
        xtol: Tolerance on the change of the unknowns
        gtol: Tolerance on the gradient
    """

    def __init__(self, epsfcn: float = 1.0e-8, xtol: float = 1.0e-8, gtol: float = 1.0e-8):
        self.epsfcn = epsfcn
        self.xtol = xtol
        self.gtol = gtol

    def minimize(self, problem: Problem, end_criteria: EndCriteria) -> EndCriteriaType:
        """
        Minimize the problem's cost starting from its current value.

        On return the problem holds the final point and its cost, and
        the cost function has been evaluated last at that point.

        Returns:
            The termination type
        """
        x0 = problem.current_value.copy()
        n = x0.size
        lower, upper = problem.constraint.bounds(n)
        bounded = bool(np.any(np.isfinite(lower)) or np.any(np.isfinite(upper)))
        if bounded:
            x0 = np.clip(x0, lower, upper)

        m = problem.values(x0).size
        method = "lm" if not bounded and m >= n else "trf"
        max_nfev = end_criteria.max_iterations * (n + 1 if method == "lm" else 1)

        result = least_squares(
            problem.values,
            x0,
            method=method,
            bounds=(lower, upper) if bounded else (-np.inf, np.inf),
            ftol=max(end_criteria.function_epsilon, EPSILON),
            xtol=max(min(self.xtol, end_criteria.root_epsilon), EPSILON),
            gtol=max(min(self.gtol, end_criteria.gradient_norm_epsilon), EPSILON),
            diff_step=self.epsfcn ** 0.5,
            max_nfev=max_nfev,
        )

        problem.current_value = np.asarray(result.x, dtype=np.float64)
        problem.function_value = problem.value(problem.current_value)

        end_type = self._end_type(result.status, problem.function_value, end_criteria)
        logger.debug(
            "%s stopped with %s (status %s) after %s evaluations, cost %.3e",
            method, end_type.value, result.status, result.nfev, problem.function_value
        )
        return end_type

    @staticmethod
    def _end_type(status: int, function_value: float, end_criteria: EndCriteria) -> EndCriteriaType:
        # cost functions here are non-negative, so a small enough cost is final
        if function_value <= end_criteria.function_epsilon:
            return EndCriteriaType.STATIONARY_FUNCTION_ACCURACY
        if status == 0:
            return EndCriteriaType.MAX_ITERATIONS
        if status not in (1, 2, 3, 4):
            return EndCriteriaType.UNKNOWN
        # a converged run only counts as a fit when the residuals are gone;
        # otherwise it is stuck, e.g. against a constraint
        if function_value <= np.sqrt(end_criteria.function_epsilon):
            return EndCriteriaType.STATIONARY_FUNCTION_VALUE
        if status == 1:
            return EndCriteriaType.ZERO_GRADIENT_NORM
        return EndCriteriaType.STATIONARY_POINT


__all__ = [
    "EndCriteriaType",
    "EndCriteria",
    "Constraint",
    "NoConstraint",
    "PositiveConstraint",
    "BoundaryConstraint",
    "CostFunction",
    "Problem",
    "LevenbergMarquardt",
]
