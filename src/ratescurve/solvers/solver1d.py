"""
One-dimensional root solving.

Solver1D does the bookkeeping shared by every 1-D solver: it validates or
searches for a bracket [x_min, x_max] with a sign change and seeds a first
guess, then hands over to solve_impl() for the refinement. By the time
solve_impl() runs, the base class guarantees that:
- _x_min < _x_max form a valid bracket
- _fx_min and _fx_max hold the function values at the bracket ends
- _root holds a starting point inside the bracket

The target can be a plain callable or any object with a value(x) method.
"""

import logging
import sys
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from ..errors import BracketNotFoundError, RootNotBracketedError

logger = logging.getLogger(__name__)

EPSILON = sys.float_info.epsilon
MAX_FUNCTION_EVALUATIONS = 100
GROWTH_FACTOR = 1.6


def as_function(f: Any) -> Callable[[float], float]:
    """Return a float -> float callable for a callable or a value(x) object."""
    value = getattr(f, "value", None)
    if callable(value):
        return value
    if callable(f):
        return f
    raise TypeError(f"{type(f).__name__} is neither callable nor exposes value(x)")


class Solver1D(ABC):
    """
    Base class for 1-D solvers.

    Attributes:
        max_evaluations: Function evaluation budget (default 100)
        growth_factor: Bracket expansion factor for solve() (default 1.6)
    """

    def __init__(
        self,
        max_evaluations: int = MAX_FUNCTION_EVALUATIONS,
        growth_factor: float = GROWTH_FACTOR
    ):
        self._max_evaluations = max_evaluations
        self._growth_factor = growth_factor
        self._lower_bound: Optional[float] = None
        self._upper_bound: Optional[float] = None
        self._root = 0.0
        self._x_min = 0.0
        self._x_max = 0.0
        self._fx_min = 0.0
        self._fx_max = 0.0
        self._evaluation_number = 0

    @property
    def max_evaluations(self) -> int:
        return self._max_evaluations

    @property
    def growth_factor(self) -> float:
        return self._growth_factor

    @property
    def evaluation_number(self) -> int:
        """Function evaluations used by the last solve."""
        return self._evaluation_number

    def set_max_evaluations(self, evaluations: int) -> None:
        self._max_evaluations = evaluations

    def set_lower_bound(self, lower_bound: float) -> None:
        """Restrict the function domain from below."""
        self._lower_bound = lower_bound

    def set_upper_bound(self, upper_bound: float) -> None:
        """Restrict the function domain from above."""
        self._upper_bound = upper_bound

    def solve(self, f: Any, accuracy: float, guess: float, step: float) -> float:
        """
        Find a zero of f, bracketing it first.

        Starting at guess, one bracket end is seeded a step away (below
        the guess when f(guess) > 0, above otherwise). The end with the
        smaller |f| is then pushed outward by growth_factor until a sign
        change is found; when both ends tie, the sides alternate.

        Args:
            f: Callable or object with value(x)
            accuracy: Required accuracy (meaning depends on the solver)
            guess: Starting point
            step: Initial bracketing step

        Returns:
            The root

        Raises:
            ValueError: If accuracy is not positive
            BracketNotFoundError: If no sign change is found within max_evaluations
        """
        func = as_function(f)
        accuracy = self._check_accuracy(accuracy)
        flipflop = -1

        self._root = guess
        self._fx_max = func(self._root)
        self._evaluation_number = 1

        if abs(self._fx_max) <= accuracy:
            return self._root

        # monotonically increasing bias, as for an option value in volatility
        if self._fx_max > 0.0:
            self._x_min = self._enforce_bounds(self._root - step)
            self._fx_min = func(self._x_min)
            self._x_max = self._root
        else:
            self._x_min = self._root
            self._fx_min = self._fx_max
            self._x_max = self._enforce_bounds(self._root + step)
            self._fx_max = func(self._x_max)
        self._evaluation_number += 1

        while self._evaluation_number <= self._max_evaluations:
            if self._fx_min * self._fx_max <= 0.0:
                logger.debug(
                    "Bracket [%s, %s] found after %s evaluations",
                    self._x_min, self._x_max, self._evaluation_number
                )
                if abs(self._fx_min) <= accuracy:
                    return self._x_min
                if abs(self._fx_max) <= accuracy:
                    return self._x_max
                self._root = (self._x_max + self._x_min) / 2.0
                return self._solve_impl(func, accuracy)

            if abs(self._fx_min) < abs(self._fx_max):
                expand_lower = True
            elif abs(self._fx_min) > abs(self._fx_max):
                expand_lower = False
            else:
                expand_lower = flipflop == -1
                flipflop = -flipflop

            if expand_lower:
                self._x_min = self._enforce_bounds(
                    self._x_min + self._growth_factor * (self._x_min - self._x_max)
                )
                self._fx_min = func(self._x_min)
            else:
                self._x_max = self._enforce_bounds(
                    self._x_max + self._growth_factor * (self._x_max - self._x_min)
                )
                self._fx_max = func(self._x_max)
            self._evaluation_number += 1

        logger.debug("Bracketing failed after %s evaluations", self._max_evaluations)
        raise BracketNotFoundError(
            self._max_evaluations, self._x_min, self._x_max, self._fx_min, self._fx_max
        )

    def solve_bracketed(
        self,
        f: Any,
        accuracy: float,
        guess: float,
        x_min: float,
        x_max: float
    ) -> float:
        """
        Find a zero of f inside a given bracket.

        Args:
            f: Callable or object with value(x)
            accuracy: Required accuracy (meaning depends on the solver)
            guess: Starting point, strictly inside (x_min, x_max)
            x_min: Lower end of the bracket
            x_max: Upper end of the bracket

        Returns:
            The root

        Raises:
            ValueError: On an invalid range, a range outside the enforced
                domain, or a guess outside the bracket
            RootNotBracketedError: If f(x_min) and f(x_max) have the same sign
        """
        func = as_function(f)
        accuracy = self._check_accuracy(accuracy)

        if not x_min < x_max:
            raise ValueError(f"invalid range: x_min ({x_min}) >= x_max ({x_max})")
        if self._lower_bound is not None and x_min < self._lower_bound:
            raise ValueError(f"x_min ({x_min}) < enforced low bound ({self._lower_bound})")
        if self._upper_bound is not None and x_max > self._upper_bound:
            raise ValueError(f"x_max ({x_max}) > enforced hi bound ({self._upper_bound})")
        if not x_min < guess < x_max:
            raise ValueError(f"guess ({guess}) outside the open range ({x_min}, {x_max})")

        self._x_min = x_min
        self._x_max = x_max

        self._fx_min = func(self._x_min)
        self._evaluation_number = 1
        if abs(self._fx_min) <= accuracy:
            return self._x_min

        self._fx_max = func(self._x_max)
        self._evaluation_number = 2
        if abs(self._fx_max) <= accuracy:
            return self._x_max

        if not self._fx_min * self._fx_max < 0.0:
            raise RootNotBracketedError(
                f"root not bracketed: f[{self._x_min}, {self._x_max}] -> "
                f"[{self._fx_min}, {self._fx_max}]"
            )

        self._root = guess
        return self._solve_impl(func, accuracy)

    @abstractmethod
    def _solve_impl(self, f: Callable[[float], float], accuracy: float) -> float:
        """Refine the validated bracket down to the required accuracy."""

    @staticmethod
    def _check_accuracy(accuracy: float) -> float:
        if accuracy <= 0.0:
            raise ValueError(f"accuracy ({accuracy}) must be positive")
        return max(accuracy, EPSILON)

    def _enforce_bounds(self, x: float) -> float:
        if self._lower_bound is not None and x < self._lower_bound:
            return self._lower_bound
        if self._upper_bound is not None and x > self._upper_bound:
            return self._upper_bound
        return x


__all__ = [
    "Solver1D",
    "as_function",
    "EPSILON",
    "MAX_FUNCTION_EVALUATIONS",
    "GROWTH_FACTOR",
]
