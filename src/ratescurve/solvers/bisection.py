"""
Bisection solver.

Halves the bracket until it is narrower than the accuracy. Slow but
predictable; useful as a reference refinement.
"""

from typing import Callable

from ..errors import SolverError
from .solver1d import Solver1D


class Bisection(Solver1D):
    """Plain bisection on the bracket found or validated by Solver1D."""

    def _solve_impl(self, f: Callable[[float], float], accuracy: float) -> float:
        # orient the search so that f > 0 lies at root + dx
        if self._fx_min < 0.0:
            dx = self._x_max - self._x_min
            self._root = self._x_min
        else:
            dx = self._x_min - self._x_max
            self._root = self._x_max

        while self._evaluation_number <= self._max_evaluations:
            dx /= 2.0
            x_mid = self._root + dx
            f_mid = f(x_mid)
            self._evaluation_number += 1
            if f_mid <= 0.0:
                self._root = x_mid
            if abs(dx) < accuracy or f_mid == 0.0:
                return self._root

        raise SolverError(
            f"maximum number of function evaluations ({self._max_evaluations}) exceeded"
        )


__all__ = ["Bisection"]
