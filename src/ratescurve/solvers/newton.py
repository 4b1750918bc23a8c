"""
Safe Newton solver with a finite-difference slope.

Takes Newton steps using the secant slope through the last two points and
falls back to bisection whenever a step would leave the bracket or would
not halve the previous step. Fast when started close to the root, which
is why the bootstrap uses it to re-fit from a previous curve.
"""

import logging
from typing import Callable

from ..errors import SolverError
from .solver1d import Solver1D

logger = logging.getLogger(__name__)


class FiniteDifferenceNewtonSafe(Solver1D):
    """Derivative-free safeguarded Newton iteration."""

    def _solve_impl(self, f: Callable[[float], float], accuracy: float) -> float:
        # orient the search so that f(xl) < 0
        if self._fx_min < 0.0:
            xl, xh = self._x_min, self._x_max
        else:
            xl, xh = self._x_max, self._x_min

        froot = f(self._root)
        self._evaluation_number += 1

        # first-order slope from the bracket end closest to the guess
        if self._x_max - self._root < self._root - self._x_min:
            dfroot = (self._fx_max - froot) / (self._x_max - self._root)
        else:
            dfroot = (self._fx_min - froot) / (self._x_min - self._root)

        dx = self._x_max - self._x_min
        while self._evaluation_number <= self._max_evaluations:
            froot_old = froot
            root_old = self._root
            dx_old = dx

            out_of_range = ((self._root - xh) * dfroot - froot) * ((self._root - xl) * dfroot - froot) > 0.0
            too_slow = abs(2.0 * froot) > abs(dx_old * dfroot)
            if out_of_range or too_slow:
                dx = (xh - xl) / 2.0
                self._root = xl + dx
            else:
                dx = froot / dfroot
                self._root -= dx

            if abs(dx) < accuracy:
                logger.debug(
                    "Newton converged to %s after %s evaluations",
                    self._root, self._evaluation_number
                )
                return self._root

            froot = f(self._root)
            self._evaluation_number += 1
            if froot == 0.0:
                return self._root
            dfroot = (froot_old - froot) / (root_old - self._root)

            if froot < 0.0:
                xl = self._root
            else:
                xh = self._root

        raise SolverError(
            f"maximum number of function evaluations ({self._max_evaluations}) exceeded"
        )


__all__ = ["FiniteDifferenceNewtonSafe"]
