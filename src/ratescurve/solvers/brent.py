"""
Brent solver.

Refines a validated bracket with scipy's brentq (inverse quadratic
interpolation with bisection safeguards). Robust from any bracket, so
the bootstrap uses it whenever there is no previous curve to start from.
"""

import logging
from typing import Callable

from scipy.optimize import brentq

from ..errors import SolverError
from .solver1d import Solver1D

logger = logging.getLogger(__name__)


class Brent(Solver1D):
    """Brent's method on the bracket found or validated by Solver1D."""

    def _solve_impl(self, f: Callable[[float], float], accuracy: float) -> float:
        root, result = brentq(
            f,
            self._x_min,
            self._x_max,
            xtol=accuracy,
            maxiter=self._max_evaluations,
            full_output=True,
            disp=False,
        )
        self._evaluation_number += result.function_calls
        if not result.converged:
            raise SolverError(
                f"Brent failed to converge in {result.iterations} iterations "
                f"on [{self._x_min}, {self._x_max}] ({result.flag})"
            )
        self._root = float(root)
        logger.debug("Brent converged to %s in %s iterations", self._root, result.iterations)
        return self._root


__all__ = ["Brent"]
