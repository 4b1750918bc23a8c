"""
Exception taxonomy for curve construction.

Provides:
- CurveError: Base class for every curve construction failure
- CurveConfigurationError: Bad setup (too few instruments, window too large)
- CurveOrderingError: Duplicate pillars, non-extending instruments, invalid quotes
- SolverError: 1-D root solver failures (bracketing, evaluation budget)
- BootstrapFailure: Terminal fit failure with diagnostic context
- ConvergenceError: Convergence loop ran out of iterations
"""

from datetime import date
from typing import Optional


class CurveError(RuntimeError):
    """Base class for curve construction errors."""


class CurveConfigurationError(CurveError, ValueError):
    """Raised at setup when the curve cannot be bootstrapped as configured."""


class CurveOrderingError(CurveError, ValueError):
    """Raised before solving when the instrument set is inconsistent."""


class SolverError(CurveError):
    """Raised when a 1-D solver fails to find a root."""


class BracketNotFoundError(SolverError):
    """Raised when auto-bracketing exhausts its evaluation budget."""

    def __init__(
        self,
        max_evaluations: int,
        x_min: float,
        x_max: float,
        fx_min: float,
        fx_max: float
    ):
        self.max_evaluations = max_evaluations
        self.bracket = (x_min, x_max)
        self.values = (fx_min, fx_max)
        super().__init__(
            f"unable to bracket root in {max_evaluations} function evaluations "
            f"(last bracket attempt: f[{x_min}, {x_max}] -> [{fx_min}, {fx_max}])"
        )


class RootNotBracketedError(SolverError, ValueError):
    """Raised when an explicit bracket does not contain a sign change."""


class BootstrapFailure(CurveError):
    """
    Terminal bootstrap failure.

    Attributes:
        iteration: 1-based convergence-loop iteration (if known)
        pillar_index: Index of the node being solved (if known)
        pillar_date: Pillar date of the failing helper
        maturity_date: Maturity date of the failing helper
        reference_date: Curve anchor at the time of failure
    """

    def __init__(
        self,
        message: str,
        iteration: Optional[int] = None,
        pillar_index: Optional[int] = None,
        pillar_date: Optional[date] = None,
        maturity_date: Optional[date] = None,
        reference_date: Optional[date] = None
    ):
        super().__init__(message)
        self.iteration = iteration
        self.pillar_index = pillar_index
        self.pillar_date = pillar_date
        self.maturity_date = maturity_date
        self.reference_date = reference_date


class ConvergenceError(BootstrapFailure):
    """Raised when the convergence loop exhausts its iteration budget."""

    def __init__(self, iterations: int, achieved: float, required: float):
        super().__init__(
            f"convergence not reached after {iterations} iterations; "
            f"last improvement {achieved:.3e}, required accuracy {required:.3e}",
            iteration=iterations
        )
        self.achieved = achieved
        self.required = required


__all__ = [
    "CurveError",
    "CurveConfigurationError",
    "CurveOrderingError",
    "SolverError",
    "BracketNotFoundError",
    "RootNotBracketedError",
    "BootstrapFailure",
    "ConvergenceError",
]
