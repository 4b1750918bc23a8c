"""
Solvers package - root finding and optimization used by the bootstraps.

Provides:
- Solver1D: Bracketing base class for 1-D solvers
- Brent, FiniteDifferenceNewtonSafe, Bisection: Concrete 1-D solvers
- LevenbergMarquardt: Least-squares minimizer for the local bootstrap
"""

from .solver1d import Solver1D, as_function
from .brent import Brent
from .newton import FiniteDifferenceNewtonSafe
from .bisection import Bisection
from .optimization import (
    EndCriteria,
    EndCriteriaType,
    Constraint,
    NoConstraint,
    PositiveConstraint,
    BoundaryConstraint,
    CostFunction,
    Problem,
    LevenbergMarquardt,
)

__all__ = [
    "Solver1D",
    "as_function",
    "Brent",
    "FiniteDifferenceNewtonSafe",
    "Bisection",
    "EndCriteria",
    "EndCriteriaType",
    "Constraint",
    "NoConstraint",
    "PositiveConstraint",
    "BoundaryConstraint",
    "CostFunction",
    "Problem",
    "LevenbergMarquardt",
]
