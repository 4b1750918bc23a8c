"""
RatesCurve: Piecewise yield curve bootstrapping

A modular library for:
- Fitting discount, zero-rate and forward curves that reprice market quotes
- Iterative (node-by-node) and localised (windowed) bootstrap algorithms
- 1-D root solvers with automatic bracketing and a least-squares optimizer
- Lazy recalculation when quotes or the evaluation date change

Scope: single-curve construction; instrument pricing is kept minimal.
"""

__version__ = "0.1.0"

# Core modules
from .config import BootstrapConfig
from .conventions import DayCount, BusinessDayConvention, CompoundingConvention, Conventions, year_fraction
from .dates import DateUtils, ScheduleInfo
from .errors import (
    CurveError,
    CurveConfigurationError,
    CurveOrderingError,
    SolverError,
    BracketNotFoundError,
    RootNotBracketedError,
    BootstrapFailure,
    ConvergenceError,
)
from .quotes import Quote, SimpleQuote
from .settings import EvaluationDate

# Solvers
from .solvers import (
    Solver1D,
    Brent,
    FiniteDifferenceNewtonSafe,
    Bisection,
    LevenbergMarquardt,
)

# Curves
from .curves import (
    PiecewiseYieldCurve,
    IterativeBootstrap,
    LocalBootstrap,
    Discount,
    ZeroYield,
    ForwardRate,
    LinearInterpolator,
    LogLinearInterpolator,
    BackwardFlatInterpolator,
    CubicSplineInterpolator,
    PillarChoice,
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    OISRateHelper,
    repricing_report,
    bootstrap_from_quotes,
)

__all__ = [
    # Version
    "__version__",
    # Config
    "BootstrapConfig",
    "EvaluationDate",
    # Conventions
    "DayCount",
    "BusinessDayConvention",
    "CompoundingConvention",
    "Conventions",
    "year_fraction",
    # Dates
    "DateUtils",
    "ScheduleInfo",
    # Errors
    "CurveError",
    "CurveConfigurationError",
    "CurveOrderingError",
    "SolverError",
    "BracketNotFoundError",
    "RootNotBracketedError",
    "BootstrapFailure",
    "ConvergenceError",
    # Quotes
    "Quote",
    "SimpleQuote",
    # Solvers
    "Solver1D",
    "Brent",
    "FiniteDifferenceNewtonSafe",
    "Bisection",
    "LevenbergMarquardt",
    # Curves
    "PiecewiseYieldCurve",
    "IterativeBootstrap",
    "LocalBootstrap",
    "Discount",
    "ZeroYield",
    "ForwardRate",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "BackwardFlatInterpolator",
    "CubicSplineInterpolator",
    "PillarChoice",
    "DepositRateHelper",
    "FraRateHelper",
    "FuturesRateHelper",
    "OISRateHelper",
    "repricing_report",
    "bootstrap_from_quotes",
]
