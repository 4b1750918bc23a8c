"""
Curves package - piecewise yield curve bootstrapping.

Provides:
- PiecewiseYieldCurve: Curve fitted to a set of bootstrap helpers
- IterativeBootstrap: Node-by-node fit with a convergence loop
- LocalBootstrap: Windowed least-squares fit for spline curves
- Discount, ZeroYield, ForwardRate: What the curve nodes hold
- Deposit, FRA, futures and OIS helpers
"""

from .curve import YieldTermStructure
from .interpolation import (
    Interpolation,
    Interpolator,
    LinearInterpolator,
    LogLinearInterpolator,
    BackwardFlatInterpolator,
    CubicSplineInterpolator,
    create_interpolator
)
from .traits import BootstrapTraits, Discount, ZeroYield, ForwardRate
from .helpers import (
    PillarChoice,
    BootstrapHelper,
    RelativeDateBootstrapHelper,
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    OISRateHelper
)
from .bootstrap import (
    BootstrapErrorFunction,
    FitOutcome,
    IterativeBootstrap,
    repricing_report,
    bootstrap_from_quotes
)
from .local_bootstrap import PenaltyFunction, LocalBootstrap
from .piecewise import PiecewiseYieldCurve

__all__ = [
    "YieldTermStructure",
    "Interpolation",
    "Interpolator",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "BackwardFlatInterpolator",
    "CubicSplineInterpolator",
    "create_interpolator",
    "BootstrapTraits",
    "Discount",
    "ZeroYield",
    "ForwardRate",
    "PillarChoice",
    "BootstrapHelper",
    "RelativeDateBootstrapHelper",
    "DepositRateHelper",
    "FraRateHelper",
    "FuturesRateHelper",
    "OISRateHelper",
    "BootstrapErrorFunction",
    "FitOutcome",
    "IterativeBootstrap",
    "repricing_report",
    "bootstrap_from_quotes",
    "PenaltyFunction",
    "LocalBootstrap",
    "PiecewiseYieldCurve",
]
