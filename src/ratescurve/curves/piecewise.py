"""
Piecewise yield curve: the curve a bootstrap builds.

The curve owns node arrays (dates, times, data) indexed 0..N where node 0
is the anchor, an interpolation over (a prefix of) those arrays, and the
helpers it must reprice. What the node values mean comes from its traits
(discount factors, zero rates or forwards); how the nodes are solved for
comes from its bootstrap.

The curve is lazy: quotes and the evaluation date notify it, and it
re-bootstraps on the next query.
"""

import logging
from datetime import date
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config import BootstrapConfig
from ..conventions import DayCount
from ..observer import LazyObject
from ..settings import EvaluationDate
from .curve import YieldTermStructure
from .helpers import BootstrapHelper
from .interpolation import Interpolation, Interpolator, LogLinearInterpolator
from .traits import BootstrapTraits, Discount

logger = logging.getLogger(__name__)


class PiecewiseYieldCurve(LazyObject, YieldTermStructure):
    """
    Yield curve bootstrapped from helpers.

    Attributes:
        helpers: Helpers to reprice (sorted by the bootstrap)
        traits: Node meaning (Discount, ZeroYield, ForwardRate)
        interpolator: Interpolation factory
        interpolation: Current interpolation over the node arrays
        dates: Node dates, dates[0] is the anchor
        times: Node times (year fractions from the reference date)
        data: Node values
        accuracy: Node accuracy required from the solvers
        valid_curve: True when the nodes hold a reusable solution
        config: Bootstrap tuning constants

    Example:
        >>> curve = PiecewiseYieldCurve(helpers, reference_date=date(2024, 1, 15))
        >>> curve.discount(date(2025, 1, 15))
    """

    def __init__(
        self,
        helpers: Sequence[BootstrapHelper],
        traits: Optional[BootstrapTraits] = None,
        interpolator: Optional[Interpolator] = None,
        reference_date: Optional[date] = None,
        day_count: DayCount = DayCount.ACT_365,
        settlement_days: Optional[int] = None,
        evaluation_date: Optional[EvaluationDate] = None,
        holidays: Optional[set] = None,
        accuracy: Optional[float] = None,
        max_iterations: Optional[int] = None,
        bootstrap=None,
        config: Optional[BootstrapConfig] = None
    ):
        YieldTermStructure.__init__(
            self, reference_date, day_count, settlement_days, evaluation_date, holidays
        )
        LazyObject.__init__(self)

        self.config = config or BootstrapConfig.default()
        self.traits = traits or Discount()
        self.interpolator = interpolator or LogLinearInterpolator()
        self.accuracy = accuracy if accuracy is not None else self.config.accuracy
        if self.accuracy <= 0:
            raise ValueError(f"accuracy ({self.accuracy}) must be positive")
        self._max_iterations = max_iterations or self.config.max_iterations

        self.dates: List[date] = []
        self.times = np.zeros(0)
        self.data = np.zeros(0)
        self.interpolation: Optional[Interpolation] = None
        self.valid_curve = False
        self.helpers: List[BootstrapHelper] = []

        if bootstrap is None:
            from .bootstrap import IterativeBootstrap
            bootstrap = IterativeBootstrap(self.config)
        self.bootstrap = bootstrap

        if self.moving:
            self.evaluation_date.register_observer(self)

        self.set_helpers(helpers)

    def set_helpers(self, helpers: Sequence[BootstrapHelper]) -> None:
        """
        Replace the instrument set.

        Discards any previous solution and sets the bootstrap up again.
        """
        for helper in self.helpers:
            helper.unregister_observer(self)
        self.helpers = list(helpers)
        self.valid_curve = False
        self.bootstrap.setup(self)
        logger.debug("%r set up with %s helpers", self, len(self.helpers))
        self._calculated = False
        self.notify_observers()

    @property
    def max_iterations(self) -> int:
        """Convergence-loop budget (traits default unless overridden)."""
        return self._max_iterations or self.traits.max_iterations()

    def initial_date(self) -> date:
        return self.traits.initial_date(self)

    def initial_value(self) -> float:
        return self.traits.initial_value(self)

    def perform_calculations(self) -> None:
        self.bootstrap.calculate()

    def discount_impl(self, t: float) -> float:
        self.calculate()
        return self.traits.discount_impl(self.interpolation, t)

    @property
    def max_date(self) -> date:
        self.calculate()
        return self.dates[-1]

    def nodes(self) -> List[Tuple[date, float]]:
        """
        Get all curve nodes.

        Returns:
            List of (date, node value) tuples, anchor first
        """
        self.calculate()
        return [(d, float(v)) for d, v in zip(self.dates, self.data)]

    def __repr__(self) -> str:
        return (f"PiecewiseYieldCurve(reference={self.reference_date}, "
                f"traits={type(self.traits).__name__}, interpolator={self.interpolator!r}, "
                f"helpers={len(self.helpers)})")


__all__ = [
    "PiecewiseYieldCurve",
]
