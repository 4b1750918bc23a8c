"""
Yield term structure base.

The YieldTermStructure class provides:
- Discount factor P(0,t)
- Zero rate z(t) under several compounding conventions
- Forward rate f(t1, t2)
- Instantaneous forward rate f(t)

Times are year fractions from the reference date. The reference date is
either fixed or, for a moving curve, derived from an EvaluationDate plus
settlement days; moving the evaluation date notifies observers.
"""

from datetime import date
from typing import Optional, Union

import numpy as np

from ..conventions import CompoundingConvention, DayCount, year_fraction
from ..dates import DateUtils
from ..observer import Observable
from ..settings import EvaluationDate

# time step for zero rates at t=0 and for instantaneous forwards
DT = 1.0e-4

TimeLike = Union[float, date]


class YieldTermStructure(Observable):
    """
    Interest rate term structure.

    Subclasses implement discount_impl(t).

    Attributes:
        day_count: Day count for the time axis
        settlement_days: Business days from evaluation date to reference date (moving curves)
        evaluation_date: Source of "today" for moving curves
        holidays: Optional holiday set for the spot date

    Conventions:
        - Times are year fractions from the reference date
        - Zero rates default to continuous compounding
        - Discount factor at t=0 is 1.0
    """

    def __init__(
        self,
        reference_date: Optional[date] = None,
        day_count: DayCount = DayCount.ACT_365,
        settlement_days: Optional[int] = None,
        evaluation_date: Optional[EvaluationDate] = None,
        holidays: Optional[set] = None
    ):
        super().__init__()
        if reference_date is None and settlement_days is None:
            raise ValueError("either a reference date or settlement days must be given")
        if reference_date is not None and settlement_days is not None:
            raise ValueError("a fixed reference date and settlement days are exclusive")

        self.day_count = day_count
        self.settlement_days = settlement_days
        self.holidays = holidays
        self._reference_date = reference_date
        self.evaluation_date = evaluation_date
        if settlement_days is not None and self.evaluation_date is None:
            self.evaluation_date = EvaluationDate()

    @property
    def moving(self) -> bool:
        """True if the reference date follows the evaluation date."""
        return self._reference_date is None

    @property
    def reference_date(self) -> date:
        if self._reference_date is not None:
            return self._reference_date
        return DateUtils.spot_date(self.evaluation_date.value, self.settlement_days, self.holidays)

    @property
    def max_date(self) -> date:
        """Latest date the curve is built for."""
        raise NotImplementedError

    def time_from_reference(self, d: date) -> float:
        return year_fraction(self.reference_date, d, self.day_count)

    def _to_time(self, t: TimeLike) -> float:
        if isinstance(t, date):
            return self.time_from_reference(t)
        return float(t)

    def discount_impl(self, t: float) -> float:
        raise NotImplementedError

    def discount(self, t: TimeLike) -> float:
        """
        Get discount factor P(0,t).

        Args:
            t: Year fraction or date

        Returns:
            Discount factor
        """
        t = self._to_time(t)
        if t < 0:
            raise ValueError(f"negative time ({t}) given")
        return self.discount_impl(t)

    def zero_rate(
        self,
        t: TimeLike,
        compounding: CompoundingConvention = CompoundingConvention.CONTINUOUS
    ) -> float:
        """
        Get zero rate z(t).

        Args:
            t: Year fraction or date
            compounding: Compounding convention for output

        Returns:
            Zero rate (default continuously compounded)
        """
        t = self._to_time(t)
        if t == 0.0:
            t = DT
        df = self.discount(t)
        return _rate_from_discount(df, t, compounding)

    def forward_rate(
        self,
        t1: TimeLike,
        t2: TimeLike,
        compounding: CompoundingConvention = CompoundingConvention.SIMPLE
    ) -> float:
        """
        Get forward rate f(t1, t2).

        Args:
            t1: Start time (year fraction or date)
            t2: End time (year fraction or date)
            compounding: Compounding convention

        Returns:
            Forward rate between t1 and t2
        """
        t1 = self._to_time(t1)
        t2 = self._to_time(t2)

        if t2 <= t1:
            raise ValueError("t2 must be greater than t1")

        return _rate_from_discount(self.discount(t2) / self.discount(t1), t2 - t1, compounding)

    def instantaneous_forward(self, t: TimeLike) -> float:
        """
        Get instantaneous forward rate f(t) = -d/dt [log P(0,t)].

        Args:
            t: Year fraction or date

        Returns:
            Instantaneous forward rate (continuous compounding)
        """
        t = self._to_time(t)
        t1 = max(t - DT / 2.0, 0.0)
        t2 = t1 + DT
        return float(np.log(self.discount(t1) / self.discount(t2)) / DT)


def _rate_from_discount(df: float, t: float, compounding: CompoundingConvention) -> float:
    """Rate implied by a discount factor over t years."""
    if compounding == CompoundingConvention.CONTINUOUS:
        return float(-np.log(df) / t)
    elif compounding == CompoundingConvention.SIMPLE:
        return float((1.0 / df - 1.0) / t)
    elif compounding == CompoundingConvention.ANNUAL:
        return float(df ** (-1.0 / t) - 1.0)
    elif compounding == CompoundingConvention.SEMI_ANNUAL:
        return float(2.0 * (df ** (-1.0 / (2.0 * t)) - 1.0))
    elif compounding == CompoundingConvention.QUARTERLY:
        return float(4.0 * (df ** (-1.0 / (4.0 * t)) - 1.0))
    raise ValueError(f"Unknown compounding: {compounding}")


__all__ = [
    "YieldTermStructure",
]
