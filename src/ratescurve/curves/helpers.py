"""
Bootstrap helpers: market instruments as curve-fitting constraints.

Defines the helpers used to build yield curves:
- DepositRateHelper: Money market deposits (simple rate)
- FraRateHelper: Forward rate agreements
- FuturesRateHelper: Interest rate futures (price quote, no convexity adjustment)
- OISRateHelper: Overnight index swaps (single-curve par rate)

Each helper knows:
1. Which dates it needs discounts on (earliest / latest relevant date)
2. Which curve node it determines (pillar date)
3. Its fair quote on the curve it is bound to (implied_quote)

A helper is bound to the curve being built through set_term_structure();
the bootstrap then moves curve nodes and reads quote_error() back.
"""

from abc import abstractmethod
from datetime import date
from enum import Enum
from typing import Optional, Union

from ..conventions import (
    BusinessDayConvention,
    Conventions,
    DayCount,
    adjust_business_day,
    year_fraction
)
from ..dates import DateUtils, ScheduleInfo, generate_accrual_schedule
from ..observer import Observable, Observer
from ..quotes import Quote, as_quote
from ..settings import EvaluationDate
from .curve import YieldTermStructure


class PillarChoice(Enum):
    """Which date a helper's curve node sits on."""
    MATURITY = "MaturityDate"
    LAST_RELEVANT = "LastRelevantDate"
    CUSTOM = "CustomDate"


class BootstrapHelper(Observable, Observer):
    """
    Abstract base for bootstrap helpers.

    Attributes:
        quote: Market quote (shared with the caller, not owned)
        earliest_date: First date a discount is needed on
        maturity_date: Instrument maturity
        latest_relevant_date: Last date a discount is needed on
        latest_date: max(maturity_date, latest_relevant_date)
        pillar_date: Date of the curve node this helper determines
    """

    def __init__(
        self,
        quote: Union[Quote, float],
        pillar: Optional[PillarChoice] = None,
        custom_pillar_date: Optional[date] = None
    ):
        Observable.__init__(self)
        self.quote = as_quote(quote)
        self.quote.register_observer(self)
        self.pillar = pillar
        self.custom_pillar_date = custom_pillar_date
        if pillar == PillarChoice.CUSTOM and custom_pillar_date is None:
            raise ValueError("a custom pillar requires custom_pillar_date")
        self._term_structure: Optional[YieldTermStructure] = None

        self.earliest_date: Optional[date] = None
        self.maturity_date: Optional[date] = None
        self.latest_relevant_date: Optional[date] = None
        self.latest_date: Optional[date] = None
        self.pillar_date: Optional[date] = None

    def _set_dates(self, earliest: date, maturity: date, latest_relevant: date) -> None:
        """Record the instrument dates and derive latest and pillar dates."""
        self.earliest_date = earliest
        self.maturity_date = maturity
        self.latest_relevant_date = latest_relevant
        self.latest_date = max(maturity, latest_relevant)

        if self.pillar == PillarChoice.MATURITY:
            self.pillar_date = maturity
        elif self.pillar == PillarChoice.LAST_RELEVANT:
            self.pillar_date = latest_relevant
        elif self.pillar == PillarChoice.CUSTOM:
            if not earliest < self.custom_pillar_date <= self.latest_date:
                raise ValueError(
                    f"custom pillar {self.custom_pillar_date} outside "
                    f"({earliest}, {self.latest_date}]"
                )
            self.pillar_date = self.custom_pillar_date
        else:
            self.pillar_date = self.latest_date

    def update(self) -> None:
        self.notify_observers()

    def quote_is_valid(self) -> bool:
        return self.quote.is_valid()

    def set_term_structure(self, term_structure: YieldTermStructure) -> None:
        """Bind the helper to the curve it is priced on."""
        if term_structure is None:
            raise ValueError("null term structure given")
        self._term_structure = term_structure

    @property
    def term_structure(self) -> YieldTermStructure:
        if self._term_structure is None:
            raise RuntimeError(f"{type(self).__name__} is not bound to a term structure")
        return self._term_structure

    @abstractmethod
    def implied_quote(self) -> float:
        """Fair quote on the bound curve."""

    def quote_error(self) -> float:
        """Observed quote minus implied quote."""
        return self.quote.value() - self.implied_quote()

    def __repr__(self) -> str:
        value = self.quote.value() if self.quote.is_valid() else None
        return f"{type(self).__name__}(quote={value}, pillar={self.pillar_date})"


class RelativeDateBootstrapHelper(BootstrapHelper):
    """
    Helper whose dates are derived from the evaluation date.

    Moving the evaluation date re-derives the dates before observers are
    notified.
    """

    def __init__(
        self,
        quote: Union[Quote, float],
        evaluation_date: Optional[EvaluationDate] = None,
        pillar: Optional[PillarChoice] = None,
        custom_pillar_date: Optional[date] = None
    ):
        super().__init__(quote, pillar, custom_pillar_date)
        self.evaluation_date = evaluation_date or EvaluationDate()
        self.evaluation_date.register_observer(self)
        self._dates_for = self.evaluation_date.value

    def update(self) -> None:
        if self.evaluation_date.value != self._dates_for:
            self._dates_for = self.evaluation_date.value
            self.initialize_dates()
        super().update()

    @abstractmethod
    def initialize_dates(self) -> None:
        """Derive all dates from the current evaluation date."""


class DepositRateHelper(RelativeDateBootstrapHelper):
    """
    Money market deposit.

    Simple interest from the start date to maturity:
    R = (P(start) / P(maturity) - 1) / tau

    Dates come either from a tenor (spot start, rolled with the evaluation
    date) or are given explicitly with start_date and end_date.
    """

    def __init__(
        self,
        quote: Union[Quote, float],
        tenor: Optional[str] = None,
        evaluation_date: Optional[EvaluationDate] = None,
        conventions: Optional[Conventions] = None,
        holidays: Optional[set] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        pillar: Optional[PillarChoice] = None,
        custom_pillar_date: Optional[date] = None
    ):
        if tenor is None and (start_date is None or end_date is None):
            raise ValueError("a deposit needs a tenor or explicit start and end dates")
        if start_date is not None and end_date is not None and not start_date < end_date:
            raise ValueError(f"start date {start_date} must precede end date {end_date}")
        super().__init__(quote, evaluation_date, pillar, custom_pillar_date)
        self.tenor = tenor
        self.conventions = conventions or Conventions.usd_deposit()
        self.holidays = holidays
        self._fixed_start = start_date
        self._fixed_end = end_date
        self.initialize_dates()

    @property
    def day_count(self) -> DayCount:
        return self.conventions.day_count

    def initialize_dates(self) -> None:
        if self._fixed_start is not None and self._fixed_end is not None:
            start, end = self._fixed_start, self._fixed_end
        else:
            start = DateUtils.spot_date(
                self.evaluation_date.value, self.conventions.settlement_days, self.holidays
            )
            end = adjust_business_day(
                DateUtils.add_tenor(start, self.tenor, self.holidays),
                self.conventions.business_day,
                self.holidays
            )
        self.start_date = start
        self._set_dates(start, end, end)

    def implied_quote(self) -> float:
        ts = self.term_structure
        tau = year_fraction(self.start_date, self.maturity_date, self.day_count)
        return (ts.discount(self.start_date) / ts.discount(self.maturity_date) - 1.0) / tau


class FraRateHelper(RelativeDateBootstrapHelper):
    """
    Forward Rate Agreement, quoted as "MxN" months from spot.

    FRA rate: F = (P(T1) / P(T2) - 1) / tau
    """

    def __init__(
        self,
        quote: Union[Quote, float],
        months_to_start: int,
        months_to_end: int,
        evaluation_date: Optional[EvaluationDate] = None,
        conventions: Optional[Conventions] = None,
        holidays: Optional[set] = None,
        pillar: Optional[PillarChoice] = None,
        custom_pillar_date: Optional[date] = None
    ):
        if not 0 <= months_to_start < months_to_end:
            raise ValueError(
                f"invalid FRA period {months_to_start}x{months_to_end}"
            )
        super().__init__(quote, evaluation_date, pillar, custom_pillar_date)
        self.months_to_start = months_to_start
        self.months_to_end = months_to_end
        self.conventions = conventions or Conventions.usd_deposit()
        self.holidays = holidays
        self.initialize_dates()

    def initialize_dates(self) -> None:
        spot = DateUtils.spot_date(
            self.evaluation_date.value, self.conventions.settlement_days, self.holidays
        )
        convention = self.conventions.business_day
        self.start_date = adjust_business_day(
            DateUtils.add_months(spot, self.months_to_start), convention, self.holidays
        )
        end = adjust_business_day(DateUtils.add_months(spot, self.months_to_end), convention, self.holidays)
        self._set_dates(self.start_date, end, end)

    def implied_quote(self) -> float:
        ts = self.term_structure
        tau = year_fraction(self.start_date, self.maturity_date, self.conventions.day_count)
        return (ts.discount(self.start_date) / ts.discount(self.maturity_date) - 1.0) / tau


class FuturesRateHelper(BootstrapHelper):
    """
    Interest rate future (e.g., SOFR 3M future).

    Quote is a price, 100 * (1 - rate). The rate is the simple forward
    over the contract period.

    Assumptions (simplified):
    - Ignores convexity adjustment
    - Treats futures rate as forward rate
    """

    def __init__(
        self,
        price: Union[Quote, float],
        start_date: date,
        length_months: int = 3,
        day_count: DayCount = DayCount.ACT_360,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        holidays: Optional[set] = None,
        pillar: Optional[PillarChoice] = None,
        custom_pillar_date: Optional[date] = None
    ):
        if length_months <= 0:
            raise ValueError(f"length_months ({length_months}) must be positive")
        super().__init__(price, pillar, custom_pillar_date)
        self.start_date = start_date
        self.day_count = day_count
        end = adjust_business_day(DateUtils.add_months(start_date, length_months), convention, holidays)
        self._set_dates(start_date, end, end)

    def implied_rate(self) -> float:
        """Convert the observed price to a rate."""
        return (100.0 - self.quote.value()) / 100.0

    def implied_quote(self) -> float:
        ts = self.term_structure
        tau = year_fraction(self.start_date, self.maturity_date, self.day_count)
        forward = (ts.discount(self.start_date) / ts.discount(self.maturity_date) - 1.0) / tau
        return 100.0 * (1.0 - forward)


class OISRateHelper(RelativeDateBootstrapHelper):
    """
    Overnight Index Swap, single-curve.

    The compounded overnight leg is worth P(start) - P(end), so the par
    rate is
    R = (P(start) - P(Tn)) / sum(delta_i * P(Ti))
    """

    def __init__(
        self,
        quote: Union[Quote, float],
        tenor: str,
        evaluation_date: Optional[EvaluationDate] = None,
        conventions: Optional[Conventions] = None,
        holidays: Optional[set] = None,
        pillar: Optional[PillarChoice] = None,
        custom_pillar_date: Optional[date] = None
    ):
        super().__init__(quote, evaluation_date, pillar, custom_pillar_date)
        self.tenor = tenor
        self.conventions = conventions or Conventions.usd_ois()
        self.holidays = holidays
        self.schedule: Optional[ScheduleInfo] = None
        self.initialize_dates()

    def initialize_dates(self) -> None:
        self.start_date = DateUtils.spot_date(
            self.evaluation_date.value, self.conventions.settlement_days, self.holidays
        )
        maturity = DateUtils.add_tenor(self.start_date, self.tenor, self.holidays)
        self.schedule = generate_accrual_schedule(
            self.start_date,
            maturity,
            self.conventions.payment_frequency,
            self.conventions.day_count,
            self.conventions.business_day,
            self.holidays
        )
        last_payment = self.schedule.payment_dates[-1]
        self._set_dates(self.start_date, last_payment, last_payment)

    def annuity(self) -> float:
        """Fixed-leg PV01 per unit rate: sum(delta_i * P(Ti))."""
        ts = self.term_structure
        return sum(
            yf * ts.discount(pmt)
            for pmt, yf in zip(self.schedule.payment_dates, self.schedule.year_fractions)
        )

    def implied_quote(self) -> float:
        ts = self.term_structure
        floating = ts.discount(self.start_date) - ts.discount(self.schedule.payment_dates[-1])
        return floating / self.annuity()


__all__ = [
    "PillarChoice",
    "BootstrapHelper",
    "RelativeDateBootstrapHelper",
    "DepositRateHelper",
    "FraRateHelper",
    "FuturesRateHelper",
    "OISRateHelper",
]
