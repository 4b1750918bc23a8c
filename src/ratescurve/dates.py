"""
Date arithmetic for curve helpers.

Provides:
- Tenor parsing ("2D", "1W", "3M", "10Y") and tenor arithmetic
- Spot date derivation from an evaluation date
- Accrual schedules for swap-style helpers, rolled back from maturity
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Tuple

from .conventions import (
    BusinessDayConvention,
    DayCount,
    adjust_business_day,
    is_business_day,
    year_fraction
)

_TENOR = re.compile(r"^(\d+)([DWMY])$")


def _add_months(start: date, months: int) -> date:
    """Calendar month arithmetic; the day is clipped to the month end."""
    year, month0 = divmod(start.month - 1 + months, 12)
    year += start.year
    day = min(start.day, calendar.monthrange(year, month0 + 1)[1])
    return date(year, month0 + 1, day)


class DateUtils:
    """Tenor and settlement arithmetic."""

    @staticmethod
    def parse_tenor(tenor: str) -> Tuple[int, str]:
        """
        Split a tenor into (amount, unit).

        Raises:
            ValueError: If the tenor is not a number followed by D, W, M or Y
        """
        match = _TENOR.match(tenor.strip().upper())
        if match is None:
            raise ValueError(f"Invalid tenor format: {tenor}. Expected format like '3M', '2Y'")
        return int(match.group(1)), match.group(2)

    @staticmethod
    def add_tenor(start: date, tenor: str, holidays: Optional[set] = None) -> date:
        """
        Move a date by a tenor.

        Day tenors count business days. Week, month and year tenors are
        calendar arithmetic and the result is left unadjusted.
        """
        amount, unit = DateUtils.parse_tenor(tenor)
        if unit == "D":
            return DateUtils.advance_business_days(start, amount, holidays)
        if unit == "W":
            return start + timedelta(weeks=amount)
        return _add_months(start, amount if unit == "M" else 12 * amount)

    @staticmethod
    def add_months(start: date, months: int) -> date:
        """Add calendar months, clipping the day to the month end."""
        return _add_months(start, months)

    @staticmethod
    def advance_business_days(start: date, days: int, holidays: Optional[set] = None) -> date:
        result = start
        while days > 0:
            result += timedelta(days=1)
            if is_business_day(result, holidays):
                days -= 1
        return result

    @staticmethod
    def spot_date(
        evaluation_date: date,
        settlement_days: int,
        holidays: Optional[set] = None
    ) -> date:
        """
        Settlement date for an evaluation date.

        A non-business evaluation date first rolls forward to the next
        business day.
        """
        today = adjust_business_day(evaluation_date, BusinessDayConvention.FOLLOWING, holidays)
        return DateUtils.advance_business_days(today, settlement_days, holidays)

    @staticmethod
    def generate_schedule(
        start: date,
        end: date,
        frequency: int,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        holidays: Optional[set] = None
    ) -> List[date]:
        """
        Adjusted payment dates after start, rolled back from end.

        A short stub, if any, is the first period.

        Args:
            start: Accrual start
            end: Unadjusted maturity
            frequency: Payments per year, a divisor of 12
            convention: Business day adjustment
            holidays: Holiday calendar

        Returns:
            Payment dates in increasing order, the last one being end (adjusted)
        """
        if frequency <= 0 or 12 % frequency != 0:
            raise ValueError(f"Unsupported frequency: {frequency}")
        step = 12 // frequency

        unadjusted = []
        k = 0
        while True:
            d = _add_months(end, -step * k)
            if k > 0 and d <= start:
                break
            unadjusted.append(d)
            k += 1
        return [adjust_business_day(d, convention, holidays) for d in reversed(unadjusted)]


@dataclass
class ScheduleInfo:
    """Payment dates with their accrual periods."""
    payment_dates: List[date]
    accrual_starts: List[date]
    accrual_ends: List[date]
    year_fractions: List[float]
    day_count: DayCount


def generate_accrual_schedule(
    effective: date,
    maturity: date,
    frequency: int,
    day_count: DayCount,
    convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
    holidays: Optional[set] = None
) -> ScheduleInfo:
    """
    Fixed-leg schedule whose periods chain from the effective date.

    Args:
        effective: Accrual start of the first period
        maturity: Unadjusted end of the last period
        frequency: Payments per year
        day_count: Accrual day count
        convention: Business day adjustment for payment dates
        holidays: Holiday calendar

    Returns:
        ScheduleInfo
    """
    payments = [
        d for d in DateUtils.generate_schedule(effective, maturity, frequency, convention, holidays)
        if d > effective
    ]
    if not payments:
        payments = [adjust_business_day(maturity, convention, holidays)]

    starts = [effective] + payments[:-1]
    return ScheduleInfo(
        payment_dates=payments,
        accrual_starts=starts,
        accrual_ends=list(payments),
        year_fractions=[year_fraction(s, e, day_count) for s, e in zip(starts, payments)],
        day_count=day_count
    )


__all__ = [
    "DateUtils",
    "ScheduleInfo",
    "generate_accrual_schedule",
]
