"""
Market conventions used by curves and helpers.

Day counts turn a pair of dates into an accrual or time fraction:
- ACT/360: money market deposits, FRAs, futures, OIS fixed legs
- ACT/365: default time axis of a curve
- ACT/ACT: ISDA split across calendar years
- 30/360: US bond basis

Business day rules move a date off weekends and holidays. The calendar is
weekends plus an optional set of holiday dates.

The curve time axis is year_fraction(reference_date, d, day_count); it is
signed, so dates before the reference date map to negative times.
"""

import calendar
from dataclasses import dataclass, replace
from datetime import date, timedelta
from enum import Enum
from typing import Optional


class DayCount(Enum):
    """Day count convention."""
    ACT_360 = "ACT/360"
    ACT_365 = "ACT/365"
    ACT_ACT = "ACT/ACT"
    THIRTY_360 = "30/360"

    @classmethod
    def from_string(cls, s: str) -> "DayCount":
        """Parse names such as "ACT/360", "act365f" or "30/360"."""
        key = s.upper().replace(" ", "").replace("/", "")
        if key.endswith("F"):
            key = key[:-1]
        for member in cls:
            if member.value.replace("/", "") == key:
                return member
        raise ValueError(f"Unknown day count convention: {s}")


class BusinessDayConvention(Enum):
    """Rule for moving a date that falls on a non-business day."""
    MODIFIED_FOLLOWING = "ModifiedFollowing"
    FOLLOWING = "Following"
    PRECEDING = "Preceding"
    UNADJUSTED = "Unadjusted"


class CompoundingConvention(Enum):
    """How a rate quoted on a curve compounds."""
    CONTINUOUS = "Continuous"
    ANNUAL = "Annual"
    SEMI_ANNUAL = "SemiAnnual"
    QUARTERLY = "Quarterly"
    SIMPLE = "Simple"


@dataclass
class Conventions:
    """
    Conventions shared by a family of helpers.

    Attributes:
        day_count: Accrual day count
        business_day: Adjustment rule for schedule and maturity dates
        payment_frequency: Fixed payments per year (0 for a single payment)
        settlement_days: Business days from evaluation date to spot
    """
    day_count: DayCount = DayCount.ACT_360
    business_day: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING
    payment_frequency: int = 1
    settlement_days: int = 2

    @classmethod
    def usd_ois(cls) -> "Conventions":
        """SOFR OIS: annual ACT/360 fixed leg, T+2."""
        return cls()

    @classmethod
    def usd_deposit(cls) -> "Conventions":
        """Money market deposit: ACT/360, paid at maturity, T+2."""
        return replace(cls(), payment_frequency=0)


def _days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def year_fraction(start: date, end: date, day_count: DayCount) -> float:
    """
    Signed year fraction from start to end.

    Args:
        start: Start date
        end: End date
        day_count: Day count convention

    Returns:
        Year fraction, negative when end precedes start
    """
    if end < start:
        return -year_fraction(end, start, day_count)

    days = (end - start).days
    if day_count == DayCount.ACT_360:
        return days / 360.0
    if day_count == DayCount.ACT_365:
        return days / 365.0
    if day_count == DayCount.ACT_ACT:
        fraction = 0.0
        cursor = start
        while cursor.year < end.year:
            next_year = date(cursor.year + 1, 1, 1)
            fraction += (next_year - cursor).days / _days_in_year(cursor.year)
            cursor = next_year
        return fraction + (end - cursor).days / _days_in_year(end.year)
    if day_count == DayCount.THIRTY_360:
        d1 = min(start.day, 30)
        d2 = end.day if d1 < 30 else min(end.day, 30)
        months = 12 * (end.year - start.year) + end.month - start.month
        return (30 * months + d2 - d1) / 360.0

    raise ValueError(f"Unknown day count: {day_count}")


def is_business_day(d: date, holidays: Optional[set] = None) -> bool:
    """True unless d is a Saturday, a Sunday or in holidays."""
    return d.weekday() < 5 and not (holidays and d in holidays)


def _roll(d: date, step: int, holidays: Optional[set]) -> date:
    while not is_business_day(d, holidays):
        d += timedelta(days=step)
    return d


def adjust_business_day(
    d: date,
    convention: BusinessDayConvention,
    holidays: Optional[set] = None
) -> date:
    """
    Move d to a business day.

    Modified following rolls forward unless that crosses into the next
    month, in which case it rolls back instead.

    Args:
        d: Date to adjust
        convention: Adjustment rule
        holidays: Optional set of holiday dates

    Returns:
        Adjusted date
    """
    if convention == BusinessDayConvention.UNADJUSTED:
        return d
    if convention == BusinessDayConvention.PRECEDING:
        return _roll(d, -1, holidays)

    adjusted = _roll(d, 1, holidays)
    if convention == BusinessDayConvention.MODIFIED_FOLLOWING and adjusted.month != d.month:
        return _roll(d, -1, holidays)
    return adjusted


__all__ = [
    "DayCount",
    "BusinessDayConvention",
    "CompoundingConvention",
    "Conventions",
    "year_fraction",
    "is_business_day",
    "adjust_business_day",
]
