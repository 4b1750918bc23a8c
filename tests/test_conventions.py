"""
Unit tests for day counts and business day rules.
"""

from datetime import date
import pytest

from ratescurve.conventions import (
    BusinessDayConvention,
    Conventions,
    DayCount,
    adjust_business_day,
    is_business_day,
    year_fraction,
)


class TestYearFraction:
    """Tests for the day count conventions."""

    def test_act_360_and_act_365(self):
        start, end = date(2024, 1, 15), date(2024, 7, 15)
        assert year_fraction(start, end, DayCount.ACT_360) == pytest.approx(182 / 360)
        assert year_fraction(start, end, DayCount.ACT_365) == pytest.approx(182 / 365)

    def test_act_act_splits_across_years(self):
        result = year_fraction(date(2023, 7, 1), date(2024, 7, 1), DayCount.ACT_ACT)
        assert result == pytest.approx(184 / 365 + 182 / 366)

    def test_act_act_within_leap_year(self):
        result = year_fraction(date(2024, 1, 1), date(2024, 12, 31), DayCount.ACT_ACT)
        assert result == pytest.approx(365 / 366)

    def test_thirty_360_month_ends(self):
        assert year_fraction(
            date(2024, 1, 31), date(2024, 3, 31), DayCount.THIRTY_360
        ) == pytest.approx(60 / 360)
        assert year_fraction(
            date(2024, 1, 15), date(2025, 1, 15), DayCount.THIRTY_360
        ) == pytest.approx(1.0)

    @pytest.mark.parametrize("day_count", list(DayCount))
    def test_fraction_is_signed(self, day_count):
        a, b = date(2024, 2, 10), date(2025, 5, 20)
        assert year_fraction(b, a, day_count) == pytest.approx(-year_fraction(a, b, day_count))
        assert year_fraction(a, a, day_count) == 0.0

    @pytest.mark.parametrize("name,expected", [
        ("ACT/360", DayCount.ACT_360),
        ("act365f", DayCount.ACT_365),
        ("Act/Act", DayCount.ACT_ACT),
        ("30/360", DayCount.THIRTY_360),
    ])
    def test_from_string(self, name, expected):
        assert DayCount.from_string(name) is expected

    def test_from_string_unknown(self):
        with pytest.raises(ValueError):
            DayCount.from_string("BUS/252")


class TestBusinessDays:
    """Tests for calendar adjustment."""

    def test_weekends_and_holidays(self):
        assert is_business_day(date(2024, 1, 12))
        assert not is_business_day(date(2024, 1, 13))
        assert not is_business_day(date(2024, 1, 15), {date(2024, 1, 15)})

    def test_following_skips_holiday(self):
        saturday = date(2024, 1, 13)
        assert adjust_business_day(saturday, BusinessDayConvention.FOLLOWING) == date(2024, 1, 15)
        assert adjust_business_day(
            saturday, BusinessDayConvention.FOLLOWING, {date(2024, 1, 15)}
        ) == date(2024, 1, 16)

    def test_preceding(self):
        assert adjust_business_day(
            date(2024, 1, 14), BusinessDayConvention.PRECEDING
        ) == date(2024, 1, 12)

    def test_modified_following_stays_in_month(self):
        """30 March 2024 is a Saturday; the next business day is in April."""
        mf = BusinessDayConvention.MODIFIED_FOLLOWING
        assert adjust_business_day(date(2024, 3, 30), mf) == date(2024, 3, 29)
        assert adjust_business_day(date(2024, 1, 13), mf) == date(2024, 1, 15)

    def test_unadjusted_and_business_days_pass_through(self):
        saturday = date(2024, 1, 13)
        assert adjust_business_day(saturday, BusinessDayConvention.UNADJUSTED) == saturday
        for convention in BusinessDayConvention:
            assert adjust_business_day(date(2024, 1, 16), convention) == date(2024, 1, 16)


class TestConventionPresets:

    def test_ois(self):
        conv = Conventions.usd_ois()
        assert conv.day_count == DayCount.ACT_360
        assert conv.payment_frequency == 1
        assert conv.settlement_days == 2

    def test_deposit_pays_once(self):
        conv = Conventions.usd_deposit()
        assert conv.payment_frequency == 0
        assert conv.business_day == BusinessDayConvention.MODIFIED_FOLLOWING
