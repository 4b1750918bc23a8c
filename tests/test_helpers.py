"""
Unit tests for bootstrap helpers.
"""

from datetime import date, timedelta
import numpy as np
import pytest

from ratescurve.curves import (
    YieldTermStructure,
    PillarChoice,
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    OISRateHelper,
)
from ratescurve.observer import Observer
from ratescurve.quotes import SimpleQuote
from ratescurve.settings import EvaluationDate

RATE = 0.04


class FlatCurve(YieldTermStructure):
    """Continuously compounded flat curve."""

    def __init__(self, rate, **kwargs):
        super().__init__(**kwargs)
        self.rate = rate

    def discount_impl(self, t):
        return float(np.exp(-self.rate * t))


class Recorder(Observer):

    def __init__(self):
        self.count = 0

    def update(self):
        self.count += 1


@pytest.fixture
def today():
    """Friday 12 January 2024."""
    return EvaluationDate(date(2024, 1, 12))


class TestDepositRateHelper:
    """Tests for deposits."""

    def test_fixed_dates(self):
        start = date(2024, 1, 15)
        helper = DepositRateHelper(0.05, start_date=start, end_date=start + timedelta(days=91))
        assert helper.earliest_date == start
        assert helper.maturity_date == date(2024, 4, 15)
        assert helper.pillar_date == helper.latest_date == date(2024, 4, 15)

    def test_implied_quote(self):
        start = date(2024, 1, 15)
        helper = DepositRateHelper(0.05, start_date=start, end_date=start + timedelta(days=91))
        helper.set_term_structure(FlatCurve(RATE, reference_date=start))

        expected = (np.exp(RATE * 91 / 365) - 1.0) / (91 / 360)
        assert helper.implied_quote() == pytest.approx(expected)
        assert helper.quote_error() == pytest.approx(0.05 - expected)

    def test_tenor_dates_roll_with_evaluation_date(self, today):
        helper = DepositRateHelper(0.05, "3M", evaluation_date=today)
        assert helper.start_date == date(2024, 1, 16)
        assert helper.maturity_date == date(2024, 4, 16)

        recorder = Recorder()
        helper.register_observer(recorder)
        today.set(date(2024, 1, 15))

        assert helper.start_date == date(2024, 1, 17)
        assert helper.maturity_date == date(2024, 4, 17)
        assert recorder.count == 1

    def test_needs_tenor_or_dates(self):
        with pytest.raises(ValueError):
            DepositRateHelper(0.05, start_date=date(2024, 1, 15))

    def test_start_must_precede_end(self):
        d = date(2024, 1, 15)
        with pytest.raises(ValueError):
            DepositRateHelper(0.05, start_date=d, end_date=d)

    def test_unbound_helper(self):
        d = date(2024, 1, 15)
        helper = DepositRateHelper(0.05, start_date=d, end_date=d + timedelta(days=30))
        with pytest.raises(RuntimeError):
            helper.implied_quote()

    def test_quote_change_notifies(self):
        d = date(2024, 1, 15)
        quote = SimpleQuote(0.05)
        helper = DepositRateHelper(quote, start_date=d, end_date=d + timedelta(days=30))
        recorder = Recorder()
        helper.register_observer(recorder)

        quote.set_value(0.051)
        assert recorder.count == 1
        assert helper.quote is quote


class TestPillarChoice:
    """Tests for pillar placement."""

    def test_custom_pillar(self):
        d = date(2024, 1, 15)
        helper = DepositRateHelper(
            0.05, start_date=d, end_date=d + timedelta(days=90),
            pillar=PillarChoice.CUSTOM, custom_pillar_date=d + timedelta(days=60)
        )
        assert helper.pillar_date == d + timedelta(days=60)
        assert helper.latest_relevant_date == d + timedelta(days=90)

    def test_custom_pillar_outside_range(self):
        d = date(2024, 1, 15)
        with pytest.raises(ValueError):
            DepositRateHelper(
                0.05, start_date=d, end_date=d + timedelta(days=90),
                pillar=PillarChoice.CUSTOM, custom_pillar_date=d + timedelta(days=100)
            )

    def test_custom_pillar_needs_date(self):
        d = date(2024, 1, 15)
        with pytest.raises(ValueError):
            DepositRateHelper(
                0.05, start_date=d, end_date=d + timedelta(days=90), pillar=PillarChoice.CUSTOM
            )

    def test_maturity_pillar(self):
        d = date(2024, 1, 15)
        helper = DepositRateHelper(
            0.05, start_date=d, end_date=d + timedelta(days=90), pillar=PillarChoice.MATURITY
        )
        assert helper.pillar_date == helper.maturity_date


class TestFraRateHelper:

    def test_dates(self, today):
        helper = FraRateHelper(0.05, 3, 6, evaluation_date=today)
        assert helper.start_date == date(2024, 4, 16)
        assert helper.maturity_date == date(2024, 7, 16)

    def test_implied_quote_is_forward(self, today):
        helper = FraRateHelper(0.05, 3, 6, evaluation_date=today)
        curve = FlatCurve(RATE, reference_date=date(2024, 1, 16))
        helper.set_term_structure(curve)

        t1 = curve.time_from_reference(helper.start_date)
        t2 = curve.time_from_reference(helper.maturity_date)
        tau = (helper.maturity_date - helper.start_date).days / 360
        assert helper.implied_quote() == pytest.approx((np.exp(RATE * (t2 - t1)) - 1.0) / tau)

    def test_invalid_period(self, today):
        with pytest.raises(ValueError):
            FraRateHelper(0.05, 6, 3, evaluation_date=today)


class TestFuturesRateHelper:

    def test_dates_and_rate(self):
        helper = FuturesRateHelper(95.0, date(2024, 3, 20))
        assert helper.maturity_date == date(2024, 6, 20)
        assert helper.implied_rate() == pytest.approx(0.05)

    def test_implied_quote_is_price(self):
        helper = FuturesRateHelper(95.0, date(2024, 3, 20))
        curve = FlatCurve(RATE, reference_date=date(2024, 1, 15))
        helper.set_term_structure(curve)

        days = (date(2024, 6, 20) - date(2024, 3, 20)).days
        forward = (np.exp(RATE * days / 365) - 1.0) / (days / 360)
        assert helper.implied_quote() == pytest.approx(100.0 * (1.0 - forward))

    def test_invalid_length(self):
        with pytest.raises(ValueError):
            FuturesRateHelper(95.0, date(2024, 3, 20), length_months=0)


class TestOISRateHelper:
    """Tests for OIS par rates."""

    def test_schedule(self, today):
        helper = OISRateHelper(0.04, "2Y", evaluation_date=today)
        assert helper.start_date == date(2024, 1, 16)
        assert helper.schedule.payment_dates == [date(2025, 1, 16), date(2026, 1, 16)]
        assert helper.pillar_date == date(2026, 1, 16)

    def test_implied_par_rate(self, today):
        helper = OISRateHelper(0.04, "2Y", evaluation_date=today)
        helper.set_term_structure(FlatCurve(RATE, reference_date=date(2024, 1, 16)))

        t1, t2 = 366 / 365, 731 / 365
        annuity = 366 / 360 * np.exp(-RATE * t1) + 365 / 360 * np.exp(-RATE * t2)
        expected = (1.0 - np.exp(-RATE * t2)) / annuity

        assert helper.annuity() == pytest.approx(annuity)
        assert helper.implied_quote() == pytest.approx(expected)

    def test_dates_roll(self, today):
        helper = OISRateHelper(0.04, "1Y", evaluation_date=today)
        today.advance(7)
        helper_fresh = OISRateHelper(0.04, "1Y", evaluation_date=EvaluationDate(today.value))
        assert helper.maturity_date == helper_fresh.maturity_date
