"""
Unit tests for the local (windowed) bootstrap.
"""

from datetime import date, timedelta
import numpy as np
import pytest

from ratescurve.config import BootstrapConfig
from ratescurve.errors import BootstrapFailure, CurveConfigurationError, CurveOrderingError
from ratescurve.curves import (
    PiecewiseYieldCurve,
    LocalBootstrap,
    PenaltyFunction,
    Discount,
    ZeroYield,
    LogLinearInterpolator,
    CubicSplineInterpolator,
    DepositRateHelper,
)
from ratescurve.curves.interpolation import LocalCubicSplineInterpolation
from ratescurve.quotes import SimpleQuote

T = date(2024, 1, 15)

TERMS = (30, 90, 180, 270, 365)
RATES = (0.010, 0.012, 0.015, 0.017, 0.018)


def deposits(rates=RATES, terms=TERMS):
    return [
        DepositRateHelper(r, start_date=T, end_date=T + timedelta(days=d))
        for r, d in zip(rates, terms)
    ]


def spline_curve(helpers, traits=None, **kwargs):
    return PiecewiseYieldCurve(
        helpers,
        traits or Discount(),
        CubicSplineInterpolator(),
        reference_date=T,
        bootstrap=LocalBootstrap(**kwargs),
    )


def max_quote_error(curve):
    curve.calculate()
    return max(abs(h.quote_error()) for h in curve.helpers)


class TestLocalBootstrap:
    """Fits with a windowed spline."""

    def test_reprices_all_helpers(self):
        curve = spline_curve(deposits())
        assert max_quote_error(curve) < 1e-8
        assert curve.valid_curve

    def test_nodes_at_maturities(self):
        curve = spline_curve(deposits())
        curve.calculate()
        assert curve.dates == [T] + [T + timedelta(days=d) for d in TERMS]
        assert curve.data[0] == 1.0
        assert np.all(np.diff(curve.data) < 0.0)
        assert isinstance(curve.interpolation, LocalCubicSplineInterpolation)

    def test_final_window(self):
        curve = spline_curve(deposits())
        curve.calculate()
        # six nodes, window of two pillars plus one fixed neighbour
        assert curve.interpolation.window_start == 3

    def test_without_positivity(self):
        curve = spline_curve(deposits(), force_positive=False)
        assert max_quote_error(curve) < 1e-8

    def test_wider_window(self):
        curve = spline_curve(deposits(), localisation=3)
        assert max_quote_error(curve) < 1e-8

    def test_config_defaults(self):
        config = BootstrapConfig(localisation=3, force_positive=False)
        bootstrap = LocalBootstrap(config=config)
        assert bootstrap.localisation == 3
        assert not bootstrap.force_positive

    def test_zero_rate_nodes(self):
        curve = spline_curve(deposits(), traits=ZeroYield(), force_positive=False)
        assert max_quote_error(curve) < 1e-8

    def test_unsorted_helpers(self):
        helpers = deposits()
        curve = spline_curve(list(reversed(helpers)))
        assert max_quote_error(curve) < 1e-8
        assert curve.helpers[0].maturity_date == T + timedelta(days=30)

    def test_refit_after_quote_change(self):
        quote = SimpleQuote(0.018)
        helpers = deposits(RATES[:-1] + (quote,))
        curve = spline_curve(helpers)
        before = curve.discount(1.0)

        quote.set_value(0.02)
        assert not curve.is_calculated
        assert curve.discount(1.0) < before
        assert max_quote_error(curve) < 1e-8


class TestLocalBootstrapErrors:

    def test_interpolator_without_local_support(self):
        with pytest.raises(CurveConfigurationError):
            PiecewiseYieldCurve(
                deposits(), Discount(), LogLinearInterpolator(),
                reference_date=T, bootstrap=LocalBootstrap()
            )

    def test_too_few_helpers_for_window(self):
        with pytest.raises(CurveConfigurationError):
            spline_curve(deposits()[:2])

    def test_invalid_localisation(self):
        with pytest.raises(ValueError):
            LocalBootstrap(localisation=0)

    def test_duplicate_maturity(self):
        helpers = deposits()
        helpers.append(DepositRateHelper(0.02, start_date=T + timedelta(days=5),
                                         end_date=T + timedelta(days=365)))
        curve = spline_curve(helpers)
        with pytest.raises(CurveOrderingError):
            curve.calculate()

    def test_expired_helper(self):
        helpers = deposits()
        helpers.append(DepositRateHelper(0.02, start_date=T - timedelta(days=30), end_date=T))
        curve = spline_curve(helpers)
        with pytest.raises(CurveOrderingError):
            curve.calculate()

    def test_invalid_quote(self):
        helpers = deposits(RATES[:-1] + (SimpleQuote(),))
        curve = spline_curve(helpers)
        with pytest.raises(CurveOrderingError):
            curve.calculate()

    def test_unreachable_quotes(self):
        """Negative deposit rates cannot be fitted with positive zero rates."""
        negative = tuple(-r for r in RATES)
        curve = spline_curve(deposits(negative), ZeroYield(), force_positive=True)
        with pytest.raises(BootstrapFailure, match="unable to fit curve") as excinfo:
            curve.calculate()

        assert excinfo.value.pillar_index == 2
        assert not curve.valid_curve
        assert not curve.is_calculated


class TestPenaltyFunction:

    def test_signed_residuals(self):
        curve = spline_curve(deposits())
        curve.calculate()
        fitted = curve.data[4:6].copy()
        penalty = PenaltyFunction(curve, 4, curve.helpers, 3, 5)

        assert np.all(np.abs(penalty.values(fitted)) < 1e-8)

        bumped = fitted + np.array([0.0, 1e-4])
        residuals = penalty.values(bumped)
        # a higher final discount lowers the implied rate
        assert residuals[1] > 0.0
        assert penalty.value(bumped) == pytest.approx(np.sum(np.abs(residuals)))

        penalty.values(fitted)
        np.testing.assert_array_equal(curve.data[4:6], fitted)
