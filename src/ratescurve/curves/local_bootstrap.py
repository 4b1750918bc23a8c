"""
Localised bootstrap for non-local interpolation schemes.

With a spline, moving one node moves the curve on both sides of it, so a
node cannot be solved in isolation. The local bootstrap instead walks a
window of `localisation` helpers along the curve and fits the nodes in
the window jointly with a least-squares minimizer, keeping the part of
the curve left of the window frozen. The risk of each node stays local
while the curve stays smooth.
"""

import logging
from typing import TYPE_CHECKING, List, Optional

import numpy as np

from ..config import BootstrapConfig
from ..errors import BootstrapFailure, CurveConfigurationError, CurveOrderingError
from ..solvers import (
    CostFunction,
    EndCriteria,
    LevenbergMarquardt,
    NoConstraint,
    PositiveConstraint,
    Problem
)
from .helpers import BootstrapHelper

if TYPE_CHECKING:
    from .piecewise import PiecewiseYieldCurve

logger = logging.getLogger(__name__)


class PenaltyFunction(CostFunction):
    """
    Pricing errors of the helpers in one window.

    x holds the values of nodes initial_index, initial_index + 1, ...;
    the residuals are the quote errors of helpers[start:end].
    """

    def __init__(
        self,
        curve: "PiecewiseYieldCurve",
        initial_index: int,
        helpers: List[BootstrapHelper],
        start: int,
        end: int
    ):
        self.curve = curve
        self.initial_index = initial_index
        self.helpers = helpers[start:end]

    def _set_nodes(self, x: np.ndarray) -> None:
        for j, v in enumerate(x):
            self.curve.traits.update_guess(self.curve.data, float(v), j + self.initial_index)
        self.curve.interpolation.update()

    def values(self, x: np.ndarray) -> np.ndarray:
        self._set_nodes(x)
        return np.array([h.quote_error() for h in self.helpers])

    def value(self, x: np.ndarray) -> float:
        self._set_nodes(x)
        return float(sum(abs(h.quote_error()) for h in self.helpers))


class LocalBootstrap:
    """
    Localised-term-structure bootstrapper.

    The interpolator must provide local_interpolate() and
    data_size_adjustment (see CubicSplineInterpolator).

    Attributes:
        localisation: Number of helpers fitted jointly (default 2)
        force_positive: Keep node values positive (default True)
    """

    def __init__(
        self,
        localisation: Optional[int] = None,
        force_positive: Optional[bool] = None,
        config: Optional[BootstrapConfig] = None
    ):
        self.config = config or BootstrapConfig.default()
        self.localisation = localisation if localisation is not None else self.config.localisation
        self.force_positive = (
            force_positive if force_positive is not None else self.config.force_positive
        )
        if self.localisation < 1:
            raise ValueError(f"localisation ({self.localisation}) must be at least 1")
        self._curve: Optional["PiecewiseYieldCurve"] = None

    def setup(self, curve: "PiecewiseYieldCurve") -> None:
        """
        Attach to a curve.

        Raises:
            CurveConfigurationError: Too few helpers for the interpolation
                or the window, or an interpolator without local support
        """
        self._curve = curve
        n = len(curve.helpers)
        required = curve.interpolator.required_points
        if n < required:
            raise CurveConfigurationError(
                f"not enough helpers: {n} provided, {required} required"
            )
        if not n > self.localisation:
            raise CurveConfigurationError(
                f"not enough helpers: {n} provided, more than {self.localisation} "
                f"required for the local window"
            )
        if not hasattr(curve.interpolator, "local_interpolate"):
            raise CurveConfigurationError(
                f"{curve.interpolator!r} does not support local interpolation"
            )
        for helper in curve.helpers:
            helper.register_observer(curve)

    def calculate(self) -> None:
        """
        Fit the curve window by window.

        Raises:
            CurveOrderingError: Duplicate maturities, expired helpers or invalid quotes
            BootstrapFailure: A window could not be fitted
        """
        curve = self._curve
        helpers = curve.helpers
        helpers.sort(key=lambda h: h.latest_relevant_date)
        n = len(helpers)

        for i in range(1, n):
            if helpers[i - 1].latest_date == helpers[i].latest_date:
                raise CurveOrderingError(
                    f"two helpers have the same maturity ({helpers[i].latest_date})"
                )
        first_date = curve.initial_date()
        if helpers[0].latest_date <= first_date:
            raise CurveOrderingError(
                f"helper 1 (maturity: {helpers[0].latest_date}) is not after "
                f"the curve's initial date {first_date}"
            )
        for i, helper in enumerate(helpers):
            if not helper.quote_is_valid():
                raise CurveOrderingError(
                    f"helper {i + 1} (maturity: {helper.latest_date}) has an invalid quote"
                )
        for helper in helpers:
            helper.set_term_structure(curve)

        valid = curve.valid_curve and len(curve.data) == n + 1
        if not valid:
            curve.data = np.zeros(n + 1)
            curve.data[0] = curve.initial_value()

        curve.dates = [first_date] + [h.latest_date for h in helpers]
        curve.times = np.array([curve.time_from_reference(d) for d in curve.dates])
        if not valid:
            for i in range(n):
                curve.data[i + 1] = curve.data[i]

        accuracy = curve.accuracy
        solver = LevenbergMarquardt(accuracy, accuracy, accuracy)
        end_criteria = EndCriteria(100, 10, accuracy, accuracy, accuracy)
        constraint = PositiveConstraint() if self.force_positive else NoConstraint()

        interpolator = curve.interpolator
        localisation = self.localisation
        adjust = interpolator.data_size_adjustment

        logger.info(
            "Local bootstrap of %s helpers on %s (window %s)",
            n, curve.reference_date, localisation
        )

        curve.interpolation = None
        for i_inst in range(localisation - 1, n):
            initial_data_pt = i_inst + 1 - localisation + adjust
            start_array = np.empty(localisation + 1 - adjust)
            start_array[:-1] = curve.data[initial_data_pt:initial_data_pt + localisation - adjust]

            # the local interpolation spans nodes 0..i_inst+1 but only
            # the last window is free to move
            curve.interpolation = interpolator.local_interpolate(
                curve.times, i_inst + 2, curve.data, localisation, curve.interpolation, n + 1
            )

            if i_inst >= localisation:
                start_array[-1] = curve.traits.guess(i_inst + 1, curve, False, 0)
            else:
                start_array[-1] = curve.data[0]

            cost = PenaltyFunction(
                curve, initial_data_pt, helpers, i_inst - localisation + 1, i_inst + 1
            )
            problem = Problem(cost, constraint, start_array)
            end_type = solver.minimize(problem, end_criteria)

            if not end_type.is_function_stationary:
                curve.valid_curve = False
                raise BootstrapFailure(
                    f"unable to fit curve to required accuracy "
                    f"(window ending at {curve.dates[i_inst + 1]}: {end_type.value})",
                    pillar_index=i_inst + 1,
                    pillar_date=curve.dates[i_inst + 1],
                    maturity_date=helpers[i_inst].maturity_date,
                    reference_date=curve.reference_date
                )
            logger.debug(
                "window ending at node %s fitted (%s, cost %.3e)",
                i_inst + 1, end_type.value, problem.function_value
            )

        curve.valid_curve = True


__all__ = [
    "PenaltyFunction",
    "LocalBootstrap",
]
