"""
Curve bootstrapping engine.

Implements the iterative bootstrap for piecewise curves:
1. Sort helpers by pillar date and drop the ones that already expired
2. Solve for one node at a time so that each helper reprices its quote
3. Repeat the pillar pass until no node moves by more than the accuracy,
   when one node's fit can depend on nodes after it (global
   interpolation, or pillars before the last date a helper needs)

Also provides:
- BootstrapErrorFunction: The 1-D function the root solver sees for one node
- repricing_report: Quote / implied quote / error table for a fitted curve
- bootstrap_from_quotes: Build a curve from quote dictionaries
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Dict, List, Optional

import numpy as np
import pandas as pd

from ..config import BootstrapConfig
from ..conventions import Conventions, DayCount
from ..dates import DateUtils
from ..errors import (
    BootstrapFailure,
    ConvergenceError,
    CurveConfigurationError,
    CurveOrderingError,
    SolverError
)
from ..settings import EvaluationDate
from ..solvers import Brent, FiniteDifferenceNewtonSafe, Solver1D
from .helpers import (
    BootstrapHelper,
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    OISRateHelper
)
from .interpolation import LinearInterpolator, create_interpolator
from .traits import Discount, ForwardRate, ZeroYield

if TYPE_CHECKING:
    from .piecewise import PiecewiseYieldCurve

logger = logging.getLogger(__name__)


class BootstrapErrorFunction:
    """
    Pricing error of one helper as a function of one node value.

    value(x) writes x into node `pillar_index`, refreshes the curve's
    interpolation and returns the helper's quote error.
    """

    def __init__(self, curve: "PiecewiseYieldCurve", helper: BootstrapHelper, pillar_index: int):
        self.curve = curve
        self.helper = helper
        self.pillar_index = pillar_index

    def value(self, guess: float) -> float:
        self.curve.traits.update_guess(self.curve.data, guess, self.pillar_index)
        self.curve.interpolation.update()
        return self.helper.quote_error()

    def __call__(self, guess: float) -> float:
        return self.value(guess)


@dataclass
class FitOutcome:
    """
    Result of one attempt at fitting the curve.

    Attributes:
        iterations: Convergence-loop passes made
        error: Failure, None on success
        stale_warm_start: The failure happened while solving from a
            previously valid curve, which may be the cause
    """
    iterations: int = 0
    error: Optional[BootstrapFailure] = None
    stale_warm_start: bool = False

    @property
    def success(self) -> bool:
        return self.error is None


class IterativeBootstrap:
    """
    Universal piecewise-curve bootstrapper.

    Solves nodes one at a time with a 1-D solver: Brent when starting from
    scratch, safe Newton when the nodes already hold a solution (a
    previous calculation, or an earlier pass of the convergence loop).
    If a solve fails while starting from a previous calculation, that
    solution is dropped and the fit restarts from scratch.

    Attributes:
        config: Tuning constants (evaluation budget, growth factor, guess nudge)
        first_solver: Solver for nodes without a previous value
        solver: Solver for nodes with a previous value
    """

    def __init__(
        self,
        config: Optional[BootstrapConfig] = None,
        first_solver: Optional[Solver1D] = None,
        solver: Optional[Solver1D] = None
    ):
        self.config = config or BootstrapConfig.default()
        self.first_solver = first_solver or Brent(
            self.config.max_evaluations, self.config.growth_factor
        )
        self.solver = solver or FiniteDifferenceNewtonSafe(
            self.config.max_evaluations, self.config.growth_factor
        )
        self._curve: Optional["PiecewiseYieldCurve"] = None
        self._initialized = False
        self._loop_required = False
        self._first_alive_helper = 0
        self._alive_helpers = 0

    @property
    def loop_required(self) -> bool:
        return self._loop_required

    @property
    def alive_helpers(self) -> int:
        return self._alive_helpers

    def setup(self, curve: "PiecewiseYieldCurve") -> None:
        """
        Attach to a curve and check it has enough helpers.

        Raises:
            CurveConfigurationError: Fewer helpers than the interpolation needs
        """
        self._curve = curve
        n = len(curve.helpers)
        required = curve.interpolator.required_points
        if n + 1 < required:
            raise CurveConfigurationError(
                f"not enough helpers: {n} provided, {required - 1} required"
            )
        for helper in curve.helpers:
            helper.register_observer(curve)
        self._initialized = False

    def _initialize(self) -> None:
        """
        Sort helpers, find the alive ones and lay out the node arrays.

        Raises:
            CurveConfigurationError: Too few alive helpers
            CurveOrderingError: Duplicate pillars or helpers not extending the curve
        """
        curve = self._curve
        curve.helpers.sort(key=lambda h: h.pillar_date)
        n = len(curve.helpers)

        first_date = curve.initial_date()
        first_alive = 0
        while first_alive < n and curve.helpers[first_alive].pillar_date <= first_date:
            first_alive += 1
        alive = n - first_alive
        required = curve.interpolator.required_points
        if alive + 1 < required:
            raise CurveConfigurationError(
                f"not enough alive helpers: {alive} provided, {required - 1} required"
            )

        dates = [first_date]
        times = [curve.time_from_reference(first_date)]
        max_date = first_date
        loop_required = curve.interpolator.global_

        for j in range(first_alive, n):
            helper = curve.helpers[j]
            pillar = helper.pillar_date
            if pillar == dates[-1]:
                raise CurveOrderingError(
                    f"more than one helper with pillar {pillar}"
                )
            latest_relevant = helper.latest_relevant_date
            if not latest_relevant > max_date:
                raise CurveOrderingError(
                    f"helper {j - first_alive + 1} (pillar: {pillar}) has latest relevant "
                    f"date {latest_relevant} not after the previous one ({max_date})"
                )
            max_date = latest_relevant
            if pillar != latest_relevant:
                loop_required = True
            dates.append(pillar)
            times.append(curve.time_from_reference(pillar))

        curve.dates = dates
        curve.times = np.array(times, dtype=np.float64)

        if not curve.valid_curve or len(curve.data) != alive + 1:
            curve.data = np.full(alive + 1, curve.initial_value(), dtype=np.float64)
            curve.valid_curve = False

        self._first_alive_helper = first_alive
        self._alive_helpers = alive
        self._loop_required = loop_required
        self._initialized = True

    def calculate(self) -> None:
        """
        Fit the curve so that every alive helper reprices its quote.

        Raises:
            CurveConfigurationError, CurveOrderingError: Before any solving
            BootstrapFailure: A node could not be solved
            ConvergenceError: The convergence loop ran out of iterations
        """
        curve = self._curve
        if curve.moving or not self._initialized:
            self._initialize()

        for j in range(self._first_alive_helper, len(curve.helpers)):
            helper = curve.helpers[j]
            if not helper.quote_is_valid():
                raise CurveOrderingError(
                    f"helper {j - self._first_alive_helper + 1} (maturity: {helper.maturity_date}, "
                    f"pillar: {helper.pillar_date}) has an invalid quote"
                )
            helper.set_term_structure(curve)

        logger.info(
            "Bootstrapping %s helpers on %s (%s, %s)",
            self._alive_helpers, curve.reference_date,
            type(curve.traits).__name__, type(curve.interpolator).__name__
        )

        outcome = self._fit(valid_data=curve.valid_curve)
        if not outcome.success and outcome.stale_warm_start:
            logger.warning(
                "Refitting from scratch, previous curve was a bad starting point: %s",
                outcome.error
            )
            curve.valid_curve = False
            curve.data[:] = curve.initial_value()
            outcome = self._fit(valid_data=False)

        if not outcome.success:
            curve.valid_curve = False
            raise outcome.error

        curve.valid_curve = True
        logger.info("Bootstrap converged after %s iteration(s)", outcome.iterations)

    def _fit(self, valid_data: bool) -> FitOutcome:
        """One attempt at fitting all alive nodes."""
        curve = self._curve
        traits = curve.traits
        alive = self._alive_helpers
        first_alive = self._first_alive_helper
        warm_start = valid_data
        nudge = self.config.guess_nudge
        max_iterations = curve.max_iterations

        if valid_data:
            curve.interpolation = curve.interpolator.interpolate(curve.times, alive + 1, curve.data)

        iteration = 0
        while True:
            previous_data = curve.data.copy()

            for i in range(1, alive + 1):
                helper = curve.helpers[first_alive + i - 1]

                # guess before extending the interpolation, so that any
                # extrapolation uses the nodes solved so far
                x_min = traits.min_value_after(i, curve, valid_data, first_alive)
                x_max = traits.max_value_after(i, curve, valid_data, first_alive)
                guess = traits.guess(i, curve, valid_data, first_alive)

                if guess >= x_max:
                    guess = x_max - nudge * (x_max - x_min)
                elif guess <= x_min:
                    guess = x_min + nudge * (x_max - x_min)

                try:
                    if not valid_data:
                        self._extend_interpolation(i)
                    error = BootstrapErrorFunction(curve, helper, i)
                    solver = self.solver if valid_data else self.first_solver
                    root = solver.solve_bracketed(error, curve.accuracy, guess, x_min, x_max)
                    traits.update_guess(curve.data, root, i)
                    curve.interpolation.update()
                except (SolverError, ValueError, ArithmeticError) as e:
                    failure = BootstrapFailure(
                        f"iteration {iteration + 1}: could not bootstrap helper {i} "
                        f"(pillar {curve.dates[i]}, maturity {helper.maturity_date}, "
                        f"reference date {curve.reference_date}): {e}",
                        iteration=iteration + 1,
                        pillar_index=i,
                        pillar_date=curve.dates[i],
                        maturity_date=helper.maturity_date,
                        reference_date=curve.reference_date
                    )
                    return FitOutcome(iteration + 1, failure, stale_warm_start=warm_start)

                logger.debug(
                    "iteration %s: node %s (%s) = %.15g",
                    iteration + 1, i, curve.dates[i], curve.data[i]
                )

            if not self._loop_required:
                return FitOutcome(iteration + 1)

            if not valid_data:
                # make sure the target interpolation spans every node
                curve.interpolation = curve.interpolator.interpolate(
                    curve.times, alive + 1, curve.data
                )

            change = float(np.max(np.abs(curve.data[1:] - previous_data[1:])))
            logger.debug("iteration %s: max node change %.3e", iteration + 1, change)
            if change <= curve.accuracy:
                return FitOutcome(iteration + 1)

            if iteration >= max_iterations - 1:
                return FitOutcome(
                    iteration + 1,
                    ConvergenceError(iteration + 1, change, curve.accuracy)
                )

            valid_data = True
            iteration += 1

    def _extend_interpolation(self, i: int) -> None:
        """Interpolate over nodes 0..i only."""
        curve = self._curve
        try:
            curve.interpolation = curve.interpolator.interpolate(curve.times, i + 1, curve.data)
        except ValueError:
            if not curve.interpolator.global_:
                raise
            # not usable yet with this few points
            curve.interpolation = LinearInterpolator().interpolate(curve.times, i + 1, curve.data)


def repricing_report(curve) -> pd.DataFrame:
    """
    Reprice every helper on a fitted curve.

    Args:
        curve: PiecewiseYieldCurve (bootstrapped on demand)

    Returns:
        DataFrame with one row per helper: type, pillar and maturity dates,
        quote, implied quote, error (quote - implied) and alive flag
    """
    curve.calculate()
    initial = curve.initial_date()
    rows = []
    for helper in curve.helpers:
        alive = helper.pillar_date > initial
        implied = helper.implied_quote() if alive else np.nan
        quote = helper.quote.value()
        rows.append({
            "helper": type(helper).__name__,
            "pillar_date": helper.pillar_date,
            "maturity_date": helper.maturity_date,
            "quote": quote,
            "implied_quote": implied,
            "error": quote - implied,
            "alive": alive,
        })
    return pd.DataFrame(rows)


_PAY_FREQ = {"ANNUAL": 1, "SEMI": 2, "QUARTERLY": 4, "MONTHLY": 12}

_TRAITS = {
    "discount": Discount,
    "zero_yield": ZeroYield,
    "forward_rate": ForwardRate,
}


def _tenor_months(tenor: str) -> int:
    amount, unit = DateUtils.parse_tenor(tenor)
    if unit == "M":
        return amount
    if unit == "Y":
        return 12 * amount
    raise ValueError(f"FRA tenors must be in months or years: {tenor}")


def bootstrap_from_quotes(
    anchor_date: date,
    quotes: List[Dict],
    interpolation: str = "log_linear",
    traits: str = "discount",
    config: Optional[BootstrapConfig] = None
):
    """
    Convenience function to bootstrap curve from quote dictionaries.

    Args:
        anchor_date: Valuation date (curve reference date)
        quotes: List of dicts with keys: instrument_type, tenor, quote, ...
        interpolation: Interpolation method
        traits: "discount", "zero_yield" or "forward_rate"
        config: Bootstrap tuning constants

    Returns:
        Bootstrapped PiecewiseYieldCurve

    Example quote format:
        {"instrument_type": "DEPOSIT", "tenor": "1M", "quote": 0.053}
        {"instrument_type": "OIS", "tenor": "2Y", "quote": 0.0432, "pay_freq": "ANNUAL"}
        {"instrument_type": "FRA", "start_tenor": "3M", "tenor": "3M", "quote": 0.051}
        {"instrument_type": "FUTURE", "start_date": "2024-06-19", "quote": 94.85}
    """
    from .piecewise import PiecewiseYieldCurve

    evaluation_date = EvaluationDate(anchor_date)
    helpers: List[BootstrapHelper] = []

    for q in quotes:
        inst_type = q.get("instrument_type", "").upper()
        tenor = q.get("tenor", "")
        quote = float(q["quote"])
        day_count = DayCount.from_string(q.get("day_count", "ACT/360"))

        if inst_type == "DEPOSIT":
            conventions = Conventions.usd_deposit()
            conventions.day_count = day_count
            helpers.append(DepositRateHelper(quote, tenor, evaluation_date, conventions))
        elif inst_type == "OIS":
            conventions = Conventions.usd_ois()
            conventions.day_count = day_count
            conventions.payment_frequency = _PAY_FREQ[q.get("pay_freq", "ANNUAL").upper()]
            helpers.append(OISRateHelper(quote, tenor, evaluation_date, conventions))
        elif inst_type == "FRA":
            conventions = Conventions.usd_deposit()
            conventions.day_count = day_count
            start = _tenor_months(q.get("start_tenor", "0M"))
            helpers.append(FraRateHelper(
                quote, start, start + _tenor_months(tenor), evaluation_date, conventions
            ))
        elif inst_type in ("FUT", "FUTURE"):
            start_date = q["start_date"]
            if isinstance(start_date, str):
                start_date = date.fromisoformat(start_date)
            helpers.append(FuturesRateHelper(
                quote, start_date, q.get("length_months", 3), day_count
            ))
        else:
            raise ValueError(f"Unknown instrument type: {inst_type}")

    if traits not in _TRAITS:
        raise ValueError(f"Unknown traits: {traits}")

    curve = PiecewiseYieldCurve(
        helpers,
        traits=_TRAITS[traits](),
        interpolator=create_interpolator(interpolation),
        reference_date=anchor_date,
        config=config
    )
    curve.calculate()
    return curve


__all__ = [
    "BootstrapErrorFunction",
    "FitOutcome",
    "IterativeBootstrap",
    "repricing_report",
    "bootstrap_from_quotes",
]
