"""
Bootstrap traits: what a curve's node values mean.

Provides:
- Discount: Nodes are discount factors P(0,t); anchor value 1
- ZeroYield: Nodes are continuously compounded zero rates
- ForwardRate: Nodes are instantaneous forward rates

Traits are small strategy objects. They tell the bootstrap where to start
(initial value, guess) and where to look (min/max bracket for a node), and
tell the curve how to turn its interpolation into discount factors.

All bracket/guess methods share the signature
(i, curve, valid_data, first_alive) where i is the node index being
solved, curve is the curve-under-construction and valid_data says whether
the curve's node values already hold a previous solution.
"""

import sys
from datetime import date
from typing import TYPE_CHECKING

import numpy as np

from .interpolation import Interpolation

if TYPE_CHECKING:
    from .piecewise import PiecewiseYieldCurve

EPSILON = sys.float_info.epsilon


class BootstrapTraits:
    """
    Base traits.

    Attributes:
        avg_rate: Rate used for first guesses
        max_rate: Largest rate the brackets allow for
    """

    avg_rate = 0.05
    max_rate = 1.0

    def __init__(self, allow_negative_rates: bool = True):
        self.allow_negative_rates = allow_negative_rates

    def initial_date(self, curve: "PiecewiseYieldCurve") -> date:
        """Date of node 0."""
        return curve.reference_date

    def initial_value(self, curve: "PiecewiseYieldCurve") -> float:
        raise NotImplementedError

    def guess(self, i: int, curve: "PiecewiseYieldCurve", valid_data: bool, first_alive: int) -> float:
        raise NotImplementedError

    def min_value_after(self, i: int, curve: "PiecewiseYieldCurve", valid_data: bool, first_alive: int) -> float:
        raise NotImplementedError

    def max_value_after(self, i: int, curve: "PiecewiseYieldCurve", valid_data: bool, first_alive: int) -> float:
        raise NotImplementedError

    def update_guess(self, data: np.ndarray, value: float, i: int) -> None:
        """Write a trial value into node i."""
        data[i] = value

    def max_iterations(self) -> int:
        """Convergence-loop budget when the curve does not override it."""
        raise NotImplementedError

    def discount_impl(self, interpolation: Interpolation, t: float) -> float:
        raise NotImplementedError

    def zero_yield_impl(self, interpolation: Interpolation, t: float) -> float:
        raise NotImplementedError

    def forward_impl(self, interpolation: Interpolation, t: float) -> float:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(allow_negative_rates={self.allow_negative_rates})"


class Discount(BootstrapTraits):
    """
    Discount-factor nodes.

    Without negative rates discounts cannot increase, so node i is
    bracketed by (P_{i-1} * exp(-max_rate * dt), P_{i-1}].
    """

    max_rate = 1.0

    def __init__(self, allow_negative_rates: bool = False):
        super().__init__(allow_negative_rates)

    def initial_value(self, curve: "PiecewiseYieldCurve") -> float:
        return 1.0

    def guess(self, i: int, curve: "PiecewiseYieldCurve", valid_data: bool, first_alive: int) -> float:
        data, times = curve.data, curve.times
        if valid_data:
            return float(data[i])
        if i == 1:
            return 1.0 / (1.0 + self.avg_rate * times[1])
        # flat rate extrapolation
        r = -np.log(data[i - 1]) / times[i - 1]
        return float(np.exp(-r * times[i]))

    def min_value_after(self, i: int, curve: "PiecewiseYieldCurve", valid_data: bool, first_alive: int) -> float:
        data, times = curve.data, curve.times
        if valid_data:
            if self.allow_negative_rates:
                return float(np.min(data) / 2.0)
            return float(data[-1] / 2.0)
        dt = times[i] - times[i - 1]
        return float(data[i - 1] * np.exp(-self.max_rate * dt))

    def max_value_after(self, i: int, curve: "PiecewiseYieldCurve", valid_data: bool, first_alive: int) -> float:
        data, times = curve.data, curve.times
        if self.allow_negative_rates:
            dt = times[i] - times[i - 1]
            return float(data[i - 1] * np.exp(self.max_rate * dt))
        return float(data[i - 1])

    def max_iterations(self) -> int:
        return 100

    def discount_impl(self, interpolation: Interpolation, t: float) -> float:
        return interpolation.value(t)


class ZeroYield(BootstrapTraits):
    """
    Zero-rate nodes (continuous compounding).

    Node 0 holds a dummy rate that follows node 1.
    """

    max_rate = 3.0

    def initial_value(self, curve: "PiecewiseYieldCurve") -> float:
        return self.avg_rate

    def guess(self, i: int, curve: "PiecewiseYieldCurve", valid_data: bool, first_alive: int) -> float:
        if valid_data:
            return float(curve.data[i])
        if i == 1:
            return self.avg_rate
        return self.zero_yield_impl(curve.interpolation, curve.times[i])

    def min_value_after(self, i: int, curve: "PiecewiseYieldCurve", valid_data: bool, first_alive: int) -> float:
        if valid_data:
            r = float(np.min(curve.data))
            if self.allow_negative_rates and r < 0.0:
                return r * 2.0
            return r / 2.0
        if self.allow_negative_rates:
            return -self.max_rate
        return EPSILON

    def max_value_after(self, i: int, curve: "PiecewiseYieldCurve", valid_data: bool, first_alive: int) -> float:
        if valid_data:
            r = float(np.max(curve.data))
            if self.allow_negative_rates and r < 0.0:
                return r / 2.0
            return r * 2.0
        return self.max_rate

    def update_guess(self, data: np.ndarray, value: float, i: int) -> None:
        data[i] = value
        if i == 1:
            data[0] = value

    def max_iterations(self) -> int:
        return 30

    def discount_impl(self, interpolation: Interpolation, t: float) -> float:
        return float(np.exp(-self.zero_yield_impl(interpolation, t) * t))

    def zero_yield_impl(self, interpolation: Interpolation, t: float) -> float:
        return interpolation.value(t)


class ForwardRate(ZeroYield):
    """
    Instantaneous forward nodes.

    The zero rate is the average forward, primitive(t) / t. Node 0 holds
    a dummy forward that follows node 1.
    """

    def guess(self, i: int, curve: "PiecewiseYieldCurve", valid_data: bool, first_alive: int) -> float:
        if valid_data:
            return float(curve.data[i])
        if i == 1:
            return self.avg_rate
        return self.forward_impl(curve.interpolation, curve.times[i])

    def zero_yield_impl(self, interpolation: Interpolation, t: float) -> float:
        if t == 0.0:
            return self.forward_impl(interpolation, 0.0)
        return interpolation.primitive(t) / t

    def forward_impl(self, interpolation: Interpolation, t: float) -> float:
        return interpolation.value(t)


__all__ = [
    "BootstrapTraits",
    "Discount",
    "ZeroYield",
    "ForwardRate",
]
