"""
Interpolation schemes for bootstrapped curves.

Provides:
- LinearInterpolator: Linear on the node values, linear extrapolation
- LogLinearInterpolator: Linear in log(value), i.e. piecewise flat forwards on discounts
- BackwardFlatInterpolator: Piecewise constant, value of the right-hand node
- CubicSplineInterpolator: Natural cubic spline (global), with a windowed
  local variant for the local bootstrap

Interpolators are factories: interpolate(x, size, y) builds an
Interpolation over the first `size` points of the arrays x and y. The
arrays are held by reference, not copied, so a bootstrap can change a node
value in place and call update() to refresh the interpolation.
"""

import copy
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np
from scipy.integrate import quad


class Interpolation(ABC):
    """
    Interpolation over the first `size` points of live x/y arrays.

    Attributes:
        size: Number of points used
        x_min: First abscissa
        x_max: Last abscissa
    """

    required_points = 2

    def __init__(self, x: np.ndarray, y: np.ndarray, size: int):
        if size < self.required_points:
            raise ValueError(
                f"not enough points to interpolate: at least {self.required_points} "
                f"required, {size} provided"
            )
        if len(x) < size or len(y) < size:
            raise ValueError(f"arrays shorter than the requested size {size}")
        if np.any(np.diff(x[:size]) <= 0.0):
            raise ValueError("interpolation abscissae must be strictly increasing")
        self._x = x
        self._y = y
        self._n = size

    @property
    def size(self) -> int:
        return self._n

    @property
    def x_min(self) -> float:
        return float(self._x[0])

    @property
    def x_max(self) -> float:
        return float(self._x[self._n - 1])

    def update(self) -> None:
        """Refresh after node values changed in place."""

    @abstractmethod
    def value(self, t: float) -> float:
        pass

    def __call__(self, t: float) -> float:
        return self.value(t)

    def derivative(self, t: float, h: float = 1.0e-6) -> float:
        """First derivative (central difference unless overridden)."""
        return (self.value(t + h) - self.value(t - h)) / (2.0 * h)

    def primitive(self, t: float) -> float:
        """Integral of the interpolant from x_min to t."""
        result, _ = quad(self.value, self.x_min, t, limit=200)
        return float(result)

    def snapshot(self) -> "Interpolation":
        """Copy that no longer follows changes to the node arrays."""
        clone = copy.copy(self)
        clone._x = np.array(self._x[:self._n], dtype=np.float64)
        clone._y = np.array(self._y[:self._n], dtype=np.float64)
        clone.update()
        return clone

    def _locate(self, t: float) -> int:
        """Index i of the segment [x_i, x_{i+1}] used for t (clamped to the ends)."""
        idx = int(np.searchsorted(self._x[:self._n], t, side='right')) - 1
        return max(0, min(idx, self._n - 2))


class LinearInterpolation(Interpolation):
    """Linear interpolation; extrapolates with the end segments."""

    def value(self, t: float) -> float:
        i = self._locate(t)
        x0, x1 = self._x[i], self._x[i + 1]
        y0, y1 = self._y[i], self._y[i + 1]
        return float(y0 + (t - x0) * (y1 - y0) / (x1 - x0))

    def derivative(self, t: float, h: float = 0.0) -> float:
        i = self._locate(t)
        return float((self._y[i + 1] - self._y[i]) / (self._x[i + 1] - self._x[i]))

    def primitive(self, t: float) -> float:
        i = self._locate(t)
        total = 0.0
        for j in range(i):
            total += 0.5 * (self._y[j] + self._y[j + 1]) * (self._x[j + 1] - self._x[j])
        dx = t - self._x[i]
        total += dx * (self._y[i] + 0.5 * dx * self.derivative(t))
        return float(total)


class LogLinearInterpolation(Interpolation):
    """Linear interpolation of log(y); all node values must be positive."""

    def __init__(self, x: np.ndarray, y: np.ndarray, size: int):
        super().__init__(x, y, size)
        self.update()

    def update(self) -> None:
        if np.any(self._y[:self._n] <= 0.0):
            raise ValueError("log-linear interpolation requires positive values")

    def value(self, t: float) -> float:
        i = self._locate(t)
        x0, x1 = self._x[i], self._x[i + 1]
        l0, l1 = np.log(self._y[i]), np.log(self._y[i + 1])
        return float(np.exp(l0 + (t - x0) * (l1 - l0) / (x1 - x0)))

    def derivative(self, t: float, h: float = 0.0) -> float:
        i = self._locate(t)
        slope = (np.log(self._y[i + 1]) - np.log(self._y[i])) / (self._x[i + 1] - self._x[i])
        return float(self.value(t) * slope)


class BackwardFlatInterpolation(Interpolation):
    """Piecewise constant: on (x_i, x_{i+1}] the value is y_{i+1}."""

    def value(self, t: float) -> float:
        if t <= self._x[0]:
            return float(self._y[0])
        idx = int(np.searchsorted(self._x[:self._n], t, side='left'))
        return float(self._y[min(idx, self._n - 1)])

    def derivative(self, t: float, h: float = 0.0) -> float:
        return 0.0

    def primitive(self, t: float) -> float:
        if t <= self._x[0]:
            return float(self._y[0] * (t - self._x[0]))
        total = 0.0
        for j in range(1, self._n):
            lo, hi = self._x[j - 1], self._x[j]
            if t <= hi:
                return float(total + self._y[j] * (t - lo))
            total += self._y[j] * (hi - lo)
        return float(total + self._y[self._n - 1] * (t - self._x[self._n - 1]))


class CubicSplineInterpolation(Interpolation):
    """
    Natural cubic spline.

    Solves the tridiagonal system for the second derivatives on update(),
    then stores per-segment coefficients [a, b, c, d] for
    S_i(x) = a + b*(x-x_i) + c*(x-x_i)^2 + d*(x-x_i)^3.
    Extrapolates with the end polynomials.
    """

    def __init__(self, x: np.ndarray, y: np.ndarray, size: int, start: int = 0):
        super().__init__(x, y, size)
        if size - start < self.required_points:
            raise ValueError(f"spline window [{start}, {size}) has fewer than 2 points")
        self._start = start
        self.coefficients: Optional[np.ndarray] = None
        self.update()

    def update(self) -> None:
        xs = np.asarray(self._x[self._start:self._n], dtype=np.float64)
        ys = np.asarray(self._y[self._start:self._n], dtype=np.float64)
        n = len(xs)
        h = np.diff(xs)

        if n == 2:
            slope = (ys[1] - ys[0]) / h[0]
            self.coefficients = np.array([[ys[0], slope, 0.0, 0.0]])
            return

        # Natural spline: M[0] = M[n-1] = 0
        A = np.zeros((n, n))
        b = np.zeros(n)
        A[0, 0] = 1.0
        A[n - 1, n - 1] = 1.0
        for i in range(1, n - 1):
            A[i, i - 1] = h[i - 1]
            A[i, i] = 2 * (h[i - 1] + h[i])
            A[i, i + 1] = h[i]
            b[i] = 6 * ((ys[i + 1] - ys[i]) / h[i] - (ys[i] - ys[i - 1]) / h[i - 1])

        M = np.linalg.solve(A, b)

        coefficients = np.zeros((n - 1, 4))
        coefficients[:, 0] = ys[:-1]
        coefficients[:, 1] = (ys[1:] - ys[:-1]) / h - h * (M[1:] + 2 * M[:-1]) / 6
        coefficients[:, 2] = M[:-1] / 2
        coefficients[:, 3] = (M[1:] - M[:-1]) / (6 * h)
        self.coefficients = coefficients

    def _segment(self, t: float) -> int:
        xs = self._x[self._start:self._n]
        idx = int(np.searchsorted(xs, t, side='right')) - 1
        return max(0, min(idx, len(self.coefficients) - 1))

    def value(self, t: float) -> float:
        i = self._segment(t)
        dx = t - self._x[self._start + i]
        a, b, c, d = self.coefficients[i]
        return float(a + b * dx + c * dx ** 2 + d * dx ** 3)

    def derivative(self, t: float, h: float = 0.0) -> float:
        i = self._segment(t)
        dx = t - self._x[self._start + i]
        _, b, c, d = self.coefficients[i]
        return float(b + 2 * c * dx + 3 * d * dx ** 2)

    def second_derivative(self, t: float) -> float:
        i = self._segment(t)
        dx = t - self._x[self._start + i]
        _, _, c, d = self.coefficients[i]
        return float(2 * c + 6 * d * dx)

    def primitive(self, t: float) -> float:
        total = 0.0
        seg = self._segment(t)
        for i in range(seg + 1):
            x0 = self._x[self._start + i]
            dx = (t - x0) if i == seg else (self._x[self._start + i + 1] - x0)
            a, b, c, d = self.coefficients[i]
            total += a * dx + b * dx ** 2 / 2 + c * dx ** 3 / 3 + d * dx ** 4 / 4
        return float(total)


class LocalCubicSplineInterpolation(CubicSplineInterpolation):
    """
    Spline over a trailing window of nodes, frozen shape to its left.

    Nodes [start, size) carry a natural cubic spline that follows the live
    arrays. Left of x[start] the curve is a frozen copy of whatever
    described it before (the previous local interpolation, or a linear
    interpolation of the fixed nodes), so refitting the window cannot
    move the part of the curve that earlier windows already fixed.
    """

    def __init__(
        self,
        x: np.ndarray,
        y: np.ndarray,
        size: int,
        start: int,
        previous: Optional[Interpolation] = None
    ):
        super().__init__(x, y, size, start)
        self._left: Optional[Interpolation] = None
        if start > 0:
            left = previous if previous is not None else LinearInterpolation(x, y, start + 1)
            self._left = left.snapshot()

    @property
    def window_start(self) -> int:
        return self._start

    def value(self, t: float) -> float:
        if self._left is not None and t <= self._x[self._start]:
            return self._left.value(t)
        return super().value(t)

    def derivative(self, t: float, h: float = 0.0) -> float:
        if self._left is not None and t <= self._x[self._start]:
            return self._left.derivative(t)
        return super().derivative(t)

    def primitive(self, t: float) -> float:
        if self._left is None:
            return super().primitive(t)
        x_start = float(self._x[self._start])
        if t <= x_start:
            return self._left.primitive(t)
        return self._left.primitive(x_start) + super().primitive(t) - super().primitive(x_start)


class Interpolator(ABC):
    """
    Interpolation factory.

    Attributes:
        required_points: Minimum number of points (anchor included)
        global_: True if moving one node can change the curve everywhere
    """

    required_points = 2
    global_ = False

    @abstractmethod
    def interpolate(self, x: np.ndarray, size: int, y: np.ndarray) -> Interpolation:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class LinearInterpolator(Interpolator):
    """Linear interpolation on node values."""

    def interpolate(self, x: np.ndarray, size: int, y: np.ndarray) -> Interpolation:
        return LinearInterpolation(x, y, size)


class LogLinearInterpolator(Interpolator):
    """Log-linear interpolation on positive node values (discount factors)."""

    def interpolate(self, x: np.ndarray, size: int, y: np.ndarray) -> Interpolation:
        return LogLinearInterpolation(x, y, size)


class BackwardFlatInterpolator(Interpolator):
    """Piecewise flat interpolation (flat forwards on a forward-rate curve)."""

    def interpolate(self, x: np.ndarray, size: int, y: np.ndarray) -> Interpolation:
        return BackwardFlatInterpolation(x, y, size)


class CubicSplineInterpolator(Interpolator):
    """
    Natural cubic spline.

    Global: the whole spline moves when any node moves, so the iterative
    bootstrap needs its convergence loop. Also supports windowed fits via
    local_interpolate() for the local bootstrap.

    Attributes:
        data_size_adjustment: Number of nodes at the left end of a window
            that the local bootstrap keeps fixed (1: the node just before
            the window's pillars is not re-solved)
    """

    global_ = True
    data_size_adjustment = 1

    def interpolate(self, x: np.ndarray, size: int, y: np.ndarray) -> Interpolation:
        return CubicSplineInterpolation(x, y, size)

    def local_interpolate(
        self,
        x: np.ndarray,
        size: int,
        y: np.ndarray,
        localisation: int,
        previous: Optional[Interpolation],
        final_size: int
    ) -> Interpolation:
        """
        Interpolation over the first `size` points whose spline covers only
        the last `localisation` pillars plus their fixed left neighbour.

        Args:
            x: Node times
            size: Number of nodes built so far
            y: Node values
            localisation: Number of pillars in the window
            previous: Interpolation used for the previous window (frozen to the left)
            final_size: Node count of the finished curve

        Returns:
            LocalCubicSplineInterpolation
        """
        if size > final_size:
            raise ValueError(f"size ({size}) exceeds final size ({final_size})")
        start = max(0, size - 2 - localisation + self.data_size_adjustment)
        return LocalCubicSplineInterpolation(x, y, size, start, previous)


def create_interpolator(method: str) -> Interpolator:
    """
    Factory function to create an interpolator by name.

    Args:
        method: One of "linear", "log_linear", "backward_flat", "cubic_spline"

    Returns:
        Interpolator instance
    """
    method = method.lower().replace("-", "_").replace(" ", "_")

    if method in ("linear", "lin"):
        return LinearInterpolator()
    elif method in ("log_linear", "loglinear"):
        return LogLinearInterpolator()
    elif method in ("backward_flat", "backwardflat", "flat_forward"):
        return BackwardFlatInterpolator()
    elif method in ("cubic_spline", "cubic", "spline"):
        return CubicSplineInterpolator()
    else:
        raise ValueError(f"Unknown interpolation method: {method}")


__all__ = [
    "Interpolation",
    "LinearInterpolation",
    "LogLinearInterpolation",
    "BackwardFlatInterpolation",
    "CubicSplineInterpolation",
    "LocalCubicSplineInterpolation",
    "Interpolator",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "BackwardFlatInterpolator",
    "CubicSplineInterpolator",
    "create_interpolator",
]
