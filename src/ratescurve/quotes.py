"""
Market quotes.

A quote is owned by the caller and shared by reference with the
helpers that fit a curve to it. Changing a quote notifies every
helper (and through them, every curve) that depends on it.
"""

import math
from abc import ABC, abstractmethod
from typing import Optional, Union

from .observer import Observable


class Quote(Observable, ABC):
    """Abstract market quote."""

    @abstractmethod
    def value(self) -> float:
        pass

    @abstractmethod
    def is_valid(self) -> bool:
        pass


class SimpleQuote(Quote):
    """
    Quote holding a plain number.

    A quote with no value (or a NaN value) is invalid.

    Example:
        >>> q = SimpleQuote(0.0525)
        >>> q.set_value(0.0530)   # notifies observers
    """

    def __init__(self, value: Optional[float] = None):
        super().__init__()
        self._value = None if value is None else float(value)

    def value(self) -> float:
        if not self.is_valid():
            raise ValueError("invalid SimpleQuote")
        return self._value

    def is_valid(self) -> bool:
        return self._value is not None and not math.isnan(self._value)

    def set_value(self, value: Optional[float]) -> float:
        """
        Set a new value, notifying observers if it changed.

        Returns:
            The difference between the new and the old value
            (0.0 when either side is missing)
        """
        new = None if value is None else float(value)
        diff = 0.0
        if new is not None and self._value is not None:
            diff = new - self._value
        if new != self._value:
            self._value = new
            self.notify_observers()
        return diff

    def reset(self) -> None:
        """Invalidate the quote."""
        self.set_value(None)

    def __repr__(self) -> str:
        return f"SimpleQuote({self._value})"


def as_quote(quote: Union[Quote, float]) -> Quote:
    """Wrap a bare number into a SimpleQuote; pass quotes through."""
    if isinstance(quote, Quote):
        return quote
    return SimpleQuote(quote)


__all__ = [
    "Quote",
    "SimpleQuote",
    "as_quote",
]
