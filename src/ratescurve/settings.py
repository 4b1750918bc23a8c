"""
Evaluation date.

Curves built with settlement days and helpers built from tenors derive
their dates from an EvaluationDate. Moving the evaluation date notifies
them, so the next query re-derives the anchor and re-fits the curve.
"""

from datetime import date, timedelta
from typing import Optional

from .observer import Observable


class EvaluationDate(Observable):
    """
    Observable holder of the evaluation ("today") date.

    Attributes:
        value: Current evaluation date (defaults to date.today())
    """

    def __init__(self, value: Optional[date] = None):
        super().__init__()
        self._value = value or date.today()

    @property
    def value(self) -> date:
        return self._value

    def set(self, value: date) -> None:
        """Move the evaluation date, notifying observers if it changed."""
        if value != self._value:
            self._value = value
            self.notify_observers()

    def advance(self, days: int = 1) -> date:
        """Move the evaluation date forward by calendar days."""
        self.set(self._value + timedelta(days=days))
        return self._value

    def __repr__(self) -> str:
        return f"EvaluationDate({self._value.isoformat()})"


__all__ = ["EvaluationDate"]
