"""
Change notification and lazy recalculation.

Provides:
- Observer: Anything with an update() hook
- Observable: Keeps a list of observers and notifies them on change
- LazyObject: Observable that recalculates only when queried after a change

Quotes notify helpers, helpers notify curves, curves notify whoever
holds them. A curve never bootstraps on notification; it only marks
itself stale and bootstraps on the next query.
"""

from abc import ABC, abstractmethod
from typing import List


class Observer(ABC):
    """Receives change notifications."""

    @abstractmethod
    def update(self) -> None:
        pass


class Observable:
    """Notifies registered observers when its state changes."""

    def __init__(self):
        self._observers: List[Observer] = []

    def register_observer(self, observer: Observer) -> None:
        """Register an observer (registering twice is a no-op)."""
        if not any(o is observer for o in self._observers):
            self._observers.append(observer)

    def unregister_observer(self, observer: Observer) -> None:
        self._observers = [o for o in self._observers if o is not observer]

    def notify_observers(self) -> None:
        for observer in list(self._observers):
            observer.update()

    @property
    def observer_count(self) -> int:
        return len(self._observers)


class LazyObject(Observable, Observer):
    """
    Observable whose results are computed on demand.

    Subclasses implement perform_calculations(); callers go through
    calculate(), which runs it at most once per change. The object is
    flagged as calculated before the work starts so that queries made
    from inside perform_calculations() do not recurse.
    """

    def __init__(self):
        Observable.__init__(self)
        self._calculated = False
        self._frozen = False

    def update(self) -> None:
        if self._calculated and not self._frozen:
            self._calculated = False
            self.notify_observers()

    def calculate(self) -> None:
        if not self._calculated and not self._frozen:
            self._calculated = True
            try:
                self.perform_calculations()
            except Exception:
                self._calculated = False
                raise

    def recalculate(self) -> None:
        """Force a fresh calculation and notify observers."""
        was_frozen = self._frozen
        self._calculated = False
        self._frozen = False
        try:
            self.calculate()
        finally:
            self._frozen = was_frozen
        self.notify_observers()

    def freeze(self) -> None:
        """Stop recalculating on notifications."""
        self._frozen = True

    def unfreeze(self) -> None:
        if self._frozen:
            self._frozen = False
            self._calculated = False
            self.notify_observers()

    @property
    def is_calculated(self) -> bool:
        return self._calculated

    @abstractmethod
    def perform_calculations(self) -> None:
        pass


__all__ = [
    "Observer",
    "Observable",
    "LazyObject",
]
