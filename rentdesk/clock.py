"""Clock abstraction so date-driven logic never reads the wall clock itself."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Source of the current timestamp."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time (naive local time)."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Clock frozen at a given instant, movable by hand. Used in tests."""

    def __init__(self, current: datetime) -> None:
        self._current = current

    def now(self) -> datetime:
        return self._current

    def set(self, current: datetime) -> None:
        self._current = current

    def advance(self, **kwargs: float) -> datetime:
        """Move the clock forward by ``timedelta(**kwargs)``."""
        self._current = self._current + timedelta(**kwargs)
        return self._current
