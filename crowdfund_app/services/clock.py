"""Clock collaborator supplying the current time to the engine."""

from abc import ABC, abstractmethod
from typing import Optional

from ..utils.time import current_timestamp


class Clock(ABC):
    """Source of monotonic, non-decreasing integer UTC seconds."""

    @abstractmethod
    def now(self) -> int:
        """Return the current timestamp."""
        pass


class SystemClock(Clock):
    """Wall-clock time, clamped so it never runs backwards."""

    def __init__(self):
        self._last = 0

    def now(self) -> int:
        self._last = max(self._last, current_timestamp())
        return self._last


class ManualClock(Clock):
    """Settable clock for tests, demos and replay."""

    def __init__(self, start: Optional[int] = None):
        self._now = current_timestamp() if start is None else start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new time."""
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        self._now += seconds
        return self._now

    def set(self, timestamp: int) -> None:
        """Jump to an absolute timestamp at or after the current one."""
        if timestamp < self._now:
            raise ValueError("Clock cannot move backwards")
        self._now = timestamp
