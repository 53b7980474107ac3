import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    # Naive UTC; SQLite drops tzinfo on read, so everything stored is naive.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def elapsed_seconds(since: Optional[datetime], until: datetime) -> int:
    """Whole seconds between two readings, never negative."""
    if since is None:
        return 0
    return max(0, int((until - since).total_seconds()))


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        pass


class SystemClock(Clock):
    """Wall clock that never reports a time earlier than its previous reading."""

    def __init__(self):
        self._last: Optional[datetime] = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            current = utcnow()
            if self._last is not None and current < self._last:
                current = self._last
            self._last = current
            return current


class ManualClock(Clock):
    """Settable clock for deterministic tests and replays."""

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2025, 1, 1, 9, 0, 0)
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def advance(self, seconds: float = 0, minutes: float = 0) -> datetime:
        with self._lock:
            self._now = self._now + timedelta(seconds=seconds, minutes=minutes)
            return self._now

    def set(self, value: datetime) -> None:
        with self._lock:
            if value < self._now:
                raise ValueError("ManualClock cannot move backwards")
            self._now = value


system_clock = SystemClock()
