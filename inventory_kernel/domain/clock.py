"""
Injectable time source.

Services take a Clock in their constructor and never read the wall clock
themselves, so adjustment timestamps, order creation times and event
payloads are reproducible under DeterministicClock.
"""

from abc import ABC, abstractmethod
from datetime import datetime, time, timedelta, timezone


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current instant, timezone-aware UTC."""


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock that only moves when told to.

    Starts at 2024-01-01 12:00 UTC unless another start is given.
    """

    def __init__(self, start: datetime | None = None):
        self._current = start or datetime(2024, 1, 1, 12, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._current

    def set_time(self, moment: datetime) -> None:
        self._current = moment

    def advance(self, seconds: float = 1) -> datetime:
        self._current += timedelta(seconds=seconds)
        return self._current


def utc_day_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """Half-open [midnight, next midnight) UTC window containing ``moment``."""
    day = moment.astimezone(timezone.utc).date()
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)
