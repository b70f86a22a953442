"""
Clock -- injectable time source for the ledger and ordering code.

Responsibility:
    Every ``created_at`` stamped on a stock movement and every "today" used
    by the daily reset comes from a Clock.  Nothing else in the kernel calls
    ``datetime.now()``.

Architecture position:
    Kernel > Domain.  SystemClock is the one place that reads wall time.

Invariants enforced:
    - ``now()`` is always timezone-aware.  DeterministicClock refuses a
      naive starting point, since a naive instant cannot be placed on a
      local calendar day.
    - ``now_utc()`` is ``now()`` normalized to UTC.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


def _aware(moment: datetime) -> datetime:
    if moment.tzinfo is None or moment.utcoffset() is None:
        raise ValueError(f"clock time must be timezone-aware, got {moment!r}")
    return moment


class Clock(ABC):
    """Source of the current instant."""

    @abstractmethod
    def now(self) -> datetime:
        ...

    def now_utc(self) -> datetime:
        return self.now().astimezone(timezone.utc)


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock frozen at a chosen instant until moved.

    Tests use it to stamp movements on either side of local midnight and to
    pin the daily window a projection is folded over.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._current = _aware(
            fixed_time or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        )

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = _aware(time)

    def advance(self, seconds: int = 1) -> None:
        self._current = self._current + timedelta(seconds=seconds)

    def tick(self) -> datetime:
        """Advance by one second and return the new instant."""
        self.advance(1)
        return self._current
