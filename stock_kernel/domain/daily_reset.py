"""
DailyResetPolicy -- which slice of the ledger a balance is folded over.

Responsibility:
    Turns "now" into the ``[start, end]`` window used by BalanceProjector.
    Representative-carried stock is folded over today only (local midnight
    to now); warehouse and shop balances are cumulative (epoch to now).

Architecture position:
    Kernel > Domain -- pure, zero I/O apart from ``zoneinfo`` lookups.
    Zone names are validated when the policy is constructed.

Invariants enforced:
    - ``start`` is 00:00:00 local time of the calendar day containing
      ``now``, in the actor's operating timezone.
    - ``end`` is ``now`` itself.
    - A representative's vehicle stock starts each day at zero from the
      ledger's point of view.  Stock issued yesterday and never returned
      drops out of today's projection even though no return movement was
      recorded; the movement itself stays in the ledger for audit.

Failure modes:
    - ValueError on a naive ``now`` (an instant without an offset cannot be
      placed on a local calendar day).
    - zoneinfo.ZoneInfoNotFoundError on an unknown IANA timezone name.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, time, timezone, tzinfo
from enum import Enum
from zoneinfo import ZoneInfo

# Start of the unbounded window for cumulative balances
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _require_aware(moment: datetime) -> None:
    if moment.tzinfo is None or moment.utcoffset() is None:
        raise ValueError(f"timestamp must be timezone-aware, got {moment!r}")


class ActorKind(str, Enum):
    """Kinds of inventory holders."""

    REPRESENTATIVE = "representative"
    SHOP = "shop"
    WAREHOUSE = "warehouse"


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive ``[start, end]`` range of movement timestamps."""

    start: datetime
    end: datetime

    def __post_init__(self):
        _require_aware(self.start)
        _require_aware(self.end)
        if self.start > self.end:
            raise ValueError(
                f"window start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    def __iter__(self):
        # Allows ``start, end = policy.current_window(now)``
        yield self.start
        yield self.end


@dataclass(frozen=True)
class DailyResetPolicy:
    """
    Window policy for balance projections.

    ``timezone_name`` is the default operating timezone; ``actor_timezones``
    overrides it for individual actors that operate elsewhere.  Overrides
    may be given as a mapping and are stored as sorted ``(actor_id, zone)``
    pairs, so policies compare and hash by value.
    """

    timezone_name: str = "UTC"
    actor_timezones: Mapping[str, str] | tuple[tuple[str, str], ...] = ()

    def __post_init__(self):
        pairs = (
            self.actor_timezones.items()
            if isinstance(self.actor_timezones, Mapping)
            else self.actor_timezones
        )
        object.__setattr__(self, "actor_timezones", tuple(sorted(pairs)))
        # Fail fast on unknown zone names
        ZoneInfo(self.timezone_name)
        for _, name in self.actor_timezones:
            ZoneInfo(name)

    def timezone_for(self, actor_id: str | None = None) -> tzinfo:
        name = self.timezone_name
        if actor_id is not None:
            name = dict(self.actor_timezones).get(actor_id, name)
        return ZoneInfo(name)

    def local_midnight(self, now: datetime, actor_id: str | None = None) -> datetime:
        """00:00:00 of the local calendar day containing ``now``."""
        _require_aware(now)
        tz = self.timezone_for(actor_id)
        local_day = now.astimezone(tz).date()
        return datetime.combine(local_day, time.min, tzinfo=tz)

    def current_window(self, now: datetime, actor_id: str | None = None) -> TimeWindow:
        """Daily window used for representative-carried stock."""
        return TimeWindow(start=self.local_midnight(now, actor_id), end=now)

    def cumulative_window(self, now: datetime) -> TimeWindow:
        """Unbounded window used for warehouse and shop balances."""
        _require_aware(now)
        return TimeWindow(start=EPOCH, end=now)

    def window_for(
        self,
        actor_kind: ActorKind,
        now: datetime,
        actor_id: str | None = None,
    ) -> TimeWindow:
        """Pick the window an actor's balance must be projected over."""
        if actor_kind is ActorKind.REPRESENTATIVE:
            return self.current_window(now, actor_id)
        return self.cumulative_window(now)
