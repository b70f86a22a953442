"""
Module: stock_kernel.db.types
Responsibility: Column types and annotated aliases shared by every model.
Architecture position: Kernel > DB.  MUST NOT import from models/, domain/,
    services/, or selectors/.

Invariants enforced:
    - Timestamps are written in UTC.  A naive datetime is rejected at bind
      time rather than silently interpreted in the server's local zone.
    - Timestamps are read back timezone-aware, even from backends (SQLite)
      that drop offsets on storage.  Window comparisons therefore behave
      identically across backends.
"""

from datetime import timezone
from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """DateTime normalized to UTC on the way in and tz-aware on the way out."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError(f"Naive datetime not allowed: {value!r}")
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


# Opaque identifiers supplied by collaborators (items, reps, shops, warehouse)
REF_LENGTH = 64

SHORT_TEXT_LENGTH = 50

LONG_TEXT_LENGTH = 1000
