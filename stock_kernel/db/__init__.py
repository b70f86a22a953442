"""Database layer - engine, base classes, and types."""

from stock_kernel.db.base import UUID, Base, UUIDString
from stock_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from stock_kernel.db.types import REF_LENGTH, UTCDateTime

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "drop_tables",
    "reset_engine",
    "Base",
    "UUIDString",
    "UUID",
    "UTCDateTime",
    "REF_LENGTH",
]
