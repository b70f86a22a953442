"""
Pytest fixtures for the stock ledger test suite.

Provides:
- An in-memory SQLite database per test (fresh schema, no cleanup needed)
- Deterministic clock and reset policy
- Ledger, workflow, projector, matcher and ordering service fixtures
- Catalog and shop-assignment seed data
- Structured log capture
"""

import json
import logging
from datetime import UTC, datetime
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from stock_kernel.db.engine import (
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from stock_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from stock_kernel.domain.clock import DeterministicClock
from stock_kernel.domain.daily_reset import DailyResetPolicy
from stock_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from stock_kernel.models.directory import Item, Route, Shop
from stock_kernel.selectors.balance_projector import BalanceProjector
from stock_kernel.services.fulfillment_matcher import RequestFulfillmentMatcher
from stock_kernel.services.transaction_ledger import TransactionLedger
from stock_kernel.services.transfer_workflow import TransferWorkflow
from stock_modules.ordering.service import OrderingService

# ---------------------------------------------------------------------------
# Well-known identifiers
# ---------------------------------------------------------------------------

REP_ID = "rep1"
OTHER_REP_ID = "rep2"
SHOP_A = "shopA"
SHOP_B = "shopB"
SHOP_C = "shopC"
ROUTE_ID = "route-north"
ITEM_1 = "1"
ITEM_7 = "7"
ITEM_9 = "9"

# 10:00 UTC, mid-morning on a working day
NOW = datetime(2024, 3, 15, 10, 0, 0, tzinfo=UTC)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture stock_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ledger):
            ledger.append(...)
            logs = captured_logs()
            assert any(r["message"] == "movement_appended" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("stock_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    """A fresh in-memory SQLite database with every table created."""
    reset_engine()
    eng = init_engine_from_url("sqlite://")
    create_tables()
    register_immutability_listeners()
    yield eng
    unregister_immutability_listeners()
    reset_engine()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    """Provide a database session for testing."""
    sess = get_session()
    yield sess
    sess.close()


# =============================================================================
# Clock and policy fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock fixed at NOW."""
    return DeterministicClock(NOW)


@pytest.fixture
def reset_policy():
    """Daily reset at UTC midnight."""
    return DailyResetPolicy(timezone_name="UTC")


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def ledger(session, deterministic_clock) -> TransactionLedger:
    return TransactionLedger(session, deterministic_clock)


@pytest.fixture
def workflow(ledger) -> TransferWorkflow:
    return TransferWorkflow(ledger)


@pytest.fixture
def projector(session) -> BalanceProjector:
    return BalanceProjector(session)


@pytest.fixture
def matcher(session, reset_policy) -> RequestFulfillmentMatcher:
    return RequestFulfillmentMatcher(session, reset_policy)


@pytest.fixture
def ordering_service(session, deterministic_clock, reset_policy) -> OrderingService:
    return OrderingService(session, deterministic_clock, reset_policy)


# =============================================================================
# Seed data
# =============================================================================


@pytest.fixture
def catalog(session):
    """Items 1, 7 and 9 with display names."""
    items = [
        Item(code=ITEM_1, name="Ceylon Tea 100g"),
        Item(code=ITEM_7, name="Biscuits 200g"),
        Item(code=ITEM_9, name="Soap Bar"),
    ]
    session.add_all(items)
    session.flush()
    return {item.code: item.name for item in items}


@pytest.fixture
def shop_assignments(session):
    """
    rep1 serves shopA directly and shopB through route-north.
    shopC belongs to rep2.
    """
    session.add_all([
        Route(code=ROUTE_ID, name="North", rep_id=REP_ID),
        Shop(code=SHOP_A, name="Shop A", rep_id=REP_ID, route_id=None),
        Shop(code=SHOP_B, name="Shop B", rep_id=None, route_id=ROUTE_ID),
        Shop(code=SHOP_C, name="Shop C", rep_id=OTHER_REP_ID, route_id=None),
    ])
    session.flush()


@pytest.fixture
def record_movement(ledger, deterministic_clock):
    """
    Append a movement stamped at a chosen instant.

    The clock is moved to ``at`` for the append and back to NOW afterwards.

    Usage::

        record_movement("ISSUE", 50, at=NOW - timedelta(hours=1))
    """

    def _record(
        movement_type: str,
        quantity: int,
        at: datetime = NOW,
        item_id: str = ITEM_7,
        actor_id: str = REP_ID,
        counterparty_id: str | None = None,
    ):
        deterministic_clock.set_time(at)
        try:
            return ledger.append(
                {
                    "item_id": item_id,
                    "actor_id": actor_id,
                    "movement_type": movement_type,
                    "quantity": quantity,
                    "counterparty_id": counterparty_id,
                }
            )
        finally:
            deterministic_clock.set_time(NOW)

    return _record
