"""
Tests for the persistence layer: engine lifecycle, column types, table
constraints and the append-only guard on stock movements.
"""

from datetime import UTC, datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError, StatementError

from stock_kernel.db.engine import (
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from stock_kernel.domain.movement import (
    MAX_ID_LENGTH,
    MAX_REFERENCE_LENGTH,
    MAX_REMARKS_LENGTH,
)
from stock_kernel.exceptions import ImmutabilityViolationError
from stock_kernel.models.request import Request, RequestItem
from stock_kernel.models.stock_movement import StockMovementModel

T0 = datetime(2024, 3, 15, 9, 0, tzinfo=UTC)


def _movement(**overrides) -> StockMovementModel:
    fields = dict(
        id=uuid4(),
        item_id="7",
        actor_id="rep1",
        movement_type="ISSUE",
        quantity=5,
        created_at=T0,
    )
    fields.update(overrides)
    return StockMovementModel(**fields)


# ---------------------------------------------------------------------------
# Engine lifecycle
# ---------------------------------------------------------------------------


class TestEngine:

    def test_uninitialized_engine_raises(self):
        reset_engine()
        with pytest.raises(RuntimeError, match="not initialized"):
            get_engine()
        with pytest.raises(RuntimeError, match="not initialized"):
            get_session()

    def test_create_tables(self, engine):
        tables = set(inspect(engine).get_table_names())
        assert {
            "stock_movements",
            "requests",
            "request_items",
            "items",
            "routes",
            "shops",
            "users",
        } <= tables

    def test_session_scope_commits(self, engine):
        with session_scope() as sess:
            sess.add(_movement())

        with session_scope() as sess:
            count = sess.execute(text("SELECT COUNT(*) FROM stock_movements")).scalar_one()
        assert count == 1

    def test_session_scope_rolls_back_on_error(self, engine):
        with pytest.raises(RuntimeError):
            with session_scope() as sess:
                sess.add(_movement())
                sess.flush()
                raise RuntimeError("abort")

        with session_scope() as sess:
            count = sess.execute(text("SELECT COUNT(*) FROM stock_movements")).scalar_one()
        assert count == 0

    def test_reinit_replaces_engine(self, engine):
        second = init_engine_from_url("sqlite://")
        assert get_engine() is second
        assert second is not engine


# ---------------------------------------------------------------------------
# UTCDateTime
# ---------------------------------------------------------------------------


class TestUTCDateTime:

    def test_aware_value_round_trips_as_utc(self, session):
        colombo = timezone(timedelta(hours=5, minutes=30))
        local = datetime(2024, 3, 15, 14, 30, tzinfo=colombo)
        row = _movement(created_at=local)
        session.add(row)
        session.commit()
        session.expire_all()

        stored = session.get(StockMovementModel, row.id)
        assert stored.created_at == datetime(2024, 3, 15, 9, 0, tzinfo=UTC)
        assert stored.created_at.utcoffset() == timedelta(0)

    def test_naive_value_rejected(self, session):
        session.add(_movement(created_at=datetime(2024, 3, 15, 9, 0)))
        with pytest.raises(StatementError, match="Naive datetime"):
            session.flush()


# ---------------------------------------------------------------------------
# Constraints
# ---------------------------------------------------------------------------


class TestConstraints:

    @pytest.mark.parametrize(
        "column, limit",
        [
            ("item_id", MAX_ID_LENGTH),
            ("actor_id", MAX_ID_LENGTH),
            ("counterparty_id", MAX_ID_LENGTH),
            ("reference", MAX_REFERENCE_LENGTH),
            ("remarks", MAX_REMARKS_LENGTH),
        ],
    )
    def test_column_widths_match_input_limits(self, column, limit):
        assert StockMovementModel.__table__.c[column].type.length == limit

    def test_zero_quantity_rejected_by_database(self, session):
        session.add(_movement(quantity=0))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_unknown_movement_type_rejected_by_database(self, session):
        session.add(_movement(movement_type="OUT"))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_delivered_cannot_exceed_requested(self, session):
        request = Request(
            id=uuid4(),
            shop_id="shopA",
            status="pending",
            request_date=T0.date(),
            created_at=T0,
        )
        request.items = [RequestItem(line_no=1, item_id="7", requested_qty=5, delivered_qty=6)]
        session.add(request)
        with pytest.raises(IntegrityError):
            session.flush()


# ---------------------------------------------------------------------------
# Append-only guard
# ---------------------------------------------------------------------------


class TestImmutability:

    def test_update_blocked(self, session):
        row = _movement()
        session.add(row)
        session.flush()

        row.quantity = 500
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        assert exc_info.value.entity_type == "StockMovement"
        assert exc_info.value.entity_id == str(row.id)

    def test_delete_blocked(self, session):
        row = _movement()
        session.add(row)
        session.flush()

        session.delete(row)
        with pytest.raises(ImmutabilityViolationError, match="cannot be deleted"):
            session.flush()

    def test_violation_is_logged(self, session, captured_logs):
        row = _movement()
        session.add(row)
        session.flush()

        row.remarks = "edited"
        with pytest.raises(ImmutabilityViolationError):
            session.flush()

        blocked = [r for r in captured_logs() if r["message"] == "immutability_violation_blocked"]
        assert blocked[0]["operation"] == "UPDATE"
