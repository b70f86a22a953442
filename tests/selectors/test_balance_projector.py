"""
Tests for BalanceProjector.

Covers sign consistency, inclusive window bounds, the daily reset and the
carried-stock view.
"""

import itertools
from datetime import UTC, datetime, timedelta

import pytest

from stock_kernel.domain.daily_reset import DailyResetPolicy, TimeWindow
from stock_kernel.selectors.balance_projector import CarriedItem
from tests.conftest import ITEM_1, ITEM_7, ITEM_9, NOW, OTHER_REP_ID, REP_ID

MIDNIGHT = datetime(2024, 3, 15, tzinfo=UTC)
TODAY = TimeWindow(MIDNIGHT, NOW)


class TestSignConsistency:
    """Increasing types add, decreasing types subtract, order irrelevant."""

    MOVEMENTS = [
        ("ISSUE", 30),
        ("RETURN_IN", 5),
        ("TRANSFER_OUT", 8),
        ("RETURN_TO_HQ", 4),
        ("SALE", 2),
        ("RETURN", 1),
    ]

    @pytest.mark.parametrize("order", list(itertools.permutations(range(6)))[::97])
    def test_projection_is_order_independent(self, projector, record_movement, order):
        for offset, index in enumerate(order):
            movement_type, qty = self.MOVEMENTS[index]
            record_movement(movement_type, qty, at=MIDNIGHT + timedelta(minutes=offset))

        # (30 + 5) - (8 + 4 + 2 + 1)
        assert projector.project(REP_ID, ITEM_7, MIDNIGHT, NOW) == 20

    def test_no_movements_is_zero(self, projector):
        assert projector.project(REP_ID, ITEM_7, MIDNIGHT, NOW) == 0

    def test_overdraft_is_negative(self, projector, record_movement):
        record_movement("TRANSFER_OUT", 20, at=NOW - timedelta(hours=1))
        assert projector.project(REP_ID, ITEM_7, MIDNIGHT, NOW) == -20

    def test_other_actor_and_item_ignored(self, projector, record_movement):
        record_movement("ISSUE", 50)
        record_movement("ISSUE", 11, actor_id=OTHER_REP_ID)
        record_movement("ISSUE", 13, item_id=ITEM_9)
        assert projector.project(REP_ID, ITEM_7, MIDNIGHT, NOW) == 50


class TestWindowBounds:

    def test_movement_at_start_counts(self, projector, record_movement):
        record_movement("ISSUE", 5, at=MIDNIGHT)
        assert projector.project_window(REP_ID, ITEM_7, TODAY) == 5

    def test_movement_at_end_counts(self, projector, record_movement):
        record_movement("ISSUE", 5, at=NOW)
        assert projector.project_window(REP_ID, ITEM_7, TODAY) == 5

    def test_one_second_before_start_excluded(self, projector, record_movement):
        record_movement("ISSUE", 5, at=MIDNIGHT - timedelta(seconds=1))
        assert projector.project_window(REP_ID, ITEM_7, TODAY) == 0

    def test_one_second_after_end_excluded(self, projector, record_movement):
        record_movement("ISSUE", 5, at=NOW + timedelta(seconds=1))
        assert projector.project_window(REP_ID, ITEM_7, TODAY) == 0

    def test_naive_bounds_rejected(self, projector):
        with pytest.raises(ValueError):
            projector.project(REP_ID, ITEM_7, datetime(2024, 3, 15), NOW)

    def test_window_in_another_offset(self, projector, record_movement):
        """Bounds given in local time compare as instants."""
        policy = DailyResetPolicy("Asia/Colombo")
        # 18:00 UTC on the 14th is 23:30 on the 14th in Colombo
        record_movement("ISSUE", 50, at=datetime(2024, 3, 14, 18, 0, tzinfo=UTC))
        # 19:00 UTC on the 14th is 00:30 on the 15th in Colombo
        record_movement("ISSUE", 7, at=datetime(2024, 3, 14, 19, 0, tzinfo=UTC))

        window = policy.current_window(NOW)
        assert projector.project_window(REP_ID, ITEM_7, window) == 7


class TestDailyReset:

    def test_yesterdays_issue_drops_out(self, projector, record_movement, reset_policy):
        record_movement("ISSUE", 50, at=NOW - timedelta(days=1))
        window = reset_policy.current_window(NOW)
        assert projector.project_window(REP_ID, ITEM_7, window) == 0

    def test_cumulative_window_keeps_history(self, projector, record_movement, reset_policy):
        record_movement("ISSUE", 50, at=NOW - timedelta(days=1))
        record_movement("TRANSFER_OUT", 20)
        window = reset_policy.cumulative_window(NOW)
        assert projector.project_window(REP_ID, ITEM_7, window) == 30


class TestProjectAll:

    def test_per_item_balances(self, projector, record_movement):
        record_movement("ISSUE", 50)
        record_movement("TRANSFER_OUT", 20)
        record_movement("ISSUE", 6, item_id=ITEM_1)
        record_movement("ISSUE", 3, item_id=ITEM_9)
        record_movement("RETURN_TO_HQ", 3, item_id=ITEM_9)

        assert projector.project_all(REP_ID, MIDNIGHT, NOW) == {
            ITEM_1: 6,
            ITEM_7: 30,
            ITEM_9: 0,
        }

    def test_matches_single_item_projection(self, projector, record_movement):
        record_movement("ISSUE", 50, at=NOW - timedelta(hours=2))
        record_movement("SALE", 9, at=NOW - timedelta(hours=1))
        record_movement("RETURN_IN", 2, item_id=ITEM_1)

        balances = projector.project_all_window(REP_ID, TODAY)
        for item_id, balance in balances.items():
            assert projector.project_window(REP_ID, item_id, TODAY) == balance

    def test_empty(self, projector):
        assert projector.project_all_window(REP_ID, TODAY) == {}


class TestCarriedStock:

    def test_only_positive_balances_sorted_by_name(self, projector, record_movement, catalog):
        record_movement("ISSUE", 10, item_id=ITEM_1)   # Ceylon Tea 100g
        record_movement("ISSUE", 4, item_id=ITEM_7)    # Biscuits 200g
        record_movement("ISSUE", 2, item_id=ITEM_9)
        record_movement("TRANSFER_OUT", 2, item_id=ITEM_9)
        record_movement("TRANSFER_OUT", 5, item_id="unknown-item")

        assert projector.carried_stock(REP_ID, TODAY) == [
            CarriedItem(ITEM_7, "Biscuits 200g", 4),
            CarriedItem(ITEM_1, "Ceylon Tea 100g", 10),
        ]

    def test_uncatalogued_item_uses_id(self, projector, record_movement):
        record_movement("ISSUE", 3, item_id="X-1")
        assert projector.carried_stock(REP_ID, TODAY) == [CarriedItem("X-1", "X-1", 3)]
