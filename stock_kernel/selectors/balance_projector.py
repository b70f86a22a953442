"""
Module: stock_kernel.selectors.balance_projector
Responsibility: Derives signed stock balances by folding stock movements
    over a time window.  There are no stored balances anywhere in the
    system; every balance is recomputed from the ledger on each query.
Architecture position: Kernel > Selectors.  May import from models/,
    domain/ and selectors/base.py.

Invariants enforced:
    - Sign rule: ISSUE and RETURN_IN add their quantity; TRANSFER_OUT,
      RETURN_TO_HQ, SALE and RETURN subtract it.
    - Window bounds are inclusive: ``start <= created_at <= end``.
    - No clamping.  A negative result means the upstream movements are
      inconsistent (e.g. an overdrawn transfer) and is reported as is;
      clamping is a presentation concern of the caller.
    - project_all() folds every item of an actor in one grouped query and
      agrees exactly with calling project() once per item.

Failure modes:
    - ValueError for a naive or inverted window.
    - Returns 0 / {} when no movements fall in the window.

Consistency note:
    The projection sees the session's snapshot.  A movement appended by
    another session moments earlier may be missing (eventual consistency);
    this is an accepted, documented risk rather than an error.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import case, func, select

from stock_kernel.domain.daily_reset import TimeWindow
from stock_kernel.domain.movement import INCREASING_TYPES
from stock_kernel.logging_config import get_logger
from stock_kernel.models.directory import Item
from stock_kernel.models.stock_movement import StockMovementModel
from stock_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.balance_projector")


@dataclass(frozen=True)
class CarriedItem:
    """An item an actor holds a positive quantity of."""

    item_id: str
    item_name: str
    quantity: int


_INCREASING_VALUES = sorted(t.value for t in INCREASING_TYPES)

_signed_quantity = case(
    (
        StockMovementModel.movement_type.in_(_INCREASING_VALUES),
        StockMovementModel.quantity,
    ),
    else_=-StockMovementModel.quantity,
)


class BalanceProjector(BaseSelector):
    """
    Folds ledger movements into signed balances.

    Contract:
        project(actor, item, start, end) == sum of signed quantities of the
        actor's movements for that item with start <= created_at <= end.
    """

    def _windowed(self, actor_id: str, window: TimeWindow):
        return (
            StockMovementModel.actor_id == actor_id,
            StockMovementModel.created_at >= window.start,
            StockMovementModel.created_at <= window.end,
        )

    def project(
        self,
        actor_id: str,
        item_id: str,
        window_start: datetime,
        window_end: datetime,
    ) -> int:
        """
        Signed balance of one item for one actor within a window.

        Args:
            actor_id: Representative, shop or warehouse id.
            item_id: Catalog item id.
            window_start: Inclusive lower bound on created_at.
            window_end: Inclusive upper bound on created_at.

        Returns:
            The raw signed sum (may be negative); 0 when nothing matches.
        """
        return self.project_window(actor_id, item_id, TimeWindow(window_start, window_end))

    def project_window(self, actor_id: str, item_id: str, window: TimeWindow) -> int:
        """Same as project(), taking a TimeWindow."""
        stmt = select(func.coalesce(func.sum(_signed_quantity), 0)).where(
            *self._windowed(actor_id, window),
            StockMovementModel.item_id == item_id,
        )
        balance = int(self.session.execute(stmt).scalar_one())

        logger.debug(
            "balance_projected",
            extra={
                "actor_id": actor_id,
                "item_id": item_id,
                "window_start": window.start,
                "window_end": window.end,
                "balance": balance,
            },
        )
        return balance

    def project_all(
        self,
        actor_id: str,
        window_start: datetime,
        window_end: datetime,
    ) -> dict[str, int]:
        """
        Signed balances of every item the actor moved within a window.

        Items whose movements cancel out are present with a 0 balance.
        Items with no movement in the window are absent.
        """
        return self.project_all_window(actor_id, TimeWindow(window_start, window_end))

    def project_all_window(self, actor_id: str, window: TimeWindow) -> dict[str, int]:
        """Same as project_all(), taking a TimeWindow."""
        stmt = (
            select(StockMovementModel.item_id, func.sum(_signed_quantity))
            .where(*self._windowed(actor_id, window))
            .group_by(StockMovementModel.item_id)
            .order_by(StockMovementModel.item_id)
        )
        balances = {item_id: int(total) for item_id, total in self.session.execute(stmt)}

        logger.debug(
            "balances_projected",
            extra={
                "actor_id": actor_id,
                "window_start": window.start,
                "window_end": window.end,
                "item_count": len(balances),
            },
        )
        return balances

    def carried_stock(self, actor_id: str, window: TimeWindow) -> list[CarriedItem]:
        """
        Items with a strictly positive balance, with catalog names.

        This is the list a representative can return to the warehouse.
        Sorted by item name, then id.
        """
        positive = {
            item_id: qty
            for item_id, qty in self.project_all_window(actor_id, window).items()
            if qty > 0
        }
        names = self._item_names(positive)
        carried = [
            CarriedItem(item_id=item_id, item_name=names.get(item_id, item_id), quantity=qty)
            for item_id, qty in positive.items()
        ]
        return sorted(carried, key=lambda c: (c.item_name, c.item_id))

    def _item_names(self, item_ids: Iterable[str]) -> dict[str, str]:
        ids = list(item_ids)
        if not ids:
            return {}
        stmt = select(Item.code, Item.name).where(Item.code.in_(ids))
        return {code: name for code, name in self.session.execute(stmt)}
