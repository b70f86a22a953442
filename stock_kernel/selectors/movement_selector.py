"""
Module: stock_kernel.selectors.movement_selector
Responsibility: Read-only access to the raw movement history of an actor,
    newest first, as frozen StockMovement DTOs.
Architecture position: Kernel > Selectors.
"""

from datetime import datetime

from sqlalchemy import select

from stock_kernel.domain.daily_reset import TimeWindow
from stock_kernel.domain.movement import StockMovement
from stock_kernel.models.stock_movement import StockMovementModel
from stock_kernel.selectors.base import BaseSelector


class MovementSelector(BaseSelector):
    """Movement history queries."""

    def history(
        self,
        actor_id: str,
        item_id: str | None = None,
        window: TimeWindow | None = None,
        limit: int | None = None,
    ) -> list[StockMovement]:
        """
        Movements recorded on an actor, newest first.

        Args:
            actor_id: Actor whose movements to list.
            item_id: Optional item filter.
            window: Optional inclusive created_at window.
            limit: Maximum number of movements.
        """
        stmt = select(StockMovementModel).where(StockMovementModel.actor_id == actor_id)

        if item_id is not None:
            stmt = stmt.where(StockMovementModel.item_id == item_id)

        if window is not None:
            stmt = stmt.where(
                StockMovementModel.created_at >= window.start,
                StockMovementModel.created_at <= window.end,
            )

        stmt = stmt.order_by(
            StockMovementModel.created_at.desc(),
            StockMovementModel.id,
        )

        if limit is not None:
            stmt = stmt.limit(limit)

        return [row.to_dto() for row in self.session.execute(stmt).scalars()]

    def between(self, start: datetime, end: datetime) -> list[StockMovement]:
        """Every movement in an inclusive window, oldest first (audit export)."""
        window = TimeWindow(start, end)
        stmt = (
            select(StockMovementModel)
            .where(
                StockMovementModel.created_at >= window.start,
                StockMovementModel.created_at <= window.end,
            )
            .order_by(StockMovementModel.created_at, StockMovementModel.id)
        )
        return [row.to_dto() for row in self.session.execute(stmt).scalars()]
