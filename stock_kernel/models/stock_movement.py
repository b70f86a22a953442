"""
Module: stock_kernel.models.stock_movement
Responsibility: ORM persistence for stock movements -- the immutable events
    every balance is derived from.
Architecture position: Kernel > Models.  May import from db/ and domain/.

Invariants enforced:
    - Append-only: UPDATE and DELETE are blocked by the listeners in
      db/immutability.py.
    - quantity > 0 (CHECK constraint as a second line behind
      StockMovementInput validation).
    - movement_type is one of the six recognized values (CHECK constraint).

Failure modes:
    - IntegrityError on a CHECK violation if a row bypasses the ledger.
    - ImmutabilityViolationError on any UPDATE/DELETE flush.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import Base
from stock_kernel.db.types import (
    LONG_TEXT_LENGTH,
    REF_LENGTH,
    SHORT_TEXT_LENGTH,
    UTCDateTime,
)
from stock_kernel.domain.movement import MovementType, StockMovement

_TYPE_LIST = ", ".join(f"'{t.value}'" for t in MovementType)


class StockMovementModel(Base):
    """
    One directional stock movement recorded on one actor.

    Contract:
        Written once by TransactionLedger and never modified.

    Non-goals:
        - No shop-side mirror row is written for a TRANSFER_OUT;
          ``counterparty_id`` records the shop for reference only.
    """

    __tablename__ = "stock_movements"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_movement_quantity_positive"),
        CheckConstraint(
            f"movement_type IN ({_TYPE_LIST})",
            name="ck_stock_movement_type",
        ),
        Index("idx_movement_actor_item_created", "actor_id", "item_id", "created_at"),
        Index("idx_movement_actor_created", "actor_id", "created_at"),
    )

    item_id: Mapped[str] = mapped_column(String(REF_LENGTH), nullable=False)

    # Representative, shop or warehouse the movement is attributed to
    actor_id: Mapped[str] = mapped_column(String(REF_LENGTH), nullable=False)

    movement_type: Mapped[MovementType] = mapped_column(
        String(20),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    # Other side of the movement (shop for TRANSFER_OUT), informational
    counterparty_id: Mapped[str | None] = mapped_column(String(REF_LENGTH), nullable=True)

    reference: Mapped[str | None] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=True)

    remarks: Mapped[str | None] = mapped_column(String(LONG_TEXT_LENGTH), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<StockMovement {self.movement_type} {self.quantity} "
            f"item={self.item_id} actor={self.actor_id}>"
        )

    def to_dto(self) -> StockMovement:
        return StockMovement(
            id=self.id,
            item_id=self.item_id,
            actor_id=self.actor_id,
            movement_type=MovementType.parse(self.movement_type),
            quantity=self.quantity,
            created_at=self.created_at,
            counterparty_id=self.counterparty_id,
            reference=self.reference,
            remarks=self.remarks,
        )
