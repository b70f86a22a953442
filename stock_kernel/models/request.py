"""
Module: stock_kernel.models.request
Responsibility: ORM persistence for shop orders (Request) and their lines
    (RequestItem).
Architecture position: Kernel > Models.  The rows are owned by the ordering
    workflow (stock_modules.ordering); the kernel's fulfillment matcher only
    reads them.

Invariants enforced:
    - requested_qty > 0 and 0 <= delivered_qty <= requested_qty
      (CHECK constraints), so pending_qty never goes negative.
    - A Request and its RequestItems are inserted in the same flush.

Non-goals:
    - "At most one pending request per shop per day" is NOT a database
      constraint.  OrderingService checks it before inserting, and two
      near-simultaneous submissions can both pass the check.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_kernel.db.base import Base, UUIDString
from stock_kernel.db.types import REF_LENGTH, UTCDateTime


class RequestStatus(str, Enum):
    """Lifecycle of a shop request: pending -> fulfilled | cancelled."""

    PENDING = "pending"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"


class Request(Base):
    """A shop's order."""

    __tablename__ = "requests"

    __table_args__ = (
        Index("idx_request_shop_status", "shop_id", "status"),
        Index("idx_request_shop_date", "shop_id", "request_date"),
    )

    shop_id: Mapped[str] = mapped_column(String(REF_LENGTH), nullable=False)

    # Salesman who took the order
    salesman_id: Mapped[str | None] = mapped_column(String(REF_LENGTH), nullable=True)

    status: Mapped[RequestStatus] = mapped_column(
        String(10),
        nullable=False,
        default=RequestStatus.PENDING,
    )

    # Local calendar day of the order (drives the one-per-day rule)
    request_date: Mapped[date] = mapped_column(Date, nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    items: Mapped[list[RequestItem]] = relationship(
        back_populates="request",
        order_by="RequestItem.line_no",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Request {self.id} shop={self.shop_id} status={self.status}>"

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


class RequestItem(Base):
    """One line of a shop request."""

    __tablename__ = "request_items"

    __table_args__ = (
        CheckConstraint("requested_qty > 0", name="ck_request_item_requested_positive"),
        CheckConstraint(
            "delivered_qty >= 0 AND delivered_qty <= requested_qty",
            name="ck_request_item_delivered_range",
        ),
        Index("idx_request_item_request", "request_id"),
        Index("idx_request_item_item", "item_id"),
    )

    request_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("requests.id"),
        nullable=False,
    )

    # Position within the request; deliveries are allocated in this order
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)

    item_id: Mapped[str] = mapped_column(String(REF_LENGTH), nullable=False)

    requested_qty: Mapped[int] = mapped_column(Integer, nullable=False)

    delivered_qty: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    request: Mapped[Request] = relationship(back_populates="items")

    def __repr__(self) -> str:
        return (
            f"<RequestItem item={self.item_id} "
            f"{self.delivered_qty}/{self.requested_qty}>"
        )

    @property
    def pending_qty(self) -> int:
        return self.requested_qty - (self.delivered_qty or 0)
