"""
Ordering Domain Models (``stock_modules.ordering.models``).

Frozen value objects exchanged with callers of ``OrderingService``.  They
carry NO database identity beyond plain ids and NO I/O.
"""

from dataclasses import dataclass
from datetime import date, datetime

from stock_kernel.domain.movement import StockMovement
from stock_kernel.exceptions import ValidationError
from stock_kernel.models.request import RequestStatus


@dataclass(frozen=True)
class RequestLine:
    """One line of a request being submitted."""

    item_id: str
    qty: int

    def __post_init__(self):
        if not isinstance(self.item_id, str) or not self.item_id.strip():
            raise ValidationError(field="item_id", value=self.item_id, reason="is required")
        if isinstance(self.qty, bool) or not isinstance(self.qty, int):
            raise ValidationError(field="qty", value=self.qty, reason="must be an integer")
        if self.qty <= 0:
            raise ValidationError(field="qty", value=self.qty, reason="must be positive")


@dataclass(frozen=True)
class RequestLineInfo:
    """A stored request line."""

    line_no: int
    item_id: str
    requested_qty: int
    delivered_qty: int

    @property
    def pending_qty(self) -> int:
        return self.requested_qty - self.delivered_qty


@dataclass(frozen=True)
class RequestInfo:
    """A stored request with its lines."""

    id: str
    shop_id: str
    salesman_id: str | None
    status: RequestStatus
    request_date: date
    created_at: datetime
    lines: tuple[RequestLineInfo, ...]

    @property
    def pending_qty(self) -> int:
        return sum(line.pending_qty for line in self.lines)

    @property
    def is_pending(self) -> bool:
        return self.status is RequestStatus.PENDING


@dataclass(frozen=True)
class DeliveryAllocation:
    """Units of one delivery credited to one request line."""

    line_no: int
    quantity: int


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of OrderingService.deliver()."""

    request: RequestInfo
    item_id: str
    delivered_qty: int
    allocations: tuple[DeliveryAllocation, ...]
    movement: StockMovement

    @property
    def request_completed(self) -> bool:
        return self.request.status is RequestStatus.FULFILLED
