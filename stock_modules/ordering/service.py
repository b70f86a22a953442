"""
Ordering Module Service (``stock_modules.ordering.service``).

Responsibility
--------------
Submits shop requests, records deliveries against them and cancels them.
A delivery is both a request update (``delivered_qty``) and a stock
movement (``TRANSFER_OUT`` on the representative), written in the same
transaction.

Architecture
------------
Layer: **Modules** -- stateful orchestration wrapper over the kernel's
``TransferWorkflow``, ``BalanceProjector`` and ``DailyResetPolicy``.

Invariants
----------
- Each public method owns its transaction boundary: commit on success,
  rollback and re-raise on failure.
- At most one pending request per shop per local calendar day, in the
  shop's own timezone when it has an override.  Checked with a select
  before the insert; two near-simultaneous submissions can both pass the
  check.  This race is accepted.
- A delivery never exceeds the item's pending quantity on the request nor
  the representative's carried stock for today.
- Deliveries fill the request's lines for the item in line order.

Failure Modes
-------------
- ``ValidationError`` for malformed input.
- ``DuplicatePendingRequestError``, ``RequestNotFoundError``,
  ``RequestNotPendingError``, ``DeliveryExceedsPendingError``,
  ``InsufficientCarriedStockError`` for rule violations.
- ``PersistenceError`` from the ledger propagates after rollback.

Usage::

    service = OrderingService(session, clock, reset_policy)
    info = service.submit_request("shop-1", "salesman-1",
                                  [RequestLine("item-7", 10)])
    service.deliver(info.id, "item-7", "rep-1", 4)
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.daily_reset import DailyResetPolicy
from stock_kernel.exceptions import (
    DeliveryExceedsPendingError,
    DuplicatePendingRequestError,
    InsufficientCarriedStockError,
    RequestNotFoundError,
    RequestNotPendingError,
    ValidationError,
)
from stock_kernel.logging_config import LogContext, get_logger
from stock_kernel.models.request import Request, RequestItem, RequestStatus
from stock_kernel.selectors.balance_projector import BalanceProjector
from stock_kernel.services.transaction_ledger import TransactionLedger
from stock_kernel.services.transfer_workflow import TransferWorkflow
from stock_modules.ordering.models import (
    DeliveryAllocation,
    DeliveryResult,
    RequestInfo,
    RequestLine,
    RequestLineInfo,
)
from stock_modules.ordering.workflows import (
    ALL_LINES_DELIVERED,
    LINES_OUTSTANDING,
    REQUEST_WORKFLOW,
)

logger = get_logger("modules.ordering.service")


def _to_info(request: Request) -> RequestInfo:
    return RequestInfo(
        id=str(request.id),
        shop_id=request.shop_id,
        salesman_id=request.salesman_id,
        status=RequestStatus(request.status),
        request_date=request.request_date,
        created_at=request.created_at,
        lines=tuple(
            RequestLineInfo(
                line_no=item.line_no,
                item_id=item.item_id,
                requested_qty=item.requested_qty,
                delivered_qty=item.delivered_qty or 0,
            )
            for item in request.items
        ),
    )


class OrderingService:
    """
    Shop request lifecycle.

    Transaction boundary: this service commits on success, rolls back on
    failure.  The ledger append inside deliver() only flushes, so the
    request update and the TRANSFER_OUT movement commit together.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        reset_policy: DailyResetPolicy | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._policy = reset_policy or DailyResetPolicy()
        self._workflow = TransferWorkflow(TransactionLedger(session, self._clock))
        self._projector = BalanceProjector(session)

    # =========================================================================
    # Queries
    # =========================================================================

    def _load(self, request_id: str | UUID) -> Request:
        try:
            key = request_id if isinstance(request_id, UUID) else UUID(str(request_id))
        except ValueError:
            raise RequestNotFoundError(str(request_id)) from None
        request = self._session.get(Request, key)
        if request is None:
            raise RequestNotFoundError(str(request_id))
        return request

    def get_request(self, request_id: str | UUID) -> RequestInfo:
        """
        Get a request with its lines.

        Raises:
            RequestNotFoundError: If the request doesn't exist.
        """
        return _to_info(self._load(request_id))

    def find_pending_for_day(self, shop_id: str) -> RequestInfo | None:
        """The shop's pending request for today's local calendar day, if any."""
        day = self._policy.local_midnight(self._clock.now(), shop_id).date()
        stmt = select(Request).where(
            Request.shop_id == shop_id,
            Request.status == RequestStatus.PENDING.value,
            Request.request_date == day,
        )
        request = self._session.execute(stmt).scalars().first()
        return _to_info(request) if request else None

    # =========================================================================
    # Submission
    # =========================================================================

    def submit_request(
        self,
        shop_id: str,
        salesman_id: str | None,
        lines: Sequence[RequestLine],
    ) -> RequestInfo:
        """
        Create a pending request and its lines together.

        Preconditions:
            - ``shop_id`` is non-blank and ``lines`` is non-empty.
            - The shop has no pending request for today's local date.

        Raises:
            ValidationError: Blank shop id or no lines.
            DuplicatePendingRequestError: A pending request exists today.
        """
        if not isinstance(shop_id, str) or not shop_id.strip():
            raise ValidationError(field="shop_id", value=shop_id, reason="is required")
        if not lines:
            raise ValidationError(field="lines", value=lines, reason="at least one line is required")

        now = self._clock.now()
        day = self._policy.local_midnight(now, shop_id).date()

        try:
            existing = self.find_pending_for_day(shop_id)
            if existing is not None:
                logger.warning(
                    "request_duplicate_rejected",
                    extra={"shop_id": shop_id, "day": day.isoformat(), "existing": existing.id},
                )
                raise DuplicatePendingRequestError(shop_id, day.isoformat(), existing.id)

            request = Request(
                id=uuid4(),
                shop_id=shop_id,
                salesman_id=salesman_id,
                status=RequestStatus.PENDING.value,
                request_date=day,
                created_at=now,
            )
            request.items = [
                RequestItem(
                    id=uuid4(),
                    line_no=index,
                    item_id=line.item_id,
                    requested_qty=line.qty,
                    delivered_qty=0,
                )
                for index, line in enumerate(lines, start=1)
            ]
            self._session.add(request)
            self._session.flush()
            info = _to_info(request)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        with LogContext.bind(request_id=info.id):
            logger.info(
                "request_submitted",
                extra={
                    "shop_id": shop_id,
                    "salesman_id": salesman_id,
                    "line_count": len(info.lines),
                    "request_date": day.isoformat(),
                },
            )
        return info

    # =========================================================================
    # Delivery
    # =========================================================================

    def deliver(
        self,
        request_id: str | UUID,
        item_id: str,
        rep_id: str,
        qty: int,
    ) -> DeliveryResult:
        """
        Deliver ``qty`` units of an item to the request's shop.

        Postconditions:
            - The request's lines for the item are filled in line order.
            - One TRANSFER_OUT movement of ``qty`` is recorded on the rep,
              with the shop as counterparty and the request id as reference.
            - The request becomes ``fulfilled`` once no line is pending.

        Raises:
            ValidationError: qty is not a positive integer.
            RequestNotFoundError / RequestNotPendingError
            DeliveryExceedsPendingError: qty above the item's pending total.
            InsufficientCarriedStockError: qty above the rep's stock today.
        """
        if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
            raise ValidationError(field="qty", value=qty, reason="must be a positive integer")

        try:
            request = self._load(request_id)
            status = RequestStatus(request.status)
            if not REQUEST_WORKFLOW.transitions_for(status.value, "deliver"):
                raise RequestNotPendingError(str(request.id), status.value)

            open_lines = [
                line for line in request.items
                if line.item_id == item_id and line.pending_qty > 0
            ]
            pending = sum(line.pending_qty for line in open_lines)
            if qty > pending:
                raise DeliveryExceedsPendingError(str(request.id), item_id, qty, pending)

            now = self._clock.now()
            window = self._policy.current_window(now, rep_id)
            available = max(0, self._projector.project_window(rep_id, item_id, window))
            if qty > available:
                raise InsufficientCarriedStockError(rep_id, item_id, qty, available)

            allocations = []
            remaining = qty
            for line in open_lines:
                if remaining <= 0:
                    break
                take = min(remaining, line.pending_qty)
                line.delivered_qty = (line.delivered_qty or 0) + take
                allocations.append(DeliveryAllocation(line_no=line.line_no, quantity=take))
                remaining -= take

            movement = self._workflow.transfer_to_shop(
                item_id,
                rep_id,
                request.shop_id,
                qty,
                reference=str(request.id),
                remarks="Delivery against shop request",
            )

            guard = (
                ALL_LINES_DELIVERED
                if all(line.pending_qty == 0 for line in request.items)
                else LINES_OUTSTANDING
            )
            transition = next(
                t for t in REQUEST_WORKFLOW.transitions_for(status.value, "deliver")
                if t.guard == guard
            )
            request.status = transition.to_state
            self._session.flush()
            info = _to_info(request)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        with LogContext.bind(request_id=info.id, actor_id=rep_id):
            logger.info(
                "request_delivery_recorded",
                extra={
                    "item_id": item_id,
                    "quantity": qty,
                    "movement_id": str(movement.id),
                    "request_status": info.status.value,
                },
            )
        return DeliveryResult(
            request=info,
            item_id=item_id,
            delivered_qty=qty,
            allocations=tuple(allocations),
            movement=movement,
        )

    # =========================================================================
    # Cancellation
    # =========================================================================

    def cancel_request(self, request_id: str | UUID) -> RequestInfo:
        """
        Cancel a pending request.

        Raises:
            RequestNotFoundError / RequestNotPendingError
        """
        try:
            request = self._load(request_id)
            status = RequestStatus(request.status)
            transitions = REQUEST_WORKFLOW.transitions_for(status.value, "cancel")
            if not transitions:
                raise RequestNotPendingError(str(request.id), status.value)
            request.status = transitions[0].to_state
            self._session.flush()
            info = _to_info(request)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        with LogContext.bind(request_id=info.id):
            logger.info("request_cancelled", extra={"shop_id": info.shop_id})
        return info
