"""
TransactionLedger -- validated, append-only writes of stock movements.

Responsibility:
    The single write path into ``stock_movements``.  Validates the input,
    stamps ``id`` and ``created_at``, inserts one row and returns the stored
    record as a frozen DTO.

Architecture position:
    Kernel > Services -- imperative shell.  Flushes, never commits.

Invariants enforced:
    - Only validated StockMovementInput values reach the store.
    - ``created_at`` comes from the injected Clock, never from the caller.
    - Exactly one INSERT per successful append; no other side effects.
    - No deduplication: appending the same input twice records two
      movements.  Idempotent retries need a caller-side correlation key.
    - Concurrent appends never conflict (independent rows, no locks).

Failure modes:
    - ValidationError: malformed input ("fix your input").  Logged at
      WARNING, never retried.
    - PersistenceError: the store failed ("try again later").  The
      SQLAlchemy exception is chained.  Not retried here, because retrying
      a non-idempotent append could double-count stock.

Consistency note:
    A projection computed in another session right after append() returns
    may not see the new movement until this session's transaction commits.
"""

from collections.abc import Mapping
from typing import Any
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.movement import StockMovement, StockMovementInput
from stock_kernel.exceptions import PersistenceError, ValidationError
from stock_kernel.logging_config import LogContext, get_logger
from stock_kernel.models.stock_movement import StockMovementModel
from stock_kernel.services.base import BaseService

logger = get_logger("services.transaction_ledger")


class TransactionLedger(BaseService):
    """Append-only writer for stock movements."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    @property
    def clock(self) -> Clock:
        return self._clock

    def append(self, movement: StockMovementInput | Mapping[str, Any]) -> StockMovement:
        """
        Validate and persist one movement.

        Args:
            movement: A StockMovementInput, or a plain row mapping which is
                parsed with StockMovementInput.from_row().  Anything else
                is rejected as malformed input.

        Returns:
            The stored movement with its assigned id and created_at.

        Raises:
            ValidationError: Input is malformed.
            PersistenceError: The store rejected or failed the insert.
        """
        if not isinstance(movement, StockMovementInput):
            try:
                if not isinstance(movement, Mapping):
                    raise ValidationError(
                        field="movement",
                        value=movement,
                        reason="must be a StockMovementInput or mapping",
                    )
                movement = StockMovementInput.from_row(movement)
            except ValidationError as exc:
                logger.warning(
                    "movement_rejected",
                    extra={"field": exc.field, "reason": exc.reason},
                )
                raise

        row = StockMovementModel(
            id=uuid4(),
            item_id=movement.item_id,
            actor_id=movement.actor_id,
            movement_type=movement.movement_type.value,
            quantity=movement.quantity,
            created_at=self._clock.now_utc(),
            counterparty_id=movement.counterparty_id,
            reference=movement.reference,
            remarks=movement.remarks,
        )

        try:
            self.session.add(row)
            self.session.flush()
        except SQLAlchemyError as exc:
            logger.error(
                "movement_persist_failed",
                extra={
                    "actor_id": movement.actor_id,
                    "item_id": movement.item_id,
                    "movement_type": movement.movement_type.value,
                    "error": type(exc).__name__,
                },
            )
            raise PersistenceError("append", str(exc)) from exc

        stored = row.to_dto()
        with LogContext.bind(movement_id=str(stored.id)):
            logger.info(
                "movement_appended",
                extra={
                    "actor_id": stored.actor_id,
                    "item_id": stored.item_id,
                    "movement_type": stored.movement_type.value,
                    "quantity": stored.quantity,
                    "created_at": stored.created_at,
                },
            )
        return stored
