"""
ORM-Level Immutability Enforcement for the stock ledger.

===============================================================================
WHY THIS EXISTS
===============================================================================

Stock movements are the only source of truth for every balance.  If a
movement could be edited after the fact, every projection computed before
the edit would silently stop being reproducible.  Corrections are made by
appending a compensating movement, never by rewriting history.

SQLAlchemy fires events before UPDATE/DELETE operations reach the database:

    session.flush()
         |
         v
    [before_update] --> _check_movement_update() --> ImmutabilityViolationError
         |
         v
    [before_delete] --> _check_movement_delete() --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity              | When Immutable          | Why
--------------------|-------------------------|----------------------------------
StockMovementModel  | ALWAYS (from creation)  | Balances are folds over history

Request and RequestItem rows are NOT protected: the ordering workflow owns
them and updates ``delivered_qty`` / ``status`` in place.

===============================================================================
USAGE
===============================================================================

    from stock_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # once at startup

To temporarily disable (TESTS ONLY):

    unregister_immutability_listeners()
"""

from sqlalchemy import event

from stock_kernel.exceptions import ImmutabilityViolationError
from stock_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _check_movement_update(mapper, connection, target):
    """Block any UPDATE of a persisted stock movement."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "StockMovement",
            "entity_id": str(target.id),
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="StockMovement",
        entity_id=str(target.id),
        reason="stock movements are append-only; append a compensating movement",
    )


def _check_movement_delete(mapper, connection, target):
    """Block any DELETE of a persisted stock movement."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "StockMovement",
            "entity_id": str(target.id),
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="StockMovement",
        entity_id=str(target.id),
        reason="stock movements cannot be deleted",
    )


def register_immutability_listeners() -> None:
    """Register the append-only listeners (idempotent)."""
    from stock_kernel.models.stock_movement import StockMovementModel

    if not event.contains(StockMovementModel, "before_update", _check_movement_update):
        event.listen(StockMovementModel, "before_update", _check_movement_update)
    if not event.contains(StockMovementModel, "before_delete", _check_movement_delete):
        event.listen(StockMovementModel, "before_delete", _check_movement_delete)

    logger.info(
        "immutability_listeners_registered",
        extra={"entities": ["StockMovement"]},
    )


def unregister_immutability_listeners() -> None:
    """Remove the append-only listeners. FOR TESTING ONLY."""
    from stock_kernel.models.stock_movement import StockMovementModel

    if event.contains(StockMovementModel, "before_update", _check_movement_update):
        event.remove(StockMovementModel, "before_update", _check_movement_update)
    if event.contains(StockMovementModel, "before_delete", _check_movement_delete):
        event.remove(StockMovementModel, "before_delete", _check_movement_delete)
