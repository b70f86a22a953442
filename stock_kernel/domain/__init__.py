"""Pure domain layer: movement values, windows, fulfillment rules, clocks."""

from stock_kernel.domain.clock import (
    Clock,
    DeterministicClock,
    SystemClock,
)
from stock_kernel.domain.daily_reset import (
    EPOCH,
    ActorKind,
    DailyResetPolicy,
    TimeWindow,
)
from stock_kernel.domain.fulfillment import (
    DeploymentStatus,
    ItemFulfillment,
    PendingLine,
    aggregate_pending,
    build_fulfillments,
    classify,
)
from stock_kernel.domain.movement import (
    DECREASING_TYPES,
    INCREASING_TYPES,
    MovementType,
    StockMovement,
    StockMovementInput,
    signed_quantity,
)

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "EPOCH",
    "ActorKind",
    "DailyResetPolicy",
    "TimeWindow",
    "DeploymentStatus",
    "ItemFulfillment",
    "PendingLine",
    "aggregate_pending",
    "build_fulfillments",
    "classify",
    "MovementType",
    "INCREASING_TYPES",
    "DECREASING_TYPES",
    "StockMovement",
    "StockMovementInput",
    "signed_quantity",
]
