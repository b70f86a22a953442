"""
Stock movement value objects -- the nouns of the ledger.

Responsibility:
    Defines the closed set of movement types, their sign convention, the
    validated input accepted by ``TransactionLedger.append`` and the frozen
    record it returns.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  MUST NOT import from db/, models/,
    services/, or selectors/.

Invariants enforced:
    - Quantity is a positive integer.  Direction is carried by the
      movement type, never by the sign of the quantity.
    - ``item_id`` and ``actor_id`` are non-blank strings.
    - Only the six recognized movement types exist; an unknown type is
      rejected at construction, never stored.

Failure modes:
    - ValidationError on any malformed field, with ``field`` and ``value``
      attributes naming the offender.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from stock_kernel.exceptions import ValidationError


class MovementType(str, Enum):
    """Direction of a stock movement, relative to the actor it is recorded on.

    ``SALE`` and ``RETURN`` are legacy deducting types.  Both remain valid
    for reading and writing; neither supersedes ``TRANSFER_OUT`` or
    ``RETURN_TO_HQ``.
    """

    ISSUE = "ISSUE"                # warehouse -> rep
    RETURN_IN = "RETURN_IN"        # shop/customer -> rep
    TRANSFER_OUT = "TRANSFER_OUT"  # rep -> shop
    RETURN_TO_HQ = "RETURN_TO_HQ"  # rep -> warehouse
    SALE = "SALE"                  # legacy: consumed by a sale
    RETURN = "RETURN"              # legacy deduction

    @classmethod
    def parse(cls, value: Any) -> MovementType:
        """Strictly parse a movement type; raises ValidationError otherwise."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        raise ValidationError(
            field="movement_type",
            value=value,
            reason=f"must be one of {[t.value for t in cls]}",
        )

    @property
    def sign(self) -> int:
        """+1 for stock entering the actor, -1 for stock leaving it."""
        return 1 if self in INCREASING_TYPES else -1


INCREASING_TYPES: frozenset[MovementType] = frozenset(
    {MovementType.ISSUE, MovementType.RETURN_IN}
)

DECREASING_TYPES: frozenset[MovementType] = frozenset(
    {
        MovementType.TRANSFER_OUT,
        MovementType.RETURN_TO_HQ,
        MovementType.SALE,
        MovementType.RETURN,
    }
)


def signed_quantity(movement_type: MovementType, quantity: int) -> int:
    """Contribution of one movement to its actor's balance."""
    return movement_type.sign * quantity


# Must match the stock_movements column widths
MAX_ID_LENGTH = 64
MAX_REFERENCE_LENGTH = 50
MAX_REMARKS_LENGTH = 1000


def _require_id(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field=field, value=value, reason="is required")
    _require_max_length(field, value, MAX_ID_LENGTH)
    return value


def _require_max_length(field: str, value: str, limit: int) -> None:
    if len(value) > limit:
        raise ValidationError(
            field=field, value=value, reason=f"must be at most {limit} characters",
        )


def _optional_text(field: str, value: Any, limit: int) -> None:
    if value is None:
        return
    if not isinstance(value, str):
        raise ValidationError(field=field, value=value, reason="must be a string")
    _require_max_length(field, value, limit)


def _require_quantity(value: Any) -> int:
    # bool is an int subclass; True is not a quantity
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field="quantity", value=value, reason="must be an integer")
    if value <= 0:
        raise ValidationError(field="quantity", value=value, reason="must be positive")
    return value


@dataclass(frozen=True)
class StockMovementInput:
    """
    Validated request to append one movement.

    Contract: construction is the boundary check.  An instance that exists
    is always appendable; ``movement_type`` is normalized to the enum.
    """

    item_id: str
    actor_id: str
    movement_type: MovementType
    quantity: int
    counterparty_id: str | None = None
    reference: str | None = None
    remarks: str | None = None

    def __post_init__(self):
        _require_id("item_id", self.item_id)
        _require_id("actor_id", self.actor_id)
        object.__setattr__(self, "movement_type", MovementType.parse(self.movement_type))
        _require_quantity(self.quantity)
        if self.counterparty_id is not None:
            _require_id("counterparty_id", self.counterparty_id)
        _optional_text("reference", self.reference, MAX_REFERENCE_LENGTH)
        _optional_text("remarks", self.remarks, MAX_REMARKS_LENGTH)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> StockMovementInput:
        """
        Build an input from a loosely typed persistence/API row.

        Integer ids (the upstream tables use serial keys for items) are
        accepted and converted to strings; the legacy ``qty`` and ``type``
        keys are accepted alongside ``quantity`` and ``movement_type``.
        """

        def _id(key: str) -> Any:
            value = row.get(key)
            if isinstance(value, int) and not isinstance(value, bool):
                return str(value)
            return value

        return cls(
            item_id=_id("item_id"),
            actor_id=_id("actor_id"),
            movement_type=row.get("movement_type", row.get("type")),
            quantity=row.get("quantity", row.get("qty")),
            counterparty_id=_id("counterparty_id"),
            reference=row.get("reference"),
            remarks=row.get("remarks"),
        )

    @property
    def signed_quantity(self) -> int:
        return signed_quantity(self.movement_type, self.quantity)


@dataclass(frozen=True)
class StockMovement:
    """A persisted movement.  Never updated, never deleted."""

    id: UUID
    item_id: str
    actor_id: str
    movement_type: MovementType
    quantity: int
    created_at: datetime
    counterparty_id: str | None = None
    reference: str | None = None
    remarks: str | None = None

    @property
    def signed_quantity(self) -> int:
        return signed_quantity(self.movement_type, self.quantity)
