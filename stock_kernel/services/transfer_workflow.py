"""
TransferWorkflow -- named stock operations over the TransactionLedger.

Responsibility:
    Expresses the field operations (issue, transfer, customer return,
    return to warehouse, legacy sale/return) as ledger movements.  Each
    operation writes exactly one movement, always on the representative.

Architecture position:
    Kernel > Services.  Stateless: the "state" of any stock is whatever
    the ledger says; nothing else is persisted.

Operations and the movement each one records:

    Operation              | Movement      | Recorded on | Balance effect
    -----------------------|---------------|-------------|----------------
    issue_to_rep           | ISSUE         | rep         | +qty
    transfer_to_shop       | TRANSFER_OUT  | rep         | -qty
    return_to_rep          | RETURN_IN     | rep         | +qty
    return_to_warehouse    | RETURN_TO_HQ  | rep         | -qty
    record_sale            | SALE          | rep         | -qty
    record_legacy_return   | RETURN        | rep         | -qty

Invariants enforced:
    - qty must be a positive integer (ValidationError otherwise).
    - No availability check before a deducting movement: overdraft is
      permitted and shows up as a negative projected balance.  The ledger
      favors a complete audit trail over hard enforcement.
    - issue_to_rep and return_to_warehouse name the warehouse actor (when
      one is configured) as ``counterparty_id``.
    - transfer_to_shop records the shop as ``counterparty_id`` only.  The
      shop-side receipt is NOT written to this ledger; consumers must not
      expect a mirrored shop movement.

Failure modes:
    - ValidationError / PersistenceError from the ledger propagate
      unchanged.  No partial state is possible (one movement per call).
"""

from stock_kernel.domain.movement import MovementType, StockMovement, StockMovementInput
from stock_kernel.logging_config import get_logger
from stock_kernel.services.transaction_ledger import TransactionLedger

logger = get_logger("services.transfer_workflow")


class TransferWorkflow:
    """Stateless operation vocabulary for representative stock."""

    def __init__(self, ledger: TransactionLedger, warehouse_id: str | None = None):
        self._ledger = ledger
        self._warehouse_id = warehouse_id

    @property
    def ledger(self) -> TransactionLedger:
        return self._ledger

    def _record(
        self,
        operation: str,
        movement_type: MovementType,
        item_id: str,
        rep_id: str,
        qty: int,
        counterparty_id: str | None = None,
        reference: str | None = None,
        remarks: str | None = None,
    ) -> StockMovement:
        movement = self._ledger.append(
            StockMovementInput(
                item_id=item_id,
                actor_id=rep_id,
                movement_type=movement_type,
                quantity=qty,
                counterparty_id=counterparty_id,
                reference=reference,
                remarks=remarks,
            )
        )
        logger.info(
            "transfer_operation_recorded",
            extra={
                "operation": operation,
                "movement_id": str(movement.id),
                "rep_id": rep_id,
                "item_id": item_id,
                "quantity": qty,
            },
        )
        return movement

    def issue_to_rep(
        self,
        item_id: str,
        rep_id: str,
        qty: int,
        reference: str | None = None,
        remarks: str | None = None,
    ) -> StockMovement:
        """Warehouse hands stock to a representative."""
        return self._record(
            "issue_to_rep", MovementType.ISSUE, item_id, rep_id, qty,
            counterparty_id=self._warehouse_id, reference=reference, remarks=remarks,
        )

    def transfer_to_shop(
        self,
        item_id: str,
        rep_id: str,
        shop_id: str,
        qty: int,
        reference: str | None = None,
        remarks: str | None = None,
    ) -> StockMovement:
        """Representative delivers stock to a shop (rep side only)."""
        return self._record(
            "transfer_to_shop", MovementType.TRANSFER_OUT, item_id, rep_id, qty,
            counterparty_id=shop_id, reference=reference, remarks=remarks,
        )

    def return_to_rep(
        self,
        item_id: str,
        rep_id: str,
        qty: int,
        shop_id: str | None = None,
        remarks: str | None = None,
    ) -> StockMovement:
        """A shop or customer hands stock back to the representative."""
        return self._record(
            "return_to_rep", MovementType.RETURN_IN, item_id, rep_id, qty,
            counterparty_id=shop_id, remarks=remarks,
        )

    def return_to_warehouse(
        self,
        item_id: str,
        rep_id: str,
        qty: int,
        remarks: str | None = None,
    ) -> StockMovement:
        """Representative returns carried stock to the warehouse."""
        return self._record(
            "return_to_warehouse", MovementType.RETURN_TO_HQ, item_id, rep_id, qty,
            counterparty_id=self._warehouse_id, remarks=remarks,
        )

    def record_sale(
        self,
        item_id: str,
        rep_id: str,
        qty: int,
        reference: str | None = None,
    ) -> StockMovement:
        """Legacy: representative stock consumed by a direct sale."""
        return self._record(
            "record_sale", MovementType.SALE, item_id, rep_id, qty,
            reference=reference,
        )

    def record_legacy_return(
        self,
        item_id: str,
        rep_id: str,
        qty: int,
        remarks: str | None = None,
    ) -> StockMovement:
        """Legacy ``RETURN`` deduction, kept for screens that still write it."""
        return self._record(
            "record_legacy_return", MovementType.RETURN, item_id, rep_id, qty,
            remarks=remarks,
        )
