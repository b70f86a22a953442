"""
Fulfillment matching -- pure aggregation and classification.

Responsibility:
    Folds pending request lines into a cross-shop demand per item and
    classifies each item against a representative's on-hand balance.
    The I/O half (fetching requests, projecting balances) lives in
    ``stock_kernel.services.fulfillment_matcher``.

Architecture position:
    Kernel > Domain -- pure, zero I/O.

Invariants enforced:
    - A line contributes ``requested_qty - delivered_qty`` only when that is
      strictly positive; fully or over-delivered lines contribute nothing.
    - Demand is summed across shops: three shops each waiting on 10 units
      of an item yield an aggregate of 30.
    - Items nobody is waiting on never appear in the result, whatever the
      stock on hand.
    - ``available_stock`` is clamped at zero for display only; the signed
      balance in the ledger is untouched.
    - Results are ordered by ``item_id``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum


class DeploymentStatus(str, Enum):
    """Whether on-hand stock covers aggregate demand for an item."""

    READY = "READY"
    DEFICIT = "DEFICIT"


@dataclass(frozen=True)
class PendingLine:
    """One request line as seen by the matcher."""

    request_id: str
    shop_id: str
    item_id: str
    requested_qty: int
    delivered_qty: int

    @property
    def pending_qty(self) -> int:
        return self.requested_qty - self.delivered_qty


@dataclass(frozen=True)
class ItemFulfillment:
    """Deployment status of one item for one representative."""

    item_id: str
    item_name: str
    aggregate_pending_qty: int
    available_stock: int
    deployment_status: DeploymentStatus

    @property
    def shortfall(self) -> int:
        """Units missing to cover demand (0 when READY)."""
        return max(0, self.aggregate_pending_qty - self.available_stock)


def aggregate_pending(lines: Iterable[PendingLine]) -> dict[str, int]:
    """Sum strictly positive pending quantities per item."""
    totals: dict[str, int] = {}
    for line in lines:
        pending = line.pending_qty
        if pending <= 0:
            continue
        totals[line.item_id] = totals.get(line.item_id, 0) + pending
    return totals


def classify(available_stock: int, aggregate_pending_qty: int) -> DeploymentStatus:
    if available_stock >= aggregate_pending_qty:
        return DeploymentStatus.READY
    return DeploymentStatus.DEFICIT


def build_fulfillments(
    demand: Mapping[str, int],
    balances: Mapping[str, int],
    item_names: Mapping[str, str],
) -> list[ItemFulfillment]:
    """
    Combine demand and signed balances into sorted ItemFulfillment rows.

    Items missing from ``balances`` have a balance of 0.  Items missing from
    ``item_names`` are labelled with their id.
    """
    results = []
    for item_id in sorted(demand):
        pending = demand[item_id]
        if pending <= 0:
            continue
        available = max(0, balances.get(item_id, 0))
        results.append(
            ItemFulfillment(
                item_id=item_id,
                item_name=item_names.get(item_id, item_id),
                aggregate_pending_qty=pending,
                available_stock=available,
                deployment_status=classify(available, pending),
            )
        )
    return results
