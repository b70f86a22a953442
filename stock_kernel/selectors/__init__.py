"""Selectors for the stock kernel (read side)."""

from stock_kernel.selectors.balance_projector import BalanceProjector, CarriedItem
from stock_kernel.selectors.movement_selector import MovementSelector
from stock_kernel.selectors.request_selector import (
    RequestSelector,
    ShopAssignmentSelector,
)

__all__ = [
    "BalanceProjector",
    "CarriedItem",
    "MovementSelector",
    "RequestSelector",
    "ShopAssignmentSelector",
]
