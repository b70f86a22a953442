"""ORM models for the stock kernel."""

from stock_kernel.models.directory import Item, Route, Shop, User, UserRole
from stock_kernel.models.request import Request, RequestItem, RequestStatus
from stock_kernel.models.stock_movement import StockMovementModel

__all__ = [
    "StockMovementModel",
    "Request",
    "RequestItem",
    "RequestStatus",
    "Item",
    "Route",
    "Shop",
    "User",
    "UserRole",
]
