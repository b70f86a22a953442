"""
Ordering Module (``stock_modules.ordering``).

Responsibility
--------------
Owns the lifecycle of shop requests: submission (at most one pending
request per shop per calendar day), deliveries by a representative, and
cancellation.  Deliveries are recorded in the stock ledger as
``TRANSFER_OUT`` movements through the kernel's ``TransferWorkflow``.

Architecture
------------
Layer: **Modules** -- imports from ``stock_kernel``, never the reverse.
The kernel's fulfillment matcher only reads the rows this module writes.
"""

from stock_modules.ordering.models import (
    DeliveryAllocation,
    DeliveryResult,
    RequestInfo,
    RequestLine,
    RequestLineInfo,
)
from stock_modules.ordering.service import OrderingService
from stock_modules.ordering.workflows import REQUEST_WORKFLOW

__all__ = [
    "DeliveryAllocation",
    "DeliveryResult",
    "OrderingService",
    "REQUEST_WORKFLOW",
    "RequestInfo",
    "RequestLine",
    "RequestLineInfo",
]
