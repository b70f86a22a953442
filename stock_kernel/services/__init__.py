"""Services for the stock kernel (write side and orchestration)."""

from stock_kernel.services.fulfillment_matcher import RequestFulfillmentMatcher
from stock_kernel.services.transaction_ledger import TransactionLedger
from stock_kernel.services.transfer_workflow import TransferWorkflow

__all__ = [
    "RequestFulfillmentMatcher",
    "TransactionLedger",
    "TransferWorkflow",
]
