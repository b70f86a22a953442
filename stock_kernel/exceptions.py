"""
Typed Exception Hierarchy for the Stock Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers must tell "fix your input" apart from "try again later" without
parsing messages.  Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

Example:
    try:
        workflow.transfer_to_shop(item_id, rep_id, shop_id, qty)
    except ValidationError as e:
        show_form_error(field=e.field, message=str(e))     # fix your input
    except PersistenceError as e:
        show_banner(code=e.code)                           # try again later

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    StockKernelError (base)
    |
    +-- ValidationError
    |
    +-- PersistenceError
    |
    +-- ImmutabilityError
    |   +-- ImmutabilityViolationError
    |
    +-- RequestError
        +-- RequestNotFoundError
        +-- DuplicatePendingRequestError
        +-- RequestNotPendingError
        +-- DeliveryExceedsPendingError
        +-- InsufficientCarriedStockError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                        | When Raised
--------------|-----------------------------|-------------------------------------------
Validation    | VALIDATION_ERROR            | Non-positive qty, missing id, unknown type
Persistence   | PERSISTENCE_ERROR           | Store failed (network, timeout, constraint)
Immutability  | IMMUTABILITY_VIOLATION      | UPDATE/DELETE of a stock movement
Request       | REQUEST_NOT_FOUND           | Request id doesn't exist
              | DUPLICATE_PENDING_REQUEST   | Shop already has a pending request today
              | REQUEST_NOT_PENDING         | Delivering to / cancelling a closed request
              | DELIVERY_EXCEEDS_PENDING    | Delivered qty above pending qty
              | INSUFFICIENT_CARRIED_STOCK  | Delivered qty above rep's carried stock

===============================================================================
RETRY POLICY
===============================================================================

Nothing in the kernel retries.  Appends are not idempotent: retrying a
PersistenceError blindly may double-count stock.  Callers that need retries
must carry their own idempotency key upstream.
"""


class StockKernelError(Exception):
    """
    Base exception for all stock kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STOCK_KERNEL_ERROR"


# Input validation


class ValidationError(StockKernelError):
    """
    Malformed input at the ledger boundary.

    Raised for a non-positive or non-integer quantity, a missing or
    over-long id or text field, an unrecognized movement type, or an
    argument that is not a movement at all.  Never retried automatically.
    """

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} ({value!r}): {reason}")


# Persistence


class PersistenceError(StockKernelError):
    """
    The persistence collaborator failed.

    The original driver/ORM exception is chained as ``__cause__``.
    """

    code: str = "PERSISTENCE_ERROR"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Persistence failure during {operation}: {detail}")


# Immutability


class ImmutabilityError(StockKernelError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """Attempted to modify or delete a stock movement after it was written."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Ordering workflow


class RequestError(StockKernelError):
    """Base exception for shop request errors."""

    code: str = "REQUEST_ERROR"


class RequestNotFoundError(RequestError):
    """Request with given ID was not found."""

    code: str = "REQUEST_NOT_FOUND"

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__(f"Request not found: {request_id}")


class DuplicatePendingRequestError(RequestError):
    """The shop already has a pending request for this calendar day."""

    code: str = "DUPLICATE_PENDING_REQUEST"

    def __init__(self, shop_id: str, day: str, existing_request_id: str):
        self.shop_id = shop_id
        self.day = day
        self.existing_request_id = existing_request_id
        super().__init__(
            f"Shop {shop_id} already has pending request "
            f"{existing_request_id} for {day}"
        )


class RequestNotPendingError(RequestError):
    """Operation requires a pending request."""

    code: str = "REQUEST_NOT_PENDING"

    def __init__(self, request_id: str, status: str):
        self.request_id = request_id
        self.status = status
        super().__init__(f"Request {request_id} is {status}, not pending")


class DeliveryExceedsPendingError(RequestError):
    """Delivered quantity is larger than what the shop is still waiting on."""

    code: str = "DELIVERY_EXCEEDS_PENDING"

    def __init__(self, request_id: str, item_id: str, requested: int, pending: int):
        self.request_id = request_id
        self.item_id = item_id
        self.requested = requested
        self.pending = pending
        super().__init__(
            f"Cannot deliver {requested} of item {item_id} on request "
            f"{request_id}: only {pending} pending"
        )


class InsufficientCarriedStockError(RequestError):
    """The representative does not carry enough stock today for a delivery."""

    code: str = "INSUFFICIENT_CARRIED_STOCK"

    def __init__(self, rep_id: str, item_id: str, requested: int, available: int):
        self.rep_id = rep_id
        self.item_id = item_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Rep {rep_id} cannot deliver {requested} of item {item_id}: "
            f"available {available}"
        )
