"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (the HTTP layer, scripts, tests) must react to failures by KIND,
never by parsing messages.  Every error therefore:
  1. Has its own class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Stores its context as attributes (product ids, quantities, ...)

Example:
    try:
        orders.place_order(actor_id, request)
    except InsufficientStockError as e:
        api_response(
            code=e.code,
            product=e.product_name,
            available=e.available,
            requested=e.requested,
        )

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InventoryKernelError (base)
    |
    +-- ValidationError
    |   +-- InvalidAdjustmentError
    |   +-- InvalidStatusError
    |
    +-- DuplicateSkuError
    |
    +-- NotFoundError
    |   +-- ProductNotFoundError
    |   +-- OrderNotFoundError
    |
    +-- StockError
    |   +-- InsufficientStockError
    |
    +-- ImmutabilityViolationError
    |
    +-- TransactionFailureError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                   | When Raised
-----------------------|---------------------------------------------------
VALIDATION_ERROR       | Malformed / out-of-contract input (field detail)
INVALID_ADJUSTMENT     | IN with quantity <= 0, OUT with quantity >= 0
INVALID_STATUS         | Status or adjustment type outside its closed set
DUPLICATE_SKU          | SKU already used by another product
PRODUCT_NOT_FOUND      | One or more referenced products do not exist
ORDER_NOT_FOUND        | Order id does not exist
INSUFFICIENT_STOCK     | Resulting stock level would be negative
IMMUTABILITY_VIOLATION | Update/delete of an append-only record
TRANSACTION_FAILURE    | Storage-layer failure (opaque to API callers)

===============================================================================
"""


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INVENTORY_KERNEL_ERROR"


# Validation


class ValidationError(InventoryKernelError):
    """
    Input is malformed or outside the operation's contract.

    Raised before any storage access.  field_errors carries one dict per
    offending field: {"field": ..., "message": ...}.
    """

    code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, field_errors: list[dict] | None = None):
        self.field_errors = field_errors or []
        super().__init__(message)


class InvalidAdjustmentError(ValidationError):
    """Adjustment quantity sign does not match its type, or is zero."""

    code: str = "INVALID_ADJUSTMENT"

    def __init__(self, adjustment_type: str, quantity: int, reason: str):
        self.adjustment_type = adjustment_type
        self.quantity = quantity
        self.reason = reason
        super().__init__(
            reason,
            field_errors=[{"field": "quantity", "message": reason}],
        )


class InvalidStatusError(ValidationError):
    """A status or type string is not a member of its closed set."""

    code: str = "INVALID_STATUS"

    def __init__(self, field: str, value: str, allowed: list[str]):
        self.field = field
        self.value = value
        self.allowed = allowed
        message = f"Invalid {field} '{value}'; expected one of {', '.join(allowed)}"
        super().__init__(
            message,
            field_errors=[{"field": field, "message": message}],
        )


class DuplicateSkuError(InventoryKernelError):
    """Another product already uses this SKU."""

    code: str = "DUPLICATE_SKU"

    def __init__(self, sku: str):
        self.sku = sku
        super().__init__(f"Product with SKU '{sku}' already exists")


# Not found


class NotFoundError(InventoryKernelError):
    """Base exception for missing referenced entities."""

    code: str = "NOT_FOUND"


class ProductNotFoundError(NotFoundError):
    """One or more referenced products do not exist."""

    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_ids: list[str]):
        self.product_ids = product_ids
        if len(product_ids) == 1:
            message = f"Product not found: {product_ids[0]}"
        else:
            message = f"Products not found: {', '.join(product_ids)}"
        super().__init__(message)


class OrderNotFoundError(NotFoundError):
    """Order with given ID was not found."""

    code: str = "ORDER_NOT_FOUND"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


# Stock


class StockError(InventoryKernelError):
    """Base exception for stock business-rule violations."""

    code: str = "STOCK_ERROR"


class InsufficientStockError(StockError):
    """
    Applying the requested quantity would drive stock below zero.

    available is the stock level observed when the check ran; requested is
    the absolute quantity asked for (aggregated across order lines when
    raised by the order engine).
    """

    code: str = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        product_id: str,
        product_name: str,
        available: int,
        requested: int,
    ):
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}: "
            f"available={available}, requested={requested}"
        )


# Persistence


class ImmutabilityViolationError(InventoryKernelError):
    """Attempt to modify or delete an append-only record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(f"Cannot modify {entity_type} {entity_id}: {reason}")


class TransactionFailureError(InventoryKernelError):
    """
    The storage layer failed to commit a unit of work.

    The original driver exception is chained as __cause__; its text is
    never exposed outside the kernel.
    """

    code: str = "TRANSACTION_FAILURE"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Transaction failed during {operation}")
