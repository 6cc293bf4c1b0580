"""
Adjustment planning -- Pure functional core for manual stock corrections.

Responsibility:
    Validates an AdjustmentRequest's sign against its type and computes the
    resulting stock level for one product.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - IN carries a positive quantity, OUT a negative one; zero is never valid.
    - The resulting stock level is never negative.

Failure modes:
    - InvalidAdjustmentError  sign/type mismatch or zero quantity (raised
                              before any storage access)
    - InsufficientStockError  current stock + quantity < 0
"""

from inventory_kernel.domain.dtos import (
    AdjustmentPlan,
    AdjustmentRequest,
    ProductSnapshot,
    StockMovement,
)
from inventory_kernel.domain.values import AdjustmentType
from inventory_kernel.exceptions import InsufficientStockError, InvalidAdjustmentError


def check_sign(type: AdjustmentType, quantity: int) -> None:
    """IN must be positive, OUT negative; shared by the planner and the stock ledger."""
    if quantity == 0:
        raise InvalidAdjustmentError(type.value, quantity, "Quantity must not be zero")
    if type is AdjustmentType.IN and quantity < 0:
        raise InvalidAdjustmentError(
            type.value, quantity, "Quantity must be positive for IN adjustments"
        )
    if type is AdjustmentType.OUT and quantity > 0:
        raise InvalidAdjustmentError(
            type.value, quantity, "Quantity must be negative for OUT adjustments"
        )


def validate_adjustment(request: AdjustmentRequest) -> None:
    quantity = request.quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidAdjustmentError(
            request.type.value, quantity, "Quantity must be an integer"
        )
    check_sign(request.type, quantity)


def plan_adjustment(
    request: AdjustmentRequest,
    product: ProductSnapshot,
) -> AdjustmentPlan:
    """
    Plan a validated adjustment against the product's current stock.

    Raises:
        InvalidAdjustmentError, InsufficientStockError.
    """
    validate_adjustment(request)

    new_stock = product.stock_level + request.quantity
    if new_stock < 0:
        raise InsufficientStockError(
            product_id=str(product.id),
            product_name=product.name,
            available=product.stock_level,
            requested=abs(request.quantity),
        )

    return AdjustmentPlan(
        product_id=product.id,
        product_name=product.name,
        old_stock=product.stock_level,
        new_stock=new_stock,
        movement=StockMovement(
            product_id=product.id,
            delta=request.quantity,
            type=request.type,
            reason=request.reason,
        ),
    )
