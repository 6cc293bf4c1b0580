"""
Order planning -- Pure functional core for order placement.

Responsibility:
    Turns an OrderRequest plus the snapshots of the products it references
    into an OrderPlan: captured unit prices and the order total.  Performs
    every check that can fail (missing products, insufficient stock) before
    any write happens.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    No database access, no clock, no logging.  The OrderService resolves
    the products under row locks, calls plan_order(), and only then writes.

Invariants enforced:
    - Existence first: if any referenced product is missing, nothing else
      is checked and ProductNotFoundError lists every missing id.
    - Aggregate check: stock is compared against the SUM of quantities for
      a product across all lines, not against individual lines.
    - Price capture: each line's price_at_time is the product's price in
      the snapshot; total_amount is the sum of price_at_time * quantity
      over the original (non-aggregated) lines.

Failure modes:
    - ProductNotFoundError   one or more product ids have no snapshot
    - InsufficientStockError first product (in first-encountered order)
                             whose aggregated request exceeds its stock
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from uuid import UUID

from inventory_kernel.domain.dtos import (
    OrderLineRequest,
    OrderPlan,
    OrderRequest,
    PlannedLine,
    ProductSnapshot,
)
from inventory_kernel.exceptions import InsufficientStockError, ProductNotFoundError


def find_missing_products(
    lines: Iterable[OrderLineRequest],
    products: Mapping[UUID, ProductSnapshot],
) -> list[UUID]:
    """Distinct product ids with no snapshot, in first-encountered order."""
    missing: list[UUID] = []
    for line in lines:
        if line.product_id not in products and line.product_id not in missing:
            missing.append(line.product_id)
    return missing


def aggregate_quantities(lines: Iterable[OrderLineRequest]) -> dict[UUID, int]:
    """Sum quantities per product; keys keep first-encountered order."""
    totals: dict[UUID, int] = {}
    for line in lines:
        totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
    return totals


def check_stock(
    requested: Mapping[UUID, int],
    products: Mapping[UUID, ProductSnapshot],
) -> None:
    """Raise InsufficientStockError for the first product that cannot cover its total."""
    for product_id, quantity in requested.items():
        product = products[product_id]
        if product.stock_level < quantity:
            raise InsufficientStockError(
                product_id=str(product_id),
                product_name=product.name,
                available=product.stock_level,
                requested=quantity,
            )


def plan_order(
    request: OrderRequest,
    products: Mapping[UUID, ProductSnapshot],
) -> OrderPlan:
    """
    Validate and price an order request.

    Preconditions:
        products maps product id -> snapshot for every product that exists
        among the request's lines (absent keys mean "does not exist").

    Postconditions:
        The returned plan holds one PlannedLine per request line, in request
        order, and total_amount == sum(line.line_total).

    Raises:
        ProductNotFoundError, InsufficientStockError.
    """
    missing = find_missing_products(request.lines, products)
    if missing:
        raise ProductNotFoundError([str(product_id) for product_id in missing])

    requested = aggregate_quantities(request.lines)
    check_stock(requested, products)

    planned: list[PlannedLine] = []
    total = Decimal("0")
    for line_no, line in enumerate(request.lines, start=1):
        price = products[line.product_id].price
        planned.append(
            PlannedLine(
                line_no=line_no,
                product_id=line.product_id,
                quantity=line.quantity,
                price_at_time=price,
            )
        )
        total += price * line.quantity

    return OrderPlan(
        status=request.status,
        lines=tuple(planned),
        total_amount=total,
    )
