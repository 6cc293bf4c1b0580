"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable data structures that flow through the order and
    adjustment pipelines: validated requests (input), product snapshots
    (fetched state), plans and stock movements (the writes a transaction
    will perform), and records (persistence boundary output).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    from_model() class methods exist as boundary converters but are only
    invoked from the service and selector layers (never from domain logic).

Invariants enforced:
    - Order lines carry a positive integer quantity.
    - An order request has at least one line.
    - Monetary fields are Decimal, never float.

Data flow:
    OrderRequest + {ProductSnapshot} -> OrderPlan -> StockMovement* -> OrderRecord
    AdjustmentRequest + ProductSnapshot -> AdjustmentPlan -> StockMovement -> AdjustmentResult
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Generic, TypeVar
from uuid import UUID

from inventory_kernel.domain.values import (
    AdjustmentType,
    OrderStatus,
    parse_adjustment_type,
    parse_order_status,
)
from inventory_kernel.exceptions import ValidationError

if TYPE_CHECKING:
    from inventory_kernel.models.adjustment import (
        InventoryAdjustment as InventoryAdjustmentModel,
    )
    from inventory_kernel.models.order import Order as OrderModel
    from inventory_kernel.models.order import OrderItem as OrderItemModel
    from inventory_kernel.models.product import Product as ProductModel

T = TypeVar("T")


# =============================================================================
# Requests
# =============================================================================


@dataclass(frozen=True)
class OrderLineRequest:
    """One {product_id, quantity} line as submitted, before aggregation."""

    product_id: UUID
    quantity: int

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity <= 0:
            raise ValidationError(
                "Order line quantity must be a positive integer",
                field_errors=[{"field": "quantity", "message": "must be a positive integer"}],
            )


@dataclass(frozen=True)
class OrderRequest:
    """A validated order submission."""

    lines: tuple[OrderLineRequest, ...]
    status: OrderStatus = OrderStatus.PENDING

    def __post_init__(self) -> None:
        if not self.lines:
            raise ValidationError(
                "An order needs at least one item",
                field_errors=[{"field": "items", "message": "at least one item required"}],
            )

    @classmethod
    def build(
        cls,
        items: list[tuple[UUID, int]] | list[dict],
        status: OrderStatus | str | None = None,
    ) -> OrderRequest:
        """Build from (product_id, quantity) pairs or {productId, quantity} dicts."""
        lines = []
        for item in items:
            if isinstance(item, dict):
                product_id = item.get("product_id", item.get("productId"))
                quantity = item.get("quantity")
            else:
                product_id, quantity = item
            lines.append(OrderLineRequest(product_id=_as_uuid(product_id), quantity=quantity))
        return cls(lines=tuple(lines), status=parse_order_status(status))


@dataclass(frozen=True)
class AdjustmentRequest:
    """A manual stock correction."""

    product_id: UUID
    quantity: int
    type: AdjustmentType
    reason: str | None = None

    @classmethod
    def build(
        cls,
        product_id: UUID | str,
        quantity: int,
        type: AdjustmentType | str,
        reason: str | None = None,
    ) -> AdjustmentRequest:
        return cls(
            product_id=_as_uuid(product_id),
            quantity=quantity,
            type=parse_adjustment_type(type),
            reason=reason,
        )


def _as_uuid(value: UUID | str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise ValidationError(
            f"Invalid product id: {value!r}",
            field_errors=[{"field": "productId", "message": "must be a UUID"}],
        ) from None


# =============================================================================
# Fetched state
# =============================================================================


@dataclass(frozen=True)
class ProductSnapshot:
    """The parts of a product the planners read, captured at resolution time."""

    id: UUID
    name: str
    sku: str
    price: Decimal
    stock_level: int

    @classmethod
    def from_model(cls, product: ProductModel) -> ProductSnapshot:
        return cls(
            id=product.id,
            name=product.name,
            sku=product.sku,
            price=product.price,
            stock_level=product.stock_level,
        )


# =============================================================================
# Plans (writes)
# =============================================================================


@dataclass(frozen=True)
class StockMovement:
    """One ledger write: a signed delta against one product."""

    product_id: UUID
    delta: int
    type: AdjustmentType
    reason: str | None = None
    order_id: UUID | None = None


@dataclass(frozen=True)
class PlannedLine:
    """An order line with its unit price captured."""

    line_no: int
    product_id: UUID
    quantity: int
    price_at_time: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.price_at_time * self.quantity


@dataclass(frozen=True)
class OrderPlan:
    """Everything the commit step of an order needs, computed without I/O."""

    status: OrderStatus
    lines: tuple[PlannedLine, ...]
    total_amount: Decimal

    def movements(self, order_id: UUID) -> tuple[StockMovement, ...]:
        """One OUT movement per original line, tagged with the order id."""
        return tuple(
            StockMovement(
                product_id=line.product_id,
                delta=-line.quantity,
                type=AdjustmentType.OUT,
                reason=f"Order {order_id}",
                order_id=order_id,
            )
            for line in self.lines
        )


@dataclass(frozen=True)
class AdjustmentPlan:
    """A validated single-product correction and its expected outcome."""

    product_id: UUID
    product_name: str
    old_stock: int
    new_stock: int
    movement: StockMovement


# =============================================================================
# Records (persistence boundary output)
# =============================================================================


@dataclass(frozen=True)
class ProductRecord:
    id: UUID
    sku: str
    name: str
    description: str | None
    price: Decimal
    stock_level: int
    low_stock_threshold: int
    created_at: datetime
    updated_at: datetime

    @property
    def is_low_stock(self) -> bool:
        return self.stock_level <= self.low_stock_threshold

    @classmethod
    def from_model(cls, product: ProductModel) -> ProductRecord:
        return cls(
            id=product.id,
            sku=product.sku,
            name=product.name,
            description=product.description,
            price=product.price,
            stock_level=product.stock_level,
            low_stock_threshold=product.low_stock_threshold,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


@dataclass(frozen=True)
class AdjustmentRecord:
    id: UUID
    product_id: UUID
    product_name: str | None
    product_sku: str | None
    user_id: UUID
    quantity: int
    type: AdjustmentType
    reason: str | None
    order_id: UUID | None
    timestamp: datetime

    @classmethod
    def from_model(cls, adjustment: InventoryAdjustmentModel) -> AdjustmentRecord:
        product = adjustment.product
        return cls(
            id=adjustment.id,
            product_id=adjustment.product_id,
            product_name=product.name if product is not None else None,
            product_sku=product.sku if product is not None else None,
            user_id=adjustment.user_id,
            quantity=adjustment.quantity,
            type=adjustment.type,
            reason=adjustment.reason,
            order_id=adjustment.order_id,
            timestamp=adjustment.created_at,
        )


@dataclass(frozen=True)
class LedgerResult:
    """Outcome of one stock ledger call."""

    product_id: UUID
    old_stock: int
    new_stock: int
    adjustment: AdjustmentRecord


@dataclass(frozen=True)
class AdjustmentResult:
    adjustment: AdjustmentRecord
    new_stock_level: int


@dataclass(frozen=True)
class OrderItemRecord:
    line_no: int
    product_id: UUID
    product_name: str | None
    product_sku: str | None
    quantity: int
    price_at_time: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.price_at_time * self.quantity

    @classmethod
    def from_model(cls, item: OrderItemModel) -> OrderItemRecord:
        product = item.product
        return cls(
            line_no=item.line_no,
            product_id=item.product_id,
            product_name=product.name if product is not None else None,
            product_sku=product.sku if product is not None else None,
            quantity=item.quantity,
            price_at_time=item.price_at_time,
        )


@dataclass(frozen=True)
class OrderRecord:
    id: UUID
    user_id: UUID
    status: OrderStatus
    total_amount: Decimal
    created_at: datetime
    items: tuple[OrderItemRecord, ...] = field(default_factory=tuple)

    @property
    def item_count(self) -> int:
        return len(self.items)

    @classmethod
    def from_model(cls, order: OrderModel) -> OrderRecord:
        return cls(
            id=order.id,
            user_id=order.user_id,
            status=order.status,
            total_amount=order.total_amount,
            created_at=order.created_at,
            items=tuple(OrderItemRecord.from_model(item) for item in order.items),
        )


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a newest-first listing."""

    items: tuple[T, ...]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)


@dataclass(frozen=True)
class ProductAdjustmentHistory:
    product: ProductRecord
    adjustments: tuple[AdjustmentRecord, ...]


@dataclass(frozen=True)
class DailyOrderSummary:
    count: int
    total_revenue: Decimal
    orders: tuple[OrderRecord, ...]
