"""
Pure domain layer.

This module contains pure data transfer objects and domain logic
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

Time enters only through an injected Clock.  All domain objects are
immutable and deterministic.
"""

from inventory_kernel.domain.adjustment_planning import (
    check_sign,
    plan_adjustment,
    validate_adjustment,
)
from inventory_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from inventory_kernel.domain.dtos import (
    AdjustmentPlan,
    AdjustmentRecord,
    AdjustmentRequest,
    AdjustmentResult,
    DailyOrderSummary,
    LedgerResult,
    OrderItemRecord,
    OrderLineRequest,
    OrderPlan,
    OrderRecord,
    OrderRequest,
    Page,
    PlannedLine,
    ProductAdjustmentHistory,
    ProductRecord,
    ProductSnapshot,
    StockMovement,
)
from inventory_kernel.domain.events import DomainEvent, OrderCreated, StockUpdated
from inventory_kernel.domain.order_planning import (
    aggregate_quantities,
    check_stock,
    find_missing_products,
    plan_order,
)
from inventory_kernel.domain.values import (
    AdjustmentType,
    OrderStatus,
    parse_adjustment_type,
    parse_order_status,
)

__all__ = [
    # Values
    "AdjustmentType",
    "OrderStatus",
    "parse_adjustment_type",
    "parse_order_status",
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # DTOs
    "AdjustmentPlan",
    "AdjustmentRecord",
    "AdjustmentRequest",
    "AdjustmentResult",
    "DailyOrderSummary",
    "LedgerResult",
    "OrderItemRecord",
    "OrderLineRequest",
    "OrderPlan",
    "OrderRecord",
    "OrderRequest",
    "Page",
    "PlannedLine",
    "ProductAdjustmentHistory",
    "ProductRecord",
    "ProductSnapshot",
    "StockMovement",
    # Events
    "DomainEvent",
    "OrderCreated",
    "StockUpdated",
    # Planning
    "aggregate_quantities",
    "check_stock",
    "find_missing_products",
    "plan_order",
    "plan_adjustment",
    "validate_adjustment",
    "check_sign",
]
