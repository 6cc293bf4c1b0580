"""
Domain events published after a successful commit.

Each event is a frozen dataclass with a class-level ``name`` (the wire
event name) and ``to_payload()`` producing the camelCase dict listeners
receive.  Decimals and UUIDs are rendered as strings; timestamps as ISO
8601.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar
from uuid import UUID

from inventory_kernel.domain.dtos import AdjustmentPlan, OrderRecord
from inventory_kernel.domain.values import AdjustmentType, OrderStatus


@dataclass(frozen=True)
class StockUpdated:
    name: ClassVar[str] = "stock:updated"

    product_id: UUID
    product_name: str
    old_stock: int
    new_stock: int
    change: int
    type: AdjustmentType
    reason: str | None
    timestamp: datetime

    @classmethod
    def from_plan(cls, plan: AdjustmentPlan, timestamp: datetime) -> StockUpdated:
        return cls(
            product_id=plan.product_id,
            product_name=plan.product_name,
            old_stock=plan.old_stock,
            new_stock=plan.new_stock,
            change=plan.movement.delta,
            type=plan.movement.type,
            reason=plan.movement.reason,
            timestamp=timestamp,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "productId": str(self.product_id),
            "productName": self.product_name,
            "oldStock": self.old_stock,
            "newStock": self.new_stock,
            "change": self.change,
            "type": self.type.value,
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class OrderCreated:
    name: ClassVar[str] = "order:created"

    order_id: UUID
    user_id: UUID
    user_name: str | None
    total_amount: Decimal
    item_count: int
    status: OrderStatus
    timestamp: datetime

    @classmethod
    def from_record(
        cls,
        order: OrderRecord,
        user_name: str | None,
        timestamp: datetime,
    ) -> OrderCreated:
        return cls(
            order_id=order.id,
            user_id=order.user_id,
            user_name=user_name,
            total_amount=order.total_amount,
            item_count=order.item_count,
            status=order.status,
            timestamp=timestamp,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "orderId": str(self.order_id),
            "userId": str(self.user_id),
            "userName": self.user_name,
            "totalAmount": str(self.total_amount),
            "itemCount": self.item_count,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
        }


DomainEvent = StockUpdated | OrderCreated
