"""
Module: inventory_kernel.selectors.order_selector
Responsibility: Read-only order queries.  Orders are returned with their
    items (each item carrying product name and SKU).
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Repeated reads of the same order return the same total and items;
      nothing here recomputes prices from the current catalogue.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from inventory_kernel.domain.dtos import OrderRecord, Page
from inventory_kernel.domain.values import OrderStatus
from inventory_kernel.models.order import Order
from inventory_kernel.selectors.base import BaseSelector


class OrderSelector(BaseSelector[Order]):
    """Selector for order queries."""

    def __init__(self, session: Session):
        super().__init__(session)

    def get(self, order_id: UUID) -> OrderRecord | None:
        order = self.session.get(Order, order_id)
        if order is None:
            return None
        return OrderRecord.from_model(order)

    def list_orders(
        self,
        page: int = 1,
        limit: int = 10,
        status: OrderStatus | None = None,
        user_id: UUID | None = None,
    ) -> Page[OrderRecord]:
        stmt = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
        if status is not None:
            stmt = stmt.where(Order.status == status)
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        return self._paginate(stmt, page, limit, OrderRecord.from_model)

    def created_between(self, start: datetime, end: datetime) -> list[OrderRecord]:
        """Orders with start <= created_at < end, newest first."""
        rows = self.session.execute(
            select(Order)
            .where(Order.created_at >= start, Order.created_at < end)
            .order_by(Order.created_at.desc(), Order.id.desc())
        ).scalars()
        return [OrderRecord.from_model(order) for order in rows]
