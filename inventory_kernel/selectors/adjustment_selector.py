"""
Module: inventory_kernel.selectors.adjustment_selector
Responsibility: Read-only access to the inventory adjustment trail.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Newest first: every listing is ordered by created_at DESC.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from inventory_kernel.domain.dtos import AdjustmentRecord, Page
from inventory_kernel.domain.values import AdjustmentType
from inventory_kernel.models.adjustment import InventoryAdjustment
from inventory_kernel.selectors.base import BaseSelector


class AdjustmentSelector(BaseSelector[InventoryAdjustment]):
    """Selector for inventory adjustment queries."""

    def __init__(self, session: Session):
        super().__init__(session)

    def _newest_first(self):
        return select(InventoryAdjustment).order_by(
            InventoryAdjustment.created_at.desc(),
            InventoryAdjustment.id.desc(),
        )

    def list_adjustments(
        self,
        page: int = 1,
        limit: int = 20,
        product_id: UUID | None = None,
        type: AdjustmentType | None = None,
    ) -> Page[AdjustmentRecord]:
        stmt = self._newest_first()
        if product_id is not None:
            stmt = stmt.where(InventoryAdjustment.product_id == product_id)
        if type is not None:
            stmt = stmt.where(InventoryAdjustment.type == type)
        return self._paginate(stmt, page, limit, AdjustmentRecord.from_model)

    def for_product(
        self,
        product_id: UUID,
        limit: int | None = None,
    ) -> tuple[AdjustmentRecord, ...]:
        stmt = self._newest_first().where(InventoryAdjustment.product_id == product_id)
        if limit is not None:
            stmt = stmt.limit(limit)
        rows = self.session.execute(stmt).unique().scalars()
        return tuple(AdjustmentRecord.from_model(row) for row in rows)

    def for_order(self, order_id: UUID) -> tuple[AdjustmentRecord, ...]:
        rows = self.session.execute(
            select(InventoryAdjustment)
            .where(InventoryAdjustment.order_id == order_id)
            .order_by(InventoryAdjustment.created_at, InventoryAdjustment.id)
        ).unique().scalars()
        return tuple(AdjustmentRecord.from_model(row) for row in rows)

    def stock_from_history(self, product_id: UUID) -> int:
        """Sum of every recorded delta for a product."""
        return sum(record.quantity for record in self.for_product(product_id))
