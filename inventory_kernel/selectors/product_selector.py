"""
Module: inventory_kernel.selectors.product_selector
Responsibility: Read-only product queries: point lookups, the paginated
    catalogue, product detail with recent adjustments, and low-stock reports.
Architecture position: Kernel > Selectors.

Failure modes:
    - Returns None when a product does not exist.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from inventory_kernel.domain.dtos import Page, ProductAdjustmentHistory, ProductRecord
from inventory_kernel.models.product import Product
from inventory_kernel.selectors.adjustment_selector import AdjustmentSelector
from inventory_kernel.selectors.base import BaseSelector

RECENT_ADJUSTMENT_LIMIT = 10


class ProductSelector(BaseSelector[Product]):
    """Selector for product queries."""

    def __init__(self, session: Session):
        super().__init__(session)

    def get(self, product_id: UUID) -> ProductRecord | None:
        product = self.session.get(Product, product_id)
        if product is None:
            return None
        return ProductRecord.from_model(product)

    def get_by_sku(self, sku: str) -> ProductRecord | None:
        product = self.session.execute(
            select(Product).where(Product.sku == sku)
        ).scalar_one_or_none()
        if product is None:
            return None
        return ProductRecord.from_model(product)

    def get_with_recent_adjustments(
        self,
        product_id: UUID,
        limit: int = RECENT_ADJUSTMENT_LIMIT,
    ) -> ProductAdjustmentHistory | None:
        """Product plus its ``limit`` most recent adjustments, newest first."""
        product = self.get(product_id)
        if product is None:
            return None
        adjustments = AdjustmentSelector(self.session).for_product(product_id, limit=limit)
        return ProductAdjustmentHistory(product=product, adjustments=adjustments)

    def list_products(self, page: int = 1, limit: int = 10) -> Page[ProductRecord]:
        stmt = select(Product).order_by(Product.created_at.desc(), Product.id.desc())
        return self._paginate(stmt, page, limit, ProductRecord.from_model)

    def low_stock(self) -> list[ProductRecord]:
        """Products at or below their threshold, lowest stock first."""
        rows = self.session.execute(
            select(Product)
            .where(Product.stock_level <= Product.low_stock_threshold)
            .order_by(Product.stock_level.asc(), Product.sku.asc())
        ).scalars()
        return [ProductRecord.from_model(product) for product in rows]
