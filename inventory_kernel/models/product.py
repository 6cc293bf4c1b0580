"""
Module: inventory_kernel.models.product
Responsibility: ORM persistence for the product catalogue and its current
    stock level.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - stock_level >= 0 (CHECK constraint; the stock ledger's guarded UPDATE
      keeps it from ever being attempted).
    - price >= 0, low_stock_threshold >= 0 (CHECK constraints).
    - SKU uniqueness (UNIQUE constraint).
    - stock_level is mutated only by services.stock_ledger.StockLedger.

Failure modes:
    - IntegrityError on duplicate SKU or on a CHECK violation.
"""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TrackedBase


class Product(TrackedBase):
    """
    A sellable item with a tracked on-hand quantity.

    Contract:
        stock_level reflects the sum of every InventoryAdjustment ever
        recorded against the product.  No code path other than the stock
        ledger writes to it.
    """

    __tablename__ = "products"

    __table_args__ = (
        CheckConstraint("stock_level >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint(
            "low_stock_threshold >= 0",
            name="ck_products_threshold_non_negative",
        ),
        Index("idx_products_stock_level", "stock_level"),
    )

    sku: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    price: Mapped[Decimal] = mapped_column(nullable=False)

    stock_level: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    low_stock_threshold: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=10,
    )

    def __repr__(self) -> str:
        return f"<Product {self.sku} stock={self.stock_level}>"

    @property
    def is_low_stock(self) -> bool:
        """True when stock is at or below the low-stock threshold."""
        return self.stock_level <= self.low_stock_threshold
