"""
Module: inventory_kernel.models.adjustment
Responsibility: ORM persistence for inventory adjustments -- the append-only
    audit trail of every stock movement.
Architecture position: Kernel > Models.  May import from db/ and
    domain/values.py only.

Invariants enforced:
    - quantity != 0 (CHECK constraint).
    - Sign/type coupling: IN rows carry a positive quantity, OUT rows a
      negative one (CHECK constraint).
    - Append-only: rows are never updated or deleted (ORM listeners in
      db/immutability.py).

Audit relevance:
    Every change to Product.stock_level has exactly one adjustment row,
    written in the same transaction by the stock ledger.
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory_kernel.db.base import TrackedBase, UUIDString
from inventory_kernel.domain.values import AdjustmentType

if TYPE_CHECKING:
    from inventory_kernel.models.product import Product


class InventoryAdjustment(TrackedBase):
    """
    Immutable record of one signed change to a product's stock level.

    Contract:
        Created exactly once per stock ledger mutation; never updated or
        deleted.  created_at is the adjustment timestamp.
    """

    __tablename__ = "inventory_adjustments"

    __table_args__ = (
        CheckConstraint("quantity <> 0", name="ck_adjustments_quantity_non_zero"),
        CheckConstraint(
            "(type = 'IN' AND quantity > 0) OR (type = 'OUT' AND quantity < 0)",
            name="ck_adjustments_sign_matches_type",
        ),
        Index("idx_adjustments_product", "product_id"),
        Index("idx_adjustments_user", "user_id"),
        Index("idx_adjustments_order", "order_id"),
        Index("idx_adjustments_created_at", "created_at"),
    )

    product_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("products.id"),
        nullable=False,
    )

    # Actor who caused the movement
    user_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    # Signed delta: positive = stock in, negative = stock out
    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    type: Mapped[AdjustmentType] = mapped_column(
        SAEnum(
            AdjustmentType,
            native_enum=False,
            validate_strings=True,
            length=8,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )

    reason: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Set when the movement was driven by an order
    order_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("orders.id"),
        nullable=True,
    )

    product: Mapped["Product"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<InventoryAdjustment {self.type.value} {self.quantity:+d} product={self.product_id}>"

    @property
    def timestamp(self) -> datetime:
        return self.created_at
