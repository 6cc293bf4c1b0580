"""
Module: inventory_kernel.models.order
Responsibility: ORM persistence for orders and their line items.
Architecture position: Kernel > Models.  May import from db/ and
    domain/values.py only.

Invariants enforced:
    - total_amount == sum(price_at_time * quantity) over the order's items
      (computed once by the order planner; frozen afterwards).
    - OrderItem.quantity > 0 (CHECK constraint).
    - OrderItem rows are never updated; Order.total_amount and
      Order.user_id never change after insert (db/immutability.py).
    - Order exclusively owns its items: created together, deleted together.
"""

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory_kernel.db.base import TrackedBase, UUIDString
from inventory_kernel.domain.values import OrderStatus

if TYPE_CHECKING:
    from inventory_kernel.models.product import Product


class Order(TrackedBase):
    """
    A committed multi-item order.

    Contract:
        Visible to readers iff every stock decrement it caused is visible.
        Prices are captured on the items at creation time; later product
        price changes never alter the order.
    """

    __tablename__ = "orders"

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_orders_total_non_negative"),
        Index("idx_orders_user", "user_id"),
        Index("idx_orders_status", "status"),
        Index("idx_orders_created_at", "created_at"),
    )

    # Actor who placed the order
    user_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(
            OrderStatus,
            native_enum=False,
            validate_strings=True,
            length=16,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=OrderStatus.PENDING,
    )

    total_amount: Mapped[Decimal] = mapped_column(nullable=False)

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.line_no",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Order {self.id} status={self.status.value} total={self.total_amount}>"

    @property
    def item_count(self) -> int:
        return len(self.items)


class OrderItem(TrackedBase):
    """One line of an order, priced at order time."""

    __tablename__ = "order_items"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        CheckConstraint("price_at_time >= 0", name="ck_order_items_price_non_negative"),
        UniqueConstraint("order_id", "line_no", name="uq_order_items_line"),
        Index("idx_order_items_product", "product_id"),
    )

    order_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Position of the line in the submitted request
    line_no: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    product_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("products.id"),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    price_at_time: Mapped[Decimal] = mapped_column(nullable=False)

    order: Mapped["Order"] = relationship(
        back_populates="items",
    )

    product: Mapped["Product"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<OrderItem {self.line_no} {self.quantity}x {self.product_id} @ {self.price_at_time}>"

    @property
    def line_total(self) -> Decimal:
        return self.price_at_time * self.quantity
