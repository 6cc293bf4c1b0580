"""
StockLedger -- the only writer of Product.stock_level.

Responsibility:
    Applies one signed quantity delta to one product's stock and appends
    exactly one InventoryAdjustment row, both inside the caller's
    transaction.  Also provides the row locks the engines take before
    planning, so the state they plan against cannot change underneath
    them.

Architecture position:
    Kernel > Services -- imperative shell.
    Called by OrderService, AdjustmentService and ProductService from
    within a TransactionExecutor unit of work.  Never commits.

Invariants enforced:
    - stock_level never negative: the write is a guarded single-statement
      UPDATE (``stock_level + delta >= 0`` in the WHERE clause); a zero
      row count means the movement would go negative and raises
      InsufficientStockError.  This holds even if a concurrent writer
      slipped in between the caller's pre-check and this call.
    - One adjustment row per stock change, written in the same flush as
      the UPDATE, so both commit or neither does.
    - Type/sign coupling (IN > 0, OUT < 0) is re-checked here as a
      precondition of the ledger contract.
    - Deterministic lock order: lock_products() locks rows sorted by id,
      so two orders over the same products cannot deadlock each other.

Failure modes:
    - ProductNotFoundError   product does not exist
    - InsufficientStockError resulting level would be negative
    - InvalidAdjustmentError sign/type mismatch or zero delta

Audit relevance:
    Every call logs ``stock_adjusted`` with product, delta, old and new
    levels.  Summing a product's adjustments reproduces its stock level.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select, update

from inventory_kernel.domain.adjustment_planning import check_sign
from inventory_kernel.domain.dtos import (
    AdjustmentRecord,
    LedgerResult,
    StockMovement,
)
from inventory_kernel.domain.values import AdjustmentType
from inventory_kernel.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.adjustment import InventoryAdjustment
from inventory_kernel.models.product import Product
from inventory_kernel.services.base import SessionBoundService

logger = get_logger("services.stock_ledger")


class StockLedger(SessionBoundService):
    """
    Atomic stock movement writer.

    Contract:
        apply() either updates the stock level AND stages one adjustment
        row, or raises and stages nothing.

    Non-goals:
        - Does NOT commit; the enclosing TransactionExecutor does.
        - Does NOT publish events; engines publish after commit.
    """

    def lock_products(self, product_ids: Iterable[UUID]) -> dict[UUID, Product]:
        """
        Load and row-lock the given products in one read.

        Ids are deduplicated and locked in sorted order.  Absent ids are
        simply missing from the result; the caller decides how to report
        them.
        """
        distinct = sorted(set(product_ids), key=str)
        if not distinct:
            return {}
        rows = self.session.execute(
            select(Product)
            .where(Product.id.in_(distinct))
            .order_by(Product.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars()
        return {product.id: product for product in rows}

    def lock_product(self, product_id: UUID) -> Product:
        """Load and row-lock one product; ProductNotFoundError if absent."""
        product = self.lock_products([product_id]).get(product_id)
        if product is None:
            raise ProductNotFoundError([str(product_id)])
        return product

    def apply(self, actor_id: UUID, movement: StockMovement) -> LedgerResult:
        """
        Apply one stock movement.

        Preconditions:
            Called inside an open transaction.  movement.type matches the
            sign of movement.delta.

        Postconditions:
            Product.stock_level == old + delta, and one InventoryAdjustment
            with quantity == delta is flushed.

        Raises:
            InvalidAdjustmentError, ProductNotFoundError,
            InsufficientStockError.
        """
        check_sign(movement.type, movement.delta)
        product = self.lock_product(movement.product_id)
        old_stock = product.stock_level
        now = self._clock.now()

        result = self.session.execute(
            update(Product)
            .where(
                Product.id == movement.product_id,
                Product.stock_level + movement.delta >= 0,
            )
            .values(stock_level=Product.stock_level + movement.delta, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.warning(
                "stock_adjustment_rejected",
                extra={
                    "product_id": str(movement.product_id),
                    "delta": movement.delta,
                    "available": old_stock,
                },
            )
            raise InsufficientStockError(
                product_id=str(product.id),
                product_name=product.name,
                available=old_stock,
                requested=abs(movement.delta),
            )
        self.session.refresh(product, ["stock_level", "updated_at"])

        adjustment = InventoryAdjustment(
            product_id=movement.product_id,
            user_id=actor_id,
            quantity=movement.delta,
            type=movement.type,
            reason=movement.reason,
            order_id=movement.order_id,
            created_at=now,
        )
        adjustment.product = product
        self.session.add(adjustment)
        self.session.flush()

        new_stock = product.stock_level
        logger.info(
            "stock_adjusted",
            extra={
                "product_id": str(product.id),
                "adjustment_id": str(adjustment.id),
                "delta": movement.delta,
                "type": movement.type.value,
                "old_stock": old_stock,
                "new_stock": new_stock,
                "order_id": str(movement.order_id) if movement.order_id else None,
            },
        )

        return LedgerResult(
            product_id=product.id,
            old_stock=old_stock,
            new_stock=new_stock,
            adjustment=AdjustmentRecord.from_model(adjustment),
        )

    def apply_adjustment(
        self,
        product_id: UUID,
        delta: int,
        actor_id: UUID,
        type: AdjustmentType,
        reason: str | None,
        order_id: UUID | None = None,
    ) -> LedgerResult:
        """Keyword form of apply() for callers without a StockMovement."""
        return self.apply(
            actor_id,
            StockMovement(
                product_id=product_id,
                delta=delta,
                type=type,
                reason=reason,
                order_id=order_id,
            ),
        )
