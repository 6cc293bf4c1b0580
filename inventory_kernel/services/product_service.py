"""
ProductService -- catalogue maintenance.

Responsibility:
    Creates, updates and deletes products and serves catalogue reads.
    Stock is never written here directly: a non-zero initial stock is
    booked through the StockLedger as an IN adjustment ("Initial stock"),
    and update_product() has no stock parameter at all.

Architecture position:
    Kernel > Services -- plain CRUD around ProductSelector and StockLedger.

Failure modes:
    - ValidationError        blank name/SKU, negative price, threshold or
                             initial stock
    - DuplicateSkuError      SKU already used by another product
    - ProductNotFoundError   update/delete/get of an unknown id
    - TransactionFailureError storage failure, including deleting a
                             product that adjustments or orders reference
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from inventory_kernel.db.types import money_from_str, round_money
from inventory_kernel.domain.dtos import (
    Page,
    ProductAdjustmentHistory,
    ProductRecord,
    StockMovement,
)
from inventory_kernel.domain.values import AdjustmentType
from inventory_kernel.exceptions import (
    DuplicateSkuError,
    ProductNotFoundError,
    ValidationError,
)
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.models.product import Product
from inventory_kernel.selectors.product_selector import ProductSelector
from inventory_kernel.services.base import TransactionalService
from inventory_kernel.services.stock_ledger import StockLedger

logger = get_logger("services.product")

INITIAL_STOCK_REASON = "Initial stock"

_UNSET = object()


def _parse_price(value: Decimal | str | int) -> Decimal:
    try:
        price = value if isinstance(value, Decimal) else money_from_str(str(value))
    except ValueError:
        raise ValidationError(
            f"Invalid price: {value!r}",
            field_errors=[{"field": "price", "message": "must be a decimal amount"}],
        ) from None
    if not price.is_finite() or price < 0:
        raise ValidationError(
            "Price must be a non-negative amount",
            field_errors=[{"field": "price", "message": "must be >= 0"}],
        )
    return round_money(price)


def _require_text(field: str, value: str | None) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(
            f"{field} is required",
            field_errors=[{"field": field, "message": "must not be blank"}],
        )
    return str(value).strip()


def _require_non_negative_int(field: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(
            f"{field} must be a non-negative integer",
            field_errors=[{"field": field, "message": "must be an integer >= 0"}],
        )
    return value


class ProductService(TransactionalService):
    """Catalogue writes and reads."""

    def create_product(
        self,
        actor_id: UUID,
        name: str,
        sku: str,
        price: Decimal | str | int,
        description: str | None = None,
        initial_stock: int = 0,
        low_stock_threshold: int = 10,
    ) -> ProductRecord:
        """
        Create a product; a positive initial_stock is booked via the ledger.

        Raises:
            ValidationError, DuplicateSkuError, TransactionFailureError.
        """
        name = _require_text("name", name)
        sku = _require_text("sku", sku)
        price = _parse_price(price)
        initial_stock = _require_non_negative_int("initial_stock", initial_stock)
        low_stock_threshold = _require_non_negative_int(
            "low_stock_threshold", low_stock_threshold
        )

        def work(session: Session) -> ProductRecord:
            if ProductSelector(session).get_by_sku(sku) is not None:
                raise DuplicateSkuError(sku)

            now = self._clock.now()
            product = Product(
                sku=sku,
                name=name,
                description=description,
                price=price,
                stock_level=0,
                low_stock_threshold=low_stock_threshold,
                created_at=now,
                updated_at=now,
            )
            session.add(product)
            session.flush()

            if initial_stock > 0:
                StockLedger(session, self._clock).apply(
                    actor_id,
                    StockMovement(
                        product_id=product.id,
                        delta=initial_stock,
                        type=AdjustmentType.IN,
                        reason=INITIAL_STOCK_REASON,
                    ),
                )
            return ProductRecord.from_model(product)

        with LogContext.bind(actor_id=actor_id):
            record = self._executor.run("create_product", work)
            logger.info(
                "product_created",
                extra={
                    "product_id": str(record.id),
                    "sku": record.sku,
                    "initial_stock": record.stock_level,
                },
            )
        return record

    def update_product(
        self,
        product_id: UUID,
        *,
        name: str | None = None,
        sku: str | None = None,
        description=_UNSET,
        price: Decimal | str | int | None = None,
        low_stock_threshold: int | None = None,
    ) -> ProductRecord:
        """
        Update catalogue fields.  Only the arguments given are changed.

        Price changes never touch existing orders, which keep their
        captured price_at_time.
        """
        changes: dict = {}
        if name is not None:
            changes["name"] = _require_text("name", name)
        if sku is not None:
            changes["sku"] = _require_text("sku", sku)
        if description is not _UNSET:
            changes["description"] = description
        if price is not None:
            changes["price"] = _parse_price(price)
        if low_stock_threshold is not None:
            changes["low_stock_threshold"] = _require_non_negative_int(
                "low_stock_threshold", low_stock_threshold
            )

        def work(session: Session) -> ProductRecord:
            product = session.get(Product, product_id)
            if product is None:
                raise ProductNotFoundError([str(product_id)])
            new_sku = changes.get("sku")
            if new_sku is not None and new_sku != product.sku:
                existing = ProductSelector(session).get_by_sku(new_sku)
                if existing is not None:
                    raise DuplicateSkuError(new_sku)
            for field, value in changes.items():
                setattr(product, field, value)
            product.updated_at = self._clock.now()
            session.flush()
            return ProductRecord.from_model(product)

        record = self._executor.run("update_product", work)
        logger.info(
            "product_updated",
            extra={"product_id": str(product_id), "fields": sorted(changes)},
        )
        return record

    def delete_product(self, product_id: UUID) -> None:
        """
        Delete a product with no history.

        A product referenced by adjustments or order items is rejected by
        the storage layer's referential integrity (TransactionFailureError).
        """

        def work(session: Session) -> None:
            product = session.get(Product, product_id)
            if product is None:
                raise ProductNotFoundError([str(product_id)])
            session.delete(product)
            session.flush()

        self._executor.run("delete_product", work)
        logger.info("product_deleted", extra={"product_id": str(product_id)})

    def get_product(self, product_id: UUID) -> ProductAdjustmentHistory:
        """Product with its 10 most recent adjustments."""

        def work(session: Session) -> ProductAdjustmentHistory:
            detail = ProductSelector(session).get_with_recent_adjustments(product_id)
            if detail is None:
                raise ProductNotFoundError([str(product_id)])
            return detail

        return self._executor.read(work)

    def list_products(self, page: int = 1, limit: int = 10) -> Page[ProductRecord]:
        return self._executor.read(
            lambda session: ProductSelector(session).list_products(page=page, limit=limit)
        )

    def low_stock_products(self) -> list[ProductRecord]:
        return self._executor.read(lambda session: ProductSelector(session).low_stock())
