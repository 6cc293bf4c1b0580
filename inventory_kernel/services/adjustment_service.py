"""
AdjustmentService -- the Adjustment Transaction Engine.

Responsibility:
    Applies one manual stock correction (IN or OUT) through the
    StockLedger and publishes ``stock:updated`` after commit.  Also owns
    the adjustment-trail reads.

Architecture position:
    Kernel > Services -- imperative shell around domain/adjustment_planning.py.

        validate_adjustment()   pure, before any storage access
            -> lock product     ProductNotFoundError if absent
            -> plan_adjustment  pure: prospective level, InsufficientStock
            -> ledger.apply     one UPDATE + one adjustment row
            -> commit           TransactionExecutor
            -> notify           stock:updated, best-effort

Invariants enforced:
    - IN requires quantity > 0, OUT requires quantity < 0; violations are
      rejected before the database is touched.
    - Stock never goes negative.

Failure modes:
    - InvalidAdjustmentError, ProductNotFoundError,
      InsufficientStockError, TransactionFailureError.
"""

from uuid import UUID

from sqlalchemy.orm import Session, sessionmaker

from inventory_kernel.domain.adjustment_planning import plan_adjustment, validate_adjustment
from inventory_kernel.domain.clock import Clock
from inventory_kernel.domain.dtos import (
    AdjustmentPlan,
    AdjustmentRecord,
    AdjustmentRequest,
    AdjustmentResult,
    Page,
    ProductAdjustmentHistory,
    ProductSnapshot,
)
from inventory_kernel.domain.events import StockUpdated
from inventory_kernel.domain.values import AdjustmentType, parse_adjustment_type
from inventory_kernel.exceptions import ProductNotFoundError
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.selectors.adjustment_selector import AdjustmentSelector
from inventory_kernel.selectors.product_selector import ProductSelector
from inventory_kernel.services.base import TransactionalService
from inventory_kernel.services.notifier import EventNotifier
from inventory_kernel.services.stock_ledger import StockLedger

logger = get_logger("services.adjustment")


class AdjustmentService(TransactionalService):
    """Manual stock corrections and adjustment-trail reads."""

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        notifier: EventNotifier | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(session_factory, clock)
        self._notifier = notifier or EventNotifier()

    def create_adjustment(
        self,
        actor_id: UUID,
        request: AdjustmentRequest,
    ) -> AdjustmentResult:
        """
        Apply one manual adjustment.

        Postconditions:
            Product.stock_level changed by request.quantity and one
            adjustment row exists, both committed.  stock:updated has been
            offered to the notifier.

        Raises:
            InvalidAdjustmentError, ProductNotFoundError,
            InsufficientStockError, TransactionFailureError.
        """
        validate_adjustment(request)

        with LogContext.bind(actor_id=actor_id, product_id=request.product_id):

            def work(session: Session) -> tuple[AdjustmentPlan, AdjustmentResult]:
                ledger = StockLedger(session, self._clock)
                product = ledger.lock_product(request.product_id)
                plan = plan_adjustment(request, ProductSnapshot.from_model(product))
                applied = ledger.apply(actor_id, plan.movement)
                return plan, AdjustmentResult(
                    adjustment=applied.adjustment,
                    new_stock_level=applied.new_stock,
                )

            plan, result = self._executor.run("create_adjustment", work)
            logger.info(
                "adjustment_committed",
                extra={
                    "adjustment_id": str(result.adjustment.id),
                    "quantity": request.quantity,
                    "type": request.type.value,
                    "new_stock": result.new_stock_level,
                },
            )
            self._notifier.publish(
                StockUpdated.from_plan(plan, result.adjustment.timestamp)
            )
            return result

    def list_adjustments(
        self,
        page: int = 1,
        limit: int = 20,
        product_id: UUID | None = None,
        type: AdjustmentType | str | None = None,
    ) -> Page[AdjustmentRecord]:
        type_filter = parse_adjustment_type(type) if type is not None else None
        return self._executor.read(
            lambda session: AdjustmentSelector(session).list_adjustments(
                page=page, limit=limit, product_id=product_id, type=type_filter
            )
        )

    def product_adjustments(self, product_id: UUID) -> ProductAdjustmentHistory:
        """Product summary and its full adjustment trail, newest first."""

        def work(session: Session) -> ProductAdjustmentHistory:
            product = ProductSelector(session).get(product_id)
            if product is None:
                raise ProductNotFoundError([str(product_id)])
            return ProductAdjustmentHistory(
                product=product,
                adjustments=AdjustmentSelector(session).for_product(product_id),
            )

        return self._executor.read(work)
