"""
OrderService -- the Order Transaction Engine.

Responsibility:
    Turns a list of {product_id, quantity} lines into a committed Order,
    decrementing stock for every line through the StockLedger, inside one
    transaction.  Also owns the order-side reads and the explicit status
    change.

Architecture position:
    Kernel > Services -- imperative shell around the pure planner in
    domain/order_planning.py.

    place_order() is an explicit transaction script:

        resolve (lock rows, one read)
            -> plan_order()            pure: existence, aggregate stock
                                       check, price capture, total
            -> write                   Order + OrderItems, then one ledger
                                       OUT movement per original line
            -> commit                  TransactionExecutor, all or nothing
            -> notify                  order:created, best-effort

Invariants enforced:
    - An order is visible iff all of its stock decrements are visible.
    - total_amount == sum(price_at_time * quantity) over its items.
    - Stock is checked against the aggregated quantity per product; stock
      is decremented per original line (one adjustment row per line,
      reason "Order <order id>").
    - Events are published strictly after commit and never on rollback.

Failure modes:
    - ValidationError / InvalidStatusError   malformed request (no I/O)
    - ProductNotFoundError                   lists every missing id
    - InsufficientStockError                 first product short of stock
    - OrderNotFoundError                     status update / lookup
    - TransactionFailureError                storage failure

Audit relevance:
    ``order_committed`` is logged once per committed order with its total
    and line count; each decrement is logged by the ledger.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session, sessionmaker

from inventory_kernel.domain.clock import Clock, utc_day_bounds
from inventory_kernel.domain.dtos import (
    DailyOrderSummary,
    OrderRecord,
    OrderRequest,
    Page,
    ProductSnapshot,
)
from inventory_kernel.domain.events import OrderCreated
from inventory_kernel.domain.order_planning import plan_order
from inventory_kernel.domain.values import OrderStatus, parse_order_status
from inventory_kernel.exceptions import OrderNotFoundError
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.models.order import Order, OrderItem
from inventory_kernel.selectors.order_selector import OrderSelector
from inventory_kernel.services.base import TransactionalService
from inventory_kernel.services.notifier import EventNotifier
from inventory_kernel.services.stock_ledger import StockLedger

logger = get_logger("services.order")


class OrderService(TransactionalService):
    """
    Order placement, status changes and order reads.

    Contract:
        Each public write runs as its own transaction via
        TransactionExecutor.  The notifier is injected; without one,
        publication is a no-op.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        notifier: EventNotifier | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(session_factory, clock)
        self._notifier = notifier or EventNotifier()

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def place_order(
        self,
        actor_id: UUID,
        request: OrderRequest,
        actor_name: str | None = None,
    ) -> OrderRecord:
        """
        Place an order.

        Preconditions:
            request has already passed boundary validation (at least one
            line, positive quantities, closed status).

        Postconditions:
            The order, its items, every stock decrement and every
            adjustment row are committed together.  order:created has been
            offered to the notifier.

        Raises:
            ProductNotFoundError, InsufficientStockError,
            TransactionFailureError.
        """
        with LogContext.bind(actor_id=actor_id):
            record = self._executor.run(
                "place_order",
                lambda session: self._place(session, actor_id, request),
            )
            logger.info(
                "order_committed",
                extra={
                    "order_id": str(record.id),
                    "total_amount": str(record.total_amount),
                    "line_count": record.item_count,
                    "status": record.status.value,
                },
            )
            self._notifier.publish(
                OrderCreated.from_record(record, actor_name, self._clock.now())
            )
            return record

    def _place(self, session: Session, actor_id: UUID, request: OrderRequest) -> OrderRecord:
        ledger = StockLedger(session, self._clock)

        # Resolve
        locked = ledger.lock_products(line.product_id for line in request.lines)
        snapshots = {
            product_id: ProductSnapshot.from_model(product)
            for product_id, product in locked.items()
        }

        # Plan
        plan = plan_order(request, snapshots)

        # Write
        order = Order(
            user_id=actor_id,
            status=plan.status,
            total_amount=plan.total_amount,
            created_at=self._clock.now(),
        )
        for line in plan.lines:
            order.items.append(
                OrderItem(
                    line_no=line.line_no,
                    product_id=line.product_id,
                    product=locked[line.product_id],
                    quantity=line.quantity,
                    price_at_time=line.price_at_time,
                )
            )
        session.add(order)
        session.flush()

        with LogContext.bind(order_id=order.id):
            for movement in plan.movements(order.id):
                ledger.apply(actor_id, movement)

        return OrderRecord.from_model(order)

    def update_order_status(
        self,
        order_id: UUID,
        status: OrderStatus | str,
    ) -> OrderRecord:
        """
        Explicit status change.  Items, total and stock are untouched;
        cancelling does not restock.
        """
        new_status = parse_order_status(status)

        def work(session: Session) -> OrderRecord:
            order = session.get(Order, order_id)
            if order is None:
                raise OrderNotFoundError(str(order_id))
            old_status = order.status
            order.status = new_status
            session.flush()
            logger.info(
                "order_status_changed",
                extra={
                    "order_id": str(order_id),
                    "from_status": old_status.value,
                    "to_status": new_status.value,
                },
            )
            return OrderRecord.from_model(order)

        return self._executor.run("update_order_status", work)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_order(self, order_id: UUID) -> OrderRecord:
        def work(session: Session) -> OrderRecord:
            record = OrderSelector(session).get(order_id)
            if record is None:
                raise OrderNotFoundError(str(order_id))
            return record

        return self._executor.read(work)

    def list_orders(
        self,
        page: int = 1,
        limit: int = 10,
        status: OrderStatus | str | None = None,
        user_id: UUID | None = None,
    ) -> Page[OrderRecord]:
        status_filter = parse_order_status(status) if status is not None else None
        return self._executor.read(
            lambda session: OrderSelector(session).list_orders(
                page=page, limit=limit, status=status_filter, user_id=user_id
            )
        )

    def todays_orders(self, now: datetime | None = None) -> DailyOrderSummary:
        """Orders created on the current UTC day, with count and revenue."""
        start, end = utc_day_bounds(now or self._clock.now())

        orders = self._executor.read(
            lambda session: OrderSelector(session).created_between(start, end)
        )
        return DailyOrderSummary(
            count=len(orders),
            total_revenue=sum((order.total_amount for order in orders), Decimal("0")),
            orders=tuple(orders),
        )
