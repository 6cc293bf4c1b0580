"""
Tests for OrderService -- order placement, status changes and reads.
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from inventory_kernel.domain.dtos import OrderRequest
from inventory_kernel.domain.values import AdjustmentType, OrderStatus
from inventory_kernel.exceptions import (
    InsufficientStockError,
    InvalidStatusError,
    OrderNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from inventory_kernel.models.adjustment import InventoryAdjustment
from inventory_kernel.models.order import Order
from inventory_kernel.selectors.adjustment_selector import AdjustmentSelector
from inventory_kernel.services.notifier import EventNotifier
from inventory_kernel.services.order_service import OrderService


def _count(session_factory, model) -> int:
    with session_factory() as s:
        return s.execute(select(func.count()).select_from(model)).scalar_one()


class TestPlaceOrder:
    def test_duplicate_lines_decrement_per_line(
        self, create_product, order_service, product_service, session_factory, test_actor_id
    ):
        product = create_product(stock=10, price="10.00")

        order = order_service.place_order(
            test_actor_id, OrderRequest.build([(product.id, 4), (product.id, 3)])
        )

        assert order.total_amount == Decimal("70.00")
        assert order.status == OrderStatus.PENDING
        assert [item.quantity for item in order.items] == [4, 3]
        assert product_service.get_product(product.id).product.stock_level == 3

        with session_factory() as s:
            movements = AdjustmentSelector(s).for_order(order.id)
        assert sorted(m.quantity for m in movements) == [-4, -3]
        assert all(m.type == AdjustmentType.OUT for m in movements)
        assert all(m.reason == f"Order {order.id}" for m in movements)
        assert all(m.user_id == test_actor_id for m in movements)

    def test_multi_product_order(self, create_product, order_service, test_actor_id):
        a = create_product(stock=5, price="2.50")
        b = create_product(stock=5, price="4.00")

        order = order_service.place_order(
            test_actor_id, OrderRequest.build([(a.id, 2), (b.id, 1)])
        )

        assert order.total_amount == Decimal("9.00")
        assert order.item_count == 2
        assert [item.line_no for item in order.items] == [1, 2]
        assert order.items[0].product_name == a.name

    def test_explicit_status(self, create_product, order_service, test_actor_id):
        product = create_product(stock=1)
        order = order_service.place_order(
            test_actor_id, OrderRequest.build([(product.id, 1)], status="COMPLETED")
        )
        assert order.status == OrderStatus.COMPLETED

    def test_insufficient_stock_rolls_back_everything(
        self, create_product, order_service, product_service, session_factory, test_actor_id
    ):
        plenty = create_product(stock=10)
        scarce = create_product(stock=1, name="Scarce")
        orders_before = _count(session_factory, Order)
        adjustments_before = _count(session_factory, InventoryAdjustment)

        with pytest.raises(InsufficientStockError) as exc_info:
            order_service.place_order(
                test_actor_id, OrderRequest.build([(plenty.id, 5), (scarce.id, 2)])
            )

        assert exc_info.value.product_name == "Scarce"
        assert exc_info.value.available == 1
        assert exc_info.value.requested == 2
        assert product_service.get_product(plenty.id).product.stock_level == 10
        assert product_service.get_product(scarce.id).product.stock_level == 1
        assert _count(session_factory, Order) == orders_before
        assert _count(session_factory, InventoryAdjustment) == adjustments_before

    def test_aggregated_shortfall_is_rejected(
        self, create_product, order_service, product_service, test_actor_id
    ):
        product = create_product(stock=5)

        with pytest.raises(InsufficientStockError) as exc_info:
            order_service.place_order(
                test_actor_id, OrderRequest.build([(product.id, 3), (product.id, 3)])
            )

        assert exc_info.value.requested == 6
        assert product_service.get_product(product.id).product.stock_level == 5

    def test_missing_products_are_reported(
        self, create_product, order_service, session_factory, test_actor_id
    ):
        product = create_product(stock=5)
        missing = uuid4()

        with pytest.raises(ProductNotFoundError) as exc_info:
            order_service.place_order(
                test_actor_id, OrderRequest.build([(product.id, 1), (missing, 1)])
            )

        assert exc_info.value.product_ids == [str(missing)]
        assert _count(session_factory, Order) == 0

    def test_failed_order_publishes_nothing(
        self, create_product, order_service, received_events, test_actor_id
    ):
        product = create_product(stock=0)

        with pytest.raises(InsufficientStockError):
            order_service.place_order(test_actor_id, OrderRequest.build([(product.id, 1)]))

        assert received_events == []

    def test_publishes_order_created_after_commit(
        self, create_product, order_service, received_events, test_actor_id, deterministic_clock
    ):
        product = create_product(stock=5, price="3.00")

        order = order_service.place_order(
            test_actor_id,
            OrderRequest.build([(product.id, 2)]),
            actor_name="Dana",
        )

        assert received_events == [
            (
                "order:created",
                {
                    "orderId": str(order.id),
                    "userId": str(test_actor_id),
                    "userName": "Dana",
                    "totalAmount": "6.00",
                    "itemCount": 1,
                    "status": "PENDING",
                    "timestamp": deterministic_clock.now().isoformat(),
                },
            )
        ]

    def test_notifier_failure_does_not_undo_the_order(
        self, create_product, session_factory, deterministic_clock, product_service, test_actor_id
    ):
        class ExplodingTransport:
            def emit(self, event_name, payload):
                raise ConnectionError("listener gone")

        service = OrderService(
            session_factory,
            notifier=EventNotifier(ExplodingTransport()),
            clock=deterministic_clock,
        )
        product = create_product(stock=2)

        order = service.place_order(test_actor_id, OrderRequest.build([(product.id, 2)]))

        assert service.get_order(order.id).id == order.id
        assert product_service.get_product(product.id).product.stock_level == 0

    def test_logs_order_committed(
        self, create_product, order_service, test_actor_id, captured_logs
    ):
        product = create_product(stock=2)

        order = order_service.place_order(test_actor_id, OrderRequest.build([(product.id, 1)]))

        records = [r for r in captured_logs() if r["message"] == "order_committed"]
        assert len(records) == 1
        assert records[0]["order_id"] == str(order.id)
        assert records[0]["actor_id"] == str(test_actor_id)
        assert records[0]["line_count"] == 1


class TestPriceCapture:
    def test_order_keeps_price_after_product_price_change(
        self, create_product, order_service, product_service, test_actor_id
    ):
        product = create_product(stock=10, price="10.00")
        order = order_service.place_order(test_actor_id, OrderRequest.build([(product.id, 2)]))

        first_read = order_service.get_order(order.id)
        product_service.update_product(product.id, price="99.99")
        second_read = order_service.get_order(order.id)

        assert first_read.total_amount == second_read.total_amount == Decimal("20.00")
        assert second_read.items[0].price_at_time == Decimal("10.00")
        assert first_read.items == second_read.items


class TestUpdateOrderStatus:
    def test_cancel_does_not_restock(
        self, create_product, order_service, product_service, test_actor_id
    ):
        product = create_product(stock=5)
        order = order_service.place_order(test_actor_id, OrderRequest.build([(product.id, 2)]))

        updated = order_service.update_order_status(order.id, "CANCELLED")

        assert updated.status == OrderStatus.CANCELLED
        assert updated.total_amount == order.total_amount
        assert product_service.get_product(product.id).product.stock_level == 3

    def test_unknown_order(self, order_service, session_factory):
        with pytest.raises(OrderNotFoundError):
            order_service.update_order_status(uuid4(), OrderStatus.COMPLETED)

    def test_invalid_status(self, order_service, session_factory):
        with pytest.raises(InvalidStatusError):
            order_service.update_order_status(uuid4(), "SHIPPED")


class TestOrderReads:
    def test_get_unknown_order(self, order_service, session_factory):
        with pytest.raises(OrderNotFoundError):
            order_service.get_order(uuid4())

    def test_list_is_newest_first_and_paginated(
        self, create_product, order_service, deterministic_clock, test_actor_id
    ):
        product = create_product(stock=10)
        placed = []
        for _ in range(3):
            deterministic_clock.advance(60)
            placed.append(
                order_service.place_order(test_actor_id, OrderRequest.build([(product.id, 1)]))
            )

        first = order_service.list_orders(page=1, limit=2)
        second = order_service.list_orders(page=2, limit=2)

        assert [o.id for o in first.items] == [placed[2].id, placed[1].id]
        assert [o.id for o in second.items] == [placed[0].id]
        assert first.total == 3
        assert first.total_pages == 2

    def test_list_filters_by_status_and_user(
        self, create_product, order_service, test_actor_id
    ):
        product = create_product(stock=10)
        other_user = uuid4()
        mine = order_service.place_order(test_actor_id, OrderRequest.build([(product.id, 1)]))
        theirs = order_service.place_order(
            other_user, OrderRequest.build([(product.id, 1)], status="COMPLETED")
        )

        completed = order_service.list_orders(status="completed")
        by_user = order_service.list_orders(user_id=test_actor_id)

        assert [o.id for o in completed.items] == [theirs.id]
        assert [o.id for o in by_user.items] == [mine.id]

    def test_invalid_page_is_rejected(self, order_service, session_factory):
        with pytest.raises(ValidationError):
            order_service.list_orders(page=0)

    def test_todays_orders(
        self, create_product, order_service, deterministic_clock, test_actor_id
    ):
        product = create_product(stock=10, price="5.00")
        deterministic_clock.set_time(datetime(2024, 3, 1, 23, 30, tzinfo=timezone.utc))
        order_service.place_order(test_actor_id, OrderRequest.build([(product.id, 1)]))
        deterministic_clock.set_time(datetime(2024, 3, 2, 0, 15, tzinfo=timezone.utc))
        today_1 = order_service.place_order(test_actor_id, OrderRequest.build([(product.id, 2)]))
        deterministic_clock.advance(3600)
        today_2 = order_service.place_order(test_actor_id, OrderRequest.build([(product.id, 3)]))

        summary = order_service.todays_orders()

        assert summary.count == 2
        assert summary.total_revenue == Decimal("25.00")
        assert [o.id for o in summary.orders] == [today_2.id, today_1.id]
