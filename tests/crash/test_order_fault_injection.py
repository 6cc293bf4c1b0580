"""
Fault injection inside the order commit step.

The order header and its items are flushed before the stock ledger runs,
and earlier lines are already decremented when a later line fails.  A
failure at that point must still leave no order, no items, no adjustment
rows and no stock change behind, and must not publish order:created.
"""

from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from inventory_kernel.domain.dtos import OrderRequest
from inventory_kernel.exceptions import InsufficientStockError, TransactionFailureError
from inventory_kernel.models.adjustment import InventoryAdjustment
from inventory_kernel.models.order import Order, OrderItem
from inventory_kernel.models.product import Product
from inventory_kernel.services.stock_ledger import StockLedger


def _counts(session_factory) -> dict[str, int]:
    with session_factory() as s:
        return {
            model.__name__: s.execute(select(func.count()).select_from(model)).scalar_one()
            for model in (Order, OrderItem, InventoryAdjustment)
        }


def _stock(session_factory, product_id) -> int:
    with session_factory() as s:
        return s.get(Product, product_id).stock_level


def _failing_on_call(n: int, error: Exception):
    """Wrap StockLedger.apply so the n-th call raises ``error``."""
    original = StockLedger.apply
    calls = {"count": 0}

    def apply(self, actor_id, movement):
        calls["count"] += 1
        if calls["count"] == n:
            raise error
        return original(self, actor_id, movement)

    return apply, calls


class TestLedgerFailureMidOrder:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (
                InsufficientStockError("drained", "Widget", available=0, requested=3),
                InsufficientStockError,
            ),
            (
                OperationalError("UPDATE products", None, Exception("connection lost")),
                TransactionFailureError,
            ),
        ],
        ids=["stock_drained", "connection_lost"],
    )
    def test_second_line_failure_rolls_back_whole_order(
        self,
        create_product,
        order_service,
        session_factory,
        received_events,
        test_actor_id,
        error,
        expected,
    ):
        a = create_product(stock=10)
        b = create_product(stock=10)
        before = _counts(session_factory)
        received_events.clear()

        apply, calls = _failing_on_call(2, error)
        with patch.object(StockLedger, "apply", apply):
            with pytest.raises(expected):
                order_service.place_order(
                    test_actor_id, OrderRequest.build([(a.id, 2), (b.id, 3)])
                )

        assert calls["count"] == 2
        assert _counts(session_factory) == before
        assert _stock(session_factory, a.id) == 10
        assert _stock(session_factory, b.id) == 10
        assert received_events == []

    def test_order_succeeds_once_fault_is_gone(
        self, create_product, order_service, session_factory, test_actor_id
    ):
        a = create_product(stock=10)
        b = create_product(stock=10)
        request = OrderRequest.build([(a.id, 2), (b.id, 3)])

        apply, _ = _failing_on_call(2, InsufficientStockError("drained", "Widget", 0, 3))
        with patch.object(StockLedger, "apply", apply):
            with pytest.raises(InsufficientStockError):
                order_service.place_order(test_actor_id, request)

        order = order_service.place_order(test_actor_id, request)

        assert order.item_count == 2
        assert _stock(session_factory, a.id) == 8
        assert _stock(session_factory, b.id) == 7
        assert _counts(session_factory)["Order"] == 1
