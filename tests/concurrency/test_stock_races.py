"""
Concurrency tests for the stock ledger.

Threads are released together with a Barrier so their transactions
overlap.  On PostgreSQL the row locks serialize the writers; on SQLite
BEGIN IMMEDIATE does.  Either way the outcome must be the same: no lost
updates and never negative stock.
"""

from concurrent.futures import ThreadPoolExecutor
from threading import Barrier
from uuid import uuid4

import pytest

from inventory_kernel.domain.dtos import AdjustmentRequest, OrderRequest
from inventory_kernel.exceptions import InsufficientStockError
from inventory_kernel.selectors.adjustment_selector import AdjustmentSelector

pytestmark = pytest.mark.slow_locks

THREADS = 8


def _run_together(fn, count: int = THREADS):
    barrier = Barrier(count)

    def worker(i):
        barrier.wait()
        try:
            return ("ok", fn(i))
        except InsufficientStockError as exc:
            return ("insufficient", exc)

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(worker, range(count)))


def test_last_unit_is_sold_exactly_once(
    create_product, order_service, product_service, session_factory
):
    product = create_product(stock=1)

    outcomes = _run_together(
        lambda i: order_service.place_order(uuid4(), OrderRequest.build([(product.id, 1)]))
    )

    assert [kind for kind, _ in outcomes].count("ok") == 1
    assert [kind for kind, _ in outcomes].count("insufficient") == THREADS - 1
    assert product_service.get_product(product.id).product.stock_level == 0
    assert order_service.list_orders().total == 1


def test_concurrent_adjustments_lose_no_updates(
    create_product, adjustment_service, product_service, session_factory, test_actor_id
):
    product = create_product(stock=5)

    outcomes = _run_together(
        lambda i: adjustment_service.create_adjustment(
            test_actor_id, AdjustmentRequest.build(product.id, i + 1, "IN")
        )
    )

    assert all(kind == "ok" for kind, _ in outcomes)
    expected = 5 + sum(range(1, THREADS + 1))
    assert product_service.get_product(product.id).product.stock_level == expected
    with session_factory() as s:
        assert AdjustmentSelector(s).stock_from_history(product.id) == expected


def test_mixed_orders_and_withdrawals_never_go_negative(
    create_product, order_service, adjustment_service, product_service, session_factory,
    test_actor_id,
):
    product = create_product(stock=5)

    def act(i):
        if i % 2:
            return order_service.place_order(
                test_actor_id, OrderRequest.build([(product.id, 2)])
            )
        return adjustment_service.create_adjustment(
            test_actor_id, AdjustmentRequest.build(product.id, -2, "OUT")
        )

    outcomes = _run_together(act)

    successes = [kind for kind, _ in outcomes].count("ok")
    final = product_service.get_product(product.id).product.stock_level
    assert successes == 2
    assert final == 1
    with session_factory() as s:
        assert AdjustmentSelector(s).stock_from_history(product.id) == final


def test_opposite_line_order_does_not_deadlock(
    create_product, order_service, product_service, test_actor_id
):
    a = create_product(stock=100)
    b = create_product(stock=100)

    def act(i):
        lines = [(a.id, 1), (b.id, 1)] if i % 2 else [(b.id, 1), (a.id, 1)]
        return order_service.place_order(test_actor_id, OrderRequest.build(lines))

    outcomes = _run_together(act)

    assert all(kind == "ok" for kind, _ in outcomes)
    assert product_service.get_product(a.id).product.stock_level == 100 - THREADS
    assert product_service.get_product(b.id).product.stock_level == 100 - THREADS
