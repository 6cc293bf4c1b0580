"""
Pytest configuration and fixtures for inventory kernel tests.

Tests run against the database named by DATABASE_URL when it is set
(PostgreSQL in CI) and against a file-backed SQLite database otherwise.
Every test that touches the database gets empty tables: rows are removed
with raw SQL after each test, which bypasses the ORM immutability
listeners the same way an operator's maintenance script would.
"""

import io
import json
import logging
import os
from collections.abc import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base
from inventory_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from inventory_kernel.db.immutability import register_immutability_listeners
from inventory_kernel.domain.clock import DeterministicClock
from inventory_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from inventory_kernel.services.adjustment_service import AdjustmentService
from inventory_kernel.services.notifier import EventNotifier, ListenerHub
from inventory_kernel.services.order_service import OrderService
from inventory_kernel.services.product_service import ProductService

TEST_ACTOR_ID = UUID("00000000-0000-4000-8000-000000000001")


# -----------------------------------------------------------------------------
# Logging: JSON at DEBUG for the whole run, context wiped per test
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session", autouse=True)
def _json_logging_at_debug():
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _empty_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Callable returning every kernel record emitted so far in the test,
    parsed from JSON::

        assert any(r["message"] == "order_committed" for r in captured_logs())
    """
    buffer = io.StringIO()
    capture = logging.StreamHandler(buffer)
    capture.setFormatter(StructuredFormatter())
    kernel_logger = logging.getLogger("inventory_kernel")
    kernel_logger.addHandler(capture)

    yield lambda: [json.loads(line) for line in buffer.getvalue().splitlines() if line]

    kernel_logger.removeHandler(capture)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture(scope="session")
def db_engine(tmp_path_factory):
    url = os.environ.get("DATABASE_URL")
    if not url:
        db_file = tmp_path_factory.mktemp("db") / "inventory_test.sqlite3"
        url = f"sqlite:///{db_file}"
    engine = init_engine_from_url(url, pool_size=30, max_overflow=20)
    yield engine
    reset_engine()


@pytest.fixture(scope="session")
def db_tables(db_engine):
    drop_tables()
    create_tables()
    register_immutability_listeners()
    yield
    drop_tables()


def _clear_all_tables(engine) -> None:
    with engine.begin() as conn:
        if engine.dialect.name == "postgresql":
            names = ", ".join(table.name for table in Base.metadata.sorted_tables)
            conn.execute(text(f"TRUNCATE {names} CASCADE"))
        else:
            for table in reversed(Base.metadata.sorted_tables):
                conn.execute(text(f"DELETE FROM {table.name}"))


@pytest.fixture
def session_factory(db_engine, db_tables):
    """Session factory over empty tables; cleaned again on teardown."""
    _clear_all_tables(db_engine)
    yield get_session_factory()
    _clear_all_tables(db_engine)


@pytest.fixture
def session(session_factory) -> Generator[Session, None, None]:
    """A plain session for direct ORM checks; the test decides when to commit."""
    sess = session_factory()
    try:
        yield sess
    finally:
        sess.rollback()
        sess.close()


# =============================================================================
# Kernel wiring
# =============================================================================


@pytest.fixture
def test_actor_id() -> UUID:
    return TEST_ACTOR_ID


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock()


@pytest.fixture
def listener_hub() -> ListenerHub:
    return ListenerHub()


@pytest.fixture
def received_events(listener_hub) -> list[tuple[str, dict]]:
    """Every (event_name, payload) the hub delivers during the test."""
    events: list[tuple[str, dict]] = []
    unsubscribe = listener_hub.subscribe(lambda name, payload: events.append((name, payload)))
    yield events
    unsubscribe()


@pytest.fixture
def notifier(listener_hub) -> EventNotifier:
    return EventNotifier(listener_hub)


@pytest.fixture
def product_service(session_factory, deterministic_clock) -> ProductService:
    return ProductService(session_factory, clock=deterministic_clock)


@pytest.fixture
def order_service(session_factory, notifier, deterministic_clock) -> OrderService:
    return OrderService(session_factory, notifier=notifier, clock=deterministic_clock)


@pytest.fixture
def adjustment_service(session_factory, notifier, deterministic_clock) -> AdjustmentService:
    return AdjustmentService(session_factory, notifier=notifier, clock=deterministic_clock)


@pytest.fixture
def create_product(product_service, test_actor_id, deterministic_clock):
    """
    Factory fixture to create committed products.

    The clock advances one second before each create so newest-first
    listings have a deterministic order.
    """

    def _create(
        stock: int = 0,
        price: str = "10.00",
        name: str | None = None,
        sku: str | None = None,
        low_stock_threshold: int = 10,
    ):
        deterministic_clock.advance(1)
        suffix = uuid4().hex[:8].upper()
        return product_service.create_product(
            test_actor_id,
            name=name or f"Widget {suffix}",
            sku=sku or f"SKU-{suffix}",
            price=price,
            initial_stock=stock,
            low_stock_threshold=low_stock_threshold,
        )

    return _create
