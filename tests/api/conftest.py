"""Fixtures for HTTP-level tests: the app wired to the test database."""

from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from inventory_api import create_app
from inventory_config import ApiConfig, DatabaseConfig, InventoryConfig, LoggingConfig

ADMIN_ID = UUID("00000000-0000-4000-8000-0000000000aa")
VIEWER_ID = UUID("00000000-0000-4000-8000-0000000000bb")


@pytest.fixture
def api_config() -> InventoryConfig:
    return InventoryConfig(
        database=DatabaseConfig(url="sqlite://"),
        logging=LoggingConfig(level="DEBUG"),
        api=ApiConfig(default_page_size=10, max_page_size=100),
    )


@pytest.fixture
def client(api_config, session_factory, notifier, deterministic_clock):
    app = create_app(
        config=api_config,
        notifier=notifier,
        session_factory=session_factory,
        clock=deterministic_clock,
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_id() -> UUID:
    return ADMIN_ID


@pytest.fixture
def admin_headers(admin_id) -> dict[str, str]:
    return {"X-Actor-Id": str(admin_id), "X-Actor-Role": "ADMIN", "X-Actor-Name": "Avery"}


@pytest.fixture
def viewer_headers() -> dict[str, str]:
    return {"X-Actor-Id": str(VIEWER_ID), "X-Actor-Role": "VIEWER"}


@pytest.fixture
def make_product(client, admin_headers, deterministic_clock):
    """POST a product and return the response JSON."""
    counter = {"n": 0}

    def _make(stock: int = 0, price: str = "10.00", **fields):
        deterministic_clock.advance(1)
        counter["n"] += 1
        body = {
            "name": f"Widget {counter['n']}",
            "sku": f"API-{counter['n']:04d}",
            "price": price,
            "stockLevel": stock,
            **fields,
        }
        response = client.post("/api/products", json=body, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
