"""HTTP tests for /api/products."""

from uuid import uuid4


def test_create_product(client, admin_headers):
    response = client.post(
        "/api/products",
        json={"name": "Widget", "sku": "W-100", "price": "19.99", "stockLevel": 5},
        headers=admin_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["sku"] == "W-100"
    assert body["price"] == "19.99"
    assert body["stockLevel"] == 5
    assert body["lowStockThreshold"] == 10
    assert body["isLowStock"] is True


def test_create_duplicate_sku(client, admin_headers, make_product):
    existing = make_product()

    response = client.post(
        "/api/products",
        json={"name": "Clone", "sku": existing["sku"], "price": "1.00"},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "DUPLICATE_SKU"


def test_create_rejects_negative_price(client, admin_headers):
    response = client.post(
        "/api/products",
        json={"name": "Widget", "sku": "W-101", "price": "-1"},
        headers=admin_headers,
    )

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["errors"][0]["field"] == "price"


def test_list_products_paginates_newest_first(client, viewer_headers, make_product):
    first = make_product()
    second = make_product()
    third = make_product()

    response = client.get("/api/products?page=1&limit=2", headers=viewer_headers)

    assert response.status_code == 200
    body = response.json()
    assert [p["id"] for p in body["products"]] == [third["id"], second["id"]]
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}

    page_two = client.get("/api/products?page=2&limit=2", headers=viewer_headers).json()
    assert [p["id"] for p in page_two["products"]] == [first["id"]]


def test_list_limit_is_clamped(client, viewer_headers, make_product):
    make_product()

    body = client.get("/api/products?limit=5000", headers=viewer_headers).json()

    assert body["pagination"]["limit"] == 100


def test_product_detail_includes_recent_adjustments(client, viewer_headers, make_product):
    product = make_product(stock=4)

    response = client.get(f"/api/products/{product['id']}", headers=viewer_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["product"]["stockLevel"] == 4
    assert [a["quantity"] for a in body["recentAdjustments"]] == [4]
    assert body["recentAdjustments"][0]["reason"] == "Initial stock"


def test_unknown_product_is_404(client, viewer_headers, session_factory):
    response = client.get(f"/api/products/{uuid4()}", headers=viewer_headers)

    assert response.status_code == 404
    assert response.json()["code"] == "PRODUCT_NOT_FOUND"


def test_update_product(client, admin_headers, make_product):
    product = make_product(stock=2, price="5.00")

    response = client.put(
        f"/api/products/{product['id']}",
        json={"price": "7.25", "description": "Blue"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["price"] == "7.25"
    assert body["description"] == "Blue"
    assert body["name"] == product["name"]
    assert body["stockLevel"] == 2


def test_delete_product(client, admin_headers, make_product):
    product = make_product()

    response = client.delete(f"/api/products/{product['id']}", headers=admin_headers)

    assert response.status_code == 204
    assert client.get(f"/api/products/{product['id']}", headers=admin_headers).status_code == 404


def test_delete_product_with_history_is_opaque_500(client, admin_headers, make_product):
    product = make_product(stock=3)

    response = client.delete(f"/api/products/{product['id']}", headers=admin_headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_low_stock(client, viewer_headers, make_product):
    make_product(stock=50)
    low = make_product(stock=2)

    body = client.get("/api/products/low-stock", headers=viewer_headers).json()

    assert body["count"] == 1
    assert body["products"][0]["id"] == low["id"]
