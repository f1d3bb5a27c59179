"""Tests for the admin JSON API."""
from storefront.services import inventory_service


def test_requires_admin_token(client):
    assert client.get("/admin/api/attributes").status_code == 403
    response = client.get("/admin/api/attributes", headers={"X-Admin-Token": "wrong"})
    assert response.status_code == 403
    assert response.get_json() == {"error": "Forbidden"}


def test_create_and_list_attributes(client, admin_headers, subcategory):
    response = client.post(
        "/admin/api/attributes",
        json={"subcategory_id": str(subcategory.id), "name": "Aroma", "type": "aroma", "value": "Vainilla"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    created = response.get_json()["data"]
    assert created["value"] == "Vainilla"

    listed = client.get(
        f"/admin/api/attributes?subcategory_id={subcategory.id}", headers=admin_headers
    ).get_json()["data"]
    assert [a["id"] for a in listed] == [created["id"]]


def test_error_statuses(client, admin_headers, subcategory, make_attribute):
    make_attribute("Vainilla")
    payload = {"subcategory_id": subcategory.id, "name": "Aroma", "type": "aroma", "value": "vainilla"}

    duplicate = client.post("/admin/api/attributes", json=payload, headers=admin_headers)
    assert duplicate.status_code == 409
    assert "already exists" in duplicate.get_json()["error"]

    invalid = client.post("/admin/api/attributes", json={"name": "Aroma"}, headers=admin_headers)
    assert invalid.status_code == 400

    missing = client.get("/admin/api/attributes/999", headers=admin_headers)
    assert missing.status_code == 404

    dangling = client.post(
        "/admin/api/attributes",
        json=dict(payload, subcategory_id=999, value="Cedro"),
        headers=admin_headers,
    )
    assert dangling.status_code == 422


def test_delete_attribute_returns_warnings(client, admin_headers, candle):
    _, vanilla, _ = candle

    response = client.delete(f"/admin/api/attributes/{vanilla.id}", headers=admin_headers)

    assert response.status_code == 200
    assert len(response.get_json()["warnings"]) == 1
    orphans = client.get("/admin/api/attributes/orphaned-stock", headers=admin_headers)
    assert len(orphans.get_json()["data"]) == 1


def test_set_product_attributes(client, admin_headers, make_product, make_attribute):
    product = make_product()
    vanilla = make_attribute("Vainilla")

    response = client.put(
        f"/admin/api/products/{product.id}/attributes",
        json={"stocks": {str(vanilla.id): 5}},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.get_json()["data"]["stock"] == 5

    bad = client.put(
        f"/admin/api/products/{product.id}/attributes", json={"stocks": [1]}, headers=admin_headers
    )
    assert bad.status_code == 400


def test_reconcile_variants(client, admin_headers, candle):
    product, vanilla, lavender = candle

    response = client.put(
        f"/admin/api/products/{product.id}/variants",
        json={"updates": [{"attribute_id": vanilla.id, "quantity": 2}]},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert inventory_service.stock_by_attribute(product.id).unwrap()[vanilla.id] == 2

    partial = client.put(
        f"/admin/api/products/{product.id}/variants",
        json={"updates": [{"attribute_id": 999, "quantity": 2}]},
        headers=admin_headers,
    )
    assert partial.status_code == 500
    assert partial.get_json()["error"] == "Some stock updates failed"
    assert len(partial.get_json()["warnings"]) == 1


def test_record_sale_and_list(client, admin_headers, candle):
    product, vanilla, _ = candle

    response = client.post(
        "/admin/api/sales",
        json={"product_id": product.id, "attribute_id": vanilla.id, "quantity": 3},
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert response.get_json()["data"]["total_price"] == 3 * 95000
    assert inventory_service.stock_by_attribute(product.id).unwrap()[vanilla.id] == 7

    sales = client.get(f"/admin/api/sales?product_id={product.id}", headers=admin_headers)
    assert len(sales.get_json()["data"]) == 1

    bad = client.post(
        "/admin/api/sales",
        json={"product_id": product.id, "attribute_id": vanilla.id, "quantity": 0},
        headers=admin_headers,
    )
    assert bad.status_code == 400


def test_sale_without_stock_row_reports_warning(client, admin_headers, make_product, make_attribute):
    product = make_product()
    vanilla = make_attribute("Vainilla")

    response = client.post(
        "/admin/api/sales",
        json={"product_id": product.id, "attribute_id": vanilla.id, "quantity": 1},
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert len(response.get_json()["warnings"]) == 1


def test_restock(client, admin_headers, candle):
    product, _, lavender = candle
    response = client.post(
        f"/admin/api/products/{product.id}/restock",
        json={"attribute_id": lavender.id, "quantity": 4},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.get_json()["data"]["quantity"] == 10


def test_stock_order_flow(client, admin_headers, candle):
    product, vanilla, _ = candle

    created = client.post(
        "/admin/api/stock-orders",
        json={"items": [{"product_id": product.id, "attribute_id": vanilla.id, "quantity": 5}]},
        headers=admin_headers,
    )
    assert created.status_code == 201
    order = created.get_json()["data"]
    assert order["status"] == "pending"
    assert order["items"][0]["attribute_value"] == "Vanilla"

    received = client.post(
        f"/admin/api/stock-orders/{order['id']}/receive", headers=admin_headers
    )
    assert received.get_json()["data"]["status"] == "received"
    assert inventory_service.stock_by_attribute(product.id).unwrap()[vanilla.id] == 15

    cancel = client.post(f"/admin/api/stock-orders/{order['id']}/cancel", headers=admin_headers)
    assert cancel.status_code == 400

    empty = client.post("/admin/api/stock-orders", json={"items": "nope"}, headers=admin_headers)
    assert empty.status_code == 400


def test_sync_stock(client, admin_headers, candle):
    product, _, _ = candle
    response = client.post(f"/admin/api/products/{product.id}/stock/sync", headers=admin_headers)
    assert response.get_json()["data"] == 16
