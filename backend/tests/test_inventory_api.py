"""Inventory API: categories, items, the transaction ledger and low-stock alerts, with org scoping."""
import uuid

from tests.conftest import admin_headers, staff_headers


def _create_category(client, org, name="Canned Goods"):
    response = client.post("/api/inventory/categories", json={"name": name}, headers=admin_headers(org))
    assert response.status_code == 201, response.text
    return response.json()


def _create_item(client, org, name="Rice", minimum_stock=100, category_id=None):
    payload = {"name": name, "unit_type": "kg", "minimum_stock": minimum_stock}
    if category_id:
        payload["category_id"] = category_id
    response = client.post("/api/inventory", json=payload, headers=admin_headers(org))
    assert response.status_code == 201, response.text
    return response.json()


def _record(client, org, item_id, transaction_type, quantity):
    response = client.post(
        "/api/inventory/transaction",
        json={"item_id": item_id, "transaction_type": transaction_type, "quantity": quantity},
        headers=staff_headers(org),
    )
    assert response.status_code == 201, response.text
    return response.json()


# ===== Categories =====


def test_categories_listed_by_name(client, org_a):
    _create_category(client, org_a, "Produce")
    _create_category(client, org_a, "Dairy")

    response = client.get("/api/inventory/categories", headers=admin_headers(org_a))

    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["Dairy", "Produce"]


def test_categories_are_org_scoped(client, org_a, org_b):
    _create_category(client, org_a, "Produce")

    response = client.get("/api/inventory/categories", headers=admin_headers(org_b))

    assert response.status_code == 200
    assert response.json() == []


# ===== Items =====


def test_create_item_starts_with_zero_stock(client, org_a):
    category = _create_category(client, org_a)
    item = _create_item(client, org_a, category_id=category["id"])

    assert item["organization_id"] == str(org_a.org_id)
    assert item["category"] == {"id": category["id"], "name": "Canned Goods"}
    assert item["category_name"] == "Canned Goods"

    detail = client.get(f"/api/inventory/{item['id']}", headers=admin_headers(org_a)).json()
    assert detail["current_stock"] == 0
    assert detail["recent_transactions"] == []


def test_create_item_rejects_category_from_other_org(client, org_a, org_b):
    foreign_category = _create_category(client, org_b, "Foreign")

    response = client.post(
        "/api/inventory",
        json={"name": "Rice", "unit_type": "kg", "category_id": foreign_category["id"]},
        headers=admin_headers(org_a),
    )

    assert response.status_code == 400
    assert response.headers["content-type"].startswith("application/problem+json")


def test_create_item_rejects_negative_minimum(client, org_a):
    response = client.post(
        "/api/inventory",
        json={"name": "Rice", "unit_type": "kg", "minimum_stock": -1},
        headers=admin_headers(org_a),
    )

    assert response.status_code == 422
    assert response.json()["errors"][0]["field"] == "minimum_stock"


def test_update_item(client, org_a):
    item = _create_item(client, org_a)

    response = client.put(
        f"/api/inventory/{item['id']}",
        json={"minimum_stock": 25, "notes": "  shelf 3  "},
        headers=admin_headers(org_a),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["minimum_stock"] == 25
    assert body["notes"] == "shelf 3"
    assert body["name"] == "Rice"


def test_update_item_from_other_org_is_not_found(client, org_a, org_b):
    item = _create_item(client, org_a)

    response = client.put(
        f"/api/inventory/{item['id']}",
        json={"minimum_stock": 1},
        headers=admin_headers(org_b),
    )

    assert response.status_code == 404


def test_list_items_includes_derived_stock(client, org_a):
    rice = _create_item(client, org_a, "Rice", minimum_stock=100)
    beans = _create_item(client, org_a, "Beans", minimum_stock=10)
    _record(client, org_a, rice["id"], "donation_in", 150)
    _record(client, org_a, rice["id"], "distribution_out", 30)
    _record(client, org_a, beans["id"], "donation_in", 5)

    response = client.get("/api/inventory", headers=admin_headers(org_a))

    assert response.status_code == 200
    stock = {row["name"]: (row["current_stock"], row["is_low_stock"]) for row in response.json()}
    assert stock == {"Beans": (5, True), "Rice": (120, False)}


def test_list_items_filters(client, org_a):
    produce = _create_category(client, org_a, "Produce")
    apples = _create_item(client, org_a, "Apples", minimum_stock=10, category_id=produce["id"])
    _create_item(client, org_a, "Rice", minimum_stock=0)
    _record(client, org_a, apples["id"], "donation_in", 10)

    by_category = client.get(
        "/api/inventory", params={"category_id": produce["id"]}, headers=admin_headers(org_a)
    ).json()
    assert [row["name"] for row in by_category] == ["Apples"]

    # Apples sit exactly at their minimum and Rice has no minimum, so neither is low.
    low = client.get("/api/inventory", params={"low_stock": "true"}, headers=admin_headers(org_a)).json()
    assert low == []


def test_item_detail_uses_full_history_for_stock(client, org_a):
    item = _create_item(client, org_a, minimum_stock=0)
    for _ in range(12):
        _record(client, org_a, item["id"], "donation_in", 10)
    _record(client, org_a, item["id"], "distribution_out", 5)

    detail = client.get(f"/api/inventory/{item['id']}", headers=admin_headers(org_a)).json()

    assert detail["current_stock"] == 115
    assert len(detail["recent_transactions"]) == 10
    assert detail["recent_transactions"][0]["transaction_type"] == "distribution_out"


def test_item_detail_from_other_org_is_not_found(client, org_a, org_b):
    item = _create_item(client, org_a)

    response = client.get(f"/api/inventory/{item['id']}", headers=admin_headers(org_b))

    assert response.status_code == 404
    body = response.json()
    assert body["status"] == 404
    assert body["message"] == body["detail"]


# ===== Transactions =====


def test_transaction_records_principal_and_normalizes_alias(client, org_a):
    item = _create_item(client, org_a)

    transaction = _record(client, org_a, item["id"], "distribution", 4)

    assert transaction["transaction_type"] == "distribution_out"
    assert transaction["user_id"] == str(org_a.staff_id)
    assert transaction["organization_id"] == str(org_a.org_id)


def test_unknown_transaction_type_is_stored_but_does_not_move_stock(client, org_a):
    item = _create_item(client, org_a, minimum_stock=0)
    _record(client, org_a, item["id"], "donation_in", 10)

    transaction = _record(client, org_a, item["id"], "adjustment", 3)

    assert transaction["transaction_type"] == "adjustment"
    detail = client.get(f"/api/inventory/{item['id']}", headers=admin_headers(org_a)).json()
    assert detail["current_stock"] == 10
    assert len(detail["recent_transactions"]) == 2


def test_transaction_rejects_non_positive_quantity(client, org_a):
    item = _create_item(client, org_a)

    response = client.post(
        "/api/inventory/transaction",
        json={"item_id": item["id"], "transaction_type": "donation_in", "quantity": 0},
        headers=admin_headers(org_a),
    )

    assert response.status_code == 422


def test_transaction_for_item_in_other_org_is_not_found(client, org_a, org_b):
    item = _create_item(client, org_a)

    response = client.post(
        "/api/inventory/transaction",
        json={"item_id": item["id"], "transaction_type": "donation_in", "quantity": 5},
        headers=admin_headers(org_b),
    )

    assert response.status_code == 404
    detail = client.get(f"/api/inventory/{item['id']}", headers=admin_headers(org_a)).json()
    assert detail["current_stock"] == 0


def test_transaction_for_missing_item_is_not_found(client, org_a):
    response = client.post(
        "/api/inventory/transaction",
        json={"item_id": str(uuid.uuid4()), "transaction_type": "donation_in", "quantity": 5},
        headers=admin_headers(org_a),
    )

    assert response.status_code == 404


def test_negative_stock_is_reported_unclamped(client, org_a):
    item = _create_item(client, org_a, minimum_stock=10)
    _record(client, org_a, item["id"], "donation_in", 5)
    _record(client, org_a, item["id"], "distribution_out", 8)

    detail = client.get(f"/api/inventory/{item['id']}", headers=admin_headers(org_a)).json()

    assert detail["current_stock"] == -3
    assert detail["is_low_stock"] is True


def test_list_items_are_org_scoped(client, org_a, org_b):
    rice = _create_item(client, org_a, "Rice", minimum_stock=10)
    beans = _create_item(client, org_a, "Beans", minimum_stock=10)
    foreign_rice = _create_item(client, org_b, "Rice", minimum_stock=10)
    _create_item(client, org_b, "Foreign Low", minimum_stock=50)
    _record(client, org_a, rice["id"], "donation_in", 20)
    _record(client, org_a, beans["id"], "donation_in", 3)
    _record(client, org_b, foreign_rice["id"], "donation_in", 500)
    _record(client, org_b, foreign_rice["id"], "distribution_out", 100)

    listed = client.get("/api/inventory", headers=admin_headers(org_a)).json()
    low = client.get("/api/inventory", params={"low_stock": "true"}, headers=admin_headers(org_a)).json()

    assert {row["id"] for row in listed} == {rice["id"], beans["id"]}
    assert all(row["organization_id"] == str(org_a.org_id) for row in listed)
    assert {row["name"]: row["current_stock"] for row in listed} == {"Beans": 3, "Rice": 20}
    assert [row["id"] for row in low] == [beans["id"]]

    foreign = client.get("/api/inventory", headers=admin_headers(org_b)).json()
    assert {row["name"]: row["current_stock"] for row in foreign} == {"Foreign Low": 0, "Rice": 400}


def test_list_items_embed_category_reference(client, org_a):
    produce = _create_category(client, org_a, "Produce")
    _create_item(client, org_a, "Apples", category_id=produce["id"])
    _create_item(client, org_a, "Rice")

    rows = {row["name"]: row for row in client.get("/api/inventory", headers=admin_headers(org_a)).json()}

    assert rows["Apples"]["category"] == {"id": produce["id"], "name": "Produce"}
    assert rows["Rice"]["category"] is None


# ===== Low Stock Alerts =====


def test_low_stock_alerts(client, org_a):
    rice = _create_item(client, org_a, "Rice", minimum_stock=100)
    beans = _create_item(client, org_a, "Beans", minimum_stock=10)
    _record(client, org_a, rice["id"], "donation_in", 80)
    _record(client, org_a, rice["id"], "distribution_out", 30)
    _record(client, org_a, beans["id"], "donation_in", 20)

    response = client.get("/api/inventory/alerts/low-stock", headers=admin_headers(org_a))

    assert response.status_code == 200
    alerts = response.json()
    assert len(alerts) == 1
    assert alerts[0]["id"] == rice["id"]
    assert alerts[0]["current_stock"] == 50
    assert alerts[0]["shortage"] == 50


def test_low_stock_alerts_embed_category_reference(client, org_a):
    dairy = _create_category(client, org_a, "Dairy")
    _create_item(client, org_a, "Milk", minimum_stock=5, category_id=dairy["id"])

    alerts = client.get("/api/inventory/alerts/low-stock", headers=admin_headers(org_a)).json()

    assert alerts[0]["category"] == {"id": dairy["id"], "name": "Dairy"}
    assert alerts[0]["category_name"] == "Dairy"


def test_low_stock_alerts_ignore_other_orgs(client, org_a, org_b):
    _create_item(client, org_b, "Foreign", minimum_stock=50)

    response = client.get("/api/inventory/alerts/low-stock", headers=admin_headers(org_a))

    assert response.status_code == 200
    assert response.json() == []


def test_inventory_requires_principal(client, org_a):
    response = client.get("/api/inventory")

    assert response.status_code == 401
    assert response.headers["content-type"].startswith("application/problem+json")
