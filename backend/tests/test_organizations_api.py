"""Organization profile, admin-only updates and dashboard stats."""
import pytest

from foodbank.domain.inventory import schemas as inventory_schemas
from foodbank.domain.inventory import service as inventory_service
from foodbank.domain.organizations import service as organization_service
from tests.conftest import admin_headers, staff_headers


def test_get_own_organization(client, org_a, org_b):
    response = client.get("/api/organizations", headers=admin_headers(org_a))

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == str(org_a.org_id)
    assert body["name"] == "Org A"
    assert body["status"] == "active"


def test_admin_can_update_organization(client, org_a):
    response = client.put(
        "/api/organizations",
        json={"name": "Northside Pantry", "website": "https://pantry.example.org"},
        headers=admin_headers(org_a),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Northside Pantry"
    assert body["website"] == "https://pantry.example.org"


def test_staff_cannot_update_organization(client, org_a):
    response = client.put("/api/organizations", json={"name": "Nope"}, headers=staff_headers(org_a))

    assert response.status_code == 403
    assert response.json()["title"] == "Forbidden"
    assert client.get("/api/organizations", headers=admin_headers(org_a)).json()["name"] == "Org A"


def test_organization_stats(client, org_a, org_b):
    headers = admin_headers(org_a)
    client.post(
        "/api/volunteers",
        json={"first_name": "Val", "last_name": "Vee", "email": "val@example.com"},
        headers=headers,
    )
    client.post(
        "/api/clients",
        json={"first_name": "Cal", "last_name": "Cee", "address": "1 Main St", "household_size": 3},
        headers=headers,
    )
    item = client.post("/api/inventory", json={"name": "Rice", "unit_type": "kg"}, headers=headers).json()
    for quantity in range(1, 8):
        client.post(
            "/api/inventory/transaction",
            json={"item_id": item["id"], "transaction_type": "donation_in", "quantity": quantity},
            headers=headers,
        )
    client.post("/api/inventory", json={"name": "Foreign", "unit_type": "kg"}, headers=admin_headers(org_b))

    response = client.get("/api/organizations/stats", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["stats"] == {"volunteers": 1, "clients": 1, "inventory": 1}
    assert "recent_activity" not in body
    assert len(body["recentActivity"]) == 5
    assert body["recentActivity"][0]["quantity"] == 7
    assert body["recentActivity"][0]["item_name"] == "Rice"


@pytest.mark.anyio
async def test_stats_honour_zero_recent_limit(async_session_maker, org_a):
    async with async_session_maker() as session:
        item = await inventory_service.create_item(
            session, org_a.org_id, inventory_schemas.InventoryItemCreate(name="Rice", unit_type="kg")
        )
        await inventory_service.record_transaction(
            session,
            org_a.org_id,
            None,
            inventory_schemas.InventoryTransactionCreate(
                item_id=item.id, transaction_type="donation_in", quantity=2
            ),
        )
        await session.commit()

        stats = await organization_service.get_organization_stats(session, org_a.org_id, recent_limit=0)

    assert stats.stats.inventory == 1
    assert stats.recent_activity == []
