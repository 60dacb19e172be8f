from foodbank.infra.metrics import Metrics
from foodbank.main import app
from foodbank.settings import settings
from tests.conftest import admin_headers


def test_readyz_reports_database(client):
    response = client.get("/readyz")

    assert response.status_code == 200
    assert response.json()["checks"]["database"]["message"] == "database reachable"


def test_readyz_unavailable_when_database_fails(client):
    class _BrokenFactory:
        def __call__(self):
            raise ConnectionError("db down")

    app.state.db_session_factory = _BrokenFactory()

    response = client.get("/readyz")

    assert response.status_code == 503
    assert response.json()["status"] == "unavailable"


def test_metrics_endpoint_counts_requests_and_transactions(client, org_a):
    headers = admin_headers(org_a)
    item = client.post("/api/inventory", json={"name": "Rice", "unit_type": "kg"}, headers=headers).json()
    client.post(
        "/api/inventory/transaction",
        json={"item_id": item["id"], "transaction_type": "mystery", "quantity": 1},
        headers=headers,
    )

    response = client.get("/metrics")

    assert response.status_code == 200
    text = response.text
    assert "http_requests_total" in text
    assert 'path="/api/inventory"' in text
    assert 'inventory_transactions_total{transaction_type="unknown"}' in text


def test_metrics_requires_token_when_configured(client):
    settings.metrics_token = "scrape-secret"

    assert client.get("/metrics").status_code == 401
    assert client.get("/metrics", headers={"Authorization": "Bearer wrong"}).status_code == 401
    assert client.get("/metrics", headers={"Authorization": "Bearer scrape-secret"}).status_code == 200


def test_disabled_metrics_render_placeholder():
    disabled = Metrics(enabled=False)
    disabled.record_inventory_transaction("donation_in")

    payload, content_type = disabled.render()

    assert payload == b"metrics_disabled 1\n"
    assert content_type.startswith("text/plain")
