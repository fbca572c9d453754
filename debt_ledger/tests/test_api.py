"""
HTTP API tests using FastAPI's TestClient
"""

import pytest
from fastapi.testclient import TestClient

from debt_ledger.api import create_app
from debt_ledger.config import Settings
from debt_ledger.session import LedgerSession
from debt_ledger.storage import InMemoryMirror

SECRET = "s3cret"
ENTRY = {"personName": "Anna", "product": "Otto", "quantity": "2kg", "amount": "5.00", "date": "2024-05-01"}


@pytest.fixture
def client():
    session = LedgerSession(InMemoryMirror(), Settings(admin_secret=SECRET, products=("Otto", "Nove")))
    return TestClient(create_app(session))


@pytest.fixture
def admin_client(client):
    assert client.post("/admin/login", json={"password": SECRET}).status_code == 200
    return client


class TestPublicEndpoints:
    """Endpoints available without admin access."""

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy", "service": "debt-ledger"}

    def test_admin_endpoints_forbidden(self, client):
        assert client.get("/entries").status_code == 403
        assert client.post("/entries", json=ENTRY).status_code == 403
        assert client.get("/export").status_code == 403

    def test_wrong_password(self, client):
        assert client.post("/admin/login", json={"password": "nope"}).status_code == 401

    def test_lookup(self, admin_client):
        entry_id = admin_client.post("/entries", json=ENTRY).json()["entry"]["id"]

        response = admin_client.get(f"/lookup/{entry_id}")
        assert response.status_code == 200
        assert response.json()["personName"] == "Anna"
        assert admin_client.get("/lookup/zzzzzz").status_code == 404

    def test_submit_request(self, client):
        response = client.post("/requests", json={"message": "need extension"})
        assert response.status_code == 201
        assert response.json()["status"] == "pending"

        assert client.post("/requests", json={"message": "   "}).status_code == 204


class TestAdminEndpoints:
    """Endpoints behind the admin gate."""

    def test_create_and_merge(self, admin_client):
        first = admin_client.post("/entries", json=ENTRY)
        assert first.status_code == 201
        assert first.json()["log"]["action"] == "create"

        second = admin_client.post("/entries", json={**ENTRY, "personName": "anna", "quantity": "1kg", "amount": "3.00"})
        body = second.json()
        assert body["log"]["action"] == "update"
        assert body["entry"]["quantity"] == "2kg + 1kg"
        assert body["entry"]["amount"] == 8.0

        assert len(admin_client.get("/entries").json()) == 1

    def test_missing_fields(self, admin_client):
        response = admin_client.post("/entries", json={"personName": "Anna", "product": "Otto"})
        assert response.status_code == 400

    def test_update_and_delete(self, admin_client):
        entry_id = admin_client.post("/entries", json=ENTRY).json()["entry"]["id"]

        updated = admin_client.put(f"/entries/{entry_id}", json={**ENTRY, "amount": "6.00"})
        assert updated.status_code == 200
        assert updated.json()["entry"]["id"] == entry_id

        assert admin_client.delete(f"/entries/{entry_id}").status_code == 200
        assert admin_client.delete(f"/entries/{entry_id}").status_code == 404
        assert admin_client.put(f"/entries/{entry_id}", json=ENTRY).status_code == 404

        actions = [log["action"] for log in admin_client.get("/logs").json()]
        assert actions == ["create", "update", "delete"]

    def test_search_and_overdue(self, admin_client):
        admin_client.post("/entries", json={**ENTRY, "dueDate": "2024-05-20"})
        admin_client.post("/entries", json={**ENTRY, "personName": "Bruno", "product": "Nove"})

        assert [e["personName"] for e in admin_client.get("/entries", params={"search": "bru"}).json()] == ["Bruno"]

        overdue = admin_client.get("/entries/overdue", params={"today": "2024-05-20"}).json()
        assert [e["personName"] for e in overdue] == ["Bruno"]

    def test_dashboard(self, admin_client):
        admin_client.post("/entries", json=ENTRY)

        summary = admin_client.get("/dashboard").json()
        assert summary["totalDebts"] == 1
        assert summary["logCount"] == 1
        assert summary["recentDebts"][0]["personName"] == "Anna"

    def test_resolve_request(self, admin_client):
        request_id = admin_client.post("/requests", json={"message": "need extension"}).json()["id"]

        response = admin_client.post(f"/requests/{request_id}/resolve", json={"decision": "accept", "response": "ok"})
        assert response.json()["status"] == "accepted"
        assert response.json()["response"] == "ok"

        again = admin_client.post(f"/requests/{request_id}/resolve", json={"decision": "accept", "response": "ok"})
        assert again.status_code == 200

        missing = admin_client.post("/requests/zzzzzz/resolve", json={"decision": "decline"})
        assert missing.status_code == 404

    def test_export(self, admin_client):
        admin_client.post("/entries", json=ENTRY)

        as_json = admin_client.get("/export")
        assert as_json.headers["content-type"].startswith("application/json")
        assert "attachment" in as_json.headers["content-disposition"]
        assert as_json.json()["debtEntries"][0]["personName"] == "Anna"

        as_html = admin_client.get("/export", params={"format": "html"})
        assert as_html.headers["content-type"].startswith("text/html")
        assert "<!DOCTYPE html>" in as_html.text
