"""Tests for invoice and notification API endpoints."""

from decimal import Decimal

from fastapi.testclient import TestClient

from tests.factories import TENANT_A, TENANT_B, tenant_headers

INVOICE = {
    "invoice_number": "INV-API-001",
    "issue_date": "2025-01-15",
    "due_date": "2025-02-15",
    "subtotal": "1000.00",
    "tax_percent": "5",
    "client_id": 12,
}


def create_invoice(client: TestClient, tenant_id: int = TENANT_A) -> dict:
    response = client.post("/api/v1/invoices", json=INVOICE, headers=tenant_headers(tenant_id))
    assert response.status_code == 201
    return response.json()


def test_create_invoice(client: TestClient):
    invoice = create_invoice(client)

    assert invoice["invoice_number"] == "INV-API-001"
    assert invoice["status"] == "draft"
    assert invoice["tenant_id"] == TENANT_A
    assert Decimal(invoice["tax_amount"]) == Decimal("50")
    assert Decimal(invoice["total_amount"]) == Decimal("1050")
    assert Decimal(invoice["amount_due"]) == Decimal("1050")


def test_tenant_header_is_required(client: TestClient):
    response = client.post("/api/v1/invoices", json=INVOICE)
    assert response.status_code == 400

    response = client.get("/api/v1/invoices", headers={"X-Tenant-ID": "0"})
    assert response.status_code == 400


def test_invalid_dates_rejected(client: TestClient):
    payload = {**INVOICE, "due_date": "2025-01-01"}

    response = client.post("/api/v1/invoices", json=payload, headers=tenant_headers(TENANT_A))

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "validation_error"


def test_oversized_amount_is_bad_request(client: TestClient):
    payload = {**INVOICE, "subtotal": "1234567890123456789012345678901"}

    response = client.post("/api/v1/invoices", json=payload, headers=tenant_headers(TENANT_A))

    assert response.status_code == 400
    assert response.json()["detail"]["fields"] == ["subtotal"]


def test_get_invoice_lists_allowed_transitions(client: TestClient):
    invoice = create_invoice(client)

    response = client.get(f"/api/v1/invoices/{invoice['id']}", headers=tenant_headers(TENANT_A))

    assert response.status_code == 200
    assert response.json()["allowed_transitions"] == ["sent", "approved", "canceled", "void"]


def test_list_invoices_filters_by_status(client: TestClient):
    first = create_invoice(client)
    create_invoice(client)
    client.post(
        f"/api/v1/invoices/{first['id']}/status",
        json={"status": "sent"},
        headers=tenant_headers(TENANT_A),
    )

    response = client.get("/api/v1/invoices?status=sent", headers=tenant_headers(TENANT_A))

    assert response.status_code == 200
    assert [i["id"] for i in response.json()] == [first["id"]]


def test_status_change_and_history(client: TestClient):
    invoice = create_invoice(client)
    headers = tenant_headers(TENANT_A)

    response = client.post(
        f"/api/v1/invoices/{invoice['id']}/status",
        json={"status": "sent", "changed_by": 3},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "sent"
    assert response.json()["version"] == 2

    response = client.post(
        f"/api/v1/invoices/{invoice['id']}/status",
        json={"status": "paid"},
        headers=headers,
    )
    assert response.status_code == 200

    history = client.get(f"/api/v1/invoices/{invoice['id']}/history", headers=headers).json()
    assert [(h["from_status"], h["to_status"]) for h in history] == [
        ("draft", "sent"),
        ("sent", "paid"),
    ]
    assert history[0]["changed_by"] == 3


def test_illegal_status_change_returns_conflict(client: TestClient):
    invoice = create_invoice(client)
    headers = tenant_headers(TENANT_A)

    response = client.post(
        f"/api/v1/invoices/{invoice['id']}/status",
        json={"status": "paid"},
        headers=headers,
    )

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["code"] == "invalid_transition"
    assert detail["from"] == "draft"
    assert detail["to"] == "paid"

    current = client.get(f"/api/v1/invoices/{invoice['id']}", headers=headers).json()
    assert current["status"] == "draft"
    assert client.get(f"/api/v1/invoices/{invoice['id']}/history", headers=headers).json() == []


def test_unknown_status_returns_bad_request(client: TestClient):
    invoice = create_invoice(client)

    response = client.post(
        f"/api/v1/invoices/{invoice['id']}/status",
        json={"status": "archived"},
        headers=tenant_headers(TENANT_A),
    )

    assert response.status_code == 400


def test_other_tenant_invoice_not_found(client: TestClient):
    invoice = create_invoice(client, TENANT_A)

    response = client.get(f"/api/v1/invoices/{invoice['id']}", headers=tenant_headers(TENANT_B))
    assert response.status_code == 404

    response = client.post(
        f"/api/v1/invoices/{invoice['id']}/status",
        json={"status": "sent"},
        headers=tenant_headers(TENANT_B),
    )
    assert response.status_code == 404


def test_notifications_follow_transitions(client: TestClient):
    invoice = create_invoice(client)
    headers = tenant_headers(TENANT_A)
    client.post(f"/api/v1/invoices/{invoice['id']}/status", json={"status": "sent"}, headers=headers)

    listing = client.get("/api/v1/notifications", headers=headers).json()
    assert listing["total"] == 1
    assert listing["unread_count"] == 1
    notification = listing["items"][0]
    assert notification["reference_id"] == invoice["id"]
    assert notification["notification_type"] == "invoice_status"

    response = client.post(f"/api/v1/notifications/{notification['id']}/read", headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "read"

    assert client.get("/api/v1/notifications", headers=headers).json()["unread_count"] == 0
    assert client.get("/api/v1/notifications", headers=tenant_headers(TENANT_B)).json()["total"] == 0

    response = client.post(f"/api/v1/notifications/{notification['id']}/read", headers=tenant_headers(TENANT_B))
    assert response.status_code == 404


def test_liveness(client: TestClient):
    assert client.get("/api/v1/health/live").json() == {"status": "alive"}
    assert client.get("/api/v1/health/ready").json() == {"status": "ready"}
