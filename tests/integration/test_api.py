"""Integration tests for API endpoints"""

import pytest
from datetime import date
from fastapi.testclient import TestClient


@pytest.fixture
def card_id(client: TestClient) -> str:
    """Card with limit 1000.00, closing day 5, due day 15"""
    response = client.post(
        "/v1/cards",
        json={"name": "Visa", "limit": "1000.00", "closing_day": 5, "due_day": 15},
    )
    assert response.status_code == 201
    return response.json()["id"]


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "fintrack_purchase_total" in response.text


def test_request_id_header(client: TestClient):
    assert client.get("/health").headers["X-Request-ID"]
    assert client.get("/health", headers={"X-Request-ID": "abc-123"}).headers["X-Request-ID"] == "abc-123"


def test_card_lifecycle(client: TestClient, card_id: str):
    """Test create, read, update, block and delete of a card"""
    card = client.get(f"/v1/cards/{card_id}").json()
    assert card["limit"] == "1000.00"
    assert card["is_blocked"] is False

    response = client.patch(f"/v1/cards/{card_id}", json={"name": "Visa Platinum"})
    assert response.status_code == 200
    assert response.json()["name"] == "Visa Platinum"

    response = client.put(f"/v1/cards/{card_id}/blocked", json={"blocked": True})
    assert response.json()["is_blocked"] is True

    assert [c["id"] for c in client.get("/v1/cards").json()] == [card_id]

    assert client.delete(f"/v1/cards/{card_id}").status_code == 204
    assert client.get(f"/v1/cards/{card_id}").status_code == 404


def test_invalid_card_configuration(client: TestClient):
    """Closing day equal to due day is rejected"""
    response = client.post(
        "/v1/cards",
        json={"name": "Visa", "limit": "1000.00", "closing_day": 10, "due_day": 10},
    )
    assert response.status_code == 422
    assert "closing day" in response.json()["detail"]


def test_installment_purchase_flow(client: TestClient, card_id: str):
    """Test POST /v1/purchases with installments, then credit and deletion"""
    response = client.post(
        "/v1/purchases",
        json={
            "card_id": card_id,
            "amount": "100.00",
            "transaction_date": "2025-03-10",
            "installment_count": 3,
            "description": "Headphones",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["purchase"] is None
    plan = body["plan"]
    assert [leg["amount"] for leg in plan["legs"]] == ["33.34", "33.33", "33.33"]
    assert [leg["transaction_date"] for leg in plan["legs"]] == ["2025-03-10", "2025-04-10", "2025-05-10"]

    credit = client.get(f"/v1/cards/{card_id}/available-credit").json()
    assert credit["available"] == "900.00"
    assert credit["reserved"] == "66.66"
    assert credit["invoice_status"] == "open"
    assert credit["period"] == {"start": "2025-03-05", "end": "2025-04-04", "due_date": "2025-05-15"}

    assert client.get(f"/v1/plans/{plan['id']}").json()["total"] == "100.00"

    response = client.delete(f"/v1/purchases/{plan['legs'][0]['id']}")
    assert response.status_code == 200
    assert response.json()["released"] == "100.00"
    assert len(response.json()["purchase_ids"]) == 3

    credit = client.get(f"/v1/cards/{card_id}/available-credit").json()
    assert credit["available"] == "1000.00"


def test_purchase_declined(client: TestClient, card_id: str):
    """Test purchase above available credit returns 400 with the available amount"""
    response = client.post(
        "/v1/purchases",
        json={"card_id": card_id, "amount": "1000.01", "transaction_date": "2025-03-10"},
    )

    assert response.status_code == 400
    assert response.json()["available"] == "1000.00"


def test_purchase_check(client: TestClient, card_id: str):
    response = client.post(f"/v1/cards/{card_id}/purchase-check", json={"amount": "1500.00"})

    assert response.status_code == 200
    assert response.json()["can_purchase"] is False
    assert response.json()["available"] == "1000.00"


def test_update_purchase(client: TestClient, card_id: str):
    created = client.post(
        "/v1/purchases",
        json={"card_id": card_id, "amount": "50.00", "transaction_date": "2025-03-10"},
    ).json()["purchase"]

    response = client.patch(f"/v1/purchases/{created['id']}", json={"amount": "75.50"})

    assert response.status_code == 200
    assert response.json()["purchase"]["amount"] == "75.50"
    assert client.get(f"/v1/purchases/{created['id']}").json()["amount"] == "75.50"


def test_invoice_and_payment_flow(client: TestClient, card_id: str):
    """Test invoice retrieval, partial and full payment, and overpayment"""
    client.post(
        "/v1/purchases",
        json={"card_id": card_id, "amount": "300.00", "transaction_date": "2025-03-12"},
    )

    invoice = client.get(f"/v1/cards/{card_id}/invoice", params={"reference_date": "2025-03-12"}).json()
    assert invoice["total"] == "300.00"
    assert invoice["period_end"] == "2025-04-04"
    assert invoice["status"] == "open"

    response = client.post(f"/v1/invoices/{invoice['id']}/payments", json={"amount": "400.00"})
    assert response.status_code == 400
    assert response.json()["remaining"] == "300.00"

    response = client.post(f"/v1/invoices/{invoice['id']}/payments", json={"amount": "100.00"})
    assert response.json()["status"] == "partial"
    assert response.json()["remaining"] == "200.00"

    response = client.post(f"/v1/invoices/{invoice['id']}/payments", json={"amount": "200.00"})
    assert response.json()["status"] == "paid"

    charges = client.get(f"/v1/invoices/{invoice['id']}/charges").json()
    assert [leg["amount"] for leg in charges["legs"]] == ["300.00"]
    assert charges["total"] == "300.00"

    assert [i["id"] for i in client.get(f"/v1/cards/{card_id}/invoices").json()] == [invoice["id"]]
    assert client.get(f"/v1/invoices/{invoice['id']}").json()["paid_amount"] == "300.00"


def test_invoice_list_reports_overdue_status(client: TestClient, card_id: str, clock):
    client.post(
        "/v1/purchases",
        json={"card_id": card_id, "amount": "80.00", "transaction_date": "2025-03-10"},
    )
    client.get(f"/v1/cards/{card_id}/invoice")

    clock.today = date(2025, 5, 20)

    invoices = client.get(f"/v1/cards/{card_id}/invoices").json()
    assert [i["status"] for i in invoices] == ["overdue"]


def test_card_in_use_cannot_be_deleted(client: TestClient, card_id: str):
    client.post(
        "/v1/purchases",
        json={"card_id": card_id, "amount": "10.00", "transaction_date": "2025-03-10"},
    )

    assert client.delete(f"/v1/cards/{card_id}").status_code == 409


def test_subscription_endpoints(client: TestClient, card_id: str):
    response = client.post(
        "/v1/subscriptions",
        json={
            "name": "Streaming",
            "amount": "39.90",
            "billing_day": 20,
            "payment_method": "credit_card",
            "card_id": card_id,
        },
    )
    assert response.status_code == 201
    subscription = response.json()
    assert subscription["start_date"] == "2025-03-10"

    invoice = client.get(f"/v1/cards/{card_id}/invoice").json()
    assert invoice["total"] == "39.90"

    response = client.patch(f"/v1/subscriptions/{subscription['id']}", json={"is_active": False})
    assert response.json()["is_active"] is False
    assert client.get(f"/v1/subscriptions?card_id={card_id}").json()[0]["id"] == subscription["id"]

    assert client.delete(f"/v1/subscriptions/{subscription['id']}").status_code == 204
    assert client.get(f"/v1/subscriptions/{subscription['id']}").status_code == 404


def test_subscription_requires_card_for_credit_card(client: TestClient):
    response = client.post(
        "/v1/subscriptions",
        json={"name": "Gym", "amount": "99.00", "billing_day": 1, "payment_method": "credit_card"},
    )
    assert response.status_code == 422


def test_cards_summary(client: TestClient, card_id: str):
    client.post(
        "/v1/purchases",
        json={"card_id": card_id, "amount": "250.00", "transaction_date": "2025-03-10"},
    )

    summary = client.get("/v1/cards/summary").json()

    assert summary["total_cards"] == 1
    assert summary["total_used"] == "250.00"
    assert summary["usage_percentage"] == "25.00"


def test_unknown_ids_return_404(client: TestClient):
    assert client.get("/v1/cards/missing/available-credit").status_code == 404
    assert client.get("/v1/invoices/missing").status_code == 404
    assert client.delete("/v1/purchases/missing").status_code == 404
