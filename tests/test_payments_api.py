import hashlib
import hmac
import json
from decimal import Decimal
from typing import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.config import PaymentSettings
from services.payments.payment_service import PaymentService
from services.payments.payment_store import PaymentStore, utcnow
from web.deps import get_payment_service
from web.routers.payments import router as payments_router

WEBHOOK_SECRET = "whsec_test_secret"


def _build_client(service: PaymentService) -> TestClient:
    app = FastAPI()
    app.include_router(payments_router, prefix="/api/v1")
    app.dependency_overrides[get_payment_service] = lambda: service
    return TestClient(app)


@pytest.fixture()
def payments_client(payment_service: PaymentService) -> Iterator[TestClient]:
    """Payments router wired to a service backed by the in-memory database."""
    client = _build_client(payment_service)
    try:
        yield client
    finally:
        client.close()


def _seed(store: PaymentStore, status: str = "pending", transaction_id: str = "kashier_0123456789abcdef") -> None:
    store.insert_transaction(
        order_id="ORD1",
        transaction_id=transaction_id,
        amount=Decimal("500.00"),
        currency="EGP",
        status=status,
        initiated_at=utcnow(),
    )


def test_create_cod_payment(payments_client: TestClient):
    response = payments_client.post(
        "/api/v1/payments",
        json={"orderId": "ORD1", "amount": 500, "paymentMethod": "cod", "customerEmail": "a@b.com"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["transactionId"].startswith("cod_")
    assert "paymentUrl" not in payload


def test_create_payment_with_missing_fields_is_a_bad_request(payments_client: TestClient):
    response = payments_client.post("/api/v1/payments", json={"amount": 500})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Missing required payment parameters"}


def test_create_cashier_payment_returns_redirect_url(payments_client: TestClient):
    response = payments_client.post(
        "/api/v1/payments",
        json={"orderId": "ORD1", "amount": "250.5", "paymentMethod": "cashier", "customerEmail": "a@b.com"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["paymentUrl"] == payload["checkoutUrl"] == payload["url"]
    assert "merchantId=MID-1234" in payload["paymentUrl"]
    assert "amount=250.50" in payload["paymentUrl"]


def test_kashier_endpoint_builds_checkout_url(payments_client: TestClient):
    response = payments_client.post("/api/v1/payments/kashier", json={"orderId": "ORD7", "amount": 99.9})

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["transactionId"].startswith("kashier_")
    assert "orderId=ORD7" in payload["paymentUrl"]


def test_kashier_endpoint_reports_unconfigured_gateway(payment_store: PaymentStore):
    client = _build_client(PaymentService(PaymentSettings(), store=payment_store))

    response = client.post("/api/v1/payments/kashier", json={"orderId": "ORD7", "amount": 99.9})

    assert response.status_code == 502
    assert response.json()["detail"]["code"] == "payments.gateway_error"


def test_kashier_endpoint_rejects_non_positive_amount(payments_client: TestClient):
    response = payments_client.post("/api/v1/payments/kashier", json={"orderId": "ORD7", "amount": 0})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "payments.invalid_request"


def test_webhook_requires_valid_signature(payments_client: TestClient):
    response = payments_client.post(
        "/api/v1/payments/webhook",
        content=b'{"event_type": "payment.completed"}',
        headers={"x-cashier-signature": "deadbeef", "x-cashier-timestamp": "1767225600"},
    )

    assert response.status_code == 401
    assert response.json() == {"ok": False, "message": "Invalid signature"}


def test_webhook_applies_signed_event(payments_client: TestClient, payment_store: PaymentStore):
    _seed(payment_store)
    body = json.dumps(
        {"event_type": "payment.completed", "data": {"transaction_id": "kashier_0123456789abcdef"}}
    ).encode("utf-8")
    timestamp = "1767225600"
    signature = hmac.new(WEBHOOK_SECRET.encode("utf-8"), f"{timestamp}.".encode("utf-8") + body, hashlib.sha256)

    response = payments_client.post(
        "/api/v1/payments/webhook",
        content=body,
        headers={
            "Content-Type": "application/json",
            "X-Cashier-Signature": signature.hexdigest(),
            "X-Cashier-Timestamp": timestamp,
            "X-Forwarded-For": "203.0.113.5, 10.0.0.1",
        },
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True, "message": "OK"}
    assert payment_store.find_transaction("kashier_0123456789abcdef")["status"] == "completed"


def test_read_transaction(payments_client: TestClient, payment_store: PaymentStore):
    _seed(payment_store)

    response = payments_client.get("/api/v1/payments/transactions/kashier_0123456789abcdef")

    assert response.status_code == 200
    payload = response.json()
    assert payload["transactionId"] == "kashier_0123456789abcdef"
    assert payload["amount"] == 500.0
    assert payload["status"] == "pending"
    assert payload["order"] is None


def test_read_missing_transaction_is_404(payments_client: TestClient):
    response = payments_client.get("/api/v1/payments/transactions/nope")

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "payments.transaction_not_found"


def test_update_transaction_status(payments_client: TestClient, payment_store: PaymentStore):
    _seed(payment_store)

    response = payments_client.patch(
        "/api/v1/payments/transactions/kashier_0123456789abcdef/status",
        json={"status": "completed", "details": {"note": "manual capture"}},
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "transactionId": "kashier_0123456789abcdef",
        "status": "completed",
    }
    record = payment_store.find_transaction("kashier_0123456789abcdef")
    assert record["gateway_response"] == {"note": "manual capture"}


def test_update_transaction_status_rejects_illegal_transition(payments_client: TestClient, payment_store: PaymentStore):
    _seed(payment_store, status="refunded")

    response = payments_client.patch(
        "/api/v1/payments/transactions/kashier_0123456789abcdef/status", json={"status": "completed"}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "payments.status_update_failed"


def test_update_transaction_status_validates_status_value(payments_client: TestClient):
    response = payments_client.patch("/api/v1/payments/transactions/any/status", json={"status": "settled"})

    assert response.status_code == 422


def test_refund_requires_completed_payment(payments_client: TestClient, payment_store: PaymentStore):
    _seed(payment_store)

    response = payments_client.post("/api/v1/payments/transactions/kashier_0123456789abcdef/refund", json={})

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "payments.invalid_transition"


def test_refund_completed_payment(payments_client: TestClient, payment_store: PaymentStore):
    _seed(payment_store, status="completed")

    response = payments_client.post(
        "/api/v1/payments/transactions/kashier_0123456789abcdef/refund", json={"amount": 100, "reason": "damaged"}
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["refundAmount"] == 100.0
    assert payload["status"] == "refunded"
    assert payment_store.find_transaction("kashier_0123456789abcdef")["status"] == "refunded"


def test_refund_unknown_transaction_is_404(payments_client: TestClient):
    response = payments_client.post("/api/v1/payments/transactions/nope/refund", json={})

    assert response.status_code == 404


def test_sync_without_api_client_is_a_gateway_error(payments_client: TestClient, payment_store: PaymentStore):
    _seed(payment_store)

    response = payments_client.post("/api/v1/payments/transactions/kashier_0123456789abcdef/sync")

    assert response.status_code == 502
    assert response.json()["detail"]["code"] == "payments.gateway_error"
