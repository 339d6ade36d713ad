import hashlib
import hmac
import json
from urllib.parse import parse_qs, urlsplit

import pytest

from core.config import PaymentSettings
from services.payments.errors import GatewayError, ValidationError
from services.payments.kashier_gateway import GatewayPaymentRequest, KashierGateway


@pytest.fixture()
def gateway() -> KashierGateway:
    return KashierGateway(
        PaymentSettings(
            app_base_url="https://shop.example",
            kashier_merchant_id="MID-1234",
            kashier_api_key="kashier_test_key",
            webhook_secret="whsec_test_secret",
        )
    )


def _sign(secret: str, body: str, timestamp: str) -> str:
    return hmac.new(secret.encode("utf-8"), f"{timestamp}.{body}".encode("utf-8"), hashlib.sha256).hexdigest()


def test_build_payment_url_embeds_signed_checkout_params(gateway: KashierGateway):
    session = gateway.build_payment_url(GatewayPaymentRequest(order_id="ORD1", amount=500, currency="egp"))

    parts = urlsplit(session.payment_url)
    params = {key: values[0] for key, values in parse_qs(parts.query).items()}
    expected_hash = hmac.new(
        b"kashier_test_key",
        b"/?payment=MID-1234.ORD1.500.00.EGP",
        hashlib.sha256,
    ).hexdigest()

    assert f"{parts.scheme}://{parts.netloc}" == "https://payments.kashier.io"
    assert params["merchantId"] == "MID-1234"
    assert params["orderId"] == "ORD1"
    assert params["amount"] == "500.00"
    assert params["currency"] == "EGP"
    assert params["mode"] == "test"
    assert params["hash"] == expected_hash == session.signature
    assert params["allowedMethods"] == "card,wallet,bank_installments"
    assert params["display"] == "en"
    assert params["serverWebhook"] == "https://shop.example/api/v1/payments/webhook"
    assert params["failureRedirect"].startswith("https://shop.example/payment/cancel")


def test_build_payment_url_carries_transaction_id(gateway: KashierGateway):
    session = gateway.build_payment_url(GatewayPaymentRequest(order_id="ORD1", amount=99.5, currency="EGP"))

    assert session.transaction_id.startswith("kashier_")
    assert len(session.transaction_id) == len("kashier_") + 16
    assert session.transaction_id in session.payment_url
    params = parse_qs(urlsplit(session.payment_url).query)
    assert f"transactionId={session.transaction_id}" in params["merchantRedirect"][0]


@pytest.mark.parametrize(
    "order_id, amount",
    [("", 500), ("   ", 500), ("ORD1", 0), ("ORD1", -10), ("ORD1", "abc"), ("ORD1", 0.004), ("ORD1", "NaN")],
)
def test_build_payment_url_validates_input(gateway: KashierGateway, order_id, amount):
    with pytest.raises(ValidationError):
        gateway.build_payment_url(GatewayPaymentRequest(order_id=order_id, amount=amount, currency="EGP"))


def test_build_payment_url_requires_merchant_credentials():
    gateway = KashierGateway(PaymentSettings())
    with pytest.raises(GatewayError):
        gateway.build_payment_url(GatewayPaymentRequest(order_id="ORD1", amount=500, currency="EGP"))


def test_verify_webhook_signature_accepts_matching_hmac(gateway: KashierGateway):
    body = json.dumps({"event_type": "payment.completed", "data": {"transaction_id": "txn_1"}})
    signature = _sign("whsec_test_secret", body, "1700000000")

    assert gateway.verify_webhook_signature(body.encode("utf-8"), signature, "1700000000")
    assert gateway.verify_webhook_signature(body, signature.upper(), "1700000000")


def test_verify_webhook_signature_rejects_wrong_secret_or_tampered_body(gateway: KashierGateway):
    body = json.dumps({"event_type": "payment.completed", "data": {"transaction_id": "txn_1"}})
    forged = _sign("other_secret", body, "1700000000")
    valid = _sign("whsec_test_secret", body, "1700000000")

    assert not gateway.verify_webhook_signature(body, forged, "1700000000")
    assert not gateway.verify_webhook_signature(body.replace("txn_1", "txn_2"), valid, "1700000000")
    assert not gateway.verify_webhook_signature(body, valid, "1700000001")


@pytest.mark.parametrize(
    "signature, timestamp",
    [(None, "1700000000"), ("", "1700000000"), ("abc", None), ("éé", "1700000000")],
)
def test_verify_webhook_signature_fails_closed(gateway: KashierGateway, signature, timestamp):
    assert gateway.verify_webhook_signature(b"{}", signature, timestamp) is False


def test_verify_webhook_signature_without_secret_is_false():
    gateway = KashierGateway(PaymentSettings())
    body = "{}"
    assert not gateway.verify_webhook_signature(body, _sign("", body, "1"), "1")


def test_verify_webhook_signature_handles_undecodable_body(gateway: KashierGateway):
    assert gateway.verify_webhook_signature(b"\xff\xfe", "00", "1") is False


@pytest.mark.parametrize("amount, expected", [(0.005, "0.01"), ("12.345", "12.35"), (99.999, "100.00")])
def test_build_payment_url_signs_the_rounded_amount(gateway: KashierGateway, amount, expected):
    session = gateway.build_payment_url(GatewayPaymentRequest(order_id="ORD1", amount=amount, currency="EGP"))

    params = parse_qs(urlsplit(session.payment_url).query)
    assert params["amount"] == [expected]
    assert params["hash"] == [gateway.checkout_signature("ORD1", expected, "EGP")]
