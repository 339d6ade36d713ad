"""Kashier hosted-checkout adapter.

Builds signed redirect URLs for the Kashier payment page and verifies the
HMAC signature on inbound gateway webhooks. No network I/O happens here.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional
from urllib.parse import quote, urlencode

from core.config import PaymentSettings
from services.payments.crypto import generate_secure_token
from services.payments.errors import GatewayError, ValidationError

logger = logging.getLogger(__name__)

TRANSACTION_PREFIX = "kashier"


@dataclass(slots=True)
class GatewayPaymentRequest:
    order_id: str
    amount: float
    currency: str
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    success_url: Optional[str] = None
    failure_url: Optional[str] = None
    webhook_url: Optional[str] = None


@dataclass(frozen=True, slots=True)
class GatewaySession:
    transaction_id: str
    payment_url: str
    signature: str


def _amount_2dp(amount: object) -> str:
    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValidationError("amount must be a number") from exc
    if not value.is_finite():
        raise ValidationError("amount must be a number")
    rounded = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if rounded <= 0:
        raise ValidationError("amount must be greater than zero")
    return f"{rounded}"


class KashierGateway:
    """Translate internal payment requests into Kashier redirect URLs."""

    def __init__(self, settings: PaymentSettings) -> None:
        self._settings = settings

    def checkout_signature(self, order_id: str, amount: str, currency: str) -> str:
        path = f"/?payment={self._settings.kashier_merchant_id}.{order_id}.{amount}.{currency}"
        key = (self._settings.kashier_api_key or "").encode("utf-8")
        return hmac.new(key, path.encode("utf-8"), hashlib.sha256).hexdigest()

    def build_payment_url(self, request: GatewayPaymentRequest) -> GatewaySession:
        order_id = (request.order_id or "").strip()
        if not order_id:
            raise ValidationError("order_id is required")
        amount = _amount_2dp(request.amount)
        if not self._settings.kashier_configured:
            raise GatewayError("Kashier payment gateway is not configured")

        currency = (request.currency or self._settings.default_currency).upper()
        transaction_id = f"{TRANSACTION_PREFIX}_{generate_secure_token(16)}"
        signature = self.checkout_signature(order_id, amount, currency)

        success_url = request.success_url or self._settings.url(
            f"/payment/success?{urlencode({'orderId': order_id, 'transactionId': transaction_id})}"
        )
        failure_url = request.failure_url or self._settings.url(
            f"/payment/cancel?{urlencode({'orderId': order_id})}"
        )
        webhook_url = request.webhook_url or self._settings.url("/api/v1/payments/webhook")

        params = [
            ("merchantId", self._settings.kashier_merchant_id or ""),
            ("orderId", order_id),
            ("mode", self._settings.kashier_mode),
            ("amount", amount),
            ("currency", currency),
            ("hash", signature),
            ("merchantRedirect", success_url),
            ("failureRedirect", failure_url),
            ("serverWebhook", webhook_url),
            ("allowedMethods", self._settings.kashier_allowed_methods),
            ("display", self._settings.kashier_display_language),
        ]
        base = self._settings.kashier_payment_url.rstrip("/")
        payment_url = f"{base}/?{urlencode(params, quote_via=quote, safe=',')}"
        logger.info("Built Kashier checkout URL for orderId=%s transactionId=%s", order_id, transaction_id)
        return GatewaySession(transaction_id=transaction_id, payment_url=payment_url, signature=signature)

    def verify_webhook_signature(self, raw_body: bytes | str, signature: Optional[str], timestamp: Optional[str]) -> bool:
        """Check ``signature`` against HMAC-SHA256(secret, ``timestamp.raw_body``).

        Any problem (missing secret, headers, undecodable body) is a failed
        verification, never an exception.
        """
        try:
            secret = self._settings.effective_webhook_secret
            if not secret or not signature or not timestamp:
                return False
            body = raw_body.decode("utf-8") if isinstance(raw_body, (bytes, bytearray)) else str(raw_body)
            message = f"{timestamp}.{body}".encode("utf-8")
            expected = hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()
            return hmac.compare_digest(expected.encode("ascii"), signature.strip().lower().encode("ascii"))
        except (UnicodeError, TypeError, ValueError) as exc:
            logger.warning("Webhook signature verification error: %s", exc)
            return False


__all__ = ["GatewayPaymentRequest", "GatewaySession", "KashierGateway", "TRANSACTION_PREFIX"]
