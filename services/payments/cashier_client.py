"""Signed HTTP client for the Cashier payment-session API."""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from core.config import PaymentSettings
from services.payments.errors import GatewayError

logger = logging.getLogger(__name__)


def sign_request(secret: str, payload: str, timestamp: str) -> str:
    message = f"{timestamp}.{payload}"
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


@dataclass(slots=True)
class CashierClient:
    """HTTP client wrapper for the Cashier API."""

    api_key: str
    api_secret: str
    base_url: str
    merchant_id: str = ""
    timeout: float = 10.0
    transport: Optional[httpx.AsyncBaseTransport] = None

    async def _request(self, method: str, path: str, *, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        payload = json.dumps(data, separators=(",", ":")) if data is not None else ""
        timestamp = str(int(time.time() * 1000))
        headers = {
            "Content-Type": "application/json",
            "X-Cashier-Api-Key": self.api_key,
            "X-Cashier-Timestamp": timestamp,
            "X-Cashier-Signature": sign_request(self.api_secret, payload, timestamp),
            "X-Cashier-Merchant-Id": self.merchant_id,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(method, url, headers=headers, content=payload or None)
        except httpx.TimeoutException as exc:
            raise GatewayError("Payment gateway timed out") from exc
        except httpx.HTTPError as exc:
            raise GatewayError(f"Payment gateway unreachable: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {"body": response.text}
        if not isinstance(body, dict):
            body = {"data": body}

        if response.status_code >= 400:
            message = body.get("message") or body.get("error") or "Cashier API request failed"
            logger.warning("Cashier API error %s: %s", response.status_code, message)
            raise GatewayError(str(message), status_code=response.status_code, payload=body)
        return body

    async def create_payment(
        self,
        *,
        amount: float,
        currency: str,
        order_id: str,
        customer_email: Optional[str],
        customer_name: Optional[str],
        customer_phone: Optional[str],
        return_url: str,
        callback_url: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Create a hosted payment session and return the raw gateway payload."""
        logger.info("Creating Cashier payment session orderId=%s", order_id)
        return await self._request(
            "POST",
            "/payments",
            data={
                "amount": amount,
                "currency": currency,
                "order_id": order_id,
                "customer": {"email": customer_email, "name": customer_name, "phone": customer_phone},
                "return_url": return_url,
                "callback_url": callback_url,
                "metadata": metadata or {},
            },
        )

    async def get_payment_status(self, transaction_id: str) -> Dict[str, Any]:
        response = await self._request("GET", f"/payments/{transaction_id}")
        return {
            "transaction_id": response.get("transaction_id", transaction_id),
            "status": response.get("status"),
            "amount": response.get("amount"),
            "currency": response.get("currency"),
            "paid_at": response.get("paid_at"),
            "failure_reason": response.get("failure_reason"),
        }

    async def refund_payment(self, transaction_id: str, amount: Optional[float] = None) -> Dict[str, Any]:
        logger.info("Requesting Cashier refund transactionId=%s amount=%s", transaction_id, amount)
        response = await self._request("POST", f"/payments/{transaction_id}/refund", data={"amount": amount})
        return {"refund_id": response.get("refund_id"), "status": response.get("status"), "raw": response}


def build_cashier_client(settings: PaymentSettings) -> Optional[CashierClient]:
    """Return a client when API credentials are configured, otherwise None."""
    if not settings.cashier_api_configured:
        return None
    return CashierClient(
        api_key=settings.cashier_api_key or "",
        api_secret=settings.cashier_api_secret or "",
        base_url=settings.cashier_api_endpoint,
        merchant_id=settings.cashier_merchant_id or "",
        timeout=settings.http_timeout,
    )


__all__ = ["CashierClient", "build_cashier_client", "sign_request"]
