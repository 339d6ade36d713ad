"""Payment orchestration: session creation, webhook reconciliation and status changes.

Persistence around a successful gateway interaction is best-effort. A failed
transaction insert or audit log write is logged and the customer still gets
the redirect URL or transaction id. Status changes go through
:mod:`services.payments.status` so late or out-of-order webhooks cannot move a
transaction out of a terminal state.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from core.config import PaymentSettings
from services.payments.cashier_client import CashierClient, build_cashier_client
from services.payments.crypto import PaymentCrypto, build_signature_payload, generate_secure_token
from services.payments.errors import (
    EncryptionError,
    GatewayError,
    PaymentError,
    PersistenceError,
    TransactionNotFoundError,
    TransitionError,
    ValidationError,
)
from services.payments.kashier_gateway import GatewayPaymentRequest, KashierGateway
from services.payments.payment_store import PaymentStore, SessionFactory, StoreResult, utcnow
from services.payments.status import (
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_REFUNDED,
    can_transition,
    ensure_transition,
    normalize_status,
)
from services.payments.webhook_utils import (
    COMPLETION_EVENTS,
    EVENT_FAILED,
    EVENT_REFUNDED,
    event_data,
    resolve_event_type,
    resolve_order_id,
    resolve_refund_amount,
    resolve_transaction_id,
)

logger = logging.getLogger(__name__)

METHOD_CASHIER = "cashier"
METHOD_COD = "cod"
METHOD_BANK_TRANSFER = "bank_transfer"
SUPPORTED_METHODS = (METHOD_CASHIER, METHOD_COD, METHOD_BANK_TRANSFER)

WEBHOOK_SOURCE = "cashier"
WEBHOOK_PROCESSED = "processed"
WEBHOOK_IGNORED = "ignored"
WEBHOOK_FAILED = "failed"

_PAYMENT_URL_KEYS = ("paymentUrl", "checkoutUrl", "url")
_NESTED_PAYMENT_URL_KEYS = ("payment_url", "checkout_url")

_REMOTE_STATUS_ALIASES = {
    "success": STATUS_COMPLETED,
    "succeeded": STATUS_COMPLETED,
    "paid": STATUS_COMPLETED,
    "captured": STATUS_COMPLETED,
    "declined": STATUS_FAILED,
    "error": STATUS_FAILED,
    "expired": STATUS_CANCELLED,
    "canceled": STATUS_CANCELLED,
}


@dataclass(slots=True)
class CreatePaymentParams:
    order_id: str
    amount: Any
    payment_method: str
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    currency: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class PaymentResult:
    """Outcome of a payment request. ``success`` is always set; ``error`` only on failure."""

    success: bool
    transaction_id: Optional[str] = None
    payment_url: Optional[str] = None
    checkout_url: Optional[str] = None
    url: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "PaymentResult":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": self.success,
            "transactionId": self.transaction_id,
            "paymentUrl": self.payment_url,
            "checkoutUrl": self.checkout_url,
            "url": self.url,
            "message": self.message,
            "error": self.error,
        }
        return {key: value for key, value in payload.items() if value is not None}


@dataclass(frozen=True, slots=True)
class WebhookResult:
    ok: bool
    status_code: int
    message: str


def _parse_amount(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValidationError("Missing required payment parameters")
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError("amount must be a number") from exc
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("amount must be greater than zero")
    return amount


def _extract_payment_url(response: Dict[str, Any]) -> Optional[str]:
    for key in _PAYMENT_URL_KEYS:
        value = response.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    nested = event_data(response)
    for key in _NESTED_PAYMENT_URL_KEYS:
        value = nested.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _extract_gateway_transaction_id(response: Dict[str, Any]) -> Optional[str]:
    nested = event_data(response)
    for value in (
        response.get("transactionId"),
        response.get("transaction_id"),
        nested.get("transaction_id"),
        nested.get("transactionId"),
    ):
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _remote_status(value: Any) -> Optional[str]:
    text = str(value or "").strip().lower()
    if not text:
        return None
    text = _REMOTE_STATUS_ALIASES.get(text, text)
    try:
        return normalize_status(text)
    except ValueError:
        return None


class PaymentService:
    """Coordinates the gateway adapter, API client, crypto helpers and the store."""

    def __init__(
        self,
        settings: PaymentSettings,
        *,
        store: Optional[PaymentStore] = None,
        gateway: Optional[KashierGateway] = None,
        crypto: Optional[PaymentCrypto] = None,
        api_client: Optional[CashierClient] = None,
    ) -> None:
        self.settings = settings
        self.store = store or PaymentStore()
        self.gateway = gateway or KashierGateway(settings)
        self.crypto = crypto or PaymentCrypto(
            signing_secret=settings.signing_secret,
            encryption_key=settings.encryption_key,
        )
        self.api_client = api_client

    # -- payment creation ------------------------------------------------

    async def create_payment(self, params: CreatePaymentParams) -> PaymentResult:
        """Start a payment for an order. Never raises; failures come back as ``success=False``."""
        try:
            logger.info(
                "Creating payment orderId=%s method=%s",
                params.order_id,
                params.payment_method,
                extra={"payment": {"order_id": params.order_id, "method": params.payment_method}},
            )
            if not (params.order_id or "").strip() or not (params.payment_method or "").strip():
                return PaymentResult.failure("Missing required payment parameters")
            _parse_amount(params.amount)

            method_code = params.payment_method.strip().lower()
            if method_code not in SUPPORTED_METHODS:
                return PaymentResult.failure("Unsupported payment method")
            method = self._resolve_payment_method(method_code)

            if method_code == METHOD_CASHIER:
                return await self.initiate_kashier_payment(params, payment_method=method)
            if method_code == METHOD_COD:
                return self._process_offline_payment(
                    params, method, prefix="cod", message="Cash on delivery order created"
                )
            return self._process_offline_payment(
                params, method, prefix="bank", message="Bank transfer instructions sent"
            )
        except PaymentError as exc:
            logger.warning("Payment creation rejected orderId=%s: %s", params.order_id, exc.message)
            return PaymentResult.failure(exc.message)
        except Exception as exc:  # pragma: no cover - callers branch on result.success
            logger.exception("Unexpected error creating payment orderId=%s", params.order_id)
            return PaymentResult.failure(str(exc) or "Payment creation failed")

    async def initiate_kashier_payment(
        self,
        params: CreatePaymentParams,
        *,
        payment_method: Optional[Dict[str, Any]] = None,
        use_api_client: bool = True,
    ) -> PaymentResult:
        """Create a gateway checkout session and return its redirect URL.

        With API credentials configured the session is opened over HTTP;
        otherwise (or when ``use_api_client`` is False) the hosted checkout
        URL is signed locally. Raises :class:`ValidationError` or
        :class:`GatewayError`.
        """
        order_id = (params.order_id or "").strip()
        if not order_id:
            raise ValidationError("Missing required payment parameters")
        amount = _parse_amount(params.amount)
        currency = (params.currency or self.settings.default_currency).upper()
        method = payment_method or self._default_payment_method(METHOD_CASHIER)

        if use_api_client and self.api_client is not None:
            response = await self.api_client.create_payment(
                amount=float(amount),
                currency=currency,
                order_id=order_id,
                customer_email=params.customer_email,
                customer_name=params.customer_name,
                customer_phone=params.customer_phone,
                return_url=self.settings.url("/payment/return"),
                callback_url=self.settings.url("/api/v1/payments/webhook"),
                metadata=params.metadata,
            )
            if response.get("success") is False:
                raise GatewayError(str(response.get("error") or "Cashier payment failed"), payload=response)
            payment_url = _extract_payment_url(response)
            if not payment_url:
                logger.error("No payment URL in gateway response orderId=%s", order_id)
                raise GatewayError("Payment URL not available. Please try again.", payload=response)
            transaction_id = _extract_gateway_transaction_id(response) or f"cashier_{generate_secure_token(16)}"
            gateway_response: Dict[str, Any] = response
        else:
            session = self.gateway.build_payment_url(
                GatewayPaymentRequest(
                    order_id=order_id,
                    amount=float(amount),
                    currency=currency,
                    customer_email=params.customer_email,
                    customer_name=params.customer_name,
                    customer_phone=params.customer_phone,
                )
            )
            payment_url = session.payment_url
            transaction_id = session.transaction_id
            gateway_response = {"provider": "kashier", "signature": session.signature}

        self._persist_gateway_transaction(
            params,
            method,
            transaction_id=transaction_id,
            amount=amount,
            currency=currency,
            gateway_response=gateway_response,
        )
        logger.info("Initiated gateway payment orderId=%s transactionId=%s", order_id, transaction_id)
        return PaymentResult(
            success=True,
            transaction_id=transaction_id,
            payment_url=payment_url,
            checkout_url=payment_url,
            url=payment_url,
            message="Redirecting to payment gateway",
        )

    def _process_offline_payment(
        self,
        params: CreatePaymentParams,
        method: Dict[str, Any],
        *,
        prefix: str,
        message: str,
    ) -> PaymentResult:
        transaction_id = f"{prefix}_{generate_secure_token(16)}"
        amount = _parse_amount(params.amount)
        try:
            self.store.insert_transaction(
                order_id=params.order_id,
                payment_method_id=method["id"],
                transaction_id=transaction_id,
                amount=amount,
                currency=(params.currency or self.settings.default_currency).upper(),
                status=STATUS_PENDING,
                ip_address=params.ip_address,
                user_agent=params.user_agent,
                initiated_at=utcnow(),
            )
        except PersistenceError as exc:
            logger.warning("Could not save %s transaction %s (continuing): %s", prefix, transaction_id, exc)
        else:
            self._log_payment_event(transaction_id, "initiated", message)
        return PaymentResult(success=True, transaction_id=transaction_id, message=message)

    def _persist_gateway_transaction(
        self,
        params: CreatePaymentParams,
        method: Dict[str, Any],
        *,
        transaction_id: str,
        amount: Decimal,
        currency: str,
        gateway_response: Dict[str, Any],
    ) -> bool:
        try:
            sensitive = json.dumps(
                {"customerEmail": params.customer_email, "customerPhone": params.customer_phone}
            )
            encrypted = self.crypto.encrypt_payment_data(sensitive)
            signature = self.crypto.generate_signature(
                build_signature_payload(params.order_id, amount, transaction_id)
            )
        except EncryptionError as exc:
            # never store contact data unencrypted
            logger.error("Skipping transaction persistence for %s: %s", transaction_id, exc.message)
            return False
        try:
            self.store.insert_transaction(
                order_id=params.order_id,
                payment_method_id=method["id"],
                transaction_id=transaction_id,
                amount=amount,
                currency=currency,
                status=STATUS_PENDING,
                encrypted_data=encrypted,
                signature=signature,
                gateway_response=gateway_response,
                ip_address=params.ip_address,
                user_agent=params.user_agent,
                initiated_at=utcnow(),
            )
        except PersistenceError as exc:
            logger.warning("Could not save gateway transaction %s (continuing): %s", transaction_id, exc)
            return False
        self._log_payment_event(transaction_id, "initiated", "Gateway payment session created")
        return True

    def _default_payment_method(self, code: str) -> Dict[str, Any]:
        return {"id": f"default_{code}", "code": code, "name": code.upper(), "is_active": True}

    def _resolve_payment_method(self, code: str) -> Dict[str, Any]:
        try:
            method = self.store.find_payment_method(code)
        except PersistenceError as exc:
            logger.warning("Payment method lookup failed for %s: %s", code, exc)
            method = None
        if method is None:
            logger.info("Using default payment method config for %s", code)
            return self._default_payment_method(code)
        return method

    # -- webhooks --------------------------------------------------------

    def handle_webhook(
        self,
        payload: Optional[Dict[str, Any]],
        raw_body: bytes | str,
        signature: Optional[str],
        timestamp: Optional[str],
        ip_address: Optional[str] = None,
    ) -> WebhookResult:
        """Verify and apply a gateway webhook.

        The signature is checked against ``raw_body`` before anything is
        parsed or written. ``payload`` may be passed pre-parsed; otherwise it
        is decoded from ``raw_body``.
        """
        if not self.gateway.verify_webhook_signature(raw_body, signature, timestamp):
            logger.warning("Rejected payment webhook with invalid signature ip=%s", ip_address)
            return WebhookResult(ok=False, status_code=401, message="Invalid signature")

        if payload is None:
            try:
                payload = json.loads(raw_body)
            except (TypeError, ValueError):
                return WebhookResult(ok=False, status_code=400, message="Invalid JSON payload")
        if not isinstance(payload, dict):
            return WebhookResult(ok=False, status_code=400, message="Invalid JSON payload")

        webhook_id: Optional[int] = None
        try:
            event_type = resolve_event_type(payload)
            transaction_id = resolve_transaction_id(payload)
            order_id = resolve_order_id(payload)
            context = {"event_type": event_type, "transaction_id": transaction_id, "order_id": order_id}
            logger.info("Payment webhook received: %s", event_type, extra={"webhook": context})

            try:
                webhook_id = self.store.insert_webhook(
                    source=WEBHOOK_SOURCE,
                    event_type=event_type,
                    transaction_id=transaction_id,
                    payload=payload,
                    signature=signature,
                    signature_verified=True,
                    ip_address=ip_address,
                )
            except PersistenceError as exc:
                logger.error("Failed to record payment webhook: %s", exc, extra={"webhook": context})

            errors: List[str] = []
            if event_type in COMPLETION_EVENTS:
                self._apply_completed(payload, transaction_id, order_id, errors)
            elif event_type == EVENT_FAILED:
                self._apply_failed(payload, transaction_id, order_id, errors)
            elif event_type == EVENT_REFUNDED:
                self._apply_refunded(payload, transaction_id, errors)
            else:
                logger.info("Ignoring unhandled payment webhook event: %s", event_type, extra={"webhook": context})
                self._finalize_webhook(webhook_id, WEBHOOK_IGNORED)
                return WebhookResult(ok=True, status_code=200, message="Event ignored")

            if errors:
                self._finalize_webhook(webhook_id, WEBHOOK_FAILED, error="; ".join(errors))
            else:
                self._finalize_webhook(webhook_id, WEBHOOK_PROCESSED)
            return WebhookResult(ok=True, status_code=200, message="OK")
        except Exception:  # pragma: no cover - mapped to a 500 result
            logger.exception("Error processing payment webhook")
            self._finalize_webhook(webhook_id, WEBHOOK_FAILED, error="Internal processing failed")
            return WebhookResult(ok=False, status_code=500, message="Internal processing failed")

    def _apply_completed(
        self,
        payload: Dict[str, Any],
        transaction_id: Optional[str],
        order_id: Optional[str],
        errors: List[str],
    ) -> None:
        if transaction_id:
            try:
                row = self._transition(transaction_id, STATUS_COMPLETED, gateway_response=event_data(payload))
            except TransitionError as exc:
                # a late success must not reopen a failed or refunded payment
                logger.warning("Ignoring completion for %s: %s", transaction_id, exc.message)
                errors.append(exc.message)
                return
            except PersistenceError as exc:
                logger.error("Failed to mark transaction %s completed: %s", transaction_id, exc)
                errors.append(exc.message)
            else:
                if row is None:
                    logger.warning("No payment transaction matches %s", transaction_id)
                self._log_payment_event(transaction_id, "webhook_completed", "Payment completed via webhook")

        if order_id:
            self._update_order(order_id, errors, payment_status="paid", status="processing")

    def _apply_failed(
        self,
        payload: Dict[str, Any],
        transaction_id: Optional[str],
        order_id: Optional[str],
        errors: List[str],
    ) -> None:
        if transaction_id:
            try:
                self._transition(transaction_id, STATUS_FAILED, gateway_response=event_data(payload))
            except TransitionError as exc:
                logger.warning("Ignoring failure for %s: %s", transaction_id, exc.message)
                errors.append(exc.message)
                return
            except PersistenceError as exc:
                logger.error("Failed to mark transaction %s failed: %s", transaction_id, exc)
                errors.append(exc.message)
            else:
                self._log_payment_event(transaction_id, "webhook_failed", "Payment failed via webhook")

        if order_id:
            self._update_order(order_id, errors, payment_status="failed")

    def _apply_refunded(self, payload: Dict[str, Any], transaction_id: Optional[str], errors: List[str]) -> None:
        if not transaction_id:
            errors.append("Refund webhook without transaction_id")
            return
        data = event_data(payload)
        try:
            current = self.store.find_transaction(transaction_id)
        except PersistenceError as exc:
            logger.error("Failed to load transaction %s for refund: %s", transaction_id, exc)
            errors.append(exc.message)
            return
        if current is None:
            logger.warning("Refund webhook references unknown transaction %s", transaction_id)
            errors.append(f"Transaction {transaction_id} not found")
            return
        if current["status"] == STATUS_REFUNDED:
            logger.info("Transaction %s already refunded; skipping refund row", transaction_id)
            return
        if not can_transition(current["status"], STATUS_REFUNDED):
            error = TransitionError(current["status"], STATUS_REFUNDED)
            logger.warning("Ignoring refund for %s: %s", transaction_id, error.message)
            errors.append(error.message)
            return

        try:
            self.store.insert_refund(
                transaction_id=transaction_id,
                refund_amount=resolve_refund_amount(payload),
                reason=data.get("reason"),
                gateway_reference=data.get("refund_id"),
            )
        except PersistenceError as exc:
            logger.error("Failed to record refund for %s: %s", transaction_id, exc)
            errors.append(exc.message)

        try:
            self._transition(transaction_id, STATUS_REFUNDED)
        except (TransitionError, PersistenceError) as exc:
            logger.error("Failed to mark transaction %s refunded: %s", transaction_id, exc.message)
            errors.append(exc.message)
        else:
            self._log_payment_event(transaction_id, "webhook_refunded", "Payment refunded via webhook")

    def _update_order(self, order_id: str, errors: List[str], **changes: Any) -> None:
        try:
            found = self.store.update_order(order_id, **changes)
        except PersistenceError as exc:
            logger.error("Failed to update order %s: %s", order_id, exc)
            errors.append(exc.message)
            return
        if not found:
            logger.warning("Payment webhook references unknown order %s", order_id)

    def _finalize_webhook(self, webhook_id: Optional[int], status: str, *, error: Optional[str] = None) -> None:
        if webhook_id is None:
            return
        try:
            self.store.update_webhook_status(webhook_id, status, error=error)
        except PersistenceError as exc:
            logger.error("Failed to finalise payment webhook %s: %s", webhook_id, exc)

    # -- status changes --------------------------------------------------

    def _transition(
        self,
        reference: str,
        target: str,
        *,
        gateway_response: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Move a transaction to ``target``. Returns None when it does not exist."""
        row = self.store.find_transaction(reference)
        if row is None:
            return None
        current = row["status"]
        if current == target:
            return row
        ensure_transition(current, target)

        changes: Dict[str, Any] = {"status": target}
        if target == STATUS_COMPLETED:
            changes["completed_at"] = utcnow()
        elif target == STATUS_FAILED:
            changes["failed_at"] = utcnow()
        if gateway_response:
            changes["gateway_response"] = gateway_response
        return self.store.update_transaction(row["transaction_id"], **changes)

    def update_payment_status(
        self,
        transaction_id: str,
        status: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Administrative status change. Returns False instead of raising."""
        try:
            target = normalize_status(status)
            row = self._transition(transaction_id, target, gateway_response=details)
        except (ValueError, PaymentError) as exc:
            logger.error("Failed to update payment status for %s: %s", transaction_id, exc)
            return False
        if row is None:
            logger.warning("Cannot update status: transaction %s not found", transaction_id)
            return False
        self._log_payment_event(row["transaction_id"], target, f"Payment {target}", details)
        return True

    def get_transaction(self, transaction_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self.store.get_transaction_details(transaction_id)
        except PaymentError as exc:
            logger.error("Get transaction error for %s: %s", transaction_id, exc)
            return None

    async def refund_payment(
        self,
        transaction_id: str,
        amount: Optional[Any] = None,
        reason: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Refund a completed transaction, through the gateway API when one is configured."""
        row = self.store.find_transaction(transaction_id)
        if row is None:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
        if row["status"] != STATUS_COMPLETED:
            raise TransitionError(row["status"], STATUS_REFUNDED)

        captured = Decimal(str(row["amount"]))
        refund_amount = captured if amount is None else _parse_amount(amount)
        if refund_amount > captured:
            raise ValidationError("Refund amount exceeds the captured amount")

        gateway_reference: Optional[str] = None
        if self.api_client is not None:
            response = await self.api_client.refund_payment(row["transaction_id"], float(refund_amount))
            gateway_reference = response.get("refund_id")

        refund_id: Optional[int] = None
        try:
            refund_id = self.store.insert_refund(
                transaction_id=row["transaction_id"],
                refund_amount=refund_amount,
                reason=reason,
                gateway_reference=gateway_reference,
            )
            self._transition(row["transaction_id"], STATUS_REFUNDED)
        except PersistenceError as exc:
            if self.api_client is None:
                raise
            # gateway refund already issued; report it as done
            logger.error(
                "Refund %s issued by gateway for %s but not fully recorded: %s",
                gateway_reference,
                row["transaction_id"],
                exc,
                extra={"payment": {"transaction_id": row["transaction_id"], "gateway_reference": gateway_reference}},
            )
        else:
            self._log_payment_event(
                row["transaction_id"],
                "refunded",
                "Payment refunded",
                {"amount": str(refund_amount), "reason": reason, "gateway_reference": gateway_reference},
            )
        return {
            "transaction_id": row["transaction_id"],
            "refund_id": refund_id,
            "refund_amount": float(refund_amount),
            "gateway_reference": gateway_reference,
            "status": STATUS_REFUNDED,
        }

    async def sync_payment_status(self, transaction_id: str) -> Dict[str, Any]:
        """Pull the gateway's view of a transaction and apply it when the move is allowed."""
        if self.api_client is None:
            raise GatewayError("Payment gateway API is not configured")
        row = self.store.find_transaction(transaction_id)
        if row is None:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")

        remote = await self.api_client.get_payment_status(row["transaction_id"])
        previous = row["status"]
        target = _remote_status(remote.get("status"))
        changed = False
        if target and target != previous and can_transition(previous, target):
            self._transition(row["transaction_id"], target, gateway_response=remote)
            self._log_payment_event(row["transaction_id"], "synced", f"Payment {target} per gateway", remote)
            changed = True
        elif target and target != previous:
            logger.warning(
                "Gateway reports %s for %s but local status is %s; not applied",
                target,
                row["transaction_id"],
                previous,
            )
        return {
            "transaction_id": row["transaction_id"],
            "previous_status": previous,
            "status": target if changed else previous,
            "remote_status": remote.get("status"),
            "changed": changed,
        }

    def _log_payment_event(
        self,
        transaction_id: str,
        event_type: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> StoreResult:
        result = self.store.append_log(transaction_id, event_type, message, details)
        if not result.ok:
            logger.warning("Payment log write failed for %s (%s): %s", transaction_id, event_type, result.error)
        return result


def build_payment_service(
    settings: PaymentSettings,
    *,
    session_factory: Optional[SessionFactory] = None,
    api_client: Optional[CashierClient] = None,
) -> PaymentService:
    """Wire a :class:`PaymentService` from settings."""
    return PaymentService(
        settings,
        store=PaymentStore(session_factory),
        api_client=api_client if api_client is not None else build_cashier_client(settings),
    )


__all__ = [
    "CreatePaymentParams",
    "PaymentResult",
    "PaymentService",
    "SUPPORTED_METHODS",
    "WebhookResult",
    "build_payment_service",
]
