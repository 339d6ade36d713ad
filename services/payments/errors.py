"""Exception types raised by the payment components."""

from __future__ import annotations

from typing import Any, Dict, Optional


class PaymentError(RuntimeError):
    """Base class for payment failures; ``code`` is surfaced in API error details."""

    code = "payments.error"

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_detail(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationError(PaymentError):
    """Raised when a payment request is missing required fields or has invalid values."""

    code = "payments.invalid_request"


class GatewayError(PaymentError):
    """Raised when the payment gateway is unreachable or returns an unexpected response."""

    code = "payments.gateway_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


class PersistenceError(PaymentError):
    """Raised when a payment record cannot be read or written."""

    code = "payments.persistence_error"


class SignatureError(PaymentError):
    """Raised when a webhook signature does not verify."""

    code = "payments.webhook_signature_invalid"


class EncryptionError(PaymentError):
    """Raised when sensitive payment data cannot be encrypted or decrypted."""

    code = "payments.encryption_error"


class TransactionNotFoundError(PaymentError):
    """Raised when no payment transaction matches the given reference."""

    code = "payments.transaction_not_found"


class TransitionError(PaymentError):
    """Raised when a transaction status change is not allowed from its current state."""

    code = "payments.invalid_transition"

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move payment from '{current}' to '{target}'")
        self.current = current
        self.target = target


__all__ = [
    "EncryptionError",
    "GatewayError",
    "PaymentError",
    "PersistenceError",
    "SignatureError",
    "TransactionNotFoundError",
    "TransitionError",
    "ValidationError",
]
