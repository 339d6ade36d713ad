"""Payments service helpers."""

from .cashier_client import CashierClient, build_cashier_client
from .crypto import PaymentCrypto, generate_secure_token
from .errors import (
    EncryptionError,
    GatewayError,
    PaymentError,
    PersistenceError,
    SignatureError,
    TransactionNotFoundError,
    TransitionError,
    ValidationError,
)
from .kashier_gateway import GatewayPaymentRequest, GatewaySession, KashierGateway
from .payment_service import (
    CreatePaymentParams,
    PaymentResult,
    PaymentService,
    WebhookResult,
    build_payment_service,
)
from .payment_store import PaymentStore, StoreResult

__all__ = [
    "CashierClient",
    "CreatePaymentParams",
    "EncryptionError",
    "GatewayError",
    "GatewayPaymentRequest",
    "GatewaySession",
    "KashierGateway",
    "PaymentCrypto",
    "PaymentError",
    "PaymentResult",
    "PaymentService",
    "PaymentStore",
    "PersistenceError",
    "SignatureError",
    "StoreResult",
    "TransactionNotFoundError",
    "TransitionError",
    "ValidationError",
    "WebhookResult",
    "build_cashier_client",
    "build_payment_service",
    "generate_secure_token",
]
