"""Token, signature and field-encryption helpers for payment records.

Sensitive customer fields are encrypted with Fernet (AES-128-CBC + HMAC)
before they are written to ``payment_transactions.encrypted_data``. There is no
plaintext fallback: a missing or malformed key raises :class:`EncryptionError`
so the caller skips persistence instead of storing clear text.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from cryptography.fernet import Fernet, InvalidToken

from services.payments.errors import EncryptionError

Amount = Union[int, float, Decimal, str]


def generate_secure_token(length: int = 16) -> str:
    """Return ``length`` random hex characters from a CSPRNG."""
    if length <= 0:
        raise ValueError("length must be positive")
    return secrets.token_hex((length + 1) // 2)[:length]


def format_amount(amount: Amount) -> str:
    """Render ``amount`` without trailing zeros (``500`` / ``499.5``)."""
    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    if value == value.to_integral_value():
        return str(value.quantize(Decimal(1)))
    return format(value.normalize(), "f")


def build_signature_payload(order_id: str, amount: Amount, transaction_id: str) -> str:
    return f"{order_id}:{format_amount(amount)}:{transaction_id}"


class PaymentCrypto:
    """Server-side signing and encryption bound to configured secrets."""

    def __init__(self, *, signing_secret: Optional[str], encryption_key: Optional[str]) -> None:
        self._signing_secret = signing_secret
        self._cipher: Optional[Fernet] = None
        self._cipher_error: Optional[str] = None
        if not encryption_key:
            self._cipher_error = "PAYMENT_ENCRYPTION_KEY is not configured"
        else:
            try:
                self._cipher = Fernet(encryption_key.encode("utf-8"))
            except (ValueError, TypeError) as exc:
                self._cipher_error = f"Invalid PAYMENT_ENCRYPTION_KEY: {exc}"

    @staticmethod
    def generate_key() -> str:
        return Fernet.generate_key().decode("ascii")

    def generate_signature(self, payload: str) -> str:
        if not self._signing_secret:
            raise EncryptionError("PAYMENT_SIGNING_SECRET is not configured")
        return hmac.new(self._signing_secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()

    def verify_signature(self, payload: str, signature: Optional[str]) -> bool:
        if not signature:
            return False
        expected = self.generate_signature(payload)
        return hmac.compare_digest(expected, signature)

    def encrypt_payment_data(self, plaintext: str) -> str:
        if self._cipher is None:
            raise EncryptionError(self._cipher_error or "Encryption is unavailable")
        return self._cipher.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt_payment_data(self, token: str) -> str:
        if self._cipher is None:
            raise EncryptionError(self._cipher_error or "Encryption is unavailable")
        try:
            return self._cipher.decrypt(token.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as exc:
            raise EncryptionError("Encrypted payment data could not be decrypted") from exc


__all__ = [
    "PaymentCrypto",
    "build_signature_payload",
    "format_amount",
    "generate_secure_token",
]
