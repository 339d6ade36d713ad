"""Payment configuration resolved from the environment."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.env import env_float, env_str, load_dotenv_if_available

DEFAULT_APP_BASE_URL = "http://localhost:3000"
DEFAULT_KASHIER_PAYMENT_URL = "https://payments.kashier.io"
DEFAULT_CASHIER_API_ENDPOINT = "https://api.cashier.com/v1"
DEFAULT_CURRENCY = "EGP"
DEFAULT_ALLOWED_METHODS = "card,wallet,bank_installments"


@dataclass(frozen=True, slots=True)
class PaymentSettings:
    """Gateway credentials and secrets handed to the payment components."""

    app_base_url: str = DEFAULT_APP_BASE_URL
    default_currency: str = DEFAULT_CURRENCY
    http_timeout: float = 10.0

    kashier_merchant_id: Optional[str] = None
    kashier_api_key: Optional[str] = None
    kashier_payment_url: str = DEFAULT_KASHIER_PAYMENT_URL
    kashier_mode: str = "test"
    kashier_allowed_methods: str = DEFAULT_ALLOWED_METHODS
    kashier_display_language: str = "en"

    cashier_api_key: Optional[str] = None
    cashier_api_secret: Optional[str] = None
    cashier_api_endpoint: str = DEFAULT_CASHIER_API_ENDPOINT
    cashier_merchant_id: Optional[str] = None

    webhook_secret: Optional[str] = None
    signing_secret: Optional[str] = None
    encryption_key: Optional[str] = None

    @property
    def kashier_configured(self) -> bool:
        return bool(self.kashier_merchant_id and self.kashier_api_key)

    @property
    def cashier_api_configured(self) -> bool:
        return bool(self.cashier_api_key and self.cashier_api_secret)

    @property
    def effective_webhook_secret(self) -> Optional[str]:
        """The webhook secret, defaulting to the Cashier API secret."""
        return self.webhook_secret or self.cashier_api_secret

    def url(self, path: str) -> str:
        return f"{self.app_base_url.rstrip('/')}/{path.lstrip('/')}"


def load_payment_settings() -> PaymentSettings:
    """Read :class:`PaymentSettings` from environment variables (and ``.env``)."""
    load_dotenv_if_available()
    return PaymentSettings(
        app_base_url=env_str("APP_BASE_URL", DEFAULT_APP_BASE_URL) or DEFAULT_APP_BASE_URL,
        default_currency=(env_str("PAYMENT_DEFAULT_CURRENCY", DEFAULT_CURRENCY) or DEFAULT_CURRENCY).upper(),
        http_timeout=env_float("PAYMENT_HTTP_TIMEOUT", 10.0, minimum=0.1),
        kashier_merchant_id=env_str("KASHIER_MERCHANT_ID"),
        kashier_api_key=env_str("KASHIER_API_KEY"),
        kashier_payment_url=env_str("KASHIER_PAYMENT_URL", DEFAULT_KASHIER_PAYMENT_URL) or DEFAULT_KASHIER_PAYMENT_URL,
        kashier_mode=env_str("KASHIER_MODE", "test") or "test",
        kashier_allowed_methods=env_str("KASHIER_ALLOWED_METHODS", DEFAULT_ALLOWED_METHODS) or DEFAULT_ALLOWED_METHODS,
        kashier_display_language=env_str("KASHIER_DISPLAY_LANGUAGE", "en") or "en",
        cashier_api_key=env_str("CASHIER_API_KEY"),
        cashier_api_secret=env_str("CASHIER_API_SECRET"),
        cashier_api_endpoint=env_str("CASHIER_API_ENDPOINT", DEFAULT_CASHIER_API_ENDPOINT)
        or DEFAULT_CASHIER_API_ENDPOINT,
        cashier_merchant_id=env_str("CASHIER_MERCHANT_ID"),
        webhook_secret=env_str("CASHIER_WEBHOOK_SECRET"),
        signing_secret=env_str("PAYMENT_SIGNING_SECRET"),
        encryption_key=env_str("PAYMENT_ENCRYPTION_KEY"),
    )


__all__ = ["PaymentSettings", "load_payment_settings"]
