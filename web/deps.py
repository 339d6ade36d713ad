"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from core.config import PaymentSettings, load_payment_settings
from services.payments.payment_service import PaymentService, build_payment_service


@lru_cache(maxsize=1)
def get_payment_settings() -> PaymentSettings:
    """Settings are read from the environment once per process."""
    return load_payment_settings()


@lru_cache(maxsize=1)
def _payment_service_for(settings: PaymentSettings) -> PaymentService:
    return build_payment_service(settings)


def get_payment_service(settings: PaymentSettings = Depends(get_payment_settings)) -> PaymentService:
    """Process-wide :class:`PaymentService`; override in tests via ``app.dependency_overrides``."""
    return _payment_service_for(settings)


__all__ = ["get_payment_service", "get_payment_settings"]
