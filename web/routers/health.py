"""Health-related API endpoints."""

from __future__ import annotations

from typing import Optional, Tuple

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from core.config import PaymentSettings
from web.deps import get_payment_settings

router = APIRouter(prefix="/health", tags=["Health"])


def ping_database() -> Tuple[bool, Optional[str]]:
    """Return database connectivity status and optional error message."""
    from database import SessionLocal

    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        return True, None
    except SQLAlchemyError as exc:
        return False, str(exc)
    finally:
        db.close()


@router.get(
    "/status",
    summary="Service runtime status",
    description="Database connectivity plus which payment gateways are configured.",
)
def read_service_status(settings: PaymentSettings = Depends(get_payment_settings)):
    db_ok, db_error = ping_database()
    status = "ok" if db_ok else "degraded"
    payload = {
        "status": status,
        "database": {"ok": db_ok},
        "gateways": {
            "kashier": settings.kashier_configured,
            "cashier_api": settings.cashier_api_configured,
            "webhook_secret": bool(settings.effective_webhook_secret),
        },
    }
    if db_error:
        payload["database"]["error"] = db_error
    return payload


__all__ = ["router", "ping_database"]
