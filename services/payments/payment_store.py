"""SQLAlchemy-backed store for orders, payment transactions and their audit rows.

Every call opens its own session and commits before returning; database
errors are re-raised as :class:`PersistenceError` after a rollback. There is
no row locking or version column, so concurrent writers resolve as
last-write-wins.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Iterator, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.orders import Order
from models.payments import PaymentLog, PaymentMethod, PaymentRefund, PaymentTransaction, PaymentWebhook
from services.order_service import serialize_order
from services.payments.errors import PersistenceError

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


@dataclass(frozen=True, slots=True)
class StoreResult:
    """Outcome of a best-effort write; ``ok=False`` carries the error text instead of raising."""

    ok: bool
    record_id: Optional[Any] = None
    error: Optional[str] = None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _number(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def transaction_to_dict(row: PaymentTransaction) -> Dict[str, Any]:
    return {
        "id": row.id,
        "order_id": row.order_id,
        "payment_method_id": row.payment_method_id,
        "transaction_id": row.transaction_id,
        "amount": _number(row.amount),
        "currency": row.currency,
        "status": row.status,
        "encrypted_data": row.encrypted_data,
        "signature": row.signature,
        "gateway_response": row.gateway_response,
        "ip_address": row.ip_address,
        "user_agent": row.user_agent,
        "initiated_at": _iso(row.initiated_at),
        "completed_at": _iso(row.completed_at),
        "failed_at": _iso(row.failed_at),
        "updated_at": _iso(row.updated_at),
    }


def _method_to_dict(row: PaymentMethod) -> Dict[str, Any]:
    return {"id": row.id, "code": row.code, "name": row.name, "is_active": row.is_active}


class PaymentStore:
    """Read/write access to the payment tables."""

    def __init__(self, session_factory: Optional[SessionFactory] = None) -> None:
        self._session_factory = session_factory

    def _new_session(self) -> Session:
        if self._session_factory is not None:
            return self._session_factory()
        from database import SessionLocal

        return SessionLocal()

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        try:
            session = self._new_session()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Database unavailable while trying to {action}: {exc}") from exc
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Payment store failed to %s: %s", action, exc)
            raise PersistenceError(f"Failed to {action}") from exc
        finally:
            session.close()

    # -- payment methods -------------------------------------------------

    def find_payment_method(self, code: str) -> Optional[Dict[str, Any]]:
        with self._session("load payment method") as session:
            row = session.execute(
                select(PaymentMethod).where(PaymentMethod.code == code, PaymentMethod.is_active.is_(True))
            ).scalar_one_or_none()
            return _method_to_dict(row) if row else None

    # -- transactions ----------------------------------------------------

    @staticmethod
    def _lookup_transaction(session: Session, reference: str) -> Optional[PaymentTransaction]:
        row = session.execute(
            select(PaymentTransaction).where(PaymentTransaction.transaction_id == reference)
        ).scalar_one_or_none()
        if row is None:
            row = session.get(PaymentTransaction, reference)
        return row

    def insert_transaction(self, **fields: Any) -> Dict[str, Any]:
        with self._session("create payment transaction") as session:
            row = PaymentTransaction(**fields)
            session.add(row)
            session.flush()
            return transaction_to_dict(row)

    def find_transaction(self, reference: str) -> Optional[Dict[str, Any]]:
        """Find a transaction by gateway ``transaction_id`` or by row id."""
        with self._session("load payment transaction") as session:
            row = self._lookup_transaction(session, reference)
            return transaction_to_dict(row) if row else None

    def update_transaction(self, reference: str, **changes: Any) -> Optional[Dict[str, Any]]:
        with self._session("update payment transaction") as session:
            row = self._lookup_transaction(session, reference)
            if row is None:
                return None
            for key, value in changes.items():
                setattr(row, key, value)
            row.updated_at = changes.get("updated_at") or utcnow()
            session.flush()
            return transaction_to_dict(row)

    def get_transaction_details(self, reference: str) -> Optional[Dict[str, Any]]:
        """Transaction joined with its payment method and order."""
        with self._session("load payment transaction details") as session:
            row = self._lookup_transaction(session, reference)
            if row is None:
                return None
            payload = transaction_to_dict(row)
            method = session.get(PaymentMethod, row.payment_method_id) if row.payment_method_id else None
            payload["payment_method"] = _method_to_dict(method) if method else None
            order = self._lookup_order(session, row.order_id)
            payload["order"] = serialize_order(order) if order else None
            return payload

    # -- orders ----------------------------------------------------------

    @staticmethod
    def _lookup_order(session: Session, order_id: str) -> Optional[Order]:
        row = session.get(Order, order_id)
        if row is None:
            row = session.execute(select(Order).where(Order.order_number == order_id)).scalar_one_or_none()
        return row

    def update_order(self, order_id: str, **changes: Any) -> bool:
        """Apply ``changes`` to the order; returns False when no order matches."""
        with self._session("update order") as session:
            row = self._lookup_order(session, order_id)
            if row is None:
                return False
            for key, value in changes.items():
                setattr(row, key, value)
            row.updated_at = utcnow()
            return True

    # -- audit rows ------------------------------------------------------

    def append_log(
        self,
        transaction_id: str,
        event_type: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> StoreResult:
        try:
            with self._session("append payment log") as session:
                row = PaymentLog(
                    transaction_id=transaction_id,
                    event_type=event_type,
                    message=message,
                    details=details or {},
                )
                session.add(row)
                session.flush()
                return StoreResult(ok=True, record_id=row.id)
        except PersistenceError as exc:
            return StoreResult(ok=False, error=str(exc))

    def insert_webhook(
        self,
        *,
        source: str,
        event_type: Optional[str],
        transaction_id: Optional[str],
        payload: Dict[str, Any],
        signature: Optional[str],
        signature_verified: bool,
        ip_address: Optional[str],
        status: str = "processing",
    ) -> int:
        with self._session("record payment webhook") as session:
            row = PaymentWebhook(
                source=source,
                event_type=event_type,
                transaction_id=transaction_id,
                payload=payload,
                signature=signature,
                signature_verified=signature_verified,
                ip_address=ip_address,
                status=status,
            )
            session.add(row)
            session.flush()
            return row.id

    def update_webhook_status(self, webhook_id: int, status: str, *, error: Optional[str] = None) -> None:
        with self._session("update payment webhook") as session:
            row = session.get(PaymentWebhook, webhook_id)
            if row is None:
                return
            row.status = status
            row.error = error

    def insert_refund(
        self,
        *,
        transaction_id: str,
        refund_amount: Optional[Decimal],
        reason: Optional[str] = None,
        gateway_reference: Optional[str] = None,
        status: str = "completed",
    ) -> int:
        with self._session("record payment refund") as session:
            row = PaymentRefund(
                transaction_id=transaction_id,
                refund_amount=refund_amount,
                reason=reason,
                gateway_reference=gateway_reference,
                status=status,
                completed_at=utcnow() if status == "completed" else None,
            )
            session.add(row)
            session.flush()
            return row.id


__all__ = ["PaymentStore", "SessionFactory", "StoreResult", "transaction_to_dict", "utcnow"]
