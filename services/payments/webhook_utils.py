"""Shared helpers for reading gateway webhook payloads."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

EVENT_COMPLETED = "payment.completed"
EVENT_SUCCESS = "payment.success"
EVENT_FAILED = "payment.failed"
EVENT_REFUNDED = "payment.refunded"

COMPLETION_EVENTS = frozenset({EVENT_COMPLETED, EVENT_SUCCESS})


def event_data(event: Dict[str, Any]) -> Dict[str, Any]:
    data = event.get("data")
    return data if isinstance(data, dict) else {}


def _first_text(event: Dict[str, Any], *keys: str) -> Optional[str]:
    data = event_data(event)
    for key in keys:
        value = data.get(key)
        if value is None:
            value = event.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def resolve_event_type(event: Dict[str, Any]) -> Optional[str]:
    value = event.get("event_type") or event.get("eventType") or event.get("type")
    if isinstance(value, str) and value.strip():
        return value.strip().lower()
    return None


def resolve_transaction_id(event: Dict[str, Any]) -> Optional[str]:
    return _first_text(event, "transaction_id", "transactionId")


def resolve_order_id(event: Dict[str, Any]) -> Optional[str]:
    return _first_text(event, "order_id", "orderId")


def resolve_refund_amount(event: Dict[str, Any]) -> Optional[Decimal]:
    raw = _first_text(event, "refund_amount", "refundAmount", "amount")
    if raw is None:
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        return None


__all__ = [
    "COMPLETION_EVENTS",
    "EVENT_COMPLETED",
    "EVENT_FAILED",
    "EVENT_REFUNDED",
    "EVENT_SUCCESS",
    "event_data",
    "resolve_event_type",
    "resolve_order_id",
    "resolve_refund_amount",
    "resolve_transaction_id",
]
