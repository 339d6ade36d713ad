"""Payment transaction lifecycle.

``pending`` is the initial state of every transaction. Gateways usually report
the final outcome directly, so ``pending`` may jump straight to a terminal
state without passing through ``processing``. ``completed -> refunded`` is the
only move out of a terminal state. Re-applying the current status is accepted
so that webhook retries converge on the same row state.
"""

from __future__ import annotations

from typing import Dict, FrozenSet

from services.payments.errors import TransitionError

STATUS_PENDING = "pending"
STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
STATUS_CANCELLED = "cancelled"
STATUS_REFUNDED = "refunded"

TRANSACTION_STATUSES = (
    STATUS_PENDING,
    STATUS_PROCESSING,
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_CANCELLED,
    STATUS_REFUNDED,
)
TERMINAL_STATUSES: FrozenSet[str] = frozenset({STATUS_COMPLETED, STATUS_FAILED, STATUS_CANCELLED, STATUS_REFUNDED})

_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    STATUS_PENDING: frozenset({STATUS_PROCESSING, STATUS_COMPLETED, STATUS_FAILED, STATUS_CANCELLED}),
    STATUS_PROCESSING: frozenset({STATUS_COMPLETED, STATUS_FAILED, STATUS_CANCELLED}),
    STATUS_COMPLETED: frozenset({STATUS_REFUNDED}),
    STATUS_FAILED: frozenset(),
    STATUS_CANCELLED: frozenset(),
    STATUS_REFUNDED: frozenset(),
}


def normalize_status(value: object) -> str:
    text = str(value or "").strip().lower()
    if text not in _TRANSITIONS:
        raise ValueError(f"Unknown payment status: {value!r}")
    return text


def can_transition(current: str, target: str) -> bool:
    if current == target:
        return True
    return target in _TRANSITIONS.get(current, frozenset())


def ensure_transition(current: str, target: str) -> None:
    """Raise :class:`TransitionError` when ``current -> target`` is not allowed."""
    if not can_transition(current, target):
        raise TransitionError(current, target)


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


__all__ = [
    "STATUS_CANCELLED",
    "STATUS_COMPLETED",
    "STATUS_FAILED",
    "STATUS_PENDING",
    "STATUS_PROCESSING",
    "STATUS_REFUNDED",
    "TERMINAL_STATUSES",
    "TRANSACTION_STATUSES",
    "can_transition",
    "ensure_transition",
    "is_terminal",
    "normalize_status",
]
