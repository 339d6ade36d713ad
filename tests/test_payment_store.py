from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from models.orders import Order
from models.payments import PaymentLog, PaymentMethod, PaymentWebhook
from services.payments.errors import PersistenceError
from services.payments.payment_store import PaymentStore, utcnow


def _broken_factory():
    raise OperationalError("SELECT 1", {}, Exception("database is down"))


def _insert(store: PaymentStore, **overrides):
    values = {
        "order_id": "ORD1",
        "transaction_id": "cod_0123456789abcdef",
        "amount": Decimal("500.00"),
        "currency": "EGP",
        "status": "pending",
        "initiated_at": utcnow(),
    }
    values.update(overrides)
    return store.insert_transaction(**values)


def test_find_transaction_by_gateway_id_or_row_id(payment_store: PaymentStore):
    created = _insert(payment_store)

    by_reference = payment_store.find_transaction("cod_0123456789abcdef")
    by_row_id = payment_store.find_transaction(created["id"])

    assert by_reference["id"] == created["id"]
    assert by_row_id["transaction_id"] == "cod_0123456789abcdef"
    assert by_reference["amount"] == 500.0
    assert payment_store.find_transaction("missing") is None


def test_update_transaction_sets_fields_and_updated_at(payment_store: PaymentStore):
    _insert(payment_store)

    updated = payment_store.update_transaction("cod_0123456789abcdef", status="processing")

    assert updated["status"] == "processing"
    assert updated["updated_at"] is not None
    assert payment_store.update_transaction("missing", status="failed") is None


def test_find_payment_method_ignores_inactive_rows(payment_store: PaymentStore, session_factory):
    session = session_factory()
    session.add_all(
        [
            PaymentMethod(code="cod", name="Cash on delivery", is_active=True),
            PaymentMethod(code="bank_transfer", name="Bank transfer", is_active=False),
        ]
    )
    session.commit()
    session.close()

    assert payment_store.find_payment_method("cod")["name"] == "Cash on delivery"
    assert payment_store.find_payment_method("bank_transfer") is None


def test_get_transaction_details_joins_method_and_order(payment_store: PaymentStore, order_factory, session_factory):
    session = session_factory()
    method = PaymentMethod(code="cashier", name="Card", is_active=True)
    session.add(method)
    session.commit()
    method_id = method.id
    session.close()
    order_id = order_factory()
    _insert(payment_store, order_id=order_id, payment_method_id=method_id)

    details = payment_store.get_transaction_details("cod_0123456789abcdef")

    assert details["payment_method"]["code"] == "cashier"
    assert details["order"]["id"] == order_id
    assert details["order"]["total"] == 500.0


def test_update_order_reports_missing_rows(payment_store: PaymentStore, order_factory, session_factory):
    order_id = order_factory()

    assert payment_store.update_order(order_id, payment_status="paid") is True
    assert payment_store.update_order("does-not-exist", payment_status="paid") is False

    session = session_factory()
    assert session.get(Order, order_id).payment_status == "paid"
    session.close()


def test_append_log_returns_store_result(payment_store: PaymentStore, session_factory):
    result = payment_store.append_log("txn_1", "initiated", "created", {"source": "test"})

    assert result.ok
    assert result.error is None
    session = session_factory()
    rows = session.execute(select(PaymentLog)).scalars().all()
    session.close()
    assert [(row.transaction_id, row.event_type, row.details) for row in rows] == [
        ("txn_1", "initiated", {"source": "test"})
    ]


def test_append_log_failure_is_reported_not_raised():
    store = PaymentStore(_broken_factory)

    result = store.append_log("txn_1", "initiated", "created")

    assert result.ok is False
    assert "append payment log" in result.error


def test_other_writes_raise_persistence_error():
    store = PaymentStore(_broken_factory)

    with pytest.raises(PersistenceError):
        _insert(store)
    with pytest.raises(PersistenceError):
        store.find_transaction("txn_1")


def test_webhook_rows_are_finalised(payment_store: PaymentStore, session_factory):
    webhook_id = payment_store.insert_webhook(
        source="cashier",
        event_type="payment.completed",
        transaction_id="txn_1",
        payload={"event_type": "payment.completed"},
        signature="abc",
        signature_verified=True,
        ip_address="203.0.113.5",
    )

    payment_store.update_webhook_status(webhook_id, "failed", error="boom")
    payment_store.update_webhook_status(webhook_id + 100, "processed")

    session = session_factory()
    row = session.get(PaymentWebhook, webhook_id)
    session.close()
    assert (row.status, row.error, row.signature_verified) == ("failed", "boom", True)
