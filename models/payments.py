from __future__ import annotations

import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, Numeric, String, Text, func

from database import Base


def _uuid_str() -> str:
    return str(uuid.uuid4())


class PaymentMethod(Base):
    """Configured payment methods (``cashier``, ``cod``, ``bank_transfer``)."""

    __tablename__ = "payment_methods"

    id = Column(String(36), primary_key=True, default=_uuid_str)
    code = Column(String(32), nullable=False, unique=True, index=True)
    name = Column(String(128), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PaymentTransaction(Base):
    """One attempt to collect payment for an order."""

    __tablename__ = "payment_transactions"

    id = Column(String(36), primary_key=True, default=_uuid_str)
    # orders live in the checkout store, so no enforced foreign key here
    order_id = Column(String(64), nullable=False, index=True)
    payment_method_id = Column(String(64), nullable=True)
    transaction_id = Column(String(128), nullable=False, unique=True, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(8), nullable=False, default="EGP")
    status = Column(String(16), nullable=False, default="pending", index=True)
    encrypted_data = Column(Text, nullable=True)
    signature = Column(String(128), nullable=True)
    gateway_response = Column(JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    initiated_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    failed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)


class PaymentLog(Base):
    """Append-only audit events for a payment transaction."""

    __tablename__ = "payment_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(String(128), nullable=False, index=True)
    event_type = Column(String(64), nullable=False, index=True)
    message = Column(Text, nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)


class PaymentWebhook(Base):
    """Raw record of each inbound gateway webhook delivery."""

    __tablename__ = "payment_webhooks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source = Column(String(32), nullable=False, default="cashier")
    event_type = Column(String(64), nullable=True, index=True)
    transaction_id = Column(String(128), nullable=True, index=True)
    payload = Column(JSON, nullable=True)
    signature = Column(String(256), nullable=True)
    signature_verified = Column(Boolean, nullable=False, default=False)
    ip_address = Column(String(64), nullable=True)
    status = Column(String(16), nullable=False, default="processing")
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)


class PaymentRefund(Base):
    __tablename__ = "payment_refunds"

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(String(128), nullable=False, index=True)
    refund_amount = Column(Numeric(12, 2), nullable=True)
    reason = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="completed")
    gateway_reference = Column(String(128), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
