import os
from decimal import Decimal
from typing import Any, Callable, Generator

import pytest

os.environ.setdefault("TEST_DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("DATABASE_URL", os.environ["TEST_DATABASE_URL"])

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import database as database_module
from core.config import PaymentSettings
from database import Base
from models.orders import Order
from services.payments.crypto import PaymentCrypto
from services.payments.payment_service import PaymentService
from services.payments.payment_store import PaymentStore

WEBHOOK_SECRET = "whsec_test_secret"


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    # Ensure all model metadata is registered before creating tables.
    import models  # noqa: F401

    test_engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)

    factory = sessionmaker(bind=test_engine, autoflush=False, expire_on_commit=False)
    original_session_local = database_module.SessionLocal
    original_engine = database_module.engine
    database_module.SessionLocal = factory
    database_module.engine = test_engine
    try:
        yield test_engine
    finally:
        database_module.SessionLocal = original_session_local
        database_module.engine = original_engine
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker:
    return database_module.SessionLocal


@pytest.fixture()
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def payment_settings() -> PaymentSettings:
    return PaymentSettings(
        app_base_url="https://shop.example",
        kashier_merchant_id="MID-1234",
        kashier_api_key="kashier_test_key",
        webhook_secret=WEBHOOK_SECRET,
        signing_secret="signing_test_secret",
        encryption_key=PaymentCrypto.generate_key(),
    )


@pytest.fixture()
def payment_store(session_factory: sessionmaker) -> PaymentStore:
    return PaymentStore(session_factory)


@pytest.fixture()
def payment_service(payment_settings: PaymentSettings, payment_store: PaymentStore) -> PaymentService:
    return PaymentService(payment_settings, store=payment_store)


@pytest.fixture()
def order_factory(session_factory: sessionmaker) -> Callable[..., str]:
    """Insert an order row and return its id."""

    def _create(**overrides: Any) -> str:
        values = {
            "order_number": f"ORD-TEST-{len(overrides)}-{os.urandom(3).hex()}",
            "customer_email": "a@b.com",
            "customer_name": "Test",
            "subtotal": Decimal("450.00"),
            "shipping_cost": Decimal("50.00"),
            "total": Decimal("500.00"),
            "currency": "EGP",
            "payment_method": "cashier",
            "status": "pending",
            "payment_status": "pending",
            "shipping_address_line1": "1 Nile St",
            "shipping_city": "Cairo",
            "shipping_country": "EG",
        }
        values.update(overrides)
        session = session_factory()
        try:
            order = Order(**values)
            session.add(order)
            session.commit()
            return order.id
        finally:
            session.close()

    return _create
