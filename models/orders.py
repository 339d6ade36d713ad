from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from database import Base

ORDER_STATUSES = ("pending", "confirmed", "processing", "shipped", "delivered", "cancelled", "refunded")
ORDER_PAYMENT_STATUSES = ("pending", "paid", "failed")


class Order(Base):
    """A customer purchase intent created at checkout."""

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_number = Column(String(64), nullable=False, unique=True, index=True)

    customer_email = Column(String(255), nullable=False, index=True)
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(32), nullable=True)

    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    shipping_cost = Column(Numeric(12, 2), nullable=False, default=0)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(8), nullable=False, default="EGP")

    payment_method = Column(String(32), nullable=True)
    status = Column(String(16), nullable=False, default="pending", index=True)
    payment_status = Column(String(16), nullable=False, default="pending", index=True)

    shipping_address_line1 = Column(String(255), nullable=False)
    shipping_address_line2 = Column(String(255), nullable=True)
    shipping_city = Column(String(128), nullable=False)
    shipping_state = Column(String(128), nullable=True)
    shipping_postal_code = Column(String(32), nullable=True)
    shipping_country = Column(String(8), nullable=False, default="EG")

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", lazy="selectin")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(String(64), nullable=True)
    variant_id = Column(String(64), nullable=True)
    product_name = Column(String(255), nullable=False, default="")
    variant_name = Column(String(255), nullable=True)
    sku = Column(String(64), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(12, 2), nullable=False, default=0)
    total_price = Column(Numeric(12, 2), nullable=False, default=0)

    order = relationship("Order", back_populates="items")
