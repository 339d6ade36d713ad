"""Checkout order creation and admin status updates."""

from __future__ import annotations

import logging
import secrets
import string
import time
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.orders import ORDER_STATUSES, Order, OrderItem
from schemas.api.orders import OrderCreateRequest

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = "cash_on_delivery"
DEFAULT_COUNTRY = "EG"
DEFAULT_CURRENCY = "EGP"

_ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
_CENTS = Decimal("0.01")


class OrderServiceError(RuntimeError):
    code = "orders.error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class OrderValidationError(OrderServiceError):
    code = "orders.invalid_request"

    def __init__(self, missing: List[str]) -> None:
        super().__init__(f"Missing required fields: {', '.join(missing)}")
        self.missing = missing


class OrderNotFoundError(OrderServiceError):
    code = "orders.not_found"


def _to_decimal(value: Any, fallback: Decimal) -> Decimal:
    if value is None or isinstance(value, bool):
        return fallback
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return fallback
    return number if number.is_finite() else fallback


def _non_empty(value: Any, fallback: Optional[str] = None) -> Optional[str]:
    if value is None:
        return fallback
    text = str(value).strip()
    return text or fallback


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _number(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def serialize_order(row: Order) -> Dict[str, Any]:
    return {
        "id": row.id,
        "order_number": row.order_number,
        "customer_email": row.customer_email,
        "customer_name": row.customer_name,
        "customer_phone": row.customer_phone,
        "subtotal": _number(row.subtotal),
        "shipping_cost": _number(row.shipping_cost),
        "tax": _number(row.tax),
        "discount": _number(row.discount),
        "total": _number(row.total),
        "currency": row.currency,
        "payment_method": row.payment_method,
        "status": row.status,
        "payment_status": row.payment_status,
        "shipping_address": {
            "line1": row.shipping_address_line1,
            "line2": row.shipping_address_line2,
            "city": row.shipping_city,
            "state": row.shipping_state,
            "postal_code": row.shipping_postal_code,
            "country": row.shipping_country,
        },
        "items": [
            {
                "product_id": item.product_id,
                "variant_id": item.variant_id,
                "product_name": item.product_name,
                "variant_name": item.variant_name,
                "sku": item.sku,
                "quantity": item.quantity,
                "unit_price": _number(item.unit_price),
                "total_price": _number(item.total_price),
            }
            for item in row.items
        ],
        "notes": row.notes,
        "created_at": _iso(row.created_at),
        "updated_at": _iso(row.updated_at),
    }


def generate_order_number() -> str:
    suffix = "".join(secrets.choice(_ORDER_SUFFIX_ALPHABET) for _ in range(7))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


def _build_items(payload: OrderCreateRequest) -> List[OrderItem]:
    items: List[OrderItem] = []
    for entry in payload.items:
        quantity = int(_to_decimal(entry.quantity, Decimal(1)))
        if quantity <= 0:
            continue
        unit_price = _to_decimal(entry.unitPrice, Decimal(0))
        line_total = _to_decimal(entry.totalPrice, unit_price * quantity)
        items.append(
            OrderItem(
                product_id=_non_empty(entry.productId),
                variant_id=_non_empty(entry.variantId),
                product_name=_non_empty(entry.productName, ""),
                variant_name=_non_empty(entry.variantName),
                sku=_non_empty(entry.sku),
                quantity=quantity,
                unit_price=unit_price.quantize(_CENTS),
                total_price=line_total.quantize(_CENTS),
            )
        )
    return items


def create_order(db: Session, payload: OrderCreateRequest, *, default_currency: str = DEFAULT_CURRENCY) -> Order:
    """Validate a checkout payload, compute totals and insert the order with its items.

    The subtotal falls back to the sum of line totals and the total to
    ``subtotal + shipping + tax - discount`` when the client omits them.
    """
    items = _build_items(payload)
    subtotal_from_items = sum((item.total_price for item in items), Decimal(0))

    subtotal = _to_decimal(payload.subtotal, subtotal_from_items)
    shipping_cost = _to_decimal(payload.shippingCost, Decimal(0))
    tax = _to_decimal(payload.tax, Decimal(0))
    discount = _to_decimal(payload.discount, Decimal(0))
    total = _to_decimal(payload.total, subtotal + shipping_cost + tax - discount)

    address = payload.shippingAddress
    customer_email = _non_empty(payload.customerEmail)
    customer_name = _non_empty(payload.customerName)
    line1 = _non_empty(address.line1)
    city = _non_empty(address.city)

    missing: List[str] = []
    if not customer_email:
        missing.append("customerEmail")
    if not customer_name:
        missing.append("customerName")
    if not payload.items:
        missing.append("items")
    if not line1:
        missing.append("shippingAddress.line1")
    if not city:
        missing.append("shippingAddress.city")
    if not total > 0:
        missing.append("total (> 0)")
    if missing:
        raise OrderValidationError(missing)

    order = Order(
        order_number=generate_order_number(),
        customer_email=customer_email,
        customer_name=customer_name,
        customer_phone=_non_empty(payload.customerPhone),
        subtotal=subtotal.quantize(_CENTS),
        shipping_cost=shipping_cost.quantize(_CENTS),
        tax=tax.quantize(_CENTS),
        discount=discount.quantize(_CENTS),
        total=total.quantize(_CENTS),
        currency=(_non_empty(payload.currency, default_currency) or default_currency).upper(),
        payment_method=_non_empty(payload.paymentMethod, DEFAULT_PAYMENT_METHOD),
        status="pending",
        payment_status="pending",
        shipping_address_line1=line1,
        shipping_address_line2=_non_empty(address.line2),
        shipping_city=city,
        shipping_state=_non_empty(address.state),
        shipping_postal_code=_non_empty(address.postalCode),
        shipping_country=_non_empty(address.country, DEFAULT_COUNTRY),
        notes=_non_empty(payload.notes),
    )
    order.items = items

    try:
        db.add(order)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Order insert failed: %s", exc)
        raise OrderServiceError("Order insert failed") from exc
    db.refresh(order)
    logger.info("Order created orderNumber=%s items=%d", order.order_number, len(items))
    return order


def get_order(db: Session, order_id: str) -> Optional[Order]:
    """Look up an order by id or order number."""
    order = db.get(Order, order_id)
    if order is None:
        order = db.execute(select(Order).where(Order.order_number == order_id)).scalar_one_or_none()
    return order


def update_order_status(db: Session, order_id: str, status: str) -> Order:
    normalized = (status or "").strip().lower()
    if normalized not in ORDER_STATUSES:
        raise OrderValidationError(["status"])
    order = get_order(db, order_id)
    if order is None:
        raise OrderNotFoundError(f"Order {order_id} not found")
    order.status = normalized
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Order status update failed for %s: %s", order_id, exc)
        raise OrderServiceError("Order status update failed") from exc
    db.refresh(order)
    logger.info("Order %s status set to %s", order.order_number, normalized)
    return order


__all__ = [
    "OrderNotFoundError",
    "OrderServiceError",
    "OrderValidationError",
    "create_order",
    "generate_order_number",
    "serialize_order",
    "get_order",
    "update_order_status",
]
