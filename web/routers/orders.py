"""Checkout order endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from schemas.api.orders import (
    OrderCreateRequest,
    OrderCreateResponse,
    OrderStatusUpdateRequest,
    OrderStatusUpdateResponse,
    OrderSummary,
)
from services import order_service
from web.deps import get_payment_settings

router = APIRouter(prefix="/orders", tags=["Orders"])

logger = logging.getLogger(__name__)


def _service_error(exc: order_service.OrderServiceError) -> HTTPException:
    if isinstance(exc, order_service.OrderValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, order_service.OrderNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=status_code, detail={"code": exc.code, "message": exc.message})


@router.post("", response_model=OrderCreateResponse, summary="Create a checkout order.")
async def create_order(payload: OrderCreateRequest, db: Session = Depends(get_db)) -> OrderCreateResponse:
    try:
        order = order_service.create_order(db, payload, default_currency=get_payment_settings().default_currency)
    except order_service.OrderServiceError as exc:
        logger.warning("Order creation rejected: %s", exc.message)
        raise _service_error(exc) from exc
    return OrderCreateResponse(
        success=True,
        order=OrderSummary(
            id=order.id,
            orderNumber=order.order_number,
            total=float(order.total),
            status=order.status,
            paymentStatus=order.payment_status,
        ),
    )


@router.get("/{order_id}", summary="Fetch an order with its items.")
async def read_order(order_id: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    order = order_service.get_order(db, order_id)
    if order is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "orders.not_found", "message": "Order not found."},
        )
    return order_service.serialize_order(order)


@router.patch("/{order_id}/status", response_model=OrderStatusUpdateResponse, summary="Change an order's status.")
async def update_order_status(
    order_id: str,
    payload: OrderStatusUpdateRequest,
    db: Session = Depends(get_db),
) -> OrderStatusUpdateResponse:
    try:
        order = order_service.update_order_status(db, order_id, payload.status)
    except order_service.OrderServiceError as exc:
        raise _service_error(exc) from exc
    return OrderStatusUpdateResponse(success=True, orderId=order.id, status=order.status)


__all__ = ["router"]
