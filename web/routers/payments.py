"""Payment API endpoints: session creation, gateway webhooks and admin status changes."""

from __future__ import annotations

import logging
from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from schemas.api.payments import (
    KashierPaymentRequest,
    PaymentCreateRequest,
    PaymentRefundRequest,
    PaymentRefundResponse,
    PaymentResultResponse,
    PaymentStatusUpdateRequest,
    PaymentStatusUpdateResponse,
    PaymentSyncResponse,
    PaymentTransactionResponse,
    WebhookAckResponse,
)
from services.payments.errors import (
    GatewayError,
    PaymentError,
    TransactionNotFoundError,
    TransitionError,
    ValidationError,
)
from services.payments.payment_service import CreatePaymentParams, PaymentService
from web.deps import get_payment_service

router = APIRouter(prefix="/payments", tags=["Payments"])

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-cashier-signature"
TIMESTAMP_HEADER = "x-cashier-timestamp"


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None


def _error_status(exc: PaymentError) -> int:
    if isinstance(exc, TransactionNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, TransitionError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, GatewayError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _raise_payment_error(exc: PaymentError) -> NoReturn:
    raise HTTPException(status_code=_error_status(exc), detail=exc.to_detail()) from exc


def _transaction_response(record: Dict[str, Any]) -> PaymentTransactionResponse:
    return PaymentTransactionResponse(
        id=record["id"],
        orderId=record["order_id"],
        transactionId=record["transaction_id"],
        amount=record.get("amount"),
        currency=record["currency"],
        status=record["status"],
        paymentMethod=record.get("payment_method"),
        order=record.get("order"),
        gatewayResponse=record.get("gateway_response"),
        initiatedAt=record.get("initiated_at"),
        completedAt=record.get("completed_at"),
        failedAt=record.get("failed_at"),
        updatedAt=record.get("updated_at"),
    )


@router.post("", response_model=PaymentResultResponse, response_model_exclude_none=True, summary="Create a payment.")
async def create_payment(
    payload: PaymentCreateRequest,
    request: Request,
    service: PaymentService = Depends(get_payment_service),
) -> JSONResponse:
    result = await service.create_payment(
        CreatePaymentParams(
            order_id=payload.orderId,
            amount=payload.amount,
            payment_method=payload.paymentMethod,
            currency=payload.currency,
            customer_email=payload.customerEmail,
            customer_name=payload.customerName,
            customer_phone=payload.customerPhone,
            ip_address=_client_ip(request),
            user_agent=request.headers.get("user-agent"),
            metadata=payload.metadata,
        )
    )
    status_code = status.HTTP_200_OK if result.success else status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=status_code, content=result.to_dict())


@router.post(
    "/kashier",
    response_model=PaymentResultResponse,
    response_model_exclude_none=True,
    summary="Build a signed Kashier hosted-checkout URL.",
)
async def create_kashier_payment(
    payload: KashierPaymentRequest,
    request: Request,
    service: PaymentService = Depends(get_payment_service),
) -> Dict[str, Any]:
    params = CreatePaymentParams(
        order_id=payload.orderId,
        amount=payload.amount,
        payment_method="cashier",
        currency=payload.currency,
        customer_email=payload.customerEmail,
        customer_name=payload.customerName,
        customer_phone=payload.customerPhone,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    try:
        result = await service.initiate_kashier_payment(params, use_api_client=False)
    except PaymentError as exc:
        logger.warning("Kashier checkout rejected for orderId=%s: %s", payload.orderId, exc.message)
        _raise_payment_error(exc)
    return result.to_dict()


@router.post(
    "/webhook",
    response_model=WebhookAckResponse,
    summary="Receive a signed payment gateway webhook.",
)
async def handle_payment_webhook(
    request: Request,
    service: PaymentService = Depends(get_payment_service),
) -> JSONResponse:
    raw_body = await request.body()
    result = service.handle_webhook(
        None,
        raw_body,
        request.headers.get(SIGNATURE_HEADER),
        request.headers.get(TIMESTAMP_HEADER),
        ip_address=_client_ip(request),
    )
    return JSONResponse(status_code=result.status_code, content={"ok": result.ok, "message": result.message})


@router.get(
    "/transactions/{transaction_id}",
    response_model=PaymentTransactionResponse,
    summary="Look up a payment transaction with its method and order.",
)
async def read_transaction(
    transaction_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> PaymentTransactionResponse:
    record = service.get_transaction(transaction_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "payments.transaction_not_found", "message": "Transaction not found."},
        )
    return _transaction_response(record)


@router.patch(
    "/transactions/{transaction_id}/status",
    response_model=PaymentStatusUpdateResponse,
    summary="Manually change a transaction status.",
)
async def update_transaction_status(
    transaction_id: str,
    payload: PaymentStatusUpdateRequest,
    service: PaymentService = Depends(get_payment_service),
) -> PaymentStatusUpdateResponse:
    if not service.update_payment_status(transaction_id, payload.status, payload.details):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "payments.status_update_failed",
                "message": f"Could not move transaction {transaction_id} to {payload.status}.",
            },
        )
    return PaymentStatusUpdateResponse(success=True, transactionId=transaction_id, status=payload.status)


@router.post(
    "/transactions/{transaction_id}/refund",
    response_model=PaymentRefundResponse,
    summary="Refund a completed transaction.",
)
async def refund_transaction(
    transaction_id: str,
    payload: PaymentRefundRequest,
    service: PaymentService = Depends(get_payment_service),
) -> PaymentRefundResponse:
    try:
        refund = await service.refund_payment(transaction_id, amount=payload.amount, reason=payload.reason)
    except PaymentError as exc:
        logger.warning("Refund failed for %s: %s", transaction_id, exc.message)
        _raise_payment_error(exc)
    return PaymentRefundResponse(
        transactionId=refund["transaction_id"],
        refundId=refund["refund_id"],
        refundAmount=refund["refund_amount"],
        gatewayReference=refund["gateway_reference"],
        status=refund["status"],
    )


@router.post(
    "/transactions/{transaction_id}/sync",
    response_model=PaymentSyncResponse,
    summary="Reconcile a transaction with the gateway's reported status.",
)
async def sync_transaction(
    transaction_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> PaymentSyncResponse:
    try:
        outcome = await service.sync_payment_status(transaction_id)
    except PaymentError as exc:
        logger.warning("Status sync failed for %s: %s", transaction_id, exc.message)
        _raise_payment_error(exc)
    return PaymentSyncResponse(
        transactionId=outcome["transaction_id"],
        previousStatus=outcome["previous_status"],
        status=outcome["status"],
        remoteStatus=outcome["remote_status"],
        changed=outcome["changed"],
    )


__all__ = ["router"]
