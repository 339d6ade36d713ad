"""Payment API schemas."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field

PaymentMethodCode = Literal["cashier", "cod", "bank_transfer"]
TransactionStatus = Literal["pending", "processing", "completed", "failed", "cancelled", "refunded"]


class PaymentCreateRequest(BaseModel):
    orderId: str = Field(default="", description="Order the payment is collected for.")
    amount: Optional[Union[float, str]] = Field(default=None, description="Amount to charge; must be positive.")
    paymentMethod: str = Field(default="", description="One of cashier, cod or bank_transfer.")
    currency: Optional[str] = Field(default=None, description="Currency code (defaults to the configured currency).")
    customerEmail: Optional[str] = None
    customerName: Optional[str] = None
    customerPhone: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Opaque metadata forwarded to the gateway.")


class KashierPaymentRequest(BaseModel):
    orderId: str = Field(..., description="Order the payment is collected for.")
    amount: Union[float, str] = Field(..., description="Amount to charge; must be positive.")
    currency: Optional[str] = None
    customerEmail: Optional[str] = None
    customerName: Optional[str] = None
    customerPhone: Optional[str] = None


class PaymentResultResponse(BaseModel):
    success: bool
    transactionId: Optional[str] = None
    paymentUrl: Optional[str] = Field(default=None, description="Gateway redirect URL for hosted checkout.")
    checkoutUrl: Optional[str] = None
    url: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None


class WebhookAckResponse(BaseModel):
    ok: bool
    message: str


class PaymentStatusUpdateRequest(BaseModel):
    status: TransactionStatus = Field(..., description="Target transaction status.")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Stored as the latest gateway response.")


class PaymentStatusUpdateResponse(BaseModel):
    success: bool
    transactionId: str
    status: str


class PaymentRefundRequest(BaseModel):
    amount: Optional[Union[float, str]] = Field(
        default=None,
        description="Amount to refund; defaults to the full captured amount.",
    )
    reason: Optional[str] = None


class PaymentRefundResponse(BaseModel):
    transactionId: str
    refundId: Optional[int] = Field(default=None, description="Local refund row id; empty when the row could not be saved.")
    refundAmount: float
    gatewayReference: Optional[str] = None
    status: str


class PaymentSyncResponse(BaseModel):
    transactionId: str
    previousStatus: str
    status: str
    remoteStatus: Optional[str] = None
    changed: bool


class PaymentTransactionResponse(BaseModel):
    id: str
    orderId: str
    transactionId: str
    amount: Optional[float] = None
    currency: str
    status: str
    paymentMethod: Optional[Dict[str, Any]] = None
    order: Optional[Dict[str, Any]] = None
    gatewayResponse: Optional[Dict[str, Any]] = None
    initiatedAt: Optional[str] = None
    completedAt: Optional[str] = None
    failedAt: Optional[str] = None
    updatedAt: Optional[str] = None
