"""Order API schemas."""

from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

OrderStatus = Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled", "refunded"]
Number = Union[int, float, str]


class OrderItemInput(BaseModel):
    productId: Optional[Union[str, int]] = Field(default=None, description="Catalog product identifier.")
    variantId: Optional[Union[str, int]] = Field(default=None, description="Catalog variant identifier.")
    productName: Optional[str] = Field(default=None, description="Product name captured at checkout.")
    variantName: Optional[str] = None
    sku: Optional[str] = None
    quantity: Optional[Number] = Field(default=None, description="Quantity ordered (defaults to 1).")
    unitPrice: Optional[Number] = Field(default=None, description="Unit price at checkout.")
    totalPrice: Optional[Number] = Field(
        default=None,
        description="Line total; computed as unitPrice * quantity when omitted.",
    )


class ShippingAddressInput(BaseModel):
    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postalCode: Optional[str] = None
    country: Optional[str] = Field(default=None, description="ISO country code (defaults to EG).")


class OrderCreateRequest(BaseModel):
    customerEmail: Optional[str] = Field(default=None, description="Customer contact email.")
    customerName: Optional[str] = Field(default=None, description="Customer full name.")
    customerPhone: Optional[str] = None
    items: List[OrderItemInput] = Field(default_factory=list, description="Line items in the cart.")
    subtotal: Optional[Number] = Field(default=None, description="Computed from items when omitted.")
    shippingCost: Optional[Number] = None
    tax: Optional[Number] = None
    discount: Optional[Number] = None
    total: Optional[Number] = Field(
        default=None,
        description="Computed as subtotal + shippingCost + tax - discount when omitted.",
    )
    currency: Optional[str] = None
    paymentMethod: Optional[str] = Field(default=None, description="Checkout payment method (default cash_on_delivery).")
    shippingAddress: ShippingAddressInput = Field(default_factory=ShippingAddressInput)
    notes: Optional[str] = None


class OrderSummary(BaseModel):
    id: str
    orderNumber: str
    total: float
    status: str
    paymentStatus: str


class OrderCreateResponse(BaseModel):
    success: bool = True
    order: OrderSummary


class OrderStatusUpdateRequest(BaseModel):
    status: OrderStatus = Field(..., description="New fulfilment status for the order.")


class OrderStatusUpdateResponse(BaseModel):
    success: bool = True
    orderId: str
    status: str
