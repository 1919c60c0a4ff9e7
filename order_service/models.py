"""
models.py — Data Models for Order Pricing

This module defines the data structures used for order creation, pricing and payment.
It uses Pydantic models to ensure type safety of data passed between pipeline steps.

Models:
    - OrderItem: Represents a single line item in an order.
    - CreateOrderRequest: Represents the order request received from the caller.
    - Order: The immutable order entity created after a successful charge.
    - PaymentOutcome: Result returned by the payment collaborator.
    - PriceBreakdown: All computed amounts of an order in cents.
    - CreateOrderResult: Return value of the order pipeline.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"


class PaymentStatus(str, Enum):
    APPROVED = "approved"
    DECLINED = "declined"


class OrderItem(BaseModel):
    """
    Represents a single product line in an order.

    Attributes:
        sku (str): The unique product identifier (Stock Keeping Unit).
        qty (int): The quantity of the product to order. Must be greater than zero.
        price (float): Unit price in major currency units (e.g. 10.99).
    """
    model_config = ConfigDict(frozen=True, from_attributes=True)

    sku: str = Field(..., min_length=1)
    qty: int = Field(..., gt=0)  # gt=0 bedeutet "greater than 0"
    price: float = Field(..., gt=0, allow_inf_nan=False)


class CreateOrderRequest(BaseModel):
    """
    Represents a new order request.

    Attributes:
        userEmail (str): Customer email as entered (not yet trimmed or lower-cased).
        items (List[OrderItem]): Ordered list of line items.
        couponCode (Optional[str]): Optional discount code, case-insensitive.
        currency (Currency): 'USD' or 'EUR'.
    """
    model_config = ConfigDict(from_attributes=True)

    userEmail: str
    items: List[OrderItem]
    couponCode: Optional[str] = None
    currency: Currency


class Order(BaseModel):
    """
    The order entity. Created once per successful pipeline run and never mutated.

    Attributes:
        id (str): Opaque order identifier prefixed with 'ord_'.
        userEmail (str): Normalized (trimmed, lower-cased) customer email.
        items (List[OrderItem]): Copies of the requested items.
        couponCode (Optional[str]): Normalized coupon code or None.
        createdAt (str): ISO-8601 UTC timestamp of creation.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    userEmail: str
    items: List[OrderItem]
    couponCode: Optional[str] = None
    createdAt: str


class PaymentOutcome(BaseModel):
    status: PaymentStatus
    transactionId: Optional[str] = None
    declineReason: Optional[str] = None

    @property
    def approved(self) -> bool:
        return self.status == PaymentStatus.APPROVED


class PriceBreakdown(BaseModel):
    """All amounts in integer minor units (cents)."""
    subtotalCents: int
    discountCents: int
    shippingCents: int
    taxCents: int
    totalCents: int


class CreateOrderResult(BaseModel):
    order: Order
    totalCents: int
    payment: PaymentOutcome
    breakdown: PriceBreakdown
