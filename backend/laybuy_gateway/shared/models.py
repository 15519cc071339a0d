"""Host storefront entities read and updated by the Laybuy integration."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# === Enums ===

class PaymentStatus(str, Enum):
    PENDING = "pending"
    AUTHORIZED = "authorized"
    PAID = "paid"
    PARTIALLY_REFUNDED = "partially_refunded"
    REFUNDED = "refunded"
    VOIDED = "voided"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


# === State Machine Transitions ===

PAYMENT_TRANSITIONS: dict[PaymentStatus, list[PaymentStatus]] = {
    PaymentStatus.PENDING: [PaymentStatus.AUTHORIZED, PaymentStatus.PAID, PaymentStatus.VOIDED],
    PaymentStatus.AUTHORIZED: [PaymentStatus.PAID, PaymentStatus.VOIDED],
    PaymentStatus.PAID: [PaymentStatus.PARTIALLY_REFUNDED, PaymentStatus.REFUNDED],
    PaymentStatus.PARTIALLY_REFUNDED: [PaymentStatus.PARTIALLY_REFUNDED, PaymentStatus.REFUNDED],
    PaymentStatus.REFUNDED: [],
    PaymentStatus.VOIDED: [],
}


# === Domain Models ===

class Address(BaseModel):
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    county: Optional[str] = None
    state_province: Optional[str] = None
    zip_postal_code: Optional[str] = None
    country: Optional[str] = None


class Customer(BaseModel):
    id: int
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None


class OrderItem(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    sku: Optional[str] = None
    unit_price_excl_tax: Decimal
    quantity: int = Field(ge=1)


class CheckoutAttributeValue(BaseModel):
    """A selected checkout attribute (gift wrapping, etc.) with its price excluding tax."""

    attribute_name: str
    value_name: str
    price: Decimal = Decimal("0")


class Order(BaseModel):
    id: int
    custom_order_number: str
    customer_id: int
    billing_address_id: int
    shipping_address_id: Optional[int] = None
    pickup_address_id: Optional[int] = None
    order_total: Decimal
    order_tax: Decimal = Decimal("0")
    order_shipping_excl_tax: Decimal = Decimal("0")
    shipping_method: Optional[str] = None
    refunded_amount: Decimal = Decimal("0")
    payment_status: PaymentStatus = PaymentStatus.PENDING
    order_status: OrderStatus = OrderStatus.PENDING
    items: list[OrderItem] = Field(default_factory=list)
    checkout_attributes: list[CheckoutAttributeValue] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    paid_at: Optional[datetime] = None


class ShoppingCart(BaseModel):
    """Current cart of a customer; the total is in the primary store currency."""

    customer_id: int
    total: Optional[Decimal] = None
    item_count: int = 0
