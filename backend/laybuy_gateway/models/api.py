"""Gateway result types and HTTP API bodies."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from laybuy_gateway.shared.models import PaymentStatus


class PriceBreakdown(BaseModel):
    applicable: bool = False
    initial_price: str = ""
    price: str = ""

    @classmethod
    def not_applicable(cls) -> "PriceBreakdown":
        return cls()


class RedirectOutcome(BaseModel):
    """Where the boundary layer should send the customer next."""

    url: str
    success: bool
    error_message: Optional[str] = None


class RefundPaymentResult(BaseModel):
    new_payment_status: Optional[PaymentStatus] = None
    errors: list[str] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


class RefundOrderRequest(BaseModel):
    amount: Decimal = Field(gt=0)
    is_partial: bool = False
    reference: Optional[str] = None
    note: Optional[str] = None


class ConfigurationStatus(BaseModel):
    configured: bool
    use_sandbox: bool
    service_url: str
    primary_store_currency: str
    currency_supported: bool
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class PaymentMethodCapabilities(BaseModel):
    supports_capture: bool = False
    supports_partial_refund: bool = True
    supports_refund: bool = True
    supports_void: bool = False
    supports_recurring: bool = False
    can_re_post_process_payment: bool = True
    additional_handling_fee: Decimal = Decimal("0")
    skip_payment_info: bool = False
