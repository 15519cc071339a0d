"""Laybuy API request models.

Each request variant declares its own HTTP method and path and names the
response model it is answered with, so the client can stay generic.
"""

from typing import ClassVar, Optional

from pydantic import Field

from laybuy_gateway.models.common import (
    AddressDetails,
    Amount,
    CustomerDetails,
    ItemDetails,
    LaybuyModel,
)
from laybuy_gateway.models.responses import (
    CancelResponse,
    ConfirmResponse,
    CreateResponse,
    GetResponse,
    ProviderResponse,
    RefundResponse,
)


class ProviderRequest(LaybuyModel):
    method: ClassVar[str] = "POST"
    response_model: ClassVar[type[ProviderResponse]] = ProviderResponse

    @property
    def path(self) -> str:
        raise NotImplementedError

    @property
    def has_body(self) -> bool:
        return self.method != "GET"

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class CreateRequest(ProviderRequest):
    response_model: ClassVar[type[ProviderResponse]] = CreateResponse

    total_amount: Optional[Amount] = Field(default=None, alias="amount")
    currency: Optional[str] = None
    return_url: Optional[str] = None
    merchant_reference: Optional[str] = None
    tax_amount: Optional[Amount] = Field(default=None, alias="tax")
    customer: Optional[CustomerDetails] = None
    billing_address: Optional[AddressDetails] = None
    shipping_address: Optional[AddressDetails] = None
    items: list[ItemDetails] = Field(default_factory=list)

    @property
    def path(self) -> str:
        return "order/create"


class ConfirmRequest(ProviderRequest):
    response_model: ClassVar[type[ProviderResponse]] = ConfirmResponse

    token: Optional[str] = None
    total_amount: Optional[Amount] = Field(default=None, alias="amount")
    currency: Optional[str] = None
    items: list[ItemDetails] = Field(default_factory=list)

    @property
    def path(self) -> str:
        return "order/confirm"


class GetRequest(ProviderRequest):
    method: ClassVar[str] = "GET"
    response_model: ClassVar[type[ProviderResponse]] = GetResponse

    merchant_reference: str = Field(exclude=True)

    @property
    def path(self) -> str:
        return f"order/merchant/{self.merchant_reference}"


class RefundRequest(ProviderRequest):
    response_model: ClassVar[type[ProviderResponse]] = RefundResponse

    order_id: Optional[int] = None
    amount: Optional[Amount] = None
    refund_reference: Optional[str] = None
    note: Optional[str] = None

    @property
    def path(self) -> str:
        return "order/refund"


class CancelRequest(ProviderRequest):
    method: ClassVar[str] = "GET"
    response_model: ClassVar[type[ProviderResponse]] = CancelResponse

    token: str = Field(exclude=True)

    @property
    def path(self) -> str:
        return f"order/cancel/{self.token}"
