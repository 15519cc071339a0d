"""Laybuy API response models.

Every response shares the ``result``/``error`` envelope; nothing in a
response is trusted unless ``result`` is ``success``.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from laybuy_gateway.models.common import Amount, CustomerDetails, LaybuyModel


class ResponseResult(str, Enum):
    ERROR = "error"
    SUCCESS = "success"
    DECLINED = "declined"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ResponseResult"]:
        """Case-insensitive lookup; None for anything unrecognized."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class ProviderResponse(LaybuyModel):
    result: Optional[ResponseResult] = None
    error_message: Optional[str] = Field(default=None, alias="error")

    @field_validator("result", mode="before")
    @classmethod
    def _lowercase_result(cls, value):
        # the service answers "SUCCESS", "ERROR", ...
        if isinstance(value, str):
            return value.strip().lower()
        return value


class CreateResponse(ProviderResponse):
    token: Optional[str] = None
    payment_url: Optional[str] = None


class ConfirmResponse(ProviderResponse):
    order_id: Optional[int] = None


class RefundDetails(LaybuyModel):
    refund_id: Optional[int] = None
    refund_date: Optional[datetime] = Field(default=None, alias="dateTime")
    amount: Optional[Amount] = None
    refund_reference: Optional[str] = None
    user: Optional[str] = None
    user_note: Optional[str] = None


class GetResponse(ProviderResponse):
    order_id: Optional[int] = None
    token: Optional[str] = None
    total_amount: Optional[Amount] = Field(default=None, alias="amount")
    currency: Optional[str] = None
    merchant_reference: Optional[str] = None
    processed_date: Optional[datetime] = Field(default=None, alias="processed")
    customer: Optional[CustomerDetails] = None
    refunds: Optional[list[RefundDetails]] = None


class RefundResponse(ProviderResponse):
    refund_id: Optional[int] = None
    merchant_reference: Optional[str] = None


class CancelResponse(ProviderResponse):
    pass
