"""Shared building blocks of the Laybuy wire format."""

from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# decimals go over the wire as JSON numbers
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class LaybuyModel(BaseModel):
    """Base for wire models: lowerCamelCase keys, snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ItemDetails(LaybuyModel):
    item_id: Optional[str] = Field(default=None, alias="id")
    description: Optional[str] = None
    quantity: Optional[int] = None
    price: Optional[Amount] = None


class AddressDetails(LaybuyModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address_line1: Optional[str] = Field(default=None, alias="address1")
    address_line2: Optional[str] = Field(default=None, alias="address2")
    suburb: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = Field(default=None, alias="postcode")
    country: Optional[str] = None


class CustomerDetails(LaybuyModel):
    customer_id: Optional[int] = Field(default=None, alias="customerid")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address_line1: Optional[str] = Field(default=None, alias="address1")
    address_line2: Optional[str] = Field(default=None, alias="address2")
    suburb: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = Field(default=None, alias="postcode")
    country: Optional[str] = None
