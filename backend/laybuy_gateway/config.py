"""Gateway settings and fixed Laybuy constants."""

import os
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from laybuy_gateway import __version__

SYSTEM_NAME = "Payments.Laybuy"
USER_AGENT = f"laybuy-gateway/{__version__}"

SERVICE_URL = "https://api.laybuy.com/"
SANDBOX_SERVICE_URL = "https://sandbox-api.laybuy.com/"

# generic attribute keys stored against an order
ORDER_TOKEN_ATTRIBUTE = "LaybuyOrderToken"
ORDER_ID_ATTRIBUTE = "LaybuyOrderId"

SUPPORTED_CURRENCIES = ("AUD", "GBP", "NZD")

DEFAULT_REQUEST_TIMEOUT = 10


def _env_rates(name: str) -> dict[str, Decimal]:
    """Parse ``"NZD=1.08,GBP=0.52"`` into a rate table."""
    rates = {}
    for pair in os.environ.get(name, "").split(","):
        if "=" not in pair:
            continue
        code, rate = pair.split("=", 1)
        rates[code.strip().upper()] = Decimal(rate.strip())
    return rates


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class LaybuySettings(BaseModel):
    merchant_id: Optional[str] = None
    authentication_key: Optional[str] = None
    use_sandbox: bool = False

    display_price_breakdown_on_product_page: bool = True
    display_price_breakdown_in_product_box: bool = True
    display_price_breakdown_in_shopping_cart: bool = True

    request_timeout: Optional[int] = None
    primary_store_currency: str = "AUD"
    # units of each working currency per one unit of the primary currency
    exchange_rates: dict[str, Decimal] = Field(default_factory=dict)
    data_dir: str = "/app/data"
    public_base_url: str = "http://localhost:8026"

    @classmethod
    def from_env(cls) -> "LaybuySettings":
        timeout = os.environ.get("LAYBUY_REQUEST_TIMEOUT")
        return cls(
            merchant_id=os.environ.get("LAYBUY_MERCHANT_ID"),
            authentication_key=os.environ.get("LAYBUY_AUTHENTICATION_KEY"),
            use_sandbox=_env_flag("LAYBUY_USE_SANDBOX"),
            display_price_breakdown_on_product_page=_env_flag("LAYBUY_BREAKDOWN_PRODUCT_PAGE", True),
            display_price_breakdown_in_product_box=_env_flag("LAYBUY_BREAKDOWN_PRODUCT_BOX", True),
            display_price_breakdown_in_shopping_cart=_env_flag("LAYBUY_BREAKDOWN_SHOPPING_CART", True),
            request_timeout=int(timeout) if timeout else None,
            primary_store_currency=os.environ.get("PRIMARY_STORE_CURRENCY", "AUD"),
            exchange_rates=_env_rates("CURRENCY_RATES"),
            data_dir=os.environ.get("DATA_DIR", "/app/data"),
            public_base_url=os.environ.get("PUBLIC_BASE_URL", "http://localhost:8026"),
        )

    @property
    def service_url(self) -> str:
        return SANDBOX_SERVICE_URL if self.use_sandbox else SERVICE_URL

    @property
    def timeout_seconds(self) -> float:
        return float(self.request_timeout or DEFAULT_REQUEST_TIMEOUT)

    @property
    def is_configured(self) -> bool:
        # credentials are required to request services, unless the sandbox is used
        if self.use_sandbox:
            return True
        return bool(self.merchant_id) and bool(self.authentication_key)

    def validation_errors(self) -> list[str]:
        errors = []
        if not self.use_sandbox:
            if not self.merchant_id:
                errors.append("Merchant ID is required")
            if not self.authentication_key:
                errors.append("Authentication key is required")
        return errors
