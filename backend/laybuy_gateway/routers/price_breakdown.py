"""Price breakdown router - installment previews for storefront widgets."""

from decimal import Decimal
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from laybuy_gateway.config import LaybuySettings
from laybuy_gateway.dependencies import get_manager, get_settings
from laybuy_gateway.models.api import PriceBreakdown
from laybuy_gateway.services.laybuy_manager import LaybuyManager

router = APIRouter()


class WidgetZone(str, Enum):
    PRODUCT_DETAILS = "product_details"
    PRODUCT_BOX = "product_box"
    SHOPPING_CART = "shopping_cart"


def _zone_enabled(settings: LaybuySettings, zone: WidgetZone) -> bool:
    if zone == WidgetZone.PRODUCT_DETAILS:
        return settings.display_price_breakdown_on_product_page
    if zone == WidgetZone.PRODUCT_BOX:
        return settings.display_price_breakdown_in_product_box
    return settings.display_price_breakdown_in_shopping_cart


@router.get("/price-breakdown", response_model=PriceBreakdown)
async def price_breakdown(
    zone: str = Query(...),
    price: Optional[Decimal] = Query(None),
    customer_id: Optional[int] = Query(None),
    currency: Optional[str] = Query(None),
    settings: LaybuySettings = Depends(get_settings),
    manager: LaybuyManager = Depends(get_manager),
):
    # unknown zone, disabled zone or nothing to show: empty body
    try:
        widget_zone = WidgetZone(zone)
    except ValueError:
        return Response(status_code=204)
    if not _zone_enabled(settings, widget_zone):
        return Response(status_code=204)

    if widget_zone != WidgetZone.SHOPPING_CART and price is None:
        return Response(status_code=204)

    breakdown = manager.prepare_price_breakdown(price, customer_id=customer_id, working_currency=currency)
    if not breakdown.applicable:
        return Response(status_code=204)
    return breakdown


@router.get("/payment-info", response_model=PriceBreakdown)
async def payment_info(
    customer_id: int = Query(...),
    currency: Optional[str] = Query(None),
    manager: LaybuyManager = Depends(get_manager),
):
    return manager.prepare_price_breakdown(customer_id=customer_id, working_currency=currency)
