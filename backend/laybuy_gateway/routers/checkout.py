"""Checkout router - hands the customer over to Laybuy and verifies the return callback."""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from fastapi.responses import RedirectResponse

from laybuy_gateway.config import LaybuySettings
from laybuy_gateway.dependencies import get_manager, get_order_store, get_settings
from laybuy_gateway.services.laybuy_manager import LaybuyManager
from laybuy_gateway.services.store import OrderStore

logger = logging.getLogger("laybuy.callback")
router = APIRouter()


def _store_url(settings: LaybuySettings, path: str, error: Optional[str] = None) -> str:
    url = f"{settings.public_base_url.rstrip('/')}{path}"
    if error:
        url += "?" + urlencode({"error": error})
    return url


@router.post("/{order_id}")
async def start_checkout(
    order_id: int,
    x_customer_id: Optional[str] = Header(None, alias="X-Customer-Id"),
    settings: LaybuySettings = Depends(get_settings),
    orders: OrderStore = Depends(get_order_store),
    manager: LaybuyManager = Depends(get_manager),
):
    order = orders.load_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")

    outcome = await manager.post_process_payment(
        order,
        success_url=_store_url(settings, f"/checkout/{order_id}/callback"),
        fail_url=_store_url(settings, f"/orderdetails/{order_id}"),
        actor=x_customer_id,
    )
    if not outcome.success:
        # failure page carries the message for the notification banner
        return RedirectResponse(f"{outcome.url}?{urlencode({'error': outcome.error_message})}",
                                status_code=303)
    return RedirectResponse(outcome.url, status_code=303)


@router.get("/{order_id}/callback")
async def checkout_callback(
    order_id: int,
    status: Optional[str] = Query(None),
    token: Optional[str] = Query(None),
    x_customer_id: Optional[str] = Header(None, alias="X-Customer-Id"),
    settings: LaybuySettings = Depends(get_settings),
    manager: LaybuyManager = Depends(get_manager),
):
    confirmed, error_message = await manager.confirm_order(order_id, status, token, actor=x_customer_id)
    if not confirmed:
        logger.warning(f"Callback for order {order_id} not confirmed (status={status})")
        return RedirectResponse(
            _store_url(settings, f"/orderdetails/{order_id}", error=error_message), status_code=303
        )

    return RedirectResponse(_store_url(settings, f"/checkout/completed/{order_id}"), status_code=303)
