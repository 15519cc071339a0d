"""Refunds router - admin refunds, refund reconciliation and cancellation."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from laybuy_gateway.dependencies import get_manager, get_order_store
from laybuy_gateway.models.api import RefundOrderRequest
from laybuy_gateway.services.laybuy_manager import LaybuyManager
from laybuy_gateway.services.store import OrderStore
from laybuy_gateway.shared.models import PaymentStatus

logger = logging.getLogger("laybuy.refunds")
router = APIRouter()

REFUNDABLE_STATUSES = (PaymentStatus.PAID, PaymentStatus.PARTIALLY_REFUNDED)


@router.post("/{order_id}/refunds", status_code=201)
async def refund_order(
    order_id: int,
    req: RefundOrderRequest,
    x_actor_id: Optional[str] = Header(None, alias="X-Actor-Id"),
    orders: OrderStore = Depends(get_order_store),
    manager: LaybuyManager = Depends(get_manager),
):
    order = orders.load_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    if order.payment_status not in REFUNDABLE_STATUSES:
        raise HTTPException(status_code=409, detail="Order must be paid to refund")
    if order.refunded_amount + req.amount > order.order_total:
        raise HTTPException(status_code=400, detail="Refund amount exceeds order total")

    result = await manager.refund_payment(
        order, req.amount, req.is_partial, reference=req.reference, note=req.note, actor=x_actor_id,
    )
    if not result.success:
        raise HTTPException(status_code=502, detail=result.errors)

    logger.info(f"Order {order_id} refunded {req.amount}, status={result.new_payment_status.value}")
    order = orders.load_order(order_id)
    return {
        "order_id": order_id,
        "payment_status": result.new_payment_status,
        "refunded_amount": order.refunded_amount,
    }


@router.post("/{order_id}/refunds/sync")
async def sync_refunds(
    order_id: int,
    x_actor_id: Optional[str] = Header(None, alias="X-Actor-Id"),
    manager: LaybuyManager = Depends(get_manager),
):
    order, error_message = await manager.check_refunds(order_id, actor=x_actor_id)
    if error_message:
        raise HTTPException(status_code=502, detail=error_message)

    return {
        "order_id": order_id,
        "updated": order is not None,
        "refunded_amount": order.refunded_amount if order else None,
    }


@router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: int,
    x_actor_id: Optional[str] = Header(None, alias="X-Actor-Id"),
    manager: LaybuyManager = Depends(get_manager),
):
    cancelled, error_message = await manager.cancel_order(order_id, actor=x_actor_id)
    if not cancelled:
        raise HTTPException(status_code=502, detail=error_message)
    return {"order_id": order_id, "cancelled": True}
