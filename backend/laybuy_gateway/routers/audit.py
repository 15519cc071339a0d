"""Audit router - Laybuy payment event trail."""

from fastapi import APIRouter, Depends, Query

from laybuy_gateway.dependencies import get_audit_log
from laybuy_gateway.services.audit import AuditLog

router = APIRouter()


@router.get("/orders/{order_id}")
async def audit_order(order_id: int, audit: AuditLog = Depends(get_audit_log)):
    entries = audit.entries_for_order(order_id)
    return {"order_id": order_id, "entries": entries, "total": len(entries)}


@router.get("/events")
async def audit_events(
    limit: int = Query(100, le=500),
    offset: int = Query(0, ge=0),
    audit: AuditLog = Depends(get_audit_log),
):
    entries, total = audit.all_entries(limit, offset)
    return {"entries": entries, "total": total, "limit": limit, "offset": offset}
