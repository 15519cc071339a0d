"""Refund sync job - pulls the Laybuy refund ledger for confirmed orders."""

import asyncio
import logging
import os

from laybuy_gateway.services.laybuy_manager import LaybuyManager
from laybuy_gateway.services.store import OrderStore
from laybuy_gateway.shared.correlation import bind_correlation_id
from laybuy_gateway.shared.models import PaymentStatus

logger = logging.getLogger("laybuy.refund-sync")

SYNCED_STATUSES = (PaymentStatus.PAID, PaymentStatus.PARTIALLY_REFUNDED)


class RefundSyncJob:

    def __init__(self, manager: LaybuyManager, orders: OrderStore):
        self.manager = manager
        self.orders = orders

    async def sync_once(self) -> dict:
        checked = 0
        updated = 0
        failed = 0

        for order in self.orders.list_orders():
            if order.payment_status not in SYNCED_STATUSES:
                continue

            bind_correlation_id()
            checked += 1
            changed, error_message = await self.manager.check_refunds(order.id)
            if error_message:
                failed += 1
            elif changed is not None:
                updated += 1

        summary = {"checked": checked, "updated": updated, "failed": failed}
        logger.info(f"Refund sync: {checked} checked, {updated} updated, {failed} failed")
        return summary

    async def run_loop(self, interval: int = 3600):
        logger.info(f"Refund sync job started (interval={interval}s)")
        while True:
            try:
                await self.sync_once()
            except Exception as e:
                logger.error(f"Refund sync error: {e}")
            await asyncio.sleep(interval)


async def main():
    from laybuy_gateway.dependencies import get_client, get_manager, get_order_store

    job = RefundSyncJob(get_manager(), get_order_store())
    try:
        await job.run_loop(interval=int(os.environ.get("REFUND_SYNC_INTERVAL", "3600")))
    finally:
        await get_client().aclose()


if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    asyncio.run(main())
