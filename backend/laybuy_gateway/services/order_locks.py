"""Per-order locks serializing confirmation, refunds and refund sync for one order."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class OrderLocks:
    """Locks live only while an order has a holder or a waiter."""

    def __init__(self):
        self._locks: dict[int, asyncio.Lock] = {}
        self._holders: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, order_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(order_id, asyncio.Lock())
        self._holders[order_id] = self._holders.get(order_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[order_id] -= 1
            if not self._holders[order_id]:
                del self._holders[order_id]
                del self._locks[order_id]
