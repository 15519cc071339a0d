"""Refunds against Laybuy and reconciliation of the remote refund ledger."""

import asyncio
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from laybuy_gateway.config import ORDER_ID_ATTRIBUTE
from laybuy_gateway.jobs.refund_sync import RefundSyncJob
from laybuy_gateway.shared.models import PaymentStatus


@pytest.fixture
def paid_order(manager, stored_order):
    stored_order.payment_status = PaymentStatus.PAID
    manager.orders.update_order(stored_order)
    manager.attributes.set_attribute(stored_order, ORDER_ID_ATTRIBUTE, 123456)
    return manager.orders.load_order(stored_order.id)


def _ledger(*amounts):
    return {
        "result": "SUCCESS",
        "orderId": 123456,
        "refunds": [{"refundId": n, "amount": a} for n, a in enumerate(amounts, start=1)],
    }


class TestRefundOrder:

    @pytest.mark.asyncio
    async def test_refund_request(self, manager, laybuy, paid_order):
        laybuy.respond("order/refund", {"result": "SUCCESS", "refundId": 77})

        response, error = await manager.refund_order(
            paid_order, Decimal("25.50"), reference="LB-00001-r1", note="Damaged in transit", actor="admin",
        )

        assert error is None
        assert response.refund_id == 77
        assert laybuy.last_json() == {
            "orderId": 123456,
            "amount": 25.5,
            "refundReference": "LB-00001-r1",
            "note": "Damaged in transit",
        }
        entry = manager.audit.entries_for_order(1)[-1]
        assert entry["type"] == "refund.requested"
        assert entry["details"]["amount"] == "25.50"

    @pytest.mark.asyncio
    async def test_default_reference_uses_order_number(self, manager, laybuy, paid_order):
        laybuy.respond("order/refund", {"result": "SUCCESS", "refundId": 77})

        await manager.refund_order(paid_order, Decimal("10"))

        assert laybuy.last_json()["refundReference"].startswith("LB-00001-")

    @pytest.mark.asyncio
    async def test_unconfirmed_order_cannot_be_refunded(self, manager, laybuy, stored_order):
        response, error = await manager.refund_order(stored_order, Decimal("10"))

        assert response is None
        assert error == "Payments.Laybuy error: \nLaybuy order cannot be loaded"
        assert laybuy.requests == []


class TestRefundPayment:

    @pytest.mark.asyncio
    async def test_partial_refund(self, manager, laybuy, paid_order):
        laybuy.respond("order/refund", {"result": "SUCCESS", "refundId": 77})

        result = await manager.refund_payment(paid_order, Decimal("100"), is_partial=True)

        assert result.success
        assert result.new_payment_status == PaymentStatus.PARTIALLY_REFUNDED
        order = manager.orders.load_order(1)
        assert order.payment_status == PaymentStatus.PARTIALLY_REFUNDED
        assert order.refunded_amount == Decimal("100")

    @pytest.mark.asyncio
    async def test_full_refund(self, manager, laybuy, paid_order):
        laybuy.respond("order/refund", {"result": "SUCCESS", "refundId": 77})

        result = await manager.refund_payment(paid_order, Decimal("1500"), is_partial=False)

        assert result.new_payment_status == PaymentStatus.REFUNDED

    @pytest.mark.asyncio
    async def test_rejected_refund_leaves_order_unchanged(self, manager, laybuy, paid_order):
        laybuy.respond("order/refund", {"result": "ERROR", "error": "Refund exceeds order amount"})

        result = await manager.refund_payment(paid_order, Decimal("100"), is_partial=True)

        assert not result.success
        assert "Refund exceeds order amount" in result.errors[0]
        assert result.new_payment_status is None
        assert manager.orders.load_order(1).payment_status == PaymentStatus.PAID

    @pytest.mark.asyncio
    async def test_unpaid_order_is_rejected_before_laybuy_is_called(self, manager, laybuy, stored_order):
        manager.attributes.set_attribute(stored_order, ORDER_ID_ATTRIBUTE, 123456)

        result = await manager.refund_payment(stored_order, Decimal("10"), is_partial=True)

        assert not result.success
        assert result.errors == [
            "Payments.Laybuy error: \nOrder payment status pending cannot move to partially_refunded"
        ]
        assert laybuy.requests == []
        assert manager.orders.load_order(1).payment_status == PaymentStatus.PENDING
        entry = manager.audit.entries_for_order(1)[-1]
        assert entry["type"] == "laybuy.error"
        assert entry["details"]["code"] == "invalid_order_state"

    @pytest.mark.asyncio
    async def test_stale_copy_does_not_overwrite_stored_order(self, manager, laybuy, paid_order):
        laybuy.respond("order/refund", {"result": "SUCCESS", "refundId": 77})
        stale = paid_order.model_copy()
        paid_order.refunded_amount = Decimal("40")
        manager.orders.update_order(paid_order)

        result = await manager.refund_payment(stale, Decimal("100"), is_partial=True)

        assert result.success
        assert manager.orders.load_order(1).refunded_amount == Decimal("140")

    @pytest.mark.asyncio
    async def test_refund_waits_for_the_order_lock(self, manager, laybuy, paid_order):
        laybuy.respond("order/refund", {"result": "SUCCESS", "refundId": 77})

        async with manager.locks.hold(1):
            task = asyncio.create_task(manager.refund_payment(paid_order, Decimal("10"), is_partial=True))
            await asyncio.sleep(0.01)
            assert laybuy.requests == []

        result = await task
        assert result.success
        assert len(manager.locks) == 0


class TestCheckRefunds:

    @pytest.mark.asyncio
    async def test_matching_ledger_writes_nothing(self, manager, laybuy, paid_order):
        paid_order.refunded_amount = Decimal("30")
        manager.orders.update_order(paid_order)
        laybuy.respond("order/merchant/LB-00001", _ledger(20.5, 9.5))
        manager.orders.update_order = MagicMock()

        order, error = await manager.check_refunds(1)

        assert order is None
        assert error is None
        manager.orders.update_order.assert_not_called()

    @pytest.mark.asyncio
    async def test_new_refunds_are_saved_once(self, manager, laybuy, paid_order):
        laybuy.respond("order/merchant/LB-00001", _ledger(20.5, 9.5))
        manager.orders.update_order = MagicMock(wraps=manager.orders.update_order)

        order, error = await manager.check_refunds(1)

        assert error is None
        assert order.refunded_amount == Decimal("30")
        assert manager.orders.update_order.call_count == 1
        assert manager.orders.load_order(1).refunded_amount == Decimal("30")
        entry = manager.audit.entries_for_order(1)[-1]
        assert entry["type"] == "refunds.reconciled"
        assert entry["details"] == {"previous_amount": "0", "refunded_amount": "30.0"}

    @pytest.mark.asyncio
    async def test_second_check_is_a_no_op(self, manager, laybuy, paid_order):
        laybuy.respond("order/merchant/LB-00001", _ledger(12))

        first, _ = await manager.check_refunds(1)
        second, _ = await manager.check_refunds(1)

        assert first is not None
        assert second is None

    @pytest.mark.asyncio
    async def test_refund_without_amount_counts_as_zero(self, manager, laybuy, paid_order):
        laybuy.respond("order/merchant/LB-00001", {
            "result": "SUCCESS",
            "refunds": [{"refundId": 1, "amount": 15}, {"refundId": 2}],
        })

        order, _ = await manager.check_refunds(1)

        assert order.refunded_amount == Decimal("15")

    @pytest.mark.asyncio
    async def test_no_refund_list(self, manager, laybuy, paid_order):
        laybuy.respond("order/merchant/LB-00001", {"result": "SUCCESS", "orderId": 123456})

        assert await manager.check_refunds(1) == (None, None)

    @pytest.mark.asyncio
    async def test_lookup_failure(self, manager, laybuy, paid_order):
        laybuy.respond("order/merchant/LB-00001", {"result": "ERROR", "error": "Order not found"})

        order, error = await manager.check_refunds(1)

        assert order is None
        assert "Order not found" in error


class TestRefundSyncJob:

    @pytest.mark.asyncio
    async def test_sync_checks_paid_orders_only(self, manager, laybuy, paid_order, order):
        pending = order.model_copy(update={"id": 2, "custom_order_number": "LB-00002"})
        manager.orders.update_order(pending)
        laybuy.respond("order/merchant/LB-00001", _ledger(40))

        summary = await RefundSyncJob(manager, manager.orders).sync_once()

        assert summary == {"checked": 1, "updated": 1, "failed": 0}
        assert laybuy.paths() == ["order/merchant/LB-00001"]
        assert manager.orders.load_order(1).refunded_amount == Decimal("40")

    @pytest.mark.asyncio
    async def test_sync_counts_failures(self, manager, laybuy, paid_order):
        summary = await RefundSyncJob(manager, manager.orders).sync_once()

        assert summary == {"checked": 1, "updated": 0, "failed": 1}
