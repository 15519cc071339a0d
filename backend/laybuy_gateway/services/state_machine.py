"""Payment status transitions for host orders."""

from datetime import datetime
from decimal import Decimal

from laybuy_gateway.shared.models import (
    PAYMENT_TRANSITIONS,
    Order,
    OrderStatus,
    PaymentStatus,
)


class InvalidTransitionError(Exception):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Invalid payment transition: {current} -> {target}")


def validate_payment_transition(current: str, target: str) -> bool:
    current_state = PaymentStatus(current)
    target_state = PaymentStatus(target)
    if target_state not in PAYMENT_TRANSITIONS.get(current_state, []):
        raise InvalidTransitionError(current, target)
    return True


class OrderProcessingService:
    """Order mutations the host exposes to payment methods."""

    def __init__(self, orders):
        self.orders = orders

    def can_mark_order_paid(self, order: Order) -> bool:
        if order.order_status == OrderStatus.CANCELLED:
            return False
        return PaymentStatus.PAID in PAYMENT_TRANSITIONS.get(order.payment_status, [])

    def can_mark_order_refunded(self, order: Order, is_partial: bool) -> bool:
        target = PaymentStatus.PARTIALLY_REFUNDED if is_partial else PaymentStatus.REFUNDED
        return target in PAYMENT_TRANSITIONS.get(order.payment_status, [])

    def mark_order_paid(self, order: Order) -> None:
        validate_payment_transition(order.payment_status.value, PaymentStatus.PAID.value)
        order.payment_status = PaymentStatus.PAID
        order.paid_at = datetime.utcnow()
        if order.order_status == OrderStatus.PENDING:
            order.order_status = OrderStatus.PROCESSING
        self.orders.update_order(order)

    def mark_order_refunded(self, order: Order, is_partial: bool,
                            amount: Decimal = Decimal("0")) -> PaymentStatus:
        target = PaymentStatus.PARTIALLY_REFUNDED if is_partial else PaymentStatus.REFUNDED
        validate_payment_transition(order.payment_status.value, target.value)
        order.payment_status = target
        order.refunded_amount += amount
        self.orders.update_order(order)
        return target
