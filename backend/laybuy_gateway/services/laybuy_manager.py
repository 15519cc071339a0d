"""Laybuy manager - order-to-payment reconciliation.

Builds provider requests from host orders, verifies payment callbacks,
confirms orders and reconciles refunds against the Laybuy ledger. Every
provider-facing entry point goes through ``_handle``: it checks that the
gateway is configured and the primary store currency is supported, runs
the operation and turns any failure into ``(None, error_message)``.
"""

import hmac
import logging
import uuid
from decimal import Decimal
from typing import Any, Awaitable, Callable, Optional

import httpx

from laybuy_gateway.config import (
    ORDER_ID_ATTRIBUTE,
    ORDER_TOKEN_ATTRIBUTE,
    SUPPORTED_CURRENCIES,
    SYSTEM_NAME,
    LaybuySettings,
)
from laybuy_gateway.models.api import (
    ConfigurationStatus,
    PaymentMethodCapabilities,
    PriceBreakdown,
    RedirectOutcome,
    RefundPaymentResult,
)
from laybuy_gateway.models.common import AddressDetails, CustomerDetails, ItemDetails
from laybuy_gateway.models.requests import (
    CancelRequest,
    ConfirmRequest,
    CreateRequest,
    GetRequest,
    ProviderRequest,
    RefundRequest,
)
from laybuy_gateway.models.responses import (
    CreateResponse,
    ProviderResponse,
    RefundResponse,
    ResponseResult,
)
from laybuy_gateway.services.audit import AuditLog
from laybuy_gateway.services.currency import CurrencyService, PriceFormatter
from laybuy_gateway.services.errors import (
    InvalidOrderStateError,
    LaybuyError,
    MissingCorrelationIdError,
    NotConfiguredError,
    ProviderRejectedError,
    ResourceNotFoundError,
    TokenMismatchError,
    TransportFailureError,
    UnsupportedCurrencyError,
)
from laybuy_gateway.services.order_locks import OrderLocks
from laybuy_gateway.services.provider_client import LaybuyClient
from laybuy_gateway.services.state_machine import OrderProcessingService
from laybuy_gateway.services.store import AttributeStore, OrderStore
from laybuy_gateway.shared.models import Address, Order, PaymentStatus

logger = logging.getLogger("laybuy.manager")

# currency -> (threshold, first installment anchor)
BREAKDOWN_RULES: dict[str, tuple[Decimal, Decimal]] = {
    "AUD": (Decimal("1440"), Decimal("240")),
    "NZD": (Decimal("1440"), Decimal("240")),
    "GBP": (Decimal("720"), Decimal("120")),
}
INSTALLMENTS = 6


def is_currency_supported(currency_code: Optional[str]) -> bool:
    return (currency_code or "").upper() in SUPPORTED_CURRENCIES


class CallbackStatusError(ProviderRejectedError):
    """The customer did not complete the payment on the Laybuy page."""

    def __init__(self, status: Optional[str]):
        super().__init__(status)
        self.message = f"Order is {status}"
        self.args = (self.message,)


def tokens_match(received: Optional[str], stored: Optional[str]) -> bool:
    """Case-insensitive token comparison; an empty token on either side never matches."""
    if not received or not stored:
        return False
    return hmac.compare_digest(received.casefold().encode(), stored.casefold().encode())


class LaybuyManager:

    def __init__(self, settings: LaybuySettings, client: LaybuyClient,
                 orders: OrderStore, attributes: AttributeStore,
                 currencies: CurrencyService, formatter: PriceFormatter,
                 order_processing: OrderProcessingService, audit: AuditLog,
                 locks: Optional[OrderLocks] = None):
        self.settings = settings
        self.client = client
        self.orders = orders
        self.attributes = attributes
        self.currencies = currencies
        self.formatter = formatter
        self.order_processing = order_processing
        self.audit = audit
        self.locks = locks or OrderLocks()

    # === Utilities ===

    async def _handle(self, operation: str, function: Callable[[], Awaitable[Any]],
                      actor: Optional[str] = None,
                      order_id: Optional[int] = None) -> tuple[Any, Optional[str]]:
        try:
            if not self.settings.is_configured:
                raise NotConfiguredError()

            supported, currency_code = self.primary_store_currency_supported()
            if not supported:
                raise UnsupportedCurrencyError(currency_code)

            return await function(), None
        except UnsupportedCurrencyError as e:
            logger.warning(f"{SYSTEM_NAME}: {operation} skipped, {e.message}")
            return None, e.message
        except Exception as e:
            error = self._classify(e)
            error_message = f"{SYSTEM_NAME} error: \n{error.message}"
            logger.error(
                f"{error_message} (operation={operation}, order={order_id}, actor={actor or 'system'})",
                exc_info=not isinstance(e, LaybuyError),
            )
            self.audit.record(
                "laybuy.error",
                order_id=order_id,
                actor=actor,
                operation=operation,
                code=error.code.value,
                message=error.message,
            )
            return None, error_message

    @staticmethod
    def _classify(exception: Exception) -> LaybuyError:
        if isinstance(exception, LaybuyError):
            return exception
        if isinstance(exception, httpx.TransportError):
            return TransportFailureError(str(exception) or type(exception).__name__)
        return LaybuyError(str(exception) or type(exception).__name__)

    async def _request(self, request: ProviderRequest) -> ProviderResponse:
        response = await self.client.send(request)
        if response is None:
            raise LaybuyError("No response from service")

        if response.result != ResponseResult.SUCCESS:
            result = response.result.value if response.result else None
            raise ProviderRejectedError(result, response.error_message)

        return response

    def _load_order(self, order_id: int) -> Order:
        order = self.orders.load_order(order_id)
        if order is None:
            raise ResourceNotFoundError("Order")
        return order

    @staticmethod
    def _address_details(address: Address) -> AddressDetails:
        name = " ".join(part for part in (address.first_name, address.last_name) if part)
        return AddressDetails(
            name=name or None,
            phone=address.phone_number,
            address_line1=address.address1,
            address_line2=address.address2,
            city=address.city,
            suburb=address.county,
            state=address.state_province,
            postal_code=address.zip_postal_code,
            country=address.country,
        )

    def prepare_order_items(self, order: Order) -> list[ItemDetails]:
        """Item list whose ``price * quantity`` sum equals the order total exactly."""
        items: list[ItemDetails] = []

        # purchased items
        for item in order.items:
            item_id = item.sku or (str(item.product_id) if item.product_id else item.product_name)
            items.append(ItemDetails(
                item_id=item_id,
                description=item.product_name,
                price=item.unit_price_excl_tax,
                quantity=item.quantity,
            ))

        # checkout attributes with a price
        for value in order.checkout_attributes:
            if value.price <= 0:
                continue
            items.append(ItemDetails(
                item_id=value.attribute_name,
                description=f"{value.attribute_name} - {value.value_name}",
                price=value.price,
                quantity=1,
            ))

        if order.order_shipping_excl_tax > 0:
            shipping_by = f" by {order.shipping_method}" if order.shipping_method else ""
            items.append(ItemDetails(
                item_id="Shipping",
                description=f"Shipping{shipping_by}",
                price=order.order_shipping_excl_tax,
                quantity=1,
            ))

        if order.order_tax > 0:
            items.append(ItemDetails(
                item_id="Tax",
                description="Order tax amount",
                price=order.order_tax,
                quantity=1,
            ))

        # discounts, gift cards, reward points and rounding land in one reconciling line
        items_total = sum((item.price * item.quantity for item in items), Decimal("0"))
        if items_total != order.order_total:
            items.append(ItemDetails(
                item_id="Discount",
                description="Discounts, gift cards, rewarded point amount applied to cart, etc",
                price=order.order_total - items_total,
                quantity=1,
            ))

        return items

    # === Methods ===

    def primary_store_currency_supported(self) -> tuple[bool, str]:
        currency_code = self.currencies.lookup_currency(self.settings.primary_store_currency) \
            or self.settings.primary_store_currency or ""
        return is_currency_supported(currency_code), currency_code

    def prepare_price_breakdown(self, price_value: Optional[Decimal] = None,
                                customer_id: Optional[int] = None,
                                working_currency: Optional[str] = None) -> PriceBreakdown:
        supported, currency_code = self.primary_store_currency_supported()
        if not supported:
            return PriceBreakdown.not_applicable()

        # customers without a known working currency see primary store prices
        working_currency = self.currencies.lookup_currency(working_currency) or currency_code

        # no explicit price: use the customer's cart total
        if price_value is None and customer_id is not None:
            cart = self.orders.load_cart(customer_id)
            if cart is not None and cart.item_count > 0:
                cart_total = cart.total or Decimal("0")
                price_value = self.currencies.convert_from_primary(cart_total, working_currency)

        if price_value is None or price_value == 0:
            return PriceBreakdown.not_applicable()

        price_limit, first_price = BREAKDOWN_RULES[currency_code.upper()]

        initial_price = ""
        price_in_primary = self.currencies.convert_to_primary(price_value, working_currency)
        if price_in_primary > price_limit:
            initial_value = self.currencies.convert_from_primary(
                first_price + (price_in_primary - price_limit), working_currency
            )
            initial_price = self.formatter.format_price(initial_value, working_currency)
            installment = self.currencies.convert_from_primary(first_price, working_currency)
        else:
            installment = Decimal(price_value) / INSTALLMENTS

        price = self.formatter.format_price(installment, working_currency) if installment > 0 else ""
        return PriceBreakdown(applicable=True, initial_price=initial_price, price=price)

    async def create_order(self, order: Optional[Order], return_url: str,
                           actor: Optional[str] = None) -> tuple[Optional[CreateResponse], Optional[str]]:
        async def create():
            if order is None:
                raise ResourceNotFoundError("Order")

            customer = self.orders.load_customer(order.customer_id)
            if customer is None:
                raise ResourceNotFoundError("Customer")

            billing_address = self.orders.load_address(order.billing_address_id)
            if billing_address is None:
                raise ResourceNotFoundError("Billing address")

            request = CreateRequest(
                total_amount=order.order_total,
                currency=self.primary_store_currency_supported()[1],
                return_url=return_url,
                merchant_reference=order.custom_order_number,
                tax_amount=order.order_tax,
                customer=CustomerDetails(
                    first_name=customer.first_name,
                    last_name=customer.last_name,
                    email=customer.email,
                    phone=customer.phone,
                ),
                billing_address=self._address_details(billing_address),
                items=self.prepare_order_items(order),
            )

            # pickup point wins over the shipping address
            shipping_address = self.orders.load_address(order.pickup_address_id or order.shipping_address_id)
            if shipping_address is not None:
                request.shipping_address = self._address_details(shipping_address)

            return await self._request(request)

        return await self._handle("create_order", create, actor=actor,
                                  order_id=order.id if order else None)

    async def post_process_payment(self, order: Order, success_url: str, fail_url: str,
                                   actor: Optional[str] = None) -> RedirectOutcome:
        response, error_message = await self.create_order(order, success_url, actor=actor)
        if response is not None and response.payment_url and not error_message:
            self.attributes.set_attribute(order, ORDER_TOKEN_ATTRIBUTE, response.token)
            self.audit.record("order.created", order_id=order.id, actor=actor,
                              merchant_reference=order.custom_order_number)
            logger.info(f"Laybuy order created for {order.custom_order_number}, redirecting to payment page")
            return RedirectOutcome(url=response.payment_url, success=True)

        return RedirectOutcome(
            url=fail_url,
            success=False,
            error_message=error_message or f"{SYSTEM_NAME} error: \nPayment URL not received",
        )

    async def confirm_order(self, order_id: int, status: Optional[str], token: Optional[str],
                            actor: Optional[str] = None) -> tuple[bool, Optional[str]]:
        async def confirm():
            async with self.locks.hold(order_id):
                order = self._load_order(order_id)

                if ResponseResult.parse(status) != ResponseResult.SUCCESS:
                    raise CallbackStatusError(status)

                order_token = self.attributes.get_attribute(order, ORDER_TOKEN_ATTRIBUTE) or ""
                if not tokens_match(token, order_token):
                    raise TokenMismatchError()

                request = ConfirmRequest(
                    token=order_token,
                    currency=self.primary_store_currency_supported()[1],
                    total_amount=order.order_total,
                    items=self.prepare_order_items(order),
                )
                response = await self._request(request)
                if response.order_id is None:
                    raise MissingCorrelationIdError()

                # the token is single-use; the Laybuy order id replaces it
                self.attributes.set_attribute(order, ORDER_TOKEN_ATTRIBUTE, None)
                self.attributes.set_attribute(order, ORDER_ID_ATTRIBUTE, response.order_id)
                if self.order_processing.can_mark_order_paid(order):
                    self.order_processing.mark_order_paid(order)

                self.audit.record("order.confirmed", order_id=order.id, actor=actor,
                                  laybuy_order_id=response.order_id)
                logger.info(f"Order {order.custom_order_number} confirmed as Laybuy order {response.order_id}")
                return True

        result, error_message = await self._handle("confirm_order", confirm, actor=actor, order_id=order_id)
        if error_message:
            self.audit.record("order.confirm_failed", order_id=order_id, actor=actor,
                              status=status, message=error_message)
        return bool(result), error_message

    async def _refund(self, order: Order, amount: Decimal, reference: Optional[str],
                      note: Optional[str], actor: Optional[str]) -> RefundResponse:
        laybuy_order_id = self.attributes.get_attribute(order, ORDER_ID_ATTRIBUTE)
        if laybuy_order_id is None:
            raise ResourceNotFoundError("Laybuy order")

        request = RefundRequest(
            order_id=int(laybuy_order_id),
            amount=amount,
            refund_reference=reference or f"{order.custom_order_number}-{uuid.uuid4().hex[:8]}",
            note=note,
        )
        response = await self._request(request)
        self.audit.record("refund.requested", order_id=order.id, actor=actor,
                          amount=str(amount), refund_id=response.refund_id,
                          refund_reference=request.refund_reference)
        return response

    async def refund_order(self, order: Order, amount: Decimal, reference: Optional[str] = None,
                           note: Optional[str] = None,
                           actor: Optional[str] = None) -> tuple[Optional[RefundResponse], Optional[str]]:
        async def refund():
            return await self._refund(order, amount, reference, note, actor)

        return await self._handle("refund_order", refund, actor=actor, order_id=order.id)

    async def refund_payment(self, order: Order, amount: Decimal, is_partial: bool,
                             reference: Optional[str] = None, note: Optional[str] = None,
                             actor: Optional[str] = None) -> RefundPaymentResult:
        """Refund at Laybuy and move the stored order to its refunded status.

        The stored order is reloaded under its per-order lock; the caller's
        copy is only used for its id.
        """
        async def refund():
            async with self.locks.hold(order.id):
                current = self._load_order(order.id)

                if not self.order_processing.can_mark_order_refunded(current, is_partial):
                    target = PaymentStatus.PARTIALLY_REFUNDED if is_partial else PaymentStatus.REFUNDED
                    raise InvalidOrderStateError(current.payment_status.value, target.value)

                await self._refund(current, amount, reference, note, actor)
                return self.order_processing.mark_order_refunded(current, is_partial, amount)

        new_status, error_message = await self._handle("refund_payment", refund, actor=actor,
                                                       order_id=order.id)
        if error_message:
            return RefundPaymentResult(errors=[error_message])
        return RefundPaymentResult(new_payment_status=new_status)

    async def check_refunds(self, order_id: int,
                            actor: Optional[str] = None) -> tuple[Optional[Order], Optional[str]]:
        async def check():
            async with self.locks.hold(order_id):
                order = self._load_order(order_id)

                response = await self._request(GetRequest(merchant_reference=order.custom_order_number))
                if response.refunds is None:
                    return None

                refunded_amount = sum(
                    (refund.amount or Decimal("0") for refund in response.refunds), Decimal("0")
                )
                if refunded_amount == order.refunded_amount:
                    return None

                previous = order.refunded_amount
                order.refunded_amount = refunded_amount
                self.orders.update_order(order)

                self.audit.record("refunds.reconciled", order_id=order.id, actor=actor,
                                  previous_amount=str(previous), refunded_amount=str(refunded_amount))
                logger.info(
                    f"Order {order.custom_order_number} refunded amount {previous} -> {refunded_amount}"
                )
                return order

        return await self._handle("check_refunds", check, actor=actor, order_id=order_id)

    async def cancel_order(self, order_id: int, actor: Optional[str] = None) -> tuple[bool, Optional[str]]:
        async def cancel():
            async with self.locks.hold(order_id):
                order = self._load_order(order_id)

                token = self.attributes.get_attribute(order, ORDER_TOKEN_ATTRIBUTE)
                if not token:
                    raise ResourceNotFoundError("Order token")

                await self._request(CancelRequest(token=token))
                self.attributes.set_attribute(order, ORDER_TOKEN_ATTRIBUTE, None)
                self.audit.record("order.cancelled", order_id=order.id, actor=actor)
                return True

        result, error_message = await self._handle("cancel_order", cancel, actor=actor, order_id=order_id)
        return bool(result), error_message

    def configuration_status(self) -> ConfigurationStatus:
        supported, currency_code = self.primary_store_currency_supported()
        warnings = []
        if not supported:
            warnings.append(
                f"The primary store currency ({currency_code}) isn't supported by Laybuy. "
                f"Supported currencies: {', '.join(SUPPORTED_CURRENCIES)}"
            )
        return ConfigurationStatus(
            configured=self.settings.is_configured,
            use_sandbox=self.settings.use_sandbox,
            service_url=self.settings.service_url,
            primary_store_currency=currency_code,
            currency_supported=supported,
            warnings=warnings,
            errors=self.settings.validation_errors(),
        )

    @property
    def capabilities(self) -> PaymentMethodCapabilities:
        return PaymentMethodCapabilities()
