"""Shared fixtures: file-backed stores on tmp_path and a fake Laybuy API."""

import json
from decimal import Decimal

import httpx
import pytest

from laybuy_gateway.config import ORDER_TOKEN_ATTRIBUTE, LaybuySettings
from laybuy_gateway.services.audit import AuditLog
from laybuy_gateway.services.currency import CurrencyService, PriceFormatter
from laybuy_gateway.services.laybuy_manager import LaybuyManager
from laybuy_gateway.services.provider_client import LaybuyClient
from laybuy_gateway.services.state_machine import OrderProcessingService
from laybuy_gateway.services.store import AttributeStore, OrderStore
from laybuy_gateway.shared.models import Address, Customer, Order, OrderItem


class FakeLaybuy:
    """Answers provider calls from canned bodies keyed by path and records every request."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: dict = {}

    def respond(self, path: str, body, status_code: int = 200):
        self.responses[path] = (status_code, body)

    def fail(self, path: str, error: Exception):
        self.responses[path] = (None, error)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.lstrip("/")
        status_code, body = self.responses.get(
            path, (404, {"result": "ERROR", "error": f"Unknown endpoint {path}"})
        )
        if isinstance(body, Exception):
            raise body
        if isinstance(body, str):
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, json=body)

    def paths(self) -> list[str]:
        return [r.url.path.lstrip("/") for r in self.requests]

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def laybuy():
    return FakeLaybuy()


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides) -> LaybuySettings:
        values = {
            "merchant_id": "100000",
            "authentication_key": "secret-key",
            "primary_store_currency": "AUD",
            "data_dir": str(tmp_path),
            "public_base_url": "https://shop.example.com",
        }
        values.update(overrides)
        return LaybuySettings(**values)
    return _make


@pytest.fixture
def make_manager(make_settings, laybuy):
    def _make(**overrides) -> LaybuyManager:
        settings = make_settings(**overrides)
        orders = OrderStore(settings.data_dir)
        return LaybuyManager(
            settings=settings,
            client=LaybuyClient(settings, transport=httpx.MockTransport(laybuy.handle)),
            orders=orders,
            attributes=AttributeStore(settings.data_dir),
            currencies=CurrencyService(settings.primary_store_currency, settings.exchange_rates),
            formatter=PriceFormatter(),
            order_processing=OrderProcessingService(orders),
            audit=AuditLog(settings.data_dir),
        )
    return _make


@pytest.fixture
def manager(make_manager):
    return make_manager()


@pytest.fixture
def order() -> Order:
    return Order(
        id=1,
        custom_order_number="LB-00001",
        customer_id=7,
        billing_address_id=11,
        shipping_address_id=12,
        order_total=Decimal("1500"),
        order_tax=Decimal("100"),
        order_shipping_excl_tax=Decimal("50"),
        items=[
            OrderItem(
                id=1,
                product_id=42,
                product_name="Walnut Dining Table",
                sku="WAL-DINE",
                unit_price_excl_tax=Decimal("600"),
                quantity=2,
            ),
        ],
    )


@pytest.fixture
def stored_order(manager, order) -> Order:
    """The sample order saved with its customer and addresses."""
    manager.orders.save_customer(Customer(
        id=7, email="grace.wilson@example.com", first_name="Grace", last_name="Wilson", phone="+64 21 555 0101",
    ))
    manager.orders.save_address(Address(
        id=11, first_name="Grace", last_name="Wilson", phone_number="+64 21 555 0101",
        address1="12 Queen Street", city="Auckland", county="Auckland Central",
        state_province="Auckland", zip_postal_code="1010", country="NZ",
    ))
    manager.orders.save_address(Address(
        id=12, first_name="Grace", last_name="Wilson",
        address1="4 Harbour View Road", city="Wellington", zip_postal_code="6011", country="NZ",
    ))
    manager.orders.update_order(order)
    return manager.orders.load_order(order.id)


@pytest.fixture
def awaiting_confirmation(manager, stored_order) -> Order:
    """Sample order holding a Laybuy token, as left by a successful checkout hand-off."""
    manager.attributes.set_attribute(stored_order, ORDER_TOKEN_ATTRIBUTE, "Tok3n-AbC123")
    return stored_order
