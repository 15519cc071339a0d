"""File-backed host storage: orders, customers, addresses, carts and generic attributes."""

import os
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from laybuy_gateway.shared.file_store import FileStore
from laybuy_gateway.shared.models import Address, Customer, Order, ShoppingCart


class OrderStore:

    def __init__(self, data_dir: str):
        store_dir = os.path.join(data_dir, "store")
        self.orders_path = os.path.join(store_dir, "orders.json")
        self.customers_path = os.path.join(store_dir, "customers.json")
        self.addresses_path = os.path.join(store_dir, "addresses.json")
        self.carts_path = os.path.join(store_dir, "carts.json")

    def load_order(self, order_id: int) -> Optional[Order]:
        orders = FileStore.read_json(self.orders_path, default={})
        data = orders.get(str(order_id))
        return Order.model_validate(data) if data else None

    def update_order(self, order: Order) -> None:
        order.updated_at = datetime.utcnow()
        data = order.model_dump(mode="json")

        def _put(orders: dict):
            orders[str(order.id)] = data

        FileStore.update_json(self.orders_path, _put)

    def list_orders(self) -> list[Order]:
        orders = FileStore.read_json(self.orders_path, default={})
        return [Order.model_validate(o) for o in orders.values()]

    def load_customer(self, customer_id: int) -> Optional[Customer]:
        data = FileStore.read_json(self.customers_path, default={}).get(str(customer_id))
        return Customer.model_validate(data) if data else None

    def save_customer(self, customer: Customer) -> None:
        self._put(self.customers_path, customer.id, customer)

    def load_address(self, address_id: Optional[int]) -> Optional[Address]:
        if not address_id:
            return None
        data = FileStore.read_json(self.addresses_path, default={}).get(str(address_id))
        return Address.model_validate(data) if data else None

    def save_address(self, address: Address) -> None:
        self._put(self.addresses_path, address.id, address)

    def load_cart(self, customer_id: int) -> Optional[ShoppingCart]:
        data = FileStore.read_json(self.carts_path, default={}).get(str(customer_id))
        return ShoppingCart.model_validate(data) if data else None

    def save_cart(self, cart: ShoppingCart) -> None:
        self._put(self.carts_path, cart.customer_id, cart)

    @staticmethod
    def _put(path: str, key: int, model: BaseModel) -> None:
        data = model.model_dump(mode="json")

        def _set(items: dict):
            items[str(key)] = data

        FileStore.update_json(path, _set)


class AttributeStore:
    """Key/value attributes attached to any host entity, keyed by entity type and id."""

    def __init__(self, data_dir: str):
        self.path = os.path.join(data_dir, "store", "generic_attributes.json")

    @staticmethod
    def _entity_key(entity: BaseModel) -> str:
        return f"{type(entity).__name__}:{entity.id}"

    def get_attribute(self, entity: BaseModel, key: str) -> Any:
        attributes = FileStore.read_json(self.path, default={})
        return attributes.get(self._entity_key(entity), {}).get(key)

    def set_attribute(self, entity: BaseModel, key: str, value: Any) -> None:
        """Store ``value`` under ``key``; ``None`` removes the attribute."""
        entity_key = self._entity_key(entity)

        def _set(attributes: dict):
            values = attributes.setdefault(entity_key, {})
            if value is None:
                values.pop(key, None)
            else:
                values[key] = value
            if not values:
                attributes.pop(entity_key, None)

        FileStore.update_json(self.path, _set)
