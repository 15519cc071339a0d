"""
Deterministic storefront data for the Laybuy gateway.
Generates customers, addresses, shopping carts and pending orders whose
totals exercise both sides of the price breakdown threshold.
"""

import os
import random
from datetime import datetime, timedelta
from decimal import Decimal

from laybuy_gateway.services.store import OrderStore
from laybuy_gateway.shared.models import (
    Address,
    CheckoutAttributeValue,
    Customer,
    Order,
    OrderItem,
    ShoppingCart,
)

SEED = int(os.environ.get("SEED", 42))
DATA_DIR = os.environ.get("DATA_DIR", "/app/data")
rng = random.Random(SEED)

# === Data Tables ===

FIRST_NAMES = ["Alice", "Bob", "Charlie", "Diana", "Eve", "Frank",
               "Grace", "Henry", "Iris", "Jack", "Karen", "Leo"]

LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones",
              "Garcia", "Miller", "Davis", "Wilson", "Taylor"]

CITIES = [
    ("Auckland", "Auckland", "1010", "NZ"),
    ("Wellington", "Wellington", "6011", "NZ"),
    ("Sydney", "NSW", "2000", "AU"),
    ("Melbourne", "VIC", "3000", "AU"),
    ("Brisbane", "QLD", "4000", "AU"),
]

PRODUCTS = [
    (1, "Merino Throw", "MER-THROW", Decimal("129.00")),
    (2, "Walnut Side Table", "WAL-SIDE", Decimal("349.00")),
    (3, "Linen Duvet Set", "LIN-DUVET", Decimal("289.50")),
    (4, "Espresso Machine", "ESP-PRO", Decimal("1199.00")),
    (5, "Leather Armchair", None, Decimal("1650.00")),
    (6, "Ceramic Vase", "CER-VASE", Decimal("45.90")),
]

SHIPPING_METHODS = [("Ground", Decimal("15.00")), ("Express", Decimal("29.00")), (None, Decimal("0"))]

TAX_RATE = Decimal("0.15")


def generate_customers(n: int = 12) -> list:
    customers = []
    for i in range(n):
        first = rng.choice(FIRST_NAMES)
        last = rng.choice(LAST_NAMES)
        customers.append(Customer(
            id=i + 1,
            email=f"{first.lower()}.{last.lower()}{i}@example.com",
            first_name=first,
            last_name=last,
            phone=f"+64 21 {rng.randint(100, 999)} {rng.randint(1000, 9999)}",
        ))
    return customers


def generate_address(address_id: int, customer: Customer) -> Address:
    city, state, postcode, country = rng.choice(CITIES)
    return Address(
        id=address_id,
        first_name=customer.first_name,
        last_name=customer.last_name,
        email=customer.email,
        phone_number=customer.phone,
        address1=f"{rng.randint(1, 250)} {rng.choice(['Queen', 'King', 'High', 'Victoria'])} Street",
        city=city,
        county=city,
        state_province=state,
        zip_postal_code=postcode,
        country=country,
    )


def generate_order(order_id: int, customer: Customer, billing_id: int, shipping_id: int,
                   created: datetime) -> Order:
    items = []
    for line, (product_id, name, sku, price) in enumerate(rng.sample(PRODUCTS, rng.randint(1, 3))):
        items.append(OrderItem(
            id=order_id * 10 + line,
            product_id=product_id,
            product_name=name,
            sku=sku,
            unit_price_excl_tax=price,
            quantity=rng.randint(1, 2),
        ))

    attributes = []
    if rng.random() < 0.3:
        attributes.append(CheckoutAttributeValue(
            attribute_name="Gift wrapping", value_name="Yes", price=Decimal("5.00"),
        ))

    shipping_method, shipping = rng.choice(SHIPPING_METHODS)
    subtotal = sum((i.unit_price_excl_tax * i.quantity for i in items), Decimal("0"))
    subtotal += sum((a.price for a in attributes), Decimal("0"))
    tax = ((subtotal + shipping) * TAX_RATE).quantize(Decimal("0.01"))
    total = subtotal + shipping + tax

    # some orders carry a discount or gift card
    if rng.random() < 0.25:
        total -= Decimal(rng.choice([10, 20, 50]))

    return Order(
        id=order_id,
        custom_order_number=f"LB-{order_id:05d}",
        customer_id=customer.id,
        billing_address_id=billing_id,
        shipping_address_id=shipping_id if shipping_method else None,
        order_total=total,
        order_tax=tax,
        order_shipping_excl_tax=shipping,
        shipping_method=shipping_method,
        items=items,
        checkout_attributes=attributes,
        created_at=created,
        updated_at=created,
    )


def seed_all():
    print("Generating storefront data with seed:", SEED)
    store = OrderStore(DATA_DIR)

    customers = generate_customers()
    address_id = 0
    order_id = 1000
    base_time = datetime(2026, 2, 1, 8, 0, 0)

    for customer in customers:
        store.save_customer(customer)

        address_id += 1
        billing = generate_address(address_id, customer)
        store.save_address(billing)

        shipping = billing
        if rng.random() < 0.3:
            address_id += 1
            shipping = generate_address(address_id, customer)
            store.save_address(shipping)

        store.save_cart(ShoppingCart(
            customer_id=customer.id,
            item_count=rng.randint(0, 3),
            total=Decimal(rng.choice(["0", "89.90", "720.00", "1440.00", "1500.00", "2399.00"])),
        ))

        for _ in range(rng.randint(1, 3)):
            order_id += 1
            created = base_time + timedelta(hours=rng.randint(0, 200), minutes=rng.randint(0, 59))
            store.update_order(generate_order(order_id, customer, billing.id, shipping.id, created))

    print(f"  Customers: {len(customers)}")
    print(f"  Addresses: {address_id}")
    print(f"  Orders: {order_id - 1000}")
    print("Seed complete.")


if __name__ == "__main__":
    seed_all()
