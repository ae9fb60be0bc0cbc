"""
Shared test fixtures for the Storefront test suite.
"""

from decimal import Decimal

import pytest

from storefront.auth import Identity
from storefront.config import Settings
from storefront.orders import OrderService
from storefront.store import MemoryRecordStore
from storefront.testing import (
    FakePaymentGateway,
    RecordingNotifier,
    make_product,
    make_user,
    seed_products,
    seed_users,
)


@pytest.fixture
def store():
    store = MemoryRecordStore()
    seed_products(
        store,
        make_product("p1", name="Keyboard", price="19.99", count_in_stock=5),
        make_product("p2", name="Mouse", price="5.50", count_in_stock=2),
        make_product("p3", name="Monitor", price="149.00", count_in_stock=0),
    )
    seed_users(
        store,
        make_user("alice", first_name="Alice", last_name="Liddell"),
        make_user("bob"),
        make_user("root", role="admin"),
    )
    return store


@pytest.fixture
def gateway():
    return FakePaymentGateway()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def orders(store, gateway, notifier, settings):
    return OrderService(store, gateway, notifier, settings=settings)


@pytest.fixture
def alice():
    return Identity.user("alice")


@pytest.fixture
def bob():
    return Identity.user("bob")


@pytest.fixture
def admin():
    return Identity.admin("root")


def order_kwargs(*items, total="25.49"):
    """Placement arguments for ``items`` given as (product_id, quantity) pairs."""
    return {
        "order_items": [{"product": pid, "quantity": qty} for pid, qty in items],
        "shipping_address": {
            "street": "1 Rabbit Hole",
            "city": "Oxford",
            "state": "OX",
            "postal_code": "OX1 1AA",
            "country": "UK",
        },
        "payment_method": "Stripe",
        "items_price": Decimal(total),
        "tax_price": Decimal("0"),
        "shipping_price": Decimal("0"),
        "total_price": Decimal(total),
    }


async def stock_of(store, product_id):
    record = await store.find_by_id("products", product_id)
    return record["count_in_stock"]
