"""
Storefront Testing - Record fixtures.

Builders for seeding a MemoryRecordStore with products and users.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from ..products import Product
from ..products.services import COLLECTION as PRODUCTS
from ..store import MemoryRecordStore
from ..users import COLLECTION as USERS, User


def make_product(product_id: str, *, name: str | None = None, price: Any = "10.00",
                 count_in_stock: int = 10, **extra: Any) -> Product:
    return Product(
        id=product_id,
        name=name or f"Product {product_id}",
        price=Decimal(str(price)),
        count_in_stock=count_in_stock,
        **extra,
    )


def make_user(user_id: str, *, email: str | None = None, role: str = "user", **extra: Any) -> User:
    return User(id=user_id, email=email or f"{user_id}@example.com", role=role, **extra)


def seed_products(store: MemoryRecordStore, *products: Product) -> None:
    store.seed(PRODUCTS, [p.to_dict() for p in products])


def seed_users(store: MemoryRecordStore, *users: User) -> None:
    store.seed(USERS, [u.to_dict() for u in users])
