"""
Products Module — Models

Catalog records. Stock is only ever changed through ``debit`` and
``credit`` so the non-negative invariant lives in one place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from ..faults import InsufficientStockFault, ValidationFault
from ..utils import as_decimal


@dataclass
class Review:
    user_id: str
    name: str
    rating: int
    comment: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "rating": self.rating,
            "comment": self.comment,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Review:
        return cls(
            user_id=str(data["user_id"]),
            name=data.get("name", ""),
            rating=int(data["rating"]),
            comment=data.get("comment", ""),
        )


@dataclass
class Product:
    """
    A catalog product.

    ``rating`` and ``num_reviews`` are derived from ``reviews`` and never
    stored independently.
    """
    id: str
    name: str
    price: Decimal = Decimal("0")
    count_in_stock: int = 0
    reviews: list[Review] = field(default_factory=list)
    image: Optional[str] = None

    def __post_init__(self):
        self.price = as_decimal(self.price, field="price")
        if self.price < 0:
            raise ValidationFault("Product price must not be negative", field="price")
        if isinstance(self.count_in_stock, bool) or not isinstance(self.count_in_stock, int):
            raise ValidationFault("countInStock must be an integer", field="count_in_stock")
        if self.count_in_stock < 0:
            raise ValidationFault("countInStock must not be negative", field="count_in_stock")

    def __str__(self):
        return f"Product {self.name} ({self.id})"

    @property
    def num_reviews(self) -> int:
        return len(self.reviews)

    @property
    def rating(self) -> Decimal:
        if not self.reviews:
            return Decimal("0")
        total = Decimal(sum(r.rating for r in self.reviews))
        return (total / len(self.reviews)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    # ── Stock ────────────────────────────────────────────────

    def has_stock(self, quantity: int) -> bool:
        return self.count_in_stock >= quantity

    def debit(self, quantity: int) -> None:
        if not self.has_stock(quantity):
            raise InsufficientStockFault(
                self.name, self.count_in_stock, quantity, product_id=self.id,
            )
        self.count_in_stock -= quantity

    def credit(self, quantity: int) -> None:
        self.count_in_stock += quantity

    # ── Serialization ────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "count_in_stock": self.count_in_stock,
            "reviews": [r.to_dict() for r in self.reviews],
            "rating": self.rating,
            "num_reviews": self.num_reviews,
            "image": self.image,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Product:
        return cls(
            id=str(data["id"]),
            name=data["name"],
            price=data.get("price", Decimal("0")),
            count_in_stock=data.get("count_in_stock", 0),
            reviews=[Review.from_dict(r) for r in data.get("reviews", [])],
            image=data.get("image"),
        )
