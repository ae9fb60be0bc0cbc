"""
Products Module — Services

Product lookups, persistence and reviews over the record store.
"""

import logging
from typing import Optional

from ..auth import Identity
from ..faults import ValidationFault
from ..store import KeyedLock, RecordStore
from .faults import ProductNotFoundFault
from .models import Product, Review

logger = logging.getLogger("storefront.products")

COLLECTION = "products"


class ProductService:
    """
    Catalog access used by the order engine and review flow.

    Every read-modify-write of a product record holds that product's
    lock from ``locks``; the StockLedger shares the same KeyedLock.
    """

    def __init__(self, store: RecordStore, locks: Optional[KeyedLock] = None):
        self.store = store
        self.locks = locks if locks is not None else KeyedLock()

    async def find(self, product_id: str) -> Optional[Product]:
        data = await self.store.find_by_id(COLLECTION, str(product_id))
        return Product.from_dict(data) if data else None

    async def get(self, product_id: str) -> Product:
        product = await self.find(product_id)
        if product is None:
            raise ProductNotFoundFault(str(product_id))
        return product

    async def save(self, product: Product) -> Product:
        await self.store.save(COLLECTION, product.to_dict())
        return product

    async def top_rated(self, limit: int = 3) -> list[Product]:
        rows = await self.store.find(COLLECTION, sort=["-rating"], limit=limit)
        return [Product.from_dict(r) for r in rows]

    # ── Reviews ──────────────────────────────────────────────

    async def add_review(
        self,
        product_id: str,
        identity: Identity,
        rating: int,
        comment: str = "",
        name: Optional[str] = None,
    ) -> Product:
        """
        Add one review per user and refresh the derived rating.

        Raises:
            ProductNotFoundFault: unknown product
            ValidationFault: rating outside 1..5 or user already reviewed
        """
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationFault("Rating must be an integer between 1 and 5", field="rating")

        async with self.locks.hold(product_id):
            product = await self.get(product_id)
            if any(r.user_id == identity.id for r in product.reviews):
                raise ValidationFault("Product already reviewed")

            product.reviews.append(Review(
                user_id=identity.id,
                name=name or identity.get_attribute("name", ""),
                rating=rating,
                comment=comment,
            ))
            await self.save(product)
        logger.info(f"Review added to product {product.id} by {identity.id} (rating now {product.rating})")
        return product
