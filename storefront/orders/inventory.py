"""
Orders Module — Inventory

Stock debits and credits for orders. Every product touched by one call
is locked for the whole check-and-write, and all checks run before the
first write, so a failing line never leaves earlier lines debited.
"""

import logging
from typing import Mapping

from ..faults import InsufficientStockFault
from ..products import Product, ProductService
from ..store import KeyedLock

logger = logging.getLogger("storefront.orders.inventory")


class StockLedger:
    """Validate-then-commit stock movements over the product catalog."""

    def __init__(self, products: ProductService, locks: KeyedLock | None = None):
        self.products = products
        self.locks = locks if locks is not None else products.locks

    async def reserve(self, quantities: Mapping[str, int]) -> dict[str, Product]:
        """
        Debit every product by its quantity, or none of them.

        Returns:
            The debited products keyed by id

        Raises:
            ProductNotFoundFault: a product id does not exist
            InsufficientStockFault: a product has fewer units than requested
        """
        async with self.locks.hold(*quantities):
            loaded = {pid: await self.products.get(pid) for pid in quantities}

            for pid, quantity in quantities.items():
                product = loaded[pid]
                if not product.has_stock(quantity):
                    raise InsufficientStockFault(
                        product.name, product.count_in_stock, quantity, product_id=pid,
                    )

            committed: list[str] = []
            try:
                for pid, quantity in quantities.items():
                    loaded[pid].debit(quantity)
                    await self.products.save(loaded[pid])
                    committed.append(pid)
            except Exception:
                logger.error(f"Stock debit interrupted after {committed}; restoring")
                for pid in committed:
                    loaded[pid].credit(quantities[pid])
                    await self.products.save(loaded[pid])
                raise

        logger.debug(f"Reserved stock {dict(quantities)}")
        return loaded

    async def release(self, quantities: Mapping[str, int]) -> None:
        """Credit stock back. Products that no longer exist are skipped."""
        async with self.locks.hold(*quantities):
            for pid, quantity in quantities.items():
                product = await self.products.find(pid)
                if product is None:
                    logger.warning(f"Cannot restock missing product {pid} (+{quantity})")
                    continue
                product.credit(quantity)
                await self.products.save(product)

        logger.debug(f"Released stock {dict(quantities)}")
