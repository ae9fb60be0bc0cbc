"""
Products Module — catalog records, stock primitives and reviews.

Components:
- Models: Product, Review
- Services: ProductService
- Faults: ProductNotFoundFault
"""

from .models import Product, Review
from .services import ProductService
from .faults import ProductNotFoundFault

__all__ = ["Product", "Review", "ProductService", "ProductNotFoundFault"]
