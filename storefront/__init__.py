"""
Storefront - async order lifecycle engine.

Complete integration of:
- Orders: placement, paid / delivered / canceled / refunded transitions
- Inventory: validate-then-commit stock under per-product locks
- Payments: gateway protocol, minor units, Stripe PaymentIntents
- Mail: order confirmation, status and refund notifications
- Auth: owner-or-admin access gate
- Faults: structured errors with status classification
- Config: layered YAML / .env / environment settings
"""

__version__ = "0.1.0"

from .auth import AccessGate, Identity
from .bootstrap import build_order_service
from .config import ConfigLoader, Settings
from .faults import (
    Fault,
    ForbiddenFault,
    InsufficientStockFault,
    InvalidTransitionFault,
    NotFoundFault,
    PaymentFault,
    ValidationFault,
)
from .orders import Order, OrderService, OrderStatus, PlacedOrder
from .products import Product, ProductService
from .store import MemoryRecordStore, RecordStore

__all__ = [
    "__version__",
    "AccessGate",
    "Identity",
    "build_order_service",
    "ConfigLoader",
    "Settings",
    "Fault",
    "ForbiddenFault",
    "InsufficientStockFault",
    "InvalidTransitionFault",
    "NotFoundFault",
    "PaymentFault",
    "ValidationFault",
    "Order",
    "OrderService",
    "OrderStatus",
    "PlacedOrder",
    "Product",
    "ProductService",
    "MemoryRecordStore",
    "RecordStore",
]
