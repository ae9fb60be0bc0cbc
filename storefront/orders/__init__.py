"""
Orders Module — placement and the order status lifecycle.

Components:
- Models: Order, OrderItem, OrderStatus, ShippingAddress, PaymentResult,
  PaymentConfirmation, RefundResult, PlacedOrder
- Inventory: StockLedger
- Services: OrderService
- Faults: OrderNotFoundFault, EmptyOrderFault
"""

from .models import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentConfirmation,
    PaymentResult,
    PlacedOrder,
    RefundResult,
    ShippingAddress,
)
from .faults import EmptyOrderFault, OrderNotFoundFault
from .inventory import StockLedger
from .services import OrderService

__all__ = [
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentConfirmation",
    "PaymentResult",
    "PlacedOrder",
    "RefundResult",
    "ShippingAddress",
    "EmptyOrderFault",
    "OrderNotFoundFault",
    "StockLedger",
    "OrderService",
]
