"""
Orders Module — Models

An Order owns a snapshot of its items (name and unit price at placement
time) and references its owner and products by id only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from ..faults import ValidationFault
from ..utils import as_decimal, format_datetime, parse_datetime


class OrderStatus(str, Enum):
    PLACED = "Placed"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELED = "Canceled"
    REFUNDED = "Refunded"


# Statuses from which cancel is refused
NON_CANCELABLE = frozenset({
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELED,
    OrderStatus.REFUNDED,
})


@dataclass
class OrderItem:
    product_id: str
    name: str
    quantity: int
    price: Decimal
    image: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity <= 0:
            raise ValidationFault("Item quantity must be a positive integer", field="quantity")
        self.price = as_decimal(self.price, field="price")

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "price": self.price,
            "image": self.image,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OrderItem:
        return cls(
            product_id=str(data["product_id"]),
            name=data["name"],
            quantity=data["quantity"],
            price=data["price"],
            image=data.get("image"),
        )


@dataclass
class ShippingAddress:
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> ShippingAddress:
        data = data or {}
        return cls(
            street=data.get("street", ""),
            city=data.get("city", ""),
            state=data.get("state", ""),
            postal_code=data.get("postal_code", data.get("postalCode", "")),
            country=data.get("country", ""),
        )


@dataclass
class PaymentResult:
    id: str
    status: str
    update_time: Optional[str] = None
    email_address: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "update_time": self.update_time,
            "email_address": self.email_address,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Optional[PaymentResult]:
        if not data:
            return None
        return cls(
            id=data["id"],
            status=data["status"],
            update_time=data.get("update_time"),
            email_address=data.get("email_address"),
        )


@dataclass(frozen=True)
class PaymentConfirmation:
    """Payment details reported back by the gateway once the payer confirmed."""
    id: str
    status: str
    update_time: Optional[str] = None
    email_address: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> PaymentConfirmation:
        """
        Build from a gateway callback body.

        Accepts the payer email either flat (``email_address``) or nested
        under ``payer``.
        """
        if not payload or not payload.get("id"):
            raise ValidationFault("Payment confirmation requires an id", field="id")
        payer = payload.get("payer") or {}
        return cls(
            id=str(payload["id"]),
            status=str(payload.get("status", "")),
            update_time=payload.get("update_time"),
            email_address=payload.get("email_address") or payer.get("email_address"),
        )

    def to_result(self) -> PaymentResult:
        return PaymentResult(
            id=self.id,
            status=self.status,
            update_time=self.update_time,
            email_address=self.email_address,
        )


@dataclass
class RefundResult:
    id: str
    status: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "status": self.status}

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Optional[RefundResult]:
        if not data:
            return None
        return cls(id=data["id"], status=data["status"])


@dataclass
class Order:
    """
    A placed order and its status bundle.

    Price fields are supplied by the caller at placement and are never
    recomputed here.
    """
    id: str
    user_id: str
    order_items: list[OrderItem]
    shipping_address: ShippingAddress = field(default_factory=ShippingAddress)
    payment_method: str = ""
    items_price: Decimal = Decimal("0")
    tax_price: Decimal = Decimal("0")
    shipping_price: Decimal = Decimal("0")
    total_price: Decimal = Decimal("0")
    order_status: OrderStatus = OrderStatus.PLACED
    is_paid: bool = False
    paid_at: Optional[datetime] = None
    is_delivered: bool = False
    delivered_at: Optional[datetime] = None
    is_refunded: bool = False
    refunded_at: Optional[datetime] = None
    canceled_at: Optional[datetime] = None
    payment_result: Optional[PaymentResult] = None
    refund_result: Optional[RefundResult] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __str__(self):
        return f"Order {self.id} ({self.order_status.value})"

    @property
    def can_cancel(self) -> bool:
        return self.order_status not in NON_CANCELABLE

    @property
    def can_refund(self) -> bool:
        return self.is_paid and not self.is_refunded

    @property
    def stock_restored(self) -> bool:
        """Whether the items were already put back on the shelf."""
        return self.canceled_at is not None or self.order_status in (
            OrderStatus.CANCELED,
            OrderStatus.REFUNDED,
        )

    def quantities(self) -> dict[str, int]:
        """Total quantity per product id (repeated lines summed)."""
        totals: dict[str, int] = {}
        for item in self.order_items:
            totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity
        return totals

    # ── Serialization ────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "order_items": [i.to_dict() for i in self.order_items],
            "shipping_address": self.shipping_address.to_dict(),
            "payment_method": self.payment_method,
            "items_price": self.items_price,
            "tax_price": self.tax_price,
            "shipping_price": self.shipping_price,
            "total_price": self.total_price,
            "order_status": self.order_status.value,
            "is_paid": self.is_paid,
            "paid_at": format_datetime(self.paid_at),
            "is_delivered": self.is_delivered,
            "delivered_at": format_datetime(self.delivered_at),
            "is_refunded": self.is_refunded,
            "refunded_at": format_datetime(self.refunded_at),
            "canceled_at": format_datetime(self.canceled_at),
            "payment_result": self.payment_result.to_dict() if self.payment_result else None,
            "refund_result": self.refund_result.to_dict() if self.refund_result else None,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Order:
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            order_items=[OrderItem.from_dict(i) for i in data.get("order_items", [])],
            shipping_address=ShippingAddress.from_dict(data.get("shipping_address")),
            payment_method=data.get("payment_method", ""),
            items_price=as_decimal(data.get("items_price", 0), field="items_price"),
            tax_price=as_decimal(data.get("tax_price", 0), field="tax_price"),
            shipping_price=as_decimal(data.get("shipping_price", 0), field="shipping_price"),
            total_price=as_decimal(data.get("total_price", 0), field="total_price"),
            order_status=OrderStatus(data.get("order_status", OrderStatus.PLACED.value)),
            is_paid=bool(data.get("is_paid", False)),
            paid_at=parse_datetime(data.get("paid_at")),
            is_delivered=bool(data.get("is_delivered", False)),
            delivered_at=parse_datetime(data.get("delivered_at")),
            is_refunded=bool(data.get("is_refunded", False)),
            refunded_at=parse_datetime(data.get("refunded_at")),
            canceled_at=parse_datetime(data.get("canceled_at")),
            payment_result=PaymentResult.from_dict(data.get("payment_result")),
            refund_result=RefundResult.from_dict(data.get("refund_result")),
            created_at=parse_datetime(data.get("created_at")),
            updated_at=parse_datetime(data.get("updated_at")),
        )


@dataclass(frozen=True)
class PlacedOrder:
    """Result of placement: the order plus the secret the payer confirms with."""
    order: Order
    client_secret: Optional[str]
