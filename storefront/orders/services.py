"""
Orders Module — Services

Order placement and the status lifecycle (paid, delivered, canceled,
refunded), keeping product stock consistent with order state.

Integrates:
- StockLedger (per-product locked debit / credit)
- PaymentGateway (authorization and refund, bounded by a timeout)
- Notifier (confirmation / status / refund mail, failures suppressed)
- AccessGate (owner-or-admin on every read and mutation)
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, TypeVar, Union

from ..auth import AccessGate, Identity
from ..config import Settings
from ..faults import Fault, InvalidTransitionFault, PaymentFault, ValidationFault
from ..mail.notifier import Notifier
from ..payments import PaymentGateway
from ..products import ProductService
from ..store import KeyedLock, RecordStore
from ..users import find_user
from ..utils import as_decimal, utcnow
from .faults import EmptyOrderFault, OrderNotFoundFault
from .inventory import StockLedger
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

logger = logging.getLogger("storefront.orders")

COLLECTION = "orders"

T = TypeVar("T")


def _parse_quantity(raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int) or raw <= 0:
        raise ValidationFault("Item quantity must be a positive integer", field="quantity")
    return raw


def _parse_price(raw: Any, name: str) -> Any:
    value = as_decimal(raw, field=name)
    if value < 0:
        raise ValidationFault(f"'{name}' must not be negative", field=name)
    return value


class OrderService:
    """
    Order lifecycle engine.

    Collaborators are injected; nothing here reaches for a global client.

    Usage:
        ```python
        orders = OrderService(store, gateway, notifier, settings=settings)
        placed = await orders.place_order(identity, items, address, "Stripe", ...)
        await orders.mark_paid(placed.order.id, identity, payload)
        ```
    """

    def __init__(
        self,
        store: RecordStore,
        gateway: PaymentGateway,
        notifier: Optional[Notifier] = None,
        *,
        settings: Optional[Settings] = None,
        products: Optional[ProductService] = None,
        gate: Optional[AccessGate] = None,
        clock: Callable[[], Any] = utcnow,
    ):
        self.store = store
        self.gateway = gateway
        self.notifier = notifier
        self.settings = settings or Settings()
        self.products = products or ProductService(store)
        self.inventory = StockLedger(self.products, self.products.locks)
        self.gate = gate or AccessGate()
        self.clock = clock
        self._order_locks = KeyedLock()

    # ── Placement ────────────────────────────────────────────

    async def place_order(
        self,
        identity: Identity,
        order_items: Sequence[Mapping[str, Any]],
        shipping_address: Union[ShippingAddress, Mapping[str, Any], None] = None,
        payment_method: str = "",
        items_price: Any = 0,
        tax_price: Any = 0,
        shipping_price: Any = 0,
        total_price: Any = 0,
    ) -> PlacedOrder:
        """
        Validate stock, debit it, authorize payment, persist and notify.

        Each requested item is a mapping with ``product`` (or
        ``product_id``) and ``quantity``; ``name``, ``price`` and
        ``image`` override the product snapshot when given.

        Raises:
            ValidationFault: empty item list, bad quantity or price
            ProductNotFoundFault: unknown product id
            InsufficientStockFault: not enough stock for some product
            PaymentFault: authorization failed or timed out
        """
        self.gate.require_active(identity)
        if not order_items:
            raise EmptyOrderFault()

        requests = []
        quantities: dict[str, int] = {}
        for raw in order_items:
            product_id = raw.get("product") or raw.get("product_id")
            if not product_id:
                raise ValidationFault("Order item is missing a product", field="product")
            product_id = str(product_id)
            quantity = _parse_quantity(raw.get("quantity"))
            price = _parse_price(raw["price"], "price") if raw.get("price") is not None else None
            requests.append((product_id, quantity, raw.get("name"), price, raw.get("image")))
            quantities[product_id] = quantities.get(product_id, 0) + quantity

        prices = {
            "items_price": _parse_price(items_price, "items_price"),
            "tax_price": _parse_price(tax_price, "tax_price"),
            "shipping_price": _parse_price(shipping_price, "shipping_price"),
            "total_price": _parse_price(total_price, "total_price"),
        }
        if not isinstance(shipping_address, ShippingAddress):
            shipping_address = ShippingAddress.from_dict(shipping_address)

        products = await self.inventory.reserve(quantities)

        items = [
            OrderItem(
                product_id=product_id,
                name=name or products[product_id].name,
                quantity=quantity,
                price=price if price is not None else products[product_id].price,
                image=image or products[product_id].image,
            )
            for product_id, quantity, name, price, image in requests
        ]

        currency = self.settings.payment.currency
        idempotency_key = f"authorize-{uuid.uuid4().hex}"
        try:
            authorization = await self._call_gateway(
                self.gateway.create_authorization(
                    prices["total_price"], currency, idempotency_key=idempotency_key,
                ),
                operation="authorize",
                failure="Payment authorization failed",
            )
        except PaymentFault as e:
            if isinstance(e.__cause__, asyncio.TimeoutError):
                # the gateway may still complete the request after we gave up
                logger.error(
                    f"Authorization for {identity.id} timed out and may be orphaned "
                    f"(idempotency key {idempotency_key})"
                )
            if self.settings.orders.rollback_stock_on_payment_failure:
                logger.warning(f"Authorization failed for {identity.id}; restoring stock {quantities}")
                await self.inventory.release(quantities)
            raise

        now = self.clock()
        order = Order(
            id="",
            user_id=identity.id,
            order_items=items,
            shipping_address=shipping_address,
            payment_method=payment_method,
            order_status=OrderStatus.PLACED,
            is_paid=False,
            payment_result=PaymentResult(id=authorization.id, status="pending"),
            created_at=now,
            updated_at=now,
            **prices,
        )
        try:
            record = await self.store.create(COLLECTION, order.to_dict())
        except Exception:
            logger.error(
                f"Failed to persist order for {identity.id}; "
                f"authorization {authorization.id} is orphaned, restoring stock"
            )
            await self.inventory.release(quantities)
            raise
        order = Order.from_dict(record)

        logger.info(f"Order {order.id} placed by {identity.id} ({order.total_price} {currency})")
        await self._notify("send_order_confirmation", order)
        return PlacedOrder(order=order, client_secret=authorization.client_secret)

    # ── Transitions ──────────────────────────────────────────

    async def mark_paid(
        self,
        order_id: str,
        identity: Identity,
        confirmation: Union[PaymentConfirmation, Mapping[str, Any]],
    ) -> Order:
        """Record the gateway's payment confirmation. Repeats with the same id are no-ops."""
        if not isinstance(confirmation, PaymentConfirmation):
            confirmation = PaymentConfirmation.from_payload(dict(confirmation))

        async with self._order_locks.hold(order_id):
            order = await self._load_for(order_id, identity, "pay for")
            if order.is_paid and order.payment_result and order.payment_result.id == confirmation.id:
                logger.info(f"Order {order.id} already paid with {confirmation.id}")
                return order

            now = self.clock()
            order.is_paid = True
            order.paid_at = now
            order.payment_result = confirmation.to_result()
            order = await self._save(order, now)

        logger.info(f"Order {order.id} paid ({confirmation.id}, {confirmation.status})")
        await self._notify("send_order_status_update", order)
        return order

    async def mark_delivered(self, order_id: str, identity: Identity) -> Order:
        async with self._order_locks.hold(order_id):
            order = await self._load_for(order_id, identity, "deliver")
            if order.stock_restored:
                raise InvalidTransitionFault(
                    "Order cannot be delivered",
                    from_status=order.order_status.value,
                    operation="deliver",
                )
            if self.settings.orders.require_paid_for_delivery and not order.is_paid:
                raise InvalidTransitionFault(
                    "Order has not been paid",
                    from_status=order.order_status.value,
                    operation="deliver",
                )

            now = self.clock()
            order.is_delivered = True
            order.delivered_at = now
            order.order_status = OrderStatus.DELIVERED
            order = await self._save(order, now)

        logger.info(f"Order {order.id} delivered")
        await self._notify("send_order_status_update", order)
        return order

    async def cancel_order(self, order_id: str, identity: Identity) -> Order:
        """
        Cancel and restock. Does not refund.

        Raises:
            InvalidTransitionFault: shipped, delivered, or already canceled/refunded
        """
        async with self._order_locks.hold(order_id):
            order = await self._load_for(order_id, identity, "cancel")
            if not order.can_cancel:
                raise InvalidTransitionFault(
                    "Order cannot be canceled",
                    from_status=order.order_status.value,
                    operation="cancel",
                )

            await self.inventory.release(order.quantities())

            now = self.clock()
            order.order_status = OrderStatus.CANCELED
            order.canceled_at = now
            order = await self._save(order, now)

        logger.info(f"Order {order.id} canceled by {identity.id}")
        await self._notify("send_order_status_update", order)
        return order

    async def refund_order(self, order_id: str, identity: Identity) -> Order:
        """
        Refund through the gateway, save the order as refunded, then restock.

        The order lock is held from the guard through the save, so two
        concurrent refunds issue one gateway refund between them.

        Raises:
            InvalidTransitionFault: unpaid or already refunded
            PaymentFault: gateway refused or timed out (order untouched)
        """
        async with self._order_locks.hold(order_id):
            order = await self._load_for(order_id, identity, "refund")
            if not order.can_refund or order.payment_result is None:
                raise InvalidTransitionFault(
                    "Order cannot be refunded",
                    from_status=order.order_status.value,
                    operation="refund",
                )

            receipt = await self._call_gateway(
                self.gateway.create_refund(order.payment_result.id, order.total_price),
                operation="refund",
                failure="Refund processing failed",
            )

            restock = not order.stock_restored
            now = self.clock()
            order.is_refunded = True
            order.refunded_at = now
            order.order_status = OrderStatus.REFUNDED
            order.refund_result = RefundResult(id=receipt.id, status=receipt.status)

            try:
                order = await self._save(order, now)
            except Exception:
                logger.error(f"Refund {receipt.id} issued but order {order.id} was not saved")
                raise
            if restock:
                await self.inventory.release(order.quantities())

        logger.info(f"Order {order.id} refunded ({receipt.id}, {receipt.status})")
        await self._notify("send_refund_confirmation", order)
        return order

    # ── Queries ──────────────────────────────────────────────

    async def get_order(self, order_id: str, identity: Identity) -> Order:
        return await self._load_for(order_id, identity, "view")

    async def list_my_orders(self, identity: Identity) -> list[Order]:
        """The caller's orders, newest first."""
        self.gate.require_active(identity)
        rows = await self.store.find(COLLECTION, {"user_id": identity.id}, sort=["-created_at"])
        return [Order.from_dict(r) for r in rows]

    # ── Internals ────────────────────────────────────────────

    async def _load(self, order_id: str) -> Order:
        data = await self.store.find_by_id(COLLECTION, str(order_id))
        if not data:
            raise OrderNotFoundFault(str(order_id))
        return Order.from_dict(data)

    async def _load_for(self, order_id: str, identity: Identity, action: str) -> Order:
        order = await self._load(order_id)
        self.gate.require_owner_or_admin(identity, order.user_id, action=action)
        return order

    async def _save(self, order: Order, now: Any) -> Order:
        order.updated_at = now
        await self.store.save(COLLECTION, order.to_dict())
        return order

    async def _call_gateway(self, call: Awaitable[T], *, operation: str, failure: str) -> T:
        timeout = self.settings.payment.timeout
        try:
            return await asyncio.wait_for(call, timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Payment gateway {operation} timed out after {timeout}s")
            raise PaymentFault(
                f"{failure}: gateway timed out after {timeout}s",
                operation=operation,
                cause=e,
            ) from e
        except Fault:
            raise
        except Exception as e:
            logger.error(f"Payment gateway {operation} error: {e}")
            raise PaymentFault(f"{failure}: {e}", operation=operation, cause=e) from e

    async def _notify(self, kind: str, order: Order) -> None:
        """Send a notification to the order owner. Failures are logged, never raised."""
        if self.notifier is None:
            return
        try:
            user = await find_user(self.store, order.user_id)
            if user is None:
                logger.warning(f"Skipping {kind} for order {order.id}: user {order.user_id} not found")
                return
            await asyncio.wait_for(
                getattr(self.notifier, kind)(order, user),
                timeout=self.settings.mail.timeout,
            )
        except Exception as e:
            logger.warning(f"Notification {kind} failed for order {order.id}: {e}")
