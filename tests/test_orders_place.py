"""
Tests for order placement: validation, validate-then-commit stock,
payment authorization and its failure paths.
"""

import asyncio
from decimal import Decimal

import pytest

from conftest import order_kwargs, stock_of
from storefront.config import OrderSettings, PaymentSettings, Settings
from storefront.faults import (
    ForbiddenFault,
    InsufficientStockFault,
    PaymentFault,
    ValidationFault,
)
from storefront.auth import Identity, IdentityStatus
from storefront.orders import OrderService, OrderStatus
from storefront.products import ProductNotFoundFault


class FailingCreateStore:
    """Wraps a store so that creating orders fails."""

    def __init__(self, inner):
        self.inner = inner

    def __getattr__(self, name):
        return getattr(self.inner, name)

    async def create(self, collection, fields):
        if collection == "orders":
            raise RuntimeError("disk full")
        return await self.inner.create(collection, fields)


class YieldingStore:
    """Wraps a store so that every read suspends once."""

    def __init__(self, inner):
        self.inner = inner

    def __getattr__(self, name):
        return getattr(self.inner, name)

    async def find_by_id(self, collection, record_id):
        await asyncio.sleep(0)
        return await self.inner.find_by_id(collection, record_id)


class TestPlaceOrder:

    @pytest.mark.asyncio
    async def test_place_debits_stock_and_persists(self, orders, store, alice):
        placed = await orders.place_order(alice, **order_kwargs(("p1", 3), total="59.97"))

        order = placed.order
        assert order.id
        assert order.user_id == "alice"
        assert order.order_status == OrderStatus.PLACED
        assert order.is_paid is False
        assert order.payment_result.status == "pending"
        assert order.payment_result.id == "pi_test_1"
        assert placed.client_secret == "pi_test_1_secret"
        assert await stock_of(store, "p1") == 2

        stored = await orders.get_order(order.id, alice)
        assert stored.total_price == Decimal("59.97")
        assert stored.created_at is not None

    @pytest.mark.asyncio
    async def test_item_snapshot_uses_product_name_and_price(self, orders, alice):
        placed = await orders.place_order(alice, **order_kwargs(("p1", 1), ("p2", 1)))

        items = {i.product_id: i for i in placed.order.order_items}
        assert items["p1"].name == "Keyboard"
        assert items["p1"].price == Decimal("19.99")
        assert items["p2"].price == Decimal("5.50")

    @pytest.mark.asyncio
    async def test_caller_supplied_snapshot_wins(self, orders, alice):
        kwargs = order_kwargs(("p1", 1))
        kwargs["order_items"][0].update(name="Keyboard (promo)", price="9.99")

        placed = await orders.place_order(alice, **kwargs)

        assert placed.order.order_items[0].name == "Keyboard (promo)"
        assert placed.order.order_items[0].price == Decimal("9.99")

    @pytest.mark.asyncio
    async def test_authorizes_total_in_configured_currency(self, store, gateway, notifier, alice):
        settings = Settings(payment=PaymentSettings(currency="eur"))
        orders = OrderService(store, gateway, notifier, settings=settings)

        await orders.place_order(alice, **order_kwargs(("p1", 1), total="19.99"))

        call = gateway.authorizations[0]
        assert call.currency == "eur"
        assert call.minor_units == 1999
        assert call.idempotency_key.startswith("authorize-")

    @pytest.mark.asyncio
    async def test_sends_confirmation_to_owner(self, orders, notifier, alice):
        placed = await orders.place_order(alice, **order_kwargs(("p1", 1)))
        assert notifier.calls == [("confirmation", placed.order.id, "alice")]

    @pytest.mark.asyncio
    async def test_empty_items_rejected(self, orders, gateway, alice):
        kwargs = order_kwargs()
        with pytest.raises(ValidationFault) as exc_info:
            await orders.place_order(alice, **kwargs)
        assert exc_info.value.message == "No order items"
        assert gateway.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", True, None])
    async def test_bad_quantity_rejected(self, orders, store, alice, quantity):
        with pytest.raises(ValidationFault):
            await orders.place_order(alice, **order_kwargs(("p1", quantity)))
        assert await stock_of(store, "p1") == 5

    @pytest.mark.asyncio
    async def test_negative_total_rejected(self, orders, store, alice):
        with pytest.raises(ValidationFault):
            await orders.place_order(alice, **order_kwargs(("p1", 1), total="-1.00"))
        assert await stock_of(store, "p1") == 5

    @pytest.mark.asyncio
    async def test_missing_product_names_id(self, orders, store, alice):
        with pytest.raises(ProductNotFoundFault) as exc_info:
            await orders.place_order(alice, **order_kwargs(("p1", 1), ("nope", 1)))
        assert "nope" in exc_info.value.message
        assert exc_info.value.status_code == 404
        assert await stock_of(store, "p1") == 5

    @pytest.mark.asyncio
    async def test_insufficient_stock_on_later_item_changes_nothing(self, orders, store, gateway, alice):
        with pytest.raises(InsufficientStockFault) as exc_info:
            await orders.place_order(alice, **order_kwargs(("p1", 2), ("p2", 3)))

        assert "Mouse" in exc_info.value.message
        assert exc_info.value.metadata["available"] == 2
        assert await stock_of(store, "p1") == 5
        assert await stock_of(store, "p2") == 2
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_repeated_product_quantities_are_summed(self, orders, store, alice):
        with pytest.raises(InsufficientStockFault):
            await orders.place_order(alice, **order_kwargs(("p2", 1), ("p2", 2)))
        assert await stock_of(store, "p2") == 2

        await orders.place_order(alice, **order_kwargs(("p2", 1), ("p2", 1)))
        assert await stock_of(store, "p2") == 0

    @pytest.mark.asyncio
    async def test_inactive_identity_rejected(self, orders):
        suspended = Identity(id="alice", status=IdentityStatus.SUSPENDED)
        with pytest.raises(ForbiddenFault):
            await orders.place_order(suspended, **order_kwargs(("p1", 1)))


class TestPlacementPaymentFailure:

    @pytest.mark.asyncio
    async def test_gateway_failure_rolls_back_stock(self, orders, store, gateway, notifier, alice):
        gateway.fail_next_authorization = PaymentFault("card declined", operation="authorize")

        with pytest.raises(PaymentFault):
            await orders.place_order(alice, **order_kwargs(("p1", 3), ("p2", 1)))

        assert await stock_of(store, "p1") == 5
        assert await stock_of(store, "p2") == 2
        assert await store.count("orders") == 0
        assert notifier.calls == []

    @pytest.mark.asyncio
    async def test_rollback_can_be_disabled(self, store, gateway, alice):
        settings = Settings(orders=OrderSettings(rollback_stock_on_payment_failure=False))
        orders = OrderService(store, gateway, settings=settings)
        gateway.fail_next_authorization = PaymentFault("card declined")

        with pytest.raises(PaymentFault):
            await orders.place_order(alice, **order_kwargs(("p1", 3)))

        assert await stock_of(store, "p1") == 2
        assert await store.count("orders") == 0

    @pytest.mark.asyncio
    async def test_unexpected_gateway_error_becomes_payment_fault(self, orders, store, gateway, alice):
        gateway.fail_next_authorization = ConnectionError("connection reset")

        with pytest.raises(PaymentFault) as exc_info:
            await orders.place_order(alice, **order_kwargs(("p1", 1)))

        assert "connection reset" in exc_info.value.message
        assert exc_info.value.status_code == 502
        assert await stock_of(store, "p1") == 5

    @pytest.mark.asyncio
    async def test_gateway_timeout_becomes_payment_fault(self, store, gateway, alice):
        settings = Settings(payment=PaymentSettings(timeout=0.01))
        orders = OrderService(store, gateway, settings=settings)
        gateway.authorization_delay = 1.0

        with pytest.raises(PaymentFault) as exc_info:
            await orders.place_order(alice, **order_kwargs(("p1", 1)))

        assert "timed out" in exc_info.value.message
        assert await stock_of(store, "p1") == 5

    @pytest.mark.asyncio
    async def test_timed_out_authorization_is_logged_with_its_key(self, store, gateway, alice, caplog):
        settings = Settings(payment=PaymentSettings(timeout=0.01))
        orders = OrderService(store, gateway, settings=settings)
        gateway.authorization_delay = 1.0

        with caplog.at_level("ERROR", logger="storefront.orders"):
            with pytest.raises(PaymentFault):
                await orders.place_order(alice, **order_kwargs(("p1", 1)))

        key = gateway.authorizations[0].idempotency_key
        assert key.startswith("authorize-")
        assert any("may be orphaned" in r.message and key in r.message for r in caplog.records)

    @pytest.mark.asyncio
    async def test_persist_failure_restores_stock(self, store, gateway, alice):
        orders = OrderService(FailingCreateStore(store), gateway)

        with pytest.raises(RuntimeError):
            await orders.place_order(alice, **order_kwargs(("p1", 2)))

        assert await stock_of(store, "p1") == 5
        assert len(gateway.authorizations) == 1


class TestConcurrentPlacement:

    @pytest.mark.asyncio
    async def test_never_oversells(self, orders, store, gateway, alice):
        gateway.authorization_delay = 0.01

        results = await asyncio.gather(
            *(orders.place_order(alice, **order_kwargs(("p1", 2))) for _ in range(5)),
            return_exceptions=True,
        )

        placed = [r for r in results if not isinstance(r, Exception)]
        failed = [r for r in results if isinstance(r, Exception)]
        assert len(placed) == 2
        assert all(isinstance(f, InsufficientStockFault) for f in failed)
        assert await stock_of(store, "p1") == 1

    @pytest.mark.asyncio
    async def test_overlapping_multi_product_orders_do_not_deadlock(self, orders, store, alice, bob):
        await asyncio.wait_for(
            asyncio.gather(
                orders.place_order(alice, **order_kwargs(("p1", 1), ("p2", 1))),
                orders.place_order(bob, **order_kwargs(("p2", 1), ("p1", 1))),
            ),
            timeout=2,
        )
        assert await stock_of(store, "p1") == 3
        assert await stock_of(store, "p2") == 0

    @pytest.mark.asyncio
    async def test_review_during_placement_keeps_debit(self, store, gateway, alice, bob):
        orders = OrderService(YieldingStore(store), gateway)

        await asyncio.gather(
            orders.place_order(alice, **order_kwargs(("p1", 3))),
            orders.products.add_review("p1", bob, 4, "clicky"),
        )

        assert await stock_of(store, "p1") == 2
        product = await orders.products.get("p1")
        assert product.num_reviews == 1
