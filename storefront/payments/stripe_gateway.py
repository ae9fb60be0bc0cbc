"""
Stripe Gateway — PaymentIntent authorizations and refunds via the stripe SDK.

The SDK is synchronous; calls run in a worker thread so the event loop
stays free. The API key is passed per request instead of being set on the
module-global ``stripe.api_key``.

Dependencies:
    pip install stripe
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Any, Optional

import stripe

from ..faults import ConfigFault, PaymentFault
from .gateway import PaymentAuthorization, RefundReceipt, to_minor_units

logger = logging.getLogger("storefront.payments.stripe")

# Refund statuses Stripe reports for refunds that did not go through
_FAILED_REFUND_STATUSES = frozenset({"failed", "canceled"})


class StripeGateway:
    """
    PaymentGateway backed by Stripe PaymentIntents.

    Usage::

        gateway = StripeGateway(api_key="sk_test_...", currency="usd")
        auth = await gateway.create_authorization(Decimal("19.99"), "usd")
        # auth.client_secret goes to the browser to confirm the payment
    """

    def __init__(
        self,
        api_key: str,
        *,
        currency: str = "usd",
        api_version: Optional[str] = None,
        client: Any = stripe,
    ):
        if not api_key:
            raise ConfigFault("payment.api_key", "a Stripe secret key is required")
        self.api_key = api_key
        self.currency = currency
        self.api_version = api_version
        self._stripe = client

    def _request_options(self, **extra: Any) -> dict[str, Any]:
        options: dict[str, Any] = {"api_key": self.api_key, **extra}
        if self.api_version:
            options["stripe_version"] = self.api_version
        return options

    async def create_authorization(
        self,
        amount: Decimal,
        currency: Optional[str] = None,
        *,
        idempotency_key: Optional[str] = None,
    ) -> PaymentAuthorization:
        minor = to_minor_units(amount)
        currency = (currency or self.currency).lower()
        extra = {"idempotency_key": idempotency_key} if idempotency_key else {}
        try:
            intent = await asyncio.to_thread(
                self._stripe.PaymentIntent.create,
                amount=minor,
                currency=currency,
                **self._request_options(**extra),
            )
        except stripe.StripeError as e:
            logger.error(f"Payment intent creation error: {e}")
            raise PaymentFault(
                f"Payment authorization failed: {e.user_message or e}",
                operation="authorize",
                cause=e,
            ) from e

        logger.info(f"Created payment intent {intent.id} for {minor} {currency}")
        return PaymentAuthorization(
            id=intent.id,
            client_secret=intent.client_secret,
            status=intent.status,
        )

    async def create_refund(self, authorization_id: str, amount: Decimal) -> RefundReceipt:
        minor = to_minor_units(amount)
        try:
            refund = await asyncio.to_thread(
                self._stripe.Refund.create,
                payment_intent=authorization_id,
                amount=minor,
                **self._request_options(idempotency_key=f"refund-{authorization_id}"),
            )
        except stripe.StripeError as e:
            logger.error(f"Refund processing error: {e}")
            raise PaymentFault(
                f"Refund processing failed: {e.user_message or e}",
                operation="refund",
                cause=e,
            ) from e

        if refund.status in _FAILED_REFUND_STATUSES:
            raise PaymentFault(
                f"Refund processing failed: refund {refund.id} is {refund.status}",
                operation="refund",
            )

        logger.info(f"Refund {refund.id} ({refund.status}) for {authorization_id}: {minor}")
        return RefundReceipt(id=refund.id, status=refund.status)
