"""
Payment gateway interface and amount conversion.

Amounts cross the engine as decimal currency units and are converted to
integer minor units (cents) only at the gateway boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional, Protocol, runtime_checkable

from ..faults import ValidationFault
from ..utils import as_decimal

_MINOR_PER_UNIT = Decimal(100)


def to_minor_units(amount: Any) -> int:
    """
    Convert a decimal currency amount to integer minor units.

    ``round(amount * 100)`` with halves rounded up, computed in Decimal:
    ``19.99 -> 1999``, ``2.675 -> 268``, ``10 -> 1000``.

    Raises:
        ValidationFault: negative or non-numeric amount
    """
    value = as_decimal(amount)
    if value < 0:
        raise ValidationFault("Amount must not be negative", field="amount")
    return int((value * _MINOR_PER_UNIT).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class PaymentAuthorization:
    """A reserved charge awaiting client-side confirmation."""
    id: str
    client_secret: Optional[str]
    status: str = "requires_payment_method"


@dataclass(frozen=True)
class RefundReceipt:
    id: str
    status: str


@runtime_checkable
class PaymentGateway(Protocol):
    """Protocol for payment processors."""

    async def create_authorization(
        self, amount: Decimal, currency: str, *, idempotency_key: Optional[str] = None,
    ) -> PaymentAuthorization:
        """Reserve *amount* (decimal units) in *currency*. A repeated key returns the same authorization."""
        ...

    async def create_refund(self, authorization_id: str, amount: Decimal) -> RefundReceipt:
        """Refund *amount* (decimal units) against a prior authorization."""
        ...
