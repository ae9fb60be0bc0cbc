"""
Storefront Payments - gateway protocol, minor-unit conversion, Stripe.
"""

from .gateway import (
    PaymentAuthorization,
    PaymentGateway,
    RefundReceipt,
    to_minor_units,
)
from .stripe_gateway import StripeGateway

__all__ = [
    "PaymentAuthorization",
    "PaymentGateway",
    "RefundReceipt",
    "to_minor_units",
    "StripeGateway",
]
