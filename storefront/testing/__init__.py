"""
Storefront Testing - doubles and fixtures for exercising the order engine.

- FakePaymentGateway: scriptable failures and delays, records calls
- CapturingProvider / CapturedMail: mail outbox instead of SMTP
- RecordingNotifier: Notifier double
- make_product / make_user / seed_products / seed_users
"""

from .payments import FakePaymentGateway, GatewayCall
from .mail import CapturedMail, CapturingProvider, RecordingNotifier
from .fixtures import make_product, make_user, seed_products, seed_users

__all__ = [
    "FakePaymentGateway",
    "GatewayCall",
    "CapturedMail",
    "CapturingProvider",
    "RecordingNotifier",
    "make_product",
    "make_user",
    "seed_products",
    "seed_users",
]
