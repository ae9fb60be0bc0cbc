"""
Storefront Auth - identity and the owner-or-admin gate.
"""

from .identity import ADMIN_ROLE, Identity, IdentityStatus
from .gate import AccessGate

__all__ = ["ADMIN_ROLE", "Identity", "IdentityStatus", "AccessGate"]
