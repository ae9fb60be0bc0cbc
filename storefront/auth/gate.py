"""
Storefront Auth - Access gate.

One owner-or-admin rule, applied by every order read and mutation.
"""

from __future__ import annotations

import logging
from typing import Any

from ..faults import ForbiddenFault
from .identity import Identity

logger = logging.getLogger("storefront.auth")


class AccessGate:
    """Owner-or-admin authorization checks."""

    def require_active(self, identity: Identity) -> None:
        if identity is None or not identity.is_active():
            raise ForbiddenFault("Identity is not active")

    def require_owner_or_admin(self, identity: Identity, owner_id: Any, *, action: str = "access") -> None:
        """
        Pass when *identity* owns the resource or carries the admin role.

        Raises:
            ForbiddenFault: otherwise
        """
        self.require_active(identity)
        if str(owner_id) == identity.id or identity.is_admin:
            return
        logger.warning(f"Denied {action} for identity {identity.id} (owner {owner_id})")
        raise ForbiddenFault(f"Not authorized to {action} this order")
