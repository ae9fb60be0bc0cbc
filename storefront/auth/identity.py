"""
Storefront Auth - Identity.

The authenticated principal handed to the order engine by whatever
authentication layer sits in front of it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


ADMIN_ROLE = "admin"


class IdentityStatus(str, Enum):
    """Identity status."""
    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"


@dataclass(frozen=True)
class Identity:
    """
    Authenticated principal.

    Immutable once created. ``attributes`` carries roles and any
    profile data the authentication layer chose to attach.
    """
    id: str
    attributes: dict[str, Any] = field(default_factory=dict)
    status: IdentityStatus = IdentityStatus.ACTIVE

    @classmethod
    def user(cls, user_id: str, *roles: str, **attributes: Any) -> Identity:
        return cls(id=str(user_id), attributes={"roles": list(roles), **attributes})

    @classmethod
    def admin(cls, user_id: str, **attributes: Any) -> Identity:
        return cls.user(user_id, ADMIN_ROLE, **attributes)

    def get_attribute(self, key: str, default: Any = None) -> Any:
        """Get attribute value with default."""
        return self.attributes.get(key, default)

    def has_role(self, role: str) -> bool:
        """Check if identity has role."""
        return role in self.get_attribute("roles", [])

    @property
    def is_admin(self) -> bool:
        return self.has_role(ADMIN_ROLE)

    def is_active(self) -> bool:
        """Check if identity is active."""
        return self.status == IdentityStatus.ACTIVE

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "attributes": self.attributes,
            "status": self.status.value,
        }
