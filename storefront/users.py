"""
Users — the account record the order engine reads to address notifications.

Account management itself lives outside this package.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .store import RecordStore

COLLECTION = "users"


@dataclass
class User:
    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    role: str = "user"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        return cls(
            id=str(data["id"]),
            email=data["email"],
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            role=data.get("role", "user"),
        )


async def find_user(store: RecordStore, user_id: str) -> Optional[User]:
    data = await store.find_by_id(COLLECTION, str(user_id))
    return User.from_dict(data) if data else None
