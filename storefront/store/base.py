"""
Record store interface.

Generic document access keyed by collection name and record id. Records
are plain dicts; models convert with ``to_dict()`` / ``from_dict()``.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, runtime_checkable


class DuplicateRecordError(Exception):
    """A record with the same id already exists in the collection."""

    def __init__(self, collection: str, record_id: str):
        super().__init__(f"Record '{record_id}' already exists in '{collection}'")
        self.collection = collection
        self.record_id = record_id


@runtime_checkable
class RecordStore(Protocol):
    """Protocol for record storage."""

    async def find_by_id(self, collection: str, record_id: str) -> Optional[dict[str, Any]]:
        """Get a record by id, or None."""
        ...

    async def find_one(self, collection: str, filters: dict[str, Any]) -> Optional[dict[str, Any]]:
        """First record whose fields equal every filter value."""
        ...

    async def find(
        self,
        collection: str,
        filters: Optional[dict[str, Any]] = None,
        *,
        sort: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> list[dict[str, Any]]:
        """
        Query records.

        ``sort`` takes field names, ``"-field"`` for descending.
        """
        ...

    async def count(self, collection: str, filters: Optional[dict[str, Any]] = None) -> int:
        ...

    async def create(self, collection: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Insert a new record, assigning an id when none is given."""
        ...

    async def save(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert or replace a record by its id."""
        ...

    async def delete(self, collection: str, record_id: str) -> bool:
        ...
