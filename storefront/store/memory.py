"""
In-memory record store.

Every read and write deep-copies, so callers never share mutable state
with the store (a record only changes when it is saved).
"""

from __future__ import annotations

import copy
import logging
import uuid
from typing import Any, Callable, Iterable, Optional, Sequence

from .base import DuplicateRecordError

logger = logging.getLogger("storefront.store")


def _matches(record: dict[str, Any], filters: Optional[dict[str, Any]]) -> bool:
    if not filters:
        return True
    return all(record.get(key) == value for key, value in filters.items())


def _sort_records(records: list[dict[str, Any]], sort: Sequence[str]) -> list[dict[str, Any]]:
    # Stable sorts applied from the last key to the first
    for key in reversed(list(sort)):
        descending = key.startswith("-")
        name = key.lstrip("-+")
        present = [r for r in records if r.get(name) is not None]
        missing = [r for r in records if r.get(name) is None]
        present.sort(key=lambda r: r[name], reverse=descending)
        records = present + missing
    return records


class MemoryRecordStore:
    """Dict-backed RecordStore implementation."""

    def __init__(self, id_factory: Optional[Callable[[], str]] = None):
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    # ── Reads ────────────────────────────────────────────────

    async def find_by_id(self, collection: str, record_id: str) -> Optional[dict[str, Any]]:
        record = self._collection(collection).get(str(record_id))
        return copy.deepcopy(record) if record is not None else None

    async def find_one(self, collection: str, filters: dict[str, Any]) -> Optional[dict[str, Any]]:
        for record in self._collection(collection).values():
            if _matches(record, filters):
                return copy.deepcopy(record)
        return None

    async def find(
        self,
        collection: str,
        filters: Optional[dict[str, Any]] = None,
        *,
        sort: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> list[dict[str, Any]]:
        records = [r for r in self._collection(collection).values() if _matches(r, filters)]
        if sort:
            records = _sort_records(records, sort)
        end = skip + limit if limit is not None else None
        return copy.deepcopy(records[skip:end])

    async def count(self, collection: str, filters: Optional[dict[str, Any]] = None) -> int:
        return sum(1 for r in self._collection(collection).values() if _matches(r, filters))

    # ── Writes ───────────────────────────────────────────────

    async def create(self, collection: str, fields: dict[str, Any]) -> dict[str, Any]:
        record = copy.deepcopy(fields)
        record_id = str(record.get("id") or self._id_factory())
        records = self._collection(collection)
        if record_id in records:
            raise DuplicateRecordError(collection, record_id)
        record["id"] = record_id
        records[record_id] = record
        logger.debug(f"Created {collection}/{record_id}")
        return copy.deepcopy(record)

    async def save(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        if not record.get("id"):
            return await self.create(collection, record)
        stored = copy.deepcopy(record)
        stored["id"] = str(stored["id"])
        self._collection(collection)[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def delete(self, collection: str, record_id: str) -> bool:
        return self._collection(collection).pop(str(record_id), None) is not None

    # ── Seeding ──────────────────────────────────────────────

    def seed(self, collection: str, records: Iterable[dict[str, Any]]) -> None:
        """Synchronously load records (fixtures, bootstrap data)."""
        target = self._collection(collection)
        for record in records:
            stored = copy.deepcopy(record)
            stored["id"] = str(stored.get("id") or self._id_factory())
            target[stored["id"]] = stored
