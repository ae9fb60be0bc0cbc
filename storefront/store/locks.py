"""
Per-key asyncio locks.

Writers of the same record serialize on that record's lock. Holding
several keys at once always acquires them in sorted order, so two
multi-key holders can never deadlock each other.

A key's lock lives only while someone holds or waits for it.
"""

from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Hashable


class KeyedLock:
    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def locked(self, key: Hashable) -> bool:
        lock = self._locks.get(str(key))
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, *keys: Hashable) -> AsyncIterator[None]:
        """Acquire the locks for every key (deduplicated, sorted)."""
        ordered = sorted({str(k) for k in keys})
        for key in ordered:
            self._users[key] = self._users.get(key, 0) + 1
        try:
            async with AsyncExitStack() as stack:
                for key in ordered:
                    lock = self._locks.setdefault(key, asyncio.Lock())
                    await stack.enter_async_context(lock)
                yield
        finally:
            for key in ordered:
                self._users[key] -= 1
                if not self._users[key]:
                    del self._users[key]
                    del self._locks[key]
