"""
Tests for MemoryRecordStore and KeyedLock.
"""

import asyncio

import pytest

from storefront.store import DuplicateRecordError, KeyedLock, MemoryRecordStore, RecordStore


class TestMemoryRecordStore:

    def setup_method(self):
        ids = iter(f"id{n}" for n in range(100))
        self.store = MemoryRecordStore(id_factory=lambda: next(ids))

    def test_satisfies_protocol(self):
        assert isinstance(self.store, RecordStore)

    @pytest.mark.asyncio
    async def test_create_assigns_id(self):
        record = await self.store.create("things", {"name": "x"})
        assert record == {"id": "id0", "name": "x"}
        assert await self.store.find_by_id("things", "id0") == record

    @pytest.mark.asyncio
    async def test_create_duplicate(self):
        await self.store.create("things", {"id": "a"})
        with pytest.raises(DuplicateRecordError):
            await self.store.create("things", {"id": "a"})

    @pytest.mark.asyncio
    async def test_reads_are_copies(self):
        await self.store.create("things", {"id": "a", "tags": ["x"]})
        record = await self.store.find_by_id("things", "a")
        record["tags"].append("y")
        assert (await self.store.find_by_id("things", "a"))["tags"] == ["x"]

    @pytest.mark.asyncio
    async def test_save_upserts(self):
        await self.store.save("things", {"id": "a", "n": 1})
        await self.store.save("things", {"id": "a", "n": 2})
        assert await self.store.count("things") == 1
        assert (await self.store.find_by_id("things", "a"))["n"] == 2

    @pytest.mark.asyncio
    async def test_find_filter_sort_limit_skip(self):
        self.store.seed("things", [
            {"id": "a", "kind": "x", "rank": 3},
            {"id": "b", "kind": "y", "rank": 1},
            {"id": "c", "kind": "x", "rank": None},
            {"id": "d", "kind": "x", "rank": 5},
        ])

        rows = await self.store.find("things", {"kind": "x"}, sort=["-rank"])
        assert [r["id"] for r in rows] == ["d", "a", "c"]

        rows = await self.store.find("things", sort=["rank"], skip=1, limit=2)
        assert [r["id"] for r in rows] == ["a", "d"]

        assert await self.store.count("things", {"kind": "x"}) == 3
        assert (await self.store.find_one("things", {"kind": "y"}))["id"] == "b"

    @pytest.mark.asyncio
    async def test_delete(self):
        await self.store.create("things", {"id": "a"})
        assert await self.store.delete("things", "a") is True
        assert await self.store.delete("things", "a") is False
        assert await self.store.find_by_id("things", "a") is None


class TestKeyedLock:

    @pytest.mark.asyncio
    async def test_same_key_serializes(self):
        locks = KeyedLock()
        events = []

        async def worker(name):
            async with locks.hold("k"):
                events.append(f"{name}-in")
                await asyncio.sleep(0.01)
                events.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert events in (
            ["a-in", "a-out", "b-in", "b-out"],
            ["b-in", "b-out", "a-in", "a-out"],
        )

    @pytest.mark.asyncio
    async def test_opposite_order_does_not_deadlock(self):
        locks = KeyedLock()

        async def worker(*keys):
            async with locks.hold(*keys):
                await asyncio.sleep(0.01)

        await asyncio.wait_for(asyncio.gather(worker("x", "y"), worker("y", "x")), timeout=1)

    @pytest.mark.asyncio
    async def test_duplicate_keys_and_release(self):
        locks = KeyedLock()
        async with locks.hold("a", "a", "b"):
            assert locks.locked("a")
            assert locks.locked("b")
        assert not locks.locked("a")
        assert not locks.locked("b")

    @pytest.mark.asyncio
    async def test_idle_keys_are_dropped(self):
        locks = KeyedLock()

        async def worker(key):
            async with locks.hold(key, "shared"):
                await asyncio.sleep(0.01)

        await asyncio.gather(*(worker(f"order-{n}") for n in range(10)))

        assert locks._locks == {}
        assert locks._users == {}

    @pytest.mark.asyncio
    async def test_waiter_keeps_lock_alive(self):
        locks = KeyedLock()
        events = []

        async def worker(name):
            async with locks.hold("k"):
                events.append(name)
                await asyncio.sleep(0.01)
                events.append(f"{name}-done")

        first = asyncio.ensure_future(worker("a"))
        await asyncio.sleep(0)
        second = asyncio.ensure_future(worker("b"))
        await asyncio.gather(first, second)

        assert events == ["a", "a-done", "b", "b-done"]
        assert locks._locks == {}
