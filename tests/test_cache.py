"""Tests for the TTL read cache."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from custos.chain import cache as cache_module
from custos.chain.cache import ReadCache


@pytest.fixture
def clock(monkeypatch):
    now = [1_000_000.0]
    monkeypatch.setattr(cache_module, "time", SimpleNamespace(time=lambda: now[0]))
    return now


@pytest.fixture
def cache(storage) -> ReadCache:
    return ReadCache(storage, namespace="8453:0xABC")


class TestReadCache:

    @pytest.mark.asyncio
    async def test_miss(self, cache):
        assert await cache.get("total_cycles") is None

    @pytest.mark.asyncio
    async def test_hit_within_ttl(self, cache, clock):
        await cache.set("agent", 3, "0xdata", ttl=60)
        clock[0] += 59
        assert await cache.get("agent", 3) == "0xdata"

    @pytest.mark.asyncio
    async def test_expired_entry_removed(self, cache, clock, storage):
        await cache.set("agent", 3, "0xdata", ttl=60)
        clock[0] += 61

        assert await cache.get("agent", 3) is None
        assert await storage.count("read_cache") == 0

    @pytest.mark.asyncio
    async def test_keyed_by_query_and_agent(self, cache, storage):
        await cache.set("agent", 3, "a", ttl=60)
        await cache.set("agent", 4, "b", ttl=60)
        await cache.set("chain_head", 3, "c", ttl=60)
        await cache.set("total_cycles", None, "d", ttl=60)

        assert await cache.get("agent", 3) == "a"
        assert await cache.get("agent", 4) == "b"
        assert await cache.get("chain_head", 3) == "c"
        assert await cache.get("total_cycles") == "d"
        assert await storage.get("read_cache", "read:8453:0xabc:total_cycles:-") is not None

    @pytest.mark.asyncio
    async def test_namespaces_isolated(self, storage):
        await ReadCache(storage, "one").set("agent", 1, "x", ttl=60)
        assert await ReadCache(storage, "two").get("agent", 1) is None

    @pytest.mark.asyncio
    async def test_zero_ttl_stores_nothing(self, cache, storage):
        await cache.set("agent", 3, "0xdata", ttl=0)
        assert await storage.count("read_cache") == 0

    @pytest.mark.asyncio
    async def test_invalidate(self, cache):
        await cache.set("agent", 3, "0xdata", ttl=60)
        await cache.invalidate("agent", 3)
        assert await cache.get("agent", 3) is None


class TestGetOrFetch:

    @pytest.mark.asyncio
    async def test_fetches_once(self, cache):
        fetch = AsyncMock(return_value=[{"id": 1}])

        first = await cache.get_or_fetch("inscriptions:30", None, fetch, ttl=30)
        second = await cache.get_or_fetch("inscriptions:30", None, fetch, ttl=30)

        assert first == ([{"id": 1}], False)
        assert second == ([{"id": 1}], True)
        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_none_not_cached(self, cache):
        fetch = AsyncMock(side_effect=[None, "0xdata"])

        assert await cache.get_or_fetch("agent", 3, fetch) == (None, False)
        assert await cache.get_or_fetch("agent", 3, fetch) == ("0xdata", False)
        assert fetch.await_count == 2


class TestStorageUnavailable:

    @pytest.mark.asyncio
    async def test_lookup_failure_is_a_miss(self, unavailable_storage):
        cache = ReadCache(unavailable_storage, "test")
        assert await cache.get("agent", 3) is None

    @pytest.mark.asyncio
    async def test_write_and_invalidate_failures_dropped(self, unavailable_storage):
        cache = ReadCache(unavailable_storage, "test")

        await cache.set("agent", 3, "0xdata", ttl=60)
        await cache.invalidate("agent", 3)

        assert unavailable_storage.calls == 2

    @pytest.mark.asyncio
    async def test_get_or_fetch_goes_upstream(self, unavailable_storage):
        fetch = AsyncMock(return_value="0xdata")
        cache = ReadCache(unavailable_storage, "test")

        assert await cache.get_or_fetch("agent", 3, fetch) == ("0xdata", False)
        assert await cache.get_or_fetch("agent", 3, fetch) == ("0xdata", False)
        assert fetch.await_count == 2
