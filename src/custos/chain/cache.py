"""
Read Cache — short TTL caching for RPC and feed reads.

Entries are advisory: serving data up to ``ttl`` seconds stale is expected.
Only successful reads are stored, so a failing upstream is retried on the
next request rather than pinned as "no data" for the whole window.

A storage failure never reaches the caller. A failed lookup is a miss and
a failed write is dropped, so reads still go to the upstream when the
backend is down.

Key pattern: read:{namespace}:{query}:{agent_id or "-"}
"""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable

from custos.core.logging import get_logger
from custos.storage.base import StorageBackend

logger = get_logger("chain.cache")

CHAIN_TTL = 60  # seconds
FEED_TTL = 30

COLLECTION = "read_cache"


class ReadCache:
    """
    TTL cache backed by StorageBackend.

    ``namespace`` separates deployments sharing one backend, typically the
    chain id plus proxy address.
    """

    def __init__(self, storage: StorageBackend, namespace: str = "default") -> None:
        self._storage = storage
        self._namespace = namespace.lower()

    def _key(self, query: str, agent_id: int | None) -> str:
        suffix = "-" if agent_id is None else str(agent_id)
        return f"read:{self._namespace}:{query}:{suffix}"

    async def get(self, query: str, agent_id: int | None = None) -> Any | None:
        """Cached value, or None on miss, expiry or storage failure."""
        key = self._key(query, agent_id)
        try:
            entry = await self._storage.get(COLLECTION, key)
        except Exception as e:
            logger.warning(f"Read cache lookup failed for {key}: {e}")
            return None

        if entry is None:
            return None

        if time.time() > entry.get("_expires_at", 0):
            await self._delete(key)
            return None

        return entry.get("data")

    async def set(
        self,
        query: str,
        agent_id: int | None,
        data: Any,
        ttl: int = CHAIN_TTL,
    ) -> None:
        """Store a value for ``ttl`` seconds. A ttl of 0 stores nothing."""
        if ttl <= 0:
            return
        key = self._key(query, agent_id)
        try:
            await self._storage.save(COLLECTION, key, {
                "data": data,
                "_expires_at": time.time() + ttl,
            }, ttl=ttl)
        except Exception as e:
            logger.warning(f"Read cache write failed for {key}: {e}")

    async def invalidate(self, query: str, agent_id: int | None = None) -> None:
        await self._delete(self._key(query, agent_id))

    async def _delete(self, key: str) -> None:
        try:
            await self._storage.delete(COLLECTION, key)
        except Exception as e:
            logger.warning(f"Read cache delete failed for {key}: {e}")

    async def get_or_fetch(
        self,
        query: str,
        agent_id: int | None,
        fetch_fn: Callable[[], Awaitable[Any | None]],
        ttl: int = CHAIN_TTL,
    ) -> tuple[Any | None, bool]:
        """
        Get from cache or fetch and store.

        Returns:
            Tuple of (data, cache_hit)
        """
        cached = await self.get(query, agent_id)
        if cached is not None:
            return cached, True

        data = await fetch_fn()
        if data is not None:
            await self.set(query, agent_id, data, ttl)

        return data, False


__all__ = ["ReadCache", "CHAIN_TTL", "FEED_TTL"]
