"""
Redis Storage Backend.

Shared storage for deployments running more than one worker, so the read
cache is shared and the directory survives restarts.

Layout:
    {prefix}:{collection}:{key}     JSON record (EX set when saved with a ttl)
    {prefix}:{collection}:_index    set of keys in the collection

Expired records leave their key in the index until the next query sweeps it.
"""

from __future__ import annotations

import json
import math
import os
from typing import Any

from custos.core.exceptions import StorageError
from custos.storage.base import StorageBackend, register_storage_backend

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


class RedisStorage(StorageBackend):
    """Redis storage backend (redis.asyncio)."""

    def __init__(self, redis_url: str | None = None, prefix: str = "custos") -> None:
        """
        Args:
            redis_url: Connection URL; defaults to CUSTOS_REDIS_URL, then localhost
            prefix: Namespace for every key this backend writes
        """
        self._redis_url = redis_url or os.environ.get("CUSTOS_REDIS_URL", DEFAULT_REDIS_URL)
        self._prefix = prefix
        self._client = None

    def _get_client(self):
        """Lazy-load Redis client."""
        if self._client is None:
            import redis.asyncio as redis

            self._client = redis.from_url(self._redis_url, decode_responses=True)
        return self._client

    def _record_key(self, collection: str, key: str) -> str:
        return f"{self._prefix}:{collection}:{key}"

    def _index_key(self, collection: str) -> str:
        return f"{self._prefix}:{collection}:_index"

    def _decode(self, collection: str, key: str, raw: str) -> dict[str, Any]:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(
                f"Corrupt record in {collection}",
                details={"key": key, "error": str(e)},
            ) from e

    async def save(
        self,
        collection: str,
        key: str,
        data: dict[str, Any],
        ttl: float | None = None,
    ) -> None:
        client = self._get_client()
        expire = math.ceil(ttl) if ttl is not None and ttl > 0 else None
        await client.set(self._record_key(collection, key), json.dumps(data), ex=expire)
        await client.sadd(self._index_key(collection), key)

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        raw = await self._get_client().get(self._record_key(collection, key))
        if raw is None:
            return None
        return self._decode(collection, key, raw)

    async def delete(self, collection: str, key: str) -> bool:
        client = self._get_client()
        removed = await client.delete(self._record_key(collection, key))
        await client.srem(self._index_key(collection), key)
        return removed > 0

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        client = self._get_client()
        matches = []
        for key in sorted(await client.smembers(self._index_key(collection))):
            record = await self.get(collection, key)
            if record is None:
                # Expired under EX; drop the stale index entry
                await client.srem(self._index_key(collection), key)
                continue
            if filters and any(record.get(k) != v for k, v in filters.items()):
                continue
            record["_key"] = key
            matches.append(record)

        matches = matches[offset:]
        return matches if limit is None else matches[:limit]

    async def update(self, collection: str, key: str, data: dict[str, Any]) -> bool:
        record = await self.get(collection, key)
        if record is None:
            return False
        record.update(data)
        await self._get_client().set(
            self._record_key(collection, key), json.dumps(record), keepttl=True
        )
        return True

    async def count(self, collection: str, filters: dict[str, Any] | None = None) -> int:
        # Through query so expired keys still in the index are not counted
        return len(await self.query(collection, filters))

    async def clear(self, collection: str) -> int:
        client = self._get_client()
        keys = await client.smembers(self._index_key(collection))
        if keys:
            await client.delete(*(self._record_key(collection, k) for k in keys))
        await client.delete(self._index_key(collection))
        return len(keys)

    async def health_check(self) -> bool:
        """Ping Redis; any failure counts as unhealthy."""
        try:
            await self._get_client().ping()
        except Exception:
            return False
        return True

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


register_storage_backend("redis", RedisStorage)
