"""
In-Memory Storage Backend.

Default backend: per-process dicts, lost on exit. Fine for a single worker
and for tests; use RedisStorage when several processes share a cache.
"""

from __future__ import annotations

import time
from copy import deepcopy
from typing import Any

from custos.storage.base import StorageBackend, register_storage_backend


class InMemoryStorage(StorageBackend):
    """
    In-memory storage backend.

    Records saved with a ttl are evicted lazily, on the next access to
    their collection.
    """

    def __init__(self) -> None:
        self._data: dict[str, dict[str, dict[str, Any]]] = {}
        self._deadlines: dict[str, dict[str, float]] = {}

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        records = self._data.setdefault(name, {})
        deadlines = self._deadlines.get(name)
        if deadlines:
            now = time.monotonic()
            for key in [k for k, deadline in deadlines.items() if deadline <= now]:
                records.pop(key, None)
                del deadlines[key]
        return records

    async def save(
        self,
        collection: str,
        key: str,
        data: dict[str, Any],
        ttl: float | None = None,
    ) -> None:
        self._collection(collection)[key] = deepcopy(data)
        deadlines = self._deadlines.setdefault(collection, {})
        if ttl is not None and ttl > 0:
            deadlines[key] = time.monotonic() + ttl
        else:
            deadlines.pop(key, None)

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        record = self._collection(collection).get(key)
        return deepcopy(record) if record is not None else None

    async def delete(self, collection: str, key: str) -> bool:
        self._deadlines.get(collection, {}).pop(key, None)
        return self._collection(collection).pop(key, None) is not None

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        matches = []
        for key, record in self._collection(collection).items():
            if filters and any(record.get(k) != v for k, v in filters.items()):
                continue
            row = deepcopy(record)
            row["_key"] = key
            matches.append(row)

        matches = matches[offset:]
        return matches if limit is None else matches[:limit]

    async def update(self, collection: str, key: str, data: dict[str, Any]) -> bool:
        record = self._collection(collection).get(key)
        if record is None:
            return False
        record.update(deepcopy(data))
        return True

    async def count(self, collection: str, filters: dict[str, Any] | None = None) -> int:
        if filters:
            return len(await self.query(collection, filters))
        return len(self._collection(collection))

    async def clear(self, collection: str) -> int:
        records = self._collection(collection)
        removed = len(records)
        records.clear()
        self._deadlines.pop(collection, None)
        return removed


register_storage_backend("memory", InMemoryStorage)
