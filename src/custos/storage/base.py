"""
Storage backend interface and registry.

Backends hold JSON-compatible dicts grouped into named collections. The
read cache and the directory store both sit on top of this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

_BACKENDS: dict[str, type[StorageBackend]] = {}


class StorageBackend(ABC):
    """Abstract async key/value storage with simple equality queries."""

    @abstractmethod
    async def save(
        self,
        collection: str,
        key: str,
        data: dict[str, Any],
        ttl: float | None = None,
    ) -> None:
        """
        Create or replace a record.

        With ``ttl`` set, the backend may evict the record after that many
        seconds. Callers needing exact expiry still check it themselves.
        """

    @abstractmethod
    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        """Get a record, or None if absent."""

    @abstractmethod
    async def delete(self, collection: str, key: str) -> bool:
        """Delete a record. Returns True if it existed."""

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Return records matching all ``filters`` by equality, with ``_key`` set."""

    @abstractmethod
    async def update(self, collection: str, key: str, data: dict[str, Any]) -> bool:
        """Merge ``data`` into an existing record. Returns False if absent."""

    @abstractmethod
    async def count(self, collection: str, filters: dict[str, Any] | None = None) -> int:
        """Count records in a collection."""

    @abstractmethod
    async def clear(self, collection: str) -> int:
        """Remove every record in a collection. Returns how many were removed."""

    async def health_check(self) -> bool:
        """Whether the backend is reachable."""
        return True

    async def close(self) -> None:
        """Release any connections."""
        return None


def register_storage_backend(name: str, backend_class: type[StorageBackend]) -> None:
    """Register a backend class under a name."""
    _BACKENDS[name.lower()] = backend_class


def get_storage_backend(name: str) -> type[StorageBackend] | None:
    """Look up a registered backend class."""
    return _BACKENDS.get(name.lower())


def list_storage_backends() -> list[str]:
    """Names of all registered backends."""
    return sorted(_BACKENDS)


__all__ = [
    "StorageBackend",
    "register_storage_backend",
    "get_storage_backend",
    "list_storage_backends",
]
