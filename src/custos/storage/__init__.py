"""
Storage backends for the read cache and the agent directory.

The backend is chosen by CUSTOS_STORAGE_BACKEND ("memory" unless set).
Redis is the one to use when several workers should share cached reads and
directory records; its URL comes from CUSTOS_REDIS_URL. Outside tests the
backend is normally built from Config by
``custos.directory.service.storage_from_config``.
"""

from __future__ import annotations

import os

from custos.storage.base import (
    StorageBackend,
    get_storage_backend,
    list_storage_backends,
    register_storage_backend,
)
from custos.storage.memory import InMemoryStorage
from custos.storage.redis import RedisStorage


def get_storage(backend_name: str | None = None) -> StorageBackend:
    """
    Get storage backend from environment or by name.

    Args:
        backend_name: Backend name, or None to read from CUSTOS_STORAGE_BACKEND env

    Returns:
        StorageBackend instance

    Raises:
        ValueError: If backend name is unknown
    """
    if backend_name is None:
        backend_name = os.environ.get("CUSTOS_STORAGE_BACKEND", "memory")

    backend_class = get_storage_backend(backend_name)

    if backend_class is None:
        available = list_storage_backends()
        raise ValueError(
            f"Unknown storage backend: '{backend_name}'. Available: {', '.join(available)}"
        )

    return backend_class()


__all__ = [
    "StorageBackend",
    "InMemoryStorage",
    "RedisStorage",
    "get_storage",
    "get_storage_backend",
    "list_storage_backends",
    "register_storage_backend",
]
