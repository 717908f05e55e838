"""
Directory Store — handle → agent identity registry.

A thin record store over StorageBackend keyed by handle. Registration is an
upsert: a later call for the same handle fills in or replaces fields but
never clears a field it does not mention.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from custos.core.exceptions import ValidationError
from custos.core.logging import get_logger
from custos.directory.fallback import FallbackDirectory
from custos.directory.types import DirectoryEntry
from custos.storage.base import StorageBackend

logger = get_logger("directory.store")

COLLECTION = "agent_registry"

HANDLE_RE = re.compile(r"^[a-z0-9-]{2,24}$")

DEFAULT_FREQUENCY_MIN = 10

# Fields a heartbeat may update alongside last_seen_at
TOUCH_FIELDS = frozenset({"agent_id", "wallet", "token_address", "token_symbol"})


def normalize_handle(handle: Any) -> str:
    """
    Lower-case and validate a handle.

    Raises:
        ValidationError: handle is missing or not ^[a-z0-9-]{2,24}$
    """
    if not handle or not isinstance(handle, str):
        raise ValidationError("handle required", field="handle")
    norm = handle.strip().lower()
    if not HANDLE_RE.match(norm):
        raise ValidationError("invalid handle format", field="handle", details={"handle": handle})
    return norm


def _check_agent_id(agent_id: Any) -> None:
    if agent_id is None:
        return
    if isinstance(agent_id, bool) or not isinstance(agent_id, int) or agent_id < 0:
        raise ValidationError(
            "agent_id must be a non-negative int",
            field="agent_id",
            details={"agent_id": agent_id},
        )


class DirectoryStore:
    """
    Agent directory backed by a StorageBackend.

    Usage:
        store = DirectoryStore(InMemoryStorage())
        await store.upsert("auctobot", agent_id=3, wallet="0x6758...")
        entry = await store.get("AuctoBot")
    """

    def __init__(self, storage: StorageBackend) -> None:
        self._storage = storage

    async def get(self, handle: str) -> DirectoryEntry | None:
        """Lookup by handle (case-insensitive). Invalid handles are simply absent."""
        try:
            key = normalize_handle(handle)
        except ValidationError:
            return None
        data = await self._storage.get(COLLECTION, key)
        return DirectoryEntry.from_dict(data) if data else None

    async def get_by_agent_id(self, agent_id: int) -> DirectoryEntry | None:
        rows = await self._storage.query(COLLECTION, filters={"agent_id": agent_id}, limit=1)
        return DirectoryEntry.from_dict(rows[0]) if rows else None

    async def list_all(self, registered_only: bool = False) -> list[DirectoryEntry]:
        """
        All entries ordered by agent id ascending.

        Entries without an agent id sort last, or are dropped when
        ``registered_only`` is set.
        """
        entries = [DirectoryEntry.from_dict(row) for row in await self._storage.query(COLLECTION)]
        if registered_only:
            entries = [e for e in entries if e.agent_id is not None]
        return sorted(
            entries,
            key=lambda e: (e.agent_id is None, e.agent_id or 0, e.handle),
        )

    async def upsert(
        self,
        handle: str,
        agent_id: int | None = None,
        wallet: str | None = None,
        purpose: str | None = None,
        model_id: str | None = None,
        frequency_min: int | None = None,
        token_address: str | None = None,
        token_symbol: str | None = None,
    ) -> DirectoryEntry:
        """
        Create or update the entry for ``handle``.

        Raises:
            ValidationError: bad handle or agent_id
        """
        key = normalize_handle(handle)
        _check_agent_id(agent_id)

        now = datetime.now(timezone.utc)
        updates = {
            "agent_id": agent_id,
            "wallet": wallet,
            "purpose": purpose,
            "model_id": model_id,
            "token_address": token_address,
            "token_symbol": token_symbol,
        }

        existing = await self._storage.get(COLLECTION, key)
        if existing:
            entry = DirectoryEntry.from_dict(existing)
            for name, value in updates.items():
                if value is not None:
                    setattr(entry, name, value)
            entry.frequency_min = frequency_min or DEFAULT_FREQUENCY_MIN
            entry.last_seen_at = now
            logger.info(f"Updated directory entry {key}")
        else:
            entry = DirectoryEntry(
                handle=key,
                frequency_min=frequency_min or DEFAULT_FREQUENCY_MIN,
                registered_at=now,
                **updates,
            )
            logger.info(f"Registered directory entry {key} (agentId {agent_id})")

        await self._storage.save(COLLECTION, key, entry.to_dict())
        return entry

    async def touch(self, handle: str, **fields: Any) -> DirectoryEntry | None:
        """
        Record a heartbeat: set last_seen_at and any given TOUCH_FIELDS.

        Returns None if the handle is not registered.

        Raises:
            ValidationError: an unsupported field was given
        """
        unknown = set(fields) - TOUCH_FIELDS
        if unknown:
            raise ValidationError(
                f"cannot update fields: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        if "agent_id" in fields:
            _check_agent_id(fields["agent_id"])

        try:
            key = normalize_handle(handle)
        except ValidationError:
            return None

        changes = dict(fields)
        changes["last_seen_at"] = datetime.now(timezone.utc).isoformat()
        if not await self._storage.update(COLLECTION, key, changes):
            return None
        return await self.get(key)

    async def seed(self, fallback: FallbackDirectory) -> int:
        """Upsert every entry of a fallback dataset. Returns how many were written."""
        for entry in fallback.entries:
            await self.upsert(
                entry.handle,
                agent_id=entry.agent_id,
                wallet=entry.wallet,
                purpose=entry.purpose,
                model_id=entry.model_id,
                frequency_min=entry.frequency_min,
                token_address=entry.token_address,
                token_symbol=entry.token_symbol,
            )
        logger.info(f"Seeded {len(fallback.entries)} entries from fallback {fallback.version}")
        return len(fallback.entries)


__all__ = [
    "DirectoryStore",
    "HANDLE_RE",
    "TOUCH_FIELDS",
    "normalize_handle",
]
