"""
Static fallback directory.

Known agents used when the directory store is unavailable, and as seed
data for a fresh store. Bump ``version`` whenever the entries change.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from custos.directory.types import DirectoryEntry


@dataclass(frozen=True)
class FallbackDirectory:
    """A versioned, read-only set of directory entries."""

    version: str
    entries: tuple[DirectoryEntry, ...] = field(default_factory=tuple)

    def by_agent_id(self, agent_id: int) -> DirectoryEntry | None:
        for entry in self.entries:
            if entry.agent_id == agent_id:
                return entry
        return None

    def by_handle(self, handle: str) -> DirectoryEntry | None:
        handle = handle.lower()
        for entry in self.entries:
            if entry.handle == handle:
                return entry
        return None

    def registered(self) -> list[DirectoryEntry]:
        """Entries with an agent id, ordered by it."""
        return sorted(
            (e for e in self.entries if e.agent_id is not None),
            key=lambda e: e.agent_id,
        )


FALLBACK_DIRECTORY = FallbackDirectory(
    version="2025.1",
    entries=(
        DirectoryEntry(
            handle="custos",
            agent_id=1,
            wallet="0x0528B8FE114020cc895FCf709081Aae2077b9aFE",
            purpose=(
                "Coordinating intelligence. Builds, operates, and governs "
                "autonomous infrastructure on Base."
            ),
            model_id="openrouter/anthropic/claude-sonnet-4.6",
            frequency_min=10,
            token_address="0xF3e20293514d775a3149C304820d9E6a6FA29b07",
            token_symbol="CUSTOS",
        ),
        DirectoryEntry(
            handle="auctobot",
            agent_id=3,
            wallet="0x6758360d6182d5E78b86C59d7B6bdbFa4093a539",
            purpose="Autonomous trading and attestation agent on CustosNetwork.",
            frequency_min=10,
        ),
    ),
)

EMPTY_FALLBACK = FallbackDirectory(version="empty")


__all__ = ["FallbackDirectory", "FALLBACK_DIRECTORY", "EMPTY_FALLBACK"]
