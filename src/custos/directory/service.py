"""
Agent Directory — assembles profile and directory views.

Orchestrates, per request: directory lookup → concurrent fan-out of the
struct read, chain-head read, aggregate counters and inscription feed →
record merge. The fan-out branches share no state and are awaited together
with asyncio.gather, so a view costs roughly the slowest single call.

Nothing on this path raises for upstream failures: the provider and feed
already degrade to "no data", and directory-store errors are logged and
treated as an absent entry (falling back to the static dataset).
"""

from __future__ import annotations

import asyncio

from custos.chain.cache import ReadCache
from custos.chain.provider import CustosProvider
from custos.core.config import Config
from custos.core.logging import get_logger
from custos.core.types import AgentOnChainRecord
from custos.directory.fallback import FALLBACK_DIRECTORY, FallbackDirectory
from custos.directory.merger import merge_agent_record
from custos.directory.store import DirectoryStore
from custos.directory.types import AgentProfileView, DirectoryEntry, DirectoryView
from custos.feed.client import InscriptionFeed, build_timeline
from custos.feed.types import InscriptionEntry
from custos.storage import RedisStorage, get_storage
from custos.storage.base import StorageBackend

logger = get_logger("directory.service")

LIVE_FEED_LIMIT = 6


def storage_from_config(config: Config) -> StorageBackend:
    """Build the storage backend named in the config."""
    if config.storage_backend.lower() == "redis":
        return RedisStorage(redis_url=config.redis_url)
    return get_storage(config.storage_backend)


class AgentDirectory:
    """
    Read-side facade for the agent directory and profile pages.

    Usage:
        async with AgentDirectory(Config.from_env()) as directory:
            view = await directory.get_profile("auctobot")
            if view is None:
                ...  # 404
            listing = await directory.list_agents()
    """

    def __init__(
        self,
        config: Config | None = None,
        storage: StorageBackend | None = None,
        provider: CustosProvider | None = None,
        feed: InscriptionFeed | None = None,
        store: DirectoryStore | None = None,
        fallback: FallbackDirectory | None = FALLBACK_DIRECTORY,
    ) -> None:
        """
        Args:
            config: Library configuration (defaults to Config())
            storage: Backend for the read cache and directory store
            provider: Pre-configured CustosProvider
            feed: Pre-configured InscriptionFeed
            store: Pre-configured DirectoryStore
            fallback: Static dataset used when the store is unavailable
        """
        self._config = config or Config()
        self._owns_storage = storage is None
        self._storage = storage or storage_from_config(self._config)

        namespace = f"{self._config.chain_id}:{self._config.proxy_address}"
        self._cache = ReadCache(self._storage, namespace=namespace)

        self._provider = provider or CustosProvider(self._config, cache=self._cache)
        self._feed = feed or InscriptionFeed(self._config, cache=self._cache)
        self._store = store or DirectoryStore(self._storage)
        self._fallback = fallback

    @property
    def store(self) -> DirectoryStore:
        return self._store

    @property
    def provider(self) -> CustosProvider:
        return self._provider

    async def close(self) -> None:
        await self._provider.close()
        await self._feed.close()
        if self._owns_storage:
            await self._storage.close()

    async def __aenter__(self) -> AgentDirectory:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ─── Directory lookups (failure → absent) ────────────────────────

    async def _lookup_handle(self, handle: str) -> DirectoryEntry | None:
        try:
            return await self._store.get(handle)
        except Exception as e:
            logger.warning(f"Directory lookup for {handle!r} failed: {e}")
            return self._fallback.by_handle(handle) if self._fallback else None

    async def _lookup_agent(self, agent_id: int) -> DirectoryEntry | None:
        try:
            return await self._store.get_by_agent_id(agent_id)
        except Exception as e:
            logger.warning(f"Directory lookup for agent {agent_id} failed: {e}")
            return None

    async def _registered_entries(self) -> tuple[list[DirectoryEntry], bool]:
        try:
            return await self._store.list_all(registered_only=True), False
        except Exception as e:
            logger.warning(f"Directory listing failed, using fallback: {e}")
            if self._fallback is None:
                return [], True
            return self._fallback.registered(), True

    # ─── Chain reads ─────────────────────────────────────────────────

    async def _read_agent(self, agent_id: int) -> AgentOnChainRecord | None:
        result = await self._provider.get_agent(agent_id)
        return result.record if result.ok else None

    # ─── Public API ──────────────────────────────────────────────────

    async def get_profile(self, handle: str) -> AgentProfileView | None:
        """
        Profile view for a handle.

        Returns None when the handle is unknown or has no agent id.
        """
        entry = await self._lookup_handle(handle)
        if entry is None or entry.agent_id is None:
            return None

        agent_id = entry.agent_id
        chain, chain_head, total_cycles, inscriptions = await asyncio.gather(
            self._read_agent(agent_id),
            self._provider.get_chain_head(agent_id),
            self._provider.get_total_cycles(),
            self._feed.fetch(agent_id=agent_id),
        )
        return self._build_view(agent_id, chain, entry, chain_head, total_cycles, inscriptions)

    async def get_profile_by_id(self, agent_id: int) -> AgentProfileView | None:
        """
        Profile view for an agent id; all reads run concurrently.

        Returns None when neither the chain nor the directory knows the id.
        """
        agent_result, chain_head, total_cycles, inscriptions, entry = await asyncio.gather(
            self._provider.get_agent(agent_id),
            self._provider.get_chain_head(agent_id),
            self._provider.get_total_cycles(),
            self._feed.fetch(agent_id=agent_id),
            self._lookup_agent(agent_id),
        )
        if agent_result.not_found and entry is None:
            return None

        chain = agent_result.record if agent_result.ok else None
        return self._build_view(agent_id, chain, entry, chain_head, total_cycles, inscriptions)

    def _build_view(
        self,
        agent_id: int,
        chain: AgentOnChainRecord | None,
        entry: DirectoryEntry | None,
        chain_head: str | None,
        total_cycles: int | None,
        inscriptions: list[InscriptionEntry],
    ) -> AgentProfileView:
        profile = merge_agent_record(agent_id, chain, entry, chain_head, self._fallback)
        return AgentProfileView(
            profile=profile,
            total_cycles=total_cycles,
            inscriptions=inscriptions,
            timeline=build_timeline(inscriptions),
        )

    async def list_agents(self) -> DirectoryView:
        """All registered agents with live chain data, ordered by agent id."""
        total_cycles, total_agents, (entries, from_fallback) = await asyncio.gather(
            self._provider.get_total_cycles(),
            self._provider.get_total_agents(),
            self._registered_entries(),
        )

        async def load(entry: DirectoryEntry):
            chain, chain_head = await asyncio.gather(
                self._read_agent(entry.agent_id),
                self._provider.get_chain_head(entry.agent_id),
            )
            return merge_agent_record(entry.agent_id, chain, entry, chain_head, self._fallback)

        agents = await asyncio.gather(*(load(e) for e in entries))
        return DirectoryView(
            agents=list(agents),
            total_cycles=total_cycles,
            total_agents=total_agents,
            from_fallback=from_fallback,
        )

    async def latest_inscriptions(self, limit: int = LIVE_FEED_LIMIT) -> list[InscriptionEntry]:
        """Most recent inscriptions across all agents, newest-first."""
        return await self._feed.fetch(limit=limit)

    async def network_stats(self) -> tuple[int | None, int | None]:
        """(total cycles, total agents); None where the read failed."""
        total_cycles, total_agents = await asyncio.gather(
            self._provider.get_total_cycles(),
            self._provider.get_total_agents(),
        )
        return total_cycles, total_agents


__all__ = ["AgentDirectory", "storage_from_config"]
