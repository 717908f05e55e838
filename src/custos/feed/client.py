"""
Inscription Feed — client for the dashboard's inscription history API.

The upstream response shape has varied over time; the item array has been
served under ``cycles``, under ``inscriptions``, and as a bare list. Keys
are tried in that order and anything else yields an empty list.

Any failure (transport, non-2xx, malformed JSON) also yields an empty list
so a page can always render.
"""

from __future__ import annotations

from typing import Any

import httpx

from custos.chain.cache import ReadCache
from custos.core.config import Config
from custos.core.exceptions import ValidationError
from custos.core.logging import get_logger
from custos.feed.types import InscriptionEntry

logger = get_logger("feed.client")

# Priority order for locating the item array in a feed response
FEED_ITEM_KEYS = ("cycles", "inscriptions")

QUERY_INSCRIPTIONS = "inscriptions"


def extract_feed_items(payload: Any) -> list[dict[str, Any]]:
    """Pick the item array out of a feed response, or [] if there is none."""
    items: Any = None
    if isinstance(payload, dict):
        for key in FEED_ITEM_KEYS:
            if isinstance(payload.get(key), list):
                items = payload[key]
                break
    elif isinstance(payload, list):
        items = payload

    if not items:
        return []
    return [item for item in items if isinstance(item, dict)]


def parse_inscriptions(
    payload: Any,
    agent_id: int | None = None,
    limit: int | None = None,
) -> list[InscriptionEntry]:
    """
    Normalize a feed response into entries, newest-first as served.

    With ``agent_id`` set, entries for other agents are dropped; entries
    carrying no agent id are kept.
    """
    entries: list[InscriptionEntry] = []
    for item in extract_feed_items(payload):
        try:
            entry = InscriptionEntry.from_dict(item)
        except ValueError as e:
            logger.debug(f"Skipping feed item: {e}")
            continue
        if agent_id is not None and entry.agent_id is not None and entry.agent_id != agent_id:
            continue
        entries.append(entry)

    if limit is not None:
        entries = entries[:limit]
    return entries


def build_timeline(entries: list[InscriptionEntry]) -> list[InscriptionEntry]:
    """Oldest-first copy of a newest-first feed, for chronological display."""
    return list(reversed(entries))


class InscriptionFeed:
    """
    Reads inscription history from the dashboard API.

    Usage:
        feed = InscriptionFeed()
        recent = await feed.fetch(limit=6)
        history = await feed.fetch(agent_id=3, limit=30)
    """

    def __init__(
        self,
        config: Config | None = None,
        http_client: httpx.AsyncClient | None = None,
        cache: ReadCache | None = None,
    ) -> None:
        self._config = config or Config()
        self._http_client = http_client
        self._owns_client = False
        self._cache = cache

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazy-init HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._config.feed_timeout)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        """Close owned HTTP client."""
        if self._owns_client and self._http_client:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_client = False

    async def _fetch_raw(self, agent_id: int | None, limit: int) -> list[dict[str, Any]] | None:
        params: dict[str, Any] = {"limit": limit}
        if agent_id is not None:
            params["agentId"] = agent_id

        client = await self._get_client()
        try:
            response = await client.get(
                self._config.feed_url, params=params, timeout=self._config.feed_timeout
            )
        except httpx.HTTPError as e:
            logger.warning(f"Inscription feed unreachable: {e}")
            return None

        if not response.is_success:
            logger.warning(f"Inscription feed returned HTTP {response.status_code}")
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Inscription feed returned malformed JSON")
            return None

        return [e.to_dict() for e in parse_inscriptions(payload, agent_id, limit)]

    async def fetch(
        self,
        agent_id: int | None = None,
        limit: int | None = None,
    ) -> list[InscriptionEntry]:
        """
        Fetch recent inscriptions, newest-first.

        Args:
            agent_id: Only this agent's inscriptions (plus untagged ones)
            limit: Page size; defaults to config.feed_limit

        Returns:
            Entries, or [] if the feed is unavailable

        Raises:
            ValidationError: limit is below 1
        """
        if limit is None:
            limit = self._config.feed_limit
        elif limit < 1:
            raise ValidationError("limit must be at least 1", field="limit", details={"limit": limit})

        async def fetch_fn() -> list[dict[str, Any]] | None:
            return await self._fetch_raw(agent_id, limit)

        if self._cache is not None:
            items, _ = await self._cache.get_or_fetch(
                f"{QUERY_INSCRIPTIONS}:{limit}", agent_id, fetch_fn, ttl=self._config.feed_cache_ttl
            )
        else:
            items = await fetch_fn()

        if items is None:
            return []
        return [InscriptionEntry.from_dict(item) for item in items]


__all__ = [
    "FEED_ITEM_KEYS",
    "InscriptionFeed",
    "extract_feed_items",
    "parse_inscriptions",
    "build_timeline",
]
