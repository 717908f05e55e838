"""
Directory and profile types.

DirectoryEntry mirrors a row of the agent registry (handle → on-chain
identity). AgentProfile is the merged record handed to the presentation
layer, serialized with the camelCase keys the pages expect.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from custos.core.contract import DEFAULT_ROLE, basescan_address_url
from custos.core.contract import profile_url as build_profile_url
from custos.feed.types import InscriptionEntry


def _parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


@dataclass
class DirectoryEntry:
    """A registered agent handle and its off-chain metadata."""

    handle: str
    agent_id: int | None = None
    wallet: str | None = None
    purpose: str | None = None
    model_id: str | None = None
    frequency_min: int = 10
    token_address: str | None = None
    token_symbol: str | None = None
    registered_at: datetime | None = None
    last_seen_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage."""
        return {
            "handle": self.handle,
            "agent_id": self.agent_id,
            "wallet": self.wallet,
            "purpose": self.purpose,
            "model_id": self.model_id,
            "frequency_min": self.frequency_min,
            "token_address": self.token_address,
            "token_symbol": self.token_symbol,
            "registered_at": self.registered_at.isoformat() if self.registered_at else None,
            "last_seen_at": self.last_seen_at.isoformat() if self.last_seen_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DirectoryEntry:
        return cls(
            handle=data["handle"],
            agent_id=data.get("agent_id"),
            wallet=data.get("wallet"),
            purpose=data.get("purpose"),
            model_id=data.get("model_id"),
            frequency_min=data.get("frequency_min") or 10,
            token_address=data.get("token_address"),
            token_symbol=data.get("token_symbol"),
            registered_at=_parse_datetime(data.get("registered_at")),
            last_seen_at=_parse_datetime(data.get("last_seen_at")),
        )


@dataclass
class AgentProfile:
    """
    One agent as displayed: chain data merged with directory metadata.

    Defaults are the neutral values shown when the chain read fails.
    """

    agent_id: int
    handle: str | None = None
    wallet: str = ""
    role: str = DEFAULT_ROLE
    role_level: int = 0
    cycle_count: int = 0
    chain_head: str | None = None
    active: bool = False
    purpose: str | None = None
    token_symbol: str | None = None
    token_address: str | None = None
    on_chain: bool = False  # whether the struct read succeeded

    @property
    def profile_url(self) -> str | None:
        return build_profile_url(self.handle) if self.handle else None

    @property
    def explorer_url(self) -> str | None:
        """Basescan page for the agent wallet."""
        return basescan_address_url(self.wallet) if self.wallet else None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses."""
        return {
            "agentId": self.agent_id,
            "handle": self.handle,
            "wallet": self.wallet,
            "role": self.role,
            "roleLevel": self.role_level,
            "cycleCount": self.cycle_count,
            "chainHead": self.chain_head,
            "active": self.active,
            "purpose": self.purpose,
            "tokenSymbol": self.token_symbol,
            "tokenAddress": self.token_address,
        }


@dataclass
class AgentProfileView:
    """Everything a profile page needs for one agent."""

    profile: AgentProfile
    total_cycles: int | None = None
    inscriptions: list[InscriptionEntry] = field(default_factory=list)  # newest-first
    timeline: list[InscriptionEntry] = field(default_factory=list)      # oldest-first

    def to_dict(self) -> dict[str, Any]:
        return {
            "agent": self.profile.to_dict(),
            "totalCycles": self.total_cycles,
            "inscriptions": [i.to_dict() for i in self.inscriptions],
            "timeline": [i.to_dict() for i in self.timeline],
        }


@dataclass
class DirectoryView:
    """The agent directory: network totals plus one merged record per agent."""

    agents: list[AgentProfile] = field(default_factory=list)
    total_cycles: int | None = None
    total_agents: int | None = None
    from_fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "agents": [a.to_dict() for a in self.agents],
            "totalCycles": self.total_cycles,
            "totalAgents": self.total_agents,
        }


__all__ = [
    "DirectoryEntry",
    "AgentProfile",
    "AgentProfileView",
    "DirectoryView",
]
