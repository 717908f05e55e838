"""
Record Merger — one display record from chain reads and directory data.

Precedence:
- chain head: direct getChainHead read, then the struct's chain head
- wallet: struct read, then the directory entry, then the fallback dataset
- role / roleLevel / active / cycleCount: struct read only, else neutral
  defaults (INSCRIBER, 0, False, 0)
- purpose / token fields: directory entry, then the fallback dataset

Pure: no I/O, and the inputs are never modified.
"""

from __future__ import annotations

from custos.core.contract import DEFAULT_ROLE
from custos.core.types import AgentOnChainRecord
from custos.directory.fallback import FallbackDirectory
from custos.directory.types import AgentProfile, DirectoryEntry


def _first(*values: str | None) -> str | None:
    for value in values:
        if value:
            return value
    return None


def merge_agent_record(
    agent_id: int,
    chain: AgentOnChainRecord | None,
    entry: DirectoryEntry | None,
    chain_head: str | None = None,
    fallback: FallbackDirectory | None = None,
) -> AgentProfile:
    """
    Merge the reads for one agent.

    Args:
        agent_id: The agent being displayed
        chain: Decoded agents(uint256) record, or None if the read failed
        entry: Directory entry, or None if absent or the store failed
        chain_head: Direct getChainHead read, or None
        fallback: Static dataset consulted when ``entry`` lacks a field

    Returns:
        AgentProfile
    """
    known = fallback.by_agent_id(agent_id) if fallback is not None else None

    wallet = _first(
        chain.wallet if chain else None,
        entry.wallet if entry else None,
        known.wallet if known else None,
    )

    return AgentProfile(
        agent_id=agent_id,
        handle=_first(entry.handle if entry else None, known.handle if known else None),
        wallet=(wallet or "").lower(),
        role=chain.role if chain else DEFAULT_ROLE,
        role_level=chain.role_level if chain else 0,
        cycle_count=chain.cycle_count if chain else 0,
        chain_head=chain_head or (chain.chain_head if chain else None),
        active=chain.active if chain else False,
        purpose=_first(entry.purpose if entry else None, known.purpose if known else None),
        token_symbol=_first(
            entry.token_symbol if entry else None, known.token_symbol if known else None
        ),
        token_address=_first(
            entry.token_address if entry else None, known.token_address if known else None
        ),
        on_chain=chain is not None,
    )


__all__ = ["merge_agent_record"]
