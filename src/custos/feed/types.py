"""
Inscription feed types.

An inscription is one recorded proof-of-work event for an agent. The
upstream dashboard owns the schema; parsing here is tolerant of missing
optional fields and of ids arriving as strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from custos.core.contract import basescan_tx_url


class BlockType(str, Enum):
    """Category tag of an inscription."""

    BUILD = "build"
    RESEARCH = "research"
    MARKET = "market"
    SYSTEM = "system"
    LESSON = "lesson"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> BlockType:
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return cls.UNKNOWN


def _optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class InscriptionEntry:
    """One proof event as served by the dashboard feed."""

    id: int
    agent_id: int | None
    block_type: str
    summary: str
    cycle_count: int | None = None
    tx_hash: str | None = None
    block_number: int | None = None
    proof_hash: str | None = None
    prev_hash: str | None = None
    basescan_url: str | None = None

    @property
    def display_type(self) -> BlockType:
        """Block type for display; anything outside the known set is UNKNOWN."""
        return BlockType.parse(self.block_type)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InscriptionEntry:
        """
        Parse one feed item.

        Raises:
            ValueError: the item has no usable id
        """
        entry_id = _optional_int(data.get("id"))
        if entry_id is None:
            raise ValueError(f"inscription has no usable id: {data.get('id')!r}")

        block_type = data.get("blockType")
        summary = data.get("summary")
        tx_hash = _optional_str(data.get("txHash"))
        basescan_url = _optional_str(data.get("basescanUrl"))
        if basescan_url is None and tx_hash is not None:
            basescan_url = basescan_tx_url(tx_hash)
        return cls(
            id=entry_id,
            agent_id=_optional_int(data.get("agentId")),
            block_type=block_type if isinstance(block_type, str) else BlockType.UNKNOWN.value,
            summary=summary if isinstance(summary, str) else "",
            cycle_count=_optional_int(data.get("cycleCount")),
            tx_hash=tx_hash,
            block_number=_optional_int(data.get("blockNumber")),
            proof_hash=_optional_str(data.get("proofHash")),
            prev_hash=_optional_str(data.get("prevHash")),
            basescan_url=basescan_url,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "agentId": self.agent_id,
            "blockType": self.block_type,
            "summary": self.summary,
            "cycleCount": self.cycle_count,
            "txHash": self.tx_hash,
            "blockNumber": self.block_number,
            "proofHash": self.proof_hash,
            "prevHash": self.prev_hash,
            "basescanUrl": self.basescan_url,
        }


__all__ = ["BlockType", "InscriptionEntry"]
