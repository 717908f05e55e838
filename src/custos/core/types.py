"""
Type definitions for the on-chain read path.

Every fallible step returns a result object with an explicit status rather
than raising or returning a bare None; callers check ``.ok`` and handle both
variants.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class RoleStringLayout(str, Enum):
    """Where the dynamic role string lives in agents(uint256) return data."""

    FIXED_OFFSET = "fixed_offset"  # byte 320, regardless of slot 2
    SLOT_POINTER = "slot_pointer"  # byte offset read from slot 2

    @classmethod
    def from_string(cls, value: str) -> RoleStringLayout:
        value_lower = value.lower().replace("-", "_")
        for member in cls:
            if member.value == value_lower:
                return member
        raise ValueError(f"Unknown role layout: {value}. Supported: {[m.value for m in cls]}")


class RpcStatus(str, Enum):
    """Outcome of a single eth_call."""

    OK = "ok"
    EMPTY = "empty"                    # result absent or "0x"
    RPC_ERROR = "rpc_error"            # JSON-RPC error object
    HTTP_ERROR = "http_error"          # non-2xx
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"
    MALFORMED = "malformed"            # body is not a JSON-RPC object
    NOT_CONFIGURED = "not_configured"  # no RPC URL


@dataclass(frozen=True)
class RpcResult:
    """Raw eth_call outcome. ``data`` keeps the 0x prefix when present."""

    status: RpcStatus
    data: str | None = None
    error: str | None = None
    cache_hit: bool = False

    @property
    def ok(self) -> bool:
        return self.status == RpcStatus.OK and self.data is not None

    @classmethod
    def success(cls, data: str, cache_hit: bool = False) -> RpcResult:
        return cls(status=RpcStatus.OK, data=data, cache_hit=cache_hit)

    @classmethod
    def failure(cls, status: RpcStatus, error: str | None = None) -> RpcResult:
        return cls(status=status, error=error)


class DecodeStatus(str, Enum):
    """Outcome of decoding an agents(uint256) payload."""

    OK = "ok"
    NOT_FOUND = "not_found"    # agentId slot is zero
    TRUNCATED = "truncated"    # fewer than 9 slots
    MALFORMED = "malformed"    # a required slot is not hex
    NO_DATA = "no_data"        # the RPC call itself failed


@dataclass(frozen=True)
class AgentOnChainRecord:
    """One agent as stored in the proxy's agents mapping."""

    agent_id: int
    wallet: str
    role_level: int
    role: str
    cycle_count: int
    chain_head: str | None
    active: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "agentId": self.agent_id,
            "wallet": self.wallet,
            "roleLevel": self.role_level,
            "role": self.role,
            "cycleCount": self.cycle_count,
            "chainHead": self.chain_head,
            "active": self.active,
        }


@dataclass(frozen=True)
class DecodeResult:
    """Either a fully populated record or a reason there is none."""

    status: DecodeStatus
    record: AgentOnChainRecord | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == DecodeStatus.OK and self.record is not None

    @property
    def not_found(self) -> bool:
        return self.status == DecodeStatus.NOT_FOUND

    @classmethod
    def success(cls, record: AgentOnChainRecord) -> DecodeResult:
        return cls(status=DecodeStatus.OK, record=record)

    @classmethod
    def failure(cls, status: DecodeStatus, reason: str | None = None) -> DecodeResult:
        return cls(status=status, reason=reason)


__all__ = [
    "RoleStringLayout",
    "RpcStatus",
    "RpcResult",
    "DecodeStatus",
    "AgentOnChainRecord",
    "DecodeResult",
]
