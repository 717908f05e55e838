"""
CustosNetwork proxy contract interface.

Deployed address, function selectors and the return-data layout of the
agents(uint256) struct read. The contract is not under our control; these
values mirror what the live proxy on Base mainnet exposes.
"""

from __future__ import annotations


# ───────────────────────────────────────────────────────────────────
# Deployment
# ───────────────────────────────────────────────────────────────────

PROXY_ADDRESS = "0x9B5FD0B02355E954F159F33D7886e4198ee777b9"

DEFAULT_RPC_URL = "https://mainnet.base.org"

BASE_CHAIN_ID = 8453

BASESCAN_URL = "https://basescan.org"

INSCRIPTION_FEED_URL = "https://dashboard.claws.tech/api/inscriptions"

PROFILE_BASE_URL = "https://agents.claws.tech"


# ───────────────────────────────────────────────────────────────────
# Function Selectors
#
# keccak256(signature)[:4], as deployed on the proxy.
# ───────────────────────────────────────────────────────────────────

FUNCTION_SELECTORS: dict[str, str] = {
    "agents(uint256)": "513856c8",
    "getChainHead(uint256)": "8b7b2231",
    "totalCycles()": "a1657681",
    "totalAgents()": "c5053712",
}

# Query types used as cache keys
QUERY_AGENT = "agent"
QUERY_CHAIN_HEAD = "chain_head"
QUERY_TOTAL_CYCLES = "total_cycles"
QUERY_TOTAL_AGENTS = "total_agents"

QUERY_SELECTORS: dict[str, str] = {
    QUERY_AGENT: FUNCTION_SELECTORS["agents(uint256)"],
    QUERY_CHAIN_HEAD: FUNCTION_SELECTORS["getChainHead(uint256)"],
    QUERY_TOTAL_CYCLES: FUNCTION_SELECTORS["totalCycles()"],
    QUERY_TOTAL_AGENTS: FUNCTION_SELECTORS["totalAgents()"],
}


# ───────────────────────────────────────────────────────────────────
# agents(uint256) return layout
#
# Slot = 32 bytes = 64 hex chars.
#   0  uint256 agentId
#   1  address wallet (low 20 bytes)
#   2  offset pointer to the role string
#   3  uint256 roleLevel
#   4  uint256 cycleCount
#   5  bytes32 chainHead
#   8  bool    active
# ───────────────────────────────────────────────────────────────────

SLOT_HEX_LEN = 64
MIN_AGENT_SLOTS = 9

SLOT_AGENT_ID = 0
SLOT_WALLET = 1
SLOT_ROLE_POINTER = 2
SLOT_ROLE_LEVEL = 3
SLOT_CYCLE_COUNT = 4
SLOT_CHAIN_HEAD = 5
SLOT_ACTIVE = 8

# Byte offset of the role string when read at its fixed position
ROLE_STRING_BYTE_OFFSET = 320

# Declared role string lengths at or above this are treated as corrupt
MAX_ROLE_BYTES = 64

ROLE_NAMES: dict[int, str] = {
    0: "INSCRIBER",
    1: "INSCRIBER",
    2: "VALIDATOR",
    3: "COORDINATOR",
    4: "ARCHITECT",
}

DEFAULT_ROLE = "INSCRIBER"


def role_for_level(level: int) -> str:
    """Map an on-chain role level to its label."""
    return ROLE_NAMES.get(level, DEFAULT_ROLE)


def selector_for(query: str) -> str:
    """Get the 4-byte selector (hex, no prefix) for a query type."""
    return QUERY_SELECTORS[query]


def basescan_address_url(address: str) -> str:
    """Explorer link for a wallet or contract."""
    return f"{BASESCAN_URL}/address/{address}"


def basescan_tx_url(tx_hash: str) -> str:
    """Explorer link for a transaction."""
    return f"{BASESCAN_URL}/tx/{tx_hash}"


def profile_url(handle: str) -> str:
    """Public profile page for a directory handle."""
    return f"{PROFILE_BASE_URL}/{handle}"


__all__ = [
    "PROXY_ADDRESS",
    "DEFAULT_RPC_URL",
    "BASE_CHAIN_ID",
    "INSCRIPTION_FEED_URL",
    "FUNCTION_SELECTORS",
    "QUERY_AGENT",
    "QUERY_CHAIN_HEAD",
    "QUERY_TOTAL_CYCLES",
    "QUERY_TOTAL_AGENTS",
    "ROLE_NAMES",
    "DEFAULT_ROLE",
    "MAX_ROLE_BYTES",
    "role_for_level",
    "selector_for",
    "basescan_address_url",
    "basescan_tx_url",
    "profile_url",
]
