"""
Decoder for the proxy's agents(uint256) return data.

The tuple mixes static 32-byte slots with one dynamic ``string`` (the role
name). Static fields are read by fixed slot index; the string is located
either at a fixed byte offset or through the slot-2 pointer, depending on
RoleStringLayout, and is bounds-checked either way.

All functions here are pure: the same payload always yields an equal result.
"""

from __future__ import annotations

import re

from custos.core.contract import (
    MAX_ROLE_BYTES,
    MIN_AGENT_SLOTS,
    ROLE_STRING_BYTE_OFFSET,
    SLOT_ACTIVE,
    SLOT_AGENT_ID,
    SLOT_CHAIN_HEAD,
    SLOT_CYCLE_COUNT,
    SLOT_HEX_LEN,
    SLOT_ROLE_LEVEL,
    SLOT_ROLE_POINTER,
    SLOT_WALLET,
    role_for_level,
)
from custos.core.logging import get_logger
from custos.core.types import (
    AgentOnChainRecord,
    DecodeResult,
    DecodeStatus,
    RoleStringLayout,
)

logger = get_logger("chain.decoder")

# int(x, 16) also accepts "0x", "_" and whitespace; slots must be bare hex
_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")

_ZERO_SLOT = "0" * SLOT_HEX_LEN


def strip_hex_prefix(payload: str) -> str:
    """Drop a leading 0x/0X if present."""
    if payload.startswith(("0x", "0X")):
        return payload[2:]
    return payload


def parse_uint(hex_data: str) -> int | None:
    """Parse bare hex as an unsigned int, or None if it is not hex."""
    if not hex_data or not _HEX_RE.match(hex_data):
        return None
    return int(hex_data, 16)


def decode_uint256(slot: str) -> int | None:
    """Decode one 32-byte slot as uint256."""
    if len(slot) != SLOT_HEX_LEN:
        return None
    return parse_uint(slot)


def _slot(hex_data: str, index: int) -> str:
    start = index * SLOT_HEX_LEN
    return hex_data[start:start + SLOT_HEX_LEN]


def _normalize_hash(slot: str) -> str | None:
    """A 32-byte hash as 0x + 64 hex, with the zero hash treated as absent."""
    if len(slot) != SLOT_HEX_LEN or not _HEX_RE.match(slot):
        return None
    if slot == _ZERO_SLOT:
        return None
    return "0x" + slot


def decode_dynamic_string(
    hex_data: str,
    hex_offset: int,
    max_bytes: int = MAX_ROLE_BYTES,
) -> str | None:
    """
    Decode an ABI string whose length word starts at ``hex_offset``.

    Returns None unless the whole region is in bounds, the declared length
    is in (0, max_bytes), and the bytes are valid UTF-8.
    """
    if hex_offset < 0 or len(hex_data) < hex_offset + SLOT_HEX_LEN:
        return None

    length = decode_uint256(hex_data[hex_offset:hex_offset + SLOT_HEX_LEN])
    if length is None or length <= 0 or length >= max_bytes:
        logger.debug(f"Rejected dynamic string length {length} at offset {hex_offset}")
        return None

    start = hex_offset + SLOT_HEX_LEN
    end = start + length * 2
    if end > len(hex_data):
        logger.debug(f"Dynamic string at offset {hex_offset} runs past payload end")
        return None

    try:
        return bytes.fromhex(hex_data[start:end]).decode("utf-8")
    except (ValueError, UnicodeDecodeError):
        logger.debug(f"Dynamic string at offset {hex_offset} is not valid UTF-8")
        return None


def _role_string_offset(hex_data: str, layout: RoleStringLayout) -> int | None:
    if layout == RoleStringLayout.FIXED_OFFSET:
        return ROLE_STRING_BYTE_OFFSET * 2
    pointer = decode_uint256(_slot(hex_data, SLOT_ROLE_POINTER))
    if pointer is None:
        return None
    return pointer * 2


def decode_role(
    hex_data: str,
    role_level: int,
    layout: RoleStringLayout = RoleStringLayout.FIXED_OFFSET,
) -> str:
    """On-chain role string if it is usable, otherwise the level label."""
    offset = _role_string_offset(hex_data, layout)
    if offset is not None:
        text = decode_dynamic_string(hex_data, offset)
        if text is not None and text.strip():
            return text.upper()
    return role_for_level(role_level)


def decode_agent(
    payload: str,
    layout: RoleStringLayout = RoleStringLayout.FIXED_OFFSET,
) -> DecodeResult:
    """
    Decode agents(uint256) return data into an AgentOnChainRecord.

    Args:
        payload: Raw hex return data, with or without 0x prefix
        layout: How to locate the role string

    Returns:
        DecodeResult with status OK, NOT_FOUND, TRUNCATED or MALFORMED.
        Only an OK result carries a record.
    """
    hex_data = strip_hex_prefix(payload or "")

    if len(hex_data) < MIN_AGENT_SLOTS * SLOT_HEX_LEN:
        return DecodeResult.failure(
            DecodeStatus.TRUNCATED,
            f"expected at least {MIN_AGENT_SLOTS} slots, got {len(hex_data) // SLOT_HEX_LEN}",
        )

    agent_id = decode_uint256(_slot(hex_data, SLOT_AGENT_ID))
    if agent_id is None:
        return DecodeResult.failure(DecodeStatus.MALFORMED, "agentId slot is not hex")
    if agent_id == 0:
        return DecodeResult.failure(DecodeStatus.NOT_FOUND, "agentId is zero")

    wallet_slot = _slot(hex_data, SLOT_WALLET)
    if not _HEX_RE.match(wallet_slot):
        return DecodeResult.failure(DecodeStatus.MALFORMED, "wallet slot is not hex")
    wallet = "0x" + wallet_slot[24:].lower()

    role_level = decode_uint256(_slot(hex_data, SLOT_ROLE_LEVEL))
    if role_level is None:
        return DecodeResult.failure(DecodeStatus.MALFORMED, "roleLevel slot is not hex")

    active_value = decode_uint256(_slot(hex_data, SLOT_ACTIVE))
    if active_value is None:
        return DecodeResult.failure(DecodeStatus.MALFORMED, "active slot is not hex")

    # The one field with a defined default
    cycle_count = decode_uint256(_slot(hex_data, SLOT_CYCLE_COUNT))
    if cycle_count is None:
        cycle_count = 0

    record = AgentOnChainRecord(
        agent_id=agent_id,
        wallet=wallet,
        role_level=role_level,
        role=decode_role(hex_data, role_level, layout),
        cycle_count=cycle_count,
        chain_head=_normalize_hash(_slot(hex_data, SLOT_CHAIN_HEAD)),
        active=active_value == 1,
    )
    return DecodeResult.success(record)


def decode_chain_head(payload: str | None) -> str | None:
    """Decode getChainHead(uint256) return data; zero hash → None."""
    if not payload:
        return None
    return _normalize_hash(strip_hex_prefix(payload)[:SLOT_HEX_LEN])


def decode_counter(payload: str | None) -> int | None:
    """Decode a single uint256 return value (totalCycles, totalAgents)."""
    if not payload:
        return None
    hex_data = strip_hex_prefix(payload)
    if len(hex_data) > SLOT_HEX_LEN:
        hex_data = hex_data[:SLOT_HEX_LEN]
    return parse_uint(hex_data)


__all__ = [
    "strip_hex_prefix",
    "parse_uint",
    "decode_uint256",
    "decode_dynamic_string",
    "decode_role",
    "decode_agent",
    "decode_chain_head",
    "decode_counter",
]
