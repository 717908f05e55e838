"""
ABI calldata encoding for static uint256 arguments.

Only what the proxy's read functions need: a 4-byte selector followed by
left-padded 32-byte big-endian integers.
"""

from __future__ import annotations

import re

from custos.core.exceptions import EncodingError

UINT256_MAX = (1 << 256) - 1

_SELECTOR_RE = re.compile(r"^[0-9a-fA-F]{8}$")


def encode_uint256(value: int) -> str:
    """Encode a non-negative int as 32-byte hex (64 chars, no prefix)."""
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(
            f"uint256 argument must be an int, got {type(value).__name__}",
            field="value",
        )
    if value < 0:
        raise EncodingError("uint256 argument must not be negative", field="value",
                            details={"value": value})
    if value > UINT256_MAX:
        raise EncodingError("uint256 argument exceeds 256 bits", field="value")
    return f"{value:064x}"


def normalize_selector(selector: str) -> str:
    """Strip an optional 0x prefix and validate a 4-byte selector."""
    clean = selector[2:] if selector.startswith(("0x", "0X")) else selector
    if not _SELECTOR_RE.match(clean):
        raise EncodingError(
            "function selector must be 4 bytes of hex",
            field="selector",
            details={"selector": selector},
        )
    return clean.lower()


def build_calldata(selector: str, *args: int) -> str:
    """
    Build 0x-prefixed calldata: selector + each argument as uint256.

    Example:
        >>> build_calldata("513856c8", 3)
        '0x513856c80000000000000000000000000000000000000000000000000000000000000003'
    """
    return "0x" + normalize_selector(selector) + "".join(encode_uint256(a) for a in args)


__all__ = [
    "UINT256_MAX",
    "encode_uint256",
    "normalize_selector",
    "build_calldata",
]
