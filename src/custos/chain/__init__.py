"""Chain module: calldata encoding, eth_call transport and struct decoding."""

from custos.chain.cache import ReadCache
from custos.chain.decoder import decode_agent, decode_chain_head, decode_counter
from custos.chain.encoding import build_calldata, encode_uint256
from custos.chain.provider import CustosProvider

__all__ = [
    "CustosProvider",
    "ReadCache",
    "build_calldata",
    "encode_uint256",
    "decode_agent",
    "decode_chain_head",
    "decode_counter",
]
