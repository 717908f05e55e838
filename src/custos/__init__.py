"""
custos - On-chain agent records for the CustosNetwork directory

Reads agent structs from the CustosNetwork proxy on Base over JSON-RPC,
merges them with the agent directory and the inscription feed, and
degrades to safe defaults whenever an upstream is unavailable.

Usage:
    >>> from custos import AgentDirectory, Config
    >>>
    >>> async with AgentDirectory(Config.from_env()) as directory:
    ...     view = await directory.get_profile("auctobot")
    ...     print(view.profile.role, view.profile.cycle_count)
"""

from custos.chain.decoder import decode_agent, decode_chain_head, decode_counter
from custos.chain.encoding import build_calldata, encode_uint256
from custos.chain.provider import CustosProvider
from custos.core.config import Config
from custos.core.exceptions import (
    ConfigurationError,
    CustosError,
    EncodingError,
    NetworkError,
    StorageError,
    ValidationError,
)
from custos.core.logging import configure_from_config, configure_logging, get_logger
from custos.core.types import (
    AgentOnChainRecord,
    DecodeResult,
    DecodeStatus,
    RoleStringLayout,
    RpcResult,
    RpcStatus,
)
from custos.directory import (
    FALLBACK_DIRECTORY,
    AgentDirectory,
    AgentProfile,
    AgentProfileView,
    DirectoryEntry,
    DirectoryStore,
    DirectoryView,
    FallbackDirectory,
    merge_agent_record,
)
from custos.feed import BlockType, InscriptionEntry, InscriptionFeed

__version__ = "0.1.0"
__all__ = [
    # Facade
    "AgentDirectory",
    "CustosProvider",
    "InscriptionFeed",
    "DirectoryStore",
    # Config & logging
    "Config",
    "configure_logging",
    "configure_from_config",
    "get_logger",
    # Codec
    "build_calldata",
    "encode_uint256",
    "decode_agent",
    "decode_chain_head",
    "decode_counter",
    "merge_agent_record",
    # Types
    "AgentOnChainRecord",
    "DecodeResult",
    "DecodeStatus",
    "RoleStringLayout",
    "RpcResult",
    "RpcStatus",
    "AgentProfile",
    "AgentProfileView",
    "DirectoryEntry",
    "DirectoryView",
    "FallbackDirectory",
    "FALLBACK_DIRECTORY",
    "InscriptionEntry",
    "BlockType",
    # Exceptions
    "CustosError",
    "ConfigurationError",
    "ValidationError",
    "EncodingError",
    "NetworkError",
    "StorageError",
]
