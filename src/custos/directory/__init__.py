"""Directory module: agent registry, record merging and page assembly."""

from custos.directory.fallback import FALLBACK_DIRECTORY, FallbackDirectory
from custos.directory.merger import merge_agent_record
from custos.directory.service import AgentDirectory
from custos.directory.store import DirectoryStore, normalize_handle
from custos.directory.types import (
    AgentProfile,
    AgentProfileView,
    DirectoryEntry,
    DirectoryView,
)

__all__ = [
    "AgentDirectory",
    "DirectoryStore",
    "FallbackDirectory",
    "FALLBACK_DIRECTORY",
    "merge_agent_record",
    "normalize_handle",
    "AgentProfile",
    "AgentProfileView",
    "DirectoryEntry",
    "DirectoryView",
]
