"""Feed module: upstream inscription history."""

from custos.feed.client import InscriptionFeed, build_timeline, parse_inscriptions
from custos.feed.types import BlockType, InscriptionEntry

__all__ = [
    "InscriptionFeed",
    "InscriptionEntry",
    "BlockType",
    "build_timeline",
    "parse_inscriptions",
]
