"""Data models for Retrospect."""

from .canonical import (
    Block,
    BlockID,
    BlockParent,
    BlockType,
    Page,
    PageID,
    VisitedSet,
    title_from_url,
)
from .tree import BlockNode, BlockTree, ParsedPage

__all__ = [
    "Block",
    "BlockID",
    "BlockParent",
    "BlockType",
    "Page",
    "PageID",
    "VisitedSet",
    "title_from_url",
    "BlockNode",
    "BlockTree",
    "ParsedPage",
]
