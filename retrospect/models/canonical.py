"""
Canonical data models for Retrospect.

This module defines the standardized internal data structures that raw
Notion API records are converted into before any crawling takes place.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, NewType, Optional, Set
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


# Distinct identifier types so a page id is never passed where a block id is expected.
BlockID = NewType("BlockID", str)
PageID = NewType("PageID", str)

# Membership set used by a traversal phase to avoid revisiting blocks.
VisitedSet = Set[BlockID]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
UNKNOWN_PAGE_TITLE = "Unknown Page Title"


class BlockType(str, Enum):
    """
    Structural kind of a block, reduced to the tag needed for rendering.
    """

    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    TOGGLE = "toggle"
    QUOTE = "quote"
    CALLOUT = "callout"
    CODE = "code"
    CHILD_PAGE = "child_page"
    CHILD_DATABASE = "child_database"
    SYNCED_BLOCK = "synced_block"
    COLUMN_LIST = "column_list"
    COLUMN = "column"
    TABLE = "table"
    TABLE_ROW = "table_row"
    DIVIDER = "divider"
    UNSUPPORTED = "unsupported"

    @classmethod
    def _missing_(cls, value: object) -> "BlockType":
        return cls.UNSUPPORTED


class BlockParent(BaseModel):
    """Back-reference to the entity containing a block. Lookup only."""

    model_config = ConfigDict(frozen=True)

    parent_type: str = Field(
        ...,
        description="The kind of parent (e.g. 'page_id', 'block_id', 'workspace')"
    )

    parent_id: Optional[str] = Field(
        default=None,
        description="Identifier of the parent, absent for workspace parents"
    )

    @classmethod
    def from_notion_parent(cls, data: Optional[Dict[str, Any]]) -> Optional["BlockParent"]:
        if not isinstance(data, dict) or "type" not in data:
            return None
        parent_type = str(data["type"])
        parent_id = data.get(parent_type)
        return cls(
            parent_type=parent_type,
            parent_id=parent_id if isinstance(parent_id, str) else None,
        )


def extract_plain_text(payload: Any) -> str:
    """
    Join the plain text of every inline span in a block payload with single spaces.

    Styling and inline links are discarded.
    """
    if not isinstance(payload, dict):
        return ""

    spans = payload.get("rich_text")
    if not isinstance(spans, list):
        # child_page / child_database carry a bare title instead of rich text
        title = payload.get("title")
        return title if isinstance(title, str) else ""

    parts = []
    for span in spans:
        if not isinstance(span, dict):
            continue
        text = span.get("plain_text")
        if text is None and isinstance(span.get("text"), dict):
            text = span["text"].get("content")
        parts.append(text if isinstance(text, str) else "")
    return " ".join(parts)


def ensure_aware(value: datetime) -> datetime:
    """Treat timestamps without an offset as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Timestamp that is always comparable with an aware cutoff.
Timestamp = Annotated[datetime, AfterValidator(ensure_aware)]


class Block(BaseModel):
    """
    A single unit of notetaking, one node of the remote content graph.

    Identity is defined solely by ``id``: two blocks with the same id compare
    equal and hash the same regardless of their other fields.
    """

    model_config = ConfigDict(frozen=True)

    id: BlockID = Field(
        ...,
        description="The block's identifier in the remote workspace"
    )

    page_id: PageID = Field(
        ...,
        description="The page that owns this block"
    )

    block_type: BlockType = Field(
        default=BlockType.PARAGRAPH,
        description="Structural kind of the block, used for rendering"
    )

    text: str = Field(
        default="",
        description="Plain text of every inline span, joined with a single space"
    )

    creation_date: Timestamp = Field(
        default=EPOCH,
        description="When the block was created"
    )

    update_date: Timestamp = Field(
        default=EPOCH,
        description="When the block was last edited"
    )

    parent: Optional[BlockParent] = Field(
        default=None,
        description="The containing entity, identity only"
    )

    has_children: bool = Field(
        default=False,
        description="Whether the remote side reports descendants (advisory)"
    )

    checked: bool = Field(
        default=False,
        description="Completion state, only meaningful for to-do blocks"
    )

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Block):
            return self.id == other.id
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.id)

    @classmethod
    def from_notion_block(cls, data: Dict[str, Any], page_id: str) -> "Block":
        """
        Build a Block from a raw Notion block record.

        Missing fields fall back to defaults, so this also serves as the
        lenient decoding path for records a strict parse rejected.
        """
        type_name = data.get("type")
        if not isinstance(type_name, str) or not type_name:
            type_name = BlockType.UNSUPPORTED.value
        payload = data.get(type_name)

        fields: Dict[str, Any] = {
            "id": BlockID(data.get("id") or ""),
            "page_id": PageID(page_id),
            "block_type": BlockType(type_name),
            "text": extract_plain_text(payload),
            "parent": BlockParent.from_notion_parent(data.get("parent")),
            "has_children": bool(data.get("has_children") or False),
            "checked": bool(payload.get("checked", False)) if isinstance(payload, dict) else False,
        }
        if data.get("created_time"):
            fields["creation_date"] = data["created_time"]
        if data.get("last_edited_time"):
            fields["update_date"] = data["last_edited_time"]

        return cls(**fields)

    def is_empty(self) -> bool:
        return not self.text.strip()

    def to_markdown(self) -> str:
        if self.block_type == BlockType.HEADING_1:
            return f"# {self.text}"
        if self.block_type == BlockType.HEADING_2:
            return f"## {self.text}"
        if self.block_type == BlockType.HEADING_3:
            return f"### {self.text}"
        if self.block_type == BlockType.BULLETED_LIST_ITEM:
            return f"- {self.text}"
        if self.block_type == BlockType.NUMBERED_LIST_ITEM:
            return f"1. {self.text}"
        if self.block_type == BlockType.TO_DO:
            return f"- [{'x' if self.checked else ' '}] {self.text}"
        if self.block_type == BlockType.TOGGLE:
            return f"> {self.text}"
        return self.text


def title_from_url(url: str) -> str:
    """
    Derive a page title from its canonical URL slug.

    https://www.notion.so/August-19-2024-651d530e07a14f9c97b4084614c5049b -> "August 19 2024"

    This is a heuristic and will misparse titles that themselves end in a
    hyphenated word, but it is good enough to get the gist of the page.
    An untitled page's slug is only its id, which yields an empty title.
    """
    segment = urlparse(url).path.rstrip("/").split("/")[-1]
    if not segment:
        return UNKNOWN_PAGE_TITLE

    parts = segment.split("-")
    return " ".join(parts[:-1])


class Page(BaseModel):
    """
    A top-level container of blocks, hydrated with its immediate children.
    """

    model_config = ConfigDict(frozen=True)

    id: PageID = Field(
        ...,
        description="The page's identifier in the remote workspace"
    )

    title: str = Field(
        ...,
        description="Best-effort title derived from the page URL"
    )

    url: str = Field(
        ...,
        description="The page's canonical URL"
    )

    creation_date: Timestamp = Field(
        default=EPOCH,
        description="When the page was created"
    )

    update_date: Timestamp = Field(
        default=EPOCH,
        description="When the page or any of its blocks was last edited"
    )

    child_blocks: List[Block] = Field(
        default_factory=list,
        description="Immediate children of the page, flat and unexpanded"
    )
