"""
Mock Notion workspace for testing Retrospect.

This module provides an in-memory stand-in for NotionClient that answers the
search and block-children endpoints with the same JSON the real API sends,
so the importer and crawler can run without network access.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional


def _timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def make_block(
    block_id: str,
    text: str = "",
    edited: Optional[datetime] = None,
    block_type: str = "paragraph",
    has_children: bool = False,
    parent_id: Optional[str] = None,
    checked: Optional[bool] = None,
) -> Dict[str, Any]:
    """Build a raw block record shaped like the Notion API's."""
    edited = edited or datetime(2024, 1, 1, tzinfo=timezone.utc)
    payload: Dict[str, Any] = {
        "rich_text": [
            {"type": "text", "text": {"content": text, "link": None}, "plain_text": text}
        ] if text else [],
        "color": "default",
    }
    if checked is not None:
        payload["checked"] = checked

    return {
        "object": "block",
        "id": block_id,
        "parent": {"type": "block_id", "block_id": parent_id} if parent_id else None,
        "created_time": _timestamp(edited),
        "last_edited_time": _timestamp(edited),
        "has_children": has_children,
        "archived": False,
        "type": block_type,
        block_type: payload,
    }


def make_page(page_id: str, title: str, edited: datetime, object_type: str = "page") -> Dict[str, Any]:
    """Build a raw search hit; the URL slug follows Notion's title-plus-id pattern."""
    slug = "-".join(title.split() + [page_id.replace("-", "")])
    return {
        "object": object_type,
        "id": page_id,
        "created_time": _timestamp(edited),
        "last_edited_time": _timestamp(edited),
        "url": f"https://www.notion.so/{slug}",
    }


class MockNotionClient:
    """
    In-memory Notion workspace.

    Pages are served by ``search_pages`` sorted by last edit time, and
    children by ``retrieve_block_children``, both paginated with opaque
    offset cursors. Every children request is recorded in ``children_requests``.
    """

    def __init__(
        self,
        pages: Optional[List[Dict[str, Any]]] = None,
        children: Optional[Dict[str, List[Dict[str, Any]]]] = None,
    ):
        """
        Initialize the mock workspace.

        Args:
            pages: Raw page (or database) search hits
            children: Raw child block records keyed by parent page/block id
        """
        if pages is None and children is None:
            pages, children = sample_workspace()
        self.pages = list(pages or [])
        self.children = dict(children or {})
        self.children_requests: List[str] = []
        self.search_requests = 0

    async def search_pages(self, start_cursor: Optional[str] = None, page_size: int = 100) -> str:
        self.search_requests += 1
        ordered = sorted(self.pages, key=lambda p: p["last_edited_time"], reverse=True)
        return self._paginate(ordered, start_cursor, page_size)

    async def retrieve_block_children(
        self,
        block_id: str,
        start_cursor: Optional[str] = None,
        page_size: int = 100,
    ) -> str:
        self.children_requests.append(block_id)
        return self._paginate(self.children.get(block_id, []), start_cursor, page_size)

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> "MockNotionClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @staticmethod
    def _paginate(items: List[Dict[str, Any]], start_cursor: Optional[str], page_size: int) -> str:
        start = int(start_cursor) if start_cursor else 0
        end = start + page_size
        has_more = end < len(items)
        return json.dumps({
            "object": "list",
            "results": items[start:end],
            "next_cursor": str(end) if has_more else None,
            "has_more": has_more,
        })


def sample_workspace(now: Optional[datetime] = None):
    """
    Create a small workspace with recent and stale notes.

    Returns:
        A ``(pages, children)`` pair suitable for MockNotionClient
    """
    now = now or datetime.now(timezone.utc)
    recent = now - timedelta(days=1)
    stale = now - timedelta(days=60)

    pages = [
        make_page("page-journal", "Journal May 22", recent),
        make_page("page-work", "Work Notes", recent - timedelta(hours=3)),
        make_page("page-reading", "Reading List", stale),
    ]

    children = {
        "page-journal": [
            make_block("j-meeting", "Met with Jane Doe about Project Phoenix.", recent,
                       "heading_2", has_children=True),
            make_block("j-old", "Grocery list", stale, "toggle", has_children=True),
            make_block("j-empty", "", recent),
        ],
        "j-meeting": [
            make_block("j-birthday", "Her birthday is on June 15th.", stale, "bulleted_list_item"),
            make_block("j-deadline", "Project deadline is next month.", stale, "bulleted_list_item"),
        ],
        "j-old": [
            make_block("j-coffee", "Coffee at Starbucks Downtown at 3 PM.", recent, "to_do"),
        ],
        "page-work": [
            make_block("w-approval", "ACME Corporation approved the AI Integration Project.", recent,
                       has_children=True),
        ],
        "w-approval": [
            make_block("w-budget", "Budget allocated: $50,000", stale, "numbered_list_item"),
            make_block("w-lead", "Team lead: Sarah Johnson", stale, "numbered_list_item"),
        ],
        "page-reading": [
            make_block("r-book", "Finished reading The Pragmatic Programmer.", stale),
        ],
    }
    return pages, children
