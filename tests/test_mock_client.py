import asyncio
import json
from datetime import datetime, timezone

import pytest

from retrospect.importers.mock import MockNotionClient, make_block, make_page, sample_workspace


@pytest.fixture
def workspace():
    now = datetime(2024, 5, 22, 12, tzinfo=timezone.utc)
    pages, children = sample_workspace(now)
    pages.append(make_page("db-tasks", "Tasks", now, object_type="database"))
    return MockNotionClient(pages=pages, children=children)


def test_search_is_sorted_by_last_edit(workspace):
    body = json.loads(asyncio.run(workspace.search_pages(page_size=10)))
    edits = [hit["last_edited_time"] for hit in body["results"]]
    assert edits == sorted(edits, reverse=True)
    assert body["has_more"] is False
    assert body["next_cursor"] is None


def test_children_paginate_with_cursor(workspace):
    first = json.loads(asyncio.run(workspace.retrieve_block_children("page-journal", page_size=2)))
    assert [b["id"] for b in first["results"]] == ["j-meeting", "j-old"]
    assert first["has_more"] is True

    second = json.loads(asyncio.run(
        workspace.retrieve_block_children("page-journal", start_cursor=first["next_cursor"], page_size=2)
    ))
    assert [b["id"] for b in second["results"]] == ["j-empty"]
    assert second["has_more"] is False
    assert workspace.children_requests == ["page-journal", "page-journal"]


def test_unknown_block_has_no_children(workspace):
    body = json.loads(asyncio.run(workspace.retrieve_block_children("nope")))
    assert body["results"] == []


def test_make_block_wire_shape():
    raw = make_block("b-1", "Buy milk", block_type="to_do", checked=True)
    assert raw["type"] == "to_do"
    assert raw["to_do"]["rich_text"][0]["plain_text"] == "Buy milk"
    assert raw["to_do"]["checked"] is True
    assert raw["last_edited_time"].endswith("Z")
