"""
Notion importer for Retrospect.

This module fetches recently edited pages and block children from the Notion
API and converts the raw records into Page and Block objects.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import AwareDatetime, BaseModel, ConfigDict, ValidationError

from ..config import config
from ..errors import DecodeError, FatalError
from ..models import Block, BlockID, Page, PageID, title_from_url
from ..models.canonical import Timestamp
from .base import BaseImporter


class RawBlock(BaseModel):
    """Strict shape of a block record, used for the fast decoding path."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    created_time: AwareDatetime
    last_edited_time: AwareDatetime
    has_children: bool
    parent: Optional[Dict[str, Any]] = None


class BlockChildrenResponse(BaseModel):
    results: List[RawBlock]
    next_cursor: Optional[str] = None
    has_more: bool


class RawSearchResult(BaseModel):
    """Strict shape of a search hit; pages and databases share it."""

    model_config = ConfigDict(extra="allow")

    object: str
    id: str
    created_time: AwareDatetime
    last_edited_time: AwareDatetime
    url: Optional[str] = None


class LooseSearchResult(RawSearchResult):
    """Search hit accepted by the lenient path; offset-less timestamps are taken as UTC."""

    created_time: Timestamp
    last_edited_time: Timestamp


class SearchResponse(BaseModel):
    results: List[RawSearchResult]
    next_cursor: Optional[str] = None
    has_more: bool


def _lenient_envelope(body: str) -> Tuple[List[Dict[str, Any]], bool, Optional[str]]:
    """Decode a paginated list response without schema validation."""
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Response body is not valid JSON: {e}", body) from e

    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        raise DecodeError("Response body has no 'results' list", body)

    results = [item for item in data["results"] if isinstance(item, dict)]
    next_cursor = data.get("next_cursor")
    return results, bool(data.get("has_more", False)), next_cursor if isinstance(next_cursor, str) else None


class NotionImporter(BaseImporter):
    """
    Importer backed by the Notion API (or anything speaking its wire format).
    """

    def __init__(self, client: Any, page_size: Optional[int] = None):
        """
        Initialize the importer.

        Args:
            client: A NotionClient, or an object with the same search_pages and
                retrieve_block_children coroutines
            page_size: Results per request (defaults to config value)
        """
        self.client = client
        self.page_size = page_size or config.page_size

    async def get_last_edited_pages(self, cutoff: datetime) -> List[Page]:
        """
        Return all pages edited since the cutoff, most recently edited first.

        Search results are sorted by last edit time, so as soon as one result is
        older than the cutoff the rest of the batch and every later batch can
        be ignored.

        Note: databases are skipped on purpose; only notetaking pages are crawled.
        """
        pages: List[Page] = []
        cursor: Optional[str] = None

        while True:
            body = await self.client.search_pages(start_cursor=cursor, page_size=self.page_size)
            raw_pages, has_more, cursor = self._decode_search(body)

            cutoff_index = next(
                (i for i, raw in enumerate(raw_pages) if raw["last_edited_time"] < cutoff),
                None,
            )
            if cutoff_index is not None:
                raw_pages = raw_pages[:cutoff_index]

            for raw in raw_pages:
                pages.append(await self.notion_page_to_page(raw))

            # either the workspace ran out of pages or we reached pages older than the cutoff
            if not has_more or cutoff_index is not None:
                break
            if not cursor:
                raise FatalError("Search reported more results but returned no cursor")

        logging.info(f"Retrieved {len(pages)} pages edited since {cutoff.isoformat()}")
        return pages

    async def retrieve_all_block_children(self, block_id: BlockID, page_id: PageID) -> List[Block]:
        """
        Retrieve all of the children of the block with the given ID.

        The API returns at most page_size children per request, so this follows
        the cursor until the server reports there is nothing left.
        """
        children: List[Block] = []
        cursor: Optional[str] = None

        while True:
            body = await self.client.retrieve_block_children(
                block_id, start_cursor=cursor, page_size=self.page_size
            )
            blocks, has_more, cursor = self._decode_children(body, page_id)
            children.extend(blocks)

            if not has_more:
                break
            if not cursor:
                raise FatalError(f"Children of block {block_id} reported more results but returned no cursor")

        return children

    async def notion_page_to_page(self, raw: Dict[str, Any]) -> Page:
        """
        Convert a raw search hit into a Page, fetching its immediate children.
        """
        page_id = PageID(raw["id"])
        url = raw.get("url") or ""
        return Page(
            id=page_id,
            title=title_from_url(url),
            url=url,
            creation_date=raw["created_time"],
            update_date=raw["last_edited_time"],
            child_blocks=await self.retrieve_all_block_children(BlockID(raw["id"]), page_id),
        )

    def _decode_children(self, body: str, page_id: PageID) -> Tuple[List[Block], bool, Optional[str]]:
        try:
            response = BlockChildrenResponse.model_validate_json(body)
            blocks = [Block.from_notion_block(raw.model_dump(), page_id) for raw in response.results]
            return blocks, response.has_more, response.next_cursor
        except ValidationError as e:
            logging.debug(f"Strict decode of block children failed, retrying leniently: {e}")

        results, has_more, next_cursor = _lenient_envelope(body)
        try:
            blocks = [Block.from_notion_block(raw, page_id) for raw in results]
        except (ValidationError, TypeError, ValueError) as e:
            raise DecodeError(f"Could not decode block children: {e}", body) from e
        return blocks, has_more, next_cursor

    def _decode_search(self, body: str) -> Tuple[List[Dict[str, Any]], bool, Optional[str]]:
        """Decode a search response into raw page records with parsed timestamps."""
        try:
            response = SearchResponse.model_validate_json(body)
            hits = response.results
            has_more, next_cursor = response.has_more, response.next_cursor
        except ValidationError as e:
            logging.debug(f"Strict decode of search results failed, retrying leniently: {e}")
            results, has_more, next_cursor = _lenient_envelope(body)
            try:
                hits = [LooseSearchResult.model_validate(raw) for raw in results]
            except (ValidationError, TypeError, ValueError) as err:
                raise DecodeError(f"Could not decode search results: {err}", body) from err

        pages = [hit.model_dump() for hit in hits if hit.object == "page"]
        if len(pages) != len(hits):
            logging.debug(f"Skipped {len(hits) - len(pages)} non-page search results")
        return pages, has_more, next_cursor
