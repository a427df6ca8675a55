"""
Block-root discovery for Retrospect.

Finds, for one page, the shallowest blocks that were edited since the cutoff.
"""

import logging
import time
from collections import deque
from datetime import datetime
from typing import Callable, Deque, List, Optional

from pydantic import BaseModel, Field

from ..config import config
from ..importers import BaseImporter
from ..models import Block, Page, VisitedSet


class RootSearchResult(BaseModel):
    """
    The block roots found in a page.
    """

    roots: List[Block] = Field(
        default_factory=list,
        description="Non-empty blocks edited since the cutoff; order is not guaranteed"
    )

    truncated: bool = Field(
        default=False,
        description="True when the time budget ran out before the search finished"
    )


class RootLocator:
    """
    Breadth-first search for a page's block roots, bounded by a wall-clock budget.
    """

    def __init__(
        self,
        importer: BaseImporter,
        time_budget: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the locator.

        Args:
            importer: Source of block children
            time_budget: Seconds to spend per page (defaults to config value)
            clock: Monotonic clock, replaceable in tests
        """
        self.importer = importer
        self.time_budget = config.root_search_budget if time_budget is None else time_budget
        self.clock = clock

    async def get_page_block_roots(
        self,
        page: Page,
        cutoff: datetime,
        visited: VisitedSet,
    ) -> RootSearchResult:
        """
        Return the non-empty descendant blocks of ``page`` that were edited since the cutoff.

        A block edited since the cutoff is never descended into: its whole
        subtree is picked up later by expansion. Older blocks are descended
        into when they report children. Blocks already in ``visited`` (from
        this page or an earlier one) are skipped, which also breaks cycles.

        The page itself is never a root, because Notion bumps a page's edit
        time whenever any of its blocks changes.

        Some pages are huge, so once the time budget is spent the search stops
        and returns whatever roots it has, with ``truncated`` set.
        """
        queue: Deque[Block] = deque(page.child_blocks)
        result = RootSearchResult()
        abort_at = self.clock() + self.time_budget

        while queue:
            if self.clock() > abort_at:
                logging.debug(f"Aborting root search due to time limit for page: {page.title}")
                result.truncated = True
                break

            block = queue.popleft()
            if block.id in visited:
                logging.debug(f"Already visited block {block.id}, skipping it")
                continue
            visited.add(block.id)

            if block.update_date >= cutoff:
                if not block.is_empty():
                    result.roots.append(block)
                continue

            if block.has_children:
                logging.debug(f"Fetching children of block {block.id}")
                children = await self.importer.retrieve_all_block_children(block.id, page.id)
                queue.extend(children)

        logging.debug(f"Found {len(result.roots)} block roots in page {page.title}")
        return result
