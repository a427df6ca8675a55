"""
Crawl orchestration for Retrospect.

Sequences page discovery, exclusion, root discovery and expansion into the
list of pages whose recent content should be rendered.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from ..config import ConfigManager, config
from ..importers import BaseImporter
from ..models import ParsedPage, VisitedSet
from .expand import TreeExpander
from .roots import RootLocator


class Crawler:
    """
    Runs one bounded incremental crawl over a workspace.
    """

    def __init__(
        self,
        importer: BaseImporter,
        config_manager: Optional[ConfigManager] = None,
        should_exclude: Optional[Callable[[str, str], bool]] = None,
        root_locator: Optional[RootLocator] = None,
        tree_expander: Optional[TreeExpander] = None,
    ):
        """
        Initialize the crawler.

        Args:
            importer: Source of pages and block children
            config_manager: Configuration (defaults to the global config)
            should_exclude: ``(title, url) -> bool`` predicate; defaults to the
                configured exclusion patterns
            root_locator: Override for root discovery
            tree_expander: Override for expansion
        """
        self.importer = importer
        self.config = config_manager or config
        self.should_exclude = should_exclude or self.config.should_exclude_page
        self.root_locator = root_locator or RootLocator(importer, time_budget=self.config.root_search_budget)
        self.tree_expander = tree_expander or TreeExpander(importer)

    async def parse_last_edited(
        self,
        days: Optional[int] = None,
        cutoff: Optional[datetime] = None,
    ) -> List[ParsedPage]:
        """
        Crawl the pages edited since the cutoff and expand their recently edited content.

        Args:
            days: Size of the recency window; ignored when ``cutoff`` is given
            cutoff: Explicit cutoff timestamp

        Returns:
            One ParsedPage per page that had at least one non-empty block root
        """
        if cutoff is None:
            days = self.config.lookback_days if days is None else days
            cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        logging.info(f"Analyzing notes edited since {cutoff.isoformat()}")

        pages = await self.importer.get_last_edited_pages(cutoff)

        # both sets span every page in this run, so a block seen under one page is skipped under another
        root_visited: VisitedSet = set()
        expansion_visited: VisitedSet = set()
        parsed_pages: List[ParsedPage] = []

        for page in pages:
            logging.debug(f"Page URL: {page.url}")
            if self.should_exclude(page.title, page.url):
                logging.debug(f"Skipping excluded page: {page.title}")
                continue

            search = await self.root_locator.get_page_block_roots(page, cutoff, root_visited)
            if search.truncated:
                logging.info(f"Root search for page '{page.title}' hit its time budget; results are partial")
            if not search.roots:
                continue

            logging.debug(f"Found {len(search.roots)} new block roots for page: {page.title}")
            trees = await self.tree_expander.expand_block_roots(search.roots, expansion_visited)
            parsed_pages.append(ParsedPage(
                page_id=page.id,
                title=page.title,
                page_content=trees,
                truncated=search.truncated,
            ))

        logging.info(f"Retrieved {len(parsed_pages)} pages with non-empty block roots")
        return parsed_pages
