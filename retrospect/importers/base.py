"""
Base importer interface for Retrospect.

This module defines the abstract interface that all workspace importers must implement.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from ..models import Block, BlockID, Page, PageID


class BaseImporter(ABC):
    """
    Abstract base class for all workspace importers.

    An importer discovers recently edited pages and fetches the immediate
    children of any page or block, converting raw records into Page and
    Block objects.
    """

    @abstractmethod
    async def get_last_edited_pages(self, cutoff: datetime) -> List[Page]:
        """
        Retrieve every page edited at or after the cutoff.

        Returns:
            Pages ordered by last edit time, most recent first, each
            hydrated with its immediate child blocks
        """
        pass

    @abstractmethod
    async def retrieve_all_block_children(self, block_id: BlockID, page_id: PageID) -> List[Block]:
        """
        Retrieve the immediate children of a page or block, across all result pages.

        Returns:
            Child blocks in server order
        """
        pass
