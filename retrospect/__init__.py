"""
Retrospect: recent-notes harvesting for guided retrospectives.

Finds the blocks of a Notion workspace that changed within a recent window
and rebuilds them as trees ready to be rendered into markdown.
"""

__version__ = "0.1.0"

from .config import ConfigManager
from .models import Block, Page, BlockTree, ParsedPage
from .client import NotionClient
from .importers import BaseImporter, NotionImporter, MockNotionClient
from .crawler import Crawler, RootLocator, TreeExpander
from .render import to_prompt_text

__all__ = [
    "ConfigManager",
    "Block",
    "Page",
    "BlockTree",
    "ParsedPage",
    "NotionClient",
    "BaseImporter",
    "NotionImporter",
    "MockNotionClient",
    "Crawler",
    "RootLocator",
    "TreeExpander",
    "to_prompt_text",
]
