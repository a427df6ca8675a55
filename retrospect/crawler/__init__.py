"""Bounded incremental crawling of block trees."""

from .roots import RootLocator, RootSearchResult
from .expand import TreeExpander
from .orchestrator import Crawler

__all__ = ["RootLocator", "RootSearchResult", "TreeExpander", "Crawler"]
