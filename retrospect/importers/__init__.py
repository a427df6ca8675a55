"""Workspace importers."""

from .base import BaseImporter
from .notion import NotionImporter
from .mock import MockNotionClient

__all__ = ["BaseImporter", "NotionImporter", "MockNotionClient"]
