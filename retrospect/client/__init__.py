"""Remote API access."""

from .api_client import NotionClient

__all__ = ["NotionClient"]
