"""Notion API client - raw access to the search and block-children endpoints."""

import json
import logging
import os
from typing import Any, Dict, Optional

import httpx

from ..config import ConfigManager, config
from ..errors import AuthenticationError, FatalError, NetworkError, RateLimitError


class NotionClient:
    """
    Thin async client for the two Notion endpoints the crawler needs.

    Responses are returned as raw body text; decoding them is left to the
    importer so that it can fall back to a lenient parse.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.notion.com/v1",
        api_version: str = "2022-06-28",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Notion API client.

        Args:
            api_key: The integration token
            base_url: API root URL
            api_version: Value sent in the Notion-Version header
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport, mostly useful in tests
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_config(cls, config_manager: Optional[ConfigManager] = None) -> "NotionClient":
        """Build a client from configuration, reading the token from the environment."""
        cfg = config_manager or config
        token = os.environ.get(cfg.notion_token_env)
        if not token:
            raise FatalError(f"{cfg.notion_token_env} must be set")

        return cls(
            api_key=token,
            base_url=cfg.notion_base_url,
            api_version=cfg.notion_api_version,
            timeout=cfg.notion_timeout,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {
                "Authorization": f"Bearer {self.api_key}",
                "Notion-Version": self.api_version,
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def search_pages(self, start_cursor: Optional[str] = None, page_size: int = 100) -> str:
        """
        Request one page of search results, restricted to pages and sorted by
        last edit time, most recent first.

        Returns:
            The raw response body
        """
        payload: Dict[str, Any] = {
            "filter": {"property": "object", "value": "page"},
            "sort": {"timestamp": "last_edited_time", "direction": "descending"},
            "page_size": page_size,
        }
        if start_cursor:
            payload["start_cursor"] = start_cursor

        return await self._request("POST", "/search", json=payload)

    async def retrieve_block_children(
        self,
        block_id: str,
        start_cursor: Optional[str] = None,
        page_size: int = 100,
    ) -> str:
        """
        Request one page of a block's immediate children.

        Returns:
            The raw response body
        """
        params: Dict[str, Any] = {"page_size": page_size}
        if start_cursor:
            params["start_cursor"] = start_cursor

        return await self._request("GET", f"/blocks/{block_id}/children", params=params)

    async def _request(self, method: str, path: str, **kwargs: Any) -> str:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkError(f"Request to Notion timed out: {method} {path}") from e
        except httpx.RequestError as e:
            raise NetworkError(f"Failed to connect to Notion: {e}") from e

        return self._handle_response(response)

    @staticmethod
    def _handle_response(response: httpx.Response) -> str:
        """Map error statuses to NetworkError subclasses and return the body."""
        status = response.status_code

        if status in (401, 403):
            raise AuthenticationError("Invalid Notion token or unauthorized access", status_code=status)

        if status == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None)

        if status >= 400:
            try:
                message = response.json().get("message", f"API error: {status}")
            except (json.JSONDecodeError, AttributeError):
                message = f"API error: {status}"
            logging.error(f"Notion request failed ({status}): {message}")
            raise NetworkError(message, status_code=status)

        return response.text
