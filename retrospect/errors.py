"""
Error types raised while talking to the Notion API and crawling its content.

Exceeding the root-search time budget, skipping duplicate blocks and pruning
empty blocks are not errors and have no representation here.
"""

from typing import Optional


class RetrospectError(Exception):
    """Base class for all Retrospect errors."""


class NetworkError(RetrospectError):
    """The transport failed or the API answered with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(NetworkError):
    """The integration token was rejected."""


class RateLimitError(NetworkError):
    """The API asked us to slow down."""

    def __init__(self, message: str = "Rate limited by the Notion API", retry_after: Optional[int] = None):
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class DecodeError(RetrospectError):
    """A response body could not be decoded, even by the lenient fallback."""

    def __init__(self, message: str, body: str = ""):
        super().__init__(message)
        # keep only an excerpt, bodies can be large
        self.body = body[:500]


class FatalError(RetrospectError):
    """Any other condition the crawl cannot continue from."""
