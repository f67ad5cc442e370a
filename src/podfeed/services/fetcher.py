"""Bounded-time retrieval of RSS/Atom feed documents."""

import asyncio
import logging
import re

import httpx

from podfeed.core.config import DEFAULT_FEED_ACCEPT, DEFAULT_FEED_USER_AGENT
from podfeed.core.errors import FeedTimeoutError, FetchError, InvalidInputError

logger = logging.getLogger(__name__)

# Feed retrieval deadline (in seconds)
DEFAULT_DEADLINE = 9.0

_HTTP_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


def validate_feed_url(feed_url: str | None) -> str:
    """
    Check that a feed URL is present and uses an HTTP(S) scheme.

    Args:
        feed_url: Candidate URL, possibly padded with whitespace

    Returns:
        The trimmed URL

    Raises:
        InvalidInputError: If the URL is missing, blank, or not HTTP(S)
    """
    if feed_url is None or not feed_url.strip():
        raise InvalidInputError("Missing feedUrl")

    feed_url = feed_url.strip()
    if not _HTTP_SCHEME.match(feed_url):
        raise InvalidInputError("Invalid feed URL")

    return feed_url


class FeedFetcher:
    """Fetches raw feed documents over HTTP, racing each call against a deadline."""

    def __init__(
        self,
        deadline: float = DEFAULT_DEADLINE,
        user_agent: str = DEFAULT_FEED_USER_AGENT,
        accept: str = DEFAULT_FEED_ACCEPT,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            deadline: Seconds to wait before giving up on a feed
            user_agent: Identifying User-Agent header
            accept: Accept header preferring RSS/XML
            client: Optional shared httpx client (closed by its owner)
        """
        self.deadline = deadline
        self.headers = {"User-Agent": user_agent, "Accept": accept}
        self._client = client

    async def fetch(self, feed_url: str, deadline: float | None = None) -> bytes:
        """
        Retrieve a feed document.

        Args:
            feed_url: HTTP(S) URL of the feed
            deadline: Override for the configured deadline, in seconds

        Returns:
            Raw response body

        Raises:
            InvalidInputError: If the URL fails validation (no request is made)
            FeedTimeoutError: If the deadline elapses first
            FetchError: On transport errors or non-2xx responses
        """
        feed_url = validate_feed_url(feed_url)
        deadline = self.deadline if deadline is None else deadline

        logger.info("Fetching feed: %s", feed_url)
        try:
            # wait_for cancels the pending request; the remote end may keep going
            return await asyncio.wait_for(self._get(feed_url, deadline), timeout=deadline)
        except asyncio.TimeoutError as e:
            raise FeedTimeoutError("Feed fetch timed out") from e

    async def _get(self, feed_url: str, deadline: float) -> bytes:
        should_close_client = self._client is None
        client = self._client or httpx.AsyncClient(timeout=deadline, follow_redirects=True)

        try:
            response = await client.get(feed_url, headers=self.headers)
            response.raise_for_status()
            return response.content
        except httpx.TimeoutException as e:
            raise FeedTimeoutError(f"Feed request timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            raise FetchError(f"Failed to fetch RSS feed: HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise FetchError(f"Failed to connect to RSS feed: {e}") from e
        finally:
            if should_close_client:
                await client.aclose()
