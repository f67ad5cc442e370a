"""Podcast Index API client for podcast discovery.

Requests are signed with the key/secret scheme Podcast Index requires and
responses are memoized in the shared TTL cache keyed by request URL.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import time
from typing import Any
from urllib.parse import urlencode

import httpx

from podfeed.core.config import DEFAULT_DIRECTORY_USER_AGENT, PODCASTINDEX_BASE_URL
from podfeed.core.errors import ConfigError, UpstreamError
from podfeed.core.models import UNKNOWN_AUTHOR, PodcastSummary
from podfeed.services.cache import TTLCache

logger = logging.getLogger(__name__)

# Default timeout for API requests (in seconds)
DEFAULT_TIMEOUT = 8.0

# Topic searches shown on the home screen next to trending
HOME_TOPICS = ("technology", "lifestyle")
HOME_SECTION_SIZE = 10


def _parse_feeds(data: dict[str, Any]) -> list[PodcastSummary]:
    """
    Reshape Podcast Index ``feeds`` records into PodcastSummary objects.

    Args:
        data: JSON response body

    Returns:
        List of PodcastSummary objects, in response order
    """
    podcasts: list[PodcastSummary] = []
    for item in data.get("feeds") or []:
        podcasts.append(
            PodcastSummary(
                id=item.get("id"),
                title=item.get("title") or "",
                author=item.get("author") or item.get("itunesAuthor") or UNKNOWN_AUTHOR,
                image=item.get("image") or item.get("artwork") or None,
                url=item.get("url") or item.get("link") or None,
                link=item.get("link") or None,
                description=item.get("description") or "",
            )
        )
    return podcasts


class PodcastIndexClient:
    """Authenticated client for the Podcast Index directory API."""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        cache: TTLCache,
        base_url: str = PODCASTINDEX_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_DIRECTORY_USER_AGENT,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key.strip()
        self.api_secret = api_secret.strip()
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._client = client

    def auth_headers(self, now: float | None = None) -> dict[str, str]:
        """
        Build the signed request headers.

        Authorization is the hex SHA-1 of key + secret + unix timestamp.

        Args:
            now: Unix time override (for tests)

        Raises:
            ConfigError: If credentials are missing
        """
        if not self.api_key or not self.api_secret:
            raise ConfigError("Missing PodcastIndex API credentials")

        timestamp = str(int(time.time() if now is None else now))
        digest = hashlib.sha1(
            (self.api_key + self.api_secret + timestamp).encode("utf-8")
        ).hexdigest()
        return {
            "User-Agent": self.user_agent,
            "X-Auth-Date": timestamp,
            "X-Auth-Key": self.api_key,
            "Authorization": digest,
        }

    def build_url(self, endpoint: str, params: dict[str, Any] | None = None) -> str:
        url = f"{self.base_url}{endpoint}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Perform a signed GET, memoized by full request URL.

        Args:
            endpoint: API path such as ``/podcasts/trending``
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            UpstreamError: If the request fails or returns invalid JSON
        """
        url = self.build_url(endpoint, params)
        return await self.cache.get_or_compute(url, lambda: self._request(url))

    async def _request(self, url: str) -> dict[str, Any]:
        headers = self.auth_headers()

        should_close_client = self._client is None
        client = self._client or httpx.AsyncClient(timeout=self.timeout)

        try:
            response = await client.get(url, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise UpstreamError(
                f"PodcastIndex request timed out after {self.timeout} seconds"
            ) from e
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"PodcastIndex returned error status {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise UpstreamError(f"Failed to connect to PodcastIndex: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"PodcastIndex returned invalid JSON: {e}") from e
        finally:
            if should_close_client:
                await client.aclose()

        if not isinstance(data, dict):
            raise UpstreamError("PodcastIndex returned an unexpected response shape")
        return data

    async def trending(self, limit: int = 10, page: int | None = None) -> list[PodcastSummary]:
        """Fetch trending podcasts."""
        params: dict[str, Any] = {"max": limit}
        if page is not None:
            params["page"] = page
        data = await self.get("/podcasts/trending", params)
        return _parse_feeds(data)

    async def search(self, term: str, limit: int = 10) -> list[PodcastSummary]:
        """
        Search podcasts by term.

        Args:
            term: Search keywords
            limit: Maximum number of results

        Returns:
            List of PodcastSummary objects
        """
        data = await self.get("/search/byterm", {"q": term, "max": limit})
        return _parse_feeds(data)

    async def home(self) -> dict[str, list[PodcastSummary]]:
        """Fetch trending plus topic sections concurrently."""
        trending, *topics = await asyncio.gather(
            self.trending(HOME_SECTION_SIZE),
            *(self.search(topic, HOME_SECTION_SIZE) for topic in HOME_TOPICS),
        )
        sections = {"trending": trending}
        sections.update(zip(HOME_TOPICS, topics))
        return sections
