"""Episode listing service: fetch, normalize and cache a feed."""

import logging
from urllib.parse import unquote

from podfeed.core.errors import InvalidInputError
from podfeed.core.models import FeedResult
from podfeed.services.cache import TTLCache
from podfeed.services.fetcher import FeedFetcher, validate_feed_url
from podfeed.services.normalizer import normalize_feed

logger = logging.getLogger(__name__)


class EpisodeService:
    """Serves normalized feeds, memoized per decoded feed URL."""

    def __init__(self, fetcher: FeedFetcher, cache: TTLCache, ttl: float | None = None) -> None:
        """
        Initialize the episode service.

        Args:
            fetcher: Feed fetcher
            cache: Shared response cache
            ttl: Entry TTL in seconds (defaults to the cache's own)
        """
        self.fetcher = fetcher
        self.cache = cache
        self.ttl = ttl

    @staticmethod
    def prepare_url(raw_url: str | None) -> str:
        """
        Decode and validate a feed URL taken from a request.

        Raises:
            InvalidInputError: If the URL is missing or not HTTP(S)
        """
        if raw_url is None or not raw_url.strip():
            raise InvalidInputError("Missing feedUrl")
        return validate_feed_url(unquote(raw_url))

    async def load(self, feed_url: str) -> FeedResult:
        """Fetch and normalize a feed, bypassing the cache."""
        document = await self.fetcher.fetch(feed_url)
        return normalize_feed(document)

    async def get_episodes(self, raw_url: str | None) -> tuple[FeedResult, bool]:
        """
        Return the normalized feed for a request URL.

        Args:
            raw_url: ``feedUrl`` request parameter

        Returns:
            Tuple of (result, served_from_cache)

        Raises:
            InvalidInputError: Bad or missing URL; nothing is fetched
            FeedError: Timeout, fetch, parse or no-playable-media failures
        """
        feed_url = self.prepare_url(raw_url)
        computed = False

        async def compute() -> FeedResult:
            nonlocal computed
            computed = True
            return await self.load(feed_url)

        result = await self.cache.get_or_compute(feed_url, compute, ttl=self.ttl)
        if computed:
            logger.info("Feed %s: %d playable episodes", feed_url, len(result.episodes))
        return result, not computed
