"""Service modules for podfeed."""

from podfeed.services.cache import MISSING, CacheStats, TTLCache
from podfeed.services.directory import PodcastIndexClient
from podfeed.services.episodes import EpisodeService
from podfeed.services.fetcher import FeedFetcher, validate_feed_url
from podfeed.services.normalizer import normalize_entry, normalize_feed, resolve_field

__all__ = [
    "MISSING",
    "CacheStats",
    "EpisodeService",
    "FeedFetcher",
    "PodcastIndexClient",
    "TTLCache",
    "normalize_entry",
    "normalize_feed",
    "resolve_field",
    "validate_feed_url",
]
