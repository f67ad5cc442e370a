"""Core modules for podfeed."""

from podfeed.core.config import (
    CacheConfig,
    Config,
    DirectoryConfig,
    FeedsConfig,
    ServerConfig,
    load_config,
)
from podfeed.core.errors import (
    ConfigError,
    FeedError,
    FeedTimeoutError,
    FetchError,
    InvalidInputError,
    NoPlayableMediaError,
    ParseError,
    PodfeedError,
    UpstreamError,
)
from podfeed.core.models import Episode, FeedResult, PodcastSummary

__all__ = [
    "CacheConfig",
    "Config",
    "DirectoryConfig",
    "FeedsConfig",
    "ServerConfig",
    "load_config",
    "ConfigError",
    "FeedError",
    "FeedTimeoutError",
    "FetchError",
    "InvalidInputError",
    "NoPlayableMediaError",
    "ParseError",
    "PodfeedError",
    "UpstreamError",
    "Episode",
    "FeedResult",
    "PodcastSummary",
]
