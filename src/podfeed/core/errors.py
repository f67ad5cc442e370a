"""Custom exceptions for podfeed."""


class PodfeedError(Exception):
    """Base exception for all podfeed errors."""

    pass


class ConfigError(PodfeedError):
    """Configuration-related errors."""

    pass


class InvalidInputError(PodfeedError):
    """Missing or malformed request input. No network call is made."""

    pass


class FeedError(PodfeedError):
    """Base for failures while retrieving or reading a feed."""

    pass


class FeedTimeoutError(FeedError):
    """Feed retrieval exceeded its deadline."""

    pass


class FetchError(FeedError):
    """Transport or HTTP-level failure reaching the feed."""

    pass


class ParseError(FeedError):
    """Document is not a recognizable RSS/Atom feed."""

    pass


class NoPlayableMediaError(FeedError):
    """Feed parsed, but no entry carries a playable media URL."""

    pass


class UpstreamError(PodfeedError):
    """Podcast directory API errors."""

    pass
