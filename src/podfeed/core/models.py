"""Data models for podfeed."""

from dataclasses import dataclass, field
from typing import Any

UNTITLED_EPISODE = "Untitled Episode"
UNKNOWN_AUTHOR = "Unknown"


@dataclass(frozen=True)
class Episode:
    """A playable episode normalized from an RSS/Atom entry."""

    title: str
    media_url: str
    guid: str | None = None
    description: str = ""
    pub_date: str | None = None  # passed through verbatim
    link: str | None = None
    media_type: str | None = None
    image: str | None = None
    duration: str | None = None  # passed through verbatim

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON wire representation."""
        return {
            "guid": self.guid,
            "title": self.title,
            "description": self.description,
            "pubDate": self.pub_date,
            "link": self.link,
            "mediaUrl": self.media_url,
            "mediaType": self.media_type,
            "image": self.image,
            "duration": self.duration,
        }


@dataclass(frozen=True)
class FeedResult:
    """Feed-level metadata plus its playable episodes in document order."""

    title: str | None
    author: str
    episodes: tuple[Episode, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "episodes": [episode.to_dict() for episode in self.episodes],
        }


@dataclass(frozen=True)
class PodcastSummary:
    """Represents a podcast from the Podcast Index directory."""

    id: int | None
    title: str
    author: str = UNKNOWN_AUTHOR
    image: str | None = None
    url: str | None = None
    link: str | None = None
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "image": self.image,
            "url": self.url,
            "link": self.link,
            "description": self.description,
        }
