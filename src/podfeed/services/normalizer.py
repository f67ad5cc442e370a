"""Normalize RSS/Atom feeds into canonical episode records.

Feed dialects populate the same logical attribute in different places, so each
canonical field is resolved through an ordered list of extraction rules; the
first rule producing a non-empty value wins.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from typing import Any

import feedparser
from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError as XMLParseError, fromstring as safe_fromstring

from podfeed.core.errors import NoPlayableMediaError, ParseError
from podfeed.core.models import UNKNOWN_AUTHOR, UNTITLED_EPISODE, Episode, FeedResult
from podfeed.utils.text import strip_html

logger = logging.getLogger(__name__)

ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"

# A rule receives the entry and the channel-level metadata
Rule = Callable[[Any, Any], Any]


def _first(items: Any, key: str) -> Any:
    """Return ``key`` from the first element of a feedparser list, if any."""
    if not items:
        return None
    return items[0].get(key)


def _content_value(entry: Any) -> str | None:
    return _first(entry.get("content"), "value")


def _content_snippet(entry: Any, _feed: Any) -> str | None:
    source = _content_value(entry) or entry.get("summary")
    return strip_html(source) if source else None


def _image_href(container: Any) -> str | None:
    image = container.get("image")
    return image.get("href") if image else None


FIELD_RULES: dict[str, list[Rule]] = {
    "title": [
        lambda entry, _feed: (entry.get("title") or "").strip(),
    ],
    "description": [
        _content_snippet,
        lambda entry, _feed: entry.get("summary"),
        lambda entry, _feed: _content_value(entry),
    ],
    "media_url": [
        lambda entry, _feed: _first(entry.get("enclosures"), "href"),
        lambda entry, _feed: _first(entry.get("media_content"), "url"),
    ],
    "media_type": [
        lambda entry, _feed: _first(entry.get("enclosures"), "type"),
        lambda entry, _feed: _first(entry.get("media_content"), "type"),
    ],
    "image": [
        lambda entry, _feed: _image_href(entry),
        lambda _entry, feed: feed.get("itunes_image_href"),
        lambda _entry, feed: feed.get("image_url"),
        # Used when the channel could not be scanned (Atom, malformed XML)
        lambda _entry, feed: _image_href(feed),
    ],
    "duration": [
        lambda entry, _feed: entry.get("itunes_duration"),
        lambda entry, _feed: _first(entry.get("media_content"), "duration"),
    ],
    "guid": [
        lambda entry, _feed: entry.get("id"),
    ],
    "pub_date": [
        lambda entry, _feed: entry.get("published"),
    ],
    "link": [
        lambda entry, _feed: entry.get("link"),
    ],
}

FIELD_DEFAULTS: dict[str, Any] = {
    "title": UNTITLED_EPISODE,
    "description": "",
}


def resolve_field(name: str, entry: Any, feed: Any) -> Any:
    """
    Apply the extraction rules for one canonical field.

    Args:
        name: Canonical field name (a key of FIELD_RULES)
        entry: feedparser entry
        feed: feedparser channel metadata (``parsed.feed``)

    Returns:
        First non-empty rule result, else the field default (None if unset)
    """
    for rule in FIELD_RULES[name]:
        value = rule(entry, feed)
        if value:
            return str(value)
    return FIELD_DEFAULTS.get(name)


def normalize_entry(entry: Any, feed: Any) -> Episode | None:
    """
    Map one feed entry to an Episode.

    Returns:
        The Episode, or None when the entry has no playable media URL
    """
    fields = {name: resolve_field(name, entry, feed) for name in FIELD_RULES}
    if fields["media_url"] is None:
        return None
    return Episode(**fields)


def _channel_artwork(document: bytes) -> dict[str, str]:
    """
    Read channel-level artwork straight from the XML.

    feedparser stores channel ``itunes:image`` and ``<image><url>`` in the same
    ``feed.image.href``, so the later element in the document overwrites the
    earlier one. Scanning the channel keeps the two sources apart.

    Returns:
        ``itunes_image_href`` and/or ``image_url`` when present; empty for
        Atom feeds and documents that are not well-formed XML
    """
    try:
        root = safe_fromstring(document)
    except (XMLParseError, DefusedXmlException):
        return {}

    channel = root.find("channel")
    if channel is None:
        return {}

    artwork: dict[str, str] = {}
    for child in channel:
        if not isinstance(child.tag, str):
            continue
        if child.tag.lower() == f"{{{ITUNES_NS}}}image":
            href = (child.get("href") or "").strip()
            if href:
                artwork.setdefault("itunes_image_href", href)
        elif child.tag == "image":
            url = (child.findtext("url") or "").strip()
            if url:
                artwork.setdefault("image_url", url)
    return artwork


def _parse_document(document: bytes) -> Any:
    # A stream keeps feedparser from treating the input as a URL or path
    return feedparser.parse(io.BytesIO(document))


def normalize_feed(document: bytes | str) -> FeedResult:
    """
    Convert a raw feed document into its playable episodes.

    Args:
        document: RSS/Atom XML as bytes or text

    Returns:
        FeedResult with feed title/author and episodes in document order

    Raises:
        ParseError: If the document is not a recognizable feed
        NoPlayableMediaError: If no entry has a playable media URL
    """
    if isinstance(document, str):
        document = document.encode("utf-8")
    parsed = _parse_document(document)

    if not parsed.entries and (parsed.bozo or not parsed.version):
        reason = parsed.get("bozo_exception") or "unrecognized document"
        raise ParseError(f"Invalid RSS feed: {reason}")

    channel = parsed.feed
    channel.update(_channel_artwork(document))
    episodes = []
    for entry in parsed.entries:
        episode = normalize_entry(entry, channel)
        if episode is not None:
            episodes.append(episode)

    dropped = len(parsed.entries) - len(episodes)
    if dropped:
        logger.debug("Dropped %d entries without playable media", dropped)

    if not episodes:
        raise NoPlayableMediaError("No playable media in feed")

    title = channel.get("title") or None
    return FeedResult(
        title=title,
        author=channel.get("author") or title or UNKNOWN_AUTHOR,
        episodes=tuple(episodes),
    )
