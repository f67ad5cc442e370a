"""Pytest fixtures for podfeed tests."""

from __future__ import annotations

import pytest

from podfeed.core.errors import FeedError
from podfeed.core.models import Episode, FeedResult

FEED_URL = "https://example.com/feed.xml"

RSS_TEMPLATE = """\
<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd"
     xmlns:media="http://search.yahoo.com/mrss/"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Test Podcast</title>
    <description>A test podcast</description>
    {channel_extra}
    {items}
  </channel>
</rss>
"""


def build_feed(items: list[str], channel_extra: str = "") -> str:
    """Wrap raw ``<item>`` fragments in an RSS 2.0 channel."""
    return RSS_TEMPLATE.format(items="\n".join(items), channel_extra=channel_extra)


def enclosure_item(
    title: str = "Episode",
    media_url: str = "https://example.com/episode.mp3",
    guid: str | None = None,
) -> str:
    """Build an ``<item>`` with a standard audio enclosure."""
    guid_xml = f'<guid isPermaLink="false">{guid}</guid>' if guid else ""
    return f"""
    <item>
      <title>{title}</title>
      {guid_xml}
      <pubDate>Mon, 15 Jan 2024 12:00:00 +0000</pubDate>
      <enclosure url="{media_url}" type="audio/mpeg" length="1000000"/>
    </item>
    """


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubFetcher:
    """Feed fetcher double that records calls instead of touching the network."""

    def __init__(self, document: str | bytes = "", error: FeedError | None = None) -> None:
        self.document = document
        self.error = error
        self.calls: list[str] = []

    async def fetch(self, feed_url: str, deadline: float | None = None) -> bytes:
        self.calls.append(feed_url)
        if self.error is not None:
            raise self.error
        if isinstance(self.document, str):
            return self.document.encode("utf-8")
        return self.document


@pytest.fixture
def clock() -> FakeClock:
    """Provide a controllable clock for cache tests."""
    return FakeClock()


@pytest.fixture
def sample_rss_feed() -> str:
    """Create a sample RSS feed for testing."""
    return build_feed(
        [
            """
            <item>
              <title>Episode 1</title>
              <guid>ep-1</guid>
              <link>https://example.com/episodes/1</link>
              <description>&lt;p&gt;First &amp;amp; best&lt;/p&gt;</description>
              <pubDate>Mon, 15 Jan 2024 12:00:00 +0000</pubDate>
              <enclosure url="https://example.com/ep1.mp3" type="audio/mpeg" length="1000000"/>
              <itunes:duration>30:00</itunes:duration>
              <itunes:image href="https://example.com/ep1.jpg"/>
            </item>
            """,
            """
            <item>
              <title>Episode 2</title>
              <guid>ep-2</guid>
              <pubDate>Mon, 08 Jan 2024 12:00:00 +0000</pubDate>
              <enclosure url="https://example.com/ep2.mp3" type="audio/mpeg" length="1000000"/>
              <itunes:duration>25:00</itunes:duration>
            </item>
            """,
        ],
        channel_extra="""
        <itunes:author>Test Author</itunes:author>
        <itunes:image href="https://example.com/show.jpg"/>
        """,
    )


@pytest.fixture
def sample_feed_result() -> FeedResult:
    """Create a normalized feed for output tests."""
    return FeedResult(
        title="Test Podcast",
        author="Test Author",
        episodes=(
            Episode(
                title="Episode 1",
                media_url="https://example.com/ep1.mp3",
                media_type="audio/mpeg",
                pub_date="Mon, 15 Jan 2024 12:00:00 +0000",
                duration="30:00",
            ),
            Episode(
                title="Episode 2",
                media_url="https://example.com/ep2.mp3",
            ),
        ),
    )


@pytest.fixture
def sample_directory_response() -> dict:
    """Create a sample Podcast Index response for testing."""
    return {
        "status": "true",
        "feeds": [
            {
                "id": 75075,
                "title": "Test Podcast",
                "url": "https://example.com/feed.xml",
                "link": "https://example.com",
                "author": "Test Author",
                "image": "https://example.com/artwork.jpg",
                "description": "A test podcast",
            },
            {
                "id": 920666,
                "title": "Another Podcast",
                "link": "https://another.example.com",
                "itunesAuthor": "Another Author",
                "artwork": "https://another.example.com/art.png",
            },
        ],
        "count": 2,
    }
