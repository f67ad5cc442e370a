"""Tests for the Podcast Index client."""

import hashlib

import httpx
import pytest
import respx

from conftest import FakeClock
from podfeed.core.config import PODCASTINDEX_BASE_URL
from podfeed.core.errors import ConfigError, UpstreamError
from podfeed.core.models import PodcastSummary
from podfeed.services.cache import TTLCache
from podfeed.services.directory import PodcastIndexClient

TRENDING_URL = f"{PODCASTINDEX_BASE_URL}/podcasts/trending"
SEARCH_URL = f"{PODCASTINDEX_BASE_URL}/search/byterm"


def make_client(clock: FakeClock | None = None) -> PodcastIndexClient:
    return PodcastIndexClient(
        api_key="key",
        api_secret="secret",
        cache=TTLCache(default_ttl=90, clock=clock or FakeClock()),
    )


class TestAuthHeaders:
    """Tests for request signing."""

    def test_signature(self) -> None:
        headers = make_client().auth_headers(now=1700000000.7)

        assert headers["X-Auth-Date"] == "1700000000"
        assert headers["X-Auth-Key"] == "key"
        assert headers["Authorization"] == hashlib.sha1(b"keysecret1700000000").hexdigest()
        assert headers["User-Agent"] == "PodsAPI/1.0"

    def test_credentials_are_trimmed(self) -> None:
        client = PodcastIndexClient(" key ", "secret\n", cache=TTLCache())

        assert client.auth_headers(now=1)["X-Auth-Key"] == "key"

    @pytest.mark.parametrize(("key", "secret"), [("", "secret"), ("key", ""), ("  ", "  ")])
    def test_missing_credentials(self, key: str, secret: str) -> None:
        client = PodcastIndexClient(key, secret, cache=TTLCache())

        with pytest.raises(ConfigError, match="Missing PodcastIndex API credentials"):
            client.auth_headers()


class TestRequests:
    """Tests for signed, cached GET requests."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_trending_parses_feeds(self, sample_directory_response: dict) -> None:
        route = respx.get(TRENDING_URL).mock(
            return_value=httpx.Response(200, json=sample_directory_response)
        )

        podcasts = await make_client().trending(limit=2, page=1)

        assert podcasts[0] == PodcastSummary(
            id=75075,
            title="Test Podcast",
            author="Test Author",
            image="https://example.com/artwork.jpg",
            url="https://example.com/feed.xml",
            link="https://example.com",
            description="A test podcast",
        )
        assert podcasts[1].author == "Another Author"
        assert podcasts[1].image == "https://another.example.com/art.png"
        assert podcasts[1].url == "https://another.example.com"
        assert podcasts[1].description == ""
        request = route.calls.last.request
        assert request.url.params["max"] == "2"
        assert "Authorization" in request.headers

    @respx.mock
    @pytest.mark.asyncio
    async def test_missing_author_falls_back_to_unknown(self) -> None:
        respx.get(TRENDING_URL).mock(
            return_value=httpx.Response(200, json={"feeds": [{"id": 1, "title": "Quiet"}]})
        )

        podcasts = await make_client().trending()

        assert podcasts[0].author == "Unknown"
        assert podcasts[0].image is None

    @respx.mock
    @pytest.mark.asyncio
    async def test_no_feeds_key(self) -> None:
        respx.get(SEARCH_URL).mock(return_value=httpx.Response(200, json={"status": "true"}))

        assert await make_client().search("nothing") == []

    @respx.mock
    @pytest.mark.asyncio
    async def test_responses_are_cached_by_url(self, sample_directory_response: dict) -> None:
        clock = FakeClock()
        route = respx.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json=sample_directory_response)
        )
        client = make_client(clock)

        await client.search("python")
        await client.search("python")
        await client.search("rust")

        assert route.call_count == 2

        clock.advance(91)
        await client.search("python")

        assert route.call_count == 3

    @respx.mock
    @pytest.mark.asyncio
    async def test_home_sections(self, sample_directory_response: dict) -> None:
        respx.get(TRENDING_URL).mock(
            return_value=httpx.Response(200, json=sample_directory_response)
        )
        search = respx.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json={"feeds": [{"id": 9, "title": "Topic"}]})
        )

        sections = await make_client().home()

        assert list(sections) == ["trending", "technology", "lifestyle"]
        assert len(sections["trending"]) == 2
        assert sections["technology"][0].title == "Topic"
        assert {call.request.url.params["q"] for call in search.calls} == {
            "technology",
            "lifestyle",
        }


class TestErrors:
    """Tests for upstream failure mapping."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_error_status(self) -> None:
        respx.get(TRENDING_URL).mock(return_value=httpx.Response(401))

        with pytest.raises(UpstreamError, match="error status 401"):
            await make_client().trending()

    @respx.mock
    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        respx.get(TRENDING_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(UpstreamError, match="timed out"):
            await make_client().trending()

    @respx.mock
    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        respx.get(TRENDING_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(UpstreamError, match="Failed to connect"):
            await make_client().trending()

    @respx.mock
    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        respx.get(TRENDING_URL).mock(return_value=httpx.Response(200, content=b"not json"))

        with pytest.raises(UpstreamError, match="invalid JSON"):
            await make_client().trending()

    @respx.mock
    @pytest.mark.asyncio
    async def test_non_object_body(self) -> None:
        respx.get(TRENDING_URL).mock(return_value=httpx.Response(200, json=[1, 2]))

        with pytest.raises(UpstreamError, match="unexpected response shape"):
            await make_client().trending()

    @respx.mock
    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self, sample_directory_response: dict) -> None:
        route = respx.get(TRENDING_URL)
        route.side_effect = [
            httpx.Response(500),
            httpx.Response(200, json=sample_directory_response),
        ]
        client = make_client()

        with pytest.raises(UpstreamError):
            await client.trending()

        assert len(await client.trending()) == 2
        assert route.call_count == 2
