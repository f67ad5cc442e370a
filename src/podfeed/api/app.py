"""FastAPI application exposing the podfeed JSON API."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from podfeed import __version__
from podfeed.core.config import Config
from podfeed.core.errors import FeedError, InvalidInputError, UpstreamError
from podfeed.core.models import PodcastSummary
from podfeed.services.cache import TTLCache
from podfeed.services.directory import PodcastIndexClient
from podfeed.services.episodes import EpisodeService
from podfeed.services.fetcher import FeedFetcher

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 50
HOME_MAX_AGE = 90


def _cache_control(max_age: int) -> dict[str, str]:
    return {"Cache-Control": f"public, max-age={max_age}"}


def _podcast_list(podcasts: list[PodcastSummary]) -> list[dict]:
    return [podcast.to_dict() for podcast in podcasts]


def _clamp_limit(limit: int) -> int:
    return min(max(limit, 1), MAX_PAGE_SIZE)


def _upstream_failure(action: str, error: UpstreamError) -> JSONResponse:
    logger.error("%s failed: %s", action, error)
    return JSONResponse(
        status_code=500,
        content={"error": f"{action} failed", "details": str(error)},
    )


def _directory_or_none(request: Request) -> PodcastIndexClient | None:
    return request.app.state.directory


def _directory_unavailable() -> JSONResponse:
    return JSONResponse(status_code=503, content={"error": "Podcast directory not configured"})


def create_app(
    config: Config | None = None,
    *,
    fetcher: FeedFetcher | None = None,
    feed_cache: TTLCache | None = None,
    directory: PodcastIndexClient | None = None,
) -> FastAPI:
    """
    Build the gateway application.

    Collaborators default to instances built from ``config``; tests pass
    their own to stub the network or control time.

    Args:
        config: Loaded configuration (defaults apply when None)
        fetcher: Feed fetcher used by the episodes route
        feed_cache: Cache fronting the episodes route
        directory: Podcast Index client; built from config credentials when None

    Returns:
        Configured FastAPI application
    """
    config = config or Config()

    if feed_cache is None:
        feed_cache = TTLCache(config.cache.ttl, config.cache.sweep_interval)
    if fetcher is None:
        fetcher = FeedFetcher(
            deadline=config.feeds.timeout,
            user_agent=config.feeds.user_agent,
            accept=config.feeds.accept,
        )
    if directory is None and config.directory.has_credentials:
        directory = PodcastIndexClient(
            api_key=config.directory.api_key,
            api_secret=config.directory.api_secret,
            cache=TTLCache(config.cache.ttl, config.cache.sweep_interval),
            base_url=config.directory.base_url,
            timeout=config.directory.timeout,
            user_agent=config.directory.user_agent,
        )

    caches = [feed_cache] + ([directory.cache] if directory is not None else [])

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        for cache in caches:
            cache.start_sweeper()
        logger.info(
            "PodcastIndex credentials: %s",
            "present" if directory is not None else "missing (directory routes disabled)",
        )
        yield
        for cache in caches:
            await cache.stop_sweeper()

    app = FastAPI(title="podfeed", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.episodes = EpisodeService(fetcher, feed_cache)
    app.state.directory = directory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Range"],
    )

    _register_error_handlers(app)
    _register_routes(app, config)
    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidInputError)
    async def invalid_input(_request: Request, exc: InvalidInputError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(FeedError)
    async def feed_unavailable(request: Request, exc: FeedError) -> JSONResponse:
        # Timeouts are reported like any other unreachable feed
        logger.warning(
            "RSS feed error: %s (%s)", exc, request.query_params.get("feedUrl")
        )
        return JSONResponse(
            status_code=404,
            content={"error": "Feed not found or unavailable", "details": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def invalid_request(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": str(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            logger.warning("404: %s", request.url.path)
            return JSONResponse(
                status_code=404,
                content={"error": "Route not found", "path": request.url.path},
            )
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def _register_routes(app: FastAPI, config: Config) -> None:
    feed_max_age = config.feeds.cache_control_max_age

    @app.get("/ping")
    async def ping() -> dict:
        return {"ok": True, "message": "Backend connected", "apiBase": config.directory.base_url}

    @app.get("/healthz", response_class=PlainTextResponse)
    async def healthz() -> str:
        return "ok"

    @app.get("/episodes")
    @app.get("/podcasts/episodes")
    async def episodes(
        request: Request,
        feed_url: str | None = Query(default=None, alias="feedUrl"),
    ) -> JSONResponse:
        """List the playable episodes of an RSS/Atom feed."""
        service: EpisodeService = request.app.state.episodes
        result, cached = await service.get_episodes(feed_url)

        headers = _cache_control(feed_max_age)
        headers["X-Cache"] = "HIT" if cached else "MISS"
        return JSONResponse(content=result.to_dict(), headers=headers)

    @app.get("/trending")
    @app.get("/podcasts/trending")
    async def trending(
        request: Request,
        page: int = Query(default=1),
        limit: int = Query(default=10),
    ) -> JSONResponse:
        """Trending podcasts from the directory, paginated."""
        directory = _directory_or_none(request)
        if directory is None:
            return _directory_unavailable()

        limit = _clamp_limit(limit)
        try:
            podcasts = await directory.trending(limit, page=max(page, 1))
        except UpstreamError as e:
            return _upstream_failure("Trending fetch", e)

        return JSONResponse(
            content={"podcasts": _podcast_list(podcasts), "hasMore": len(podcasts) == limit},
            headers=_cache_control(feed_max_age),
        )

    @app.get("/podcasts/search")
    async def search(
        request: Request,
        q: str = Query(default=""),
        limit: int = Query(default=10),
    ) -> JSONResponse:
        """Search the directory by term."""
        term = q.strip()
        if not term:
            return JSONResponse(content={"podcasts": [], "hasMore": False})

        directory = _directory_or_none(request)
        if directory is None:
            return _directory_unavailable()

        limit = _clamp_limit(limit)
        try:
            podcasts = await directory.search(term, limit)
        except UpstreamError as e:
            return _upstream_failure("Search", e)

        return JSONResponse(
            content={"podcasts": _podcast_list(podcasts), "hasMore": len(podcasts) == limit},
            headers=_cache_control(feed_max_age),
        )

    @app.get("/podcasts/home")
    async def home(request: Request) -> JSONResponse:
        """Trending and topic sections for the client home screen."""
        directory = _directory_or_none(request)
        if directory is None:
            return _directory_unavailable()

        try:
            sections = await directory.home()
        except UpstreamError as e:
            return _upstream_failure("Home feed", e)

        content = {name: _podcast_list(podcasts) for name, podcasts in sections.items()}
        # Uploads live in object storage, which this gateway does not reach
        content["userUploads"] = []
        return JSONResponse(content=content, headers=_cache_control(HOME_MAX_AGE))
