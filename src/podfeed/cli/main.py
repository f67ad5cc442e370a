"""Main CLI application for podfeed."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from podfeed.core.config import Config, load_config
from podfeed.core.errors import PodfeedError
from podfeed.core.logging import setup_logging

app = typer.Typer(
    name="podfeed",
    help="Podcast feed gateway: normalized RSS episodes and directory search over JSON.",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)


class State:
    """Global CLI state."""

    def __init__(self) -> None:
        self.verbose: bool = False
        self.config: Config | None = None


state = State()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from podfeed import __version__

        console.print(f"podfeed version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="Path to configuration file"),
    ] = None,
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version"),
    ] = False,
) -> None:
    """podfeed - podcast feed gateway."""
    state.verbose = verbose
    setup_logging(verbose, console=error_console)

    try:
        state.config = load_config(config_path)
    except PodfeedError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None


@app.command()
def serve(
    host: Annotated[
        str | None,
        typer.Option("--host", help="Interface to bind (overrides config)"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Port to listen on (overrides config)"),
    ] = None,
) -> None:
    """Run the HTTP gateway."""
    import uvicorn

    from podfeed.api.app import create_app

    assert state.config is not None

    host = host or state.config.server.host
    port = port or state.config.server.port

    console.print(f"Server running at [bold]http://{host}:{port}[/bold]")
    uvicorn.run(
        create_app(state.config),
        host=host,
        port=port,
        log_config=None,
        log_level="debug" if state.verbose else "info",
    )


@app.command()
def episodes(
    feed_url: Annotated[str, typer.Argument(help="RSS feed URL of the podcast")],
    limit: Annotated[
        int,
        typer.Option("--limit", "-l", help="Maximum number of episodes to show"),
    ] = 10,
) -> None:
    """Fetch a feed once and list its playable episodes."""
    from podfeed.cli.output import display_feed
    from podfeed.services.cache import TTLCache
    from podfeed.services.episodes import EpisodeService
    from podfeed.services.fetcher import FeedFetcher

    assert state.config is not None

    fetcher = FeedFetcher(
        deadline=state.config.feeds.timeout,
        user_agent=state.config.feeds.user_agent,
        accept=state.config.feeds.accept,
    )

    service = EpisodeService(fetcher, TTLCache(state.config.cache.ttl))

    try:
        console.print(f"Fetching episodes from: [bold]{feed_url}[/bold]")
        result, _ = asyncio.run(service.get_episodes(feed_url))
    except PodfeedError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    display_feed(result, console, limit=limit)


if __name__ == "__main__":
    app()
