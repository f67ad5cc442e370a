"""CLI output formatting utilities."""

from rich.console import Console
from rich.table import Table

from podfeed.core.models import FeedResult
from podfeed.utils.text import truncate_text


def display_feed(result: FeedResult, console: Console, limit: int | None = None) -> None:
    """Display a normalized feed as a table of episodes."""
    episodes = result.episodes[:limit] if limit else result.episodes

    console.print(f"[bold]{result.title or 'Untitled feed'}[/bold] [dim]by {result.author}[/dim]")
    if not episodes:
        console.print("[yellow]No episodes found.[/yellow]")
        return

    table = Table(title="Episodes")
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Published", style="green")
    table.add_column("Duration", style="cyan")
    table.add_column("Media", style="dim", no_wrap=True, overflow="ellipsis")

    for i, episode in enumerate(episodes, 1):
        table.add_row(
            str(i),
            truncate_text(episode.title, 80),
            episode.pub_date or "-",
            episode.duration or "-",
            episode.media_type or "-",
        )

    console.print(table)
    if len(episodes) < len(result.episodes):
        console.print(f"[dim]{len(result.episodes) - len(episodes)} more not shown[/dim]")
