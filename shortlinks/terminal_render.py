"""
Terminal rendering for the interactive short link shell.

Uses the rich library for tables and panels.
"""

from datetime import datetime
from typing import Iterable, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text
from rich import box

from .database.models import ShortLink

UNBOUNDED = "∞"


def format_timestamp(epoch_seconds: float) -> str:
    """Format epoch seconds as local ``YYYY-MM-DD HH:MM:SS``."""
    return datetime.fromtimestamp(epoch_seconds).strftime("%Y-%m-%d %H:%M:%S")


def format_clicks(link: ShortLink) -> str:
    limit = UNBOUNDED if link.max_clicks == 0 else str(link.max_clicks)
    return f"{link.click_count}/{limit}"


def format_ttl(link: ShortLink, remaining: Optional[float]) -> str:
    if remaining is None:
        return UNBOUNDED
    return f"{int(remaining)}s of {link.ttl}s"


class TerminalRenderer:
    """Render links and messages to the terminal."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the terminal renderer.

        Args:
            console: Optional rich console (tests pass one that records output)
        """
        self.console = console or Console()

    def info(self, message: str) -> None:
        self.console.print(message, markup=False, highlight=False)

    def success(self, message: str) -> None:
        self.console.print(Text(message, style="green"))

    def warning(self, message: str) -> None:
        self.console.print(Text(message, style="yellow"))

    def error(self, message: str) -> None:
        self.console.print(Text(message, style="bold red"))

    def render_link(self, link: ShortLink, remaining: Optional[float], current_user: str) -> None:
        """Render a single link's details.

        Args:
            link: The link to show
            remaining: Seconds of TTL left, None when unbounded
            current_user: Identity of the shell session
        """
        table = Table(box=box.SIMPLE, show_header=False)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="white")

        owner = link.owner_id + (" (you)" if link.owner_id == current_user else "")
        table.add_row("Short code", link.code)
        table.add_row("URL", Text(link.original_url))
        table.add_row("Owner", owner)
        table.add_row("Clicks", format_clicks(link))
        table.add_row("Created", format_timestamp(link.created_at))
        table.add_row("TTL", format_ttl(link, remaining))

        self.console.print(Panel(table, title=f"Link {link.code}", box=box.ROUNDED))

    def render_links(
        self,
        links: Iterable[ShortLink],
        remaining_ttl,
        current_user: str,
    ) -> None:
        """Render a table of links.

        Args:
            links: Links to show
            remaining_ttl: Callable returning seconds left for a link
            current_user: Identity of the shell session
        """
        links = list(links)
        if not links:
            self.info("No links")
            return

        table = Table(title="Short Links", box=box.ROUNDED)
        table.add_column("Code", style="cyan")
        table.add_column("URL", style="white", overflow="fold")
        table.add_column("Owner")
        table.add_column("Clicks", justify="right")
        table.add_column("TTL left", justify="right")

        for link in links:
            remaining = remaining_ttl(link)
            owner = link.owner_id[:8] + (" (you)" if link.owner_id == current_user else "")
            table.add_row(
                link.code,
                Text(link.original_url),
                owner,
                format_clicks(link),
                UNBOUNDED if remaining is None else f"{int(remaining)}s",
            )

        self.console.print(table)

    def render_help(self, commands) -> None:
        """Render the command reference.

        Args:
            commands: Sequence of (usage, description) pairs
        """
        table = Table(title="Commands", box=box.ROUNDED)
        table.add_column("Usage", style="cyan")
        table.add_column("Description", style="white")
        for usage, description in commands:
            table.add_row(Text(usage), description)
        self.console.print(table)
