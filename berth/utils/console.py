"""Console utilities for rich output."""

import os
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .logging import QUIET_ENV


# Global console instances
_console: Optional[Console] = None
_error_console: Optional[Console] = None


def _quiet() -> bool:
    return os.environ.get(QUIET_ENV, "0").lower() in ("1", "true", "yes")


def get_console() -> Console:
    """Get or create the global console instance."""
    global _console
    if _console is None:
        _console = Console(quiet=_quiet())
    return _console


def get_error_console() -> Console:
    """Get or create the console writing to standard error.

    Errors are shown even in quiet mode.
    """
    global _error_console
    if _error_console is None:
        _error_console = Console(stderr=True)
    return _error_console


def reset_consoles() -> None:
    """Drop the cached consoles so the next call re-reads the environment."""
    global _console, _error_console
    _console = None
    _error_console = None


def print_error(message: str, title: str = "Error", markup: bool = False):
    """Print an error message.

    ``message`` is escaped unless ``markup`` is set; command strings often
    contain square brackets.
    """
    body = message if markup else f"[bold red]{escape(message)}[/bold red]"
    get_error_console().print(Panel(
        body,
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def print_success(message: str, title: str = "Success"):
    """Print a success message."""
    get_console().print(Panel(
        f"[bold green]{escape(message)}[/bold green]",
        title=f"[bold green]{title}[/bold green]",
        border_style="green",
    ))


def print_warning(message: str, title: str = "Warning"):
    """Print a warning message."""
    get_error_console().print(Panel(
        f"[bold yellow]{escape(message)}[/bold yellow]",
        title=f"[bold yellow]{title}[/bold yellow]",
        border_style="yellow",
    ))


def print_info(message: str, title: str = "Info"):
    """Print an info message."""
    get_console().print(Panel(
        f"[bold blue]{escape(message)}[/bold blue]",
        title=f"[bold blue]{title}[/bold blue]",
        border_style="blue",
    ))


def create_table(title: str, columns: List[str]) -> Table:
    """Create a formatted table."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    for col in columns:
        table.add_column(col)
    return table
