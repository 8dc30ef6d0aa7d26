"""Rich console utilities for output formatting."""

from __future__ import annotations

import logging
import platform

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from legacy_hunter import __version__


def create_console() -> Console:
    """Create a configured Rich console."""
    # Windows-specific console settings
    if platform.system() == "Windows":
        return Console(legacy_windows=True, emoji=False)
    return Console()


def configure_logging(console: Console, verbose: bool = False) -> None:
    """Route library logging through the console (DEBUG when verbose)."""
    logging.basicConfig(
        format="%(message)s",
        datefmt="[%X]",
        level=logging.DEBUG if verbose else logging.WARNING,
        handlers=[RichHandler(console=console, show_path=verbose, markup=False)],
        force=True,
    )


def print_banner(console: Console) -> None:
    """Print the tool name and version over a one-line summary of what it audits."""
    title = Text.assemble(
        ("legacy", "bold yellow"),
        ("-hunter", "bold"),
        (f" v{__version__}", "dim"),
    )
    summary = Text("Polyfills and Babel helpers that Baseline browsers never run", style="italic")
    console.print(Panel(summary, title=title, title_align="left", border_style="yellow", expand=False))


def print_success(console: Console, message: str) -> None:
    console.print(f"[green]{escape(message)}[/green]")


def print_error(console: Console, message: str) -> None:
    """Print an error; message is shown verbatim, brackets included."""
    console.print(f"[bold red]error:[/bold red] [red]{escape(message)}[/red]")
