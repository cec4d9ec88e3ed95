"""Rich console utilities for styled terminal output.

This module provides a consistent interface for all CLI output using the
Rich library. Warnings and errors are written to stderr so that tables
and listings stay clean on stdout.
"""

from collections.abc import Generator, Sequence
from contextlib import contextmanager

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

# Custom theme with consistent colors
_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "cyan bold",
        "muted": "dim",
    }
)

# Shared console instances
console = Console(theme=_THEME)
err_console = Console(theme=_THEME, stderr=True)


def info(message: str) -> None:
    """Print an informational message.

    Args:
        message: The message to display.

    """
    console.print(f"[info]ℹ[/info] {message}")


def success(message: str) -> None:
    """Print a success message.

    Args:
        message: The message to display.

    """
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    """Print a warning message to stderr.

    Args:
        message: The message to display.

    """
    err_console.print(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    """Print an error message to stderr.

    Args:
        message: The message to display.

    """
    err_console.print(f"[error]✗[/error] {message}")


def action(message: str) -> None:
    """Print an action/progress message."""
    console.print(f"[info]→[/info] {message}")


def step(message: str) -> None:
    """Print a sub-step message."""
    console.print(f"[muted]•[/muted] {message}")


def highlight(text: str) -> str:
    """Return text wrapped in highlight markup.

    Args:
        text: The text to highlight.

    Returns:
        Text wrapped in Rich markup for highlighting.

    """
    return f"[highlight]{text}[/highlight]"


def result(subject: str, ok: bool, reason: str = "") -> None:
    """Print a pass/fail line for an attempted operation.

    Args:
        subject: What was attempted, e.g. ``"jenkins-ssh secret"``.
        ok: Whether the operation succeeded.
        reason: Failure details, appended when the operation failed.

    """
    if ok:
        console.print(f"[success]✓[/success] {subject} [success]OK[/success]")
    else:
        details = f": {reason}" if reason else ""
        console.print(f"[error]✗[/error] {subject} [error]FAILED[/error]{details}")


@contextmanager
def spinner(message: str) -> Generator[None, None, None]:
    """Display a spinner while performing an operation.

    Args:
        message: The status message to display.

    Yields:
        None

    """
    with console.status(f"[info]{message}[/info]", spinner="dots"):
        yield


def table(columns: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
    """Print a borderless table.

    Args:
        columns: Column headers.
        rows: Row values, one sequence per row.

    """
    grid = Table(box=None, header_style="bold", pad_edge=False)
    for column in columns:
        grid.add_column(column)
    for row in rows:
        grid.add_row(*row)
    console.print(grid)


def summary_panel(title: str, items: dict[str, str]) -> None:
    """Print a summary panel with key-value pairs.

    Args:
        title: Title for the panel.
        items: Dictionary of label -> value pairs to display.

    """
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold")
    grid.add_column(style="cyan")

    for label, value in items.items():
        grid.add_row(f"{label}:", value)

    console.print(Panel(grid, title=f"[bold]{title}[/bold]", border_style="green"))


def newline() -> None:
    """Print an empty line."""
    console.print()
