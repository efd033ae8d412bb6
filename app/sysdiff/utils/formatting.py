"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich. Listings go to
``console`` (stdout); diagnostics go to ``err_console`` (stderr).
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sysdiff.core.theme import get_theme

if TYPE_CHECKING:
    from sysdiff.models.file import FileRecord


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_file_table(title: str) -> Table:
    """Create a pre-configured table for displaying a file collection.

    Args:
        title: Table title (usually the collection name).

    Returns:
        Rich Table with Path and Hash columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Path", no_wrap=True)
    table.add_column("Hash", style="muted")
    return table


def display_path(path: str) -> str:
    """Render a path for a text console.

    Names that are not valid UTF-8 carry surrogate escapes; their raw bytes
    are shown as backslash escapes ("caf\\xe9.conf") instead of failing.
    """
    return path.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")


def format_file_row(record: FileRecord, style: str = "text") -> tuple[str, str]:
    """Format a file record as a table row.

    Args:
        record: The file record to format.
        style: Theme style for the path column.

    Returns:
        Tuple of (path, hash) with Rich markup.
    """
    return (f"[{style}]{escape(display_path(record.path))}[/]", record.hash or "-")


def print_info(message: str) -> None:
    """Print an info message."""
    err_console.print(f"[info]{escape(message)}[/]")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{escape(message)}[/]")
