"""Rich Console factory and theme for restodesk output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

RESTO_THEME = Theme(
    {
        "resto.ok": "bold green",
        "resto.error": "bold red",
        "resto.warning": "bold yellow",
        "resto.op": "bold cyan",
        "resto.key": "dim",
        "resto.id": "bold blue",
        "resto.status.pending": "yellow",
        "resto.status.active": "cyan",
        "resto.status.done": "green",
        "resto.status.failed": "red",
        "resto.status.closed": "dim",
    }
)

_STATUS_STYLES: dict[str, str] = {
    "planned": "resto.status.pending",
    "generating": "resto.status.active",
    "ready_for_approval": "resto.status.pending",
    "approved": "resto.status.done",
    "applied_to_catalog": "resto.status.done",
    "sending": "resto.status.active",
    "generated": "resto.status.pending",
    "sent": "resto.status.done",
    "done": "resto.status.done",
    "open": "resto.status.pending",
    "in_progress": "resto.status.active",
    "resolved": "resto.status.done",
    "failed": "resto.status.failed",
    "rejected": "resto.status.failed",
    "discarded": "resto.status.closed",
    "archived": "resto.status.closed",
    "closed": "resto.status.closed",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=RESTO_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str) -> str:
    """Return the Rich style name for a lifecycle status."""
    return _STATUS_STYLES.get(status, "")
