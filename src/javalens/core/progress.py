"""User-facing console feedback for the CLI and the tool server.

Usage::

    from javalens.core.progress import spinner, status

    status("Plan ready", style="success")  # ✓ Plan ready

    with spinner("Indexing 42 files"):
        build()  # structlog console output suppressed during this block
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console

_console = Console(stderr=True)

_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}

_suppress_console_logs = threading.local()


def is_console_suppressed() -> bool:
    return getattr(_suppress_console_logs, "active", False)


@contextmanager
def suppress_console_logs() -> Iterator[None]:
    """Pause structlog console output while a live display is active.

    File handlers keep receiving records.
    """
    _suppress_console_logs.active = True
    try:
        yield
    finally:
        _suppress_console_logs.active = False


def _is_tty() -> bool:
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


def get_console() -> Console:
    """Get the shared Rich console instance."""
    return _console


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    _console.print(f"{' ' * indent}{prefix}{message}", highlight=False)


@contextmanager
def spinner(message: str) -> Iterator[None]:
    """Spinner on a TTY, a plain status line otherwise."""
    if _is_tty():
        with suppress_console_logs(), _console.status(f"[cyan]{message}[/cyan]", spinner="dots"):
            yield
    else:
        _console.print(f"{message}...", highlight=False)
        yield
