"""Shared utilities for the command line interface."""

from __future__ import annotations

import sys
import traceback
from typing import TYPE_CHECKING

from rpt2pnp.exceptions import Rpt2PnpError

if TYPE_CHECKING:
    from rich.console import Console

__all__ = ["format_error", "print_error", "get_stderr_console", "print_diagnostic"]

# Module-level console for stderr output, created lazily
_stderr_console: Console | None = None


def get_stderr_console() -> Console:
    """Get or create the Rich console for stderr output.

    Diagnostics and errors go to stderr so stdout stays a clean machine program.
    """
    global _stderr_console
    if _stderr_console is None:
        from rich.console import Console

        _stderr_console = Console(stderr=True, force_terminal=None, highlight=False)
    return _stderr_console


def print_diagnostic(message: str) -> None:
    """Print a status line to stderr."""
    from rich.markup import escape

    get_stderr_console().print(escape(message), soft_wrap=True)


def print_error(
    e: Exception,
    verbose: bool = False,
    use_rich: bool | None = None,
) -> None:
    """
    Print an exception with Rich formatting when stderr is a terminal.

    Args:
        e: The exception to print
        verbose: If True, include full stack trace
        use_rich: Override automatic TTY detection (None = auto-detect)
    """
    console = get_stderr_console()

    if use_rich is None:
        use_rich = console.is_terminal

    if verbose:
        print(traceback.format_exc(), file=sys.stderr)
        return

    if use_rich:
        from rich.markup import escape

        console.print(f"[bold red]Error:[/bold red] {escape(_describe(e))}", soft_wrap=True)
    else:
        print(format_error(e), file=sys.stderr)


def format_error(e: Exception) -> str:
    """Format an exception for display (plain text)."""
    return f"Error: {_describe(e)}"


def _describe(e: Exception) -> str:
    if isinstance(e, Rpt2PnpError):
        return str(e)
    return f"{type(e).__name__}: {e}"
