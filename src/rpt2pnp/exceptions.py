"""
Custom exception hierarchy for rpt2pnp.

Provides consistent error handling with context and suggestions.
All exceptions include:
- Context information (file paths, line numbers, tape state, etc.)
- Suggestions for how to fix the issue
- Clear, formatted error messages

Only unrecoverable states raise. Per-line and per-part problems that the
run can survive are collected as :class:`rpt2pnp.issues.Issue` records.

Example::

    from rpt2pnp.exceptions import ParseError

    raise ParseError(
        "Module has no position",
        context={"module": "R101"},
        line=42,
        file_path="board.rpt",
        suggestions=["Re-export the footprint report from Pcbnew"],
    )
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class Rpt2PnpError(Exception):
    """
    Base exception for all rpt2pnp errors.

    Attributes:
        context: Dictionary of contextual information (file, line, etc.)
        suggestions: List of actionable suggestions for fixing the error
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context and suggestions."""
        parts = [self.message]

        if self.context:
            parts.append("\n\nContext:")
            for key, value in self.context.items():
                parts.append(f"\n  {key}: {value}")

        if self.suggestions:
            parts.append("\n\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"\n  - {suggestion}")

        return "".join(parts)

    def __str__(self) -> str:
        return self._format_message()


class ParseError(Rpt2PnpError):
    """
    Report or configuration text could not be parsed.

    Example::

        raise ParseError(
            "Expected 3 numbers for tape origin",
            context={"payload": "10 abc"},
            line=7,
            file_path="tapes.cfg",
        )
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        file_path: Optional[Union[str, Path]] = None,
    ):
        ctx = context or {}
        if file_path and "file" not in ctx:
            ctx["file"] = str(file_path)
        if line is not None and "line" not in ctx:
            ctx["line"] = line
        if column is not None and "column" not in ctx:
            ctx["column"] = column

        super().__init__(message, ctx, suggestions)


class FileNotFoundError(Rpt2PnpError):
    """
    Required input file was not found.

    Example::

        raise FileNotFoundError(
            "Report file not found",
            context={"file": "board.rpt"},
            suggestions=["Export it from Pcbnew: File > Fabrication Outputs > Footprint Report"],
        )
    """

    pass


class ConfigurationError(Rpt2PnpError):
    """
    Tape layout or calibration configuration is unusable.

    Raised by :meth:`rpt2pnp.pnp_config.ConfigParseResult.unwrap` when the
    parse produced no configuration. Motion generation must not start.
    """

    pass


class BoardError(Rpt2PnpError):
    """
    Board cannot be built from the given parts.

    Raised for an empty part list (no bounding box) and for duplicate
    designators.
    """

    pass


class FeederExhaustedError(Rpt2PnpError):
    """
    A tape has no components left.

    Raised by :meth:`rpt2pnp.tape.Tape.next_position` when the cursor
    reached the tape's capacity. The sequencing engine catches it, records
    an issue and skips the part.

    Attributes:
        cursor: Index of the pick that was requested
        count: Capacity of the tape
    """

    def __init__(
        self,
        cursor: int,
        count: int,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.cursor = cursor
        self.count = count
        ctx = dict(context or {})
        ctx.setdefault("cursor", cursor)
        ctx.setdefault("count", count)
        super().__init__(
            f"Feeder exhausted after {count} component(s)",
            ctx,
            suggestions or ["Reload the tape or raise its 'count:' in the layout"],
        )


__all__ = [
    "Rpt2PnpError",
    "ParseError",
    "FileNotFoundError",
    "ConfigurationError",
    "BoardError",
    "FeederExhaustedError",
]
