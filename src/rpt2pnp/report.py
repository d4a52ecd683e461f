"""Footprint report parsing for the KiCad Pcbnew text format (.rpt)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .board import Part
from .exceptions import FileNotFoundError, ParseError
from .geometry import Position

logger = logging.getLogger(__name__)

INCH_TO_MM = 25.4

_UNIT_RE = re.compile(r"^##\s*Unit\s*=\s*(\w+)", re.IGNORECASE)
_TOKEN_RE = re.compile(r'"([^"]*)"|(\S+)')


@dataclass
class _ModuleBuilder:
    name: str
    line: int
    reference: Optional[str] = None
    value: str = ""
    footprint: str = ""
    pos: Optional[Position] = None
    angle: float = 0.0
    pad_area: float = 0.0
    in_pad: bool = False
    pad_size: Optional[tuple] = None


def read_report(path: Path | str) -> list[Part]:
    """
    Read all placed parts from a footprint report file.

    Args:
        path: Path to the .rpt file

    Returns:
        Parts in file order

    Raises:
        FileNotFoundError: If the file does not exist
        ParseError: If a module block is malformed
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(
            "Report file not found",
            context={"file": str(path)},
            suggestions=["Export it from Pcbnew: File > Fabrication Outputs > Footprint Report"],
        )
    parts = parse_report(path.read_text(errors="replace"), str(path))
    logger.info("Read %d parts from %s", len(parts), path)
    return parts


def parse_report(content: str, source_file: str = "") -> list[Part]:
    """Parse footprint report text.

    Format example:
        ## Footprint report - date 2014-06-14
        ## Unit = mm, Angle = deg.

        $MODULE "C1"
        reference "C1"
        value "100n"
        footprint "Capacitors_SMD:C_0805"
        attribut smd
        position 124.968000 -86.614000  orientation 90.00
        layer front
        $PAD "1"
        position -0.950000 0.000000
        size 0.700000 1.300000
        $EndPAD
        $EndMODULE  C1
    """
    parts: list[Part] = []
    scale = 1.0
    current: Optional[_ModuleBuilder] = None

    for lineno, raw in enumerate(content.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue

        unit = _UNIT_RE.match(line)
        if unit:
            scale = INCH_TO_MM if unit.group(1).lower().startswith("inch") else 1.0
            continue
        if line.startswith("#"):
            continue

        tokens = _split(line)
        keyword = tokens[0]

        if keyword == "$MODULE":
            if current is not None:
                raise ParseError(
                    "Nested $MODULE block",
                    context={"module": current.name},
                    line=lineno,
                    file_path=source_file,
                )
            current = _ModuleBuilder(name=tokens[1] if len(tokens) > 1 else "", line=lineno)
            continue

        if current is None:
            continue

        if keyword == "$EndMODULE":
            parts.append(_finish_module(current, source_file))
            current = None
        elif keyword == "$PAD":
            current.in_pad = True
            current.pad_size = None
        elif keyword == "$EndPAD":
            if current.pad_size is not None:
                current.pad_area += current.pad_size[0] * current.pad_size[1]
            current.in_pad = False
        elif current.in_pad:
            if keyword == "size":
                w, h = _numbers(tokens[1:3], 2, lineno, source_file)
                current.pad_size = (w * scale, h * scale)
        elif keyword == "reference" and len(tokens) > 1:
            current.reference = tokens[1]
        elif keyword == "value" and len(tokens) > 1:
            current.value = tokens[1]
        elif keyword == "footprint" and len(tokens) > 1:
            current.footprint = tokens[1]
        elif keyword == "position":
            x, y = _numbers(tokens[1:3], 2, lineno, source_file)
            current.pos = Position(x * scale, y * scale)
            if len(tokens) >= 5 and tokens[3] == "orientation":
                (current.angle,) = _numbers(tokens[4:5], 1, lineno, source_file)

    if current is not None:
        raise ParseError(
            "Unterminated $MODULE block",
            context={"module": current.name},
            line=current.line,
            file_path=source_file,
        )
    return parts


def _finish_module(module: _ModuleBuilder, source_file: str) -> Part:
    if module.pos is None:
        raise ParseError(
            "Module has no position",
            context={"module": module.reference or module.name},
            line=module.line,
            file_path=source_file,
        )
    return Part(
        component_name=module.reference or module.name,
        footprint=module.footprint,
        value=module.value,
        pos=module.pos,
        angle=module.angle,
        pad_area=module.pad_area,
    )


def _split(line: str) -> list[str]:
    """Whitespace tokens; double-quoted strings keep their spaces."""
    return [quoted or bare for quoted, bare in _TOKEN_RE.findall(line)]


def _numbers(tokens: list[str], expected: int, lineno: int, source_file: str) -> list[float]:
    if len(tokens) < expected:
        raise ParseError(
            f"Expected {expected} number(s)",
            context={"text": " ".join(tokens)},
            line=lineno,
            file_path=source_file,
        )
    try:
        return [float(t) for t in tokens[:expected]]
    except ValueError as e:
        raise ParseError(
            f"Invalid number: {e}",
            context={"text": " ".join(tokens)},
            line=lineno,
            file_path=source_file,
        ) from e
