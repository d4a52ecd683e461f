"""
Motion sequencing engine.

Orders the parts of a board, maps them into machine coordinates, resolves
feeder pick positions when a tape configuration is given and streams the
result into a motion sink::

    board = Board(read_report("board.rpt"))
    config = load_tape_layout("tapes.cfg").unwrap()
    summary = generate(board, PickPlaceGCodeSink(), config=config)
    print(summary)

The run is single-threaded: tape cursors advance in emission order, which is
the physical order components leave their feeders.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .board import Board, CoordinateTransform, Part
from .exceptions import ConfigurationError, FeederExhaustedError
from .geometry import ORIGIN, Position
from .issues import Issue, IssueKind, report
from .optimize import optimize_parts
from .output.base import MotionSink, PlacedPart
from .pnp_config import PnPConfig

logger = logging.getLogger(__name__)

# Default start of the optimized tour, machine coordinates.
MACHINE_HOME = ORIGIN


@dataclass
class RunSummary:
    """Result of one generation run."""

    emitted: List[Part] = field(default_factory=list)
    skipped: List[Part] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)

    @property
    def emitted_count(self) -> int:
        return len(self.emitted)

    @property
    def success(self) -> bool:
        """True if no issue was reported."""
        return not self.issues

    def __str__(self) -> str:
        lines = [f"Emitted {self.emitted_count} part(s)"]
        if self.skipped:
            lines.append(f"  Skipped: {', '.join(p.component_name for p in self.skipped)}")
        if self.issues:
            lines.append(f"  Issues: {len(self.issues)}")
            for issue in self.issues:
                lines.append(f"    - {issue}")
        return "\n".join(lines)


def order_parts(
    board: Board,
    transform: CoordinateTransform,
    optimize: bool = True,
    start: Optional[Position] = MACHINE_HOME,
) -> List[Part]:
    """
    Sequence the board's parts.

    Args:
        board: Board to sequence
        transform: Transform of this run, used to map ``start`` into report space
        optimize: False keeps the report order
        start: Tour start in machine coordinates; None starts at the first part
    """
    if not optimize:
        return board.parts
    report_start = transform.to_report(start) if start is not None else None
    return optimize_parts(board.parts, start=report_start)


def generate(
    board: Board,
    sink: MotionSink,
    config: Optional[PnPConfig] = None,
    resolve_picks: Optional[bool] = None,
    optimize: bool = True,
    start: Optional[Position] = MACHINE_HOME,
    offset: Optional[Position] = None,
) -> RunSummary:
    """
    Run one board through a motion sink.

    Args:
        board: Parsed board
        sink: Output encoder
        config: Tape configuration; its board origin replaces ``offset``
        resolve_picks: Draw a pick position per part. Always on for sinks
            that need picks, off by default for the others.
        optimize: Reorder parts by nearest neighbor
        start: Tour start in machine coordinates; None starts at the first part
        offset: Machine offset of the board when no calibrated origin exists

    Returns:
        Summary with emitted and skipped parts and all reported issues

    Raises:
        ConfigurationError: If the sink needs picks but no config was given
    """
    resolve_picks = bool(resolve_picks) or sink.needs_picks
    if resolve_picks and config is None:
        raise ConfigurationError(
            "Pick positions requested without a tape configuration",
            context={"output": sink.name or type(sink).__name__},
            suggestions=["Pass a tape layout (-t) or a calibration log (-L)"],
        )

    if config is not None and config.board.origin is not None:
        board.origin = config.board.origin
    transform = board.transform(offset)
    parts = order_parts(board, transform, optimize=optimize, start=start)

    summary = RunSummary()
    sink.init(transform.machine_dimension, board.dimension)

    for part in parts:
        pick = None
        if resolve_picks:
            tape = config.tape_for(part)
            if tape is None:
                report(summary.issues, IssueKind.LOOKUP_FAILURE, "No tape for part",
                       {"part": part.component_name, "key": part.key})
                summary.skipped.append(part)
                continue
            try:
                pick = tape.next_position()
            except FeederExhaustedError as e:
                report(summary.issues, IssueKind.FEEDER_EXHAUSTED, e.message,
                       {"part": part.component_name, **e.context})
                summary.skipped.append(part)
                continue

        sink.print_part(PlacedPart(part=part, pos=transform.to_machine(part.pos), pick=pick))
        summary.emitted.append(part)

    sink.finish()
    summary.issues.extend(sink.issues)
    logger.info("Emitted %d of %d parts", summary.emitted_count, len(parts))
    return summary
