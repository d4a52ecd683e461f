"""
rpt2pnp: turn Pcbnew footprint reports into assembly machine programs.

Reads the placed parts of a board, resolves tape feeder positions, orders
the parts for short travel and emits solder paste dispensing G-code,
pick-and-place G-code, a corner calibration dry run or a PostScript drawing.

Modules:
    geometry: Positions, distances, bounding rectangles
    board: Parts, board bounds and the report-to-machine transform
    report: Footprint report (.rpt) reader
    tape: Tape feeder model
    pnp_config: Tape registry, tape layouts and calibration logs
    corners: Nearest part per board corner
    optimize: Nearest-neighbor travel ordering
    sequence: Motion sequencing engine
    output: Motion sinks (G-code, PostScript, listing)

Quick Start::

    from rpt2pnp import Board, read_report, load_tape_layout, generate
    from rpt2pnp.output import PickPlaceGCodeSink

    board = Board(read_report("board.rpt"))
    config = load_tape_layout("tapes.cfg").unwrap()
    summary = generate(board, PickPlaceGCodeSink(), config=config)
"""

__version__ = "0.1.0"

from rpt2pnp.geometry import Dimension, Position, distance
from rpt2pnp.board import Board, CoordinateTransform, Part
from rpt2pnp.report import parse_report, read_report
from rpt2pnp.tape import PickPosition, Tape
from rpt2pnp.pnp_config import (
    ConfigParseResult,
    PnPConfig,
    load_calibration_log,
    load_tape_layout,
    parse_calibration_log,
    parse_tape_layout,
)
from rpt2pnp.corners import CornerPartCollector
from rpt2pnp.optimize import optimize_parts
from rpt2pnp.sequence import RunSummary, generate

__all__ = [
    "__version__",
    # Geometry
    "Position",
    "Dimension",
    "distance",
    # Board
    "Part",
    "Board",
    "CoordinateTransform",
    "read_report",
    "parse_report",
    # Feeders
    "Tape",
    "PickPosition",
    "PnPConfig",
    "ConfigParseResult",
    "parse_tape_layout",
    "parse_calibration_log",
    "load_tape_layout",
    "load_calibration_log",
    # Sequencing
    "CornerPartCollector",
    "optimize_parts",
    "generate",
    "RunSummary",
]
