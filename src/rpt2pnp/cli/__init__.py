"""
Command-line interface for rpt2pnp.

Turns a Pcbnew footprint report into a machine program:

    rpt2pnp board.rpt                     - Solder paste dispensing G-code (default)
    rpt2pnp -c board.rpt                  - Corner calibration dry run
    rpt2pnp -P -t tapes.cfg board.rpt     - Pick-and-place G-code
    rpt2pnp -p -t tapes.cfg board.rpt     - PostScript drawing of the process
    rpt2pnp -l board.rpt                  - Plain listing
    rpt2pnp -T board.rpt > tapes.cfg      - Tape layout template to fill in

The program goes to stdout; counts and problems go to stderr.

Examples:
    rpt2pnp -d 60 -D 20 board.rpt > paste.gcode
    rpt2pnp -P -L jog.log board.rpt > place.gcode
    rpt2pnp --start first --no-optimize -l board.rpt
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rpt2pnp import __version__
from rpt2pnp.board import Board
from rpt2pnp.config import Config, ConfigError
from rpt2pnp.exceptions import Rpt2PnpError
from rpt2pnp.geometry import Position
from rpt2pnp.output import MotionSink, get_sink
from rpt2pnp.output.gcode import DispensingGCodeSink
from rpt2pnp.pnp_config import (
    PnPConfig,
    component_counts,
    generate_tape_template,
    load_calibration_log,
    load_tape_layout,
)
from rpt2pnp.report import read_report
from rpt2pnp.sequence import generate

from .utils import print_diagnostic, print_error

__all__ = ["main", "build_parser"]

# Outputs that show tape picks when a configuration is available
_PICK_OUTPUTS = {"pnp", "postscript", "list"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rpt2pnp",
        description="Convert a footprint report into dispensing or pick-and-place machine programs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version=f"rpt2pnp {__version__}")
    parser.add_argument("rpt_file", nargs="?", help="Path to the footprint report (.rpt)")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-p", "--postscript", dest="mode", action="store_const", const="postscript",
                      help="Output as PostScript")
    mode.add_argument("-c", "--corners", dest="mode", action="store_const", const="corners",
                      help="Output corner dry-run G-code")
    mode.add_argument("-P", "--pnp", dest="mode", action="store_const", const="pnp",
                      help="Output pick-and-place G-code (needs -t or -L)")
    mode.add_argument("-l", "--list", dest="mode", action="store_const", const="list",
                      help="Output a plain listing")
    mode.add_argument("-T", "--template", dest="mode", action="store_const", const="template",
                      help="Print a tape layout template for this board")
    parser.set_defaults(mode="dispense")

    source = parser.add_mutually_exclusive_group()
    source.add_argument("-t", "--tapes", metavar="FILE", help="Tape layout file")
    source.add_argument("-L", "--calibration-log", metavar="FILE",
                        help="Calibration log with measured tape and board positions")

    parser.add_argument("-d", "--dispense-init", type=float, metavar="MS",
                        help="Dispensing init time in ms (default 50)")
    parser.add_argument("-D", "--dispense-area", type=float, metavar="MS",
                        help="Dispensing time in ms per mm^2 of pad area (default 25)")
    parser.add_argument("--no-optimize", action="store_true", help="Keep the report order")
    parser.add_argument("--start", choices=["home", "first"],
                        help="Start the optimized tour at machine home or at the first part")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the rpt2pnp CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if not args.rpt_file:
        parser.print_usage(sys.stderr)
        print("rpt2pnp: error: missing report file", file=sys.stderr)
        return 1
    if not Path(args.rpt_file).is_file():
        parser.print_usage(sys.stderr)
        print(f"rpt2pnp: error: report file not found: {args.rpt_file}", file=sys.stderr)
        return 1

    try:
        settings = Config.load()
        return _run(args, settings)
    except (Rpt2PnpError, ConfigError) as e:
        print_error(e, verbose=args.verbose)
        return 1


def _run(args: argparse.Namespace, settings: Config) -> int:
    board = Board(read_report(args.rpt_file))
    counts = component_counts(board)
    print_diagnostic(f"Found {len(counts)} distinct components, {len(board)} parts total")

    if args.mode == "template":
        sys.stdout.write(generate_tape_template(board))
        return 0

    config = None
    if args.tapes:
        config = load_tape_layout(args.tapes).unwrap()
    elif args.calibration_log:
        result = load_calibration_log(board, args.calibration_log)
        if result.issues:
            print_diagnostic(f"{len(result.issues)} calibration line(s) skipped")
        config = result.unwrap()

    sink = _make_sink(args, settings, config)

    start_mode = args.start or settings.optimize.start
    start = None if start_mode == "first" else Position(settings.optimize.home_x, settings.optimize.home_y)

    summary = generate(
        board,
        sink,
        config=config,
        resolve_picks=config is not None and args.mode in _PICK_OUTPUTS,
        optimize=settings.optimize.enabled and not args.no_optimize,
        start=start,
        offset=Position(settings.board.offset_x, settings.board.offset_y),
    )

    if isinstance(sink, DispensingGCodeSink):
        print_diagnostic(
            f"Dispensed {summary.emitted_count} parts. "
            f"Total dispense time: {sink.total_ms / 1000:.1f}s"
        )
    else:
        print_diagnostic(f"Emitted {summary.emitted_count} parts")
    if summary.issues:
        print_diagnostic(f"{len(summary.issues)} issue(s):")
        for issue in summary.issues:
            print_diagnostic(f"  {issue}")
    return 0


def _make_sink(
    args: argparse.Namespace, settings: Config, config: Optional[PnPConfig]
) -> MotionSink:
    if args.mode == "dispense":
        d = settings.dispense
        return get_sink(
            "dispense",
            init_ms=args.dispense_init if args.dispense_init is not None else d.init_ms,
            area_ms=args.dispense_area if args.dispense_area is not None else d.area_ms,
            z_dispense=d.z_dispense,
            z_hover=d.z_hover,
            z_high=d.z_high,
        )
    if args.mode == "corners":
        return get_sink("corners", z_touch=settings.dispense.z_dispense, z_high=settings.dispense.z_high)
    if args.mode == "pnp":
        p = settings.pnp
        return get_sink(
            "pnp",
            z_travel=p.z_travel,
            z_place=p.z_place,
            feed_rate=p.feed_rate,
            vacuum_on=p.vacuum_on,
            vacuum_off=p.vacuum_off,
            dwell_ms=p.dwell_ms,
        )
    if args.mode == "postscript":
        return get_sink("postscript", config=config)
    return get_sink(args.mode)
