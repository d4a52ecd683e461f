"""
G-code encoders: solder paste dispensing, corner dry run and pick-and-place.

Coordinates are absolute millimeters. The machine is assumed to be homed
before the program runs.
"""

from __future__ import annotations

from typing import Dict, Optional, TextIO

from ..corners import CornerPartCollector
from ..geometry import Dimension, Position
from ..issues import IssueKind, report
from .base import MotionSink, PlacedPart

MINIMUM_MILLISECONDS = 50.0
AREA_TO_MILLISECONDS = 25.0  # per mm^2 of pad area

Z_DISPENSING = 1.7  # just above the board
Z_HOVER_DISPENSER = 2.5
Z_HIGH_UP_DISPENSER = 5.0  # high enough to separate the paste


class DispensingGCodeSink(MotionSink):
    """Visit every part and dispense paste for a time scaled by its pad area."""

    name = "dispense"
    description = "Solder paste dispensing G-code"

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        init_ms: float = MINIMUM_MILLISECONDS,
        area_ms: float = AREA_TO_MILLISECONDS,
        z_dispense: float = Z_DISPENSING,
        z_hover: float = Z_HOVER_DISPENSER,
        z_high: float = Z_HIGH_UP_DISPENSER,
    ):
        super().__init__(stream)
        self.init_ms = init_ms
        self.area_ms = area_ms
        self.z_dispense = z_dispense
        self.z_hover = z_hover
        self.z_high = z_high
        self.total_ms = 0.0

    def dispense_ms(self, placed: PlacedPart) -> float:
        return self.init_ms + self.area_ms * placed.part.pad_area

    def init(self, dimension: Dimension, board_dimension: Dimension) -> None:
        self.writeln(f"; rpt2pnp -d {self.init_ms:.2f} -D {self.area_ms:.2f}")
        self.writeln(
            f"; board ({dimension.min_x:.2f}, {dimension.min_y:.2f}) - "
            f"({dimension.max_x:.2f}, {dimension.max_y:.2f})"
        )
        self.writeln("G21 ; millimeters")
        self.writeln("G90 ; absolute positioning")
        self.writeln("G0 F20000")
        self.writeln("G1 F4000")
        self.writeln(f"G0 Z{self.z_high:.3f}")

    def print_part(self, placed: PlacedPart) -> None:
        part = placed.part
        ms = self.dispense_ms(placed)
        self.writeln(
            f"G0 X{placed.pos.x:.3f} Y{placed.pos.y:.3f} Z{self.z_hover:.3f} "
            f"; comp={part.component_name} val={part.value}"
        )
        self.writeln(f"G1 Z{self.z_dispense:.3f}")
        self.writeln(f"G4 P{ms:.0f}")
        self.writeln(f"G1 Z{self.z_high:.3f}")
        self.total_ms += ms
        self.count += 1

    def finish(self) -> None:
        self.writeln(";done")


class CornerGCodeSink(MotionSink):
    """
    Dry run that only visits the part nearest to each board corner.

    Corners are picked in report coordinates; the program visits the machine
    position of each retained part.
    """

    name = "corners"
    description = "Corner calibration dry-run G-code"

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        z_touch: float = Z_DISPENSING,
        z_high: float = Z_HIGH_UP_DISPENSER,
        dwell_ms: float = 2000,
    ):
        super().__init__(stream)
        self.z_touch = z_touch
        self.z_high = z_high
        self.dwell_ms = dwell_ms
        self.corners = CornerPartCollector()
        self._machine_pos: Dict[str, Position] = {}

    def init(self, dimension: Dimension, board_dimension: Dimension) -> None:
        self.corners.set_corners(board_dimension)
        self.writeln("G21 ; millimeters")
        self.writeln("G90 ; absolute positioning")
        self.writeln("G1 F2000")
        # X0 Y0 may be outside the reachable area, so only lift.
        self.writeln("G0 Z4")

    def print_part(self, placed: PlacedPart) -> None:
        self.corners.update(placed.part.pos, placed.part)
        self._machine_pos[placed.part.component_name] = placed.pos
        self.count += 1

    def finish(self) -> None:
        for i in range(4):
            part = self.corners.get_part(i)
            if part is None:
                report(self.issues, IssueKind.LOOKUP_FAILURE, "No part for corner", {"corner": i})
                self.writeln(f"; corner {i}: no part")
                continue
            pos = self._machine_pos[part.component_name]
            self.writeln(f"G0 X{pos.x:.3f} Y{pos.y:.3f} Z{self.z_touch:.3f} ; comp={part.component_name}")
            self.writeln(f"G4 P{self.dwell_ms:.0f}")
            self.writeln(f"G0 Z{self.z_high:.3f}")
        self.writeln(";done")


class PickPlaceGCodeSink(MotionSink):
    """Move each part from its tape slot to its board position."""

    name = "pnp"
    description = "Pick-and-place G-code"
    needs_picks = True

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        z_travel: float = 10.0,
        z_place: float = 1.6,
        feed_rate: float = 8000,
        vacuum_on: str = "M7",
        vacuum_off: str = "M9",
        dwell_ms: float = 300,
    ):
        super().__init__(stream)
        self.z_travel = z_travel
        self.z_place = z_place
        self.feed_rate = feed_rate
        self.vacuum_on = vacuum_on
        self.vacuum_off = vacuum_off
        self.dwell_ms = dwell_ms

    def init(self, dimension: Dimension, board_dimension: Dimension) -> None:
        self.writeln("; rpt2pnp pick-and-place")
        self.writeln("G21 ; millimeters")
        self.writeln("G90 ; absolute positioning")
        self.writeln(f"G0 F{self.feed_rate:.0f}")
        self.writeln(f"G0 Z{self.z_travel:.3f}")

    def print_part(self, placed: PlacedPart) -> None:
        part = placed.part
        pick = placed.pick
        if pick is None:
            report(self.issues, IssueKind.LOOKUP_FAILURE, "Part has no pick position",
                   {"part": part.component_name})
            self.writeln(f"; {part.component_name}: skipped, no tape")
            return

        self.writeln(f"; {part.component_name} {part.value} ({part.footprint}) slot {pick.index}")
        self.writeln(f"G0 X{pick.x:.3f} Y{pick.y:.3f} Z{self.z_travel:.3f}")
        self.writeln(f"G1 Z{pick.z:.3f}")
        self.writeln(f"{self.vacuum_on} ; vacuum on")
        self.writeln(f"G4 P{self.dwell_ms:.0f}")
        self.writeln(f"G0 Z{self.z_travel:.3f}")
        self.writeln(f"G0 X{placed.pos.x:.3f} Y{placed.pos.y:.3f} A{placed.rotation:.2f}")
        self.writeln(f"G1 Z{self.z_place:.3f}")
        self.writeln(f"{self.vacuum_off} ; vacuum off")
        self.writeln(f"G4 P{self.dwell_ms:.0f}")
        self.writeln(f"G0 Z{self.z_travel:.3f}")
        self.count += 1

    def finish(self) -> None:
        self.writeln(";done")
