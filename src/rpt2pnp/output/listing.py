"""Plain tab-separated listing of the final sequence."""

from __future__ import annotations

import csv
from typing import Optional, TextIO

from ..geometry import Dimension
from .base import MotionSink, PlacedPart


class ListingSink(MotionSink):
    """One row per part: designator, machine position, angle, footprint, value, pick."""

    name = "list"
    description = "Plain listing"

    HEADERS = ["designator", "x", "y", "angle", "footprint", "value", "pick_x", "pick_y", "pick_z"]

    def __init__(self, stream: Optional[TextIO] = None):
        super().__init__(stream)
        self._writer = csv.writer(self.stream, delimiter="\t", lineterminator="\n")

    def init(self, dimension: Dimension, board_dimension: Dimension) -> None:
        self.writeln(f"# board {dimension.width:.3f} x {dimension.height:.3f} mm")
        self._writer.writerow(self.HEADERS)

    def print_part(self, placed: PlacedPart) -> None:
        part = placed.part
        pick = placed.pick
        self._writer.writerow([
            part.component_name,
            f"{placed.pos.x:.3f}",
            f"{placed.pos.y:.3f}",
            f"{placed.rotation:.1f}",
            part.footprint,
            part.value,
            f"{pick.x:.3f}" if pick else "",
            f"{pick.y:.3f}" if pick else "",
            f"{pick.z:.3f}" if pick else "",
        ])
        self.count += 1

    def finish(self) -> None:
        pass
