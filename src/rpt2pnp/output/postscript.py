"""
PostScript visualization of a part sequence.

Draws the board outline, every part with its designator and the travel
path between consecutive parts. Corner parts are highlighted. With a tape
configuration, tape slots and the pick-to-place moves are drawn as well.
"""

from __future__ import annotations

from typing import Dict, List, Optional, TextIO

from ..corners import CornerPartCollector
from ..geometry import Dimension, Position
from ..pnp_config import PnPConfig
from .base import MotionSink, PlacedPart

MM_TO_POINT = 72.0 / 25.4
MARGIN_MM = 5.0

_PROLOGUE = """\
%%BeginProlog
/mm { 2.834646 mul } def
/part-marker { % x y
  newpath 0.4 mm 0 360 arc fill } def
/corner-marker { % x y
  newpath 1.5 mm 0 360 arc stroke } def
/tape-marker { % x y
  newpath moveto -0.6 mm -0.6 mm rmoveto 1.2 mm 0 rlineto
  0 1.2 mm rlineto -1.2 mm 0 rlineto closepath stroke } def
/label { % x y string
  3 1 roll moveto 0.6 mm 0.6 mm rmoveto show } def
%%EndProlog
"""


def _ps_string(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
    return f"({escaped})"


class PostScriptSink(MotionSink):
    """Single-page PostScript drawing in machine coordinates."""

    name = "postscript"
    description = "PostScript visualization"

    def __init__(self, stream: Optional[TextIO] = None, config: Optional[PnPConfig] = None):
        super().__init__(stream)
        self.config = config
        self.corners = CornerPartCollector()
        self._extent: List[Position] = []
        self._last: Optional[Position] = None
        self._machine_pos: Dict[str, Position] = {}

    def _track(self, pos: Position) -> None:
        self._extent.append(pos)

    def init(self, dimension: Dimension, board_dimension: Dimension) -> None:
        self.corners.set_corners(board_dimension)
        self._track(Position(dimension.min_x, dimension.min_y))
        self._track(Position(dimension.max_x, dimension.max_y))

        self.writeln("%!PS-Adobe-3.0")
        self.writeln("%%Creator: rpt2pnp")
        self.writeln("%%BoundingBox: (atend)")
        self.writeln("%%Pages: 1")
        self.writeln("%%EndComments")
        self.write(_PROLOGUE)
        self.writeln("%%Page: 1 1")
        self.writeln("/Helvetica findfont 1.5 mm scalefont setfont")
        self.writeln("0.1 mm setlinewidth")
        self.writeln(
            f"0.7 setgray newpath {dimension.min_x:.3f} mm {dimension.min_y:.3f} mm moveto "
            f"{dimension.width:.3f} mm 0 rlineto 0 {dimension.height:.3f} mm rlineto "
            f"{-dimension.width:.3f} mm 0 rlineto closepath stroke 0 setgray"
        )

        if self.config is not None:
            for tape in self.config.tapes:
                first = tape.first_position
                self._track(first)
                keys = " ".join(self.config.keys_for(tape))
                self.writeln(f"{first.x:.3f} mm {first.y:.3f} mm tape-marker")
                self.writeln(f"{first.x:.3f} mm {first.y:.3f} mm {_ps_string(keys)} label")

    def print_part(self, placed: PlacedPart) -> None:
        pos = placed.pos
        self._track(pos)
        self.corners.update(placed.part.pos, placed.part)
        self._machine_pos[placed.part.component_name] = pos

        if self._last is not None:
            self.writeln(
                f"0.5 setgray newpath {self._last.x:.3f} mm {self._last.y:.3f} mm moveto "
                f"{pos.x:.3f} mm {pos.y:.3f} mm lineto stroke 0 setgray"
            )
        self._last = pos

        if placed.pick is not None:
            pick = placed.pick
            self._track(pick.pos)
            self.writeln(f"{pick.x:.3f} mm {pick.y:.3f} mm tape-marker")
            self.writeln(
                f"[1 mm 1 mm] 0 setdash newpath {pick.x:.3f} mm {pick.y:.3f} mm moveto "
                f"{pos.x:.3f} mm {pos.y:.3f} mm lineto stroke [] 0 setdash"
            )

        self.writeln(f"{pos.x:.3f} mm {pos.y:.3f} mm part-marker")
        self.writeln(f"{pos.x:.3f} mm {pos.y:.3f} mm {_ps_string(placed.part.component_name)} label")
        self.count += 1

    def finish(self) -> None:
        self.writeln("1 0 0 setrgbcolor")
        for i in range(4):
            part = self.corners.get_part(i)
            if part is not None:
                pos = self._machine_pos[part.component_name]
                self.writeln(f"{pos.x:.3f} mm {pos.y:.3f} mm corner-marker")
        self.writeln("0 setgray")
        self.writeln("showpage")
        self.writeln("%%Trailer")
        bounds = Dimension.enclosing(self._extent)
        self.writeln(
            "%%BoundingBox: {:.0f} {:.0f} {:.0f} {:.0f}".format(
                (bounds.min_x - MARGIN_MM) * MM_TO_POINT,
                (bounds.min_y - MARGIN_MM) * MM_TO_POINT,
                (bounds.max_x + MARGIN_MM) * MM_TO_POINT,
                (bounds.max_y + MARGIN_MM) * MM_TO_POINT,
            )
        )
        self.writeln("%%EOF")
