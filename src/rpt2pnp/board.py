"""
Board model: placed parts, their bounding box and the report-to-machine
coordinate transform.

Report coordinates come out of Pcbnew with Y growing downwards. Machine
coordinates have Y growing away from the operator, so Y is mirrored at the
board's maximum Y and both axes are shifted so that the smallest X and the
largest report Y land on a fixed offset (or on the calibrated board origin).
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence

from .exceptions import BoardError
from .geometry import Dimension, Position

logger = logging.getLogger(__name__)

# Smallest machine coordinate a board corner is placed at.
DEFAULT_OFFSET = Position(10.0, 10.0)


@dataclass(frozen=True)
class Part:
    """One placed component instance from the report."""

    component_name: str  # designator, e.g. "R101"
    footprint: str
    value: str
    pos: Position  # report coordinates, mm
    angle: float = 0.0  # degrees
    pad_area: float = 0.0  # mm^2, sum of all pads

    @property
    def key(self) -> str:
        """Composite component key used by tape layouts: ``footprint@value``."""
        return f"{self.footprint}@{self.value}"


class Board:
    """
    All parts of one report plus derived bounds and the calibration origin.

    Example::

        board = Board(read_report("board.rpt"))
        print(board.dimension.width, board.dimension.height)
        r1 = board.find("R1")
    """

    def __init__(self, parts: Sequence[Part], origin: Optional[Position] = None):
        if not parts:
            raise BoardError(
                "Board has no parts",
                suggestions=["Check that the report contains $MODULE entries"],
            )
        duplicates = sorted(
            name for name, n in Counter(p.component_name for p in parts).items() if n > 1
        )
        if duplicates:
            raise BoardError(
                "Duplicate component designators",
                context={"designators": ", ".join(duplicates)},
                suggestions=["Re-annotate the schematic and update the PCB"],
            )

        self._parts: List[Part] = list(parts)
        self._by_name = {p.component_name: p for p in self._parts}
        self.dimension = Dimension.enclosing(p.pos for p in self._parts)
        self.origin = origin
        logger.debug(
            "Board with %d parts, %.2f x %.2f mm",
            len(self._parts),
            self.dimension.width,
            self.dimension.height,
        )

    @property
    def parts(self) -> List[Part]:
        return list(self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    def __iter__(self) -> Iterator[Part]:
        return iter(self._parts)

    def find(self, component_name: str) -> Optional[Part]:
        """Look up a part by designator."""
        return self._by_name.get(component_name)

    def transform(self, offset: Optional[Position] = None) -> CoordinateTransform:
        """
        Build the report-to-machine transform for this board.

        The calibrated ``origin`` wins over ``offset`` when set.
        """
        if self.origin is not None:
            shift = self.origin
        elif offset is not None:
            shift = offset
        else:
            shift = DEFAULT_OFFSET
        return CoordinateTransform(self.dimension, shift)


@dataclass(frozen=True)
class CoordinateTransform:
    """
    Report space to machine space mapping.

    ``machine_x = report_x - min_x + offset_x``
    ``machine_y = max_y - report_y + offset_y``

    Every output mode goes through one instance of this class per run.
    """

    bounds: Dimension
    offset: Position = field(default=DEFAULT_OFFSET)

    def to_machine(self, pos: Position) -> Position:
        return Position(
            pos.x - self.bounds.min_x + self.offset.x,
            self.bounds.max_y - pos.y + self.offset.y,
            pos.z,
        )

    def to_report(self, pos: Position) -> Position:
        """Inverse of :meth:`to_machine`."""
        return Position(
            pos.x - self.offset.x + self.bounds.min_x,
            self.bounds.max_y - pos.y + self.offset.y,
            pos.z,
        )

    @property
    def machine_dimension(self) -> Dimension:
        """Board bounding box in machine coordinates."""
        return Dimension(
            self.offset.x,
            self.offset.y,
            self.bounds.width + self.offset.x,
            self.bounds.height + self.offset.y,
        )
