"""Nearest part per bounding-box corner, used to calibrate the board frame."""

from __future__ import annotations

from typing import List, Optional

from .board import Part
from .geometry import Dimension, Position, distance

# Index order of the corners.
MIN_MIN, MAX_MIN, MIN_MAX, MAX_MAX = range(4)


class CornerPartCollector:
    """
    Tracks, for each of the four corners of a rectangle, the part closest to it.

    Parts may be fed in any order. On equal distance the part seen first is
    kept, so results depend on the order parts are streamed in.

    Example::

        corners = CornerPartCollector(board.dimension)
        for part in board:
            corners.update(part.pos, part)
        corners.get_part(MIN_MIN)
    """

    def __init__(self, dimension: Optional[Dimension] = None):
        self._targets: List[Position] = []
        self._parts: List[Optional[Part]] = []
        self._positions: List[Optional[Position]] = []
        self._distances: List[float] = []
        if dimension is not None:
            self.set_corners(dimension)

    def set_corners(self, dimension: Dimension) -> None:
        """Start over with the corners of ``dimension``."""
        self._targets = list(dimension.corners())
        self._parts = [None] * 4
        self._positions = [None] * 4
        self._distances = [float("inf")] * 4

    @property
    def corners(self) -> List[Position]:
        return list(self._targets)

    def update(self, pos: Position, part: Part) -> None:
        """Offer ``part`` located at ``pos`` to every corner."""
        if not self._targets:
            raise RuntimeError("set_corners() must be called before update()")
        for i, target in enumerate(self._targets):
            d = distance(pos, target)
            if d < self._distances[i]:
                self._distances[i] = d
                self._parts[i] = part
                self._positions[i] = pos

    def get_closest(self, i: int) -> Optional[Position]:
        """Position of the part retained for corner ``i``, None if there is none."""
        return self._positions[i] if self._positions else None

    def get_part(self, i: int) -> Optional[Part]:
        """Part retained for corner ``i``, None if there is none."""
        return self._parts[i] if self._parts else None

    def get_distance(self, i: int) -> Optional[float]:
        if not self._parts or self._parts[i] is None:
            return None
        return self._distances[i]
