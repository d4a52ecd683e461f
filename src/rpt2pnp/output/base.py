"""Motion sink interface shared by all output encoders."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, TextIO

from ..board import Part
from ..geometry import Dimension, Position
from ..issues import Issue
from ..tape import PickPosition


@dataclass(frozen=True)
class PlacedPart:
    """A part in final sequence order with its machine coordinates."""

    part: Part
    pos: Position  # machine coordinates of the placement
    pick: Optional[PickPosition] = None  # where to take it from, if resolved

    @property
    def rotation(self) -> float:
        """Rotation between the component on the tape and on the board."""
        if self.pick is None:
            return self.part.angle % 360
        return (self.part.angle - self.pick.angle) % 360


class MotionSink(ABC):
    """
    Consumer of an ordered part stream.

    The engine calls :meth:`init` once with the board bounds, :meth:`print_part`
    once per part in sequence order and :meth:`finish` exactly once after the
    last part.
    """

    name: str = ""
    description: str = ""
    needs_picks: bool = False  # requires a tape configuration

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout
        self.issues: List[Issue] = []
        self.count = 0

    def write(self, text: str) -> None:
        self.stream.write(text)

    def writeln(self, line: str = "") -> None:
        self.stream.write(line + "\n")

    @abstractmethod
    def init(self, dimension: Dimension, board_dimension: Dimension) -> None:
        """
        Start output for a board.

        Args:
            dimension: Board bounds in machine coordinates
            board_dimension: Board bounds in report coordinates
        """
        pass

    @abstractmethod
    def print_part(self, placed: PlacedPart) -> None:
        """Emit one part."""
        pass

    @abstractmethod
    def finish(self) -> None:
        """Complete the output."""
        pass
