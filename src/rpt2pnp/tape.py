"""
Component tape (feeder) model.

A tape is a linear strip of pick positions: the first available component
sits at ``first_position`` and each following one is ``spacing`` further.
Every pick advances a cursor that is never reset. Component keys that share
a tape share that cursor, so picks are handed out in request order.

Tapes are not safe for concurrent pick requests; the sequencing engine
draws from them strictly one part at a time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .exceptions import FeederExhaustedError
from .geometry import Position


@dataclass(frozen=True)
class PickPosition:
    """Machine position of one component on a tape."""

    x: float
    y: float
    z: float
    angle: float
    index: int  # cursor value this pick consumed

    @property
    def pos(self) -> Position:
        return Position(self.x, self.y, self.z)


class Tape:
    """
    One feeder strip.

    Example::

        tape = Tape(first_position=Position(10, 20, 2), spacing=Position(4, 0))
        tape.next_position()  # PickPosition(x=10, y=20, ...)
        tape.next_position()  # PickPosition(x=14, y=20, ...)
    """

    def __init__(
        self,
        first_position: Optional[Position] = None,
        spacing: Optional[Position] = None,
        angle: float = 0.0,
        count: Optional[int] = None,
        name: str = "",
    ):
        self.first_position = first_position or Position(0.0, 0.0, 0.0)
        self.spacing = spacing or Position(0.0, 0.0)
        self.angle = angle
        self.count = count
        self.name = name
        self._cursor = 0

    def __repr__(self) -> str:
        return (
            f"Tape(name={self.name!r}, first_position={self.first_position}, "
            f"spacing={self.spacing}, angle={self.angle}, count={self.count}, "
            f"cursor={self._cursor})"
        )

    @property
    def cursor(self) -> int:
        """Index of the next component to be picked."""
        return self._cursor

    @property
    def capacity(self) -> Optional[int]:
        """
        Number of components this tape can supply, None if unbounded.

        Without a spacing vector only the first position is known, so such a
        tape holds a single component unless ``count`` says otherwise.
        """
        if self.count is not None:
            return self.count
        if self.spacing.is_zero():
            return 1
        return None

    @property
    def remaining(self) -> Optional[int]:
        capacity = self.capacity
        if capacity is None:
            return None
        return max(0, capacity - self._cursor)

    def set_first_position(self, x: float, y: float, z: float) -> None:
        self.first_position = Position(x, y, z)

    def set_spacing(self, dx: float, dy: float) -> None:
        self.spacing = Position(dx, dy)

    def position_at(self, index: int) -> Position:
        """Machine position of slot ``index`` without consuming it."""
        first = self.first_position
        return Position(
            first.x + index * self.spacing.x,
            first.y + index * self.spacing.y,
            first.z if first.z is not None else 0.0,
        )

    def next_position(self) -> PickPosition:
        """
        Consume the next component.

        The pick carries the tape angle. A part's own angle is applied when it
        is placed, as the rotation from tape to board.

        Returns:
            Position and angle of the picked component

        Raises:
            FeederExhaustedError: If the tape capacity is used up. The cursor
                does not advance in that case.
        """
        capacity = self.capacity
        if capacity is not None and self._cursor >= capacity:
            raise FeederExhaustedError(self._cursor, capacity, context={"tape": self.name})

        pos = self.position_at(self._cursor)
        pick = PickPosition(
            x=pos.x,
            y=pos.y,
            z=pos.z,
            angle=self.angle,
            index=self._cursor,
        )
        self._cursor += 1
        return pick
