"""
Output encoders for part sequences.

Each encoder implements :class:`MotionSink`; the engine only talks to that
interface.
"""

from __future__ import annotations

from typing import Any, Dict, Type

from .base import MotionSink, PlacedPart
from .gcode import CornerGCodeSink, DispensingGCodeSink, PickPlaceGCodeSink
from .listing import ListingSink
from .postscript import PostScriptSink

# Registry of available encoders
SINKS: Dict[str, Type[MotionSink]] = {
    "dispense": DispensingGCodeSink,
    "corners": CornerGCodeSink,
    "pnp": PickPlaceGCodeSink,
    "postscript": PostScriptSink,
    "list": ListingSink,
}


def get_sink(name: str, **options: Any) -> MotionSink:
    """
    Create an encoder by name.

    Args:
        name: Encoder name (dispense, corners, pnp, postscript, list)
        **options: Passed to the encoder constructor

    Raises:
        ValueError: If the name is not registered
    """
    sink_class = SINKS.get(name.lower())
    if sink_class is None:
        available = ", ".join(SINKS.keys())
        raise ValueError(f"Unknown output: {name}. Available: {available}")
    return sink_class(**options)


__all__ = [
    "MotionSink",
    "PlacedPart",
    "DispensingGCodeSink",
    "CornerGCodeSink",
    "PickPlaceGCodeSink",
    "PostScriptSink",
    "ListingSink",
    "SINKS",
    "get_sink",
]
