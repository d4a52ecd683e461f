"""
Feeder registry and its two text formats.

Tape layout (declarative, human edited)::

    # Board origin in machine coordinates
    Board:
    origin: 100.5 80

    Tape: 0805@100n 0805@10u
    origin: 10 20 2      # first component x y z
    spacing: 4 0         # distance to the next component
    angle: 90
    count: 50

Calibration log (recorded while jogging the machine)::

    tape1:C1 10.0 20.0 2.0
    tape3:C1 18.0 20.0 2.0
    board:R7 142.3 95.1 1.6

Component keys are either ``footprint@value`` or a bare designator. Several
keys may name the same tape; they then draw from one shared cursor.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .board import Board, CoordinateTransform, Part
from .exceptions import ConfigurationError, FileNotFoundError
from .geometry import ORIGIN, Position
from .issues import Issue, IssueKind, report
from .tape import Tape

logger = logging.getLogger(__name__)

_TAPE_LOG_RE = re.compile(r"^tape(\d+):(\S+)\s+(\S+)\s+(\S+)\s+(\S+)\s*$")
_BOARD_LOG_RE = re.compile(r"^board:(\S+)\s+(\S+)\s+(\S+)\s+(\S+)\s*$")


@dataclass
class BoardSettings:
    """Board calibration carried by a configuration."""

    origin: Optional[Position] = None


class PnPConfig:
    """
    Registry of tapes and the component keys bound to them.

    Tapes are owned by the registry and addressed by index; the key map only
    stores indices, so every key bound to a tape reaches the same instance.
    """

    def __init__(self) -> None:
        self.tapes: List[Tape] = []
        self._tape_index: Dict[str, int] = {}
        self.board = BoardSettings()

    def __repr__(self) -> str:
        return f"PnPConfig(tapes={len(self.tapes)}, keys={len(self._tape_index)}, origin={self.board.origin})"

    def add_tape(self, tape: Tape) -> int:
        """Take ownership of ``tape`` and return its index."""
        self.tapes.append(tape)
        return len(self.tapes) - 1

    def bind(self, key: str, tape_index: int) -> None:
        """Bind a component key to a tape, replacing an earlier binding."""
        if not 0 <= tape_index < len(self.tapes):
            raise IndexError(f"No tape with index {tape_index}")
        if key in self._tape_index and self._tape_index[key] != tape_index:
            logger.debug("Rebinding %s to tape %d", key, tape_index)
        self._tape_index[key] = tape_index

    @property
    def tape_for_component(self) -> Dict[str, Tape]:
        """Read-only view: component key to tape."""
        return {key: self.tapes[idx] for key, idx in self._tape_index.items()}

    def keys_for(self, tape: Tape) -> List[str]:
        """All component keys bound to ``tape``."""
        return [key for key, idx in self._tape_index.items() if self.tapes[idx] is tape]

    def tape_for_key(self, key: str) -> Optional[Tape]:
        idx = self._tape_index.get(key)
        return None if idx is None else self.tapes[idx]

    def tape_for(self, part: Part) -> Optional[Tape]:
        """Tape serving ``part``: by designator first, then ``footprint@value``."""
        tape = self.tape_for_key(part.component_name)
        if tape is None:
            tape = self.tape_for_key(part.key)
        return tape


@dataclass
class ConfigParseResult:
    """Outcome of parsing a configuration: a config or the reason there is none."""

    config: Optional[PnPConfig]
    issues: List[Issue] = field(default_factory=list)
    source: str = ""

    @property
    def ok(self) -> bool:
        return self.config is not None

    def unwrap(self) -> PnPConfig:
        """
        Return the configuration.

        Raises:
            ConfigurationError: If parsing failed
        """
        if self.config is None:
            raise ConfigurationError(
                "No usable pick-and-place configuration",
                context={
                    "source": self.source or "<text>",
                    "problems": "; ".join(str(i) for i in self.issues) or "unknown",
                },
            )
        return self.config


def parse_tape_layout(content: str, source: str = "") -> ConfigParseResult:
    """
    Parse the declarative tape layout.

    Any malformed numeric field, a zero spacing vector, a ``Tape:`` without
    component keys, or a tape directive outside a tape section fails the
    whole configuration. Parsing stops at the first such error. Unknown
    directives are ignored.
    """
    issues: List[Issue] = []
    config = PnPConfig()
    current: Optional[Tape] = None

    def fail(lineno: int, message: str, text: str) -> ConfigParseResult:
        report(
            issues,
            IssueKind.CONFIGURATION,
            message,
            {"source": source or "<text>", "line": lineno, "text": text},
        )
        return ConfigParseResult(None, issues, source)

    for lineno, raw in enumerate(content.splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        directive, *rest = line.split(None, 1)
        payload = rest[0] if rest else ""

        if directive == "Board:":
            current = None
        elif directive == "Tape:":
            keys = payload.split()
            if not keys:
                return fail(lineno, "Tape without component keys", raw)
            current = Tape(name=keys[0])
            idx = config.add_tape(current)
            for key in keys:
                config.bind(key, idx)
        elif directive == "origin:":
            if current is not None:
                values = _floats(payload, 3)
                if values is None:
                    return fail(lineno, "Tape origin needs 3 numbers", raw)
                current.set_first_position(*values)
            else:
                values = _floats(payload, 2)
                if values is None:
                    return fail(lineno, "Board origin needs 2 numbers", raw)
                config.board.origin = Position(*values)
        elif directive in ("spacing:", "angle:", "count:"):
            if current is None:
                return fail(lineno, f"'{directive}' outside of a Tape section", raw)
            if directive == "spacing:":
                values = _floats(payload, 2)
                if values is None:
                    return fail(lineno, "Spacing needs 2 numbers", raw)
                if values[0] == 0 and values[1] == 0:
                    return fail(lineno, "Spacing: at least one of dx, dy must be non-zero", raw)
                current.set_spacing(*values)
            elif directive == "angle:":
                values = _floats(payload, 1)
                if values is None:
                    return fail(lineno, "Angle needs 1 number", raw)
                current.angle = values[0]
            else:
                count = _int(payload)
                if count is None or count < 0:
                    return fail(lineno, "Count needs a non-negative integer", raw)
                current.count = count
        else:
            logger.debug("Ignoring unknown directive %r in line %d", directive, lineno)

    logger.info("Tape layout: %d tape(s), %d key(s)", len(config.tapes), len(config.tape_for_component))
    return ConfigParseResult(config, issues, source)


def parse_calibration_log(board: Board, content: str, source: str = "") -> ConfigParseResult:
    """
    Infer a configuration from an operator's jog log.

    ``tape1:<key> x y z`` sets the first position of the tape for ``key``,
    creating the tape on first use.
    ``tape<n>:<key> x y z`` with n > 1 sets that tape's spacing to
    ``(measured - first) / (n - 1)``. ``board:<designator> x y z`` sets the
    board origin so that the part maps onto the measured position: measured
    minus the part position relative to the board corner at (min x, max y),
    Y mirrored. The last such line wins.

    Lines that cannot be parsed or resolved are reported and skipped; the
    result always carries a configuration.
    """
    issues: List[Issue] = []
    config = PnPConfig()
    where = source or "<text>"
    board_frame = CoordinateTransform(board.dimension, ORIGIN)

    for lineno, raw in enumerate(content.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        tape_match = _TAPE_LOG_RE.match(line)
        board_match = None if tape_match else _BOARD_LOG_RE.match(line)
        if tape_match:
            slot = int(tape_match.group(1))
            key = tape_match.group(2)
            values = _floats(" ".join(tape_match.group(3, 4, 5)), 3)
        elif board_match:
            key = board_match.group(1)
            values = _floats(" ".join(board_match.group(2, 3, 4)), 3)
        else:
            values = None

        if values is None or (tape_match and slot < 1):
            report(issues, IssueKind.MALFORMED_LINE, "Couldn't parse line",
                   {"source": where, "line": lineno, "text": line})
            continue

        x, y, z = values
        if tape_match and slot == 1:
            tape = config.tape_for_key(key)
            if tape is not None:
                logger.debug("Line %d: new first position for %s", lineno, key)
                tape.set_first_position(x, y, z)
            else:
                tape = Tape(first_position=Position(x, y, z), name=key)
                config.bind(key, config.add_tape(tape))
        elif tape_match:
            tape = config.tape_for_key(key)
            if tape is None:
                report(issues, IssueKind.LOOKUP_FAILURE, "No tape1 entry before this slot",
                       {"source": where, "line": lineno, "key": key, "slot": slot})
                continue
            advance = slot - 1
            first = tape.first_position
            tape.set_spacing((x - first.x) / advance, (y - first.y) / advance)
        else:
            part = board.find(key)
            if part is None:
                report(issues, IssueKind.LOOKUP_FAILURE, "Trouble finding part on board",
                       {"source": where, "line": lineno, "designator": key})
                continue
            on_board = board_frame.to_machine(part.pos)
            config.board.origin = Position(x - on_board.x, y - on_board.y)

    logger.info("Calibration log: %d tape(s), board origin %s", len(config.tapes), config.board.origin)
    return ConfigParseResult(config, issues, source)


def load_tape_layout(path: Path | str) -> ConfigParseResult:
    """Read and parse a tape layout file."""
    path = _existing(path, "Tape layout file not found")
    return parse_tape_layout(path.read_text(), str(path))


def load_calibration_log(board: Board, path: Path | str) -> ConfigParseResult:
    """Read and parse a calibration log file."""
    path = _existing(path, "Calibration log not found")
    return parse_calibration_log(board, path.read_text(), str(path))


def component_counts(parts: Iterable[Part]) -> Counter:
    """Number of parts per ``footprint@value`` key."""
    return Counter(part.key for part in parts)


def generate_tape_template(board: Board) -> str:
    """
    Tape layout skeleton listing every component key of the board.

    Positions are left at zero for the operator to fill in.
    """
    counts = component_counts(board)
    lines = [
        "# Tape layout generated by rpt2pnp",
        "Board:",
        "origin: 100 100  # x/y of the board origin on the machine",
        "",
        "# One section per tape. Several keys on one 'Tape:' line share it.",
    ]
    for key in sorted(counts):
        lines.extend([
            "",
            f"Tape: {key}",
            f"count: {counts[key]}",
            "origin: 0 0 0   # x y z of the first component",
            "spacing: 4 0    # distance to the next component",
            "angle: 0",
        ])
    return "\n".join(lines) + "\n"


def _existing(path: Path | str, message: str) -> Path:
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(message, context={"file": str(path)})
    return path


def _floats(payload: str, expected: int) -> Optional[List[float]]:
    tokens = payload.split()
    if len(tokens) != expected:
        return None
    try:
        return [float(t) for t in tokens]
    except ValueError:
        return None


def _int(payload: str) -> Optional[int]:
    tokens = payload.split()
    if len(tokens) != 1:
        return None
    try:
        return int(tokens[0])
    except ValueError:
        return None
