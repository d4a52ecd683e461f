"""Pytest fixtures for rpt2pnp tests."""

import pytest
from pathlib import Path

from rpt2pnp.board import Board, Part
from rpt2pnp.geometry import Position
from rpt2pnp.report import parse_report

# Four parts on a 30 x 20 mm board. Report Y grows downwards (negative up).
#   C1 0805@100n (100, -100)   C2 0805@100n (130, -100)
#   R1 0805@10k  (100,  -80)   U1 SOIC-8@ATtiny85 (130, -80)
SAMPLE_REPORT = """\
## Footprint report - date Sat 14 Jun 2014 10:12:00 AM PDT
## Created by Pcbnew version (2014-06-10 BZR 4935)-product
## Unit = mm, Angle = deg.

$BeginDESCRIPTION
$BOARD
upper_left_corner 99.000000 -101.000000
lower_right_corner 131.000000 -79.000000
$EndBOARD
$EndDESCRIPTION

$MODULE "C1"
reference "C1"
value "100n"
footprint "C_0805"
attribut smd
position 100.000000 -100.000000  orientation 90.00
layer front
$PAD "1"
position -0.950000 0.000000
size 1.000000 1.200000
shape rect
$EndPAD
$PAD "2"
position 0.950000 0.000000
size 1.000000 1.200000
shape rect
$EndPAD
$EndMODULE  C1

$MODULE "C2"
reference "C2"
value "100n"
footprint "C_0805"
attribut smd
position 130.000000 -100.000000  orientation 0.00
layer front
$EndMODULE  C2

$MODULE "R1"
reference "R1"
value "10k"
footprint "C_0805"
attribut smd
position 100.000000 -80.000000  orientation 180.00
layer front
$EndMODULE  R1

$MODULE "U1"
reference "U1"
value "ATtiny85"
footprint "SOIC-8"
attribut smd
position 130.000000 -80.000000  orientation 0.00
layer front
$EndMODULE  U1
$EndDESCRIPTION
"""

SAMPLE_TAPE_LAYOUT = """\
# Two tapes; the 0805 reel carries both capacitor and resistor values
Board:
origin: 5 6

Tape: C_0805@100n C_0805@10k
origin: 10 20 2
spacing: 4 0
angle: 90
count: 10

Tape: SOIC-8@ATtiny85
origin: 50 20 3
spacing: 0 12
count: 1
"""

SAMPLE_CALIBRATION_LOG = """\
tape1:C_0805@100n 10 20 2
tape3:C_0805@100n 18 20 2
tape1:U1 50 20 3
board:C1 15 30 1.6
this is not a log line
board:X99 1 2 3
tape2:NOPE 1 2 3
"""


@pytest.fixture
def report_text() -> str:
    return SAMPLE_REPORT


@pytest.fixture
def report_file(tmp_path: Path) -> Path:
    path = tmp_path / "board.rpt"
    path.write_text(SAMPLE_REPORT)
    return path


@pytest.fixture
def board() -> Board:
    return Board(parse_report(SAMPLE_REPORT))


@pytest.fixture
def tape_layout_text() -> str:
    return SAMPLE_TAPE_LAYOUT


@pytest.fixture
def tape_layout_file(tmp_path: Path) -> Path:
    path = tmp_path / "tapes.cfg"
    path.write_text(SAMPLE_TAPE_LAYOUT)
    return path


@pytest.fixture
def calibration_log_text() -> str:
    return SAMPLE_CALIBRATION_LOG


@pytest.fixture
def calibration_log_file(tmp_path: Path) -> Path:
    path = tmp_path / "jog.log"
    path.write_text(SAMPLE_CALIBRATION_LOG)
    return path


def _make_part(name: str, x: float, y: float, footprint: str = "R_0603", value: str = "1k",
               angle: float = 0.0) -> Part:
    return Part(component_name=name, footprint=footprint, value=value, pos=Position(x, y), angle=angle)


@pytest.fixture
def make_part():
    """Factory for a part at report position (x, y)."""
    return _make_part
