"""Tests for the feeder registry, tape layouts and calibration logs."""

import pytest

from rpt2pnp.board import Board
from rpt2pnp.exceptions import ConfigurationError, FileNotFoundError
from rpt2pnp.geometry import Position
from rpt2pnp.issues import IssueKind
from rpt2pnp.pnp_config import (
    PnPConfig,
    component_counts,
    generate_tape_template,
    load_calibration_log,
    load_tape_layout,
    parse_calibration_log,
    parse_tape_layout,
)
from rpt2pnp.tape import Tape


class TestPnPConfig:
    def test_shared_tape_draws_from_one_cursor(self, make_part):
        config = PnPConfig()
        idx = config.add_tape(Tape(first_position=Position(0, 0, 0), spacing=Position(4, 0)))
        config.bind("R_0603@A", idx)
        config.bind("R_0603@B", idx)

        a = make_part("R1", 0, 0, value="A")
        b = make_part("R2", 0, 0, value="B")
        picks = [config.tape_for(p).next_position() for p in (a, b, a)]
        assert [p.index for p in picks] == [0, 1, 2]
        assert config.tape_for(a) is config.tape_for(b)

    def test_designator_wins_over_footprint_value(self, make_part):
        config = PnPConfig()
        generic = config.add_tape(Tape(name="generic"))
        special = config.add_tape(Tape(name="special"))
        config.bind("R_0603@1k", generic)
        config.bind("R5", special)
        assert config.tape_for(make_part("R5", 0, 0)).name == "special"
        assert config.tape_for(make_part("R6", 0, 0)).name == "generic"

    def test_unknown_part(self, make_part):
        assert PnPConfig().tape_for(make_part("R1", 0, 0)) is None

    def test_bind_to_missing_tape(self):
        with pytest.raises(IndexError):
            PnPConfig().bind("X", 0)

    def test_keys_for(self):
        config = PnPConfig()
        tape = Tape()
        idx = config.add_tape(tape)
        config.bind("a", idx)
        config.bind("b", idx)
        assert config.keys_for(tape) == ["a", "b"]


class TestParseTapeLayout:
    def test_sample(self, tape_layout_text):
        result = parse_tape_layout(tape_layout_text)
        assert result.ok
        config = result.config
        assert config.board.origin == Position(5, 6)
        assert len(config.tapes) == 2

        reel = config.tape_for_key("C_0805@10k")
        assert reel is config.tape_for_key("C_0805@100n")
        assert reel.first_position == Position(10, 20, 2)
        assert reel.spacing == Position(4, 0)
        assert reel.angle == 90
        assert reel.count == 10
        assert reel.name == "C_0805@100n"

        assert config.tape_for_key("SOIC-8@ATtiny85").count == 1

    @pytest.mark.parametrize(
        "content",
        [
            "Tape: X\nspacing: 0 0\n",
            "Tape: X\nspacing: 4\n",
            "Tape: X\norigin: 1 two 3\n",
            "Tape: X\ncount: -1\n",
            "Tape: X\ncount: 2.5\n",
            "Tape:\n",
            "spacing: 4 0\n",
            "Board:\norigin: 1 2 3\n",
        ],
    )
    def test_invalid_configuration(self, content):
        result = parse_tape_layout(content, "bad.cfg")
        assert not result.ok
        assert len(result.issues) == 1
        assert result.issues[0].kind == IssueKind.CONFIGURATION
        assert result.issues[0].context["source"] == "bad.cfg"

    def test_unwrap_failure(self):
        result = parse_tape_layout("Tape: X\nspacing: 0 0\n", "bad.cfg")
        with pytest.raises(ConfigurationError) as exc_info:
            result.unwrap()
        assert exc_info.value.context["source"] == "bad.cfg"

    def test_unknown_directive_ignored(self):
        result = parse_tape_layout("Tape: X\nfeeder-speed: 3\nspacing: 2 0\n")
        assert result.ok
        assert result.config.tape_for_key("X").spacing == Position(2, 0)

    def test_comments(self):
        result = parse_tape_layout("# Board:\nTape: X  # 0402 reel\norigin: 1 2 3 # first\n")
        assert result.config.board.origin is None
        assert result.config.tape_for_key("X").first_position == Position(1, 2, 3)

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_tape_layout(tmp_path / "nope.cfg")

    def test_load_file(self, tape_layout_file):
        result = load_tape_layout(tape_layout_file)
        assert result.ok
        assert result.source == str(tape_layout_file)


class TestParseCalibrationLog:
    def test_spacing_from_slots(self, board, calibration_log_text):
        config = parse_calibration_log(board, calibration_log_text).config
        tape = config.tape_for_key("C_0805@100n")
        assert tape.first_position == Position(10, 20, 2)
        assert tape.spacing == Position(4, 0)

    def test_designator_tape(self, board, calibration_log_text):
        config = parse_calibration_log(board, calibration_log_text).config
        assert config.tape_for(board.find("U1")).first_position == Position(50, 20, 3)

    def test_board_origin(self, board, calibration_log_text):
        """The reference part maps onto the position measured for it."""
        config = parse_calibration_log(board, calibration_log_text).config
        assert config.board.origin == Position(15, 10)
        board.origin = config.board.origin
        assert board.transform().to_machine(board.find("C1").pos) == Position(15, 30)

    def test_reference_part_lands_on_measurement(self, make_part):
        board = Board([make_part("A", 0, 0), make_part("B", 10, 0), make_part("C", 10, 10)])
        config = parse_calibration_log(board, "board:C 110 80 1.6\n").config
        board.origin = config.board.origin
        transform = board.transform()
        assert transform.to_machine(board.find("C").pos) == Position(110, 80)
        assert transform.to_machine(board.find("A").pos) == Position(100, 90)

    def test_last_board_line_wins(self, board):
        log = "board:C1 15 30 0\nboard:U1 50 20 0\n"
        board.origin = parse_calibration_log(board, log).config.board.origin
        assert board.transform().to_machine(board.find("U1").pos) == Position(50, 20)
        assert board.transform().to_machine(board.find("C1").pos) != Position(15, 30)

    def test_repeated_first_slot_reuses_tape(self, board):
        log = "tape1:C_0805@100n 1 1 1\ntape1:C_0805@100n 10 20 2\ntape2:C_0805@100n 14 20 2\n"
        config = parse_calibration_log(board, log).config
        assert len(config.tapes) == 1
        tape = config.tape_for_key("C_0805@100n")
        assert tape.first_position == Position(10, 20, 2)
        assert tape.spacing == Position(4, 0)

    def test_skipped_lines_are_reported(self, board, calibration_log_text):
        result = parse_calibration_log(board, calibration_log_text, "jog.log")
        assert result.ok
        kinds = [issue.kind for issue in result.issues]
        assert kinds == [IssueKind.MALFORMED_LINE, IssueKind.LOOKUP_FAILURE, IssueKind.LOOKUP_FAILURE]
        assert result.issues[0].context["line"] == 5
        assert result.issues[1].context["designator"] == "X99"
        assert result.issues[2].context["key"] == "NOPE"

    def test_slot_zero_is_malformed(self, board):
        result = parse_calibration_log(board, "tape0:X 1 2 3\n")
        assert result.issues[0].kind == IssueKind.MALFORMED_LINE
        assert result.config.tapes == []

    def test_load_file(self, board, calibration_log_file):
        result = load_calibration_log(board, calibration_log_file)
        assert result.config.board.origin == Position(15, 10)


class TestTemplate:
    def test_component_counts(self, board):
        assert component_counts(board) == {"C_0805@100n": 2, "C_0805@10k": 1, "SOIC-8@ATtiny85": 1}

    def test_template_round_trips_through_parser(self, board):
        text = generate_tape_template(board)
        assert "Tape: C_0805@100n\ncount: 2\n" in text
        config = parse_tape_layout(text).unwrap()
        assert len(config.tapes) == 3
        for part in board:
            assert config.tape_for(part) is not None
