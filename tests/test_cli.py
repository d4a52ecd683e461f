"""Tests for the rpt2pnp command line."""

import pytest

from rpt2pnp.cli import main
from rpt2pnp.cli.utils import format_error, print_error
from rpt2pnp.exceptions import BoardError


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run every command in an empty project without a user config."""
    (tmp_path / ".git").mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("rpt2pnp.config.USER_CONFIG_PATH", tmp_path / "no-exist.toml")


def _designators(listing: str) -> list:
    return [line.split("\t")[0] for line in listing.splitlines()[2:]]


class TestCLIMain:
    """Tests for argument handling."""

    def test_missing_report_shows_usage(self, capsys):
        """Without a report file the usage goes to stderr."""
        assert main([]) == 1
        captured = capsys.readouterr()
        assert "usage" in captured.err
        assert captured.out == ""

    def test_report_not_found(self, capsys):
        assert main(["nonexistent.rpt"]) == 1
        captured = capsys.readouterr()
        assert "not found" in captured.err
        assert "usage" in captured.err

    def test_version_flag(self, capsys):
        """Test --version flag."""
        from rpt2pnp import __version__

        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_unknown_flag(self, report_file):
        with pytest.raises(SystemExit) as exc_info:
            main(["-x", str(report_file)])
        # argparse exits with error for unknown options
        assert exc_info.value.code == 2

    def test_tapes_and_log_are_exclusive(self, report_file, tape_layout_file, calibration_log_file):
        with pytest.raises(SystemExit) as exc_info:
            main(["-P", "-t", str(tape_layout_file), "-L", str(calibration_log_file), str(report_file)])
        assert exc_info.value.code == 2

    def test_two_modes_are_exclusive(self, report_file):
        with pytest.raises(SystemExit) as exc_info:
            main(["-c", "-l", str(report_file)])
        assert exc_info.value.code == 2


class TestDispenseMode:
    """Tests for the default dispensing output."""

    def test_default_output(self, report_file, capsys):
        assert main([str(report_file)]) == 0
        captured = capsys.readouterr()
        assert captured.out.startswith("; rpt2pnp -d 50.00 -D 25.00\n")
        assert captured.out.rstrip().endswith(";done")
        assert "Found 3 distinct components, 4 parts total" in captured.err
        assert "Dispensed 4 parts. Total dispense time: 0.3s" in captured.err

    def test_timing_flags(self, report_file, capsys):
        assert main(["-d", "60", "-D", "20", str(report_file)]) == 0
        out = capsys.readouterr().out
        assert out.startswith("; rpt2pnp -d 60.00 -D 20.00\n")
        assert "G4 P108" in out

    def test_project_config(self, tmp_path, report_file, capsys):
        """Settings from .rpt2pnp.toml apply when no flag overrides them."""
        (tmp_path / ".rpt2pnp.toml").write_text("[dispense]\ninit_ms = 70\nz_hover = 3\n")
        assert main([str(report_file)]) == 0
        out = capsys.readouterr().out
        assert out.startswith("; rpt2pnp -d 70.00 -D 25.00\n")
        assert "Z3.000 ; comp=" in out

    def test_invalid_project_config(self, tmp_path, report_file, capsys):
        (tmp_path / ".rpt2pnp.toml").write_text('[optimize]\nstart = "middle"\n')
        assert main([str(report_file)]) == 1
        assert "Error" in capsys.readouterr().err


class TestPickAndPlaceMode:
    """Tests for -P."""

    def test_requires_configuration(self, report_file, capsys):
        assert main(["-P", str(report_file)]) == 1
        captured = capsys.readouterr()
        assert "Error" in captured.err
        assert captured.out == ""

    def test_with_tape_layout(self, report_file, tape_layout_file, capsys):
        assert main(["-P", "-t", str(tape_layout_file), str(report_file)]) == 0
        captured = capsys.readouterr()
        assert "; R1 10k (C_0805) slot 0" in captured.out
        assert "M7 ; vacuum on" in captured.out
        assert "Emitted 4 parts" in captured.err

    def test_with_calibration_log(self, report_file, calibration_log_file, capsys):
        """Unusable log lines are reported; the remaining ones still configure the run."""
        assert main(["-P", "-L", str(calibration_log_file), str(report_file)]) == 0
        captured = capsys.readouterr()
        assert "3 calibration line(s) skipped" in captured.err
        assert "slot 0" in captured.out

    def test_invalid_tape_layout(self, tmp_path, report_file, capsys):
        layout = tmp_path / "bad.cfg"
        layout.write_text("Tape: C_0805@100n\nspacing: 0 0\n")
        assert main(["-P", "-t", str(layout), str(report_file)]) == 1
        assert "No usable pick-and-place configuration" in capsys.readouterr().err

    def test_missing_tape_reported(self, tmp_path, report_file, capsys):
        layout = tmp_path / "partial.cfg"
        layout.write_text("Tape: C_0805@100n C_0805@10k\norigin: 0 0 0\nspacing: 4 0\n")
        assert main(["-P", "-t", str(layout), str(report_file)]) == 0
        captured = capsys.readouterr()
        assert "Emitted 3 parts" in captured.err
        assert "1 issue(s)" in captured.err
        assert "U1" in captured.err


class TestOtherModes:
    """Tests for template, listing, corners and PostScript output."""

    def test_template(self, report_file, capsys):
        assert main(["-T", str(report_file)]) == 0
        out = capsys.readouterr().out
        assert "Tape: C_0805@100n\ncount: 2\n" in out
        assert "Tape: SOIC-8@ATtiny85" in out

    def test_listing(self, report_file, capsys):
        assert main(["-l", str(report_file)]) == 0
        assert _designators(capsys.readouterr().out) == ["R1", "C1", "C2", "U1"]

    def test_listing_without_optimization(self, report_file, capsys):
        assert main(["-l", "--no-optimize", str(report_file)]) == 0
        assert _designators(capsys.readouterr().out) == ["C1", "C2", "R1", "U1"]

    def test_listing_start_at_first_part(self, report_file, capsys):
        assert main(["-l", "--start", "first", str(report_file)]) == 0
        assert _designators(capsys.readouterr().out)[0] == "C1"

    def test_listing_with_tapes(self, report_file, tape_layout_file, capsys):
        assert main(["-l", "-t", str(tape_layout_file), str(report_file)]) == 0
        row = capsys.readouterr().out.splitlines()[2].split("\t")
        assert row[0] == "R1"
        assert row[1:3] == ["5.000", "6.000"]
        assert row[6:] == ["10.000", "20.000", "2.000"]

    def test_corners(self, report_file, capsys):
        assert main(["-c", str(report_file)]) == 0
        out = capsys.readouterr().out
        assert out.count("G4 P2000") == 4

    def test_postscript(self, report_file, tape_layout_file, capsys):
        assert main(["-p", "-t", str(tape_layout_file), str(report_file)]) == 0
        out = capsys.readouterr().out
        assert out.startswith("%!PS-Adobe-3.0")
        assert "tape-marker" in out


class TestFormatError:
    def test_package_error_keeps_context(self):
        text = format_error(BoardError("Board has no parts", context={"file": "empty.rpt"}))
        assert text.startswith("Error: Board has no parts")
        assert "empty.rpt" in text

    def test_foreign_error_names_type(self):
        assert format_error(ValueError("bad")) == "Error: ValueError: bad"

    def test_plain_output_without_terminal(self, capsys):
        print_error(ValueError("bad"), use_rich=False)
        assert capsys.readouterr().err == "Error: ValueError: bad\n"
