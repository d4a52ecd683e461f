"""
Configuration file support for rpt2pnp.

Provides hierarchical settings loading from:
1. Project config: .rpt2pnp.toml or rpt2pnp.toml in the project directory
2. User config: ~/.config/rpt2pnp/config.toml

CLI arguments override config file values, and project config overrides user config.
These are machine settings (heights, timings, offsets); tape layouts live in
their own files, see :mod:`rpt2pnp.pnp_config`.
"""

import sys
import warnings
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

# Config file names to search for in project directories
CONFIG_FILENAMES = [".rpt2pnp.toml", "rpt2pnp.toml"]

# User-level config path
USER_CONFIG_PATH = Path.home() / ".config" / "rpt2pnp" / "config.toml"


@dataclass
class BoardConfig:
    """Placement of the board on the machine bed."""

    offset_x: float = 10.0
    offset_y: float = 10.0


@dataclass
class DispenseConfig:
    """Solder paste dispensing settings."""

    init_ms: float = 50.0
    area_ms: float = 25.0  # per mm^2 of pad area
    z_dispense: float = 1.7
    z_hover: float = 2.5
    z_high: float = 5.0


@dataclass
class PnPMachineConfig:
    """Pick-and-place head settings."""

    z_travel: float = 10.0
    z_place: float = 1.6
    feed_rate: float = 8000.0
    vacuum_on: str = "M7"
    vacuum_off: str = "M9"
    dwell_ms: float = 300.0


@dataclass
class OptimizeConfig:
    """Travel optimization settings."""

    enabled: bool = True
    start: str = "home"  # "home" or "first"
    home_x: float = 0.0
    home_y: float = 0.0


# Section name to dataclass attribute on Config
SECTIONS = {
    "board": "board",
    "dispense": "dispense",
    "pnp": "pnp",
    "optimize": "optimize",
}

START_CHOICES = ("home", "first")


@dataclass
class Config:
    """Merged configuration from all sources."""

    board: BoardConfig = field(default_factory=BoardConfig)
    dispense: DispenseConfig = field(default_factory=DispenseConfig)
    pnp: PnPMachineConfig = field(default_factory=PnPMachineConfig)
    optimize: OptimizeConfig = field(default_factory=OptimizeConfig)

    # Track which file each setting came from
    _sources: dict = field(default_factory=dict, repr=False)

    @classmethod
    def load(cls, start_dir: Path | None = None) -> "Config":
        """
        Load configuration with precedence: project > user > defaults.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Merged configuration object

        Raises:
            ConfigError: If a config file is unreadable or has invalid values
        """
        if start_dir is None:
            start_dir = Path.cwd()

        config = cls()
        sources: dict[str, str] = {}

        if USER_CONFIG_PATH.exists():
            _merge_config(config, _load_toml_file(USER_CONFIG_PATH), str(USER_CONFIG_PATH), sources)

        project_config = _find_project_config(start_dir)
        if project_config:
            _merge_config(config, _load_toml_file(project_config), str(project_config), sources)

        config._sources = sources
        return config

    def get_source(self, key: str) -> str:
        """Get the source file for a config key, e.g. ``dispense.init_ms``."""
        return self._sources.get(key, "default")


class ConfigError(Exception):
    """Configuration-related errors."""

    pass


def _find_project_config(start_dir: Path) -> Path | None:
    """
    Find project config by walking up the directory tree.

    Stops at .git directory or filesystem root.
    """
    current = start_dir.resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        if (current / ".git").exists():
            break

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _load_toml_file(path: Path) -> dict[str, Any]:
    """
    Load a TOML file.

    Raises:
        ConfigError: If TOML is invalid or the file is unreadable
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e


def _merge_config(
    config: Config, data: dict[str, Any], source: str, sources: dict[str, str]
) -> None:
    """Merge loaded TOML data into ``config``, recording where each key came from."""
    for key in data:
        if key not in SECTIONS:
            warnings.warn(f"Unknown config key '{key}' in {source}", stacklevel=3)

    for section, attr in SECTIONS.items():
        if section not in data:
            continue
        section_data = data[section]
        target = getattr(config, attr)
        known = {f.name: f for f in fields(target)}
        _warn_unknown_keys(section_data, set(known), section, source)

        for key, value in section_data.items():
            if key not in known:
                continue
            setattr(target, key, _coerce(value, getattr(target, key), f"{section}.{key}", source))
            sources[f"{section}.{key}"] = source

    if config.optimize.start not in START_CHOICES:
        raise ConfigError(
            f"Invalid optimize.start '{config.optimize.start}' in {source}; "
            f"expected one of {', '.join(START_CHOICES)}"
        )


def _coerce(value: Any, default: Any, key: str, source: str) -> Any:
    """Check ``value`` against the type of the default; ints are accepted for floats."""
    if isinstance(default, bool):
        ok = isinstance(value, bool)
    elif isinstance(default, float):
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        if ok:
            value = float(value)
    else:
        ok = isinstance(value, type(default))
    if not ok:
        raise ConfigError(
            f"Invalid value for '{key}' in {source}: expected {type(default).__name__}, got {value!r}"
        )
    return value


def _warn_unknown_keys(data: dict[str, Any], known: set[str], section: str, source: str) -> None:
    """Warn about unknown keys in a config section."""
    for key in data:
        if key not in known:
            warnings.warn(f"Unknown config key '{section}.{key}' in {source}", stacklevel=4)


def generate_template() -> str:
    """
    Generate a template config file with all options documented.

    Returns:
        Template TOML string
    """
    return """# rpt2pnp configuration file
# Place as .rpt2pnp.toml in the project directory or ~/.config/rpt2pnp/config.toml

[board]
# Machine position of the board's smallest X / largest report Y, in mm.
# Ignored when a tape layout or calibration log provides a board origin.
# offset_x = 10.0
# offset_y = 10.0

[dispense]
# Dispense time per part: init_ms + area_ms * pad area (mm^2)
# init_ms = 50.0
# area_ms = 25.0

# Heights in mm
# z_dispense = 1.7
# z_hover = 2.5
# z_high = 5.0

[pnp]
# Safe travel height and placement height in mm
# z_travel = 10.0
# z_place = 1.6
# feed_rate = 8000.0

# Commands switching the vacuum
# vacuum_on = "M7"
# vacuum_off = "M9"

# Pause after switching the vacuum
# dwell_ms = 300.0

[optimize]
# Reorder parts to shorten travel
# enabled = true

# Start of the tour: "home" (home_x/home_y) or "first" (first listed part)
# start = "home"
# home_x = 0.0
# home_y = 0.0
"""


def get_config_paths() -> dict[str, Path | None]:
    """
    Get paths to config files that would be loaded.

    Returns:
        Dict with 'user' and 'project' keys
    """
    project_config = _find_project_config(Path.cwd())

    return {
        "user": USER_CONFIG_PATH if USER_CONFIG_PATH.exists() else None,
        "project": project_config,
    }
