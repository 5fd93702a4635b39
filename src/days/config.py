"""Configuration loading for days.

Settings come from, in order of precedence:
1. An explicit --config path (.toml or .json)
2. config.toml or config.json in the data directory
3. Built-in defaults
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

# Python 3.11+ has tomllib in stdlib; fall back to tomli for older versions
try:
    import tomllib  # Python 3.11+
except ImportError:
    try:
        import tomli as tomllib  # Python <3.11
    except ImportError:  # pragma: no cover
        tomllib = None

DATA_DIR_ENV = "DAYS_HOME"


def default_data_dir() -> Path:
    """Get the data directory.

    Uses ~/.days by default.
    Can be overridden with the DAYS_HOME environment variable.
    """
    custom_dir = os.environ.get(DATA_DIR_ENV)
    if custom_dir:
        return Path(custom_dir)
    return Path.home() / ".days"


@dataclass
class DisplayConfig:
    """Presentation settings for life progress output."""
    progress_width: int = 50
    grid_width: int = 90
    grid_margin: int = 8
    filled_glyph: str = "#"
    empty_glyph: str = "="
    passed_glyph: str = "*"
    future_glyph: str = "o"

    @property
    def grid_columns(self) -> int:
        """Cells per grid row."""
        return max(1, self.grid_width - self.grid_margin)


@dataclass
class DaysConfig:
    """Configuration for the tracker and journal stores."""

    data_dir: Path = field(default_factory=default_data_dir)

    # Store files (relative to data_dir)
    tracker_file: str = "track.json"
    journal_file: str = "journal.json"

    # Seconds to wait for another days command to release a store
    lock_timeout: float = 10.0

    display: DisplayConfig = field(default_factory=DisplayConfig)

    def get_tracker_path(self) -> Path:
        return self.data_dir / self.tracker_file

    def get_journal_path(self) -> Path:
        return self.data_dir / self.journal_file


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from TOML file."""
    if tomllib is None:
        raise ImportError("tomli required for TOML config: pip install tomli")
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def dict_to_config(data: dict[str, Any], data_dir: Path) -> DaysConfig:
    """Convert dictionary to DaysConfig."""
    config = DaysConfig(data_dir=data_dir)

    if not isinstance(data, dict):
        raise ValueError("Configuration must be a table of sections")

    if "storage" in data:
        storage = data["storage"]
        if not isinstance(storage, dict):
            raise ValueError("[storage] must be a table")
        if "tracker_file" in storage:
            config.tracker_file = storage["tracker_file"]
        if "journal_file" in storage:
            config.journal_file = storage["journal_file"]
        if "lock_timeout" in storage:
            config.lock_timeout = float(storage["lock_timeout"])

    if "display" in data:
        disp = data["display"]
        if not isinstance(disp, dict):
            raise ValueError("[display] must be a table")
        for name in ("progress_width", "grid_width", "grid_margin"):
            if name in disp:
                value = int(disp[name])
                if value < 0:
                    raise ValueError(f"display.{name} must not be negative")
                setattr(config.display, name, value)
        for name in ("filled_glyph", "empty_glyph", "passed_glyph", "future_glyph"):
            if name in disp:
                setattr(config.display, name, str(disp[name]))

    return config


def find_config_file(data_dir: Path) -> Optional[Path]:
    """Find configuration file in the data directory.

    Search order:
    1. config.toml
    2. config.json
    """
    for name in ("config.toml", "config.json"):
        path = data_dir / name
        if path.exists():
            return path

    return None


def load_config(data_dir: Optional[Path] = None, config_path: Optional[Path] = None) -> DaysConfig:
    """Load configuration.

    Args:
        data_dir: Directory holding the store files (default: DAYS_HOME or ~/.days)
        config_path: Optional explicit path to config file

    Returns:
        DaysConfig instance
    """
    if data_dir is None:
        data_dir = default_data_dir()

    if config_path is None:
        config_path = find_config_file(data_dir)

    if config_path is None:
        return DaysConfig(data_dir=data_dir)

    suffix = config_path.suffix.lower()

    if suffix == ".toml":
        return dict_to_config(load_toml_config(config_path), data_dir)

    elif suffix == ".json":
        return dict_to_config(load_json_config(config_path), data_dir)

    else:
        raise ValueError(f"Unsupported config file type: {suffix}")
