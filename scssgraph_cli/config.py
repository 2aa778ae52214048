"""Configuration paths and defaults for scssgraph."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("SCSSGRAPH_HOME", str(Path.home() / ".scssgraph"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

# [analysis] section defaults; every key may be overridden in config.toml
DEFAULT_ANALYSIS = {
    "load_paths": [],
    "risk_low_max": 5,
    "risk_medium_max": 20,
    "component_max_files": 5,
    "typography_threshold": 3,
    "layout_threshold": 2,
    "log_level": "WARNING",
}
