"""Configuration manager for scssgraph using TOML files."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List

import toml

from .config import BASE_DIR, CONFIG_FILE, DEFAULT_ANALYSIS

logger = logging.getLogger(__name__)


@dataclass
class AnalysisSettings:
    """Tunable thresholds used by the impact analyzer and import resolver."""
    load_paths: List[str] = field(default_factory=list)
    risk_low_max: int = DEFAULT_ANALYSIS["risk_low_max"]
    risk_medium_max: int = DEFAULT_ANALYSIS["risk_medium_max"]
    component_max_files: int = DEFAULT_ANALYSIS["component_max_files"]
    typography_threshold: int = DEFAULT_ANALYSIS["typography_threshold"]
    layout_threshold: int = DEFAULT_ANALYSIS["layout_threshold"]
    log_level: str = DEFAULT_ANALYSIS["log_level"]

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ValueError if the risk thresholds overlap."""
        if self.risk_low_max > self.risk_medium_max:
            raise ValueError(
                f"risk_low_max ({self.risk_low_max}) must not exceed risk_medium_max ({self.risk_medium_max})"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisSettings":
        """Build settings from a config section, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown [analysis] keys: %s", ", ".join(unknown))
        return cls(**{k: coerce_setting(k, v) for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def coerce_setting(key: str, value: Any) -> Any:
    """Convert a raw value (possibly a CLI string) to the type *key* expects.

    Raises:
        KeyError: If *key* is not a known setting
        ValueError: If *value* cannot be converted
    """
    default = DEFAULT_ANALYSIS[key]
    if isinstance(default, list):
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return [str(part) for part in value]
    if isinstance(default, int):
        return int(value)
    return str(value)


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Could not read %s, using defaults: %s", CONFIG_FILE, exc)
        return {}


def _save_full_config(config: Dict[str, Any]) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    BASE_DIR.mkdir(parents=True, exist_ok=True)
    try:
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            toml.dump(config, f)
        return True
    except OSError as exc:
        logger.warning("Could not write %s: %s", CONFIG_FILE, exc)
        return False


def load_settings() -> AnalysisSettings:
    """Load the ``[analysis]`` section, falling back to defaults."""
    section = load_full_config().get("analysis", {})
    if not isinstance(section, dict):
        logger.warning("[analysis] in %s is not a table, using defaults", CONFIG_FILE)
        return AnalysisSettings()
    try:
        return AnalysisSettings.from_dict(section)
    except (TypeError, ValueError) as exc:
        logger.warning("Invalid [analysis] settings, using defaults: %s", exc)
        return AnalysisSettings()


def save_settings(settings: AnalysisSettings) -> bool:
    """Save analysis settings, preserving other sections in the file."""
    config = load_full_config()
    config["analysis"] = settings.to_dict()
    return _save_full_config(config)


def set_setting(key: str, value: Any) -> AnalysisSettings:
    """Update one setting and persist it.

    Raises:
        KeyError: If *key* is not a known setting
        ValueError: If *value* cannot be converted or leaves the risk
            thresholds inconsistent
    """
    if key not in DEFAULT_ANALYSIS:
        raise KeyError(key)
    settings = load_settings()
    setattr(settings, key, coerce_setting(key, value))
    settings.validate()
    save_settings(settings)
    return settings
