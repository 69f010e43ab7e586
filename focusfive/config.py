"""
Configuration for FocusFive.

Config is a value type passed explicitly to every persistence call; there is
no process-wide mutable configuration.

Usage:
    from focusfive.config import load_config
    config = load_config()
    write_goals_file(goals, config)
"""
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from focusfive.exceptions import SerializationFailure
from focusfive.paths import get_data_dir

CONFIG_FILENAME = "config.yaml"


@dataclass(frozen=True)
class Limits:
    """
    Structural limits of the daily-goals format.

    Changing these breaks compatibility with files written by other
    installations; they are grouped here so tests and callers share them.
    """

    MAX_ACTION_LENGTH: int = 500
    MAX_GOAL_LENGTH: int = 100
    MAX_VISION_LENGTH: int = 1000

    # Actions per outcome
    MIN_ACTIONS: int = 1
    DEFAULT_ACTIONS: int = 3
    MAX_ACTIONS: int = 5

    MAX_TEMPLATE_ACTIONS: int = 5

    # Envelope version written to every JSON document
    SCHEMA_VERSION: int = 1

    # Upper bound for streak lookback (days)
    MAX_STREAK_DAYS: int = 365


LIMITS = Limits()


@dataclass(frozen=True)
class Config:
    """Locations of the goals directory and the sidecar data root."""

    goals_dir: Path
    data_root: Path
    logs_dir: Optional[Path] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "goals_dir", Path(self.goals_dir).expanduser().absolute())
        object.__setattr__(self, "data_root", Path(self.data_root).expanduser().absolute())
        if self.logs_dir is None:
            object.__setattr__(self, "logs_dir", self.data_root / "logs")

    @classmethod
    def default(cls) -> "Config":
        """Build the default configuration; never raises when HOME is unset."""
        data_root = get_data_dir()
        return cls(goals_dir=data_root / "goals", data_root=data_root)

    @classmethod
    def for_root(cls, root: Path) -> "Config":
        """Place every artifact under a single root (used by tests and the CLI)."""
        root = Path(root)
        return cls(goals_dir=root / "goals", data_root=root)

    @property
    def meta_dir(self) -> Path:
        return self.data_root / "meta"

    @property
    def reviews_dir(self) -> Path:
        return self.data_root / "reviews"

    @property
    def objectives_path(self) -> Path:
        return self.data_root / "objectives.json"

    @property
    def indicators_path(self) -> Path:
        return self.data_root / "indicators.json"

    @property
    def observations_path(self) -> Path:
        return self.data_root / "observations.ndjson"

    @property
    def vision_path(self) -> Path:
        return self.data_root / "vision.json"

    @property
    def templates_path(self) -> Path:
        return self.data_root / "templates.json"


def _load_overrides(path: Path) -> Dict[str, Any]:
    """Load YAML overrides if the file exists."""
    if not path.exists():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise SerializationFailure(f"Failed to parse config file: {e}", str(path)) from e

    if not isinstance(data, dict):
        raise SerializationFailure("Config file must contain a mapping", str(path))
    return data


def load_config(path: Optional[Path] = None) -> Config:
    """
    Load the configuration.

    Priority: config.yaml > FOCUSFIVE_DATA_DIR > HOME defaults.

    Args:
        path: explicit config file; defaults to <data_root>/config.yaml

    Returns:
        Resolved Config
    """
    base = Config.default()
    overrides = _load_overrides(Path(path) if path else base.data_root / CONFIG_FILENAME)

    changes = {}
    for key in ("goals_dir", "data_root", "logs_dir"):
        value = overrides.get(key)
        if value:
            changes[key] = Path(str(value))

    if "data_root" in changes and "goals_dir" not in changes:
        changes["goals_dir"] = changes["data_root"] / "goals"
    if "data_root" in changes and "logs_dir" not in changes:
        changes["logs_dir"] = None

    return replace(base, **changes) if changes else base
