"""
Snowfall Configuration

An explicit configuration value handed to the overlay at construction.
Can be built in code, loaded from a JSON or YAML file, and adjusted from
environment variables.

Usage:
    from snowfall.config import SnowConfig, load_config

    config = load_config("snow.yaml").with_env_overrides(os.environ)
"""

import json
import logging
import math
from dataclasses import dataclass, fields, replace, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from .utils.error_handling import ConfigError

logger = logging.getLogger(__name__)

# Number of depth layers (background, middle, foreground)
LAYER_COUNT = 3

ENV_PREFIX = "SNOWFALL_"


class ConfigFormat(Enum):
    """Supported configuration file formats."""
    JSON = "json"
    YAML = "yaml"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ConfigFormat":
        suffix = Path(path).suffix.lower()
        if suffix == ".json":
            return cls.JSON
        if suffix in (".yaml", ".yml"):
            return cls.YAML
        raise ConfigError(f"Unsupported config file extension: {suffix or '(none)'}")


@dataclass(frozen=True)
class SnowConfig:
    """Tunable parameters of the snow overlay."""
    flakes_per_area: float = 4000.0          # Drawing-space area per flake
    min_count: int = 10                      # Floor so tiny viewports still show snow
    layer_distribution: Tuple[float, float, float] = (0.3, 0.4, 0.3)
    small_flake_threshold: float = 2.0       # Radius at or below this draws as a square
    winter_months: Tuple[int, ...] = (12, 1)  # 1-indexed: 12=Dec, 1=Jan
    debounce_ms: int = 100
    preference_key: str = "snowEnabled"
    edge_margin: float = 10.0                # Off-screen band for respawn and wrap

    def validate(self) -> "SnowConfig":
        """Raise ConfigError if any field is out of range. Returns self."""
        if not (self.flakes_per_area > 0) or math.isinf(self.flakes_per_area):
            raise ConfigError(f"flakes_per_area must be a positive number, got {self.flakes_per_area!r}")
        if self.min_count < 0:
            raise ConfigError(f"min_count must be >= 0, got {self.min_count}")
        if len(self.layer_distribution) != LAYER_COUNT:
            raise ConfigError(
                f"layer_distribution needs {LAYER_COUNT} entries, got {len(self.layer_distribution)}"
            )
        if any(r < 0 for r in self.layer_distribution):
            raise ConfigError("layer_distribution entries must be non-negative")
        if abs(sum(self.layer_distribution) - 1.0) > 1e-6:
            raise ConfigError(
                f"layer_distribution must sum to 1, got {sum(self.layer_distribution):.6f}"
            )
        for month in self.winter_months:
            if not 1 <= month <= 12:
                raise ConfigError(f"winter month out of range 1-12: {month}")
        if self.debounce_ms < 0:
            raise ConfigError(f"debounce_ms must be >= 0, got {self.debounce_ms}")
        if self.small_flake_threshold <= 0:
            raise ConfigError("small_flake_threshold must be positive")
        if self.edge_margin < 0:
            raise ConfigError("edge_margin must be >= 0")
        if not self.preference_key:
            raise ConfigError("preference_key must not be empty")
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SnowConfig":
        """Build a config from a flat mapping or one nested under 'snow'."""
        if not isinstance(data, Mapping):
            raise ConfigError(f"Config root must be a mapping, got {type(data).__name__}")
        if "snow" in data and isinstance(data["snow"], Mapping):
            merged = dict(data["snow"])
            # The resize section of the app config carries the debounce delay
            resize = data.get("resize")
            if isinstance(resize, Mapping) and "debounce_ms" in resize:
                merged.setdefault("debounce_ms", resize["debounce_ms"])
            data = merged

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

        kwargs: Dict[str, Any] = {}
        try:
            for key, value in data.items():
                if key == "winter_months":
                    value = tuple(int(m) for m in value)
                elif key == "layer_distribution":
                    value = tuple(float(r) for r in value)
                elif key in ("min_count", "debounce_ms"):
                    value = int(value)
                elif key in ("flakes_per_area", "small_flake_threshold", "edge_margin"):
                    value = float(value)
                elif key == "preference_key":
                    value = str(value)
                kwargs[key] = value
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config value: {e}") from e

        return cls(**kwargs).validate()

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["layer_distribution"] = list(self.layer_distribution)
        d["winter_months"] = list(self.winter_months)
        return d

    def with_env_overrides(self, environ: Mapping[str, str]) -> "SnowConfig":
        """Return a copy with SNOWFALL_* environment overrides applied."""
        changes: Dict[str, Any] = {}
        try:
            value = environ.get(ENV_PREFIX + "FLAKES_PER_AREA")
            if value:
                changes["flakes_per_area"] = float(value)
            value = environ.get(ENV_PREFIX + "MIN_COUNT")
            if value:
                changes["min_count"] = int(value)
            value = environ.get(ENV_PREFIX + "WINTER_MONTHS")
            if value:
                changes["winter_months"] = tuple(
                    int(m) for m in value.split(",") if m.strip()
                )
            value = environ.get(ENV_PREFIX + "DEBOUNCE_MS")
            if value:
                changes["debounce_ms"] = int(value)
        except ValueError as e:
            raise ConfigError(f"Invalid {ENV_PREFIX}* environment value: {e}") from e

        if not changes:
            return self
        logger.debug(f"Applying environment overrides: {sorted(changes)}")
        return replace(self, **changes).validate()


def load_config(path: Union[str, Path], format: Optional[ConfigFormat] = None) -> SnowConfig:
    """
    Load and validate a SnowConfig from a JSON or YAML file.

    Raises:
        ConfigError: if the file cannot be read or parsed, or fails validation
    """
    path = Path(path)
    fmt = format or ConfigFormat.from_path(path)

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        if fmt == ConfigFormat.JSON:
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse config file {path}: {e}") from e

    if data is None:
        data = {}

    config = SnowConfig.from_dict(data)
    logger.info(f"Loaded snow config from {path}")
    return config
