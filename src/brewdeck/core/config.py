"""Configuration and path management for brewdeck."""

from pathlib import Path
from dataclasses import dataclass, fields, replace
import os

import yaml


class ConfigError(Exception):
    """Invalid configuration file."""

    pass


# Keys that may be overridden from config.yaml
TUNABLE_KEYS = (
    "brew_executable",
    "tick_interval",
    "poll_interval",
    "dedup_window",
    "stale_after",
    "blacklist_ttl",
    "status_capacity",
    "status_ttl",
)


@dataclass
class BrewdeckConfig:
    """Configuration for brewdeck."""

    base_dir: Path
    config_path: Path
    log_path: Path
    brew_executable: str = "brew"
    tick_interval: float = 0.1  # UI tick, seconds
    poll_interval: float = 0.1  # detail worker wake-up, seconds
    dedup_window: float = 1.0  # repeated detail requests suppressed, seconds
    stale_after: float = 30.0  # package list refresh period, seconds
    blacklist_ttl: float = 120.0  # removed packages stay hidden, seconds
    status_capacity: int = 5
    status_ttl: float = 10.0

    @classmethod
    def default(cls) -> "BrewdeckConfig":
        """Create config with default paths, applying config.yaml if present."""
        base = Path(os.environ.get("BREWDECK_HOME", Path.home() / ".brewdeck"))
        config = cls(
            base_dir=base,
            config_path=base / "config.yaml",
            log_path=base / "brewdeck.log",
        )
        return config.with_file(config.config_path)

    def with_file(self, path: Path) -> "BrewdeckConfig":
        """Return a copy with overrides from a YAML file."""
        if not path.exists():
            return self

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping")

        types = {f.name: f.type for f in fields(self)}
        overrides = {}
        for key in TUNABLE_KEYS:
            if key not in data:
                continue
            value = data[key]
            expected = types[key]
            if expected in ("float", float) and isinstance(value, (int, float)) and not isinstance(value, bool):
                overrides[key] = float(value)
            elif expected in ("int", int) and isinstance(value, int) and not isinstance(value, bool):
                overrides[key] = value
            elif expected in ("str", str) and isinstance(value, str):
                overrides[key] = value
            else:
                raise ConfigError(f"{path}: '{key}' has invalid value {value!r}")

        return replace(self, **overrides)

    def ensure_dirs(self) -> None:
        """Ensure all required directories exist."""
        self.base_dir.mkdir(parents=True, exist_ok=True)


# Global config instance
_config: BrewdeckConfig | None = None


def get_config() -> BrewdeckConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = BrewdeckConfig.default()
    return _config


def set_config(config: BrewdeckConfig | None) -> None:
    """Set a custom configuration (useful for testing)."""
    global _config
    _config = config
