"""YAML configuration loader with inheritance support.

Supports:
- Loading YAML config files
- Config inheritance via 'extends' key
- Deep merging of nested config
- Environment override of the MongoDB URI
"""

import os
from pathlib import Path
from typing import Any

import yaml

from . import CarbonConfig, LeaderboardConfig, LoggingConfig, StorageConfig, TipsConfig

MONGODB_URI_ENV = "CARBONTRACKR_MONGODB_URI"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Values from override take precedence. Nested dicts are merged recursively.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_with_inheritance(path: Path) -> dict[str, Any]:
    """Load YAML file with inheritance support.

    If the file contains an 'extends' key, the base config is loaded first
    and merged with the current config.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        config = yaml.safe_load(f) or {}

    # Handle inheritance
    if "extends" in config:
        base_name = config.pop("extends")
        base_path = path.parent / base_name
        base_config = load_yaml_with_inheritance(base_path)
        config = deep_merge(base_config, config)

    return config


def dict_to_config(data: dict[str, Any]) -> CarbonConfig:
    """Convert raw dict to typed CarbonConfig dataclass."""
    root = data.get("carbontrackr", {}) or {}

    # Helper to safely get dict values (handles None from YAML)
    def safe_get(key: str) -> dict[str, Any]:
        value = root.get(key, {})
        return value if value is not None else {}

    return CarbonConfig(
        storage=StorageConfig(**safe_get("storage")),
        tips=_parse_tips_config(safe_get("tips")),
        leaderboard=LeaderboardConfig(**safe_get("leaderboard")),
        logging=LoggingConfig(**safe_get("logging")),
    )


def _parse_tips_config(data: dict[str, Any]) -> TipsConfig:
    """Parse tips config, handling empty message maps."""
    return TipsConfig(
        dominance_threshold=float(data.get("dominance_threshold", 0.5)),
        positive_messages=data.get("positive_messages") or {},
        corrective_messages=data.get("corrective_messages") or {},
    )


def apply_env_overrides(config: CarbonConfig) -> CarbonConfig:
    """Apply environment variable overrides to a loaded config."""
    uri = os.environ.get(MONGODB_URI_ENV)
    if uri:
        config.storage.uri = uri
    return config


class YAMLConfigLoader:
    """YAML configuration loader implementation."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize loader with optional config directory.

        Args:
            config_dir: Directory containing config files.
                        Defaults to 'config' relative to project root.
        """
        if config_dir is None:
            # Default to config/ in project root
            config_dir = Path(__file__).parent.parent.parent.parent / "config"
        self._config_dir = config_dir

    def load(self, path: Path) -> CarbonConfig:
        """Load configuration from file path.

        Args:
            path: Path to YAML config file

        Returns:
            Parsed CarbonConfig
        """
        raw_config = load_yaml_with_inheritance(path)
        return apply_env_overrides(dict_to_config(raw_config))

    def load_profile(self, profile: str) -> CarbonConfig:
        """Load configuration by profile name.

        Args:
            profile: Profile name (e.g., 'dev', 'prod')

        Returns:
            Parsed CarbonConfig for the profile
        """
        config_path = self._config_dir / f"{profile}.yaml"
        return self.load(config_path)

    def get_config_dir(self) -> Path:
        """Get the configuration directory path."""
        return self._config_dir


# Convenience function
def load_config(path: str | Path | None = None, profile: str | None = None) -> CarbonConfig:
    """Load CarbonTrackr configuration.

    Args:
        path: Direct path to config file (takes precedence)
        profile: Profile name ('dev', 'prod', 'test') if path not given

    Returns:
        Parsed CarbonConfig

    Examples:
        >>> config = load_config(profile="dev")
        >>> config = load_config(path="/path/to/config.yaml")
    """
    loader = YAMLConfigLoader()

    if path is not None:
        return loader.load(Path(path))
    elif profile is not None:
        return loader.load_profile(profile)
    else:
        # Default to dev profile
        return loader.load_profile("dev")


__all__ = [
    "MONGODB_URI_ENV",
    "YAMLConfigLoader",
    "apply_env_overrides",
    "deep_merge",
    "dict_to_config",
    "load_config",
    "load_yaml_with_inheritance",
]
