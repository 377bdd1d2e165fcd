"""Configuration module for CarbonTrackr.

This module provides configuration loading and profile management.
"""

from dataclasses import dataclass, field


@dataclass
class StorageConfig:
    """Storage backend configuration."""

    backend: str = "mongodb"  # "mongodb" or "memory"
    uri: str = "mongodb://localhost:27017"
    database: str = "carbontrackr"
    max_pool_size: int = 50
    min_pool_size: int = 10
    connect_timeout_ms: int = 5000
    server_selection_timeout_ms: int = 5000


@dataclass
class TipsConfig:
    """Personalized tip configuration.

    Message maps are keyed by category name (e.g., "Transport") and
    override the built-in text for that category only.
    """

    dominance_threshold: float = 0.5
    positive_messages: dict[str, str] = field(default_factory=dict)
    corrective_messages: dict[str, str] = field(default_factory=dict)


@dataclass
class LeaderboardConfig:
    """Leaderboard configuration."""

    window_days: int | None = None  # None ranks over all time
    limit: int | None = None


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"


@dataclass
class CarbonConfig:
    """Main CarbonTrackr configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    tips: TipsConfig = field(default_factory=TipsConfig)
    leaderboard: LeaderboardConfig = field(default_factory=LeaderboardConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Public API
__all__ = [
    "CarbonConfig",
    "LeaderboardConfig",
    "LoggingConfig",
    "StorageConfig",
    "TipsConfig",
]
