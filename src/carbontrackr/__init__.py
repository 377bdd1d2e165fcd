"""CarbonTrackr - carbon footprint analytics.

CarbonTrackr turns logged carbon-emitting activities into:
- Dashboard aggregates by category
- Weekly summaries with reduction targets and personalized tips
- A leaderboard ranking users by lowest emissions

Usage:
    python -m carbontrackr --profile dev leaderboard
    python -m carbontrackr generate --user alice
"""

__version__ = "0.1.0"

from .analytics import CarbonAnalyticsService
from .config import CarbonConfig
from .config.loader import load_config

__all__ = [
    "CarbonAnalyticsService",
    "CarbonConfig",
    "__version__",
    "load_config",
]
