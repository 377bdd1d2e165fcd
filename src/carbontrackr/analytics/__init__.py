"""Carbon analytics engine.

Provides week bucketing, category aggregation, reduction target scoring,
personalized tips, weekly summaries and the emissions leaderboard.
"""

from .aggregator import aggregate, aggregate_by_user
from .calendar import (
    TimeWindow,
    is_current_week,
    parse_week_start,
    previous_week,
    week_end,
    week_start,
    week_window,
)
from .errors import (
    CarbonAnalyticsError,
    InvalidWeekError,
    NoActivitiesError,
    SummaryAlreadyExistsError,
    SummaryNotFoundError,
)
from .leaderboard import LeaderboardRanker, leaderboard_stats
from .models import (
    Activity,
    Category,
    CategoryExtreme,
    CategoryTotals,
    DashboardAggregates,
    LeaderboardEntry,
    LeaderboardStats,
    PersonalizedTip,
    ReductionProgress,
    ReductionTarget,
    TargetType,
    TipType,
    UserRecord,
    WeeklySummary,
)
from .service import CarbonAnalyticsService
from .store import AnalyticsStore
from .summary import SummaryGenerator
from .targets import score_reduction
from .tips import TipSelector

__all__ = [
    "Activity",
    "AnalyticsStore",
    "CarbonAnalyticsError",
    "CarbonAnalyticsService",
    "Category",
    "CategoryExtreme",
    "CategoryTotals",
    "DashboardAggregates",
    "InvalidWeekError",
    "LeaderboardEntry",
    "LeaderboardRanker",
    "LeaderboardStats",
    "NoActivitiesError",
    "PersonalizedTip",
    "ReductionProgress",
    "ReductionTarget",
    "SummaryAlreadyExistsError",
    "SummaryGenerator",
    "SummaryNotFoundError",
    "TargetType",
    "TimeWindow",
    "TipSelector",
    "TipType",
    "UserRecord",
    "WeeklySummary",
    "aggregate",
    "aggregate_by_user",
    "is_current_week",
    "leaderboard_stats",
    "parse_week_start",
    "previous_week",
    "score_reduction",
    "week_end",
    "week_start",
    "week_window",
]
