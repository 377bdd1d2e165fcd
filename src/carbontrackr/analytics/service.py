"""Caller-facing analytics operations.

Ties the calendar, aggregator, summary generator and leaderboard ranker
to a storage collaborator.
"""

import logging
from datetime import date
from typing import TYPE_CHECKING

from .aggregator import aggregate
from .calendar import (
    TimeWindow,
    comparison_window,
    current_week_start,
    is_current_week,
    is_future_week,
)
from .errors import InvalidWeekError, SummaryNotFoundError
from .leaderboard import LeaderboardRanker, leaderboard_stats
from .models import DashboardAggregates, LeaderboardEntry, LeaderboardStats, WeeklySummary
from .store import AnalyticsStore
from .summary import Clock, SummaryGenerator, utc_now
from .tips import TipSelector

if TYPE_CHECKING:
    from carbontrackr.config import CarbonConfig

logger = logging.getLogger(__name__)


class CarbonAnalyticsService:
    """Dashboard, weekly summary and leaderboard queries for one store."""

    def __init__(
        self,
        store: AnalyticsStore,
        tip_selector: TipSelector | None = None,
        ranker: LeaderboardRanker | None = None,
        leaderboard_window_days: int | None = None,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize analytics service.

        Args:
            store: Storage collaborator
            tip_selector: Tip rules for generated summaries
            ranker: Leaderboard ranker
            leaderboard_window_days: Default trailing window for the
                leaderboard. None ranks over all time.
            clock: Source of the current time
        """
        self._store = store
        self._clock = clock
        self._generator = SummaryGenerator(store, tip_selector, clock)
        self._ranker = ranker or LeaderboardRanker()
        self._leaderboard_window_days = leaderboard_window_days

    @classmethod
    def from_config(
        cls, config: "CarbonConfig", store: AnalyticsStore, clock: Clock = utc_now
    ) -> "CarbonAnalyticsService":
        """Create a service using the tip and leaderboard settings of a config."""
        tip_selector = TipSelector(
            threshold=config.tips.dominance_threshold,
            positive_messages=config.tips.positive_messages,
            corrective_messages=config.tips.corrective_messages,
        )
        return cls(
            store,
            tip_selector=tip_selector,
            leaderboard_window_days=config.leaderboard.window_days,
            clock=clock,
        )

    def get_dashboard_aggregates(
        self, user_id: str, window: TimeWindow | None = None
    ) -> DashboardAggregates:
        """Category totals and averages for a user, all time by default."""
        activities = self._store.fetch_activities(user_id, window)
        totals = aggregate(activities, user_id, window)
        return DashboardAggregates(
            user_id=user_id,
            category_totals=totals,
            grand_total=totals.grand_total,
            activity_count=totals.activity_count,
            average_per_activity=totals.average_per_activity,
            top_category=totals.highest(),
        )

    def get_current_week_view(self, user_id: str) -> WeeklySummary:
        """Live projection of the current week. Never stored."""
        now = self._clock()
        start = current_week_start(now)
        activities = self._store.fetch_activities(user_id, comparison_window(start))
        target = self._store.fetch_reduction_target(user_id)
        return self._generator.build_projection(
            user_id, start, activities, target, generated_at=now, live=True
        )

    def get_summary(self, user_id: str, week_start: date) -> WeeklySummary:
        """Stored summary for a week.

        Raises:
            SummaryNotFoundError: If the week was never generated.
        """
        summary = self._store.fetch_summary(user_id, week_start)
        if summary is None:
            raise SummaryNotFoundError(user_id, week_start)
        return summary

    def get_week_view(self, user_id: str, week_start: date) -> WeeklySummary:
        """Read any week: live for the current one, stored for past ones.

        Raises:
            InvalidWeekError: If the week is in the future.
            SummaryNotFoundError: If a past week was never generated.
        """
        now = self._clock()
        if is_future_week(week_start, now):
            raise InvalidWeekError(week_start)
        if is_current_week(week_start, now):
            return self.get_current_week_view(user_id)
        return self.get_summary(user_id, week_start)

    def list_summaries(self, user_id: str) -> list[WeeklySummary]:
        """Stored summaries for a user, newest week first."""
        return self._store.fetch_summaries(user_id)

    def generate_previous_week_summary(self, user_id: str) -> WeeklySummary:
        """Generate and store the summary of last week.

        Raises:
            SummaryAlreadyExistsError: If last week was already summarized.
            NoActivitiesError: If last week had no activities.
        """
        return self._generator.generate_previous_week(user_id)

    def get_leaderboard(
        self, window: TimeWindow | None = None, limit: int | None = None
    ) -> list[LeaderboardEntry]:
        """Rank every user by emissions, lowest first."""
        window = window or self._default_leaderboard_window()
        users = self._store.fetch_users()
        activities = self._store.fetch_all_activities(window)
        entries = self._ranker.rank(users, activities, window, limit)
        logger.debug("Ranked %d users", len(entries))
        return entries

    def get_leaderboard_stats(self, window: TimeWindow | None = None) -> LeaderboardStats:
        """Participant count, activity count and average emissions."""
        return leaderboard_stats(self.get_leaderboard(window))

    def _default_leaderboard_window(self) -> TimeWindow | None:
        if self._leaderboard_window_days is None:
            return None
        return TimeWindow.last_days(self._leaderboard_window_days, self._clock())


__all__ = ["CarbonAnalyticsService"]
