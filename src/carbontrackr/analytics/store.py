"""Storage collaborator protocol consumed by the analytics engine."""

from datetime import date
from typing import Protocol

from .calendar import TimeWindow
from .models import (
    Activity,
    ReductionTarget,
    UserRecord,
    WeeklySummary,
)


class AnalyticsStore(Protocol):
    """Protocol for reading activities and persisting weekly summaries.

    Implementations must make store_summary atomic per (user_id, week_start):
    concurrent stores for the same key leave exactly one summary and raise
    SummaryAlreadyExistsError for every other caller.
    """

    def fetch_activities(
        self, user_id: str, window: TimeWindow | None = None
    ) -> list[Activity]:
        """Get a user's activities, optionally limited to a window."""
        ...

    def fetch_all_activities(self, window: TimeWindow | None = None) -> list[Activity]:
        """Get every user's activities, optionally limited to a window."""
        ...

    def fetch_reduction_target(self, user_id: str) -> ReductionTarget | None:
        """Get the user's active reduction target."""
        ...

    def fetch_summary(self, user_id: str, week_start: date) -> WeeklySummary | None:
        """Get the stored summary for a user and week."""
        ...

    def fetch_summaries(self, user_id: str) -> list[WeeklySummary]:
        """Get all stored summaries for a user, newest week first."""
        ...

    def store_summary(self, summary: WeeklySummary) -> WeeklySummary:
        """Persist a new summary and return it with its ID.

        Raises:
            SummaryAlreadyExistsError: If a summary exists for the key.
        """
        ...

    def fetch_users(self) -> list[UserRecord]:
        """Get identity records for every user."""
        ...


__all__ = ["AnalyticsStore"]
