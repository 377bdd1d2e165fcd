"""Error types for carbon analytics.

All of these are expected business outcomes that callers can recover from.
Storage failures are not wrapped and reach the caller unchanged.
"""

from datetime import date


class CarbonAnalyticsError(Exception):
    """Base exception for analytics outcomes."""

    pass


class InvalidWeekError(CarbonAnalyticsError):
    """Raised when a week start is in the future or is not a Monday."""

    def __init__(self, week_start: date | str, reason: str = "week is in the future") -> None:
        """Initialize invalid week error.

        Args:
            week_start: The offending week start.
            reason: Why the week was rejected.
        """
        super().__init__(f"Invalid week {week_start}: {reason}")
        self.week_start = week_start
        self.reason = reason


class SummaryAlreadyExistsError(CarbonAnalyticsError):
    """Raised when a summary is already stored for the user and week."""

    def __init__(self, user_id: str, week_start: date) -> None:
        super().__init__(f"Summary already exists for user {user_id}, week {week_start}")
        self.user_id = user_id
        self.week_start = week_start


class NoActivitiesError(CarbonAnalyticsError):
    """Raised when there is nothing to summarize for the week."""

    def __init__(self, user_id: str, week_start: date) -> None:
        super().__init__(f"No activities found for user {user_id}, week {week_start}")
        self.user_id = user_id
        self.week_start = week_start


class SummaryNotFoundError(CarbonAnalyticsError):
    """Raised when no summary was ever generated for a past week."""

    def __init__(self, user_id: str, week_start: date) -> None:
        super().__init__(f"Summary not found for user {user_id}, week {week_start}")
        self.user_id = user_id
        self.week_start = week_start


__all__ = [
    "CarbonAnalyticsError",
    "InvalidWeekError",
    "NoActivitiesError",
    "SummaryAlreadyExistsError",
    "SummaryNotFoundError",
]
