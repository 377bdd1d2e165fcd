"""Weekly summary generation.

Builds WeeklySummary records from a week of activities and stores them
at most once per user and week.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, date, datetime

from .aggregator import aggregate
from .calendar import (
    comparison_window,
    current_week_start,
    is_future_week,
    previous_week,
    week_end,
    week_window,
)
from .errors import InvalidWeekError, NoActivitiesError, SummaryAlreadyExistsError
from .models import Activity, ReductionTarget, WeeklySummary
from .store import AnalyticsStore
from .targets import score_reduction
from .tips import TipSelector

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class SummaryGenerator:
    """Generates weekly emission summaries.

    A (user, week) pair moves from absent to generated exactly once. There
    is no regenerate: a second attempt raises SummaryAlreadyExistsError.
    """

    def __init__(
        self,
        store: AnalyticsStore,
        tip_selector: TipSelector | None = None,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize summary generator.

        Args:
            store: Storage collaborator for activities, targets and summaries
            tip_selector: Tip selection rules. Defaults to built-in messages.
            clock: Source of the current time
        """
        self._store = store
        self._tip_selector = tip_selector or TipSelector()
        self._clock = clock

    def generate(self, user_id: str, target_week_start: date) -> WeeklySummary:
        """Generate and store the summary for one week.

        Args:
            user_id: Owner of the summary
            target_week_start: Monday of the week to summarize

        Returns:
            The stored WeeklySummary

        Raises:
            InvalidWeekError: If the week is in the future or not a Monday.
            SummaryAlreadyExistsError: If the week was already summarized.
            NoActivitiesError: If the week has no activities.
        """
        now = self._clock()
        if target_week_start.weekday() != 0:
            raise InvalidWeekError(target_week_start, reason="week start must be a Monday")
        if is_future_week(target_week_start, now):
            raise InvalidWeekError(target_week_start)

        if self._store.fetch_summary(user_id, target_week_start) is not None:
            logger.warning(
                "Summary for user %s, week %s already exists", user_id, target_week_start
            )
            raise SummaryAlreadyExistsError(user_id, target_week_start)

        activities = self._store.fetch_activities(user_id, comparison_window(target_week_start))

        current = aggregate(activities, user_id, week_window(target_week_start))
        if current.activity_count == 0:
            raise NoActivitiesError(user_id, target_week_start)

        target = self._store.fetch_reduction_target(user_id)
        summary = self.build_projection(
            user_id, target_week_start, activities, target, generated_at=now
        )

        stored = self._store.store_summary(summary)
        logger.info(
            "Generated summary for user %s, week %s: %.2f kg over %d activities",
            user_id,
            target_week_start,
            stored.total_emissions,
            stored.activities_count,
        )
        return stored

    def generate_previous_week(self, user_id: str) -> WeeklySummary:
        """Generate the summary for the week before the current one."""
        return self.generate(user_id, previous_week(current_week_start(self._clock())))

    def build_projection(
        self,
        user_id: str,
        target_week_start: date,
        activities: Iterable[Activity],
        target: ReductionTarget | None,
        generated_at: datetime | None = None,
        live: bool = False,
    ) -> WeeklySummary:
        """Compute a summary without storing it.

        Args:
            user_id: Owner of the summary
            target_week_start: Monday of the summarized week
            activities: Activities covering at least this week and the one
                before; anything else is filtered out
            target: The user's reduction target, if any
            generated_at: Timestamp to record. Defaults to now.
            live: Mark the result as a live projection

        Returns:
            A WeeklySummary for the week
        """
        activities = list(activities)
        current = aggregate(activities, user_id, week_window(target_week_start))
        previous = aggregate(activities, user_id, week_window(previous_week(target_week_start)))

        previous_total = previous.grand_total if previous.activity_count > 0 else None
        progress = score_reduction(target, current.grand_total, previous_total)

        return WeeklySummary(
            user_id=user_id,
            week_start=target_week_start,
            week_end=week_end(target_week_start),
            total_emissions=current.grand_total,
            activities_count=current.activity_count,
            category_totals=current,
            highest_category=current.highest(),
            lowest_category=current.lowest(),
            reduction_target=progress,
            personalized_tip=self._tip_selector.select(current),
            generated_at=generated_at or self._clock(),
            is_live=live,
        )


__all__ = ["Clock", "SummaryGenerator", "utc_now"]
