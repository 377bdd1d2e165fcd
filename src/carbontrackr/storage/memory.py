"""In-memory analytics store.

Keeps activities, users, targets and summaries in process. Used for the
test profile and for running the engine without a database.
"""

import dataclasses
import logging
import threading
import uuid
from datetime import date

from carbontrackr.analytics.calendar import TimeWindow
from carbontrackr.analytics.errors import SummaryAlreadyExistsError
from carbontrackr.analytics.models import (
    Activity,
    ReductionTarget,
    UserRecord,
    WeeklySummary,
)

logger = logging.getLogger(__name__)


class InMemoryAnalyticsStore:
    """Thread-safe store implementing the AnalyticsStore protocol.

    A single lock guards every mutation, so the summary existence check and
    insert happen as one step.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._activities: dict[str, Activity] = {}
        self._users: dict[str, UserRecord] = {}
        self._targets: dict[str, ReductionTarget] = {}
        self._summaries: dict[tuple[str, date], WeeklySummary] = {}

    def save_activity(self, activity: Activity) -> Activity:
        """Store a new activity and return it with its ID."""
        stored = dataclasses.replace(activity, id=activity.id or uuid.uuid4().hex)
        with self._lock:
            self._activities[stored.id] = stored
        return stored

    def delete_activity(self, activity_id: str, user_id: str) -> bool:
        """Delete one of a user's activities. Returns True if removed."""
        with self._lock:
            activity = self._activities.get(activity_id)
            if activity is None or activity.user_id != user_id:
                return False
            del self._activities[activity_id]
            return True

    def save_user(self, user: UserRecord) -> None:
        with self._lock:
            self._users[user.user_id] = user

    def set_reduction_target(self, target: ReductionTarget) -> None:
        with self._lock:
            self._targets[target.user_id] = target

    def fetch_activities(
        self, user_id: str, window: TimeWindow | None = None
    ) -> list[Activity]:
        with self._lock:
            activities = list(self._activities.values())
        return [
            a
            for a in activities
            if a.user_id == user_id and (window is None or window.contains(a.occurred_at))
        ]

    def fetch_all_activities(self, window: TimeWindow | None = None) -> list[Activity]:
        with self._lock:
            activities = list(self._activities.values())
        return [a for a in activities if window is None or window.contains(a.occurred_at)]

    def fetch_reduction_target(self, user_id: str) -> ReductionTarget | None:
        with self._lock:
            return self._targets.get(user_id)

    def fetch_summary(self, user_id: str, week_start: date) -> WeeklySummary | None:
        with self._lock:
            return self._summaries.get((user_id, week_start))

    def fetch_summaries(self, user_id: str) -> list[WeeklySummary]:
        with self._lock:
            owned = [s for (owner, _), s in self._summaries.items() if owner == user_id]
        return sorted(owned, key=lambda s: s.week_start, reverse=True)

    def store_summary(self, summary: WeeklySummary) -> WeeklySummary:
        """Store a summary unless one exists for the same user and week.

        Raises:
            SummaryAlreadyExistsError: If the key is already taken.
        """
        key = (summary.user_id, summary.week_start)
        stored = dataclasses.replace(summary, id=uuid.uuid4().hex)
        with self._lock:
            if key in self._summaries:
                raise SummaryAlreadyExistsError(summary.user_id, summary.week_start)
            self._summaries[key] = stored
        logger.debug("Stored summary for user %s, week %s", *key)
        return stored

    def fetch_users(self) -> list[UserRecord]:
        with self._lock:
            return list(self._users.values())


__all__ = ["InMemoryAnalyticsStore"]
