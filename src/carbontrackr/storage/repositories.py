"""MongoDB repositories for activities, users, targets and summaries.

Also provides MongoAnalyticsStore, the adapter that lets the analytics
engine read from and write to these repositories.
"""

import dataclasses
import logging
from datetime import date
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from carbontrackr.analytics.calendar import TimeWindow
from carbontrackr.analytics.errors import SummaryAlreadyExistsError
from carbontrackr.analytics.models import (
    Activity,
    ReductionTarget,
    UserRecord,
    WeeklySummary,
    date_to_datetime,
)

from .client import MongoStorageClient, retry_on_connection_failure

logger = logging.getLogger(__name__)


def _window_filter(window: TimeWindow | None) -> dict[str, Any]:
    if window is None:
        return {}
    return {"occurred_at": {"$gte": window.start, "$lt": window.end}}


class ActivityRepository:
    """Repository for emission activities."""

    def __init__(self, collection: Collection[dict[str, Any]]) -> None:
        """Initialize repository with MongoDB collection.

        Args:
            collection: MongoDB collection for activities.
        """
        self._collection = collection
        self._ensure_indexes()

    def _ensure_indexes(self) -> None:
        """Create indexes for efficient queries."""
        self._collection.create_index([("occurred_at", DESCENDING)])
        self._collection.create_index([("user_id", 1), ("occurred_at", DESCENDING)])
        self._collection.create_index([("category", 1), ("occurred_at", DESCENDING)])

    def save(self, activity: Activity) -> str:
        """Save an activity and return its ID.

        The ID is assigned before the insert so a retried write cannot store a second copy.
        """
        doc = activity.to_dict()
        doc["_id"] = ObjectId()
        self._insert(doc)
        return str(doc["_id"])

    @retry_on_connection_failure()
    def _insert(self, doc: dict[str, Any]) -> None:
        try:
            self._collection.insert_one(doc)
        except DuplicateKeyError:
            # An earlier attempt was applied before the connection dropped
            logger.debug("Activity %s already stored", doc["_id"])

    @retry_on_connection_failure()
    def delete(self, activity_id: str, user_id: str) -> bool:
        """Delete one of a user's activities.

        Returns:
            True if deleted, False if not found or not owned by the user.
        """
        try:
            object_id = ObjectId(activity_id)
        except InvalidId:
            return False

        result = self._collection.delete_one({"_id": object_id, "user_id": user_id})
        return result.deleted_count > 0

    @retry_on_connection_failure()
    def find_for_user(self, user_id: str, window: TimeWindow | None = None) -> list[Activity]:
        """Get a user's activities, most recent first."""
        cursor = self._collection.find({"user_id": user_id, **_window_filter(window)}).sort(
            "occurred_at", DESCENDING
        )
        return [Activity.from_dict(doc) for doc in cursor]

    @retry_on_connection_failure()
    def find_all(self, window: TimeWindow | None = None) -> list[Activity]:
        """Get every user's activities."""
        cursor = self._collection.find(_window_filter(window))
        return [Activity.from_dict(doc) for doc in cursor]


class UserRepository:
    """Repository for user identity records."""

    def __init__(self, collection: Collection[dict[str, Any]]) -> None:
        self._collection = collection
        self._ensure_indexes()

    def _ensure_indexes(self) -> None:
        self._collection.create_index("user_id", unique=True)
        self._collection.create_index([("created_at", ASCENDING)])

    @retry_on_connection_failure()
    def save(self, user: UserRecord) -> None:
        """Insert or replace a user record."""
        self._collection.replace_one({"user_id": user.user_id}, user.to_dict(), upsert=True)

    @retry_on_connection_failure()
    def find_all(self) -> list[UserRecord]:
        """Get every user, oldest account first."""
        cursor = self._collection.find().sort("created_at", ASCENDING)
        return [UserRecord.from_dict(doc) for doc in cursor]


class ReductionTargetRepository:
    """Repository for reduction targets. One active target per user."""

    def __init__(self, collection: Collection[dict[str, Any]]) -> None:
        self._collection = collection
        self._ensure_indexes()

    def _ensure_indexes(self) -> None:
        self._collection.create_index("user_id", unique=True)

    @retry_on_connection_failure()
    def set(self, target: ReductionTarget) -> None:
        """Create or replace the user's target."""
        self._collection.replace_one({"user_id": target.user_id}, target.to_dict(), upsert=True)

    @retry_on_connection_failure()
    def get(self, user_id: str) -> ReductionTarget | None:
        """Get the user's target, if configured."""
        doc = self._collection.find_one({"user_id": user_id})
        if doc is None:
            return None
        return ReductionTarget.from_dict(doc)

    @retry_on_connection_failure()
    def clear(self, user_id: str) -> bool:
        """Remove the user's target. Returns True if one existed."""
        result = self._collection.delete_one({"user_id": user_id})
        return result.deleted_count > 0


class WeeklySummaryRepository:
    """Repository for generated weekly summaries.

    A unique index on (user_id, week_start) makes insert the atomic
    check-and-store for summary generation.
    """

    def __init__(self, collection: Collection[dict[str, Any]]) -> None:
        self._collection = collection
        self._ensure_indexes()

    def _ensure_indexes(self) -> None:
        self._collection.create_index(
            [("user_id", ASCENDING), ("week_start", ASCENDING)],
            unique=True,
            name="user_week_unique",
        )

    def insert(self, summary: WeeklySummary) -> WeeklySummary:
        """Insert a new summary.

        Not retried on connection failure.

        Raises:
            SummaryAlreadyExistsError: If the (user, week) key is taken.
        """
        try:
            result = self._collection.insert_one(summary.to_dict())
        except DuplicateKeyError as e:
            raise SummaryAlreadyExistsError(summary.user_id, summary.week_start) from e
        return dataclasses.replace(summary, id=str(result.inserted_id))

    @retry_on_connection_failure()
    def get(self, user_id: str, week_start: date) -> WeeklySummary | None:
        """Get the summary for a user and week."""
        doc = self._collection.find_one(
            {"user_id": user_id, "week_start": date_to_datetime(week_start)}
        )
        if doc is None:
            return None
        return WeeklySummary.from_dict(doc)

    @retry_on_connection_failure()
    def find_for_user(self, user_id: str) -> list[WeeklySummary]:
        """Get a user's summaries, newest week first."""
        cursor = self._collection.find({"user_id": user_id}).sort("week_start", DESCENDING)
        return [WeeklySummary.from_dict(doc) for doc in cursor]


class MongoAnalyticsStore:
    """Adapter exposing MongoDB repositories as an analytics store.

    Implements the AnalyticsStore protocol expected by SummaryGenerator
    and CarbonAnalyticsService.
    """

    def __init__(self, client: MongoStorageClient) -> None:
        """Initialize with a connected storage client.

        Args:
            client: The MongoStorageClient to read repositories from.
        """
        self._client = client

    def fetch_activities(
        self, user_id: str, window: TimeWindow | None = None
    ) -> list[Activity]:
        return self._client.activities.find_for_user(user_id, window)

    def fetch_all_activities(self, window: TimeWindow | None = None) -> list[Activity]:
        return self._client.activities.find_all(window)

    def fetch_reduction_target(self, user_id: str) -> ReductionTarget | None:
        return self._client.reduction_targets.get(user_id)

    def fetch_summary(self, user_id: str, week_start: date) -> WeeklySummary | None:
        return self._client.weekly_summaries.get(user_id, week_start)

    def fetch_summaries(self, user_id: str) -> list[WeeklySummary]:
        return self._client.weekly_summaries.find_for_user(user_id)

    def store_summary(self, summary: WeeklySummary) -> WeeklySummary:
        return self._client.weekly_summaries.insert(summary)

    def fetch_users(self) -> list[UserRecord]:
        return self._client.users.find_all()

    def save_activity(self, activity: Activity) -> Activity:
        """Persist a new activity and return it with its ID."""
        activity_id = self._client.activities.save(activity)
        logger.debug("Saved activity %s for user %s", activity_id, activity.user_id)
        return dataclasses.replace(activity, id=activity_id)

    def delete_activity(self, activity_id: str, user_id: str) -> bool:
        return self._client.activities.delete(activity_id, user_id)

    def save_user(self, user: UserRecord) -> None:
        self._client.users.save(user)

    def set_reduction_target(self, target: ReductionTarget) -> None:
        self._client.reduction_targets.set(target)


__all__ = [
    "ActivityRepository",
    "MongoAnalyticsStore",
    "ReductionTargetRepository",
    "UserRepository",
    "WeeklySummaryRepository",
]
