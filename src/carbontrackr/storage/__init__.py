"""Storage module for CarbonTrackr.

Provides MongoDB persistence for activities, users, reduction targets and
weekly summaries, plus an in-memory store with the same interface.
"""

from .client import MongoStorageClient, retry_on_connection_failure
from .memory import InMemoryAnalyticsStore
from .repositories import (
    ActivityRepository,
    MongoAnalyticsStore,
    ReductionTargetRepository,
    UserRepository,
    WeeklySummaryRepository,
)

__all__ = [
    "ActivityRepository",
    "InMemoryAnalyticsStore",
    "MongoAnalyticsStore",
    "MongoStorageClient",
    "ReductionTargetRepository",
    "UserRepository",
    "WeeklySummaryRepository",
    "retry_on_connection_failure",
]
