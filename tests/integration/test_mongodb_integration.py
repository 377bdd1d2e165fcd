"""Integration tests for MongoDB storage.

Tests require a MongoDB server on localhost:27017 and are skipped otherwise.
"""

import threading
from datetime import UTC, date, datetime

import pytest

from carbontrackr.analytics import CarbonAnalyticsService
from carbontrackr.analytics.errors import SummaryAlreadyExistsError
from carbontrackr.analytics.models import (
    Activity,
    Category,
    ReductionTarget,
    TargetType,
    UserRecord,
)
from carbontrackr.storage.client import MongoStorageClient
from carbontrackr.storage.repositories import MongoAnalyticsStore

NOW = datetime(2024, 1, 17, 12, 0, tzinfo=UTC)
LAST_WEEK = date(2024, 1, 8)


@pytest.fixture
def mongo_client() -> MongoStorageClient:
    """Create a MongoDB client for testing.

    Uses a test database that is dropped after each test.
    """
    client = MongoStorageClient(
        uri="mongodb://localhost:27017",
        database_name="carbontrackr_test",
        connect_timeout_ms=2000,
        server_selection_timeout_ms=2000,
    )
    try:
        client.connect()
    except Exception as e:
        pytest.skip(f"MongoDB not available: {e}")

    yield client

    if client.is_connected():
        client.database.client.drop_database("carbontrackr_test")
    client.disconnect()


@pytest.fixture
def store(mongo_client: MongoStorageClient) -> MongoAnalyticsStore:
    return MongoAnalyticsStore(mongo_client)


@pytest.mark.integration
class TestMongoDBConnection:
    """Integration tests for MongoDB connection."""

    def test_reconnect_after_disconnect(self, mongo_client: MongoStorageClient) -> None:
        mongo_client.disconnect()
        assert not mongo_client.is_connected()

        mongo_client.connect()
        assert mongo_client.is_connected()


@pytest.mark.integration
class TestActivityStorage:
    """Integration tests for activity persistence."""

    def test_save_fetch_delete(self, store: MongoAnalyticsStore) -> None:
        saved = store.save_activity(
            Activity("alice", Category.FOOD, "Burger", 3.5, datetime(2024, 1, 9, tzinfo=UTC))
        )

        fetched = store.fetch_activities("alice")
        assert [a.id for a in fetched] == [saved.id]
        assert fetched[0].occurred_at == datetime(2024, 1, 9, tzinfo=UTC)

        assert store.delete_activity(saved.id, "bob") is False
        assert store.delete_activity(saved.id, "alice") is True
        assert store.fetch_activities("alice") == []


@pytest.mark.integration
class TestSummaryStorage:
    """Integration tests for weekly summary generation against MongoDB."""

    @pytest.fixture
    def service(self, store: MongoAnalyticsStore) -> CarbonAnalyticsService:
        store.save_user(UserRecord("alice", "alice", "Alice", datetime(2023, 1, 1, tzinfo=UTC)))
        store.set_reduction_target(ReductionTarget("alice", TargetType.ABSOLUTE_KG, 5))
        for value, day in [(20.0, 3), (12.0, 10)]:
            occurred_at = datetime(2024, 1, day, tzinfo=UTC)
            store.save_activity(
                Activity("alice", Category.TRANSPORT, "Drive", value, occurred_at)
            )
        return CarbonAnalyticsService(store, clock=lambda: NOW)

    def test_generate_and_read_back(
        self, store: MongoAnalyticsStore, service: CarbonAnalyticsService
    ) -> None:
        generated = service.generate_previous_week_summary("alice")

        stored = store.fetch_summary("alice", LAST_WEEK)
        assert stored.id == generated.id
        assert stored.total_emissions == 12.0
        assert stored.reduction_target.reduction_achieved == 8.0
        assert stored.reduction_target.target_met is True
        assert stored.personalized_tip.category == Category.TRANSPORT

    def test_unique_index_blocks_duplicates(self, service: CarbonAnalyticsService) -> None:
        service.generate_previous_week_summary("alice")

        with pytest.raises(SummaryAlreadyExistsError):
            service.generate_previous_week_summary("alice")

    def test_concurrent_generation(
        self, store: MongoAnalyticsStore, service: CarbonAnalyticsService
    ) -> None:
        """Racing generators store exactly one document."""
        outcomes: list[str] = []
        barrier = threading.Barrier(5)

        def worker() -> None:
            barrier.wait()
            try:
                service.generate_previous_week_summary("alice")
                outcomes.append("ok")
            except SummaryAlreadyExistsError:
                outcomes.append("exists")

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert outcomes.count("ok") == 1
        assert len(store.fetch_summaries("alice")) == 1

    def test_leaderboard(self, store: MongoAnalyticsStore, service: CarbonAnalyticsService) -> None:
        store.save_user(UserRecord("bob", "bob", "Bob", datetime(2023, 6, 1, tzinfo=UTC)))

        entries = service.get_leaderboard()

        assert [(e.user_id, e.rank) for e in entries] == [("bob", 1), ("alice", 2)]
        assert entries[1].total_emissions == 32.0
