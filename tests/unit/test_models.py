"""Unit tests for analytics models and their MongoDB documents."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from carbontrackr.analytics.models import (
    Activity,
    Category,
    CategoryExtreme,
    CategoryTotals,
    PersonalizedTip,
    ReductionProgress,
    ReductionTarget,
    TargetType,
    TipType,
    UserRecord,
    WeeklySummary,
)


class TestCategory:
    """Tests for the Category enum."""

    def test_fixed_order(self) -> None:
        """Categories enumerate in tie-break order."""
        assert [c.value for c in Category] == [
            "Transport",
            "Food",
            "Energy",
            "Waste",
            "Water",
            "Shopping",
        ]
        assert Category.TRANSPORT.order == 0
        assert Category.SHOPPING.order == 5

    def test_unknown_category(self) -> None:
        with pytest.raises(ValueError):
            Category("Pets")


class TestActivity:
    """Tests for Activity."""

    @pytest.mark.parametrize("value", [-1.0, float("nan"), float("inf")])
    def test_invalid_value_rejected(self, value: float) -> None:
        """Negative and non-finite emission values are rejected."""
        with pytest.raises(ValueError):
            Activity("u", Category.FOOD, "Steak", value, datetime(2024, 1, 1, tzinfo=UTC))

    def test_timestamps_normalized_to_utc(self) -> None:
        """Offsets are converted and naive values taken as UTC."""
        activity = Activity(
            "u",
            Category.FOOD,
            "Lunch",
            1.0,
            datetime(2024, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2))),
            created_at=datetime(2024, 1, 1, 13, 0),
        )

        assert activity.occurred_at == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        assert activity.created_at.tzinfo is UTC

    def test_to_dict(self) -> None:
        """Test Activity converts to dict correctly."""
        activity = Activity(
            user_id="u",
            category=Category.TRANSPORT,
            activity="Car trip",
            value=4.2,
            occurred_at=datetime(2024, 1, 15, 8, 0, tzinfo=UTC),
            created_at=datetime(2024, 1, 15, 9, 0, tzinfo=UTC),
        )

        result = activity.to_dict()

        assert result["category"] == "Transport"
        assert result["value"] == 4.2
        assert result["occurred_at"] == datetime(2024, 1, 15, 8, 0, tzinfo=UTC)
        assert "_id" not in result

    def test_from_dict_falls_back_to_created_at(self) -> None:
        """Documents without occurred_at use their creation time."""
        created = datetime(2024, 1, 15, 9, 0, tzinfo=UTC)
        activity = Activity.from_dict(
            {
                "_id": "abc",
                "user_id": "u",
                "category": "Energy",
                "activity": "Heating",
                "value": 3,
                "created_at": created,
            }
        )

        assert activity.id == "abc"
        assert activity.category == Category.ENERGY
        assert activity.value == 3.0
        assert activity.occurred_at == created


class TestCategoryTotals:
    """Tests for CategoryTotals."""

    def test_highest_and_lowest(self) -> None:
        totals = CategoryTotals.from_dicts(
            {"Transport": 10.0, "Food": 5.0, "Energy": 0.0},
            {"Transport": 2, "Food": 1, "Energy": 1},
        )

        assert totals.highest() == CategoryExtreme(Category.TRANSPORT, 10.0)
        assert totals.lowest() == CategoryExtreme(Category.ENERGY, 0.0)

    def test_from_dicts_fills_missing(self) -> None:
        """Missing categories become zero entries."""
        totals = CategoryTotals.from_dicts({"Water": 1.5}, None)

        assert len(totals.totals) == len(Category)
        assert totals.totals[Category.WATER] == 1.5
        assert totals.counts[Category.WATER] == 0


class TestWeeklySummaryDocument:
    """Tests for WeeklySummary document conversion."""

    @pytest.fixture
    def summary(self) -> WeeklySummary:
        totals = CategoryTotals.from_dicts(
            {"Transport": 10.0, "Food": 5.0}, {"Transport": 2, "Food": 1}
        )
        return WeeklySummary(
            user_id="u",
            week_start=date(2024, 1, 8),
            week_end=date(2024, 1, 14),
            total_emissions=15.0,
            activities_count=3,
            category_totals=totals,
            highest_category=totals.highest(),
            lowest_category=totals.lowest(),
            reduction_target=ReductionProgress(
                target_type=TargetType.ABSOLUTE_KG,
                target_value=5.0,
                previous_week_emissions=20.0,
                reduction_achieved=5.0,
                target_met=True,
                progress_percentage=100.0,
            ),
            personalized_tip=PersonalizedTip(Category.TRANSPORT, "Cycle more.", TipType.CORRECTIVE),
            generated_at=datetime(2024, 1, 15, 0, 5, tzinfo=UTC),
        )

    def test_to_dict(self, summary: WeeklySummary) -> None:
        """Week start is stored as midnight UTC and totals by category name."""
        doc = summary.to_dict()

        assert doc["week_start"] == datetime(2024, 1, 8, tzinfo=UTC)
        assert doc["by_category_totals"]["Transport"] == 10.0
        assert doc["by_category_totals"]["Shopping"] == 0.0
        assert doc["highest_emission_category"] == {"category": "Transport", "value": 10.0}
        assert doc["lowest_emission_category"] == {"category": "Food", "value": 5.0}
        assert doc["reduction_target"]["target_type"] == "absolute_kg"
        assert doc["personalized_tip"]["tip_type"] == "corrective"
        assert "is_live" not in doc

    def test_from_stored_document(self, summary: WeeklySummary) -> None:
        """A stored document reads back to an equal summary."""
        doc = {"_id": "xyz", **summary.to_dict()}

        restored = WeeklySummary.from_dict(doc)

        assert restored.id == "xyz"
        assert restored.week_start == date(2024, 1, 8)
        assert restored.category_totals == summary.category_totals
        assert restored.reduction_target == summary.reduction_target
        assert restored.personalized_tip == summary.personalized_tip

    def test_from_minimal_document(self) -> None:
        """Optional sections may be absent."""
        restored = WeeklySummary.from_dict(
            {"user_id": "u", "week_start": "2024-01-08", "total_emissions": 0}
        )

        assert restored.week_end == date(2024, 1, 14)
        assert restored.highest_category is None
        assert restored.reduction_target is None
        assert restored.personalized_tip is None


class TestUserRecord:
    """Tests for UserRecord."""

    def test_from_dict_uses_object_id(self) -> None:
        """Legacy documents without user_id fall back to _id."""
        user = UserRecord.from_dict({"_id": "65a0", "username": "kim"})

        assert user.user_id == "65a0"
        assert user.full_name == ""

    def test_from_dict_requires_identifier(self) -> None:
        with pytest.raises(ValueError):
            UserRecord.from_dict({"username": "anon"})


class TestReductionTarget:
    """Tests for ReductionTarget."""

    @pytest.mark.parametrize("value", [0.0, float("nan"), float("-inf")])
    def test_invalid_target_value_rejected(self, value: float) -> None:
        with pytest.raises(ValueError):
            ReductionTarget("u", TargetType.PERCENTAGE, value)
