"""Data models for carbon analytics.

Defines the Category enum, activities, reduction targets, weekly summaries
and leaderboard entries, with conversion to and from MongoDB documents.
"""

import math
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from enum import Enum
from typing import Any


class Category(Enum):
    """Fixed emission categories.

    Declaration order is significant: it is the tie-break order used when
    two categories carry the same total.
    """

    TRANSPORT = "Transport"
    FOOD = "Food"
    ENERGY = "Energy"
    WASTE = "Waste"
    WATER = "Water"
    SHOPPING = "Shopping"

    @property
    def order(self) -> int:
        """Position of the category in the fixed enumeration."""
        return _CATEGORY_ORDER[self]


_CATEGORY_ORDER = {category: index for index, category in enumerate(Category)}


class TargetType(Enum):
    """How a reduction target is expressed."""

    PERCENTAGE = "percentage"
    ABSOLUTE_KG = "absolute_kg"


class TipType(Enum):
    """Polarity of a personalized tip."""

    POSITIVE = "positive"
    CORRECTIVE = "corrective"


def ensure_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def date_to_datetime(value: date) -> datetime:
    """Midnight UTC of a date, for BSON storage."""
    return datetime.combine(value, time.min, tzinfo=UTC)


def _as_date(value: Any) -> date:
    """Read a stored week start back as a date."""
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot interpret {value!r} as a date")


@dataclass(frozen=True)
class Activity:
    """A single carbon-emitting activity.

    Attributes:
        user_id: Owning user
        category: Emission category
        activity: Human-readable label (e.g., "Car trip")
        value: Emission in kilograms of CO2-equivalent
        occurred_at: When the activity happened
        created_at: When the activity was logged
        id: MongoDB document ID
    """

    user_id: str
    category: Category
    activity: str
    value: float
    occurred_at: datetime
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    id: str | None = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.value) or self.value < 0:
            raise ValueError(f"Emission value must be finite and non-negative, got {self.value}")
        object.__setattr__(self, "occurred_at", ensure_utc(self.occurred_at))
        object.__setattr__(self, "created_at", ensure_utc(self.created_at))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for MongoDB storage."""
        return {
            "user_id": self.user_id,
            "category": self.category.value,
            "activity": self.activity,
            "value": self.value,
            "occurred_at": self.occurred_at,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Activity":
        """Create from MongoDB document."""
        occurred_at = data.get("occurred_at") or data.get("created_at")
        if occurred_at is None:
            raise ValueError("Activity document has no timestamp")

        return cls(
            id=str(data["_id"]) if data.get("_id") else None,
            user_id=str(data.get("user_id", "")),
            category=Category(data.get("category")),
            activity=data.get("activity", ""),
            value=float(data.get("value", 0.0)),
            occurred_at=occurred_at,
            created_at=data.get("created_at") or occurred_at,
        )


@dataclass(frozen=True)
class ReductionTarget:
    """A user's week-over-week emission reduction goal."""

    user_id: str
    target_type: TargetType
    target_value: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.target_value) or self.target_value <= 0:
            raise ValueError(f"Target value must be finite and positive, got {self.target_value}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for MongoDB storage."""
        return {
            "user_id": self.user_id,
            "target_type": self.target_type.value,
            "target_value": self.target_value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReductionTarget":
        """Create from MongoDB document."""
        return cls(
            user_id=str(data.get("user_id", "")),
            target_type=TargetType(data.get("target_type")),
            target_value=float(data.get("target_value", 0.0)),
        )


@dataclass(frozen=True)
class CategoryTotals:
    """Per-category emission totals and activity counts.

    Always carries every category, with zero entries for categories that
    saw no activity.
    """

    totals: dict[Category, float]
    counts: dict[Category, int]

    @classmethod
    def empty(cls) -> "CategoryTotals":
        """All-zero totals."""
        return cls(
            totals={category: 0.0 for category in Category},
            counts={category: 0 for category in Category},
        )

    @property
    def grand_total(self) -> float:
        """Sum of all category totals."""
        return sum(self.totals[category] for category in Category)

    @property
    def activity_count(self) -> int:
        """Number of activities aggregated."""
        return sum(self.counts[category] for category in Category)

    @property
    def average_per_activity(self) -> float:
        """Mean emission per activity, 0 when nothing was logged."""
        count = self.activity_count
        return self.grand_total / count if count else 0.0

    def highest(self) -> "CategoryExtreme | None":
        """Category with the largest total, ties resolved by category order."""
        active = [category for category in Category if self.counts[category] > 0]
        if not active:
            return None
        best = max(active, key=lambda c: (self.totals[c], -c.order))
        return CategoryExtreme(category=best, value=self.totals[best])

    def lowest(self) -> "CategoryExtreme | None":
        """Category with the smallest total among categories with activity."""
        active = [category for category in Category if self.counts[category] > 0]
        if not active:
            return None
        worst = min(active, key=lambda c: (self.totals[c], c.order))
        return CategoryExtreme(category=worst, value=self.totals[worst])

    def totals_dict(self) -> dict[str, float]:
        """Totals keyed by category name."""
        return {category.value: self.totals[category] for category in Category}

    def counts_dict(self) -> dict[str, int]:
        """Counts keyed by category name."""
        return {category.value: self.counts[category] for category in Category}

    @classmethod
    def from_dicts(
        cls, totals: dict[str, Any] | None, counts: dict[str, Any] | None
    ) -> "CategoryTotals":
        """Rebuild from name-keyed mappings, filling missing categories with 0."""
        totals = totals or {}
        counts = counts or {}
        return cls(
            totals={c: float(totals.get(c.value, 0.0)) for c in Category},
            counts={c: int(counts.get(c.value, 0)) for c in Category},
        )


@dataclass(frozen=True)
class CategoryExtreme:
    """A category paired with its total emission."""

    category: Category
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category.value, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "CategoryExtreme | None":
        if not data:
            return None
        return cls(category=Category(data["category"]), value=float(data["value"]))


@dataclass(frozen=True)
class ReductionProgress:
    """Snapshot of a reduction target scored against two weeks of data.

    Attributes:
        target_type: How the target is expressed
        target_value: The configured goal
        previous_week_emissions: Total of the preceding week, None if that
            week had no activity
        reduction_achieved: Decrease versus the preceding week, in kg or
            percent depending on target_type. Negative when emissions rose.
        target_met: Whether reduction_achieved reached target_value
        progress_percentage: reduction_achieved / target_value, as a
            percentage clamped to [0, 100]
    """

    target_type: TargetType
    target_value: float
    previous_week_emissions: float | None
    reduction_achieved: float | None
    target_met: bool
    progress_percentage: float | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_type": self.target_type.value,
            "target_value": self.target_value,
            "previous_week_emissions": self.previous_week_emissions,
            "reduction_achieved": self.reduction_achieved,
            "target_met": self.target_met,
            "progress_percentage": self.progress_percentage,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ReductionProgress | None":
        if not data:
            return None
        return cls(
            target_type=TargetType(data["target_type"]),
            target_value=float(data["target_value"]),
            previous_week_emissions=data.get("previous_week_emissions"),
            reduction_achieved=data.get("reduction_achieved"),
            target_met=bool(data.get("target_met", False)),
            progress_percentage=data.get("progress_percentage"),
        )


@dataclass(frozen=True)
class PersonalizedTip:
    """A single category-scoped message attached to a summary."""

    category: Category
    message: str
    tip_type: TipType

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "message": self.message,
            "tip_type": self.tip_type.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "PersonalizedTip | None":
        if not data:
            return None
        return cls(
            category=Category(data["category"]),
            message=data.get("message", ""),
            tip_type=TipType(data["tip_type"]),
        )


@dataclass(frozen=True)
class WeeklySummary:
    """Emission summary for one user and one calendar week.

    Stored summaries are immutable snapshots keyed by (user_id, week_start).
    The current week is served as a live projection with is_live set, and
    is never stored.
    """

    user_id: str
    week_start: date
    week_end: date
    total_emissions: float
    activities_count: int
    category_totals: CategoryTotals
    highest_category: CategoryExtreme | None = None
    lowest_category: CategoryExtreme | None = None
    reduction_target: ReductionProgress | None = None
    personalized_tip: PersonalizedTip | None = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    is_live: bool = False
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for MongoDB storage."""
        return {
            "user_id": self.user_id,
            "week_start": date_to_datetime(self.week_start),
            "week_end": date_to_datetime(self.week_end),
            "total_emissions": self.total_emissions,
            "activities_count": self.activities_count,
            "by_category_totals": self.category_totals.totals_dict(),
            "by_category_counts": self.category_totals.counts_dict(),
            "highest_emission_category": (
                self.highest_category.to_dict() if self.highest_category else None
            ),
            "lowest_emission_category": (
                self.lowest_category.to_dict() if self.lowest_category else None
            ),
            "reduction_target": (
                self.reduction_target.to_dict() if self.reduction_target else None
            ),
            "personalized_tip": (
                self.personalized_tip.to_dict() if self.personalized_tip else None
            ),
            "generated_at": self.generated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WeeklySummary":
        """Create from MongoDB document."""
        week_start = _as_date(data["week_start"])
        week_end = (
            _as_date(data["week_end"]) if data.get("week_end") else week_start + timedelta(days=6)
        )
        generated_at = data.get("generated_at") or datetime.now(UTC)

        return cls(
            id=str(data["_id"]) if data.get("_id") else None,
            user_id=str(data.get("user_id", "")),
            week_start=week_start,
            week_end=week_end,
            total_emissions=float(data.get("total_emissions", 0.0)),
            activities_count=int(data.get("activities_count", 0)),
            category_totals=CategoryTotals.from_dicts(
                data.get("by_category_totals"), data.get("by_category_counts")
            ),
            highest_category=CategoryExtreme.from_dict(data.get("highest_emission_category")),
            lowest_category=CategoryExtreme.from_dict(data.get("lowest_emission_category")),
            reduction_target=ReductionProgress.from_dict(data.get("reduction_target")),
            personalized_tip=PersonalizedTip.from_dict(data.get("personalized_tip")),
            generated_at=ensure_utc(generated_at),
        )


@dataclass(frozen=True)
class UserRecord:
    """Identity fields of a user, as joined into the leaderboard."""

    user_id: str
    username: str
    full_name: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        object.__setattr__(self, "created_at", ensure_utc(self.created_at))

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "full_name": self.full_name,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRecord":
        user_id = data.get("user_id") or data.get("_id")
        if not user_id:
            raise ValueError("User document has no identifier")
        return cls(
            user_id=str(user_id),
            username=data.get("username", ""),
            full_name=data.get("full_name", ""),
            created_at=data.get("created_at") or datetime.now(UTC),
        )


@dataclass(frozen=True)
class LeaderboardEntry:
    """A ranked user on the leaderboard. Lower emissions rank better."""

    user_id: str
    username: str
    full_name: str
    total_emissions: float
    activity_count: int
    rank: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "full_name": self.full_name,
            "total_emissions": self.total_emissions,
            "activity_count": self.activity_count,
            "rank": self.rank,
        }


@dataclass(frozen=True)
class LeaderboardStats:
    """Headline figures across a leaderboard."""

    participants: int
    total_activities: int
    average_emissions: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "participants": self.participants,
            "total_activities": self.total_activities,
            "average_emissions": self.average_emissions,
        }


@dataclass(frozen=True)
class DashboardAggregates:
    """Totals for a user's dashboard over a window."""

    user_id: str
    category_totals: CategoryTotals
    grand_total: float
    activity_count: int
    average_per_activity: float
    top_category: CategoryExtreme | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "by_category_totals": self.category_totals.totals_dict(),
            "by_category_counts": self.category_totals.counts_dict(),
            "grand_total": self.grand_total,
            "activity_count": self.activity_count,
            "average_per_activity": self.average_per_activity,
            "top_category": self.top_category.to_dict() if self.top_category else None,
        }


__all__ = [
    "Activity",
    "Category",
    "CategoryExtreme",
    "CategoryTotals",
    "DashboardAggregates",
    "LeaderboardEntry",
    "LeaderboardStats",
    "PersonalizedTip",
    "ReductionProgress",
    "ReductionTarget",
    "TargetType",
    "TipType",
    "UserRecord",
    "WeeklySummary",
    "date_to_datetime",
    "ensure_utc",
]
