"""Category aggregation of activities.

Reduces activities to per-category totals and counts, either for one
user or grouped by owner.
"""

import logging
import math
from collections import defaultdict
from collections.abc import Iterable

from .calendar import TimeWindow
from .models import Activity, Category, CategoryTotals

logger = logging.getLogger(__name__)


def _in_window(activity: Activity, window: TimeWindow | None) -> bool:
    return window is None or window.contains(activity.occurred_at)


def _reduce(activities: Iterable[Activity]) -> CategoryTotals:
    values: dict[Category, list[float]] = {category: [] for category in Category}
    for activity in activities:
        values[activity.category].append(activity.value)

    # fsum is exactly rounded, so the result does not depend on input order
    return CategoryTotals(
        totals={category: math.fsum(values[category]) for category in Category},
        counts={category: len(values[category]) for category in Category},
    )


def aggregate(
    activities: Iterable[Activity],
    user_id: str | None = None,
    window: TimeWindow | None = None,
) -> CategoryTotals:
    """Aggregate activities into category totals.

    Args:
        activities: Activities to reduce, in any order.
        user_id: Keep only this owner's activities. None keeps all.
        window: Keep only activities inside this window. None means all time.

    Returns:
        CategoryTotals covering every category.
    """
    return _reduce(
        a
        for a in activities
        if (user_id is None or a.user_id == user_id) and _in_window(a, window)
    )


def aggregate_by_user(
    activities: Iterable[Activity],
    window: TimeWindow | None = None,
) -> dict[str, CategoryTotals]:
    """Aggregate activities per owner.

    Args:
        activities: Activities of any number of users.
        window: Keep only activities inside this window. None means all time.

    Returns:
        Mapping of user ID to that user's CategoryTotals. Users without
        matching activities are absent.
    """
    grouped: dict[str, list[Activity]] = defaultdict(list)
    for activity in activities:
        if _in_window(activity, window):
            grouped[activity.user_id].append(activity)

    logger.debug("Aggregated activities for %d users", len(grouped))
    return {user_id: _reduce(owned) for user_id, owned in grouped.items()}


__all__ = ["aggregate", "aggregate_by_user"]
