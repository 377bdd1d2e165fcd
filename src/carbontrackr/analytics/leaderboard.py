"""Leaderboard ranking.

Ranks users by total emissions, lowest first, using competition ranking.
"""

import logging
from collections.abc import Iterable

from .aggregator import aggregate_by_user
from .calendar import TimeWindow
from .models import Activity, CategoryTotals, LeaderboardEntry, LeaderboardStats, UserRecord

logger = logging.getLogger(__name__)


class LeaderboardRanker:
    """Produces ordered, rank-assigned leaderboard entries.

    Order is ascending total emissions, then earliest account creation,
    then user ID. Tied totals share a rank and the following rank skips
    accordingly (1, 1, 3).
    """

    def rank(
        self,
        users: Iterable[UserRecord],
        activities: Iterable[Activity],
        window: TimeWindow | None = None,
        limit: int | None = None,
    ) -> list[LeaderboardEntry]:
        """Rank users by their emissions.

        Args:
            users: Every user to place on the board
            activities: Activities of any users
            window: Only count activities inside this window
            limit: Keep only the first entries; ranks are assigned first

        Returns:
            Leaderboard entries in rank order
        """
        users = list(users)
        per_user = aggregate_by_user(activities, window)

        known = {user.user_id for user in users}
        unknown = set(per_user) - known
        if unknown:
            logger.debug("Ignoring activities of %d unknown users", len(unknown))

        empty = CategoryTotals.empty()
        scored = [(user, per_user.get(user.user_id, empty)) for user in users]
        scored.sort(key=lambda pair: (pair[1].grand_total, pair[0].created_at, pair[0].user_id))

        entries: list[LeaderboardEntry] = []
        previous_total: float | None = None
        current_rank = 0
        for position, (user, totals) in enumerate(scored, start=1):
            total = totals.grand_total
            if total != previous_total:
                current_rank = position
                previous_total = total
            entries.append(
                LeaderboardEntry(
                    user_id=user.user_id,
                    username=user.username,
                    full_name=user.full_name,
                    total_emissions=total,
                    activity_count=totals.activity_count,
                    rank=current_rank,
                )
            )

        if limit is not None:
            entries = entries[:limit]
        return entries


def leaderboard_stats(entries: list[LeaderboardEntry]) -> LeaderboardStats:
    """Summarize participants, activities and average emissions."""
    participants = len(entries)
    total = sum(entry.total_emissions for entry in entries)
    return LeaderboardStats(
        participants=participants,
        total_activities=sum(entry.activity_count for entry in entries),
        average_emissions=total / participants if participants else 0.0,
    )


__all__ = ["LeaderboardRanker", "leaderboard_stats"]
