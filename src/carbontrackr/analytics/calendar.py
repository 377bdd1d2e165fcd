"""Week calendar arithmetic.

Weeks start on Monday at 00:00 UTC. All functions are pure.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

from .errors import InvalidWeekError
from .models import date_to_datetime, ensure_utc


@dataclass(frozen=True)
class TimeWindow:
    """Half-open UTC interval [start, end)."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", ensure_utc(self.start))
        object.__setattr__(self, "end", ensure_utc(self.end))
        if self.end < self.start:
            raise ValueError(f"Window end {self.end} precedes start {self.start}")

    def contains(self, moment: datetime) -> bool:
        """Check whether a timestamp falls inside the window."""
        return self.start <= ensure_utc(moment) < self.end

    @classmethod
    def last_days(cls, days: int, now: datetime | None = None) -> "TimeWindow":
        """Window covering the trailing number of days up to now."""
        end = ensure_utc(now) if now else datetime.now(UTC)
        return cls(start=end - timedelta(days=days), end=end)


def week_start(moment: datetime | date) -> date:
    """Monday of the UTC week containing moment.

    Args:
        moment: A timestamp (naive values are taken as UTC) or a date.

    Returns:
        The week-start date.
    """
    if isinstance(moment, datetime):
        day = ensure_utc(moment).date()
    else:
        day = moment
    # isoweekday: Monday=1 .. Sunday=7, so Sunday-based index is isoweekday % 7
    sunday_based = day.isoweekday() % 7
    return day - timedelta(days=(sunday_based + 6) % 7)


def week_end(start: date) -> date:
    """Sunday closing the week that begins on start."""
    return start + timedelta(days=6)


def previous_week(start: date) -> date:
    """Week start seven days earlier."""
    return start - timedelta(days=7)


def current_week_start(now: datetime | None = None) -> date:
    """Week start of the present moment."""
    return week_start(now or datetime.now(UTC))


def is_current_week(start: date, now: datetime | None = None) -> bool:
    """Check whether start identifies the present week."""
    return start == current_week_start(now)


def is_future_week(start: date, now: datetime | None = None) -> bool:
    """Check whether start lies after the present week."""
    return start > current_week_start(now)


def week_window(start: date) -> TimeWindow:
    """Half-open window spanning the whole week."""
    opening = date_to_datetime(start)
    return TimeWindow(start=opening, end=opening + timedelta(days=7))


def comparison_window(start: date) -> TimeWindow:
    """Window spanning the preceding week and the week of start."""
    return TimeWindow(start=week_window(previous_week(start)).start, end=week_window(start).end)


def parse_week_start(text: str) -> date:
    """Parse a YYYY-MM-DD week start.

    Raises:
        InvalidWeekError: If the text is not a date or not a Monday.
    """
    try:
        parsed = date.fromisoformat(text)
    except ValueError as e:
        raise InvalidWeekError(text, reason="not a YYYY-MM-DD date") from e

    if parsed.weekday() != 0:
        raise InvalidWeekError(parsed, reason="week start must be a Monday")
    return parsed


__all__ = [
    "TimeWindow",
    "comparison_window",
    "current_week_start",
    "is_current_week",
    "is_future_week",
    "parse_week_start",
    "previous_week",
    "week_end",
    "week_start",
    "week_window",
]
