"""Reduction target scoring.

Compares a week's total with the preceding week against a user's goal.
"""

from .models import ReductionProgress, ReductionTarget, TargetType


def reduction_achieved(
    target_type: TargetType,
    current_week_total: float,
    previous_week_total: float | None,
) -> float | None:
    """Week-over-week decrease in the unit of the target type.

    Returns None when there is no previous week to compare against.
    A rise in emissions yields a negative value.
    """
    if previous_week_total is None:
        return None

    difference = previous_week_total - current_week_total
    if target_type is TargetType.ABSOLUTE_KG:
        return difference

    if previous_week_total == 0:
        return 0.0
    return difference / previous_week_total * 100


def score_reduction(
    target: ReductionTarget | None,
    current_week_total: float,
    previous_week_total: float | None,
) -> ReductionProgress | None:
    """Score a reduction target.

    Args:
        target: The user's goal, or None if none is configured.
        current_week_total: Emissions of the week being scored.
        previous_week_total: Emissions of the preceding week, or None when
            that week has no data.

    Returns:
        ReductionProgress snapshot, or None when there is no target.
    """
    if target is None:
        return None

    achieved = reduction_achieved(target.target_type, current_week_total, previous_week_total)

    progress: float | None = None
    if achieved is not None and target.target_value > 0:
        progress = min(100.0, max(0.0, achieved / target.target_value * 100))

    return ReductionProgress(
        target_type=target.target_type,
        target_value=target.target_value,
        previous_week_emissions=previous_week_total,
        reduction_achieved=achieved,
        target_met=achieved is not None and achieved >= target.target_value,
        progress_percentage=progress,
    )


__all__ = ["reduction_achieved", "score_reduction"]
