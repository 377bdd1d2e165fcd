"""Personalized tip selection.

Picks the dominant emission category of a week and attaches either an
encouraging or a corrective message to it.
"""

import logging
from collections.abc import Mapping

from .models import Category, CategoryTotals, PersonalizedTip, TipType

logger = logging.getLogger(__name__)

DEFAULT_DOMINANCE_THRESHOLD = 0.5

DEFAULT_POSITIVE_MESSAGES: dict[Category, str] = {
    Category.TRANSPORT: (
        "Your emissions are well balanced. Keep choosing walking, cycling or "
        "public transport where you can."
    ),
    Category.FOOD: (
        "Nice balance this week. Plant-based meals and local produce keep your "
        "food footprint low."
    ),
    Category.ENERGY: (
        "Good work keeping energy in check. Switching off idle devices keeps "
        "the savings coming."
    ),
    Category.WASTE: (
        "Your footprint is evenly spread. Keep recycling and composting to "
        "stay on track."
    ),
    Category.WATER: (
        "Great balance this week. Short showers and full laundry loads keep "
        "water use efficient."
    ),
    Category.SHOPPING: (
        "Well balanced week. Buying second-hand and repairing items keeps "
        "shopping emissions down."
    ),
}

DEFAULT_CORRECTIVE_MESSAGES: dict[Category, str] = {
    Category.TRANSPORT: (
        "Transport makes up most of your emissions. Try carpooling, public "
        "transport or cycling for short trips."
    ),
    Category.FOOD: (
        "Food dominates your footprint. Swapping a few meat meals for "
        "plant-based ones makes a big difference."
    ),
    Category.ENERGY: (
        "Energy use is your largest source. Lower the thermostat a degree and "
        "switch to LED lighting."
    ),
    Category.WASTE: (
        "Waste is your biggest contributor. Cut single-use packaging and "
        "compost food scraps."
    ),
    Category.WATER: (
        "Water is driving your emissions. Shorter showers and fixing leaks "
        "help quickly."
    ),
    Category.SHOPPING: (
        "Shopping is your largest category. Consider buying less, choosing "
        "second-hand, or repairing before replacing."
    ),
}


def _by_category(messages: Mapping[str, str] | None) -> dict[Category, str]:
    """Convert a name-keyed message map to Category keys."""
    if not messages:
        return {}
    return {Category(name): text for name, text in messages.items()}


class TipSelector:
    """Selects one tip per week of activity.

    The subject is the highest-emitting category among those with activity,
    ties resolved by the fixed category order. Polarity depends only on that
    category's share of the week's total: below the threshold nothing
    dominates and the tip is positive, otherwise it is corrective.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_DOMINANCE_THRESHOLD,
        positive_messages: Mapping[str, str] | None = None,
        corrective_messages: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize tip selector.

        Args:
            threshold: Share of the total (0-1) at which a category dominates.
            positive_messages: Overrides keyed by category name.
            corrective_messages: Overrides keyed by category name.
        """
        if not 0 < threshold <= 1:
            raise ValueError(f"Dominance threshold must be in (0, 1], got {threshold}")
        self._threshold = threshold
        self._positive = {**DEFAULT_POSITIVE_MESSAGES, **_by_category(positive_messages)}
        self._corrective = {**DEFAULT_CORRECTIVE_MESSAGES, **_by_category(corrective_messages)}

    @property
    def threshold(self) -> float:
        return self._threshold

    def select(self, totals: CategoryTotals) -> PersonalizedTip | None:
        """Pick a tip for a week's totals.

        Args:
            totals: The week's category totals.

        Returns:
            PersonalizedTip, or None when there were no activities.
        """
        highest = totals.highest()
        if highest is None:
            return None

        subject = highest.category
        grand_total = totals.grand_total
        share = totals.totals[subject] / grand_total if grand_total > 0 else 0.0

        if share < self._threshold:
            tip_type = TipType.POSITIVE
            message = self._positive[subject]
        else:
            tip_type = TipType.CORRECTIVE
            message = self._corrective[subject]

        logger.debug(
            "Selected %s tip for %s (share %.2f)", tip_type.value, subject.value, share
        )
        return PersonalizedTip(category=subject, message=message, tip_type=tip_type)


__all__ = [
    "DEFAULT_CORRECTIVE_MESSAGES",
    "DEFAULT_DOMINANCE_THRESHOLD",
    "DEFAULT_POSITIVE_MESSAGES",
    "TipSelector",
]
