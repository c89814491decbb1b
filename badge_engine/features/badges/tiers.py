"""
Tier decisions.

Pure functions deciding which tier a value earns and how many points
an upgrade is worth. Tiers never go down: a value that reaches only the
tier already held (or a lower one) earns nothing.
"""

from typing import Optional

from badge_engine.config import settings
from badge_engine.shared.constants import Tier, TIERS_DESCENDING, PointsFamily
from .types import Thresholds, TierPoints


def tier_points_for(family: PointsFamily | str) -> TierPoints:
    """Tier point scale of a badge family from settings."""
    family = PointsFamily(family)
    return TierPoints.from_mapping(settings.tier_points[family.value])


def highest_reached_tier(value: float, thresholds: Thresholds) -> Optional[Tier]:
    """Highest tier whose threshold `value` meets (gold checked first)."""
    for tier in TIERS_DESCENDING:
        if value >= thresholds.for_tier(tier):
            return tier
    return None


def tier_to_award(
    value: float,
    thresholds: Thresholds,
    current_tier: Optional[Tier | str],
) -> Optional[Tier]:
    """
    Tier to grant for `value`, given the tier already held.

    Returns:
        The highest reached tier if it is above current_tier, else None
    """
    reached = highest_reached_tier(value, thresholds)
    if reached is None:
        return None
    if current_tier is not None and reached.rank <= Tier(current_tier).rank:
        return None
    return reached


def points_delta(tier: Tier, points: TierPoints, previous_points: int) -> int:
    """
    Points to add to the user's score when moving to `tier`.

    Only the increment over what this badge already granted; never negative.
    """
    return max(points.for_tier(tier) - (previous_points or 0), 0)


def reached_flags(value: float, thresholds: Thresholds) -> dict[str, bool]:
    """bronze/silver/gold_achieved flags for a value."""
    return {
        f"{tier.value}_achieved": value >= thresholds.for_tier(tier)
        for tier in TIERS_DESCENDING
    }
