"""
Unified constants for badges, tiers and criteria.

This module provides a single source of truth for the string values
stored in the badge catalog and award tables.
"""

from enum import Enum


class Tier(str, Enum):
    """Badge tier, ordered bronze < silver < gold."""
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"

    @property
    def rank(self) -> int:
        return TIER_RANK[self]


TIER_RANK: dict[Tier, int] = {
    Tier.BRONZE: 1,
    Tier.SILVER: 2,
    Tier.GOLD: 3,
}

# Order in which thresholds are checked: highest first
TIERS_DESCENDING: tuple[Tier, ...] = (Tier.GOLD, Tier.SILVER, Tier.BRONZE)


class CriteriaType(str, Enum):
    """
    How a badge turns activities into a progress value.

    Every member must have an evaluator registered in
    badge_engine.features.badges.criteria.EVALUATORS.
    """
    COUNT = "count"
    CUMULATIVE = "cumulative"
    SINGLE_ACTIVITY = "single_activity"
    WEEKLY_STREAK = "weekly_streak"
    UNIQUE_SPORTS = "unique_sports"
    WEEKLY_CUMULATIVE = "weekly_cumulative"
    WEEKLY_COUNT = "weekly_count"


class ResetPeriod(str, Enum):
    """Period after which badge progress starts over in a new row."""
    NONE = "none"
    WEEKLY = "weekly"


class Metric(str, Enum):
    """Per-activity metrics a badge can accumulate or compare."""
    DISTANCE_KM = "distance_km"
    DISTANCE_MILES = "distance_miles"
    ELEVATION_GAIN = "elevation_gain"
    MOVING_TIME_HOURS = "moving_time_hours"
    MOVING_TIME_MINUTES = "moving_time_minutes"
    SUFFER_SCORE = "suffer_score"
    CALORIES_PER_HOUR = "calories_per_hour"
    AVERAGE_SPEED_KMH = "average_speed_kmh"


class PointsFamily(str, Enum):
    """Badge family selecting the tier point scale in settings.tier_points."""
    STANDARD = "standard"
    GROUP = "group"


METERS_PER_MILE = 1609.34
