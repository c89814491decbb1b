"""
Group activity detection constants.

Contains the matching windows and size tiers for group detection.
"""

from datetime import timedelta


class GroupDetectionConfig:
    """Configuration for group activity detection."""

    # Badge awarded to every member of a detected group
    BADGE_CODE = "pack_animal"

    # Two activities match when their start times are at most this far apart
    TIME_WINDOW = timedelta(minutes=5)

    # ... and their start points are at most this far apart (meters)
    DISTANCE_WINDOW_M = 150.0

    # Shorter activities never take part in a group (seconds)
    MIN_ELAPSED_TIME_S = 15 * 60

    # ==========================================================================
    # Size Tiers
    # ==========================================================================
    # Distinct users in a group:
    # - 2+: bronze
    # - 3+: silver
    # - 6+: gold
    BRONZE_GROUP_SIZE = 2
    SILVER_GROUP_SIZE = 3
    GOLD_GROUP_SIZE = 6
