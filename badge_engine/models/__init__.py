"""
Database Models

Feature models live in their feature packages and are imported lazily to
avoid circular imports (they all depend on Base from here).
"""

from badge_engine.models.base import Base


def load_all_models():
    """Import every model module so Base.metadata knows all tables."""
    from badge_engine.features.activities.models import Activity
    from badge_engine.features.badges.models import (
        BadgeDefinition,
        BadgeProgress,
        AwardedBadge,
        UserBadgePoints,
    )
    return Activity, BadgeDefinition, BadgeProgress, AwardedBadge, UserBadgePoints


__all__ = ["Base", "load_all_models"]
