"""
Group activity module.

Usage:
    from badge_engine.features.group_activity import GroupActivityService

Components:
- detector: pure location and single-linkage clustering
- GroupActivityService: one detection run with awards
- BackgroundGroupDetectionRunner: periodic runs inside the app
"""

from .config import GroupDetectionConfig
from .detector import (
    GroupedActivity,
    GROUP_THRESHOLDS,
    locate_activities,
    activities_match,
    cluster_activities,
    tier_for_group_size,
)
from .schemas import GroupDetectionResponse
from .service import GroupActivityService
from .background import BackgroundGroupDetectionRunner, background_group_detection

__all__ = [
    "GroupDetectionConfig",
    "GroupedActivity",
    "GROUP_THRESHOLDS",
    "locate_activities",
    "activities_match",
    "cluster_activities",
    "tier_for_group_size",
    "GroupDetectionResponse",
    "GroupActivityService",
    "BackgroundGroupDetectionRunner",
    "background_group_detection",
]
