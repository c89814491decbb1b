"""
Activities module (read-only to the badge engine).

Usage:
    from badge_engine.features.activities import ActivityRepository, ActivityRecord
"""

from .models import Activity
from .schemas import ActivityRecord
from .repository import ActivityRepository

__all__ = [
    "Activity",
    "ActivityRecord",
    "ActivityRepository",
]
