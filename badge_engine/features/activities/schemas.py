"""
Activity snapshot used by the badge engine.

Evaluators and the group detector work on these plain records rather
than ORM rows, so they stay pure and survive session rollbacks.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ActivityRecord:
    """Read-only view of one activity."""
    id: int
    user_id: str
    start_date_local: datetime
    activity_type: str
    sport_type: Optional[str] = None
    distance_m: float = 0.0
    moving_time_s: int = 0
    elapsed_time_s: int = 0
    elevation_gain_m: float = 0.0
    avg_speed_mps: float = 0.0
    calories: float = 0.0
    suffer_score: float = 0.0
    photo_count: int = 0
    summary_polyline: Optional[str] = None

    @classmethod
    def from_model(cls, activity) -> "ActivityRecord":
        """Build from an Activity row; missing metrics become zero."""
        return cls(
            id=activity.id,
            user_id=activity.user_id,
            start_date_local=activity.start_date_local,
            activity_type=activity.activity_type,
            sport_type=activity.sport_type,
            distance_m=activity.distance_m or 0.0,
            moving_time_s=activity.moving_time_s or 0,
            elapsed_time_s=activity.elapsed_time_s or 0,
            elevation_gain_m=activity.elevation_gain_m or 0.0,
            avg_speed_mps=activity.avg_speed_mps or 0.0,
            calories=activity.calories or 0.0,
            suffer_score=activity.suffer_score or 0.0,
            photo_count=activity.photo_count or 0,
            summary_polyline=activity.summary_polyline,
        )

    def matches_type(self, activity_type: Optional[str]) -> bool:
        """True when no filter is set or either type field equals it."""
        if not activity_type:
            return True
        return activity_type in (self.activity_type, self.sport_type)
