"""
Badge schemas.

Pydantic models for the badge read API.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class BadgeInfo(BaseModel):
    """Badge summary embedded in responses."""

    code: str
    name: str
    emoji: Optional[str] = None
    criteria_type: str
    bronze: float
    silver: float
    gold: float


class BadgeProgressResponse(BaseModel):
    """Progress on one badge in one period, with the next tier to aim for."""

    badge: BadgeInfo
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    current_value: float
    next_tier: Optional[str] = None
    next_tier_target: Optional[float] = None
    percentage: float


class AwardedBadgeResponse(BaseModel):
    """Badge held by a user."""

    badge: BadgeInfo
    tier: str
    progress_value: float
    points_awarded: int
    earned_at: Optional[datetime] = None


class UserAwardsResponse(BaseModel):
    """All awards of a user and the total badge points."""

    user_id: str
    badge_points: int
    awards: list[AwardedBadgeResponse]
