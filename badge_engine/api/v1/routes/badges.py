"""
Badge read endpoints.

Endpoints:
- GET /badges/progress/{user_id}  - Progress per badge and period
- GET /badges/awards/{user_id}    - Awarded badges and total badge points
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from badge_engine.db.session import get_async_db
from badge_engine.features.badges import BadgeService
from badge_engine.features.badges.schemas import BadgeProgressResponse, UserAwardsResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/badges")


@router.get("/progress/{user_id}", response_model=list[BadgeProgressResponse])
async def get_badge_progress(
    user_id: str,
    db: AsyncSession = Depends(get_async_db),
):
    """Badge progress of a user; empty for unknown users."""
    return await BadgeService(db).get_progress(user_id)


@router.get("/awards/{user_id}", response_model=UserAwardsResponse)
async def get_badge_awards(
    user_id: str,
    db: AsyncSession = Depends(get_async_db),
):
    """Awarded badges of a user with the badge points total."""
    return await BadgeService(db).get_awards(user_id)
