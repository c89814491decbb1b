"""
Scheduled job endpoints.

Called by an external scheduler. Protected by
`Authorization: Bearer <CRON_SECRET>`.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Header
from sqlalchemy.ext.asyncio import AsyncSession

from badge_engine.config import settings
from badge_engine.db.session import get_async_db
from badge_engine.features.group_activity import GroupActivityService, GroupDetectionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron")


# =============================================================================
# Cron Secret Dependency
# =============================================================================

async def verify_cron_secret(authorization: str | None = Header(default=None)) -> str:
    """Verify the scheduler's bearer token."""
    if not settings.cron_secret:
        logger.error("CRON_SECRET is not configured")
        raise HTTPException(status_code=500, detail="Cron secret not configured")
    if authorization != f"Bearer {settings.cron_secret}":
        logger.warning("Rejected cron request with invalid credentials")
        raise HTTPException(status_code=401, detail="Unauthorized")
    return authorization


# =============================================================================
# Endpoints
# =============================================================================

@router.get(
    "/daily-badge-check",
    response_model=GroupDetectionResponse,
    dependencies=[Depends(verify_cron_secret)],
)
async def daily_badge_check(db: AsyncSession = Depends(get_async_db)):
    """Run group activity detection over the configured lookback window."""
    logger.info("Running scheduled badge check")
    return await GroupActivityService(db).detect_and_award(settings.group_lookback_hours)
