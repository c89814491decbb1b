"""
Group activity service.

Finds activities that several users did together over a lookback window
and awards the group badge, tiered by group size, to every member.

Runs are stateless: re-running over an overlapping window re-detects the
same groups, and the tier awarder turns repeated awards into no-ops.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

import polyline
from sqlalchemy.ext.asyncio import AsyncSession

from badge_engine.config import settings
from badge_engine.features.activities import ActivityRepository
from badge_engine.features.badges import (
    BadgeCriteria,
    BadgeDefinitionRepository,
    TierAwarder,
)
from badge_engine.shared.constants import CriteriaType, PointsFamily
from badge_engine.shared.geo import PolylineDecoder
from badge_engine.shared.locks import award_locks
from badge_engine.shared.unit_of_work import commit_with_retry
from .config import GroupDetectionConfig
from .detector import (
    GROUP_THRESHOLDS,
    GroupedActivity,
    cluster_activities,
    locate_activities,
    tier_for_group_size,
)
from .schemas import GroupDetectionResponse

logger = logging.getLogger(__name__)


class GroupActivityService:
    """
    Detects group activities and awards the group badge.

    Usage:
        async with AsyncSessionLocal() as db:
            result = await GroupActivityService(db).detect_and_award(lookback_hours=24)
    """

    def __init__(self, db: AsyncSession, decode: PolylineDecoder = polyline.decode):
        self.db = db
        self.decode = decode
        self.activities = ActivityRepository(db)
        self.badges = BadgeDefinitionRepository(db)
        self.awarder = TierAwarder(db)

    async def get_group_badge(self) -> Optional[BadgeCriteria]:
        """
        Group badge from the catalog, with the group size thresholds.

        Returns:
            BadgeCriteria, or None if the badge is missing or inactive
        """
        badge = await self.badges.get_by_code(GroupDetectionConfig.BADGE_CODE)
        if badge is None or not badge.active:
            return None
        return BadgeCriteria(
            badge_id=badge.id,
            code=badge.code,
            name=badge.name or badge.code,
            criteria_type=CriteriaType.SINGLE_ACTIVITY,
            thresholds=GROUP_THRESHOLDS,
            points_family=PointsFamily.GROUP,
        )

    async def detect_and_award(
        self,
        lookback_hours: Optional[int] = None,
        dry_run: bool = False,
        now: Optional[datetime] = None,
    ) -> GroupDetectionResponse:
        """
        Run one detection over the lookback window.

        Args:
            lookback_hours: Window size (default from settings)
            dry_run: Log would-be awards, write nothing
            now: End of the window (default: current UTC time)

        Returns:
            GroupDetectionResponse summary
        """
        if lookback_hours is None:
            lookback_hours = settings.group_lookback_hours
        now = now or datetime.utcnow()
        since = now - timedelta(hours=lookback_hours)

        logger.info(
            f"Starting group detection (lookback: {lookback_hours}h, dry_run: {dry_run})"
        )
        result = GroupDetectionResponse(dry_run=dry_run)

        criteria = await self.get_group_badge()
        if criteria is None:
            logger.error(f"Group badge {GroupDetectionConfig.BADGE_CODE!r} not found or inactive")
            result.success = False
            return result

        activities = await self.activities.get_for_group_detection(
            since, GroupDetectionConfig.MIN_ELAPSED_TIME_S
        )
        result.activities_scanned = len(activities)
        if not activities:
            logger.info("No qualifying activities found")
            return result

        located = locate_activities(activities, self.decode)
        result.activities_located = len(located)
        logger.info(f"{len(located)} of {len(activities)} activities have a start point")

        groups = cluster_activities(located)
        result.groups = len(groups)
        logger.info(f"Detected {len(groups)} groups")

        for number, group in enumerate(groups, start=1):
            await self._award_group(number, group, criteria, dry_run, result)

        logger.info(
            f"Group detection complete: {result.awarded} awarded, {result.upgraded} upgraded, "
            f"{result.unchanged} unchanged, {result.failed} failed"
        )
        return result

    async def _award_group(
        self,
        number: int,
        group: list[GroupedActivity],
        criteria: BadgeCriteria,
        dry_run: bool,
        result: GroupDetectionResponse,
    ) -> None:
        """Award one group's tier to each member; member failures are isolated."""
        size = len(group)
        tier = tier_for_group_size(size)
        logger.info(
            f"Group {number}: {size} users ({', '.join(m.user_id for m in group)}), "
            f"activities {[m.activity.id for m in group]}, tier {tier.value if tier else None}"
        )
        if tier is None:
            return

        for member in group:
            user_id = member.user_id
            try:
                async with award_locks.hold((user_id, criteria.badge_id)):
                    if dry_run:
                        outcome = await self.awarder.award(user_id, criteria, size, dry_run=True)
                    else:
                        outcome = await commit_with_retry(
                            self.db,
                            lambda: self.awarder.award(user_id, criteria, size),
                            f"{criteria.code} for user {user_id}",
                        )
            except Exception as e:
                logger.exception(f"Failed to award {criteria.code} to user {user_id}: {e}")
                result.failed += 1
                continue

            if outcome.status == "awarded":
                result.awarded += 1
            elif outcome.status == "upgraded":
                result.upgraded += 1
            elif outcome.status == "dry_run":
                result.awarded += 1
            else:
                result.unchanged += 1
