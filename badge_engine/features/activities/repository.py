"""
Activity repository.

Read interface over already-ingested activities, used by history-based
evaluators and the group activity detector.
"""

from datetime import datetime
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from badge_engine.shared.repository import BaseRepository
from .models import Activity
from .schemas import ActivityRecord


class ActivityRepository(BaseRepository[Activity]):
    """Repository for activities. Soft-deleted rows are never returned."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Activity)

    async def get_record(self, activity_id: int) -> ActivityRecord | None:
        """Snapshot of one live activity, None if missing or deleted."""
        activity = await self.get_by(id=activity_id, deleted_at=None)
        return ActivityRecord.from_model(activity) if activity else None

    async def get_user_history(self, user_id: str) -> list[ActivityRecord]:
        """
        All live activities of a user.

        Args:
            user_id: User's ID

        Returns:
            Activities ordered by local start time (oldest first)
        """
        result = await self.db.execute(
            select(Activity)
            .where(Activity.user_id == user_id)
            .where(Activity.deleted_at.is_(None))
            .order_by(Activity.start_date_local, Activity.id)
        )
        return [ActivityRecord.from_model(a) for a in result.scalars().all()]

    async def get_for_group_detection(
        self,
        since: datetime,
        min_elapsed_s: int,
    ) -> list[ActivityRecord]:
        """
        Activities that may take part in a group activity.

        Args:
            since: Only activities starting at or after this local time
            min_elapsed_s: Minimum elapsed time in seconds

        Returns:
            Activities ordered by local start time (oldest first)
        """
        result = await self.db.execute(
            select(Activity)
            .where(Activity.start_date_local >= since)
            .where(Activity.elapsed_time_s >= min_elapsed_s)
            .where(Activity.deleted_at.is_(None))
            .order_by(Activity.start_date_local, Activity.id)
        )
        return [ActivityRecord.from_model(a) for a in result.scalars().all()]
