"""
Badge repositories.

Data access layer for the badge catalog, progress rows, awards
and users' badge points.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from badge_engine.shared.periods import Period
from badge_engine.shared.repository import BaseRepository
from .models import BadgeDefinition, BadgeProgress, AwardedBadge, UserBadgePoints
from .types import ProgressState


class BadgeDefinitionRepository(BaseRepository[BadgeDefinition]):
    """Read-only access to the badge catalog."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, BadgeDefinition)

    async def get_active(self) -> list[BadgeDefinition]:
        """
        Active badge definitions in evaluation order.

        Returns:
            Definitions ordered by (sort_order, id)
        """
        result = await self.db.execute(
            select(BadgeDefinition)
            .where(BadgeDefinition.active.is_(True))
            .order_by(BadgeDefinition.sort_order, BadgeDefinition.id)
        )
        return list(result.scalars().all())

    async def get_by_code(self, code: str) -> BadgeDefinition | None:
        return await self.get_by(code=code)


class BadgeProgressRepository(BaseRepository[BadgeProgress]):
    """Repository for badge progress rows."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, BadgeProgress)

    async def get_for_period(
        self,
        user_id: str,
        badge_id: int,
        period: Period,
    ) -> BadgeProgress | None:
        """
        Progress row of a user on a badge in a period.

        Args:
            user_id: User's ID
            badge_id: Badge ID
            period: Period (NO_PERIOD for non-periodic badges)

        Returns:
            BadgeProgress if found, None otherwise
        """
        return await self.get_by(user_id=user_id, badge_id=badge_id, period_key=period.key)

    async def save(
        self,
        existing: BadgeProgress | None,
        user_id: str,
        badge_id: int,
        period: Period,
        state: ProgressState,
        flags: dict[str, bool],
    ) -> BadgeProgress:
        """
        Insert or compare-and-set update a progress row.

        Achievement flags are OR-ed with the stored ones so they never
        switch back to False.

        Raises:
            IntegrityError: another writer inserted the row first
            StaleDataError: another writer updated the row since it was read
        """
        values: dict[str, Any] = {
            "current_value": state.current_value,
            "last_activity_id": state.last_activity_id,
            "progress_metadata": dict(state.metadata) or None,
            "last_updated": datetime.utcnow(),
        }

        if existing is None:
            return await self.create(
                user_id=user_id,
                badge_id=badge_id,
                period_key=period.key,
                period_start=period.start,
                period_end=period.end,
                **values,
                **flags,
            )

        for name, reached in flags.items():
            values[name] = bool(getattr(existing, name)) or reached
        return await self.update(existing, **values)

    async def get_user_progress(self, user_id: str) -> list[tuple[BadgeProgress, BadgeDefinition]]:
        """
        All progress rows of a user with their badge.

        Returns:
            (progress, badge) pairs, newest period first within a badge
        """
        result = await self.db.execute(
            select(BadgeProgress, BadgeDefinition)
            .join(BadgeDefinition, BadgeDefinition.id == BadgeProgress.badge_id)
            .where(BadgeProgress.user_id == user_id)
            .order_by(
                BadgeDefinition.sort_order,
                BadgeDefinition.id,
                BadgeProgress.period_start.desc(),
            )
        )
        return [(row[0], row[1]) for row in result.all()]


class AwardedBadgeRepository(BaseRepository[AwardedBadge]):
    """Repository for awarded badges and users' badge points."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, AwardedBadge)

    async def get_award(self, user_id: str, badge_id: int) -> AwardedBadge | None:
        return await self.get_by(user_id=user_id, badge_id=badge_id)

    async def get_user_awards(self, user_id: str) -> list[tuple[AwardedBadge, BadgeDefinition]]:
        """Awards of a user with their badge, in catalog order."""
        result = await self.db.execute(
            select(AwardedBadge, BadgeDefinition)
            .join(BadgeDefinition, BadgeDefinition.id == AwardedBadge.badge_id)
            .where(AwardedBadge.user_id == user_id)
            .order_by(BadgeDefinition.sort_order, BadgeDefinition.id)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def get_user_badge_points(self, user_id: str) -> int:
        """Cumulative badge points of a user (0 if none yet)."""
        result = await self.db.execute(
            select(UserBadgePoints.badge_points).where(UserBadgePoints.user_id == user_id)
        )
        return result.scalar_one_or_none() or 0

    async def increment_user_badge_points(self, user_id: str, delta: int) -> None:
        """
        Atomically add `delta` to the user's badge points.

        The addition happens in SQL (badge_points = badge_points + delta),
        so concurrent increments never overwrite each other.

        Raises:
            IntegrityError: the points row was created concurrently; the
                caller retries and the UPDATE path then succeeds
        """
        result = await self.db.execute(
            update(UserBadgePoints)
            .where(UserBadgePoints.user_id == user_id)
            .values(
                badge_points=UserBadgePoints.badge_points + delta,
                updated_at=datetime.utcnow(),
            )
        )
        if result.rowcount == 0:
            self.db.add(UserBadgePoints(user_id=user_id, badge_points=delta))
            await self.db.flush()
