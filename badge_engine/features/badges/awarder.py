"""
Tier awarder.

Grants or upgrades a user's badge when a value crosses a threshold above
the tier already held, and adds only the point increment to the user's
badge score. Re-running with the same or a lower value changes nothing,
which makes re-processing activities and re-running detection idempotent.

Does not commit; callers run it inside commit_with_retry().
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from badge_engine.shared.constants import Tier
from .repository import AwardedBadgeRepository
from .tiers import tier_points_for, tier_to_award, points_delta
from .types import AwardOutcome, BadgeCriteria

logger = logging.getLogger(__name__)


class TierAwarder:
    """
    Upserts AwardedBadge rows with monotonic tiers.

    Usage:
        awarder = TierAwarder(db)
        outcome = await awarder.award(user_id, criteria, value=110.0)
        if outcome.changed:
            ...
    """

    def __init__(self, db: AsyncSession, repository: Optional[AwardedBadgeRepository] = None):
        self.db = db
        self.repository = repository or AwardedBadgeRepository(db)

    async def award(
        self,
        user_id: str,
        criteria: BadgeCriteria,
        value: float,
        dry_run: bool = False,
    ) -> AwardOutcome:
        """
        Award the highest tier `value` reaches, if above the held tier.

        Args:
            user_id: User's ID
            criteria: Badge the value belongs to
            value: Progress value compared against the thresholds
            dry_run: Decide but write nothing

        Returns:
            AwardOutcome describing the change (status 'unchanged' if none)

        Raises:
            IntegrityError / StaleDataError: a concurrent writer got there first
        """
        existing = await self.repository.get_award(user_id, criteria.badge_id)
        current_tier = Tier(existing.tier) if existing else None

        tier = tier_to_award(value, criteria.thresholds, current_tier)
        if tier is None:
            return AwardOutcome(
                user_id=user_id,
                badge_id=criteria.badge_id,
                status="unchanged",
                tier=current_tier,
            )

        points = tier_points_for(criteria.points_family)
        previous_points = existing.points_awarded if existing else 0
        delta = points_delta(tier, points, previous_points)

        if dry_run:
            logger.info(
                f"[dry run] Would award {tier.value} {criteria.code} to user {user_id} "
                f"(+{delta} pts)"
            )
            return AwardOutcome(
                user_id=user_id,
                badge_id=criteria.badge_id,
                status="dry_run",
                tier=tier,
                previous_tier=current_tier,
                points_delta=delta,
            )

        if existing is None:
            await self.repository.create(
                user_id=user_id,
                badge_id=criteria.badge_id,
                tier=tier.value,
                progress_value=value,
                points_awarded=points.for_tier(tier),
            )
            status = "awarded"
        else:
            await self.repository.update(
                existing,
                tier=tier.value,
                progress_value=value,
                points_awarded=points.for_tier(tier),
                updated_at=datetime.utcnow(),
            )
            status = "upgraded"

        if delta > 0:
            await self.repository.increment_user_badge_points(user_id, delta)

        if current_tier:
            logger.info(
                f"Upgraded {criteria.code} for user {user_id}: "
                f"{current_tier.value} -> {tier.value} (+{delta} pts)"
            )
        else:
            logger.info(
                f"Awarded {tier.value} {criteria.code} to user {user_id} (+{delta} pts)"
            )

        return AwardOutcome(
            user_id=user_id,
            badge_id=criteria.badge_id,
            status=status,
            tier=tier,
            previous_tier=current_tier,
            points_delta=delta,
        )
