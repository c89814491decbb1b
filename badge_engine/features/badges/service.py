"""
Badge service.

Main entry point of the badge engine for a single incoming activity:
for every active badge, resolve the period, read progress, evaluate the
criteria, award tiers and write progress back.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from badge_engine.features.activities import ActivityRecord, ActivityRepository
from badge_engine.shared.constants import PointsFamily, TIERS_DESCENDING
from badge_engine.shared.exceptions import BadgeEngineError
from badge_engine.shared.locks import progress_locks, award_locks
from badge_engine.shared.periods import resolve_period
from badge_engine.shared.unit_of_work import commit_with_retry
from .awarder import TierAwarder
from .criteria import get_evaluator
from .models import BadgeDefinition, BadgeProgress
from .repository import (
    BadgeDefinitionRepository,
    BadgeProgressRepository,
    AwardedBadgeRepository,
)
from .schemas import (
    AwardedBadgeResponse,
    BadgeInfo,
    BadgeProgressResponse,
    UserAwardsResponse,
)
from .tiers import reached_flags
from .types import AwardOutcome, BadgeCriteria, ProgressState

logger = logging.getLogger(__name__)

HistoryLoader = Callable[[], Awaitable[list[ActivityRecord]]]


@dataclass
class EvaluationSummary:
    """What happened to one activity across the catalog."""
    activity_id: int
    user_id: str
    evaluated: int = 0
    skipped: int = 0
    failed: list[str] = field(default_factory=list)
    awards: list[AwardOutcome] = field(default_factory=list)

    @property
    def points_awarded(self) -> int:
        return sum(a.points_delta for a in self.awards)


class BadgeService:
    """
    Evaluates activities against the badge catalog.

    Each badge is its own unit of work: a failure while evaluating or
    writing one badge is logged and rolled back, and the remaining badges
    are still evaluated.

    Usage:
        async with AsyncSessionLocal() as db:
            summary = await BadgeService(db).evaluate_activity(activity)
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.badges = BadgeDefinitionRepository(db)
        self.progress = BadgeProgressRepository(db)
        self.awards = AwardedBadgeRepository(db)
        self.activities = ActivityRepository(db)
        self.awarder = TierAwarder(db, self.awards)

    async def load_catalog(self) -> list[BadgeCriteria]:
        """
        Active badges in evaluation order.

        Group-family badges are awarded by the group activity detector
        only, and malformed definitions are skipped.
        """
        catalog = []
        for definition in await self.badges.get_active():
            if definition.points_family == PointsFamily.GROUP.value:
                continue
            try:
                catalog.append(BadgeCriteria.from_model(definition))
            except BadgeEngineError as e:
                logger.error(f"Skipping badge {definition.code}: {e}")
        return catalog

    # =========================================================================
    # Evaluation
    # =========================================================================

    async def evaluate_activity(self, activity) -> EvaluationSummary:
        """
        Evaluate every active badge for one activity.

        Args:
            activity: Activity row or ActivityRecord

        Returns:
            EvaluationSummary with the awards made
        """
        if not isinstance(activity, ActivityRecord):
            activity = ActivityRecord.from_model(activity)

        logger.info(f"Evaluating badges for activity {activity.id} (user {activity.user_id})")

        catalog = await self.load_catalog()
        summary = EvaluationSummary(activity_id=activity.id, user_id=activity.user_id)

        history: list[ActivityRecord] | None = None

        async def load_history() -> list[ActivityRecord]:
            nonlocal history
            if history is None:
                history = await self.activities.get_user_history(activity.user_id)
            return history

        for criteria in catalog:
            try:
                outcome = await self.evaluate_badge(criteria, activity, load_history)
            except Exception as e:
                logger.exception(
                    f"Error evaluating badge {criteria.code} for activity {activity.id}: {e}"
                )
                summary.failed.append(criteria.code)
                continue

            if outcome is None:
                summary.skipped += 1
                continue

            summary.evaluated += 1
            if outcome.changed:
                summary.awards.append(outcome)

        logger.info(
            f"Completed activity {activity.id}: {summary.evaluated} evaluated, "
            f"{summary.skipped} skipped, {len(summary.failed)} failed, "
            f"+{summary.points_awarded} pts"
        )
        return summary

    async def evaluate_badge(
        self,
        criteria: BadgeCriteria,
        activity: ActivityRecord,
        load_history: Optional[HistoryLoader] = None,
    ) -> Optional[AwardOutcome]:
        """
        Evaluate one badge for one activity and persist the result.

        Reading, evaluating and writing progress is serialized per
        (user, badge, period) and retried from a fresh read on write
        conflicts with other processes.

        Returns:
            AwardOutcome if progress changed, None if the activity does
            not count for this badge
        """
        if not criteria.is_available_on(activity.start_date_local):
            logger.debug(f"Badge {criteria.code} not available on {activity.start_date_local}")
            return None

        evaluator = get_evaluator(criteria.criteria_type)
        evaluator.validate(criteria)

        period = resolve_period(activity.start_date_local, criteria.effective_reset_period)

        history = None
        if evaluator.needs_history:
            if load_history is not None:
                history = await load_history()
            else:
                history = await self.activities.get_user_history(activity.user_id)

        async def work() -> Optional[AwardOutcome]:
            row = await self.progress.get_for_period(activity.user_id, criteria.badge_id, period)
            result = evaluator.evaluate(criteria, ProgressState.from_model(row), activity, history)
            if result is None:
                logger.debug(f"Activity {activity.id} does not change {criteria.code}")
                return None

            await self.progress.save(
                row,
                activity.user_id,
                criteria.badge_id,
                period,
                result.progress,
                reached_flags(result.tier_value, criteria.thresholds),
            )
            return await self.awarder.award(activity.user_id, criteria, result.tier_value)

        progress_key = (activity.user_id, criteria.badge_id, period.key)
        award_key = (activity.user_id, criteria.badge_id)
        async with progress_locks.hold(progress_key), award_locks.hold(award_key):
            return await commit_with_retry(
                self.db, work, f"{criteria.code} for user {activity.user_id}"
            )

    # =========================================================================
    # Read views
    # =========================================================================

    async def get_progress(self, user_id: str) -> list[BadgeProgressResponse]:
        """Progress rows of a user with next tier and percentage."""
        rows = await self.progress.get_user_progress(user_id)
        return [build_progress_view(progress, badge) for progress, badge in rows]

    async def get_awards(self, user_id: str) -> UserAwardsResponse:
        """Awards of a user with the total badge points."""
        rows = await self.awards.get_user_awards(user_id)
        points = await self.awards.get_user_badge_points(user_id)
        return UserAwardsResponse(
            user_id=user_id,
            badge_points=points,
            awards=[
                AwardedBadgeResponse(
                    badge=badge_info(badge),
                    tier=award.tier,
                    progress_value=award.progress_value,
                    points_awarded=award.points_awarded,
                    earned_at=award.earned_at,
                )
                for award, badge in rows
            ],
        )


def badge_info(badge: BadgeDefinition) -> BadgeInfo:
    return BadgeInfo(
        code=badge.code,
        name=badge.name,
        emoji=badge.emoji,
        criteria_type=badge.criteria_type,
        bronze=badge.bronze_threshold,
        silver=badge.silver_threshold,
        gold=badge.gold_threshold,
    )


def build_progress_view(progress: BadgeProgress, badge: BadgeDefinition) -> BadgeProgressResponse:
    """
    Progress with the next tier still to reach.

    The next tier is the lowest one not yet achieved in this row;
    percentage is current_value of its target, capped at 100.
    """
    next_tier = None
    next_target = None
    for tier in reversed(TIERS_DESCENDING):
        if not getattr(progress, f"{tier.value}_achieved"):
            next_tier = tier.value
            next_target = getattr(badge, f"{tier.value}_threshold")
            break

    if next_target:
        percentage = min(100.0, (progress.current_value or 0.0) / next_target * 100)
    else:
        percentage = 100.0

    return BadgeProgressResponse(
        badge=badge_info(badge),
        period_start=progress.period_start,
        period_end=progress.period_end,
        current_value=progress.current_value or 0.0,
        next_tier=next_tier,
        next_tier_target=next_target,
        percentage=percentage,
    )
