"""
Badges module.

Usage:
    from badge_engine.features.badges import BadgeService, TierAwarder

Components:
- Criteria evaluators: one per criteria type (criteria.py)
- TierAwarder: monotonic tier upgrades and point deltas
- BadgeService: per-activity evaluation pipeline and read views

Models:
- BadgeDefinition: badge catalog
- BadgeProgress: progress per (user, badge, period)
- AwardedBadge: tier held per (user, badge)
- UserBadgePoints: cumulative badge points
"""

from .models import (
    BadgeDefinition,
    BadgeProgress,
    AwardedBadge,
    UserBadgePoints,
)
from .types import (
    Thresholds,
    TierPoints,
    BadgeCriteria,
    ProgressState,
    EvaluationResult,
    AwardOutcome,
)
from .criteria import (
    CriteriaEvaluator,
    EVALUATORS,
    get_evaluator,
    consecutive_week_streak,
    weekly_hours,
)
from .tiers import (
    tier_points_for,
    highest_reached_tier,
    tier_to_award,
    points_delta,
)
from .repository import (
    BadgeDefinitionRepository,
    BadgeProgressRepository,
    AwardedBadgeRepository,
)
from .awarder import TierAwarder
from .service import BadgeService, EvaluationSummary, build_progress_view

__all__ = [
    # Models
    "BadgeDefinition",
    "BadgeProgress",
    "AwardedBadge",
    "UserBadgePoints",
    # Types
    "Thresholds",
    "TierPoints",
    "BadgeCriteria",
    "ProgressState",
    "EvaluationResult",
    "AwardOutcome",
    # Criteria
    "CriteriaEvaluator",
    "EVALUATORS",
    "get_evaluator",
    "consecutive_week_streak",
    "weekly_hours",
    # Tiers
    "tier_points_for",
    "highest_reached_tier",
    "tier_to_award",
    "points_delta",
    # Repositories
    "BadgeDefinitionRepository",
    "BadgeProgressRepository",
    "AwardedBadgeRepository",
    # Services
    "TierAwarder",
    "BadgeService",
    "EvaluationSummary",
    "build_progress_view",
]
