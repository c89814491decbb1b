"""
Badge engine data types.

Plain dataclasses passed between the catalog, the evaluators and the
tier awarder. None of them touch the database.
"""

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Any, Optional

from badge_engine.shared.constants import (
    CriteriaType,
    ResetPeriod,
    PointsFamily,
    Tier,
)
from badge_engine.shared.exceptions import InvalidThresholdsError, UnknownCriteriaError


@dataclass(frozen=True)
class Thresholds:
    """Bronze/silver/gold thresholds, strictly increasing."""
    bronze: float
    silver: float
    gold: float

    def __post_init__(self):
        if not self.bronze < self.silver < self.gold:
            raise InvalidThresholdsError(
                f"Thresholds must increase: {self.bronze}/{self.silver}/{self.gold}"
            )

    def for_tier(self, tier: Tier) -> float:
        return getattr(self, Tier(tier).value)


@dataclass(frozen=True)
class TierPoints:
    """Points granted in total for holding a tier."""
    bronze: int
    silver: int
    gold: int

    def for_tier(self, tier: Tier) -> int:
        return getattr(self, Tier(tier).value)

    @classmethod
    def from_mapping(cls, points: dict[str, int]) -> "TierPoints":
        return cls(bronze=points["bronze"], silver=points["silver"], gold=points["gold"])


@dataclass(frozen=True)
class BadgeCriteria:
    """
    Immutable snapshot of a BadgeDefinition.

    Attributes:
        badge_id: Catalog ID
        code: Unique badge code (e.g. 'early_bird')
        criteria_type: Evaluator to use
        thresholds: Tier thresholds in the metric's unit
        metric: Metric name for metric-based criteria
        condition: Condition expression for count-based criteria
        activity_type_filter: Only activities of this type/sport type count
        sports_list: Sports counted by unique_sports (None = all)
        reset_period: 'none' or 'weekly'
        points_family: Which tier point scale applies
        active: Inactive badges are never evaluated
        start_date: First day activities count (inclusive)
        end_date: Last day activities count (inclusive, whole day)
    """
    badge_id: int
    code: str
    criteria_type: CriteriaType
    thresholds: Thresholds
    name: str = ""
    metric: Optional[str] = None
    condition: Optional[str] = None
    activity_type_filter: Optional[str] = None
    sports_list: Optional[tuple[str, ...]] = None
    reset_period: ResetPeriod = ResetPeriod.NONE
    points_family: PointsFamily = PointsFamily.STANDARD
    active: bool = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @property
    def effective_reset_period(self) -> ResetPeriod:
        """Weekly cumulative badges are always scoped to one week."""
        if self.criteria_type is CriteriaType.WEEKLY_CUMULATIVE:
            return ResetPeriod.WEEKLY
        return self.reset_period

    def is_available_on(self, moment: datetime) -> bool:
        """True if the badge is active and `moment` falls in its date window."""
        if not self.active:
            return False
        if self.start_date and moment < self.start_date:
            return False
        if self.end_date:
            last_moment = datetime.combine(self.end_date.date(), time.max)
            if moment > last_moment:
                return False
        return True

    @classmethod
    def from_model(cls, badge) -> "BadgeCriteria":
        """
        Build from a BadgeDefinition row.

        Raises:
            UnknownCriteriaError: criteria_type is not a known CriteriaType
            InvalidThresholdsError: thresholds do not increase
        """
        try:
            criteria_type = CriteriaType(badge.criteria_type)
        except ValueError:
            raise UnknownCriteriaError(
                f"Badge {badge.code}: unknown criteria type {badge.criteria_type!r}"
            )
        return cls(
            badge_id=badge.id,
            code=badge.code,
            name=badge.name or badge.code,
            criteria_type=criteria_type,
            thresholds=Thresholds(
                bronze=badge.bronze_threshold,
                silver=badge.silver_threshold,
                gold=badge.gold_threshold,
            ),
            metric=badge.metric,
            condition=badge.condition,
            activity_type_filter=badge.activity_type_filter,
            sports_list=tuple(badge.sports_list) if badge.sports_list else None,
            reset_period=ResetPeriod(badge.reset_period or ResetPeriod.NONE.value),
            points_family=PointsFamily(badge.points_family or PointsFamily.STANDARD.value),
            active=bool(badge.active) if badge.active is not None else True,
            start_date=badge.start_date,
            end_date=badge.end_date,
        )


@dataclass
class ProgressState:
    """Progress row as seen by evaluators."""
    current_value: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)
    last_activity_id: Optional[int] = None

    @classmethod
    def from_model(cls, progress) -> "ProgressState":
        if progress is None:
            return cls()
        return cls(
            current_value=progress.current_value or 0.0,
            metadata=dict(progress.progress_metadata or {}),
            last_activity_id=progress.last_activity_id,
        )


@dataclass(frozen=True)
class EvaluationResult:
    """
    Output of an evaluator.

    Attributes:
        progress: New progress state to store
        tier_value: Value compared against thresholds. Equals
            progress.current_value except for single-activity badges,
            where it is the triggering activity's own value.
    """
    progress: ProgressState
    tier_value: float


@dataclass(frozen=True)
class AwardOutcome:
    """What the tier awarder did for one (user, badge)."""
    user_id: str
    badge_id: int
    status: str                     # 'awarded' | 'upgraded' | 'unchanged' | 'dry_run'
    tier: Optional[Tier] = None
    previous_tier: Optional[Tier] = None
    points_delta: int = 0

    @property
    def changed(self) -> bool:
        return self.status in ("awarded", "upgraded")
