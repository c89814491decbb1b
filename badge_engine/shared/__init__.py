"""
Shared utilities (NOT business logic).

Usage:
    from badge_engine.shared import haversine_m, resolve_period
    from badge_engine.shared.locks import progress_locks
"""
from .geo import (
    haversine_m,
    distance_between,
    decode_start_point,
    EARTH_RADIUS_M,
)
from .periods import (
    Period,
    NO_PERIOD,
    resolve_period,
    week_period,
    week_start,
    week_key,
    to_utc_naive,
)
from .constants import (
    Tier,
    TIER_RANK,
    TIERS_DESCENDING,
    CriteriaType,
    ResetPeriod,
    Metric,
    PointsFamily,
)
from .exceptions import (
    BadgeEngineError,
    UnknownCriteriaError,
    UnknownMetricError,
    InvalidConditionError,
    InvalidThresholdsError,
    ProgressConflictError,
)
from .locks import KeyedLocks, progress_locks, award_locks
from .repository import BaseRepository
from .unit_of_work import commit_with_retry, CONFLICT_ERRORS

__all__ = [
    # geo
    "haversine_m",
    "distance_between",
    "decode_start_point",
    "EARTH_RADIUS_M",
    # periods
    "Period",
    "NO_PERIOD",
    "resolve_period",
    "week_period",
    "week_start",
    "week_key",
    "to_utc_naive",
    # constants
    "Tier",
    "TIER_RANK",
    "TIERS_DESCENDING",
    "CriteriaType",
    "ResetPeriod",
    "Metric",
    "PointsFamily",
    # exceptions
    "BadgeEngineError",
    "UnknownCriteriaError",
    "UnknownMetricError",
    "InvalidConditionError",
    "InvalidThresholdsError",
    "ProgressConflictError",
    # locks
    "KeyedLocks",
    "progress_locks",
    "award_locks",
    # repository
    "BaseRepository",
    # unit of work
    "commit_with_retry",
    "CONFLICT_ERRORS",
]
