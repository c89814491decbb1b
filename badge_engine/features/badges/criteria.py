"""
Criteria evaluators.

One evaluator per CriteriaType. Each turns (progress, activity, optional
history) into new progress, or None when the activity does not count for
the badge. Evaluators are pure: they never read or write the database.

Supported criteria:
- count: number of activities matching a condition ("start_hour < 7")
- cumulative: lifetime sum of a metric
- weekly_cumulative: sum of a metric over one week
- single_activity: best single-activity value; tiers judged per activity
- weekly_streak: consecutive active weeks ending at the latest active week
- unique_sports: number of distinct sports ever recorded
- weekly_count: number of distinct weeks with a matching activity
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime
from typing import Iterable, Optional, Sequence

from badge_engine.features.activities.schemas import ActivityRecord
from badge_engine.shared.constants import CriteriaType
from badge_engine.shared.exceptions import UnknownCriteriaError
from badge_engine.shared.periods import week_start, week_key, week_period, WEEK
from .metrics import (
    CUMULATIVE_METRICS,
    WEEKLY_CUMULATIVE_METRICS,
    SINGLE_ACTIVITY_METRICS,
    extract_metric,
    parse_condition,
    parse_metric,
)
from .types import BadgeCriteria, EvaluationResult, ProgressState


History = Optional[Sequence[ActivityRecord]]


class CriteriaEvaluator(ABC):
    """
    Base class for criteria evaluators.

    Subclasses set `criteria_type` and implement evaluate().
    Evaluators with `needs_history` receive every live activity
    of the user (the triggering one included).
    """

    criteria_type: CriteriaType
    needs_history: bool = False

    def validate(self, criteria: BadgeCriteria) -> None:
        """Raise if the badge definition cannot be evaluated."""
        pass

    @abstractmethod
    def evaluate(
        self,
        criteria: BadgeCriteria,
        progress: ProgressState,
        activity: ActivityRecord,
        history: History = None,
    ) -> Optional[EvaluationResult]:
        """
        Compute new progress.

        Args:
            criteria: Badge definition
            progress: Current progress (zero state if none stored)
            activity: Triggering activity
            history: All live activities of the user (history evaluators only)

        Returns:
            EvaluationResult, or None when progress is unchanged
        """
        pass


def _with_activity(history: History, activity: ActivityRecord) -> list[ActivityRecord]:
    """History with the triggering activity guaranteed present exactly once."""
    merged = [a for a in (history or []) if a.id != activity.id]
    merged.append(activity)
    return merged


def _counted_activities(
    criteria: BadgeCriteria,
    history: History,
    activity: ActivityRecord,
) -> list[ActivityRecord]:
    """Live activities of the badge's type that fall in its date window."""
    return [
        a for a in _with_activity(history, activity)
        if a.matches_type(criteria.activity_type_filter)
        and criteria.is_available_on(a.start_date_local)
    ]


def _recomputed(progress: ProgressState, activity: ActivityRecord, value: float) -> EvaluationResult:
    return EvaluationResult(
        progress=ProgressState(
            current_value=value,
            metadata=progress.metadata,
            last_activity_id=activity.id,
        ),
        tier_value=value,
    )


# =============================================================================
# Accumulating evaluators
#
# Totals are recomputed from the user's live activities on every run, so
# processing an activity again, in any order, never counts it twice.
# =============================================================================

class CountEvaluator(CriteriaEvaluator):
    """Number of activities that satisfy the badge condition."""

    criteria_type = CriteriaType.COUNT
    needs_history = True

    def validate(self, criteria: BadgeCriteria) -> None:
        parse_condition(criteria.condition)

    def evaluate(self, criteria, progress, activity, history=None):
        condition = parse_condition(criteria.condition)
        if not activity.matches_type(criteria.activity_type_filter):
            return None
        if not condition.matches(activity):
            return None

        matching = [a for a in _counted_activities(criteria, history, activity) if condition.matches(a)]
        return _recomputed(progress, activity, float(len(matching)))


class CumulativeEvaluator(CriteriaEvaluator):
    """Lifetime sum of a metric over the user's activities."""

    criteria_type = CriteriaType.CUMULATIVE
    allowed_metrics = CUMULATIVE_METRICS
    needs_history = True

    def validate(self, criteria: BadgeCriteria) -> None:
        parse_metric(criteria.metric, self.allowed_metrics)

    def in_scope(self, activities: list[ActivityRecord], activity: ActivityRecord) -> list[ActivityRecord]:
        return activities

    def evaluate(self, criteria, progress, activity, history=None):
        metric = parse_metric(criteria.metric, self.allowed_metrics)
        if not activity.matches_type(criteria.activity_type_filter):
            return None

        activities = self.in_scope(_counted_activities(criteria, history, activity), activity)
        value = sum(extract_metric(a, metric) for a in activities)
        return _recomputed(progress, activity, value)


class WeeklyCumulativeEvaluator(CumulativeEvaluator):
    """
    Same sum as cumulative, over the week of the triggering activity.

    Weekly cumulative badges always resolve to a weekly period, so the
    sum lands in that week's progress row.
    """

    criteria_type = CriteriaType.WEEKLY_CUMULATIVE
    allowed_metrics = WEEKLY_CUMULATIVE_METRICS

    def in_scope(self, activities, activity):
        week = week_period(activity.start_date_local)
        return [a for a in activities if week.contains(a.start_date_local)]


# =============================================================================
# Single activity
# =============================================================================

class SingleActivityEvaluator(CriteriaEvaluator):
    """
    Judges each activity on its own.

    current_value keeps the best value seen; the tier is decided by the
    triggering activity's value, so ordering of activities does not matter.
    """

    criteria_type = CriteriaType.SINGLE_ACTIVITY

    def validate(self, criteria: BadgeCriteria) -> None:
        parse_metric(criteria.metric, SINGLE_ACTIVITY_METRICS)

    def evaluate(self, criteria, progress, activity, history=None):
        metric = parse_metric(criteria.metric, SINGLE_ACTIVITY_METRICS)
        if not activity.matches_type(criteria.activity_type_filter):
            return None

        value = extract_metric(activity, metric)
        return EvaluationResult(
            progress=ProgressState(
                current_value=max(progress.current_value, value),
                metadata=progress.metadata,
                last_activity_id=activity.id,
            ),
            tier_value=value,
        )


# =============================================================================
# History-based evaluators
# =============================================================================

def weekly_hours(activities: Iterable[ActivityRecord]) -> dict[datetime, float]:
    """Moving hours per week, keyed by the week's Monday."""
    totals: dict[datetime, float] = defaultdict(float)
    for activity in activities:
        totals[week_start(activity.start_date_local)] += activity.moving_time_s / 3600
    return dict(totals)


def consecutive_week_streak(hours_by_week: dict[datetime, float]) -> int:
    """
    Length of the run of consecutive active weeks ending at the latest one.

    Weeks are walked newest first. Inactive weeks before the first active
    one are skipped; after that, an inactive week or any gap other than
    exactly 7 days ends the streak.

    Known fragility: the gap check is an exact 7-day difference between
    week starts. Week starts are UTC Mondays here, so the check holds, but
    week keys produced in local time across a DST change would not be
    exactly 7 days apart and would break the streak.
    """
    streak = 0
    last_week: Optional[datetime] = None

    for start in sorted(hours_by_week, reverse=True):
        if hours_by_week[start] <= 0:
            if streak > 0:
                break
            continue

        if last_week is None:
            streak = 1
        elif last_week - start == WEEK:
            streak += 1
        else:
            break
        last_week = start

    return streak


class WeeklyStreakEvaluator(CriteriaEvaluator):
    """Counts consecutive weeks with exercise, from the user's history."""

    criteria_type = CriteriaType.WEEKLY_STREAK
    needs_history = True

    def evaluate(self, criteria, progress, activity, history=None):
        activities = _with_activity(history, activity)
        streak = consecutive_week_streak(weekly_hours(activities))
        return EvaluationResult(
            progress=ProgressState(
                current_value=float(streak),
                metadata=progress.metadata,
                last_activity_id=activity.id,
            ),
            tier_value=float(streak),
        )


def sport_of(activity: ActivityRecord) -> str:
    """Sport type, falling back to the activity type."""
    return activity.sport_type or activity.activity_type


class UniqueSportsEvaluator(CriteriaEvaluator):
    """Number of distinct sports the user has ever recorded."""

    criteria_type = CriteriaType.UNIQUE_SPORTS
    needs_history = True

    def evaluate(self, criteria, progress, activity, history=None):
        sports = {sport_of(a) for a in _with_activity(history, activity)}
        if criteria.sports_list:
            sports &= set(criteria.sports_list)

        count = float(len(sports))
        return EvaluationResult(
            progress=ProgressState(
                current_value=count,
                metadata={**progress.metadata, "sports": sorted(sports)},
                last_activity_id=activity.id,
            ),
            tier_value=count,
        )


class WeeklyCountEvaluator(CriteriaEvaluator):
    """
    Number of distinct weeks with at least one matching activity.

    Counted week keys are kept in metadata['counted_weeks'] so a week
    is never counted twice.
    """

    criteria_type = CriteriaType.WEEKLY_COUNT

    def validate(self, criteria: BadgeCriteria) -> None:
        parse_condition(criteria.condition)

    def evaluate(self, criteria, progress, activity, history=None):
        if not activity.matches_type(criteria.activity_type_filter):
            return None
        if not parse_condition(criteria.condition).matches(activity):
            return None

        key = week_key(activity.start_date_local)
        counted = list(progress.metadata.get("counted_weeks", []))
        if key in counted:
            return None

        counted.append(key)
        value = float(len(counted))
        return EvaluationResult(
            progress=ProgressState(
                current_value=value,
                metadata={**progress.metadata, "counted_weeks": counted},
                last_activity_id=activity.id,
            ),
            tier_value=value,
        )


# =============================================================================
# Registry
# =============================================================================

EVALUATORS: dict[CriteriaType, CriteriaEvaluator] = {
    evaluator.criteria_type: evaluator
    for evaluator in (
        CountEvaluator(),
        CumulativeEvaluator(),
        WeeklyCumulativeEvaluator(),
        SingleActivityEvaluator(),
        WeeklyStreakEvaluator(),
        UniqueSportsEvaluator(),
        WeeklyCountEvaluator(),
    )
}

_missing = set(CriteriaType) - set(EVALUATORS)
if _missing:
    raise RuntimeError(f"No evaluator for criteria types: {sorted(m.value for m in _missing)}")


def get_evaluator(criteria_type: CriteriaType | str) -> CriteriaEvaluator:
    """
    Evaluator for a criteria type.

    Raises:
        UnknownCriteriaError: no evaluator is registered
    """
    try:
        return EVALUATORS[CriteriaType(criteria_type)]
    except (ValueError, KeyError):
        raise UnknownCriteriaError(f"No evaluator for criteria type {criteria_type!r}")
