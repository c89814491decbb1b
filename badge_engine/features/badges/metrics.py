"""
Per-activity metric extraction and condition expressions.

Metrics convert raw activity fields into badge units
(kilometers, miles, hours, km/h, ...). Conditions are small
"<field> <op> <number>" expressions used by count-based badges,
e.g. "start_hour < 7" or "photo_count > 0".
"""

import operator
import re
from dataclasses import dataclass
from typing import Callable

from badge_engine.features.activities.schemas import ActivityRecord
from badge_engine.shared.constants import Metric, METERS_PER_MILE
from badge_engine.shared.exceptions import UnknownMetricError, InvalidConditionError


# =============================================================================
# Metrics
# =============================================================================

def calories_per_hour(activity: ActivityRecord) -> float:
    """Calories burned per hour of moving time (0 without moving time)."""
    hours = activity.moving_time_s / 3600
    return activity.calories / hours if hours > 0 else 0.0


METRIC_EXTRACTORS: dict[Metric, Callable[[ActivityRecord], float]] = {
    Metric.DISTANCE_KM: lambda a: a.distance_m / 1000,
    Metric.DISTANCE_MILES: lambda a: a.distance_m / METERS_PER_MILE,
    Metric.ELEVATION_GAIN: lambda a: a.elevation_gain_m,
    Metric.MOVING_TIME_HOURS: lambda a: a.moving_time_s / 3600,
    Metric.MOVING_TIME_MINUTES: lambda a: a.moving_time_s / 60,
    Metric.SUFFER_SCORE: lambda a: a.suffer_score,
    Metric.CALORIES_PER_HOUR: calories_per_hour,
    Metric.AVERAGE_SPEED_KMH: lambda a: a.avg_speed_mps * 3.6,
}

# Metrics accepted by each metric-based criteria type
CUMULATIVE_METRICS = frozenset({
    Metric.DISTANCE_KM,
    Metric.DISTANCE_MILES,
    Metric.ELEVATION_GAIN,
    Metric.MOVING_TIME_HOURS,
    Metric.MOVING_TIME_MINUTES,
    Metric.SUFFER_SCORE,
})
WEEKLY_CUMULATIVE_METRICS = frozenset({
    Metric.MOVING_TIME_HOURS,
    Metric.MOVING_TIME_MINUTES,
    Metric.DISTANCE_MILES,
    Metric.DISTANCE_KM,
    Metric.SUFFER_SCORE,
})
SINGLE_ACTIVITY_METRICS = frozenset({
    Metric.CALORIES_PER_HOUR,
    Metric.AVERAGE_SPEED_KMH,
    Metric.MOVING_TIME_MINUTES,
    Metric.DISTANCE_KM,
    Metric.ELEVATION_GAIN,
})


def parse_metric(name: str | None, allowed: frozenset[Metric]) -> Metric:
    """
    Validate a metric name against the metrics a criteria type supports.

    Raises:
        UnknownMetricError: name is missing, unknown or not allowed
    """
    try:
        metric = Metric(name)
    except ValueError:
        raise UnknownMetricError(f"Unknown metric: {name!r}")
    if metric not in allowed:
        raise UnknownMetricError(f"Metric {metric.value!r} is not supported here")
    return metric


def extract_metric(activity: ActivityRecord, metric: Metric) -> float:
    """Value of `metric` for a single activity."""
    return float(METRIC_EXTRACTORS[metric](activity))


# =============================================================================
# Conditions
# =============================================================================

CONDITION_FIELDS: dict[str, Callable[[ActivityRecord], float]] = {
    "start_hour": lambda a: a.start_date_local.hour,
    "photo_count": lambda a: a.photo_count,
    "distance_km": lambda a: a.distance_m / 1000,
    "moving_time_minutes": lambda a: a.moving_time_s / 60,
    "elevation_gain": lambda a: a.elevation_gain_m,
}

CONDITION_OPERATORS: dict[str, Callable[[float, float], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "==": operator.eq,
}

_CONDITION_RE = re.compile(r"^\s*([a-z_]+)\s*(<=|>=|==|<|>)\s*(-?\d+(?:\.\d+)?)\s*$")


@dataclass(frozen=True)
class Condition:
    """Parsed "<field> <op> <number>" expression."""
    field: str
    op: str
    value: float

    def matches(self, activity: ActivityRecord) -> bool:
        actual = CONDITION_FIELDS[self.field](activity)
        return CONDITION_OPERATORS[self.op](actual, self.value)


def parse_condition(expression: str | None) -> Condition:
    """
    Parse a condition expression.

    Raises:
        InvalidConditionError: missing expression, bad syntax or unknown field
    """
    if not expression:
        raise InvalidConditionError("Condition is required")

    match = _CONDITION_RE.match(expression)
    if not match:
        raise InvalidConditionError(f"Cannot parse condition: {expression!r}")

    field_name, op, value = match.groups()
    if field_name not in CONDITION_FIELDS:
        raise InvalidConditionError(f"Unknown condition field: {field_name!r}")

    return Condition(field=field_name, op=op, value=float(value))
