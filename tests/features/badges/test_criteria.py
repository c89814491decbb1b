"""
Tests for criteria evaluators.

Evaluators are pure, so these tests run on ActivityRecord snapshots
without a database.
"""

from datetime import datetime

import pytest

from badge_engine.features.badges.criteria import (
    EVALUATORS,
    consecutive_week_streak,
    get_evaluator,
    weekly_hours,
)
from badge_engine.features.badges.metrics import extract_metric, parse_condition
from badge_engine.features.badges.types import BadgeCriteria, ProgressState, Thresholds
from badge_engine.shared.constants import CriteriaType, Metric
from badge_engine.shared.exceptions import (
    InvalidConditionError,
    UnknownCriteriaError,
    UnknownMetricError,
)


def criteria_for(criteria_type, **kwargs) -> BadgeCriteria:
    defaults = dict(
        badge_id=1,
        code="test_badge",
        criteria_type=CriteriaType(criteria_type),
        thresholds=Thresholds(bronze=1, silver=2, gold=3),
    )
    defaults.update(kwargs)
    return BadgeCriteria(**defaults)


# =============================================================================
# Test Registry
# =============================================================================

class TestRegistry:
    """Tests for the evaluator registry."""

    def test_every_criteria_type_has_evaluator(self):
        """Each CriteriaType maps to exactly its evaluator."""
        assert set(EVALUATORS) == set(CriteriaType)
        for criteria_type, evaluator in EVALUATORS.items():
            assert evaluator.criteria_type is criteria_type

    def test_lookup_by_string(self):
        """Stored criteria type strings resolve."""
        assert get_evaluator("weekly_count").criteria_type is CriteriaType.WEEKLY_COUNT

    def test_unknown_type(self):
        """Unknown criteria types raise UnknownCriteriaError."""
        with pytest.raises(UnknownCriteriaError):
            get_evaluator("fastest_lap")


# =============================================================================
# Test Count
# =============================================================================

class TestCount:
    """Tests for count badges."""

    def test_counts_matching_history(self, make_record):
        """Early starts in the history are counted, late ones are not."""
        criteria = criteria_for("count", condition="start_hour < 7")
        history = [
            make_record(start_date_local=datetime(2025, 9, 1, 6, 0)),
            make_record(start_date_local=datetime(2025, 9, 2, 9, 0)),
            make_record(start_date_local=datetime(2025, 9, 3, 5, 45)),
        ]
        activity = make_record(start_date_local=datetime(2025, 9, 4, 6, 30))

        result = get_evaluator("count").evaluate(criteria, ProgressState(), activity, history)

        assert result.progress.current_value == 3
        assert result.tier_value == 3
        assert result.progress.last_activity_id == activity.id

    def test_non_matching_condition(self, make_record):
        """Late start does not count."""
        criteria = criteria_for("count", condition="start_hour < 7")
        activity = make_record(start_date_local=datetime(2025, 9, 3, 7, 0))
        assert get_evaluator("count").evaluate(criteria, ProgressState(), activity) is None

    def test_same_activity_not_counted_twice(self, make_record):
        """An activity already in the history is counted once."""
        criteria = criteria_for("count", condition="photo_count > 0")
        activity = make_record(photo_count=2)
        progress = ProgressState(current_value=1, last_activity_id=activity.id)

        result = get_evaluator("count").evaluate(criteria, progress, activity, [activity])

        assert result.progress.current_value == 1

    def test_type_filter_matches_sport_type(self, make_record):
        """Filter matches either activity_type or sport_type."""
        criteria = criteria_for("count", condition="distance_km >= 0", activity_type_filter="TrailRun")
        trail = make_record(sport_type="TrailRun")
        ride = make_record(activity_type="Ride", sport_type="Ride")

        assert get_evaluator("count").evaluate(criteria, ProgressState(), trail) is not None
        assert get_evaluator("count").evaluate(criteria, ProgressState(), ride) is None

    def test_condition_required(self):
        """Count badges without a condition are invalid."""
        with pytest.raises(InvalidConditionError):
            get_evaluator("count").validate(criteria_for("count"))


# =============================================================================
# Test Cumulative
# =============================================================================

class TestCumulative:
    """Tests for cumulative and weekly cumulative badges."""

    def test_sums_distance_km(self, make_record):
        """distance_km is meters / 1000 summed over the history."""
        criteria = criteria_for("cumulative", metric="distance_km")
        history = [make_record(distance_m=50_000)]
        result = get_evaluator("cumulative").evaluate(
            criteria, ProgressState(current_value=50), make_record(distance_m=60_000), history
        )
        assert result.progress.current_value == pytest.approx(110)

    def test_older_activity_again(self, make_record):
        """Re-evaluating an earlier activity leaves the total unchanged."""
        criteria = criteria_for("cumulative", metric="distance_km")
        first = make_record(distance_m=50_000)
        second = make_record(distance_m=60_000)
        progress = ProgressState(current_value=110, last_activity_id=second.id)

        result = get_evaluator("cumulative").evaluate(criteria, progress, first, [first, second])

        assert result.progress.current_value == pytest.approx(110)

    def test_history_of_other_types_ignored(self, make_record):
        """Only activities passing the type filter are summed."""
        criteria = criteria_for("cumulative", metric="distance_km", activity_type_filter="Run")
        history = [make_record(activity_type="Ride", sport_type="Ride", distance_m=80_000)]
        result = get_evaluator("cumulative").evaluate(
            criteria, ProgressState(), make_record(distance_m=10_000), history
        )
        assert result.progress.current_value == pytest.approx(10)

    def test_elevation_gain(self, make_record):
        """elevation_gain is in meters."""
        criteria = criteria_for("cumulative", metric="elevation_gain")
        result = get_evaluator("cumulative").evaluate(
            criteria, ProgressState(), make_record(elevation_gain_m=850)
        )
        assert result.tier_value == 850

    def test_filtered_out(self, make_record):
        """Activities of other types are ignored."""
        criteria = criteria_for("cumulative", metric="distance_km", activity_type_filter="Ride")
        assert get_evaluator("cumulative").evaluate(
            criteria, ProgressState(), make_record(distance_m=10_000)
        ) is None

    def test_unknown_metric(self):
        """Metrics outside the cumulative set are rejected."""
        with pytest.raises(UnknownMetricError):
            get_evaluator("cumulative").validate(criteria_for("cumulative", metric="calories_per_hour"))

    def test_weekly_cumulative_is_always_weekly(self):
        """Weekly cumulative badges resolve to weekly periods regardless of reset_period."""
        criteria = criteria_for("weekly_cumulative", metric="moving_time_hours")
        assert criteria.effective_reset_period.value == "weekly"

    def test_weekly_cumulative_hours(self, make_record):
        """Moving hours add up within the activity's week only."""
        criteria = criteria_for("weekly_cumulative", metric="moving_time_hours")
        history = [
            make_record(start_date_local=datetime(2025, 8, 31, 20), moving_time_s=7200),
            make_record(start_date_local=datetime(2025, 9, 1, 7), moving_time_s=5400),
        ]
        activity = make_record(start_date_local=datetime(2025, 9, 7, 21), moving_time_s=5400)

        result = get_evaluator("weekly_cumulative").evaluate(criteria, ProgressState(), activity, history)

        assert result.progress.current_value == pytest.approx(3.0)


# =============================================================================
# Test Single Activity
# =============================================================================

class TestSingleActivity:
    """Tests for single activity badges."""

    def test_calories_per_hour(self, make_record):
        """Calories per hour of moving time."""
        activity = make_record(calories=900, moving_time_s=5400)
        assert extract_metric(activity, Metric.CALORIES_PER_HOUR) == pytest.approx(600)

    def test_calories_per_hour_without_time(self, make_record):
        """No moving time gives 0 instead of dividing by zero."""
        assert extract_metric(make_record(calories=500), Metric.CALORIES_PER_HOUR) == 0.0

    def test_speed_kmh(self, make_record):
        """Average speed m/s converts to km/h."""
        assert extract_metric(make_record(avg_speed_mps=10), Metric.AVERAGE_SPEED_KMH) == pytest.approx(36)

    def test_keeps_best_but_judges_current(self, make_record):
        """Stored value is the maximum; the tier value is this activity's own."""
        criteria = criteria_for("single_activity", metric="average_speed_kmh")
        result = get_evaluator("single_activity").evaluate(
            criteria, ProgressState(current_value=40), make_record(avg_speed_mps=5)
        )
        assert result.progress.current_value == 40
        assert result.tier_value == pytest.approx(18)


# =============================================================================
# Test Weekly Streak
# =============================================================================

class TestWeeklyStreak:
    """Tests for weekly streak badges."""

    def test_consecutive_weeks(self, make_record):
        """Three back-to-back weeks make a streak of 3."""
        history = [
            make_record(start_date_local=datetime(2025, 8, 20), moving_time_s=3600),
            make_record(start_date_local=datetime(2025, 8, 27), moving_time_s=3600),
        ]
        activity = make_record(start_date_local=datetime(2025, 9, 7, 20, 0), moving_time_s=1800)

        result = get_evaluator("weekly_streak").evaluate(
            criteria_for("weekly_streak"), ProgressState(), activity, history
        )
        assert result.progress.current_value == 3

    def test_gap_breaks_streak(self):
        """A missing week ends the streak at the latest run."""
        hours = {
            datetime(2025, 8, 11): 1.0,
            datetime(2025, 8, 25): 1.0,
            datetime(2025, 9, 1): 2.0,
        }
        assert consecutive_week_streak(hours) == 2

    def test_empty_weeks_skipped_before_first_active(self):
        """Inactive newest weeks do not count and do not break."""
        hours = {datetime(2025, 9, 1): 1.0, datetime(2025, 9, 8): 0.0}
        assert consecutive_week_streak(hours) == 1

    def test_no_activity(self):
        """No history means no streak."""
        assert consecutive_week_streak({}) == 0

    def test_sunday_activity_stays_in_week(self, make_record):
        """Sunday activities are bucketed with the preceding Monday."""
        hours = weekly_hours([make_record(start_date_local=datetime(2025, 9, 7, 23, 0), moving_time_s=7200)])
        assert hours == {datetime(2025, 9, 1): 2.0}


# =============================================================================
# Test Unique Sports
# =============================================================================

class TestUniqueSports:
    """Tests for unique sports badges."""

    def test_duplicates_counted_once(self, make_record):
        """{Run, Run, Ride, Yoga} is 3 sports, not 4."""
        history = [
            make_record(activity_type="Run"),
            make_record(activity_type="Run"),
            make_record(activity_type="Ride"),
        ]
        activity = make_record(activity_type="Yoga")

        result = get_evaluator("unique_sports").evaluate(
            criteria_for("unique_sports"), ProgressState(), activity, history
        )
        assert result.progress.current_value == 3
        assert result.progress.metadata["sports"] == ["Ride", "Run", "Yoga"]

    def test_triggering_activity_not_double_counted(self, make_record):
        """The triggering activity may already be in history."""
        activity = make_record(activity_type="Swim")
        result = get_evaluator("unique_sports").evaluate(
            criteria_for("unique_sports"), ProgressState(), activity, [activity]
        )
        assert result.progress.current_value == 1

    def test_sports_list_restriction(self, make_record):
        """Only listed sports count when sports_list is set."""
        history = [make_record(activity_type="Run"), make_record(activity_type="Yoga")]
        criteria = criteria_for("unique_sports", sports_list=("Run", "Ride"))
        result = get_evaluator("unique_sports").evaluate(
            criteria, ProgressState(), make_record(activity_type="Ride"), history
        )
        assert result.progress.current_value == 2


# =============================================================================
# Test Weekly Count
# =============================================================================

class TestWeeklyCount:
    """Tests for weekly count badges."""

    def test_each_week_counted_once(self, make_record):
        """A second matching activity in the same week adds nothing."""
        criteria = criteria_for("weekly_count", condition="start_hour < 7")
        evaluator = get_evaluator("weekly_count")

        first = evaluator.evaluate(
            criteria, ProgressState(), make_record(start_date_local=datetime(2025, 9, 2, 6, 0))
        )
        assert first.progress.current_value == 1
        assert first.progress.metadata["counted_weeks"] == ["2025-09-01"]

        same_week = evaluator.evaluate(
            criteria, first.progress, make_record(start_date_local=datetime(2025, 9, 7, 5, 0))
        )
        assert same_week is None

        next_week = evaluator.evaluate(
            criteria, first.progress, make_record(start_date_local=datetime(2025, 9, 8, 5, 0))
        )
        assert next_week.progress.current_value == 2


# =============================================================================
# Test Conditions
# =============================================================================

class TestConditions:
    """Tests for condition expressions."""

    @pytest.mark.parametrize("expression", ["start_hour <7", " photo_count>=1 ", "distance_km == 42.2"])
    def test_valid(self, expression):
        """Whitespace around operators is optional."""
        parse_condition(expression)

    @pytest.mark.parametrize("expression", ["", "start_hour", "heart_rate > 150", "start_hour ~ 7"])
    def test_invalid(self, expression):
        """Malformed or unknown-field conditions are rejected."""
        with pytest.raises(InvalidConditionError):
            parse_condition(expression)
