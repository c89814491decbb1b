"""
Group activity clustering.

Pure functions: no database, no clock. Activities are located by the
first point of their summary polyline, matched pairwise on start time and
start point distance, and grouped by single linkage (an activity joins a
group when it matches ANY member, not just the first one).
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

import polyline

from badge_engine.features.activities import ActivityRecord
from badge_engine.features.badges.tiers import highest_reached_tier
from badge_engine.features.badges.types import Thresholds
from badge_engine.shared.constants import Tier
from badge_engine.shared.geo import Coordinates, PolylineDecoder, decode_start_point, distance_between
from .config import GroupDetectionConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupedActivity:
    """Activity with the coordinates and time it is matched on."""
    activity: ActivityRecord
    coordinates: Coordinates

    @property
    def user_id(self) -> str:
        return self.activity.user_id

    @property
    def started_at(self) -> datetime:
        return self.activity.start_date_local


GROUP_THRESHOLDS = Thresholds(
    bronze=GroupDetectionConfig.BRONZE_GROUP_SIZE,
    silver=GroupDetectionConfig.SILVER_GROUP_SIZE,
    gold=GroupDetectionConfig.GOLD_GROUP_SIZE,
)


def locate_activities(
    activities: Iterable[ActivityRecord],
    decode: PolylineDecoder = polyline.decode,
) -> list[GroupedActivity]:
    """
    Attach start coordinates to activities.

    Activities without a usable polyline are left out and logged; they
    never abort the batch.
    """
    located = []
    for activity in activities:
        coordinates = decode_start_point(activity.summary_polyline, decode)
        if coordinates is None:
            logger.warning(f"Activity {activity.id} has no usable start point, excluded from grouping")
            continue
        located.append(GroupedActivity(activity=activity, coordinates=coordinates))
    return located


def activities_match(
    a: GroupedActivity,
    b: GroupedActivity,
    time_window=GroupDetectionConfig.TIME_WINDOW,
    distance_window_m: float = GroupDetectionConfig.DISTANCE_WINDOW_M,
) -> bool:
    """True if both started within the time window and distance window."""
    if abs(a.started_at - b.started_at) > time_window:
        return False
    return distance_between(a.coordinates, b.coordinates) <= distance_window_m


def cluster_activities(located: list[GroupedActivity]) -> list[list[GroupedActivity]]:
    """
    Group located activities of distinct users.

    Each unassigned activity seeds a group; the remaining unassigned
    activities are scanned repeatedly and join when they match any
    current member and their user is not in the group yet, until a full
    pass adds nobody. Groups of one are dropped.

    Args:
        located: Activities, ideally ordered by start time

    Returns:
        Groups of two or more activities, each from a different user
    """
    groups = []
    assigned: set[int] = set()

    for i, seed in enumerate(located):
        if seed.activity.id in assigned:
            continue

        group = [seed]
        users = {seed.user_id}
        assigned.add(seed.activity.id)

        added = True
        while added:
            added = False
            for candidate in located[i + 1:]:
                if candidate.activity.id in assigned or candidate.user_id in users:
                    continue
                if any(activities_match(member, candidate) for member in group):
                    group.append(candidate)
                    users.add(candidate.user_id)
                    assigned.add(candidate.activity.id)
                    added = True

        if len(group) >= 2:
            groups.append(group)

    return groups


def tier_for_group_size(size: int, thresholds: Thresholds = GROUP_THRESHOLDS) -> Optional[Tier]:
    """Highest tier a group of `size` users earns, None below bronze."""
    return highest_reached_tier(size, thresholds)
