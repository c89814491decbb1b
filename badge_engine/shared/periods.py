"""
Reset period resolution.

This is the SINGLE SOURCE OF TRUTH for week boundaries.
Weeks run Monday 00:00:00.000 UTC through Sunday 23:59:59.999 UTC;
a Sunday belongs to the week of the Monday before it. Every place that
groups data by week must go through resolve_period() or week_start().
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from .constants import ResetPeriod

WEEK = timedelta(days=7)
# Last representable instant of a period at millisecond precision
PERIOD_END_OFFSET = timedelta(milliseconds=1)

NO_PERIOD_KEY = "none"


@dataclass(frozen=True)
class Period:
    """Progress period. start/end are None for non-periodic badges."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def key(self) -> str:
        """Stable identifier, e.g. '2025-09-01' or 'none'."""
        if self.start is None:
            return NO_PERIOD_KEY
        return self.start.date().isoformat()

    @property
    def is_periodic(self) -> bool:
        return self.start is not None

    def contains(self, moment: datetime) -> bool:
        if self.start is None:
            return True
        moment = to_utc_naive(moment)
        return self.start <= moment <= self.end


NO_PERIOD = Period()


def to_utc_naive(moment: datetime) -> datetime:
    """
    Normalize a timestamp to naive UTC.

    Naive values are taken as UTC already; aware values are converted.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def week_start(moment: datetime | date) -> datetime:
    """
    Monday 00:00 UTC of the week containing `moment`.

    date.weekday() is 0 for Monday and 6 for Sunday, so Sunday
    steps back six days to the preceding Monday.
    """
    if isinstance(moment, datetime):
        day = to_utc_naive(moment).date()
    else:
        day = moment
    monday = day - timedelta(days=day.weekday())
    return datetime.combine(monday, time.min)


def week_period(moment: datetime | date) -> Period:
    """Week (Monday..Sunday) containing `moment`."""
    start = week_start(moment)
    return Period(start=start, end=start + WEEK - PERIOD_END_OFFSET)


def resolve_period(moment: datetime, reset_period: ResetPeriod | str) -> Period:
    """
    Resolve the progress period for a timestamp under a reset policy.

    Args:
        moment: Activity timestamp
        reset_period: 'none' or 'weekly'

    Returns:
        Period; NO_PERIOD for non-periodic badges
    """
    reset_period = ResetPeriod(reset_period)
    if reset_period is ResetPeriod.WEEKLY:
        return week_period(moment)
    return NO_PERIOD


def week_key(moment: datetime | date) -> str:
    """Period key of the week containing `moment`."""
    return week_period(moment).key
