"""
Badge-related database models.

Models:
- BadgeDefinition: Catalog entry (read-only to the engine)
- BadgeProgress: Progress per (user, badge, period)
- AwardedBadge: Highest tier a user holds for a badge
- UserBadgePoints: Cumulative badge points per user
"""

from datetime import datetime

from sqlalchemy import (
    Column, String, DateTime, Integer, Float, Boolean, JSON, UniqueConstraint,
)

from badge_engine.models.base import Base


class BadgeDefinition(Base):
    """
    Badge catalog entry.

    Managed by administrators out-of-band. Thresholds are in the unit of
    the badge's metric and must be strictly increasing.
    """

    __tablename__ = "badge_definitions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(64), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    emoji = Column(String(16), nullable=True)
    description = Column(String(500), nullable=True)

    # Criteria
    criteria_type = Column(String(32), nullable=False)
    metric = Column(String(32), nullable=True)
    condition = Column(String(100), nullable=True)        # e.g. "start_hour < 7"
    activity_type_filter = Column(String(50), nullable=True)
    sports_list = Column(JSON, nullable=True)             # unique_sports restriction

    # Thresholds
    bronze_threshold = Column(Float, nullable=False)
    silver_threshold = Column(Float, nullable=False)
    gold_threshold = Column(Float, nullable=False)

    reset_period = Column(String(16), nullable=False, default="none")
    points_family = Column(String(16), nullable=False, default="standard")

    # Availability
    active = Column(Boolean, nullable=False, default=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<BadgeDefinition {self.code} ({self.criteria_type})>"


class BadgeProgress(Base):
    """
    Progress of one user on one badge in one period.

    period_key is 'none' for non-periodic badges and the ISO date of the
    week's Monday for weekly ones. Rows of past periods are kept as history.
    The version column makes every update a compare-and-set.
    """

    __tablename__ = "badge_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", "period_key", name="uq_badge_progress_period"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False, index=True)
    badge_id = Column(Integer, nullable=False, index=True)

    period_key = Column(String(16), nullable=False, default="none")
    period_start = Column(DateTime, nullable=True)
    period_end = Column(DateTime, nullable=True)

    current_value = Column(Float, nullable=False, default=0.0)
    bronze_achieved = Column(Boolean, nullable=False, default=False)
    silver_achieved = Column(Boolean, nullable=False, default=False)
    gold_achieved = Column(Boolean, nullable=False, default=False)

    last_activity_id = Column(Integer, nullable=True)
    # "metadata" is reserved on declarative classes
    progress_metadata = Column("metadata", JSON, nullable=True)

    version = Column(Integer, nullable=False)
    last_updated = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return (
            f"<BadgeProgress user={self.user_id} badge={self.badge_id} "
            f"period={self.period_key} value={self.current_value}>"
        )


class AwardedBadge(Base):
    """
    Badge held by a user.

    One row per (user, badge) regardless of period. The tier only moves
    forward and rows are never deleted. points_awarded is the total granted
    for this badge so far, i.e. the point value of the current tier.
    """

    __tablename__ = "awarded_badges"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="uq_awarded_badge"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False, index=True)
    badge_id = Column(Integer, nullable=False, index=True)

    tier = Column(String(16), nullable=False)
    progress_value = Column(Float, nullable=False, default=0.0)
    points_awarded = Column(Integer, nullable=False, default=0)

    version = Column(Integer, nullable=False)
    earned_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<AwardedBadge user={self.user_id} badge={self.badge_id} {self.tier}>"


class UserBadgePoints(Base):
    """Cumulative badge points per user. Only ever changed by atomic increments."""

    __tablename__ = "user_badge_points"

    user_id = Column(String(36), primary_key=True)
    badge_points = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<UserBadgePoints user={self.user_id} points={self.badge_points}>"
