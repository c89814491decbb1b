"""
Activity model.

Activities are written by the ingestion side (webhook, sync, backfill);
the badge engine only reads them.
"""

from datetime import datetime

from sqlalchemy import Column, String, DateTime, Integer, Float, BigInteger, Text

from badge_engine.models.base import Base


class Activity(Base):
    """
    Normalized exercise activity.

    start_date is UTC; start_date_local is the athlete's wall-clock time
    stored without timezone, as delivered by Strava.
    """

    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False, index=True)

    # Source identifiers
    strava_activity_id = Column(BigInteger, unique=True, nullable=True)

    # Activity info
    name = Column(String(255), nullable=True)
    activity_type = Column(String(50), nullable=False)  # Run, Ride, Yoga, ...
    sport_type = Column(String(50), nullable=True)      # TrailRun, MountainBikeRide, ...
    start_date = Column(DateTime, nullable=True)
    start_date_local = Column(DateTime, nullable=False, index=True)

    # Core metrics
    distance_m = Column(Float, nullable=True)
    moving_time_s = Column(Integer, nullable=True)
    elapsed_time_s = Column(Integer, nullable=True)
    elevation_gain_m = Column(Float, nullable=True)
    avg_speed_mps = Column(Float, nullable=True)  # meters per second
    calories = Column(Float, nullable=True)
    suffer_score = Column(Float, nullable=True)   # Strava relative effort
    photo_count = Column(Integer, default=0)

    # Encoded summary polyline (Google polyline format)
    summary_polyline = Column(Text, nullable=True)

    # Soft delete
    deleted_at = Column(DateTime, nullable=True)

    synced_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Activity {self.id} {self.activity_type} user={self.user_id}>"
