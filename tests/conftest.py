"""
Shared test fixtures.

Store-backed tests get a fresh in-memory SQLite database per test.
"""

from datetime import datetime
from itertools import count

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from badge_engine.models import Base, load_all_models
from badge_engine.features.activities import Activity, ActivityRecord
from badge_engine.features.badges import BadgeDefinition

load_all_models()


@pytest_asyncio.fixture
async def db():
    """Async session bound to an empty in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def make_record():
    """Factory for in-memory ActivityRecord snapshots with unique ids."""
    ids = count(1)

    def _make(**kwargs) -> ActivityRecord:
        defaults = dict(
            id=next(ids),
            user_id="user-1",
            start_date_local=datetime(2025, 9, 3, 8, 0),
            activity_type="Run",
        )
        defaults.update(kwargs)
        return ActivityRecord(**defaults)

    return _make


@pytest.fixture
def add_activity(db):
    """Insert an Activity row and return it."""

    async def _add(**kwargs) -> Activity:
        defaults = dict(
            user_id="user-1",
            activity_type="Run",
            start_date_local=datetime(2025, 9, 3, 8, 0),
            distance_m=0.0,
            moving_time_s=1800,
            elapsed_time_s=1800,
        )
        defaults.update(kwargs)
        activity = Activity(**defaults)
        db.add(activity)
        await db.commit()
        return activity

    return _add


@pytest.fixture
def add_badge(db):
    """Insert a BadgeDefinition row and return it."""

    async def _add(**kwargs) -> BadgeDefinition:
        defaults = dict(
            name=kwargs.get("code", "badge"),
            bronze_threshold=1,
            silver_threshold=2,
            gold_threshold=3,
        )
        defaults.update(kwargs)
        badge = BadgeDefinition(**defaults)
        db.add(badge)
        await db.commit()
        return badge

    return _add
