"""
Tests for GroupActivityService.

Activities are stored with polylines built by polyline.encode around
a shared trailhead.
"""

from datetime import datetime, timedelta

import polyline
import pytest

from badge_engine.features.badges import AwardedBadgeRepository, TierAwarder
from badge_engine.features.group_activity import GroupActivityService

NOW = datetime(2025, 9, 6, 12, 0)
TRAILHEAD = (43.2, 76.9)


def route_from(meters_north: float = 0.0) -> str:
    start = (TRAILHEAD[0] + meters_north / 111_195, TRAILHEAD[1])
    return polyline.encode([start, (start[0] + 0.01, start[1] + 0.01)])


@pytest.fixture
async def pack_animal(add_badge):
    return await add_badge(
        code="pack_animal",
        name="Pack Animal",
        criteria_type="single_activity",
        points_family="group",
        bronze_threshold=2,
        silver_threshold=3,
        gold_threshold=6,
    )


@pytest.fixture
def add_group_activity(add_activity):
    async def _add(user_id, minutes=0, meters=0.0, **kwargs):
        defaults = dict(
            user_id=user_id,
            start_date_local=NOW - timedelta(hours=4) + timedelta(minutes=minutes),
            elapsed_time_s=3600,
            summary_polyline=route_from(meters),
        )
        defaults.update(kwargs)
        return await add_activity(**defaults)
    return _add


async def points_of(db, user_id) -> int:
    return await AwardedBadgeRepository(db).get_user_badge_points(user_id)


# =============================================================================
# Test Detection
# =============================================================================

class TestDetectAndAward:
    """Tests for a detection run."""

    async def test_pair_gets_bronze(self, db, pack_animal, add_group_activity):
        """Two users starting together both get bronze (+3)."""
        badge_id = pack_animal.id
        await add_group_activity("alice")
        await add_group_activity("bob", minutes=2, meters=50)

        result = await GroupActivityService(db).detect_and_award(24, now=NOW)

        assert result.success
        assert result.activities_scanned == 2
        assert result.activities_located == 2
        assert result.groups == 1
        assert result.awarded == 2
        for user in ("alice", "bob"):
            award = await AwardedBadgeRepository(db).get_award(user, badge_id)
            assert award.tier == "bronze"
            assert await points_of(db, user) == 3

    async def test_six_users_get_gold_worth_15(self, db, pack_animal, add_group_activity):
        """A group of six earns gold at the group scale."""
        for i in range(6):
            await add_group_activity(f"user-{i}", minutes=i, meters=10 * i)

        result = await GroupActivityService(db).detect_and_award(24, now=NOW)

        assert result.groups == 1
        assert result.awarded == 6
        assert await points_of(db, "user-5") == 15

    async def test_rerun_is_idempotent(self, db, pack_animal, add_group_activity):
        """Running twice over the same window adds no points the second time."""
        await add_group_activity("alice")
        await add_group_activity("bob", minutes=1)
        service = GroupActivityService(db)

        await service.detect_and_award(24, now=NOW)
        second = await service.detect_and_award(24, now=NOW)

        assert second.awarded == 0
        assert second.unchanged == 2
        assert await points_of(db, "alice") == 3

    async def test_bigger_group_upgrades(self, db, pack_animal, add_group_activity):
        """A later, bigger group upgrades bronze to silver for the delta only."""
        await add_group_activity("alice", minutes=-600)
        await add_group_activity("bob", minutes=-599)
        await GroupActivityService(db).detect_and_award(24, now=NOW)

        for user in ("alice", "bob", "carol"):
            await add_group_activity(user, minutes=0)
        result = await GroupActivityService(db).detect_and_award(24, now=NOW)

        assert result.upgraded == 2
        assert result.awarded == 1
        assert await points_of(db, "alice") == 6
        assert await points_of(db, "carol") == 6

    async def test_filters(self, db, pack_animal, add_group_activity):
        """Short, old, deleted and polyline-less activities never group."""
        await add_group_activity("alice")
        await add_group_activity("bob", elapsed_time_s=600)
        await add_group_activity("carol", minutes=-2000)
        await add_group_activity("dave", deleted_at=NOW)
        await add_group_activity("erin", summary_polyline=None)

        result = await GroupActivityService(db).detect_and_award(24, now=NOW)

        assert result.activities_scanned == 2
        assert result.activities_located == 1
        assert result.groups == 0
        assert await points_of(db, "alice") == 0

    async def test_dry_run_writes_nothing(self, db, pack_animal, add_group_activity):
        """Dry run reports would-be awards only."""
        badge_id = pack_animal.id
        await add_group_activity("alice")
        await add_group_activity("bob", minutes=1)

        result = await GroupActivityService(db).detect_and_award(24, dry_run=True, now=NOW)

        assert result.dry_run
        assert result.awarded == 2
        assert await AwardedBadgeRepository(db).get_award("alice", badge_id) is None
        assert await points_of(db, "alice") == 0

    async def test_missing_badge(self, db, add_group_activity):
        """Without the group badge in the catalog nothing is awarded."""
        await add_group_activity("alice")
        result = await GroupActivityService(db).detect_and_award(24, now=NOW)
        assert not result.success
        assert result.groups == 0


# =============================================================================
# Test Failure Isolation
# =============================================================================

class TestFailureIsolation:
    """One member's failure does not block the others."""

    async def test_store_failure_for_one_user(self, db, pack_animal, add_group_activity, monkeypatch):
        """A write error for one user is counted; the rest are awarded."""
        await add_group_activity("alice")
        await add_group_activity("bob", minutes=1)
        await add_group_activity("carol", minutes=2)

        real_award = TierAwarder.award

        async def flaky_award(self, user_id, criteria, value, dry_run=False):
            if user_id == "bob":
                raise RuntimeError("database unavailable")
            return await real_award(self, user_id, criteria, value, dry_run)

        monkeypatch.setattr(TierAwarder, "award", flaky_award)

        result = await GroupActivityService(db).detect_and_award(24, now=NOW)

        assert result.failed == 1
        assert result.awarded == 2
        assert await points_of(db, "alice") == 6
        assert await points_of(db, "bob") == 0
        assert await points_of(db, "carol") == 6

    async def test_decode_failure_excludes_only_that_activity(self, db, pack_animal, add_group_activity):
        """An undecodable polyline removes just that activity."""
        await add_group_activity("alice")
        await add_group_activity("bob", minutes=1)
        await add_group_activity("carol", minutes=2, summary_polyline="corrupt")

        def decode(encoded):
            if encoded == "corrupt":
                raise ValueError("bad polyline")
            return polyline.decode(encoded)

        result = await GroupActivityService(db, decode=decode).detect_and_award(24, now=NOW)

        assert result.activities_located == 2
        assert result.groups == 1
        assert await points_of(db, "alice") == 3
        assert await points_of(db, "carol") == 0
