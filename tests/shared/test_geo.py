"""
Tests for geographic helpers.

Tests the haversine distance and polyline start point decoding.
"""

import polyline
import pytest

from badge_engine.shared.geo import (
    EARTH_RADIUS_M,
    decode_start_point,
    distance_between,
    haversine_m,
)


# =============================================================================
# Test Haversine Distance
# =============================================================================

class TestHaversine:
    """Tests for haversine_m."""

    def test_same_point(self):
        """Distance between same point should be 0."""
        assert haversine_m(43.0, 76.0, 43.0, 76.0) == 0.0

    def test_earth_radius(self):
        """Mean Earth radius in meters."""
        assert EARTH_RADIUS_M == 6_371_000

    def test_small_distance(self):
        """0.001 degree latitude is about 111 meters."""
        dist = haversine_m(43.0, 76.0, 43.001, 76.0)
        assert 110 < dist < 112

    def test_symmetry(self):
        """Distance A->B should equal B->A."""
        assert haversine_m(43.0, 76.0, 44.0, 77.0) == pytest.approx(
            haversine_m(44.0, 77.0, 43.0, 76.0)
        )

    def test_one_degree_at_equator(self):
        """1 degree of longitude at the equator is about 111.2 km."""
        assert haversine_m(0.0, 0.0, 0.0, 1.0) == pytest.approx(111_195, rel=0.001)

    def test_distance_between_pairs(self):
        """distance_between takes (lat, lng) tuples."""
        assert distance_between((43.0, 76.0), (43.001, 76.0)) == haversine_m(43.0, 76.0, 43.001, 76.0)


# =============================================================================
# Test Polyline Start Point
# =============================================================================

class TestDecodeStartPoint:
    """Tests for decode_start_point."""

    def test_first_point(self):
        """Start point is the first decoded coordinate."""
        encoded = polyline.encode([(43.23895, 76.94547), (43.24, 76.95)])
        lat, lng = decode_start_point(encoded)
        assert lat == pytest.approx(43.23895)
        assert lng == pytest.approx(76.94547)

    @pytest.mark.parametrize("encoded", [None, ""])
    def test_missing_polyline(self, encoded):
        """Missing polyline gives no start point."""
        assert decode_start_point(encoded) is None

    def test_decode_failure(self):
        """Decoder errors give no start point instead of raising."""
        def broken(_):
            raise ValueError("corrupt")

        assert decode_start_point("abc", decode=broken) is None

    def test_empty_decode(self):
        """A polyline without points gives no start point."""
        assert decode_start_point("abc", decode=lambda _: []) is None
