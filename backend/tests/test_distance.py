"""
Tests for the geodesic distance estimator and shared calculations.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.calculations import (
    estimate_distance_km,
    haversine_distance_km,
    calculate_distance,
    meters_to_kilometers,
    kilometers_to_meters,
    minutes_between,
    ensure_utc,
    format_duration,
)
from core.models.position import Waypoint
from core.validation import InvalidInputError


class TestEstimateDistanceKm:
    """Tests for estimate_distance_km."""

    def test_empty_is_zero(self):
        assert estimate_distance_km([]) == 0

    def test_single_point_is_zero(self):
        assert estimate_distance_km([(48.85, 2.35)]) == 0

    def test_one_degree_of_latitude_at_equator(self):
        """(0,0) to (1,0) is about 111.19 km on a 6371 km sphere."""
        distance = estimate_distance_km([(0.0, 0.0), (1.0, 0.0)])
        assert distance == pytest.approx(111.19, rel=0.005)

    def test_symmetric_under_reversal(self):
        path = [(36.80, 10.18), (36.81, 10.20), (36.85, 10.19), (36.90, 10.25)]
        forward = estimate_distance_km(path)
        backward = estimate_distance_km(list(reversed(path)))
        assert forward == pytest.approx(backward, abs=1e-9)

    def test_sums_consecutive_segments_not_straight_line(self):
        """Going out and back covers twice the leg, not zero."""
        leg = estimate_distance_km([(0.0, 0.0), (1.0, 0.0)])
        round_trip = estimate_distance_km([(0.0, 0.0), (1.0, 0.0), (0.0, 0.0)])
        assert round_trip == pytest.approx(2 * leg)

    def test_non_decreasing_as_waypoints_are_appended(self):
        path = [(36.80, 10.18), (36.80, 10.18), (36.81, 10.20), (36.85, 10.19)]
        totals = [estimate_distance_km(path[:n]) for n in range(len(path) + 1)]
        assert totals == sorted(totals)
        assert all(t >= 0 for t in totals)

    def test_accepts_waypoints_and_dicts(self):
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        as_waypoints = [Waypoint(0.0, 0.0, ts), Waypoint(0.0, 1.0, ts)]
        as_dicts = [{'lat': 0.0, 'lon': 0.0}, {'lat': 0.0, 'lon': 1.0}]
        assert estimate_distance_km(as_waypoints) == pytest.approx(estimate_distance_km(as_dicts))

    def test_radius_scales_result(self):
        path = [(0.0, 0.0), (1.0, 0.0)]
        assert estimate_distance_km(path, radius_km=1.0) == pytest.approx(
            estimate_distance_km(path) / 6371.0
        )

    def test_geodesic_method_close_to_haversine(self):
        path = [(36.80, 10.18), (36.90, 10.25)]
        spherical = estimate_distance_km(path)
        ellipsoidal = estimate_distance_km(path, method="geodesic")
        assert ellipsoidal == pytest.approx(spherical, rel=0.01)

    def test_out_of_range_latitude_rejected(self):
        with pytest.raises(InvalidInputError, match="latitude"):
            estimate_distance_km([(0.0, 0.0), (91.0, 0.0)])

    def test_missing_longitude_rejected(self):
        with pytest.raises(InvalidInputError, match="longitude"):
            estimate_distance_km([{'lat': 0.0, 'lon': None}, {'lat': 1.0, 'lon': 0.0}])

    def test_nan_rejected(self):
        with pytest.raises(InvalidInputError):
            estimate_distance_km([(float('nan'), 0.0), (1.0, 0.0)])

    def test_unknown_method_rejected(self):
        with pytest.raises(InvalidInputError, match="method"):
            estimate_distance_km([(0.0, 0.0), (1.0, 0.0)], method="manhattan")


class TestPointDistances:
    """Tests for the two-point distance helpers."""

    def test_haversine_same_point_is_zero(self):
        assert haversine_distance_km(45.0, 7.0, 45.0, 7.0) == 0

    def test_haversine_quarter_meridian(self):
        """Equator to pole is a quarter of the circumference."""
        import math
        assert haversine_distance_km(0.0, 0.0, 90.0, 0.0) == pytest.approx(math.pi * 6371.0 / 2)

    def test_calculate_distance_in_meters(self):
        meters = calculate_distance(0.0, 0.0, 1.0, 0.0)
        assert meters == pytest.approx(110574, rel=0.001)

    def test_unit_conversions(self):
        assert meters_to_kilometers(1500) == 1.5
        assert kilometers_to_meters(2.25) == 2250


class TestTimeHelpers:
    """Tests for time helpers."""

    def test_minutes_between(self):
        start = datetime(2024, 1, 1, 10, 0)
        assert minutes_between(start, start + timedelta(minutes=90, seconds=30)) == pytest.approx(90.5)

    def test_ensure_utc_naive_assumed_utc(self):
        naive = datetime(2024, 1, 1, 10, 0)
        assert ensure_utc(naive) == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)

    def test_ensure_utc_converts_offset(self):
        plus_two = timezone(timedelta(hours=2))
        aware = datetime(2024, 1, 1, 12, 0, tzinfo=plus_two)
        converted = ensure_utc(aware)
        assert converted.tzinfo == timezone.utc
        assert converted.hour == 10

    @pytest.mark.parametrize("minutes,expected", [
        (0, "0h 0m"),
        (59.9, "0h 59m"),
        (65, "1h 5m"),
        (150, "2h 30m"),
        (-3, "0h 0m"),
    ])
    def test_format_duration(self, minutes, expected):
        assert format_duration(minutes) == expected
