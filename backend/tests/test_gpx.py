"""
Tests for loading vehicle positions from GPX files.
"""

import io
from datetime import datetime, timezone

import pytest

from core.gpx import load_gpx_positions, load_gpx_from_path
from core.models.position import positions_to_dataframe, dataframe_to_positions
from core.validation import InvalidInputError

GPX_TEMPLATE = """<gpx version="1.1" creator="fleet-tests" xmlns="http://www.topografix.com/GPX/1/1">
  <trk>
    <name>Delivery run</name>
    <trkseg>
{points}
    </trkseg>
  </trk>
</gpx>
"""


def make_gpx(points):
    rows = []
    for lat, lon, time in points:
        time_tag = f"<time>{time}</time>" if time else ""
        rows.append(f'      <trkpt lat="{lat}" lon="{lon}">{time_tag}</trkpt>')
    return GPX_TEMPLATE.format(points="\n".join(rows))


class TestLoadGpxPositions:
    """Tests for load_gpx_positions."""

    def test_loads_points_in_time_order(self):
        gpx = make_gpx([
            (36.80, 10.18, "2024-03-05T08:05:00Z"),
            (36.79, 10.17, "2024-03-05T08:00:00Z"),
            (36.81, 10.19, "2024-03-05T08:10:00Z"),
        ])
        positions = load_gpx_positions(io.StringIO(gpx), "TRK-001", "AB-123-CD")

        assert len(positions) == 3
        assert [p.latitude for p in positions] == [36.79, 36.80, 36.81]
        assert positions[0].timestamp == datetime(2024, 3, 5, 8, 0, tzinfo=timezone.utc)
        assert all(p.vehicle_id == "TRK-001" for p in positions)
        assert all(p.license_plate == "AB-123-CD" for p in positions)

    def test_offsets_normalized_to_utc(self):
        gpx = make_gpx([(36.80, 10.18, "2024-03-05T10:00:00+02:00")])
        positions = load_gpx_positions(io.StringIO(gpx), "TRK-001")

        assert positions[0].timestamp == datetime(2024, 3, 5, 8, 0, tzinfo=timezone.utc)
        assert positions[0].timestamp.utcoffset().total_seconds() == 0

    def test_points_without_time_are_skipped(self):
        gpx = make_gpx([
            (36.80, 10.18, "2024-03-05T08:00:00Z"),
            (36.81, 10.19, None),
            (36.82, 10.20, "2024-03-05T08:02:00Z"),
        ])
        positions = load_gpx_positions(io.StringIO(gpx), "TRK-001")
        assert [p.latitude for p in positions] == [36.80, 36.82]

    def test_no_timestamped_points(self):
        gpx = make_gpx([(36.80, 10.18, None)])
        with pytest.raises(InvalidInputError, match="no timestamped"):
            load_gpx_positions(io.StringIO(gpx), "TRK-001")

    def test_invalid_xml(self):
        with pytest.raises(InvalidInputError, match="Invalid GPX"):
            load_gpx_positions(io.StringIO("<gpx><trk>"), "TRK-001")


class TestLoadGpxFromPath:
    """Tests for load_gpx_from_path."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_gpx_from_path(str(tmp_path / "missing.gpx"), "TRK-001")

    def test_reads_file(self, tmp_path):
        path = tmp_path / "run.gpx"
        path.write_text(make_gpx([
            (36.80, 10.18, "2024-03-05T08:00:00Z"),
            (36.81, 10.19, "2024-03-05T08:01:00Z"),
        ]))
        positions = load_gpx_from_path(str(path), "TRK-009")
        assert len(positions) == 2
        assert positions[1].vehicle_id == "TRK-009"


class TestPositionFrames:
    """Tests for converting positions to and from DataFrames."""

    def test_positions_to_dataframe(self, make_positions):
        df = positions_to_dataframe(make_positions([0, 5]))
        assert list(df.columns) == ['vehicle_id', 'license_plate', 'latitude', 'longitude', 'time']
        assert len(df) == 2

    def test_empty_positions_give_empty_frame(self):
        df = positions_to_dataframe([])
        assert df.empty
        assert 'time' in df.columns

    def test_frame_back_to_positions(self, make_positions):
        samples = make_positions([0, 5, 10])
        assert dataframe_to_positions(positions_to_dataframe(samples)) == samples
