"""
Tests for input validation.
"""

import pytest
import pandas as pd
from datetime import datetime, timedelta

from core.validation import (
    ValidationError,
    InvalidInputError,
    InsufficientDataError,
    validate_coordinates,
    validate_threshold,
    validate_positions,
    validate_positions_dataframe,
    validate_file_upload,
)


class TestValidateCoordinates:
    """Tests for validate_coordinates."""

    @pytest.mark.parametrize("lat,lon", [(0, 0), (-90, -180), (90, 180), (36.8, 10.18)])
    def test_valid(self, lat, lon):
        validate_coordinates(lat, lon)

    @pytest.mark.parametrize("lat,lon,field", [
        (90.01, 0, "latitude"),
        (0, -180.5, "longitude"),
        (None, 0, "latitude"),
        (0, "east", "longitude"),
        (True, 0, "latitude"),
    ])
    def test_invalid(self, lat, lon, field):
        with pytest.raises(InvalidInputError, match=field):
            validate_coordinates(lat, lon, "Sample")


class TestValidateThreshold:
    """Tests for validate_threshold."""

    def test_returns_float(self):
        assert validate_threshold(10) == 10.0

    @pytest.mark.parametrize("value", [0, -1, 24 * 60 + 1, float('nan')])
    def test_out_of_range(self, value):
        with pytest.raises(InvalidInputError):
            validate_threshold(value)


class TestValidatePositions:
    """Tests for validate_positions."""

    def test_valid_sequence_returned(self, make_positions):
        samples = make_positions([0, 5, 10])
        assert validate_positions(samples) is samples

    def test_too_few_samples(self, make_positions):
        with pytest.raises(InsufficientDataError) as excinfo:
            validate_positions(make_positions([0]))
        assert excinfo.value.sample_count == 1

    def test_error_hierarchy(self):
        assert issubclass(InvalidInputError, ValidationError)
        assert issubclass(InsufficientDataError, ValidationError)

    def test_mixed_naive_and_aware_timestamps(self, make_positions):
        samples = make_positions([0]) + make_positions([5], start=datetime(2024, 3, 5, 8, 0))
        with pytest.raises(InvalidInputError, match="naive"):
            validate_positions(samples)

    def test_error_names_offending_sample(self, make_positions):
        samples = make_positions([0, 5, 3])
        with pytest.raises(InvalidInputError, match=r"\[2\]"):
            validate_positions(samples)


class TestValidatePositionsDataframe:
    """Tests for validate_positions_dataframe."""

    def make_frame(self, **overrides):
        base = datetime(2024, 1, 1, 10, 0)
        data = {
            'latitude': [45.0, 45.1, 45.2],
            'longitude': [7.0, 7.1, 7.2],
            'time': [base, base + timedelta(minutes=1), base + timedelta(minutes=2)],
        }
        data.update(overrides)
        return pd.DataFrame(data)

    def test_valid_frame(self):
        df = self.make_frame()
        assert validate_positions_dataframe(df) is df

    def test_none(self):
        with pytest.raises(InvalidInputError):
            validate_positions_dataframe(None)

    def test_empty(self):
        with pytest.raises(InsufficientDataError):
            validate_positions_dataframe(pd.DataFrame())

    def test_missing_column(self):
        df = self.make_frame().drop(columns=['time'])
        with pytest.raises(InvalidInputError, match="Missing required columns"):
            validate_positions_dataframe(df)

    def test_invalid_latitude(self):
        with pytest.raises(InvalidInputError, match="latitude"):
            validate_positions_dataframe(self.make_frame(latitude=[45.0, 95.0, 45.2]))

    def test_nan_values(self):
        with pytest.raises(InvalidInputError, match="missing values"):
            validate_positions_dataframe(self.make_frame(longitude=[7.0, None, 7.2]))

    def test_unordered_times(self):
        base = datetime(2024, 1, 1, 10, 0)
        frame = self.make_frame(time=[base, base - timedelta(minutes=1), base])
        with pytest.raises(InvalidInputError, match="ascending"):
            validate_positions_dataframe(frame)

    def test_min_rows(self):
        df = self.make_frame().head(1)
        with pytest.raises(InsufficientDataError):
            validate_positions_dataframe(df)
        assert validate_positions_dataframe(df, min_rows=1) is df


class TestValidateFileUpload:
    """Tests for validate_file_upload."""

    def test_valid_gpx(self):
        validate_file_upload("morning.GPX", 2048)

    def test_missing_file(self):
        with pytest.raises(InvalidInputError, match="No file"):
            validate_file_upload(None)

    def test_wrong_extension(self):
        with pytest.raises(InvalidInputError, match="Invalid file type"):
            validate_file_upload("track.csv")

    def test_too_large(self):
        with pytest.raises(InvalidInputError, match="too large"):
            validate_file_upload("track.gpx", 11 * 1024 * 1024)
