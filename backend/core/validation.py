"""
Input validation utilities for core functions.

This module provides the validation functions and the error taxonomy used to
keep corrupt samples out of trip segmentation. Validators raise; callers at
the library boundary turn the exception into an error result.
"""

import math
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence

import pandas as pd

from core.constants import (
    MIN_LATITUDE, MAX_LATITUDE, MIN_LONGITUDE, MAX_LONGITUDE,
    MIN_SAMPLES_FOR_TRIP, MAX_STATIONARY_THRESHOLD_MINUTES,
    MAX_UPLOAD_SIZE_BYTES, ALLOWED_UPLOAD_EXTENSIONS
)

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Custom exception for validation errors."""
    pass


class InvalidInputError(ValidationError):
    """A sample, parameter or upload is malformed."""
    pass


class InsufficientDataError(ValidationError):
    """Too few samples to build a trip. Recoverable: retry once more arrive."""

    def __init__(self, message: str, sample_count: int = 0):
        super().__init__(message)
        self.sample_count = sample_count


def _is_number(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return not math.isnan(float(value))
    except (TypeError, ValueError):
        return False


def validate_coordinates(lat: Any, lon: Any, context: str = "Coordinates") -> None:
    """
    Validate a latitude/longitude pair.

    Args:
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
        context: Context description for error messages

    Raises:
        InvalidInputError: If a value is missing, NaN or out of range
    """
    if not _is_number(lat):
        raise InvalidInputError(f"{context}: missing or non-numeric latitude ({lat!r})")
    if not _is_number(lon):
        raise InvalidInputError(f"{context}: missing or non-numeric longitude ({lon!r})")

    if not MIN_LATITUDE <= float(lat) <= MAX_LATITUDE:
        raise InvalidInputError(f"{context}: invalid latitude {lat} (must be -90 to 90)")
    if not MIN_LONGITUDE <= float(lon) <= MAX_LONGITUDE:
        raise InvalidInputError(f"{context}: invalid longitude {lon} (must be -180 to 180)")


def validate_threshold(stationary_threshold_minutes: Any) -> float:
    """
    Validate the stationary gap threshold.

    Returns:
        The threshold as a float number of minutes

    Raises:
        InvalidInputError: If the threshold is not a positive number of minutes
    """
    if not _is_number(stationary_threshold_minutes):
        raise InvalidInputError(
            f"Stationary threshold must be a number, got {stationary_threshold_minutes!r}"
        )

    threshold = float(stationary_threshold_minutes)
    if not 0 < threshold <= MAX_STATIONARY_THRESHOLD_MINUTES:
        raise InvalidInputError(
            f"Stationary threshold must be 0-{MAX_STATIONARY_THRESHOLD_MINUTES} minutes, got {threshold}"
        )
    return threshold


def validate_positions(positions: Sequence[Any], context: str = "Positions") -> Sequence[Any]:
    """
    Validate a time-ordered sequence of raw positions for one vehicle.

    Checks every sample for usable coordinates and a timestamp, that
    timestamps never go backwards, and that all samples belong to the
    same vehicle.

    Args:
        positions: Sequence of RawPosition-like objects
        context: Context description for error messages

    Returns:
        The validated sequence, unchanged

    Raises:
        InsufficientDataError: If fewer than 2 samples are supplied
        InvalidInputError: If any sample is malformed or out of order
    """
    if positions is None:
        raise InvalidInputError(f"{context}: sequence is None")

    if len(positions) < MIN_SAMPLES_FOR_TRIP:
        raise InsufficientDataError(
            f"{context}: need at least {MIN_SAMPLES_FOR_TRIP} samples, got {len(positions)}",
            sample_count=len(positions)
        )

    vehicle_id = getattr(positions[0], 'vehicle_id', None)
    previous_time: Optional[datetime] = None

    for i, position in enumerate(positions):
        label = f"{context}[{i}]"
        validate_coordinates(
            getattr(position, 'latitude', None),
            getattr(position, 'longitude', None),
            label
        )

        timestamp = getattr(position, 'timestamp', None)
        if not isinstance(timestamp, datetime):
            raise InvalidInputError(f"{label}: missing or invalid timestamp ({timestamp!r})")

        if getattr(position, 'vehicle_id', None) != vehicle_id:
            raise InvalidInputError(
                f"{label}: vehicle {position.vehicle_id!r} differs from {vehicle_id!r}"
            )

        if previous_time is not None:
            try:
                out_of_order = timestamp < previous_time
            except TypeError as e:
                raise InvalidInputError(f"{label}: cannot compare naive and aware timestamps") from e
            if out_of_order:
                raise InvalidInputError(
                    f"{label}: timestamp {timestamp.isoformat()} is earlier than "
                    f"previous sample {previous_time.isoformat()}"
                )
        previous_time = timestamp

    logger.debug(f"{context}: Validation passed for {len(positions)} samples")
    return positions


def validate_positions_dataframe(df: pd.DataFrame,
                                 context: str = "Position data",
                                 min_rows: int = MIN_SAMPLES_FOR_TRIP) -> pd.DataFrame:
    """
    Validate a positions DataFrame has required columns and valid data.

    Args:
        df: DataFrame to validate
        context: Context description for error messages
        min_rows: Minimum number of rows required

    Returns:
        Validated DataFrame

    Raises:
        ValidationError: If validation fails
    """
    if df is None:
        raise InvalidInputError(f"{context}: DataFrame is None")

    if df.empty:
        raise InsufficientDataError(f"{context}: DataFrame is empty", sample_count=0)

    required_columns = ['latitude', 'longitude', 'time']
    missing_columns = [col for col in required_columns if col not in df.columns]

    if missing_columns:
        raise InvalidInputError(f"{context}: Missing required columns: {missing_columns}")

    for col in required_columns:
        if df[col].isna().any():
            nan_count = df[col].isna().sum()
            raise InvalidInputError(f"{context}: {nan_count} missing values in {col} column")

    if not df['latitude'].between(MIN_LATITUDE, MAX_LATITUDE).all():
        invalid_count = (~df['latitude'].between(MIN_LATITUDE, MAX_LATITUDE)).sum()
        raise InvalidInputError(f"{context}: {invalid_count} invalid latitude values (must be -90 to 90)")

    if not df['longitude'].between(MIN_LONGITUDE, MAX_LONGITUDE).all():
        invalid_count = (~df['longitude'].between(MIN_LONGITUDE, MAX_LONGITUDE)).sum()
        raise InvalidInputError(f"{context}: {invalid_count} invalid longitude values (must be -180 to 180)")

    if not df['time'].is_monotonic_increasing:
        raise InvalidInputError(f"{context}: timestamps are not in ascending order")

    if len(df) < min_rows:
        raise InsufficientDataError(
            f"{context}: Need at least {min_rows} data points, got {len(df)}",
            sample_count=len(df)
        )

    logger.debug(f"{context}: Validation passed for {len(df)} data points")
    return df


def validate_file_upload(filename: Optional[str], size: Optional[int] = None) -> None:
    """
    Validate an uploaded file before processing.

    Args:
        filename: Name of the uploaded file
        size: Size of the upload in bytes, if known

    Raises:
        InvalidInputError: If file validation fails
    """
    if not filename:
        raise InvalidInputError("No file uploaded")

    suffix = Path(filename).suffix.lower()
    if suffix not in ALLOWED_UPLOAD_EXTENSIONS:
        raise InvalidInputError(f"Invalid file type: {suffix or 'none'} (expected .gpx)")

    if size is not None and size > MAX_UPLOAD_SIZE_BYTES:
        raise InvalidInputError(
            f"File too large: {size / 1024 / 1024:.1f}MB "
            f"(max {MAX_UPLOAD_SIZE_BYTES / 1024 / 1024:.0f}MB)"
        )

    logger.debug(f"File validation passed: {filename}")
