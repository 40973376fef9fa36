"""
GPX file parsing and handling.

This module contains functions for loading raw vehicle positions from GPX
files, e.g. tracker exports uploaded after the fact.
"""

import os
import logging
from typing import List

import gpxpy
import gpxpy.gpx
import pandas as pd

from core.calculations import ensure_utc
from core.models.position import RawPosition, dataframe_to_positions
from core.validation import InvalidInputError, validate_positions_dataframe

logger = logging.getLogger(__name__)


def load_gpx_positions(gpx_file, vehicle_id: str, license_plate: str = "") -> List[RawPosition]:
    """
    Load and parse a GPX file into time-ordered raw positions.

    Track points without a timestamp cannot be placed in a trip and are
    skipped. Timestamps are normalized to UTC.

    Args:
        gpx_file: A file-like object or string containing GPX data
        vehicle_id: Vehicle the positions belong to
        license_plate: Display plate carried through to trips

    Returns:
        List of RawPosition sorted ascending by timestamp

    Raises:
        InvalidInputError: If parsing fails or the file holds no usable points
    """
    try:
        gpx = gpxpy.parse(gpx_file)
    except gpxpy.gpx.GPXException as e:
        raise InvalidInputError(f"Invalid GPX file format: {str(e)}") from e

    data = []
    skipped = 0
    for track in gpx.tracks:
        for segment in track.segments:
            for point in segment.points:
                if point.time is None:
                    skipped += 1
                    continue
                data.append({
                    'latitude': point.latitude,
                    'longitude': point.longitude,
                    'time': ensure_utc(point.time),
                })

    if skipped:
        logger.warning(f"Skipped {skipped} GPX track points without a timestamp")

    if not data:
        raise InvalidInputError("GPX file contains no timestamped track points")

    df = pd.DataFrame(data).sort_values('time', kind='stable').reset_index(drop=True)
    validate_positions_dataframe(df, f"GPX positions for vehicle {vehicle_id}", min_rows=1)

    positions = dataframe_to_positions(df, vehicle_id=vehicle_id, license_plate=license_plate)
    logger.info(f"Successfully loaded {len(positions)} positions from GPX for vehicle {vehicle_id}")
    return positions


def load_gpx_from_path(file_path: str, vehicle_id: str, license_plate: str = "") -> List[RawPosition]:
    """
    Load a GPX file from disk path.

    Args:
        file_path: Path to the GPX file
        vehicle_id: Vehicle the positions belong to
        license_plate: Display plate carried through to trips

    Returns:
        List of RawPosition sorted ascending by timestamp

    Raises:
        FileNotFoundError: If the file does not exist
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"GPX file not found: {file_path}")

    with open(file_path, 'r') as f:
        return load_gpx_positions(f, vehicle_id, license_plate)
