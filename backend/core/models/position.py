"""
Position data models.

This module defines the raw position samples reported by vehicles and the
waypoints that make up a trip's recorded path.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Sequence

import pandas as pd


@dataclass(frozen=True)
class RawPosition:
    """
    A single observed position sample.

    Produced by the location-reporting mechanism and never modified once
    recorded.
    """
    vehicle_id: str
    license_plate: str
    latitude: float  # Decimal degrees (-90 to 90)
    longitude: float  # Decimal degrees (-180 to 180)
    timestamp: datetime

    @property
    def lat(self) -> float:
        return self.latitude

    @property
    def lon(self) -> float:
        return self.longitude

    def to_dict(self) -> Dict[str, Any]:
        """Convert position to dictionary for DataFrame creation."""
        return {
            'vehicle_id': self.vehicle_id,
            'license_plate': self.license_plate,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'time': self.timestamp,
        }


@dataclass(frozen=True)
class Waypoint:
    """A single point of a trip's recorded path."""
    lat: float
    lon: float
    timestamp: datetime

    @classmethod
    def from_position(cls, position: RawPosition) -> 'Waypoint':
        return cls(lat=position.latitude, lon=position.longitude, timestamp=position.timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return {'lat': self.lat, 'lon': self.lon, 'timestamp': self.timestamp}


def positions_to_dataframe(positions: Sequence[RawPosition]) -> pd.DataFrame:
    """
    Convert a list of positions to a pandas DataFrame.

    Args:
        positions: List of RawPosition objects

    Returns:
        pandas DataFrame with vehicle_id, license_plate, latitude, longitude
        and time columns
    """
    if not positions:
        return pd.DataFrame(columns=['vehicle_id', 'license_plate', 'latitude', 'longitude', 'time'])

    return pd.DataFrame([position.to_dict() for position in positions])


def dataframe_to_positions(df: pd.DataFrame,
                           vehicle_id: str = None,
                           license_plate: str = None) -> List[RawPosition]:
    """
    Convert a pandas DataFrame to a list of RawPosition objects.

    Args:
        df: DataFrame with latitude, longitude and time columns
        vehicle_id: Vehicle to assign when the frame has no vehicle_id column
        license_plate: Plate to assign when the frame has no license_plate column

    Returns:
        List of RawPosition objects in row order
    """
    positions = []

    for _, row in df.iterrows():
        timestamp = row['time']
        if isinstance(timestamp, pd.Timestamp):
            timestamp = timestamp.to_pydatetime()

        positions.append(RawPosition(
            vehicle_id=row['vehicle_id'] if 'vehicle_id' in df.columns else vehicle_id,
            license_plate=row['license_plate'] if 'license_plate' in df.columns else license_plate,
            latitude=float(row['latitude']),
            longitude=float(row['longitude']),
            timestamp=timestamp
        ))

    return positions
