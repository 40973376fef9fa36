"""
Trip data models.

This module defines the trips reconstructed from raw position samples. A trip
is immutable once created; correcting one means deleting it and segmenting
the positions again.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from core.calculations import ensure_utc
from core.constants import DEFAULT_ORIGIN_NAME, DEFAULT_DESTINATION_NAME, UNKNOWN_PLACE_NAME
from core.models.position import Waypoint


class TripStatus(str, Enum):
    COMPLETED = "Completed"
    IN_PROGRESS = "In progress"
    CANCELLED = "Cancelled"


@dataclass(frozen=True)
class NamedPoint:
    """A trip endpoint: a place name plus the coordinates of a waypoint."""
    name: str
    lat: float
    lon: float
    address: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'address': self.address,
            'coordinates': {'lat': self.lat, 'lon': self.lon},
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'NamedPoint':
        data = data or {}
        coordinates = data.get('coordinates') or {}
        return cls(
            name=data.get('name') or UNKNOWN_PLACE_NAME,
            lat=coordinates.get('lat', 0.0),
            lon=coordinates.get('lon', 0.0),
            address=data.get('address') or ""
        )


def _new_trip_id() -> str:
    return uuid.uuid4().hex


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Trip:
    """
    Represents one continuous movement episode of a vehicle.

    The gap between any two consecutive waypoints is below the stationary
    threshold used to build the trip. A trip has at least two waypoints,
    except an instant trip: one sample isolated between two stationary gaps,
    with zero distance and zero duration. Equality ignores the generated id and
    creation time, so segmenting the same samples twice gives equal trips.
    """
    vehicle_id: str
    license_plate: str

    # Time boundaries (first and last waypoint)
    start_time: datetime
    end_time: datetime

    origin: NamedPoint
    destination: NamedPoint

    distance_km: float  # Sum of consecutive great-circle distances
    duration_minutes: float

    waypoints: Tuple[Waypoint, ...]
    status: TripStatus = TripStatus.COMPLETED

    id: str = field(default_factory=_new_trip_id, compare=False)
    created_at: datetime = field(default_factory=_utc_now, compare=False)

    @property
    def waypoint_count(self) -> int:
        return len(self.waypoints)

    @property
    def duration_hours(self) -> float:
        """Duration in hours."""
        return self.duration_minutes / 60.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert trip to its stored document form."""
        return {
            'id': self.id,
            'vehicle_id': self.vehicle_id,
            'license_plate': self.license_plate,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'origin': self.origin.to_dict(),
            'destination': self.destination.to_dict(),
            'distance_km': self.distance_km,
            'duration_minutes': self.duration_minutes,
            'status': self.status.value,
            'waypoints': [waypoint.to_dict() for waypoint in self.waypoints],
            'created_at': self.created_at,
        }


def trip_from_dict(document: Dict[str, Any]) -> Trip:
    """
    Rebuild a Trip from its stored document form.

    Args:
        document: Dictionary as produced by Trip.to_dict()

    Returns:
        Trip object
    """
    extra = {}
    if document.get('id'):
        extra['id'] = document['id']
    if document.get('created_at'):
        extra['created_at'] = document['created_at']

    return Trip(
        vehicle_id=document['vehicle_id'],
        license_plate=document.get('license_plate', ''),
        start_time=document['start_time'],
        end_time=document['end_time'],
        origin=NamedPoint.from_dict(document.get('origin')),
        destination=NamedPoint.from_dict(document.get('destination')),
        distance_km=float(document.get('distance_km', 0.0)),
        duration_minutes=float(document.get('duration_minutes', 0.0)),
        waypoints=tuple(
            Waypoint(lat=w['lat'], lon=w['lon'], timestamp=w['timestamp'])
            for w in document.get('waypoints', [])
        ),
        status=TripStatus(document.get('status', TripStatus.COMPLETED.value)),
        **extra
    )


def make_endpoints(waypoints: Sequence[Waypoint]) -> Tuple[NamedPoint, NamedPoint]:
    """Build the default origin/destination for a trip's waypoints."""
    first, last = waypoints[0], waypoints[-1]
    return (
        NamedPoint(name=DEFAULT_ORIGIN_NAME, lat=first.lat, lon=first.lon),
        NamedPoint(name=DEFAULT_DESTINATION_NAME, lat=last.lat, lon=last.lon),
    )


def trips_to_dataframe(trips: List[Trip]) -> pd.DataFrame:
    """
    Convert a list of trips to a pandas DataFrame.

    Args:
        trips: List of Trip objects

    Returns:
        pandas DataFrame with one summary row per trip, times in UTC
    """
    columns = ['id', 'vehicle_id', 'license_plate', 'start_time', 'end_time',
               'distance_km', 'duration_minutes', 'status', 'waypoint_count']
    if not trips:
        return pd.DataFrame(columns=columns)

    data = [{
        'id': trip.id,
        'vehicle_id': trip.vehicle_id,
        'license_plate': trip.license_plate,
        'start_time': ensure_utc(trip.start_time),
        'end_time': ensure_utc(trip.end_time),
        'distance_km': trip.distance_km,
        'duration_minutes': trip.duration_minutes,
        'status': trip.status.value,
        'waypoint_count': trip.waypoint_count,
    } for trip in trips]
    return pd.DataFrame(data, columns=columns)
