"""
In-process document stores for positions and trips.

The backend only needs two operations from the document database: fetch a
vehicle's positions ordered by time, and save/find trips. These stores keep
documents in memory behind that interface. The async endpoints run on a single
event loop; the lock keeps a store safe when it is also used from other
threads.
"""

import logging
import threading
from collections import defaultdict
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from core.calculations import ensure_utc
from core.models.position import RawPosition
from core.models.trip import Trip, TripStatus, trip_from_dict

logger = logging.getLogger(__name__)


def _normalized(position: RawPosition) -> RawPosition:
    """Store timestamps as aware UTC so stored samples always compare."""
    if isinstance(position.timestamp, datetime):
        return replace(position, timestamp=ensure_utc(position.timestamp))
    return position


class PositionStore:
    """Raw position samples, grouped by vehicle."""

    def __init__(self):
        self._positions: Dict[str, List[RawPosition]] = defaultdict(list)
        self._lock = threading.Lock()

    def add(self, position: RawPosition) -> None:
        with self._lock:
            self._positions[position.vehicle_id].append(_normalized(position))

    def add_many(self, positions: Iterable[RawPosition]) -> int:
        count = 0
        with self._lock:
            for position in positions:
                self._positions[position.vehicle_id].append(_normalized(position))
                count += 1
        logger.debug(f"Stored {count} positions")
        return count

    def fetch_ordered_samples(self, vehicle_id: str) -> List[RawPosition]:
        """Get all samples for a vehicle, ascending by timestamp."""
        with self._lock:
            samples = list(self._positions.get(vehicle_id, []))
        return sorted(samples, key=lambda p: p.timestamp)

    def count(self, vehicle_id: str) -> int:
        with self._lock:
            return len(self._positions.get(vehicle_id, []))

    def clear(self) -> None:
        with self._lock:
            self._positions.clear()


class TripStore:
    """
    Trip documents keyed by trip id.

    Trips are stored in document form and rebuilt on read, so callers never
    share a Trip instance with the store.
    """

    def __init__(self):
        self._documents: Dict[str, dict] = {}
        self._lock = threading.Lock()

    def save_trip(self, trip: Trip) -> str:
        """Persist a trip and return its id."""
        with self._lock:
            if trip.id in self._documents:
                raise ValueError(f"Trip {trip.id} already exists")
            self._documents[trip.id] = trip.to_dict()
        logger.debug(f"Saved trip {trip.id} for vehicle {trip.vehicle_id}")
        return trip.id

    def find(self, vehicle_id: str) -> List[Trip]:
        """Get all trips for a vehicle, most recent first."""
        with self._lock:
            documents = [d for d in self._documents.values() if d['vehicle_id'] == vehicle_id]
        trips = [trip_from_dict(d) for d in documents]
        return sorted(trips, key=lambda t: t.start_time, reverse=True)

    def find_one(self, trip_id: str, vehicle_id: str) -> Optional[Trip]:
        """Get one trip, only if it belongs to the vehicle."""
        with self._lock:
            document = self._documents.get(trip_id)
        if document is None or document['vehicle_id'] != vehicle_id:
            return None
        return trip_from_dict(document)

    def delete_for_vehicle(self, vehicle_id: str, status: Optional[TripStatus] = None) -> int:
        """Delete a vehicle's trips, optionally only those with a given status."""
        with self._lock:
            doomed = [
                trip_id for trip_id, d in self._documents.items()
                if d['vehicle_id'] == vehicle_id and (status is None or d['status'] == status.value)
            ]
            for trip_id in doomed:
                del self._documents[trip_id]
        if doomed:
            logger.info(f"Deleted {len(doomed)} trips for vehicle {vehicle_id}")
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._documents.clear()


_position_store = PositionStore()
_trip_store = TripStore()


def get_position_store() -> PositionStore:
    """Get the process-wide PositionStore."""
    return _position_store


def get_trip_store() -> TripStore:
    """Get the process-wide TripStore."""
    return _trip_store


def reset_stores() -> None:
    """Empty both process-wide stores."""
    _position_store.clear()
    _trip_store.clear()
