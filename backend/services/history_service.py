"""
Trip history service.

This module provides the business logic behind the trip history endpoints:
generating trips from stored positions, querying stored trips, and shaping
them for the frontend.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from config.settings import (
    SegmentationConfig, DATE_DISPLAY_FORMAT, TIME_DISPLAY_FORMAT
)
from core.calculations import format_duration
from core.filtering import apply_filters
from core.models.trip import Trip, TripStatus, trips_to_dataframe
from core.segments import segment_trips, analyze_trip_distribution
from core.validation import ValidationError
from services.trip_store import (
    PositionStore, TripStore, get_position_store, get_trip_store
)

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of generating trips for one vehicle."""
    vehicle_id: str
    trip_ids: List[str] = field(default_factory=list)
    replaced: int = 0
    discarded_samples: int = 0
    summary: Dict[str, Any] = field(default_factory=dict)
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class HistoryService:
    """
    Service for trip generation and trip history queries.

    Positions are read from a PositionStore and trips persisted to a
    TripStore; both are injected so tests can use private instances.
    """

    def __init__(self,
                 position_store: Optional[PositionStore] = None,
                 trip_store: Optional[TripStore] = None,
                 config: type = SegmentationConfig):
        self.position_store = position_store or get_position_store()
        self.trip_store = trip_store or get_trip_store()
        self.config = config

    def generate_trips(self,
                       vehicle_id: str,
                       stationary_threshold_minutes: Optional[float] = None,
                       replace: Optional[bool] = None) -> GenerationResult:
        """
        Segment a vehicle's stored positions into trips and persist them.

        Args:
            vehicle_id: Vehicle to generate trips for
            stationary_threshold_minutes: Gap that ends a trip, or None for
                the configured default
            replace: Delete previously generated (Completed) trips first, or
                None for the configured default

        Returns:
            GenerationResult with the new trip ids, or the segmentation error
        """
        if stationary_threshold_minutes is None:
            stationary_threshold_minutes = self.config.STATIONARY_THRESHOLD
        if replace is None:
            replace = self.config.REPLACE_ON_REGENERATE

        samples = self.position_store.fetch_ordered_samples(vehicle_id)
        logger.info(f"Generating trips for vehicle {vehicle_id} from {len(samples)} positions")

        segmentation = segment_trips(
            samples,
            stationary_threshold_minutes=stationary_threshold_minutes,
            radius_km=self.config.EARTH_RADIUS_KM
        )
        result = GenerationResult(vehicle_id=vehicle_id)

        if not segmentation.ok:
            result.error = segmentation.error
            return result

        if replace:
            result.replaced = self.trip_store.delete_for_vehicle(vehicle_id, TripStatus.COMPLETED)

        for trip in segmentation.trips:
            result.trip_ids.append(self.trip_store.save_trip(trip))

        result.discarded_samples = len(segmentation.discarded)
        result.summary = analyze_trip_distribution(segmentation.trips)

        logger.info(f"Generated {len(result.trip_ids)} trips for vehicle {vehicle_id} "
                    f"(replaced {result.replaced})")
        return result

    def list_trips(self, vehicle_id: str) -> List[Trip]:
        """Get a vehicle's trips, most recent first."""
        return self.trip_store.find(vehicle_id)

    def filter_trips(self,
                     vehicle_id: str,
                     period: Optional[str] = None,
                     status: Optional[str] = None,
                     now: Optional[datetime] = None) -> List[Trip]:
        """
        Get a vehicle's trips filtered by calendar period and status.

        Args:
            vehicle_id: Vehicle whose trips to query
            period: 'today', 'week', 'month', 'year' or None
            status: Trip status value, 'All' or None
            now: Reference time for the period, defaults to the current UTC time

        Returns:
            Matching trips, most recent first
        """
        if now is None:
            now = datetime.now(timezone.utc)

        trips = self.trip_store.find(vehicle_id)
        if not trips:
            return []

        filtered = apply_filters(trips_to_dataframe(trips), now=now, period=period, status=status)

        by_id = {trip.id: trip for trip in trips}
        return [by_id[trip_id] for trip_id in filtered['id']]

    def get_trip(self, vehicle_id: str, trip_id: str) -> Optional[Trip]:
        return self.trip_store.find_one(trip_id, vehicle_id)


def format_trip_summary(trip: Trip) -> Dict[str, Any]:
    """
    Shape a trip for the history list.

    Args:
        trip: Trip to format

    Returns:
        Dictionary with display-ready date, times, distance and duration
    """
    return {
        'id': trip.id,
        'date': trip.start_time.strftime(DATE_DISPLAY_FORMAT),
        'startTime': trip.start_time.strftime(TIME_DISPLAY_FORMAT),
        'endTime': trip.end_time.strftime(TIME_DISPLAY_FORMAT),
        'origin': trip.origin.name,
        'destination': trip.destination.name,
        'distance': f"{trip.distance_km:.1f}",
        'duration': format_duration(trip.duration_minutes),
        'status': trip.status.value,
    }


def format_trip_details(trip: Trip) -> Dict[str, Any]:
    """
    Shape a trip for the detail view.

    Adds the vehicle, the full origin/destination and the recorded path to
    the summary fields.
    """
    details = format_trip_summary(trip)
    details.update({
        'vehicleId': trip.vehicle_id,
        'license_plate': trip.license_plate,
        'origin': trip.origin.to_dict(),
        'destination': trip.destination.to_dict(),
        'waypoints': [
            {'lat': w.lat, 'lon': w.lon, 'timestamp': w.timestamp.isoformat()}
            for w in trip.waypoints
        ],
    })
    return details


def get_history_service() -> HistoryService:
    """
    Get a HistoryService bound to the process-wide stores.

    Returns:
        HistoryService instance
    """
    return HistoryService()
