"""
Trip segmentation algorithms.

This module reconstructs discrete trips from a vehicle's time-ordered position
samples. A trip ends wherever two consecutive samples are separated by a
stationary gap, i.e. the vehicle is inferred to have stopped.
Each function has a single responsibility and can be tested independently.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from core.constants import (
    DEFAULT_STATIONARY_THRESHOLD_MINUTES, EARTH_RADIUS_KM, MIN_SAMPLES_FOR_TRIP
)
from core.calculations import estimate_distance_km, minutes_between
from core.models.position import RawPosition, Waypoint
from core.models.trip import Trip, TripStatus, make_endpoints
from core.validation import (
    ValidationError, InsufficientDataError, validate_positions, validate_threshold
)

logger = logging.getLogger(__name__)


@dataclass
class SegmentationResult:
    """
    Outcome of segmenting one vehicle's samples.

    Errors are reported here rather than raised, so callers decide whether
    e.g. insufficient data is a failure or simply nothing to do yet.
    """
    trips: List[Trip] = field(default_factory=list)
    error: Optional[ValidationError] = None
    discarded: List[RawPosition] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    def __len__(self) -> int:
        return len(self.trips)

    def __iter__(self) -> Iterator[Trip]:
        return iter(self.trips)


def find_gap_boundaries(samples: Sequence[RawPosition],
                        stationary_threshold_minutes: float) -> List[Tuple[int, int]]:
    """
    Split samples into runs separated by stationary gaps.

    A gap at or above the threshold closes the current run at the sample
    before the gap; the sample after the gap opens the next run.

    Args:
        samples: Time-ordered samples for one vehicle
        stationary_threshold_minutes: Gap (minutes) that ends a trip

    Returns:
        List of inclusive (start_idx, end_idx) tuples covering every sample
    """
    if not samples:
        return []

    runs = []
    run_start = 0

    for i in range(1, len(samples)):
        gap = minutes_between(samples[i - 1].timestamp, samples[i].timestamp)

        if gap >= stationary_threshold_minutes:
            runs.append((run_start, i - 1))
            run_start = i

    runs.append((run_start, len(samples) - 1))

    logger.debug(f"Detected {len(runs)} runs between stationary gaps")
    return runs


def build_trip(run: Sequence[RawPosition], radius_km: float = EARTH_RADIUS_KM) -> Trip:
    """
    Build a completed Trip from a run of consecutive samples.

    Args:
        run: Samples belonging to one movement episode; a single sample
            gives an instant trip
        radius_km: Earth radius used for the distance estimate

    Returns:
        Trip with generic Departure/Arrival endpoints
    """
    waypoints = tuple(Waypoint.from_position(sample) for sample in run)
    origin, destination = make_endpoints(waypoints)
    first, last = run[0], run[-1]

    return Trip(
        vehicle_id=first.vehicle_id,
        license_plate=first.license_plate,
        start_time=first.timestamp,
        end_time=last.timestamp,
        origin=origin,
        destination=destination,
        distance_km=estimate_distance_km(waypoints, radius_km=radius_km),
        duration_minutes=minutes_between(first.timestamp, last.timestamp),
        waypoints=waypoints,
        status=TripStatus.COMPLETED
    )


def segment_trips(samples: Sequence[RawPosition],
                  stationary_threshold_minutes: float = DEFAULT_STATIONARY_THRESHOLD_MINUTES,
                  radius_km: float = EARTH_RADIUS_KM,
                  validate: bool = True) -> SegmentationResult:
    """
    Reconstruct trips from one vehicle's time-ordered position samples.

    This is the main entry point for trip segmentation. Samples must already
    be sorted ascending by timestamp; they are not re-sorted. The whole batch
    is processed eagerly since a trip boundary is only known once the next
    sample's gap has been seen.

    A single sample isolated between two stationary gaps becomes an instant
    trip (zero distance, zero duration). A lone trailing sample is discarded
    instead and listed on the result, so every input sample is covered
    exactly once except for that one.

    Args:
        samples: Time-ordered RawPosition samples for exactly one vehicle
        stationary_threshold_minutes: Gap (minutes) at or above which the
            vehicle is considered stopped
        radius_km: Earth radius used for the distance estimate
        validate: Check samples for bad coordinates, missing timestamps and
            ordering before segmenting

    Returns:
        SegmentationResult with trips in chronological order, or an
        InsufficientDataError / InvalidInputError and no trips
    """
    samples = list(samples) if samples is not None else []

    try:
        threshold = validate_threshold(stationary_threshold_minutes)

        if len(samples) < MIN_SAMPLES_FOR_TRIP:
            raise InsufficientDataError(
                f"Need at least {MIN_SAMPLES_FOR_TRIP} positions to build trips, got {len(samples)}",
                sample_count=len(samples)
            )

        if validate:
            validate_positions(samples, "Trip segmentation input")

    except InsufficientDataError as e:
        logger.warning(f"Not enough positions for trip segmentation: {e}")
        return SegmentationResult(error=e)
    except ValidationError as e:
        logger.error(f"Validation failed for trip segmentation: {e}")
        return SegmentationResult(error=e)

    logger.info(f"Starting trip segmentation of {len(samples)} samples for vehicle "
                f"{samples[0].vehicle_id} with threshold={threshold} min")

    # Step 1: Split the stream at stationary gaps
    runs = find_gap_boundaries(samples, threshold)

    # Step 2: Build a trip for every run
    result = SegmentationResult()
    last_run = len(runs) - 1
    for run_idx, (start_idx, end_idx) in enumerate(runs):
        run = samples[start_idx:end_idx + 1]

        # A lone sample after the last gap may still be the start of a trip
        if run_idx == last_run and len(run) < MIN_SAMPLES_FOR_TRIP:
            result.discarded.extend(run)
            continue

        try:
            result.trips.append(build_trip(run, radius_km))
        except ValidationError as e:
            logger.error(f"Could not build trip from samples {start_idx}-{end_idx}: {e}")
            return SegmentationResult(error=e)

    if result.discarded:
        logger.warning(f"Discarded trailing sample at {result.discarded[0].timestamp} that does not form a trip")

    logger.info(f"Successfully segmented {len(result.trips)} trips")
    return result


def analyze_trip_distribution(trips: List[Trip]) -> Dict[str, Any]:
    """
    Analyze the distribution of segmented trips.

    This provides summary statistics for reporting and for sanity checks on
    the chosen stationary threshold.

    Args:
        trips: List of segmented trips

    Returns:
        Dictionary with distribution statistics
    """
    if not trips:
        return {}

    distances = [t.distance_km for t in trips]
    durations = [t.duration_minutes for t in trips]
    points = [t.waypoint_count for t in trips]

    stats = {
        'count': len(trips),
        'total_distance_km': float(np.sum(distances)),
        'total_duration_minutes': float(np.sum(durations)),
        'avg_trip_distance_km': float(np.mean(distances)),
        'avg_trip_duration_minutes': float(np.mean(durations)),
        'avg_waypoints_per_trip': float(np.mean(points)),
        'distance_range': (min(distances), max(distances)),
        'duration_range': (min(durations), max(durations)),
        'first_start': trips[0].start_time,
        'last_end': trips[-1].end_time,
    }

    return stats
