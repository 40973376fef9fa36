"""
Segments package.

This package contains functionality for splitting position streams into trips.
Clean, focused interface with no circular dependencies.
"""

# Core trip segmentation functions
from .detector import (
    segment_trips,
    find_gap_boundaries,
    build_trip,
    analyze_trip_distribution,
    SegmentationResult
)

# Trip models
from core.models.trip import Trip, TripStatus, trips_to_dataframe, trip_from_dict

__all__ = [
    # Main segmentation function
    'segment_trips',
    'SegmentationResult',

    # Modular segmentation functions
    'find_gap_boundaries',
    'build_trip',
    'analyze_trip_distribution',

    # Models
    'Trip',
    'TripStatus',
    'trips_to_dataframe',
    'trip_from_dict',
]
