"""
Services package.

Provides business logic layer between API and core algorithms.

Modules:
    history_service: Trip generation and trip history queries
    trip_store: In-process position and trip stores
"""

from services.history_service import (
    HistoryService, GenerationResult, get_history_service,
    format_trip_summary, format_trip_details
)
from services.trip_store import (
    PositionStore, TripStore, get_position_store, get_trip_store, reset_stores
)

__all__ = [
    'HistoryService',
    'GenerationResult',
    'get_history_service',
    'format_trip_summary',
    'format_trip_details',
    'PositionStore',
    'TripStore',
    'get_position_store',
    'get_trip_store',
    'reset_stores',
]
