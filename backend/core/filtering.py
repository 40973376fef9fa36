"""
Period and status filtering for stored trips.

This module provides functions to filter a trips DataFrame (see
core.models.trip.trips_to_dataframe) by:
1. Calendar period - today, this week, this month or this year
2. Status - Completed, In progress or Cancelled
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

import pandas as pd

from config.settings import ALL_STATUSES_LABEL, HISTORY_PERIODS
from core.models.trip import TripStatus

logger = logging.getLogger(__name__)


def period_start(period: Optional[str], now: datetime) -> Optional[datetime]:
    """
    Get the start of a calendar period relative to ``now``.

    Weeks start on Sunday. The returned datetime keeps ``now``'s tzinfo.

    Args:
        period: 'today', 'week', 'month' or 'year'
        now: Reference time

    Returns:
        Start of the period, or None for an empty or unknown period
    """
    if not period:
        return None

    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == 'today':
        return midnight
    if period == 'week':
        days_since_sunday = (now.weekday() + 1) % 7
        return midnight - timedelta(days=days_since_sunday)
    if period == 'month':
        return midnight.replace(day=1)
    if period == 'year':
        return midnight.replace(month=1, day=1)

    logger.warning(f"Unknown period '{period}', skipping period filter")
    return None


def filter_trips_by_status(trips: pd.DataFrame, status: Optional[str] = None) -> pd.DataFrame:
    """
    Filter trips by status.

    Args:
        trips: DataFrame with a 'status' column
        status: Status value to keep; None or the 'All' label keeps everything

    Returns:
        Filtered DataFrame
    """
    if trips.empty or not status or status == ALL_STATUSES_LABEL:
        return trips

    if 'status' not in trips.columns:
        logger.warning("Trips missing status column, skipping status filter")
        return trips

    filtered = trips[trips['status'] == status]
    logger.info(f"Status filter '{status}': {len(trips)} -> {len(filtered)} trips")
    return filtered


def apply_filters(
    trips: pd.DataFrame,
    now: datetime,
    period: Optional[str] = None,
    status: Optional[str] = None
) -> pd.DataFrame:
    """
    Apply period and status filters to trips.

    This is the main entry point for trip history filtering. Trips are kept
    when they start on or after the period start; the result is sorted most
    recent first.

    Args:
        trips: DataFrame of stored trips
        now: Reference time for period boundaries
        period: Optional calendar period
        status: Optional status value

    Returns:
        Filtered trips DataFrame, sorted by start_time descending
    """
    if trips.empty:
        return trips

    initial_count = len(trips)

    start = period_start(period, now)
    if start is not None:
        trips = trips[trips['start_time'] >= start]

    trips = filter_trips_by_status(trips, status)
    trips = trips.sort_values('start_time', ascending=False)

    final_count = len(trips)
    if initial_count != final_count:
        logger.info(f"Filters applied: {initial_count} -> {final_count} trips "
                    f"({initial_count - final_count} filtered out)")

    return trips


def validate_filter_params(
    period: Optional[str] = None,
    status: Optional[str] = None
) -> Tuple[bool, Optional[str]]:
    """
    Validate filter parameters.

    Args:
        period: Optional calendar period
        status: Optional status value

    Returns:
        Tuple of (is_valid, error_message)
    """
    if period and period not in HISTORY_PERIODS:
        return False, f"Unknown period '{period}', expected one of {list(HISTORY_PERIODS)}"

    valid_statuses = [s.value for s in TripStatus] + [ALL_STATUSES_LABEL]
    if status and status not in valid_statuses:
        return False, f"Unknown status '{status}', expected one of {valid_statuses}"

    return True, None
