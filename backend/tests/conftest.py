"""
Shared fixtures for the Fleet History tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.models.position import RawPosition

BASE_TIME = datetime(2024, 3, 5, 8, 0, 0, tzinfo=timezone.utc)


def _make_positions(minutes, vehicle_id="TRK-001", license_plate="AB-123-CD",
                    start_lat=36.80, start_lon=10.18, step=0.001, start=BASE_TIME):
    """Build positions at the given minute offsets, moving north-east a little each sample."""
    return [
        RawPosition(
            vehicle_id=vehicle_id,
            license_plate=license_plate,
            latitude=start_lat + i * step,
            longitude=start_lon + i * step,
            timestamp=start + timedelta(minutes=m)
        )
        for i, m in enumerate(minutes)
    ]


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def make_positions():
    return _make_positions
