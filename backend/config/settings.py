"""
Application settings and configuration.

This module contains application-specific configuration and defaults.
For algorithmic constants, see core.constants module.
"""

import os
import logging
from typing import Dict, Any

# Import algorithmic constants from core module
from core.constants import (
    DEFAULT_STATIONARY_THRESHOLD_MINUTES,
    MAX_STATIONARY_THRESHOLD_MINUTES,
    EARTH_RADIUS_KM
)

# App information
APP_NAME = "Fleet History"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Reconstruct vehicle trips from raw position samples"
SERVICE_NAME = "fleet-history-api"

# Segmentation defaults (reference core constants)
DEFAULT_STATIONARY_THRESHOLD = DEFAULT_STATIONARY_THRESHOLD_MINUTES  # Minutes
DEFAULT_EARTH_RADIUS_KM = EARTH_RADIUS_KM

# Roles and history filters
DRIVER_ROLE = "driver"
HISTORY_PERIODS = ("today", "week", "month", "year")
ALL_STATUSES_LABEL = "All"

# Display formats for trip history
DATE_DISPLAY_FORMAT = "%d %b %Y"  # 05 Mar 2024
TIME_DISPLAY_FORMAT = "%H:%M"

# API server
API_HOST = os.environ.get("FLEET_API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("FLEET_API_PORT", "8000"))
CORS_ALLOWED_ORIGINS = [
    "http://localhost:3000",  # Frontend dev server
    "http://localhost:5173",  # Vite dev server
]

# Logging configuration
LOGGING_CONFIG = {
    "level": logging.INFO,
    "format": '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
}


# =============== Configuration Classes ===============
# These classes provide typed access to configuration sections

class SegmentationConfig:
    """Configuration parameters for trip segmentation."""
    STATIONARY_THRESHOLD = DEFAULT_STATIONARY_THRESHOLD
    MAX_STATIONARY_THRESHOLD = MAX_STATIONARY_THRESHOLD_MINUTES
    EARTH_RADIUS_KM = DEFAULT_EARTH_RADIUS_KM
    REPLACE_ON_REGENERATE = True  # Drop previously generated trips first

    @classmethod
    def as_dict(cls) -> Dict[str, Any]:
        """Get segmentation configuration as a dictionary."""
        return {
            'stationary_threshold': cls.STATIONARY_THRESHOLD,
            'max_stationary_threshold': cls.MAX_STATIONARY_THRESHOLD,
            'earth_radius_km': cls.EARTH_RADIUS_KM,
            'replace_on_regenerate': cls.REPLACE_ON_REGENERATE,
        }


class ApiConfig:
    """Configuration parameters for the HTTP API."""
    HOST = API_HOST
    PORT = API_PORT
    CORS_ORIGINS = CORS_ALLOWED_ORIGINS
    PERIODS = HISTORY_PERIODS