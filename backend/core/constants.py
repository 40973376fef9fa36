"""
Constants for the Fleet History backend.

This module contains the mathematical, algorithmic, and domain-specific
constants used throughout the codebase. Constants are grouped by their purpose
and documented with their units where applicable.
"""

# =============================================================================
# CONVERSION FACTORS
# =============================================================================

# Time conversions
SECONDS_PER_MINUTE = 60
MINUTES_PER_HOUR = 60

# Distance conversions
METERS_PER_KILOMETER = 1000

# =============================================================================
# GEODESY
# =============================================================================

# Mean Earth radius used by the Haversine formula
EARTH_RADIUS_KM = 6371.0

# Valid coordinate ranges (decimal degrees)
MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0

# Supported distance methods
DISTANCE_METHOD_HAVERSINE = "haversine"
DISTANCE_METHOD_GEODESIC = "geodesic"
DISTANCE_METHODS = (DISTANCE_METHOD_HAVERSINE, DISTANCE_METHOD_GEODESIC)

# =============================================================================
# TRIP SEGMENTATION
# =============================================================================

# A gap between consecutive samples at or above this ends the current trip
DEFAULT_STATIONARY_THRESHOLD_MINUTES = 10.0
MAX_STATIONARY_THRESHOLD_MINUTES = 24 * 60  # One day

# A trip needs at least this many waypoints
MIN_SAMPLES_FOR_TRIP = 2

# Raw positions carry no place name
DEFAULT_ORIGIN_NAME = "Departure"
DEFAULT_DESTINATION_NAME = "Arrival"
UNKNOWN_PLACE_NAME = "Unknown"

# =============================================================================
# UPLOADS
# =============================================================================

MAX_UPLOAD_SIZE_BYTES = 10 * 1024 * 1024  # 10MB
MIN_GPX_FILE_SIZE_BYTES = 100  # Smaller than any real GPX document
ALLOWED_UPLOAD_EXTENSIONS = ('.gpx',)
