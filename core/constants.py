"""
Constants for the Footpaths segmentation engine.

This module contains the mathematical, algorithmic, and domain-specific
constants used throughout the codebase. Constants are grouped by their purpose
and documented with their units where applicable.
"""

# =============================================================================
# CONVERSION FACTORS
# =============================================================================

# Time conversions
MILLISECONDS_PER_SECOND = 1000.0

# Speed conversions
KMH_TO_METERS_PER_SECOND = 1 / 3.6  # 1 km/h = 0.2777... m/s
METERS_PER_SECOND_TO_KMH = 3.6

# Distance conversions
METERS_PER_KILOMETER = 1000

# =============================================================================
# STOP / ANCHOR DETECTION
# =============================================================================

# Minimum dwell time before a stop counts as an anchor
DEFAULT_RECORD_DELAY_SECONDS = 200

# A fix this close to the reference point after the dwell time confirms a stop
DEFAULT_STATIONARY_RADIUS_METERS = 20.0

# Leaving this radius ends the stop scan
DEFAULT_MAX_STATIONARY_RADIUS_METERS = 25.0

# =============================================================================
# SEGMENT CLASSIFICATION
# =============================================================================

# Segments shorter than this are discarded
DEFAULT_MIN_SEGMENT_LENGTH_METERS = 300.0

# Average speeds at or below this are walking (7 km/h)
DEFAULT_WALKING_SPEED_KMH = 7.0
DEFAULT_WALKING_SPEED_THRESHOLD_MPS = DEFAULT_WALKING_SPEED_KMH * KMH_TO_METERS_PER_SECOND

# Walking legs split off a faster segment must be at least this long
DEFAULT_MIN_LEG_LENGTH_METERS = 25.0

# =============================================================================
# COORDINATE RANGES
# =============================================================================

MIN_LATITUDE_DEGREES = -90.0
MAX_LATITUDE_DEGREES = 90.0
MIN_LONGITUDE_DEGREES = -180.0
MAX_LONGITUDE_DEGREES = 180.0

# =============================================================================
# PARAMETER LIMITS
# =============================================================================

MAX_RECORD_DELAY_SECONDS = 24 * 60 * 60  # One day
MAX_RADIUS_METERS = 10000  # 10km
MAX_SEGMENT_LENGTH_METERS = 100000  # 100km
MAX_WALKING_SPEED_MPS = 50.0

# =============================================================================
# VALIDATION
# =============================================================================

assert DEFAULT_STATIONARY_RADIUS_METERS <= DEFAULT_MAX_STATIONARY_RADIUS_METERS, \
    "Stationary radius must not exceed the maximum stationary radius"
