"""
Application settings and configuration.

This module contains application-specific configuration, UI settings, and defaults.
For algorithmic constants, see core.constants module.
"""

import os
import logging
from typing import Dict, Any

# Import algorithmic constants from core module
from core.constants import (
    DEFAULT_RECORD_DELAY_SECONDS,
    DEFAULT_STATIONARY_RADIUS_METERS,
    DEFAULT_MAX_STATIONARY_RADIUS_METERS,
    DEFAULT_MIN_SEGMENT_LENGTH_METERS,
    DEFAULT_WALKING_SPEED_THRESHOLD_MPS,
    DEFAULT_MIN_LEG_LENGTH_METERS
)

# App information
APP_NAME = "Footpaths"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Split daily movement into walking and faster-than-walking segments"

# Routing provider (OpenRouteService)
ROUTING_BASE_URL = os.environ.get("ORS_BASE_URL", "https://api.openrouteservice.org")
ROUTING_PROFILE = "foot-walking"
ROUTING_API_KEY_ENV = "ORS_API_KEY"
ROUTING_TIMEOUT_SECONDS = 10.0

# UI configuration
UI_WALKING_COLOR = "#3385ff"  # Blue for walking segments
UI_FASTER_COLOR = "#ff9900"  # Orange for faster segments
UI_ROUTE_COLOR = "#9933ff"  # Purple for routed walking paths
UI_TRACK_COLOR = "#000000"  # Complete recorded path
UI_WALKING_LINE_WIDTH = 20
UI_FASTER_LINE_WIDTH = 15
UI_ROUTE_LINE_WIDTH = 20
DEFAULT_MAP_ZOOM = 17

# Upload limits
MAX_UPLOAD_SIZE_BYTES = 50 * 1024 * 1024  # 50MB

# Logging configuration
LOGGING_CONFIG = {
    "level": logging.INFO,
    "format": '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
}


def configure_logging(level: int = None) -> None:
    """Apply LOGGING_CONFIG to the root logger."""
    config = dict(LOGGING_CONFIG)
    if level is not None:
        config["level"] = level
    logging.basicConfig(**config)


# =============== Configuration Classes ===============
# These classes provide typed access to configuration sections

class SegmentConfig:
    """Configuration parameters for segmentation."""
    RECORD_DELAY = DEFAULT_RECORD_DELAY_SECONDS  # From core.constants
    STATIONARY_RADIUS = DEFAULT_STATIONARY_RADIUS_METERS
    MAX_STATIONARY_RADIUS = DEFAULT_MAX_STATIONARY_RADIUS_METERS
    MIN_SEGMENT_LENGTH = DEFAULT_MIN_SEGMENT_LENGTH_METERS
    WALKING_SPEED_THRESHOLD = DEFAULT_WALKING_SPEED_THRESHOLD_MPS
    MIN_LEG_LENGTH = DEFAULT_MIN_LEG_LENGTH_METERS

    @classmethod
    def as_dict(cls) -> Dict[str, Any]:
        """Get segmentation configuration as a dictionary."""
        return {
            'record_delay': cls.RECORD_DELAY,
            'stationary_radius': cls.STATIONARY_RADIUS,
            'max_stationary_radius': cls.MAX_STATIONARY_RADIUS,
            'min_segment_length': cls.MIN_SEGMENT_LENGTH,
            'walking_speed_threshold': cls.WALKING_SPEED_THRESHOLD,
            'min_leg_length': cls.MIN_LEG_LENGTH,
        }


class RoutingConfig:
    """Configuration for the walking route lookup."""
    BASE_URL = ROUTING_BASE_URL
    PROFILE = ROUTING_PROFILE
    API_KEY_ENV = ROUTING_API_KEY_ENV
    TIMEOUT = ROUTING_TIMEOUT_SECONDS

    @classmethod
    def api_key(cls) -> str:
        """Read the API key from the environment (empty string if unset)."""
        return os.environ.get(cls.API_KEY_ENV, "")

    @classmethod
    def as_dict(cls) -> Dict[str, Any]:
        """Get routing configuration as a dictionary (without the key)."""
        return {
            'base_url': cls.BASE_URL,
            'profile': cls.PROFILE,
            'timeout': cls.TIMEOUT,
            'configured': bool(cls.api_key()),
        }


class UIConfig:
    """Configuration parameters for map rendering."""
    WALKING_COLOR = UI_WALKING_COLOR
    FASTER_COLOR = UI_FASTER_COLOR
    ROUTE_COLOR = UI_ROUTE_COLOR
    TRACK_COLOR = UI_TRACK_COLOR
    WALKING_LINE_WIDTH = UI_WALKING_LINE_WIDTH
    FASTER_LINE_WIDTH = UI_FASTER_LINE_WIDTH
    ROUTE_LINE_WIDTH = UI_ROUTE_LINE_WIDTH
    MAP_ZOOM = DEFAULT_MAP_ZOOM

    @classmethod
    def as_dict(cls) -> Dict[str, Any]:
        """Get UI configuration as a dictionary."""
        return {
            'walking_color': cls.WALKING_COLOR,
            'faster_color': cls.FASTER_COLOR,
            'route_color': cls.ROUTE_COLOR,
            'track_color': cls.TRACK_COLOR,
            'walking_line_width': cls.WALKING_LINE_WIDTH,
            'faster_line_width': cls.FASTER_LINE_WIDTH,
            'route_line_width': cls.ROUTE_LINE_WIDTH,
            'map_zoom': cls.MAP_ZOOM,
        }
