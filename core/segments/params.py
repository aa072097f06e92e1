"""
Segmentation parameters.
"""

from dataclasses import dataclass, asdict
from typing import Dict

from core.constants import (
    DEFAULT_RECORD_DELAY_SECONDS,
    DEFAULT_STATIONARY_RADIUS_METERS,
    DEFAULT_MAX_STATIONARY_RADIUS_METERS,
    DEFAULT_MIN_SEGMENT_LENGTH_METERS,
    DEFAULT_WALKING_SPEED_THRESHOLD_MPS,
    DEFAULT_MIN_LEG_LENGTH_METERS
)
from core.validation import validate_parameter_ranges


@dataclass(frozen=True)
class SegmentationParams:
    """Thresholds for anchor detection and segment classification."""
    record_delay: float = DEFAULT_RECORD_DELAY_SECONDS  # seconds
    stationary_radius: float = DEFAULT_STATIONARY_RADIUS_METERS  # meters
    max_stationary_radius: float = DEFAULT_MAX_STATIONARY_RADIUS_METERS  # meters
    min_segment_length: float = DEFAULT_MIN_SEGMENT_LENGTH_METERS  # meters
    walking_speed_threshold: float = DEFAULT_WALKING_SPEED_THRESHOLD_MPS  # m/s
    min_leg_length: float = DEFAULT_MIN_LEG_LENGTH_METERS  # meters

    def validate(self) -> 'SegmentationParams':
        """Check every threshold is in range; returns self for chaining."""
        validate_parameter_ranges(**self.to_dict())
        return self

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary for function calls."""
        return asdict(self)
