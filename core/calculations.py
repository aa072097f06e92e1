"""
Shared calculations module.

This module contains the distance, time and speed calculations shared by the
anchor detector, the speed classifier and the sub-leg refiner. Speeds are
aggregated as the mean of point-to-point speeds, not total distance over
total time.
"""

import logging
from typing import Sequence

import numpy as np
import pandas as pd
from geopy.distance import geodesic

from core.constants import (
    MILLISECONDS_PER_SECOND, KMH_TO_METERS_PER_SECOND,
    METERS_PER_SECOND_TO_KMH, METERS_PER_KILOMETER
)
from core.models.fix import Fix
from core.validation import DegenerateIntervalError

logger = logging.getLogger(__name__)


# =============================================================================
# BASIC GEOMETRIC CALCULATIONS
# =============================================================================

def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points in meters."""
    return geodesic((lat1, lon1), (lat2, lon2)).meters


def distance(a: Fix, b: Fix) -> float:
    """Distance between two fixes in meters."""
    return calculate_distance(a.latitude, a.longitude, b.latitude, b.longitude)


def elapsed_seconds(a: Fix, b: Fix) -> float:
    """Seconds elapsed from fix a to fix b."""
    return (b.timestamp - a.timestamp) / MILLISECONDS_PER_SECOND


def point_speed(a: Fix, b: Fix) -> float:
    """
    Calculate the speed between two consecutive fixes.

    Args:
        a: Earlier fix
        b: Later fix

    Returns:
        Speed in meters per second

    Raises:
        DegenerateIntervalError: If both fixes share a timestamp
    """
    seconds = elapsed_seconds(a, b)
    if seconds == 0:
        raise DegenerateIntervalError(
            f"Fixes at ({a.latitude}, {a.longitude}) and ({b.latitude}, {b.longitude}) "
            f"share timestamp {a.timestamp}"
        )
    return distance(a, b) / seconds


# =============================================================================
# SEGMENT METRICS
# =============================================================================

def pair_distances(fixes: Sequence[Fix]) -> np.ndarray:
    """Distances in meters between consecutive fixes (length n-1)."""
    return np.array(
        [distance(fixes[i - 1], fixes[i]) for i in range(1, len(fixes))],
        dtype=float
    )


def pair_speeds(fixes: Sequence[Fix]) -> np.ndarray:
    """
    Speeds in m/s between consecutive fixes.

    Pairs sharing a timestamp have no defined speed and are reported as NaN
    so that aggregations can skip them.

    Args:
        fixes: Fixes in time order

    Returns:
        Array of length n-1 (empty for fewer than 2 fixes)
    """
    speeds = []
    for i in range(1, len(fixes)):
        try:
            speeds.append(point_speed(fixes[i - 1], fixes[i]))
        except DegenerateIntervalError as e:
            logger.debug(f"Skipping degenerate interval: {e}")
            speeds.append(np.nan)
    return np.array(speeds, dtype=float)


def mean_speed(speeds: np.ndarray) -> float:
    """
    Mean of point-to-point speeds, ignoring NaN entries.

    Returns 0.0 when no pair has a defined speed.
    """
    valid = speeds[~np.isnan(speeds)]
    if valid.size == 0:
        return 0.0
    return float(valid.mean())


def average_speed(fixes: Sequence[Fix]) -> float:
    """
    Average speed of a run of fixes in m/s.

    This is the mean of the consecutive point-to-point speeds. A single fix
    has no speed and averages to 0.0; pairs with identical timestamps are
    excluded from the mean.
    """
    if len(fixes) <= 1:
        return 0.0
    return mean_speed(pair_speeds(fixes))


def segment_length(fixes: Sequence[Fix]) -> float:
    """Sum of consecutive distances in meters."""
    if len(fixes) <= 1:
        return 0.0
    return float(pair_distances(fixes).sum())


def calculate_point_metrics(fixes: Sequence[Fix]) -> pd.DataFrame:
    """
    Calculate distance, duration and speed for each fix in a track.

    Each row describes the step from the previous fix to this one, so the
    first row is always zero distance and zero duration.

    Args:
        fixes: Fixes in time order

    Returns:
        DataFrame with 'latitude', 'longitude', 'timestamp', 'distance_m',
        'duration_sec' and 'speed_mps' columns. 'speed_mps' is NaN where the
        step has no duration.
    """
    result = pd.DataFrame(
        {
            'latitude': [fix.latitude for fix in fixes],
            'longitude': [fix.longitude for fix in fixes],
            'timestamp': [fix.timestamp for fix in fixes],
        }
    )
    if len(fixes) < 2:
        result['distance_m'] = 0.0
        result['duration_sec'] = 0.0
        result['speed_mps'] = np.nan
        return result

    result['distance_m'] = np.concatenate(([0.0], pair_distances(fixes)))
    result['duration_sec'] = result['timestamp'].diff().fillna(0) / MILLISECONDS_PER_SECOND
    result['speed_mps'] = np.concatenate(([np.nan], pair_speeds(fixes)))

    logger.debug(f"Calculated metrics for {len(result)} fixes")
    return result


# =============================================================================
# UNIT CONVERSIONS
# =============================================================================

def kmh_to_meters_per_second(speed_kmh: float) -> float:
    """Convert kilometers per hour to meters per second."""
    return speed_kmh * KMH_TO_METERS_PER_SECOND


def meters_per_second_to_kmh(speed_ms: float) -> float:
    """Convert meters per second to kilometers per hour."""
    return speed_ms * METERS_PER_SECOND_TO_KMH


def meters_to_kilometers(distance_m: float) -> float:
    """Convert meters to kilometers."""
    return distance_m / METERS_PER_KILOMETER
