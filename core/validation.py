"""
Input validation utilities for core functions.

This module provides the error types raised by the segmentation engine and the
validation functions that guard its boundary. The engine itself assumes a
validated, time-sorted fix sequence.
"""

import logging
import math
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

import numpy as np
import pandas as pd

from core.constants import (
    MIN_LATITUDE_DEGREES, MAX_LATITUDE_DEGREES,
    MIN_LONGITUDE_DEGREES, MAX_LONGITUDE_DEGREES,
    MAX_RECORD_DELAY_SECONDS, MAX_RADIUS_METERS,
    MAX_SEGMENT_LENGTH_METERS, MAX_WALKING_SPEED_MPS
)
from core.models.fix import Fix

logger = logging.getLogger(__name__)

SUPPORTED_UPLOAD_SUFFIXES = ('.gpx', '.csv')
MAX_UPLOAD_SIZE_BYTES = 10 * 1024 * 1024  # 10MB


class ValidationError(Exception):
    """Custom exception for validation errors."""
    pass


class EmptyInputError(ValidationError):
    """Raised when there are no fixes to segment."""
    pass


class InvalidFixError(ValidationError):
    """Raised when a fix is malformed or the sequence is out of time order."""
    pass


class DegenerateIntervalError(ValueError):
    """Raised when a speed is requested between two fixes with the same timestamp."""
    pass


def _check_fix(fix: Fix, index: int, context: str) -> None:
    if not isinstance(fix.latitude, (int, float)) or not math.isfinite(fix.latitude):
        raise InvalidFixError(f"{context}: fix {index} has non-finite latitude {fix.latitude!r}")
    if not isinstance(fix.longitude, (int, float)) or not math.isfinite(fix.longitude):
        raise InvalidFixError(f"{context}: fix {index} has non-finite longitude {fix.longitude!r}")
    if not MIN_LATITUDE_DEGREES <= fix.latitude <= MAX_LATITUDE_DEGREES:
        raise InvalidFixError(f"{context}: fix {index} latitude {fix.latitude} outside -90 to 90")
    if not MIN_LONGITUDE_DEGREES <= fix.longitude <= MAX_LONGITUDE_DEGREES:
        raise InvalidFixError(f"{context}: fix {index} longitude {fix.longitude} outside -180 to 180")
    if isinstance(fix.timestamp, bool) or not isinstance(fix.timestamp, (int, np.integer)):
        raise InvalidFixError(f"{context}: fix {index} timestamp must be integer milliseconds, "
                              f"got {fix.timestamp!r}")


def validate_fixes(fixes: Iterable[Fix], context: str = "Fix sequence") -> Tuple[Fix, ...]:
    """
    Validate a fix sequence before segmentation.

    Args:
        fixes: Fixes in the order they were recorded
        context: Context description for error messages

    Returns:
        The fixes as an immutable tuple

    Raises:
        EmptyInputError: If there are no fixes
        InvalidFixError: If any fix is malformed or timestamps decrease
    """
    if fixes is None:
        raise EmptyInputError(f"{context}: fixes is None")

    validated = tuple(fixes)
    if not validated:
        raise EmptyInputError(f"{context}: no fixes to segment")

    previous: Optional[Fix] = None
    for index, fix in enumerate(validated):
        if not isinstance(fix, Fix):
            raise InvalidFixError(f"{context}: item {index} is not a Fix: {type(fix).__name__}")
        _check_fix(fix, index, context)
        if previous is not None and fix.timestamp < previous.timestamp:
            raise InvalidFixError(
                f"{context}: timestamps must be non-decreasing, fix {index} "
                f"({fix.timestamp}) is before fix {index - 1} ({previous.timestamp})"
            )
        previous = fix

    logger.debug(f"{context}: Validation passed for {len(validated)} fixes")
    return validated


def validate_fix_dataframe(df: pd.DataFrame, context: str = "Track data") -> pd.DataFrame:
    """
    Validate a track DataFrame has the columns and values needed to build fixes.

    Columns are converted to numbers and timestamps to int64 milliseconds;
    text that does not parse as a number and fractional timestamps are
    rejected rather than coerced.

    Args:
        df: DataFrame with 'latitude', 'longitude' and 'timestamp' columns
        context: Context description for error messages

    Returns:
        Validated copy with numeric columns and int64 timestamps

    Raises:
        EmptyInputError: If the DataFrame is None or empty
        InvalidFixError: If columns are missing or values are invalid
    """
    if df is None:
        raise EmptyInputError(f"{context}: DataFrame is None")

    if df.empty:
        raise EmptyInputError(f"{context}: DataFrame is empty")

    required_columns = ['latitude', 'longitude', 'timestamp']
    missing_columns = [col for col in required_columns if col not in df.columns]

    if missing_columns:
        raise InvalidFixError(f"{context}: Missing required columns: {missing_columns}")

    for col in required_columns:
        if df[col].isna().any():
            nan_count = int(df[col].isna().sum())
            raise InvalidFixError(f"{context}: {nan_count} missing values in {col} column")

    validated = df.copy()
    for col in required_columns:
        validated[col] = pd.to_numeric(df[col], errors='coerce')
        unparsed = validated[col].isna()
        if unparsed.any():
            example = df[col][unparsed].iloc[0]
            raise InvalidFixError(
                f"{context}: {int(unparsed.sum())} non-numeric values in {col} column (e.g. {example!r})"
            )

    if not validated['latitude'].between(MIN_LATITUDE_DEGREES, MAX_LATITUDE_DEGREES).all():
        invalid_count = int((~validated['latitude'].between(MIN_LATITUDE_DEGREES, MAX_LATITUDE_DEGREES)).sum())
        raise InvalidFixError(f"{context}: {invalid_count} invalid latitude values (must be -90 to 90)")

    if not validated['longitude'].between(MIN_LONGITUDE_DEGREES, MAX_LONGITUDE_DEGREES).all():
        invalid_count = int((~validated['longitude'].between(MIN_LONGITUDE_DEGREES, MAX_LONGITUDE_DEGREES)).sum())
        raise InvalidFixError(f"{context}: {invalid_count} invalid longitude values (must be -180 to 180)")

    timestamps = validated['timestamp']
    if not np.isfinite(timestamps).all():
        raise InvalidFixError(f"{context}: timestamps must be finite")

    fractional = timestamps % 1 != 0
    if fractional.any():
        raise InvalidFixError(
            f"{context}: {int(fractional.sum())} timestamps are not whole milliseconds "
            f"(e.g. {timestamps[fractional].iloc[0]!r})"
        )
    validated['timestamp'] = timestamps.astype('int64')

    if not validated['timestamp'].is_monotonic_increasing:
        raise InvalidFixError(f"{context}: timestamps must be non-decreasing")

    logger.debug(f"{context}: Validation passed for {len(validated)} rows")
    return validated


def validate_parameter_ranges(
    record_delay: Optional[float] = None,
    stationary_radius: Optional[float] = None,
    max_stationary_radius: Optional[float] = None,
    min_segment_length: Optional[float] = None,
    walking_speed_threshold: Optional[float] = None,
    min_leg_length: Optional[float] = None
) -> None:
    """
    Validate parameter ranges for segmentation.

    Args:
        record_delay: Minimum dwell time in seconds
        stationary_radius: Stop confirmation radius in meters
        max_stationary_radius: Stop scan radius in meters
        min_segment_length: Minimum segment length in meters
        walking_speed_threshold: Walking speed threshold in m/s
        min_leg_length: Minimum walking leg length in meters

    Raises:
        ValidationError: If any parameter is out of valid range
    """
    if record_delay is not None:
        if not 0 <= record_delay <= MAX_RECORD_DELAY_SECONDS:
            raise ValidationError(f"Record delay must be 0-{MAX_RECORD_DELAY_SECONDS}s, got {record_delay}")

    if stationary_radius is not None:
        if not 0 <= stationary_radius <= MAX_RADIUS_METERS:
            raise ValidationError(f"Stationary radius must be 0-{MAX_RADIUS_METERS}m, got {stationary_radius}")

    if max_stationary_radius is not None:
        if not 0 <= max_stationary_radius <= MAX_RADIUS_METERS:
            raise ValidationError(
                f"Max stationary radius must be 0-{MAX_RADIUS_METERS}m, got {max_stationary_radius}"
            )

    if stationary_radius is not None and max_stationary_radius is not None:
        if stationary_radius > max_stationary_radius:
            raise ValidationError(
                f"Stationary radius ({stationary_radius}m) must not exceed "
                f"max stationary radius ({max_stationary_radius}m)"
            )

    if min_segment_length is not None:
        if not 0 <= min_segment_length <= MAX_SEGMENT_LENGTH_METERS:
            raise ValidationError(
                f"Min segment length must be 0-{MAX_SEGMENT_LENGTH_METERS}m, got {min_segment_length}"
            )

    if walking_speed_threshold is not None:
        if not 0 < walking_speed_threshold <= MAX_WALKING_SPEED_MPS:
            raise ValidationError(
                f"Walking speed threshold must be 0-{MAX_WALKING_SPEED_MPS} m/s, got {walking_speed_threshold}"
            )

    if min_leg_length is not None:
        if not 0 <= min_leg_length <= MAX_SEGMENT_LENGTH_METERS:
            raise ValidationError(f"Min leg length must be 0-{MAX_SEGMENT_LENGTH_METERS}m, got {min_leg_length}")


def validate_file_upload(uploaded_file: Any) -> None:
    """
    Validate uploaded file before processing.

    Args:
        uploaded_file: File-like object with optional 'name' and 'size' attributes

    Raises:
        ValidationError: If file validation fails
    """
    if uploaded_file is None:
        raise ValidationError("No file uploaded")

    size = getattr(uploaded_file, 'size', None)
    if size is not None and size > MAX_UPLOAD_SIZE_BYTES:
        raise ValidationError(f"File too large: {size / 1024 / 1024:.1f}MB (max 10MB)")

    if hasattr(uploaded_file, 'name') and isinstance(uploaded_file.name, str):
        file_path = Path(uploaded_file.name)
        if file_path.suffix.lower() not in SUPPORTED_UPLOAD_SUFFIXES:
            raise ValidationError(f"Invalid file type: {file_path.suffix} (expected .gpx or .csv)")

    logger.debug(f"File validation passed: {getattr(uploaded_file, 'name', 'unknown')}")
