"""
GPX file parsing and handling.

This module contains functions for loading GPX files into track DataFrames
with 'latitude', 'longitude' and 'timestamp' (epoch ms) columns.
"""

import os
import gpxpy
import pandas as pd
import logging
from datetime import timezone
from typing import Tuple, Dict, Any

from core.validation import validate_file_upload, validate_fix_dataframe, InvalidFixError, ValidationError

logger = logging.getLogger(__name__)


def load_gpx_file(gpx_file) -> Tuple[pd.DataFrame, Dict[str, Any]]:
    """
    Load and parse a GPX file into a pandas DataFrame with comprehensive validation.

    Args:
        gpx_file: A file-like object containing GPX data

    Returns:
        tuple: (DataFrame with track data, dict with metadata)

    Raises:
        ValidationError: If file validation or parsing fails
        InvalidFixError: If a track point has no timestamp
    """
    try:
        # Validate the uploaded file
        validate_file_upload(gpx_file)

        # Parse the GPX file
        gpx = gpxpy.parse(gpx_file)

        if not gpx.tracks:
            raise ValidationError("GPX file contains no tracks")

    except gpxpy.gpx.GPXException as e:
        raise ValidationError(f"Invalid GPX file format: {str(e)}") from e
    except Exception as e:
        if isinstance(e, ValidationError):
            raise
        raise ValidationError(f"Failed to parse GPX file: {str(e)}") from e

    metadata = {'name': None}

    if gpx.tracks and gpx.tracks[0].name:
        metadata['name'] = gpx.tracks[0].name
    elif isinstance(getattr(gpx_file, 'name', None), str):
        filename = os.path.basename(gpx_file.name)
        metadata['name'] = os.path.splitext(filename)[0]

    # Parse track points
    data = []
    for track in gpx.tracks:
        for segment in track.segments:
            for point in segment.points:
                if point.time is None:
                    raise InvalidFixError(
                        f"Track point at ({point.latitude}, {point.longitude}) has no timestamp"
                    )
                point_time = point.time
                if point_time.tzinfo is None:
                    point_time = point_time.replace(tzinfo=timezone.utc)
                data.append({
                    'latitude': point.latitude,
                    'longitude': point.longitude,
                    'timestamp': int(round(point_time.timestamp() * 1000)),
                })

    df = pd.DataFrame(data)

    validated_df = validate_fix_dataframe(df, f"GPX file {metadata.get('name') or 'unknown'}")

    logger.info(f"Successfully loaded GPX file with {len(validated_df)} track points")
    return validated_df, metadata


def load_gpx_from_path(file_path: str) -> Tuple[pd.DataFrame, Dict[str, Any]]:
    """
    Load a GPX file from disk path.

    Args:
        file_path: Path to the GPX file

    Returns:
        tuple: (DataFrame with track data, dict with metadata)

    Raises:
        FileNotFoundError: If the file does not exist
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"GPX file not found: {file_path}")

    with open(file_path, 'r') as f:
        data, metadata = load_gpx_file(f)

        if not metadata['name']:
            metadata['name'] = os.path.splitext(os.path.basename(file_path))[0]

        return data, metadata
