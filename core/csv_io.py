"""
CSV input/output for stored locations and classified segments.

The location export has one row per fix with 'latitude', 'longitude' and
'timestamp' (epoch ms) columns; extra columns such as a row id are ignored.
"""

import logging
from pathlib import Path
from typing import Dict, Any, Tuple, Union, IO

import pandas as pd

from core.models.segment import segments_to_dataframe
from core.segments.classifier import SegmentationResult
from core.validation import validate_fix_dataframe, InvalidFixError

logger = logging.getLogger(__name__)

FIX_COLUMNS = ['latitude', 'longitude', 'timestamp']


def load_fixes_csv(csv_file: Union[str, Path, IO]) -> Tuple[pd.DataFrame, Dict[str, Any]]:
    """
    Load a location export into a track DataFrame.

    Args:
        csv_file: Path or file-like object with the CSV export

    Returns:
        tuple: (DataFrame with track data, dict with metadata)

    Raises:
        InvalidFixError: If the CSV cannot be parsed or required columns are missing
    """
    try:
        df = pd.read_csv(csv_file)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise InvalidFixError(f"Failed to parse location CSV: {e}") from e

    missing = [col for col in FIX_COLUMNS if col not in df.columns]
    if missing:
        raise InvalidFixError(f"Location CSV is missing columns: {missing}. Found: {list(df.columns)}")

    track = df[FIX_COLUMNS].copy()
    track = validate_fix_dataframe(track, "Location CSV")

    name = None
    if isinstance(csv_file, (str, Path)):
        name = Path(csv_file).stem
    elif isinstance(getattr(csv_file, 'name', None), str):
        name = Path(csv_file.name).stem

    logger.info(f"Loaded {len(track)} fixes from location CSV")
    return track, {'name': name}


def write_segments_csv(result: SegmentationResult, out_path: Union[str, Path]) -> pd.DataFrame:
    """
    Write classified segments to CSV.

    Args:
        result: Output of a segmentation run
        out_path: Destination file

    Returns:
        The DataFrame that was written
    """
    segments = segments_to_dataframe(result.classified_segments)
    segments.to_csv(Path(out_path), index=False)
    logger.info(f"Wrote {len(segments)} segments to {out_path}")
    return segments
