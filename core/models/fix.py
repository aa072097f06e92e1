"""
Fix data model.

A fix is a single timestamped position observation as recorded by the
location service. Fix sequences are handed to the segmentation engine as
immutable tuples.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Dict, Any, Tuple

import pandas as pd


@dataclass(frozen=True)
class Fix:
    """
    A single position observation.

    Attributes:
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
        timestamp: Unix epoch milliseconds
    """
    latitude: float
    longitude: float
    timestamp: int

    @property
    def time(self) -> datetime:
        """Timestamp as a timezone-aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp / 1000.0, tz=timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert fix to dictionary for DataFrame creation."""
        return {
            'latitude': self.latitude,
            'longitude': self.longitude,
            'timestamp': self.timestamp,
        }


def fixes_to_dataframe(fixes: Iterable[Fix]) -> pd.DataFrame:
    """
    Convert fixes to a pandas DataFrame.

    Args:
        fixes: Fixes to convert

    Returns:
        DataFrame with 'latitude', 'longitude', 'timestamp' columns
    """
    data = [fix.to_dict() for fix in fixes]
    if not data:
        return pd.DataFrame(columns=['latitude', 'longitude', 'timestamp'])
    return pd.DataFrame(data)


def dataframe_to_fixes(df: pd.DataFrame) -> Tuple[Fix, ...]:
    """
    Convert a track DataFrame to an immutable tuple of fixes.

    Args:
        df: DataFrame with 'latitude', 'longitude', 'timestamp' columns

    Returns:
        Tuple of Fix objects in DataFrame row order

    Raises:
        ValidationError: If the DataFrame is empty or malformed
    """
    from core.validation import validate_fix_dataframe

    df = validate_fix_dataframe(df, "Track data")

    fixes: List[Fix] = [
        Fix(latitude=float(lat), longitude=float(lon), timestamp=int(ts))
        for lat, lon, ts in zip(df['latitude'], df['longitude'], df['timestamp'])
    ]
    return tuple(fixes)
