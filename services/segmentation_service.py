"""
Shared segmentation service.

This module provides a unified pipeline from a loaded track (or an uploaded
file) to classified segments plus summary metrics, used by the API backend.
"""

import os
import pandas as pd
import logging
from typing import Dict, Any, Optional, Sequence

from core.calculations import calculate_point_metrics
from core.csv_io import load_fixes_csv
from core.gpx import load_gpx_file, load_gpx_from_path
from core.models.fix import Fix, dataframe_to_fixes
from core.segments import segment_fixes, analyze_segment_distribution, SegmentationParams, SegmentationResult

logger = logging.getLogger(__name__)


class SegmentationAnalysisResult:
    """Container for segmentation results."""

    def __init__(self,
                 fixes: Sequence[Fix],
                 result: SegmentationResult,
                 metadata: Dict[str, Any],
                 filename: str,
                 params: SegmentationParams):
        self.fixes = tuple(fixes)
        self.result = result
        self.metadata = metadata
        self.filename = filename
        self.params = params

        # Calculate derived metrics
        self._calculate_summary_metrics()

    @property
    def walking_segments(self):
        return self.result.walking_segments

    @property
    def faster_segments(self):
        return self.result.faster_segments

    @property
    def stops(self):
        return self.result.stops

    def _calculate_summary_metrics(self) -> None:
        """Calculate summary metrics from segments and the raw track."""
        self.walking_stats = analyze_segment_distribution(self.walking_segments)
        self.faster_stats = analyze_segment_distribution(self.faster_segments)

        self.walking_distance = self.walking_stats.get('total_distance_km', 0.0)
        self.faster_distance = self.faster_stats.get('total_distance_km', 0.0)

        point_metrics = calculate_point_metrics(self.fixes)
        self.total_distance = float(point_metrics['distance_m'].sum()) / 1000
        self.duration_seconds = float(point_metrics['duration_sec'].sum())
        speeds = point_metrics['speed_mps'].dropna()
        self.max_speed = float(speeds.max()) if not speeds.empty else 0.0

        self.stop_duration_seconds = float(sum(stop.duration for stop in self.stops))

    def summary(self) -> Dict[str, Any]:
        """Track-level summary for reporting."""
        return {
            'filename': self.filename,
            'fix_count': len(self.fixes),
            'total_distance_km': self.total_distance,
            'duration_seconds': self.duration_seconds,
            'max_speed_ms': self.max_speed,
            'walking_segments': len(self.walking_segments),
            'faster_segments': len(self.faster_segments),
            'discarded_segments': len(self.result.discarded_segments),
            'stops': len(self.stops),
            'walking_distance_km': self.walking_distance,
            'faster_distance_km': self.faster_distance,
            'stop_duration_seconds': self.stop_duration_seconds,
        }


def analyze_fixes(fixes: Sequence[Fix],
                  filename: str = "current_track",
                  metadata: Optional[Dict[str, Any]] = None,
                  params: Optional[SegmentationParams] = None) -> SegmentationAnalysisResult:
    """
    Segment a fix sequence and compute summary metrics.

    Args:
        fixes: Fixes in time order
        filename: Name for the track (for display purposes)
        metadata: Optional metadata dict
        params: Segmentation thresholds (defaults if omitted)

    Returns:
        SegmentationAnalysisResult: Complete analysis results

    Raises:
        ValidationError: If the fixes or parameters are invalid
    """
    if metadata is None:
        metadata = {}
    if params is None:
        params = SegmentationParams()

    try:
        logger.info(f"Segmenting {filename} with {len(fixes)} fixes")
        result = segment_fixes(fixes, params)
        return SegmentationAnalysisResult(
            fixes=fixes,
            result=result,
            metadata=metadata,
            filename=filename,
            params=params
        )

    except Exception as e:
        logger.error(f"Error segmenting {filename}: {e}")
        raise


def analyze_track_data(track_data: pd.DataFrame,
                       filename: str = "current_track",
                       metadata: Optional[Dict[str, Any]] = None,
                       params: Optional[SegmentationParams] = None) -> SegmentationAnalysisResult:
    """
    Segment track data that's already loaded into a DataFrame.

    Args:
        track_data: DataFrame with 'latitude', 'longitude', 'timestamp' columns
        filename: Name for the track (for display purposes)
        metadata: Optional metadata dict
        params: Segmentation thresholds (defaults if omitted)

    Returns:
        SegmentationAnalysisResult: Complete analysis results
    """
    fixes = dataframe_to_fixes(track_data)
    return analyze_fixes(fixes, filename=filename, metadata=metadata, params=params)


def load_track_file(file, filename: Optional[str] = None):
    """
    Load a GPX or CSV track from a file object or path.

    Args:
        file: File object or path
        filename: Name used to pick the format (defaults to the file's name)

    Returns:
        tuple: (DataFrame with track data, dict with metadata)
    """
    if filename is None:
        filename = getattr(file, 'name', str(file))

    if str(filename).lower().endswith('.csv'):
        return load_fixes_csv(file)

    if isinstance(file, (str, os.PathLike)):
        return load_gpx_from_path(str(file))

    return load_gpx_file(file)


def analyze_track_file(file,
                       filename: Optional[str] = None,
                       params: Optional[SegmentationParams] = None) -> SegmentationAnalysisResult:
    """
    Segment a single track file using the standard pipeline.

    This function loads a GPX or CSV file and delegates to analyze_track_data
    for consistent processing.

    Args:
        file: File object or file path to analyze
        filename: Display name (defaults to the file's name)
        params: Segmentation thresholds (defaults if omitted)

    Returns:
        SegmentationAnalysisResult: Complete analysis results
    """
    if filename is None:
        filename = getattr(file, 'name', str(file))

    try:
        track_data, metadata = load_track_file(file, filename)
        logger.info(f"Loaded {filename} with {len(track_data)} fixes")

        return analyze_track_data(
            track_data=track_data,
            filename=filename,
            metadata=metadata,
            params=params
        )

    except Exception as e:
        logger.error(f"Error analyzing {filename}: {e}")
        raise
