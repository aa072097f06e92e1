"""
Segment detection driver.

This module walks a fix sequence, cuts it into candidate segments at the
anchors found by the stop detector, and hands each candidate to the speed
classifier. Each function has a single responsibility and can be tested
independently.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from core.models.fix import Fix
from core.models.segment import Segment
from core.segments.anchors import find_anchor
from core.segments.classifier import SegmentationResult, classify_segment
from core.segments.params import SegmentationParams
from core.validation import validate_fixes

logger = logging.getLogger(__name__)


def segment_fixes(
    fixes: Iterable[Fix],
    params: Optional[SegmentationParams] = None
) -> SegmentationResult:
    """
    Partition a fix sequence into walking and faster segments.

    This is the main entry point for segmentation. The whole history is
    processed in one pass; nothing is kept between calls.

    Args:
        fixes: Fixes in non-decreasing timestamp order
        params: Segmentation thresholds (defaults if omitted)

    Returns:
        SegmentationResult with walking, faster and discarded segments and
        the stops used as boundaries

    Raises:
        EmptyInputError: If there are no fixes
        InvalidFixError: If a fix is malformed or timestamps decrease
        ValidationError: If a threshold is out of range
    """
    if params is None:
        params = SegmentationParams()
    params.validate()

    track = validate_fixes(fixes, "Segmentation input")

    logger.info(
        f"Starting segmentation of {len(track)} fixes with record_delay={params.record_delay}s, "
        f"stationary_radius={params.stationary_radius}m, "
        f"walking_speed_threshold={params.walking_speed_threshold:.3f}m/s"
    )

    result = SegmentationResult()
    start_idx = 0
    i = 0

    while i < len(track):
        stop = find_anchor(track, i, params)

        if stop is not None:
            # Close the segment at the reference fix and restart at the anchor
            classify_segment(Segment(track=track, start_idx=start_idx, end_idx=i), params, result)
            result.stops.append(stop)
            start_idx = stop.anchor_idx
            i = stop.anchor_idx
        else:
            i += 1

    # Whatever follows the last anchor is always classified
    classify_segment(Segment(track=track, start_idx=start_idx, end_idx=len(track) - 1), params, result)

    logger.info(
        f"Segmentation finished: {len(result.walking_segments)} walking, "
        f"{len(result.faster_segments)} faster, {len(result.discarded_segments)} discarded, "
        f"{len(result.stops)} stops"
    )
    return result


def analyze_segment_distribution(segments: List[Segment]) -> Dict[str, Any]:
    """
    Analyze the distribution of detected segments.

    This provides useful statistics about the segments for debugging
    and quality assessment.

    Args:
        segments: List of detected segments

    Returns:
        Dictionary with distribution statistics
    """
    if not segments:
        return {}

    distances = [s.distance for s in segments]
    durations = [s.duration for s in segments]
    speeds = [s.avg_speed_ms for s in segments]

    stats = {
        'count': len(segments),
        'total_distance_km': sum(distances) / 1000,
        'total_duration_minutes': sum(durations) / 60,
        'avg_segment_distance_m': float(np.mean(distances)),
        'avg_segment_duration_s': float(np.mean(durations)),
        'avg_speed_ms': float(np.mean(speeds)),
        'distance_range': (min(distances), max(distances)),
        'duration_range': (min(durations), max(durations)),
        'speed_range': (min(speeds), max(speeds))
    }

    return stats
