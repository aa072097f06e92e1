"""
Segments package.

This package contains the trajectory segmentation engine: stop/anchor
detection, the segment builder loop, speed classification and sub-leg
refinement.
"""

# Core segmentation functions
from .detector import (
    segment_fixes,
    analyze_segment_distribution
)
from .anchors import (
    find_anchor,
    find_dwell_index,
    find_departure_index
)
from .classifier import (
    SegmentationResult,
    classify_segment,
    refine_faster_segment,
    find_leading_leg,
    find_trailing_leg,
    resolve_leg_overlap
)
from .params import SegmentationParams

# Segment models
from core.models.segment import Segment, SegmentLabel, Stop, segments_to_dataframe

__all__ = [
    # Main entry point
    'segment_fixes',
    'SegmentationParams',
    'SegmentationResult',

    # Pipeline stages
    'find_anchor',
    'find_dwell_index',
    'find_departure_index',
    'classify_segment',
    'refine_faster_segment',
    'find_leading_leg',
    'find_trailing_leg',
    'resolve_leg_overlap',
    'analyze_segment_distribution',

    # Models
    'Segment',
    'SegmentLabel',
    'Stop',
    'segments_to_dataframe',
]
