"""
Speed classification and sub-leg refinement.

Segments are classified by their mean point-to-point speed. A segment that is
faster than walking may still start or end with a walk (to or from a parked
vehicle, a station, a bike rack); the refiner splits those legs off so that
only the faster middle is labelled as such.

All functions append to an explicit SegmentationResult instead of shared
state, so every call to the engine starts from empty collections.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from core.calculations import average_speed, mean_speed, pair_distances, pair_speeds, segment_length
from core.models.segment import Segment, SegmentLabel, Stop
from core.segments.params import SegmentationParams

logger = logging.getLogger(__name__)


@dataclass
class SegmentationResult:
    """
    Output collections of one segmentation run.

    walking_segments and faster_segments are the classified output.
    discarded_segments holds segments (and walking legs) dropped by the
    length checks, and stops holds the dwell periods used as boundaries.
    """
    walking_segments: List[Segment] = field(default_factory=list)
    faster_segments: List[Segment] = field(default_factory=list)
    discarded_segments: List[Segment] = field(default_factory=list)
    stops: List[Stop] = field(default_factory=list)

    def add_walking(self, segment: Segment) -> None:
        self.walking_segments.append(segment.with_label(SegmentLabel.WALKING))

    def add_faster(self, segment: Segment) -> None:
        self.faster_segments.append(segment.with_label(SegmentLabel.FASTER))

    def add_discarded(self, segment: Segment) -> None:
        self.discarded_segments.append(segment)

    @property
    def classified_segments(self) -> List[Segment]:
        """Walking and faster segments merged in time order."""
        return sorted(
            self.walking_segments + self.faster_segments,
            key=lambda s: (s.start_idx, s.end_idx)
        )


def find_leading_leg(speeds, threshold: float) -> Optional[int]:
    """
    Find the longest walking-speed prefix.

    Args:
        speeds: Pair speeds of the segment (NaN for degenerate pairs)
        threshold: Walking speed threshold in m/s

    Returns:
        Offset of the last fix of the leading leg, or None
    """
    leg_end = None
    for end in range(1, len(speeds) + 1):
        if mean_speed(speeds[:end]) <= threshold:
            leg_end = end
        else:
            break
    return leg_end


def find_trailing_leg(speeds, threshold: float) -> Optional[int]:
    """
    Find the longest walking-speed suffix.

    Args:
        speeds: Pair speeds of the segment (NaN for degenerate pairs)
        threshold: Walking speed threshold in m/s

    Returns:
        Offset of the first fix of the trailing leg, or None
    """
    leg_start = None
    for start in range(len(speeds) - 1, -1, -1):
        if mean_speed(speeds[start:]) <= threshold:
            leg_start = start
        else:
            break
    return leg_start


def resolve_leg_overlap(
    first_end: Optional[int],
    last_start: Optional[int],
    first_length: float,
    last_length: float
) -> Tuple[Optional[int], Optional[int]]:
    """
    Make sure the leading and trailing legs never share fixes.

    When the legs overlap or touch, the longer leg is kept and the other one
    is dropped; on a tie the leading leg wins.

    Returns:
        (first_end, last_start) with at most one of them set when they overlapped
    """
    if first_end is None or last_start is None or last_start > first_end:
        return first_end, last_start

    if last_length > first_length:
        logger.debug(f"Legs overlap, keeping trailing leg from offset {last_start}")
        return None, last_start

    logger.debug(f"Legs overlap, keeping leading leg up to offset {first_end}")
    return first_end, None


def refine_faster_segment(
    segment: Segment,
    params: SegmentationParams,
    result: Optional[SegmentationResult] = None
) -> SegmentationResult:
    """
    Split walking legs off the start and end of a faster segment.

    Args:
        segment: Segment whose average speed is above the walking threshold
        params: Segmentation thresholds
        result: Accumulator to append to (a new one is created if omitted)

    Returns:
        The accumulator with the middle appended as faster and long enough
        legs appended as walking
    """
    if result is None:
        result = SegmentationResult()

    fixes = segment.fixes
    size = len(fixes)
    speeds = pair_speeds(fixes)
    distances = pair_distances(fixes)
    threshold = params.walking_speed_threshold

    # Step 1: Find walking-speed legs at both ends
    first_end = find_leading_leg(speeds, threshold)
    last_start = find_trailing_leg(speeds, threshold)

    first_length = float(distances[:first_end].sum()) if first_end is not None else 0.0
    last_length = float(distances[last_start:].sum()) if last_start is not None else 0.0

    # Step 2: Legs must not share fixes
    first_end, last_start = resolve_leg_overlap(first_end, last_start, first_length, last_length)

    first_ok = first_end is not None and first_length >= params.min_leg_length
    last_ok = last_start is not None and last_length >= params.min_leg_length

    # Step 3: No usable leg means the whole segment is faster
    if not first_ok and not last_ok:
        logger.debug(f"No walking legs in segment [{segment.start_idx}, {segment.end_idx}]")
        result.add_faster(segment)
        return result

    # Step 4: Middle lies strictly between the legs
    middle_start = first_end + 1 if first_end is not None else 0
    middle_end = last_start if last_start is not None else size

    if middle_start < middle_end:
        result.add_faster(segment.sub_segment(middle_start, middle_end - 1))

    if first_end is not None:
        leg = segment.sub_segment(0, first_end)
        if first_ok:
            result.add_walking(leg)
        else:
            result.add_discarded(leg)

    if last_start is not None:
        leg = segment.sub_segment(last_start, size - 1)
        if last_ok:
            result.add_walking(leg)
        else:
            result.add_discarded(leg)

    logger.debug(
        f"Refined segment [{segment.start_idx}, {segment.end_idx}]: "
        f"leading leg {first_length:.1f}m, trailing leg {last_length:.1f}m"
    )
    return result


def classify_segment(
    segment: Segment,
    params: SegmentationParams,
    result: Optional[SegmentationResult] = None
) -> SegmentationResult:
    """
    Classify one candidate segment as walking or faster.

    Segments shorter than the minimum length are discarded. Segments at or
    below the walking threshold are walking; anything faster goes through
    the sub-leg refiner.

    Args:
        segment: Candidate segment from the segment builder
        params: Segmentation thresholds
        result: Accumulator to append to (a new one is created if omitted)

    Returns:
        The accumulator
    """
    if result is None:
        result = SegmentationResult()

    fixes = segment.fixes
    length = segment_length(fixes)
    if length < params.min_segment_length:
        logger.debug(
            f"Discarding segment [{segment.start_idx}, {segment.end_idx}]: "
            f"{length:.1f}m < {params.min_segment_length}m"
        )
        result.add_discarded(segment)
        return result

    avg_speed = average_speed(fixes)
    if avg_speed <= params.walking_speed_threshold:
        result.add_walking(segment)
    else:
        refine_faster_segment(segment, params, result)

    return result
