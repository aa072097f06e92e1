"""
Stop and anchor detection.

An anchor marks the end of a dwell period. Starting from a reference fix A,
the detector first looks for a fix B that is still close to A after the
minimum dwell time, then for the last fix C that stays inside the scan
radius before the track moves away. C becomes the start of the next segment.

Each search stops as soon as the track leaves the scan radius, so a single
search costs O(k) where k is the number of consecutive fixes inside the
radius. Over a whole track the driver is O(n*k), which degrades to O(n^2)
when every fix sits inside one radius.
"""

import logging
from typing import Optional, Sequence

from core.calculations import distance, elapsed_seconds
from core.models.fix import Fix
from core.models.segment import Stop
from core.segments.params import SegmentationParams

logger = logging.getLogger(__name__)


def find_dwell_index(fixes: Sequence[Fix], i: int, params: SegmentationParams) -> Optional[int]:
    """
    Find the first fix confirming that the subject stayed near fixes[i].

    Args:
        fixes: Full fix sequence
        i: Index of the reference fix A
        params: Segmentation thresholds

    Returns:
        Index of B, or None if the track leaves the scan radius first
    """
    reference = fixes[i]
    for j in range(i + 1, len(fixes)):
        candidate = fixes[j]
        gap = distance(reference, candidate)

        if gap > params.max_stationary_radius:
            return None

        if (elapsed_seconds(reference, candidate) >= params.record_delay
                and gap <= params.stationary_radius):
            return j

    return None


def find_departure_index(fixes: Sequence[Fix], i: int, params: SegmentationParams) -> Optional[int]:
    """
    Find the last fix still inside the scan radius around fixes[i].

    Args:
        fixes: Full fix sequence
        i: Index of the reference fix A
        params: Segmentation thresholds

    Returns:
        Index of C, or None if the very next fix is already outside
    """
    reference = fixes[i]
    last_inside = None
    for j in range(i + 1, len(fixes)):
        if distance(reference, fixes[j]) > params.max_stationary_radius:
            break
        last_inside = j

    return last_inside


def find_anchor(fixes: Sequence[Fix], i: int, params: SegmentationParams) -> Optional[Stop]:
    """
    Look for a stop that starts at fixes[i].

    Args:
        fixes: Full fix sequence (validated, time ordered)
        i: Index of the reference fix A
        params: Segmentation thresholds

    Returns:
        Stop describing A, B and the anchor C, or None when no anchor exists
        at this position
    """
    dwell_idx = find_dwell_index(fixes, i, params)
    if dwell_idx is None:
        return None

    anchor_idx = find_departure_index(fixes, i, params)
    if anchor_idx is None:
        return None

    logger.debug(f"Anchor at fix {anchor_idx} (reference {i}, dwell confirmed at {dwell_idx})")
    return Stop(track=tuple(fixes), reference_idx=i, dwell_idx=dwell_idx, anchor_idx=anchor_idx)
