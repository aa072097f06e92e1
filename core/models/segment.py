"""
Segment data models.

This module defines the data structures for path segments cut from a fix
sequence. A segment never copies fixes: it keeps a reference to the shared,
immutable fix tuple and an inclusive index range into it.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple

import pandas as pd

from core.models.fix import Fix


class SegmentLabel(str, Enum):
    """Classification of a segment."""
    WALKING = 'walking'
    FASTER = 'faster'


@dataclass(frozen=True)
class Segment:
    """
    Represents a contiguous run of fixes.

    Index boundaries are inclusive and refer to positions in the original
    fix sequence, so sub-segments produced by the refiner keep pointing at
    the same sequence as the segment they were cut from.
    """
    # Shared fix sequence (arena)
    track: Tuple[Fix, ...] = field(repr=False, compare=False)

    # Index boundaries in the original data
    start_idx: int
    end_idx: int

    # Classification (set once the classifier has decided)
    label: Optional[SegmentLabel] = None

    def __post_init__(self):
        if not 0 <= self.start_idx <= self.end_idx < len(self.track):
            raise IndexError(
                f"Segment range [{self.start_idx}, {self.end_idx}] is outside "
                f"a track of {len(self.track)} fixes"
            )

    @property
    def fixes(self) -> Tuple[Fix, ...]:
        """The fixes of this segment in their original order."""
        return self.track[self.start_idx:self.end_idx + 1]

    @property
    def first(self) -> Fix:
        return self.track[self.start_idx]

    @property
    def last(self) -> Fix:
        return self.track[self.end_idx]

    @property
    def start_time(self) -> int:
        """Timestamp of the first fix (epoch ms)."""
        return self.first.timestamp

    @property
    def end_time(self) -> int:
        """Timestamp of the last fix (epoch ms)."""
        return self.last.timestamp

    @property
    def point_count(self) -> int:
        return self.end_idx - self.start_idx + 1

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        from core.calculations import elapsed_seconds
        return elapsed_seconds(self.first, self.last)

    @property
    def distance(self) -> float:
        """Total length in meters."""
        from core.calculations import segment_length
        return segment_length(self.fixes)

    @property
    def avg_speed_ms(self) -> float:
        """Mean point-to-point speed in meters per second."""
        from core.calculations import average_speed
        return average_speed(self.fixes)

    @property
    def avg_speed_kmh(self) -> float:
        """Mean point-to-point speed in kilometers per hour."""
        from core.calculations import meters_per_second_to_kmh
        return meters_per_second_to_kmh(self.avg_speed_ms)

    @property
    def distance_km(self) -> float:
        """Distance in kilometers."""
        return self.distance / 1000.0

    @property
    def endpoints(self) -> Tuple[Fix, Fix]:
        """First and last fix, as used for route lookups."""
        return self.first, self.last

    def sub_segment(self, start_offset: int, end_offset: int) -> 'Segment':
        """
        Cut a sub-segment using offsets relative to this segment's first fix.

        Args:
            start_offset: Offset of the first fix to keep
            end_offset: Offset of the last fix to keep (inclusive)

        Returns:
            Unlabelled segment over the same track
        """
        return Segment(
            track=self.track,
            start_idx=self.start_idx + start_offset,
            end_idx=self.start_idx + end_offset,
        )

    def with_label(self, label: SegmentLabel) -> 'Segment':
        """Return a copy of this segment carrying the given label."""
        return replace(self, label=label)

    def to_dict(self) -> Dict[str, Any]:
        """Convert segment to dictionary for DataFrame creation."""
        return {
            'label': self.label.value if self.label is not None else None,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'start_idx': self.start_idx,
            'end_idx': self.end_idx,
            'point_count': self.point_count,
            'distance': self.distance,
            'duration': self.duration,
            'avg_speed_ms': self.avg_speed_ms,
            'avg_speed_kmh': self.avg_speed_kmh,
            'start_latitude': self.first.latitude,
            'start_longitude': self.first.longitude,
            'end_latitude': self.last.latitude,
            'end_longitude': self.last.longitude,
        }


@dataclass(frozen=True)
class Stop:
    """
    A detected dwell period.

    The subject stayed around the reference fix long enough for the dwell
    fix to qualify. The fixes strictly between the reference fix and the
    anchor belong to the stop; the anchor starts the next segment.
    """
    track: Tuple[Fix, ...] = field(repr=False, compare=False)
    reference_idx: int
    dwell_idx: int
    anchor_idx: int

    @property
    def reference(self) -> Fix:
        return self.track[self.reference_idx]

    @property
    def anchor(self) -> Fix:
        return self.track[self.anchor_idx]

    @property
    def dwell_range(self) -> range:
        """Indices of the fixes consumed by the stop."""
        return range(self.reference_idx + 1, self.anchor_idx)

    @property
    def arrival_time(self) -> int:
        return self.reference.timestamp

    @property
    def departure_time(self) -> int:
        return self.anchor.timestamp

    @property
    def duration(self) -> float:
        """Dwell duration in seconds."""
        from core.calculations import elapsed_seconds
        return elapsed_seconds(self.reference, self.anchor)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'latitude': self.reference.latitude,
            'longitude': self.reference.longitude,
            'arrival_time': self.arrival_time,
            'departure_time': self.departure_time,
            'duration': self.duration,
            'reference_idx': self.reference_idx,
            'dwell_idx': self.dwell_idx,
            'anchor_idx': self.anchor_idx,
        }


def segments_to_dataframe(segments: List[Segment]) -> pd.DataFrame:
    """
    Convert a list of segments to a pandas DataFrame.

    Args:
        segments: List of Segment objects

    Returns:
        pandas DataFrame with segment data
    """
    if not segments:
        return pd.DataFrame()

    data = [segment.to_dict() for segment in segments]
    return pd.DataFrame(data)
