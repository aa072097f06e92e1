"""
Tests for GPX and CSV track loading and the segmentation service.
"""

import io

import pandas as pd
import pytest

from core.csv_io import load_fixes_csv, write_segments_csv
from core.gpx import load_gpx_file, load_gpx_from_path
from core.segments import segment_fixes
from core.validation import InvalidFixError, ValidationError
from services.segmentation_service import analyze_track_file, analyze_track_data

GPX_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
  <trk>
    <name>Morning walk</name>
    <trkseg>
{points}
    </trkseg>
  </trk>
</gpx>
"""


def _gpx(points):
    lines = []
    for lat, lon, time in points:
        if time is None:
            lines.append(f'      <trkpt lat="{lat}" lon="{lon}"></trkpt>')
        else:
            lines.append(f'      <trkpt lat="{lat}" lon="{lon}"><time>{time}</time></trkpt>')
    return GPX_TEMPLATE.format(points="\n".join(lines))


def _fixes_csv(track):
    rows = ["id,latitude,longitude,timestamp"]
    for i, fix in enumerate(track):
        rows.append(f"{i + 1},{fix.latitude!r},{fix.longitude!r},{fix.timestamp}")
    return "\n".join(rows) + "\n"


class TestLoadGpx:
    """Tests for GPX loading."""

    def test_points_and_metadata(self):
        content = _gpx([
            (52.52, 13.405, "2024-01-15T10:00:00Z"),
            (52.5201, 13.405, "2024-01-15T10:00:20Z"),
        ])
        df, metadata = load_gpx_file(io.StringIO(content))

        assert list(df.columns) == ['latitude', 'longitude', 'timestamp']
        assert df['timestamp'].tolist() == [1705312800000, 1705312820000]
        assert metadata['name'] == "Morning walk"

    def test_point_without_time(self):
        content = _gpx([
            (52.52, 13.405, "2024-01-15T10:00:00Z"),
            (52.5201, 13.405, None),
        ])
        with pytest.raises(InvalidFixError, match="no timestamp"):
            load_gpx_file(io.StringIO(content))

    def test_malformed_xml(self):
        with pytest.raises(ValidationError):
            load_gpx_file(io.StringIO("<gpx><trk>"))

    def test_no_tracks(self):
        content = '<?xml version="1.0"?><gpx version="1.1" creator="test"></gpx>'
        with pytest.raises(ValidationError, match="no tracks"):
            load_gpx_file(io.StringIO(content))

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "walk.gpx"
        path.write_text(_gpx([(52.52, 13.405, "2024-01-15T10:00:00Z")]))

        df, metadata = load_gpx_from_path(str(path))
        assert len(df) == 1

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_gpx_from_path(str(tmp_path / "missing.gpx"))


class TestLoadFixesCsv:
    """Tests for the location CSV loader."""

    def test_extra_columns_ignored(self, tmp_path, walking_track):
        path = tmp_path / "locations.csv"
        path.write_text(_fixes_csv(walking_track))

        df, metadata = load_fixes_csv(path)

        assert list(df.columns) == ['latitude', 'longitude', 'timestamp']
        assert len(df) == len(walking_track)
        assert df['timestamp'].dtype == 'int64'
        assert metadata['name'] == "locations"

    def test_missing_column(self):
        with pytest.raises(InvalidFixError, match="missing columns"):
            load_fixes_csv(io.StringIO("latitude,longitude\n52.52,13.405\n"))

    def test_empty_file(self):
        with pytest.raises(InvalidFixError):
            load_fixes_csv(io.StringIO(""))

    def test_text_timestamps(self):
        content = "latitude,longitude,timestamp\n52.52,13.405,2024-01-01T10:00:00\n52.5201,13.405,2024-01-01T10:00:20\n"
        with pytest.raises(InvalidFixError, match="non-numeric values in timestamp"):
            load_fixes_csv(io.StringIO(content))

    def test_text_latitude(self):
        content = "latitude,longitude,timestamp\n52.52,13.405,0\nabc,13.405,1000\n"
        with pytest.raises(InvalidFixError, match="non-numeric values in latitude"):
            load_fixes_csv(io.StringIO(content))

    def test_fractional_timestamps(self):
        """Timestamps are not truncated to whole milliseconds."""
        content = "latitude,longitude,timestamp\n52.52,13.405,1000.5\n52.5201,13.405,2000\n"
        with pytest.raises(InvalidFixError, match="whole milliseconds"):
            load_fixes_csv(io.StringIO(content))

    def test_float_formatted_timestamps_accepted(self):
        content = "latitude,longitude,timestamp\n52.52,13.405,1000.0\n52.5201,13.405,2000.0\n"
        df, _ = load_fixes_csv(io.StringIO(content))
        assert df['timestamp'].tolist() == [1000, 2000]
        assert df['timestamp'].dtype == 'int64'

    def test_write_segments(self, tmp_path, drive_with_walk_legs):
        out_path = tmp_path / "segments.csv"
        written = write_segments_csv(segment_fixes(drive_with_walk_legs), out_path)

        assert len(written) == 3
        reloaded = pd.read_csv(out_path)
        assert reloaded['label'].tolist() == ['walking', 'faster', 'walking']
        assert reloaded['start_idx'].tolist() == [0, 3, 17]


class TestSegmentationService:
    """Tests for the file-to-result pipeline."""

    def test_analyze_csv_file(self, tmp_path, drive_with_walk_legs):
        path = tmp_path / "day.csv"
        path.write_text(_fixes_csv(drive_with_walk_legs))

        analysis = analyze_track_file(str(path))
        summary = analysis.summary()

        assert len(analysis.walking_segments) == 2
        assert len(analysis.faster_segments) == 1
        assert summary['fix_count'] == 20
        assert summary['total_distance_km'] == pytest.approx(0.6, abs=1e-3)
        assert summary['max_speed_ms'] == pytest.approx(10.0, abs=1e-3)

    def test_analyze_gpx_stream(self):
        content = _gpx([
            (52.52, 13.405, "2024-01-15T10:00:00Z"),
            (52.5201, 13.405, "2024-01-15T10:00:20Z"),
        ])
        analysis = analyze_track_file(io.StringIO(content), filename="short.gpx")

        assert analysis.filename == "short.gpx"
        assert analysis.metadata['name'] == "Morning walk"
        assert len(analysis.result.discarded_segments) == 1

    def test_analyze_track_data_rejects_empty(self):
        with pytest.raises(ValidationError):
            analyze_track_data(pd.DataFrame(columns=['latitude', 'longitude', 'timestamp']))
