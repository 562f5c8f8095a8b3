"""
Tests for the GCP sampling module.

These tests verify:
    - Column position selection (including the duplicated right edge)
    - Row selection by spacing and by the last timestamp
    - The carried "previous pixel failed" flag, within and across rows
    - GCP export
"""

import csv
import json

import pytest
import numpy as np
from numpy.testing import assert_allclose

from swath_gcps.gcp_compute import (
    GCP,
    column_positions,
    compute_gcps,
    gcps_to_array,
    sample_gcps,
    save_gcps_csv,
    save_gcps_json,
)
from swath_gcps.projection import PROJECTIONS, SatelliteProjection
from swath_gcps.tle import TLE


class GridProjection(SatelliteProjection):
    """Projection with locate(x, y) = (x, y) except for listed failing pixels."""

    def __init__(self, width, height, column_spacing, row_spacing, failing=()):
        self.image_width = width
        self.image_height = height
        self.column_spacing = column_spacing
        self.row_spacing = row_spacing
        self.failing = set(failing)
        self.calls = []

    @classmethod
    def from_config(cls, cfg, tle, timestamps):
        return cls(
            cfg['image_width'],
            len(timestamps),
            cfg['gcp_spacing_x'],
            cfg['gcp_spacing_y'],
            cfg.get('failing', ()),
        )

    def locate(self, x, y):
        self.calls.append((x, y))
        if (x, y) in self.failing:
            return None
        return float(x), float(y)


class NeverProjection(GridProjection):
    """Projection where nothing can be located."""

    def locate(self, x, y):
        self.calls.append((x, y))
        return None


@pytest.fixture
def dummy_tle():
    return TLE(
        name="ISS (ZARYA)",
        line1="1 25544U 98067A   24127.82853009  .00015698  00000+0  27310-3 0  9995",
        line2="2 25544  51.6393 160.4574 0003580 140.6673 205.7250 15.50957674452123",
    )


class TestColumnPositions:
    """Tests for the sampled column set."""

    def test_uneven_spacing_appends_last_column(self):
        assert column_positions(10, 4) == [0, 4, 8, 9]

    def test_last_column_on_stride_is_duplicated(self):
        assert column_positions(9, 4) == [0, 4, 8, 8]

    def test_spacing_larger_than_width(self):
        assert column_positions(3, 100) == [0, 2]

    def test_single_column(self):
        assert column_positions(1, 5) == [0, 0]


class TestSampleGCPs:
    """Tests for the sampling traversal."""

    def test_small_grid_all_rows(self):
        """5x3 grid, spacing 2x1: every row yields x = 0, 2, 4, 4."""
        projection = GridProjection(5, 3, 2, 1)
        gcps = sample_gcps(projection, 3)

        assert len(gcps) == 12
        for y in range(3):
            row = [g for g in gcps if g.pixel_y == y]
            assert [g.pixel_x for g in row] == [0.0, 2.0, 4.0, 4.0]
            assert all(g.longitude == g.pixel_x for g in row)
            assert all(g.latitude == g.pixel_y for g in row)

    def test_scan_order(self):
        projection = GridProjection(10, 10, 4, 4)
        gcps = sample_gcps(projection, 10)

        keys = [(g.pixel_y, g.pixel_x) for g in gcps]
        assert keys == sorted(keys)

    def test_rows_by_spacing_and_last_timestamp(self):
        """Row spacing 4 over 10 rows samples rows 0, 4, 8 and the last row 9."""
        projection = GridProjection(10, 10, 4, 4)
        gcps = sample_gcps(projection, 10)

        assert sorted({g.pixel_y for g in gcps}) == [0.0, 4.0, 8.0, 9.0]

    def test_last_timestamp_row_inside_image(self):
        """The forced row follows the timestamp count, not the image height."""
        projection = GridProjection(10, 10, 4, 4)
        gcps = sample_gcps(projection, 7)

        assert sorted({g.pixel_y for g in gcps}) == [0.0, 4.0, 6.0, 8.0]

    def test_count_when_everything_locates(self):
        """Count is sampled rows times column positions, duplicates included."""
        projection = GridProjection(10, 10, 3, 4)
        gcps = sample_gcps(projection, 10)

        # columns 0, 3, 6, 9, 9 on rows 0, 4, 8, 9
        assert len(gcps) == 4 * 5

    def test_right_edge_in_every_sampled_row(self):
        projection = GridProjection(23, 17, 5, 3)
        gcps = sample_gcps(projection, 17)

        for y in {g.pixel_y for g in gcps}:
            assert 22.0 in [g.pixel_x for g in gcps if g.pixel_y == y]

    def test_pixels_within_image(self):
        projection = GridProjection(23, 17, 5, 3)
        gcps = sample_gcps(projection, 17)

        assert all(0 <= g.pixel_x <= 22 for g in gcps)
        assert all(0 <= g.pixel_y <= 16 for g in gcps)

    def test_nothing_locates(self):
        projection = NeverProjection(10, 10, 4, 4)
        gcps = sample_gcps(projection, 10)

        assert gcps == []
        # Every failure keeps the flag set, so every pixel gets tried
        assert len(projection.calls) == 10 * 4

    def test_empty_image(self):
        projection = GridProjection(10, 0, 4, 4)
        assert sample_gcps(projection, 0) == []
        assert projection.calls == []

    def test_repeatable(self):
        first = sample_gcps(GridProjection(31, 20, 7, 5, failing={(7, 0)}), 20)
        second = sample_gcps(GridProjection(31, 20, 7, 5, failing={(7, 0)}), 20)
        assert first == second


class TestInvalidFlagCarry:
    """Tests for the "previous pixel failed" flag."""

    def test_failure_at_row_end_forces_next_row_start(self):
        """A failing last column on row 0 makes row 1 try its first column only."""
        projection = GridProjection(10, 10, 4, 4, failing={(9, 0)})
        gcps = sample_gcps(projection, 10)

        row1 = [g for g in gcps if g.pixel_y == 1]
        assert row1 == [GCP(0.0, 1.0, 0.0, 1.0)]
        assert (4, 1) not in projection.calls
        assert not any(y == 2 for _, y in projection.calls)

    def test_consecutive_failures_keep_forcing(self):
        """While forced pixels keep failing, the next column is tried too."""
        projection = GridProjection(10, 10, 4, 4, failing={(9, 0), (0, 1), (4, 1)})
        gcps = sample_gcps(projection, 10)

        assert [(x, y) for x, y in projection.calls if y == 1] == [(0, 1), (4, 1), (8, 1)]
        assert [g.pixel_x for g in gcps if g.pixel_y == 1] == [8.0]
        assert (9, 1) not in projection.calls

    def test_no_carry_after_successful_row_end(self):
        projection = GridProjection(10, 10, 4, 4, failing={(4, 0)})
        sample_gcps(projection, 10)

        assert not any(y == 1 for _, y in projection.calls)

    def test_failure_inside_sampled_row(self):
        """A failing pixel in a sampled row only drops that pixel."""
        projection = GridProjection(10, 10, 4, 4, failing={(4, 0)})
        gcps = sample_gcps(projection, 10)

        assert [g.pixel_x for g in gcps if g.pixel_y == 0] == [0.0, 8.0, 9.0]

    def test_carry_into_last_row_is_harmless(self):
        """The last row is sampled in full whether or not a flag is carried."""
        projection = GridProjection(10, 10, 4, 4, failing={(9, 8)})
        gcps = sample_gcps(projection, 10)

        assert [g.pixel_x for g in gcps if g.pixel_y == 9] == [0.0, 4.0, 8.0, 9.0]


class TestComputeGCPs:
    """Tests for the full build-and-sample entry point."""

    @pytest.fixture(autouse=True)
    def grid_type(self, monkeypatch):
        monkeypatch.setitem(PROJECTIONS, 'test_grid', GridProjection)

    def test_builds_registered_projection(self, dummy_tle):
        cfg = {'type': 'test_grid', 'image_width': 5, 'gcp_spacing_x': 2, 'gcp_spacing_y': 1}
        gcps = compute_gcps(cfg, dummy_tle, [0.0, 1.0, 2.0])

        assert len(gcps) == 12
        assert gcps[0] == GCP(0.0, 0.0, 0.0, 0.0)
        assert gcps[-1] == GCP(4.0, 2.0, 4.0, 2.0)

    def test_type_is_case_insensitive(self, dummy_tle):
        cfg = {'type': 'TEST_GRID', 'image_width': 5, 'gcp_spacing_x': 2, 'gcp_spacing_y': 1}
        assert len(compute_gcps(cfg, dummy_tle, [0.0])) == 4

    def test_empty_timestamps(self, dummy_tle):
        cfg = {'type': 'test_grid', 'image_width': 5, 'gcp_spacing_x': 2, 'gcp_spacing_y': 1}
        assert compute_gcps(cfg, dummy_tle, []) == []

    def test_unknown_type_propagates(self, dummy_tle):
        with pytest.raises(ValueError, match="Unsupported projection"):
            compute_gcps({'type': 'no_such_scanner'}, dummy_tle, [0.0])

    def test_missing_type_propagates(self, dummy_tle):
        with pytest.raises(ValueError):
            compute_gcps({}, dummy_tle, [0.0])


class TestExport:
    """Tests for GCP export helpers."""

    @pytest.fixture
    def gcps(self):
        return [GCP(0.0, 0.0, 10.5, 45.25), GCP(4.0, 0.0, 11.0, 45.5)]

    def test_gcps_are_immutable(self, gcps):
        with pytest.raises(AttributeError):
            gcps[0].longitude = 0.0

    def test_to_array(self, gcps):
        arr = gcps_to_array(gcps)
        assert arr.shape == (2, 4)
        assert_allclose(arr[1], [4.0, 0.0, 11.0, 45.5])

    def test_to_array_empty(self):
        assert gcps_to_array([]).shape == (0, 4)

    def test_save_csv(self, gcps, tmp_path):
        path = tmp_path / "gcps.csv"
        save_gcps_csv(gcps, str(path))

        with open(path, newline='') as f:
            rows = list(csv.DictReader(f))

        assert len(rows) == 2
        assert float(rows[0]['longitude']) == pytest.approx(10.5)
        assert float(rows[1]['pixel_x']) == pytest.approx(4.0)

    def test_save_json(self, gcps, tmp_path):
        path = tmp_path / "gcps.json"
        save_gcps_json(gcps, str(path))

        with open(path) as f:
            data = json.load(f)

        assert data['count'] == 2
        assert data['gcps'][0] == {
            'pixel_x': 0.0, 'pixel_y': 0.0, 'longitude': 10.5, 'latitude': 45.25,
        }


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
