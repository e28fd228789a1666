"""
Tests for the ISO 15416 linear measurement engine.
"""

import numpy as np
import pytest

from src.barcode.linear import (
    LinearMeasurements,
    aggregate_measurements,
    analyze_profile,
    check_quiet_zones,
    decodability,
    defects,
    edge_contrast,
    element_bounds,
    measure_scan_line,
    measure_scan_lines,
    scan_line_positions,
)
from src.barcode.reflectance import ReflectanceProfile


def _profile(values) -> ReflectanceProfile:
    return ReflectanceProfile(np.array(values, dtype=np.float64))


class TestScanLinePositions:
    """Tests for scan line placement."""

    def test_even_spacing(self):
        """Test that lines are spread evenly and floored."""
        assert scan_line_positions(110, 10) == [10, 20, 30, 40, 50, 60, 70, 80, 90, 100]
        assert scan_line_positions(10, 3) == [2, 5, 7]

    def test_positions_stay_inside(self):
        """Test that every position is a valid row."""
        for height in (1, 7, 40, 333):
            assert all(0 <= y < height for y in scan_line_positions(height, 10))


class TestElements:
    """Tests for element segmentation and edge measurements."""

    def test_element_bounds_includes_last_element(self):
        """Test that the trailing element is not dropped."""
        values = np.array([100, 100, 0, 0, 100, 0], dtype=np.float64)
        assert element_bounds(values, 50) == [
            (0, 2, False),
            (2, 4, True),
            (4, 5, False),
            (5, 6, True),
        ]

    def test_edge_contrast_ignores_noise(self):
        """Test that transitions at or below the noise floor are ignored."""
        assert edge_contrast(np.array([50, 53, 55, 95, 90], dtype=np.float64)) == pytest.approx(40.0)
        assert edge_contrast(np.array([50, 52, 54], dtype=np.float64)) == 0.0
        assert edge_contrast(np.array([50], dtype=np.float64)) == 0.0

    def test_defects_clean_profile(self):
        """Test that ideal elements have no defects."""
        values = np.array([100, 100, 0, 0, 100, 100], dtype=np.float64)
        assert defects(values, 0, 100) == 0.0

    def test_defects_spot_in_space(self):
        """Test a dark spot inside a space."""
        values = np.array([100, 80, 100, 0, 0, 100], dtype=np.float64)
        assert defects(values, 0, 100) == pytest.approx(0.2)

    def test_defects_without_contrast(self):
        """Test that a flat profile reports no defects."""
        assert defects(np.full(5, 40.0), 40, 40) == 0.0

    def test_decodability_regular(self):
        """Test that evenly spaced edges are fully decodable."""
        values = np.tile(np.repeat([100.0, 0.0], 5), 4)
        assert decodability(values, 50) == pytest.approx(1.0)

    def test_decodability_too_few_edges(self):
        """Test that fewer than four edges is undecodable."""
        values = np.array([100, 100, 0, 0, 100, 100], dtype=np.float64)
        assert decodability(values, 50) == 0.0

    def test_decodability_irregular(self):
        """Test that an irregular element lowers decodability."""
        widths = [(5, 100.0), (5, 0.0), (10, 100.0), (5, 0.0), (5, 100.0), (5, 0.0)]
        values = np.concatenate([np.full(n, level) for n, level in widths])
        # Edge spacings 5, 10, 5, 5: worst deviation (10 - 6.25) / 6.25
        assert decodability(values, 50) == pytest.approx(0.4)


class TestQuietZones:
    """Tests for quiet zone compliance."""

    def _values(self, left: int, right: int) -> np.ndarray:
        return np.concatenate([np.full(left, 100.0), np.zeros(10), np.full(right, 100.0)])

    def test_exact_requirement_is_compliant(self):
        """Test that exactly requirement x 10 light samples is enough."""
        left, right, ok = check_quiet_zones(self._values(110, 70), 50, (11, 7))
        assert (left, right, ok) == (110, 70, True)

    def test_one_sample_short_fails(self):
        """Test the off-by-one boundary on each side."""
        assert not check_quiet_zones(self._values(109, 70), 50, (11, 7))[2]
        assert not check_quiet_zones(self._values(110, 69), 50, (11, 7))[2]

    def test_all_light_profile(self):
        """Test a profile with no bar at all."""
        values = np.full(30, 100.0)
        assert check_quiet_zones(values, 50, (1, 1)) == (30, 30, True)


class TestAnalyzeProfile:
    """Tests for single-line analysis."""

    def test_ideal_stripes(self):
        """Test an ideal black/white profile."""
        bars = np.tile(np.repeat([0.0, 100.0], 10), 5)
        values = np.concatenate([np.full(120, 100.0), bars, np.full(110, 100.0)])
        m = analyze_profile(_profile(values), (11, 7))
        assert m.symbol_contrast == pytest.approx(100.0)
        assert m.edge_contrast == pytest.approx(100.0)
        assert m.modulation == pytest.approx(1.0)
        assert m.defects == pytest.approx(0.0)
        assert m.decodability == pytest.approx(1.0)
        assert m.decode
        assert m.quiet_zone_compliant
        assert m.sample_count == values.size

    def test_low_contrast_does_not_decode(self):
        """Test the decode contrast floor."""
        values = np.tile(np.repeat([45.0, 60.0], 10), 6)
        m = analyze_profile(_profile(values), (1, 1))
        assert m.symbol_contrast == pytest.approx(15.0)
        assert not m.decode


class TestScanLines:
    """Tests for multi-line measurement and aggregation."""

    def test_out_of_bounds_line(self, stripe_raster):
        """Test that a row outside the raster is reported as missing."""
        raster = stripe_raster(bars=5)
        assert measure_scan_line(raster, raster.height, (10, 10)) is None

    def test_parallel_matches_sequential(self, stripe_raster):
        """Test that the thread pool returns the same results in order."""
        raster = stripe_raster(bars=5)
        positions = scan_line_positions(raster.height, 6)
        sequential = measure_scan_lines(raster, positions, (10, 10))
        parallel = measure_scan_lines(raster, positions, (10, 10), parallel=True, max_workers=3)
        assert parallel == sequential

    def test_aggregate(self):
        """Test averaging, worst-case defects and all-lines compliance."""
        good = analyze_profile(
            _profile(np.concatenate([np.full(100, 100.0), np.tile(np.repeat([0.0, 100.0], 10), 5)])),
            (10, 0),
        )
        worse = LinearMeasurements(
            symbol_contrast=50.0,
            min_reflectance=20.0,
            max_reflectance=70.0,
            edge_contrast=30.0,
            modulation=0.6,
            defects=0.4,
            decodability=0.5,
            decode=True,
            quiet_zone_left=50,
            quiet_zone_right=50,
            quiet_zone_compliant=False,
        )
        combined = aggregate_measurements([good, worse])
        assert combined.symbol_contrast == pytest.approx(75.0)
        assert combined.defects == pytest.approx(0.4)
        assert combined.min_reflectance == pytest.approx(0.0)
        assert combined.decode
        assert not combined.quiet_zone_compliant

    def test_aggregate_empty(self):
        """Test that no valid lines gives degraded measurements."""
        combined = aggregate_measurements([])
        assert not combined.decode
        assert combined.symbol_contrast == 0.0
