"""
Tests for dimensional compliance and symbol sizing.
"""

import pytest

from src.barcode import (
    calculate_bwr,
    check_data_matrix_dimensions,
    check_dimensional_compliance,
    check_qr_dimensions,
    recommend_data_matrix_size,
    recommend_error_correction,
    recommend_qr_version,
    validate_qr_content,
)
from src.barcode.dimensions import LinearDimensions
from src.models import LinearSymbology


class TestLinearDimensions:
    """Tests for linear symbol dimensional checks."""

    def test_nominal_ean13(self):
        """Test a nominal EAN-13."""
        dims = LinearDimensions(
            x_dimension_mm=0.33,
            bar_height_mm=22.85,
            quiet_zone_left_mm=3.7,
            quiet_zone_right_mm=2.4,
            total_width_mm=37.29,
        )
        report = check_dimensional_compliance(LinearSymbology.EAN13, dims)
        assert report.compliant
        assert report.issues == []

    def test_undersized_ean13(self):
        """Test X dimension, magnification, quiet zone and height issues."""
        dims = LinearDimensions(
            x_dimension_mm=0.2,
            bar_height_mm=5.0,
            quiet_zone_left_mm=1.0,
            quiet_zone_right_mm=2.0,
            total_width_mm=25.0,
        )
        report = check_dimensional_compliance(LinearSymbology.EAN13, dims)
        assert not report.compliant
        assert report.issues[0] == "X dimension 0.2mm is below minimum 0.264mm"
        assert report.issues[1] == "Magnification 61% is below minimum 80%"
        assert report.issues[2].startswith("Left quiet zone 1.00mm")
        assert report.issues[3] == "Bar height 5.00mm is below minimum 6.35mm"
        assert len(report.issues) == 4


class TestBWR:
    """Tests for bar width reduction advice."""

    def test_flexo_on_corrugated(self):
        """Test the substrate multiplier and the ink spread note."""
        advice = calculate_bwr("flexo", "corrugated", 0.33)
        assert advice.bwr_mm == pytest.approx(0.0375)
        assert advice.bwr_percent == pytest.approx(0.0375 / 0.33 * 100)
        assert advice.notes == ["High ink spread expected - verify with print test"]

    def test_large_reduction_note(self):
        """Test the note for a reduction above 15%."""
        advice = calculate_bwr("FLEXO", "CORRUGATED", 0.2)
        assert "BWR exceeds 15% - consider increasing X dimension" in advice.notes

    def test_unknown_technology(self):
        """Test the fallback reduction."""
        assert calculate_bwr("INKJET", "PAPYRUS", 1.0).bwr_mm == pytest.approx(0.020)

    def test_invalid_x_dimension(self):
        """Test that a non-positive X dimension raises."""
        with pytest.raises(ValueError):
            calculate_bwr("FLEXO", "COATED", 0)


class TestDataMatrixDimensions:
    """Tests for Data Matrix dimensional checks and sizing."""

    def test_compliant(self):
        """Test a nominal retail symbol."""
        report = check_data_matrix_dimensions(0.38, 6.08, 6.08, 0.38, "16x16")
        assert report.compliant

    def test_issues(self):
        """Test module size, quiet zone and aspect ratio issues."""
        report = check_data_matrix_dimensions(0.2, 10.0, 8.0, 0.1, "16x16")
        assert len(report.issues) == 3
        assert report.issues[2] == "Square symbol has non-square aspect ratio: 1.25"

    def test_unknown_application(self):
        """Test an unknown application."""
        report = check_data_matrix_dimensions(0.38, 6.0, 6.0, 0.38, "16x16", application="SPACE")
        assert report.issues == ["Unknown application: SPACE"]

    def test_recommend_size(self):
        """Test the smallest fitting size."""
        assert recommend_data_matrix_size(10) == "16x16"
        assert recommend_data_matrix_size(10, prefer_square=False) == "8x32"
        assert recommend_data_matrix_size(5000) == "144x144"


class TestQRDimensions:
    """Tests for QR dimensional checks and sizing."""

    def test_quiet_zone(self):
        """Test the four-module quiet zone."""
        assert check_qr_dimensions(0.3, 1.25).compliant
        report = check_qr_dimensions(0.3, 1.0)
        assert not report.compliant
        assert "4 modules" in report.issues[0]

    def test_recommend_version(self):
        """Test version selection by capacity."""
        assert recommend_qr_version(14, "M") == 1
        assert recommend_qr_version(20, "M") == 2
        assert recommend_qr_version(15, "L") == 1
        assert recommend_qr_version(5000) == 40

    def test_recommend_error_correction(self):
        """Test error correction advice."""
        assert recommend_error_correction("outdoor")[0] == "H"
        assert recommend_error_correction("unknown")[0] == "M"


class TestQRContent:
    """Tests for QR content checks."""

    def test_url(self):
        """Test URL detection."""
        check = validate_qr_content("https://example.com/p?id=1")
        assert check.is_valid
        assert check.detected_type == "URL"

    def test_bad_url(self):
        """Test a URL without a host."""
        check = validate_qr_content("https://")
        assert not check.is_valid
        assert check.issues == ["Invalid URL format"]

    def test_vcard_and_wifi(self):
        """Test structured content checks."""
        assert not validate_qr_content("BEGIN:VCARD\nFN:Jo").is_valid
        assert validate_qr_content("BEGIN:VCARD\nFN:Jo\nEND:VCARD").is_valid
        assert not validate_qr_content("WIFI:T:WPA;P:secret;;").is_valid

    def test_type_mismatch(self):
        """Test that an unexpected type is reported without invalidating."""
        check = validate_qr_content("hello", expected_type="URL")
        assert check.is_valid
        assert check.issues == ["Expected URL but detected TEXT"]

    def test_too_long(self):
        """Test the capacity limit."""
        assert not validate_qr_content("x" * 3000).is_valid
