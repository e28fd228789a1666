"""
End-to-end tests for the verification engine.
"""

import numpy as np
import pytest

from src.barcode import BarcodeVerifier, verify_barcode
from src.barcode.tables import DATA_MATRIX_SIZES, QR_VERSIONS
from src.models import (
    LinearSymbology,
    MatrixCalibration,
    MatrixSymbology,
    QualityGrade,
    Standard,
    VerificationOptions,
)


@pytest.fixture
def verifier():
    """Verifier with default options, independent of the environment."""
    return BarcodeVerifier(VerificationOptions())


class TestLinearVerification:
    """Tests for ISO 15416 verification."""

    def test_ideal_ean13(self, verifier, stripe_raster):
        """Test an ideal symbol grades A on every parameter."""
        result = verifier.verify(stripe_raster(bars=10), LinearSymbology.EAN13)

        assert result.standard == Standard.ISO15416
        assert result.overall_grade == QualityGrade.A
        assert result.numeric_grade == pytest.approx(4.0)
        assert result.passed
        assert result.parameter("Symbol Contrast").value == pytest.approx(100.0)
        assert result.parameter("Symbol Contrast").grade == QualityGrade.A
        assert result.parameter("Decode").grade == QualityGrade.A
        assert result.parameter("Quiet Zone").grade == QualityGrade.A
        assert len(result.scan_lines) == 10
        assert all(line.overall_grade == QualityGrade.A for line in result.scan_lines)
        assert result.warnings == []
        assert result.recommendations == []

    def test_tag_string(self, verifier, stripe_raster):
        """Test that tag strings and aliases are accepted."""
        result = verifier.verify(stripe_raster(bars=10), "ean-13")
        assert result.barcode_type == LinearSymbology.EAN13

    def test_scan_line_positions(self, verifier, stripe_raster):
        """Test per-line reporting."""
        result = verifier.verify(stripe_raster(bars=10, height=110), LinearSymbology.CODE128)
        assert [line.y_position for line in result.scan_lines] == [10, 20, 30, 40, 50, 60, 70, 80, 90, 100]
        assert [line.line_number for line in result.scan_lines] == list(range(1, 11))

    def test_short_quiet_zone_fails(self, verifier, stripe_raster):
        """Test that a short left margin fails the symbol."""
        result = verifier.verify(stripe_raster(bars=10, margin_left=50), LinearSymbology.EAN13)
        assert result.parameter("Quiet Zone").grade == QualityGrade.F
        assert result.overall_grade == QualityGrade.F
        assert not result.passed
        assert any(r.startswith("Increase quiet zone size") for r in result.recommendations)

    def test_quiet_zone_check_disabled(self, stripe_raster):
        """Test that the quiet zone parameter can be left out."""
        options = VerificationOptions(check_quiet_zones=False)
        result = BarcodeVerifier(options).verify(
            stripe_raster(bars=10, margin_left=50), LinearSymbology.EAN13
        )
        assert result.parameter("Quiet Zone") is None
        assert result.overall_grade == QualityGrade.A

    def test_low_contrast(self):
        """Test a washed-out symbol."""
        gray = np.full((40, 400), 200, dtype=np.uint8)
        for start in range(120, 280, 20):
            gray[:, start:start + 10] = 170
        result = verify_barcode(gray, LinearSymbology.CODE128, options=VerificationOptions())
        assert result.parameter("Decode").grade == QualityGrade.F
        assert result.parameter("Symbol Contrast").grade == QualityGrade.F
        assert not result.passed
        assert result.decoded_data is None

    def test_decoded_data_kept_when_decoded(self, verifier, stripe_raster):
        """Test that a valid payload is attached to a decodable symbol."""
        result = verifier.verify(stripe_raster(bars=10), LinearSymbology.EAN13, decoded_data="4006381333931")
        assert result.decoded_data == "4006381333931"
        assert result.warnings == []

    def test_structure_warning(self, verifier, stripe_raster):
        """Test that a bad check digit in the payload is reported."""
        result = verifier.verify(stripe_raster(bars=10), LinearSymbology.EAN13, decoded_data="4006381333932")
        assert "EAN13: Invalid check digit: expected 1, got 2" in result.warnings

    def test_gs1_128_payload(self, verifier, stripe_raster):
        """Test GS1 validation of a GS1-128 payload."""
        result = verifier.verify(
            stripe_raster(bars=10), LinearSymbology.GS1128, decoded_data="]C1010400638133393117250601"
        )
        assert "GS1: GTIN present but no batch/lot (10) or serial (21) number" in result.warnings

    def test_minimum_grade(self, stripe_raster):
        """Test pass/fail against a configured minimum."""
        gray = np.full((40, 430), 255, dtype=np.uint8)
        for start in range(120, 310, 20):
            gray[:, start:start + 10] = 110
        options = VerificationOptions(minimum_grade="a")
        result = verify_barcode(gray, LinearSymbology.CODE128, options=options)
        assert result.minimum_grade == QualityGrade.A
        assert result.overall_grade < QualityGrade.A
        assert not result.passed

    def test_parallel_scan_lines(self, stripe_raster):
        """Test that the thread pool gives the same grades."""
        raster = stripe_raster(bars=10)
        sequential = BarcodeVerifier(VerificationOptions()).verify(raster, LinearSymbology.EAN13)
        parallel = BarcodeVerifier(
            VerificationOptions(parallel_scan_lines=True, max_workers=4)
        ).verify(raster, LinearSymbology.EAN13)
        assert parallel.scan_lines == sequential.scan_lines
        assert parallel.parameters == sequential.parameters

    def test_aperture_selection(self, verifier, stripe_raster):
        """Test that X dimension picks the aperture without touching the defaults."""
        result = verifier.verify(stripe_raster(bars=10), LinearSymbology.EAN13, x_dimension_mm=0.8)
        assert result.capture.aperture == 10
        assert verifier.options.aperture == 6

    def test_invalid_x_dimension(self, verifier, stripe_raster):
        """Test that a non-positive X dimension raises."""
        with pytest.raises(ValueError):
            verifier.verify(stripe_raster(bars=10), LinearSymbology.EAN13, x_dimension_mm=0)


class TestMatrixVerification:
    """Tests for ISO 15415 verification."""

    def test_ideal_data_matrix(self, verifier, matrix_raster, dm_modules):
        """Test an ideal Data Matrix located automatically."""
        raster, _ = matrix_raster(dm_modules(DATA_MATRIX_SIZES["10x10"]))
        result = verifier.verify(
            raster,
            MatrixSymbology.DATAMATRIX,
            symbol_size="10x10",
            calibration=MatrixCalibration(unused_error_correction=0.9),
        )
        assert result.standard == Standard.ISO15415
        assert result.scan_lines is None
        assert result.overall_grade == QualityGrade.A
        assert result.parameter("Fixed Pattern Damage").value == pytest.approx(1.0)
        assert result.parameter("Quiet Zone").grade == QualityGrade.A
        assert result.warnings == []

    def test_estimated_error_correction(self, verifier, matrix_raster, dm_modules):
        """Test the warning for an estimated error-correction margin."""
        raster, _ = matrix_raster(dm_modules(DATA_MATRIX_SIZES["10x10"]))
        result = verifier.verify(raster, MatrixSymbology.DATAMATRIX, symbol_size="10x10")
        assert "Unused error correction estimated (no error-correction decode)" in result.warnings

    def test_low_error_correction_warning(self, verifier, matrix_raster, dm_modules):
        """Test the Data Matrix low error-correction warning."""
        raster, _ = matrix_raster(dm_modules(DATA_MATRIX_SIZES["10x10"]))
        result = verifier.verify(
            raster,
            MatrixSymbology.DATAMATRIX,
            symbol_size="10x10",
            calibration=MatrixCalibration(unused_error_correction=0.4),
        )
        assert result.parameter("Unused Error Correction").grade == QualityGrade.C
        assert any(w.startswith("Low error correction capacity") for w in result.warnings)

    def test_unknown_size(self, verifier, matrix_raster, dm_modules):
        """Test that an unknown size degrades to estimates."""
        raster, _ = matrix_raster(dm_modules(DATA_MATRIX_SIZES["10x10"]))
        result = verifier.verify(raster, MatrixSymbology.DATAMATRIX, symbol_size="11x11")
        assert "Unknown Data Matrix size: 11x11" in result.warnings
        assert "Symbol size unknown; geometric parameters estimated" in result.warnings
        assert result.parameter("Quiet Zone") is None

    def test_size_from_other_symbology(self, verifier, matrix_raster, qr_pattern_modules):
        """Test that a Data Matrix size given for a QR symbol degrades to a warning."""
        raster, _ = matrix_raster(qr_pattern_modules(QR_VERSIONS[1]), margin_modules=4)
        size = DATA_MATRIX_SIZES["16x16"]
        result = verifier.verify(raster, "QR", symbol_size=size)
        assert f"Size {size.name} is not a QR size" in result.warnings
        assert "Symbol size unknown; geometric parameters estimated" in result.warnings

    def test_qr_size_for_data_matrix(self, verifier, matrix_raster, dm_modules):
        """Test that a QR version given for a Data Matrix symbol degrades to a warning."""
        raster, _ = matrix_raster(dm_modules(DATA_MATRIX_SIZES["10x10"]))
        size = QR_VERSIONS[1]
        result = verifier.verify(raster, MatrixSymbology.DATAMATRIX, symbol_size=size)
        assert f"Size {size.name} is not a DATAMATRIX size" in result.warnings

    def test_qr_by_version(self, verifier, matrix_raster, qr_pattern_modules):
        """Test a QR symbol sized by version number."""
        raster, _ = matrix_raster(qr_pattern_modules(QR_VERSIONS[2]), margin_modules=4)
        result = verifier.verify(
            raster,
            "QR",
            symbol_size=2,
            calibration=MatrixCalibration(unused_error_correction=0.9),
        )
        assert result.barcode_type == MatrixSymbology.QR
        assert result.overall_grade == QualityGrade.A

    def test_blank_raster(self):
        """Test a raster without a symbol."""
        gray = np.full((50, 50), 255, dtype=np.uint8)
        result = verify_barcode(gray, MatrixSymbology.DATAMATRIX, options=VerificationOptions())
        assert "No symbol found in raster" in result.warnings
        assert result.parameter("Decode").grade == QualityGrade.F
        assert not result.passed

    def test_gs1_datamatrix_payload(self, verifier, matrix_raster, dm_modules):
        """Test that GS1 findings are merged into the warnings."""
        raster, _ = matrix_raster(dm_modules(DATA_MATRIX_SIZES["10x10"]))
        result = verifier.verify(
            raster,
            MatrixSymbology.DATAMATRIX,
            symbol_size="10x10",
            calibration=MatrixCalibration(unused_error_correction=0.9),
            decoded_data="]d20104006381333932",
        )
        assert "GS1: AI (01) GTIN: Invalid GTIN check digit" in result.warnings
        assert result.decoded_data == "]d20104006381333932"

    def test_gs1_checks_disabled(self, matrix_raster, dm_modules):
        """Test that GS1 validation follows the options."""
        raster, _ = matrix_raster(dm_modules(DATA_MATRIX_SIZES["10x10"]))
        options = VerificationOptions(gs1_compliance=False, validate_ais=False)
        result = BarcodeVerifier(options).verify(
            raster,
            MatrixSymbology.DATAMATRIX,
            symbol_size="10x10",
            calibration=MatrixCalibration(unused_error_correction=0.9),
            decoded_data="]d20104006381333932",
        )
        assert result.warnings == []


class TestInputHandling:
    """Tests for input validation."""

    def test_unsupported_type(self, verifier, stripe_raster):
        """Test that an unknown tag yields a degraded result."""
        result = verifier.verify(stripe_raster(bars=3), "FOO")
        assert result.barcode_type is None
        assert result.overall_grade == QualityGrade.F
        assert result.numeric_grade == 0.0
        assert result.parameters == []
        assert result.warnings == ["Unsupported barcode type: FOO"]
        assert not result.passed

    def test_missing_raster(self, verifier):
        """Test that a missing raster raises."""
        with pytest.raises(TypeError):
            verifier.verify(None, LinearSymbology.EAN13)

    def test_wrong_raster_type(self, verifier):
        """Test that raw arrays must go through verify_barcode."""
        with pytest.raises(TypeError):
            verifier.verify(np.zeros((5, 5), dtype=np.uint8), LinearSymbology.EAN13)

    def test_result_serializes(self, verifier, stripe_raster):
        """Test JSON-ready output."""
        data = verifier.verify(stripe_raster(bars=10), LinearSymbology.EAN13).to_dict()
        assert data["barcode_type"] == "EAN13"
        assert data["overall_grade"] == "A"
        assert data["standard"] == "ISO15416"
        assert data["capture"] == {"aperture": 6, "wavelength": 670, "angle": 45}
