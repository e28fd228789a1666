"""
Barcode verification engine.

Grades a captured symbol under ISO/IEC 15416 (linear) or ISO/IEC 15415
(matrix). Options are passed per verifier or per call and never mutated,
so one verifier can serve concurrent callers.
"""

from io import BytesIO

import numpy as np
import structlog
from PIL import Image

from src.barcode.gs1 import parse_gs1, strip_fnc1_prefix, validate_gs1_datamatrix
from src.barcode.grading import (
    calculate_average_grade,
    calculate_overall_grade,
    generate_recommendations,
    generate_warnings,
    grade_iso15415_parameters,
    grade_iso15416_parameters,
    is_passing_grade,
)
from src.barcode.linear import (
    LinearMeasurements,
    aggregate_measurements,
    measure_scan_lines,
    scan_line_positions,
)
from src.barcode.matrix import analyze_matrix_symbol
from src.barcode.raster import RasterBuffer
from src.barcode.reflectance import locate_symbol
from src.barcode.tables import DATA_MATRIX_SIZES, QR_VERSIONS, QUIET_ZONE_REQUIREMENTS
from src.barcode.validator import verify_structure
from src.models import (
    BarcodeType,
    CaptureConditions,
    LinearSymbology,
    MatrixCalibration,
    MatrixSymbology,
    ParameterResult,
    QualityGrade,
    Region,
    ScanLineResult,
    Standard,
    SymbolSizeSpec,
    VerificationOptions,
    VerificationResult,
    parse_barcode_type,
    select_aperture,
)

logger = structlog.get_logger(__name__)

GS1_LINEAR_CARRIERS = (LinearSymbology.GS1128, LinearSymbology.GS1DATABAR)


def resolve_symbol_size(
    symbology: MatrixSymbology,
    size: SymbolSizeSpec | str | int | None,
) -> tuple[SymbolSizeSpec | None, str | None]:
    """
    Look up a Data Matrix size ("32x32") or QR version (7).

    Returns:
        Tuple of (size spec or None, warning for an unknown size)
    """
    if size is None:
        return None, None

    if isinstance(size, SymbolSizeSpec):
        # QR versions carry a version number, Data Matrix sizes do not
        mismatched = (symbology == MatrixSymbology.DATAMATRIX and size.version is not None) or (
            symbology == MatrixSymbology.QR and size.version is None
        )
        if mismatched:
            return None, f"Size {size.name} is not a {symbology.value} size"
        return size, None

    if symbology == MatrixSymbology.DATAMATRIX:
        spec = DATA_MATRIX_SIZES.get(str(size).lower())
        if spec is None:
            return None, f"Unknown Data Matrix size: {size}"
        return spec, None

    if symbology == MatrixSymbology.QR:
        try:
            spec = QR_VERSIONS.get(int(size))
        except (TypeError, ValueError):
            spec = None
        if spec is None:
            return None, f"Unknown QR version: {size}"
        return spec, None

    return None, f"No size table for {symbology.value}"


class BarcodeVerifier:
    """
    Barcode quality verifier.

    Supports the linear symbologies in LinearSymbology (ISO 15416) and the
    matrix symbologies in MatrixSymbology (ISO 15415). Finder-pattern
    analysis is available for Data Matrix and QR Code.
    """

    def __init__(self, options: VerificationOptions | None = None):
        """
        Initialize verifier.

        Args:
            options: Default options; loaded from Settings when omitted
        """
        self.options = options or VerificationOptions.from_settings()

    def verify(
        self,
        raster: RasterBuffer,
        barcode_type: BarcodeType | str,
        *,
        x_dimension_mm: float | None = None,
        symbol_size: SymbolSizeSpec | str | int | None = None,
        region: Region | None = None,
        calibration: MatrixCalibration | None = None,
        decoded_data: str | None = None,
        options: VerificationOptions | None = None,
    ) -> VerificationResult:
        """
        Verify a captured symbol.

        Args:
            raster: Captured image of the symbol including its quiet zone
            barcode_type: Symbology tag
            x_dimension_mm: Nominal module width, selects the aperture
            symbol_size: Data Matrix size or QR version (matrix only)
            region: Symbol bounds (matrix only), located automatically if omitted
            calibration: External ISO 15415 values (matrix only)
            decoded_data: Payload from an external decoder
            options: Overrides the verifier's options for this call

        Returns:
            VerificationResult; input problems are reported as warnings
        """
        if raster is None:
            raise TypeError("raster is required")
        if not isinstance(raster, RasterBuffer):
            raise TypeError(f"Expected RasterBuffer, got {type(raster).__name__}")

        options = options or self.options
        if x_dimension_mm is not None:
            if x_dimension_mm <= 0:
                raise ValueError("x_dimension_mm must be positive")
            options = options.model_copy(update={"aperture": select_aperture(x_dimension_mm)})

        symbology = parse_barcode_type(barcode_type)
        log = logger.bind(barcode_type=str(getattr(symbology, "value", barcode_type)))

        if isinstance(symbology, LinearSymbology):
            result = self._verify_linear(raster, symbology, options, decoded_data)
        elif isinstance(symbology, MatrixSymbology):
            result = self._verify_matrix(
                raster, symbology, options, decoded_data, symbol_size, region, calibration
            )
        else:
            log.warning("Unsupported barcode type")
            result = self._unsupported(barcode_type, options)

        log.info(
            "Verification complete",
            standard=result.standard.value if result.standard else None,
            overall_grade=result.overall_grade.value,
            numeric_grade=round(result.numeric_grade, 2),
            passed=result.passed,
            warnings=len(result.warnings),
        )
        return result

    # ============================================
    # LINEAR (ISO 15416)
    # ============================================

    def _verify_linear(
        self,
        raster: RasterBuffer,
        symbology: LinearSymbology,
        options: VerificationOptions,
        decoded_data: str | None,
    ) -> VerificationResult:
        positions = scan_line_positions(raster.height, options.scan_lines)
        requirement = QUIET_ZONE_REQUIREMENTS[symbology]
        measured = measure_scan_lines(
            raster,
            positions,
            requirement,
            parallel=options.parallel_scan_lines,
            max_workers=options.max_workers,
        )

        warnings: list[str] = []
        scan_lines: list[ScanLineResult] = []
        valid: list[LinearMeasurements] = []

        for index, (y, line) in enumerate(zip(positions, measured)):
            if line is None:
                warnings.append(f"Scan line {index + 1} at y={y} has no valid samples")
                line = LinearMeasurements.degraded()
            else:
                valid.append(line)
            scan_lines.append(self._scan_line_result(index + 1, y, line, options))

        symbol = aggregate_measurements(valid)
        parameters = grade_iso15416_parameters(symbol, include_quiet_zone=options.check_quiet_zones)
        warnings = generate_warnings(parameters) + warnings
        warnings.extend(self._payload_warnings(symbology, decoded_data, options))

        return self._build_result(
            symbology,
            Standard.ISO15416,
            parameters,
            options,
            decoded_data if symbol.decode else None,
            warnings,
            scan_lines=scan_lines,
        )

    @staticmethod
    def _scan_line_result(
        line_number: int,
        y: int,
        line: LinearMeasurements,
        options: VerificationOptions,
    ) -> ScanLineResult:
        grades = [
            p.grade
            for p in grade_iso15416_parameters(line, include_quiet_zone=options.check_quiet_zones)
        ]
        return ScanLineResult(
            line_number=line_number,
            y_position=y,
            decode=line.decode,
            symbol_contrast=line.symbol_contrast,
            min_reflectance=line.min_reflectance,
            max_reflectance=line.max_reflectance,
            edge_contrast=line.edge_contrast,
            modulation=line.modulation,
            defects=line.defects,
            decodability=line.decodability,
            quiet_zone_left=line.quiet_zone_left,
            quiet_zone_right=line.quiet_zone_right,
            quiet_zone_compliant=line.quiet_zone_compliant,
            overall_grade=calculate_overall_grade(grades),
            sample_count=line.sample_count,
        )

    # ============================================
    # MATRIX (ISO 15415)
    # ============================================

    def _verify_matrix(
        self,
        raster: RasterBuffer,
        symbology: MatrixSymbology,
        options: VerificationOptions,
        decoded_data: str | None,
        symbol_size: SymbolSizeSpec | str | int | None,
        region: Region | None,
        calibration: MatrixCalibration | None,
    ) -> VerificationResult:
        warnings: list[str] = []
        size, size_warning = resolve_symbol_size(symbology, symbol_size)
        if size_warning:
            warnings.append(size_warning)

        if region is None:
            region = locate_symbol(raster)
            if region is None:
                warnings.append("No symbol found in raster")

        measurements = analyze_matrix_symbol(
            raster,
            symbology,
            region=region,
            size=size,
            calibration=calibration,
            check_quiet_zone=options.check_quiet_zones,
        )
        parameters = grade_iso15415_parameters(measurements)
        warnings = generate_warnings(parameters, symbology) + warnings + measurements.warnings
        warnings.extend(self._payload_warnings(symbology, decoded_data, options))

        return self._build_result(
            symbology,
            Standard.ISO15415,
            parameters,
            options,
            decoded_data if measurements.decode else None,
            warnings,
        )

    # ============================================
    # PAYLOAD CHECKS
    # ============================================

    @staticmethod
    def _payload_warnings(
        symbology: BarcodeType,
        decoded_data: str | None,
        options: VerificationOptions,
    ) -> list[str]:
        """Structure and GS1 findings for an externally decoded payload."""
        if not decoded_data:
            return []

        warnings: list[str] = []
        if options.gs1_compliance and isinstance(symbology, LinearSymbology):
            _, errors = verify_structure(decoded_data, symbology)
            warnings.extend(f"{symbology.value}: {error}" for error in errors)

        _, has_prefix = strip_fnc1_prefix(decoded_data)
        if not (has_prefix or symbology in GS1_LINEAR_CARRIERS):
            return warnings

        if symbology == MatrixSymbology.DATAMATRIX:
            gs1 = validate_gs1_datamatrix(decoded_data)
        else:
            gs1 = parse_gs1(decoded_data)

        if options.validate_ais:
            warnings.extend(f"GS1: {error}" for error in gs1.errors)
        if options.gs1_compliance:
            warnings.extend(f"GS1: {warning}" for warning in gs1.warnings)
        return warnings

    # ============================================
    # RESULT ASSEMBLY
    # ============================================

    @staticmethod
    def _build_result(
        symbology: BarcodeType,
        standard: Standard,
        parameters: list[ParameterResult],
        options: VerificationOptions,
        decoded_data: str | None,
        warnings: list[str],
        scan_lines: list[ScanLineResult] | None = None,
    ) -> VerificationResult:
        grades = [p.grade for p in parameters]
        overall_grade = calculate_overall_grade(grades)
        return VerificationResult(
            barcode_type=symbology,
            decoded_data=decoded_data,
            overall_grade=overall_grade,
            numeric_grade=calculate_average_grade(grades),
            parameters=parameters,
            scan_lines=scan_lines,
            standard=standard,
            capture=CaptureConditions(
                aperture=options.aperture,
                wavelength=options.wavelength,
                angle=options.angle,
            ),
            passed=is_passing_grade(overall_grade, options.minimum_grade),
            minimum_grade=options.minimum_grade,
            warnings=warnings,
            recommendations=generate_recommendations(parameters),
        )

    @staticmethod
    def _unsupported(barcode_type: object, options: VerificationOptions) -> VerificationResult:
        return VerificationResult(
            barcode_type=None,
            overall_grade=QualityGrade.F,
            numeric_grade=0.0,
            capture=CaptureConditions(
                aperture=options.aperture,
                wavelength=options.wavelength,
                angle=options.angle,
            ),
            passed=False,
            minimum_grade=options.minimum_grade,
            warnings=[f"Unsupported barcode type: {barcode_type}"],
        )


def verify_barcode(
    image_data: RasterBuffer | bytes | BytesIO | np.ndarray | Image.Image,
    barcode_type: BarcodeType | str,
    options: VerificationOptions | None = None,
    **kwargs,
) -> VerificationResult:
    """
    Convenience function to verify a symbol from an image.

    Args:
        image_data: Raster, encoded image bytes, numpy array or PIL Image
        barcode_type: Symbology tag
        options: Verification options (Settings defaults when omitted)
        **kwargs: Forwarded to BarcodeVerifier.verify

    Returns:
        VerificationResult
    """
    if image_data is None:
        raise TypeError("image_data is required")
    raster = image_data if isinstance(image_data, RasterBuffer) else RasterBuffer.from_image(image_data)
    verifier = BarcodeVerifier(options)
    return verifier.verify(raster, barcode_type, **kwargs)
