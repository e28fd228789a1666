"""
Pydantic models for verification inputs and results.
"""

from src.models.geometry import Region, SymbolSizeSpec
from src.models.grade import GRADE_VALUES, GradeThresholds, QualityGrade
from src.models.gs1 import (
    AIFormat,
    ApplicationIdentifierDefinition,
    GS1ValidationResult,
    ParsedApplicationIdentifier,
)
from src.models.options import MatrixCalibration, VerificationOptions, select_aperture
from src.models.result import (
    CaptureConditions,
    ParameterResult,
    ScanLineResult,
    VerificationResult,
)
from src.models.symbology import (
    BarcodeType,
    LinearSymbology,
    MatrixSymbology,
    Standard,
    parse_barcode_type,
    standard_for,
)

__all__ = [
    # Grades
    "GRADE_VALUES",
    "GradeThresholds",
    "QualityGrade",
    # Symbology
    "BarcodeType",
    "LinearSymbology",
    "MatrixSymbology",
    "Standard",
    "parse_barcode_type",
    "standard_for",
    # Geometry
    "Region",
    "SymbolSizeSpec",
    # Options
    "MatrixCalibration",
    "VerificationOptions",
    "select_aperture",
    # Results
    "CaptureConditions",
    "ParameterResult",
    "ScanLineResult",
    "VerificationResult",
    # GS1
    "AIFormat",
    "ApplicationIdentifierDefinition",
    "GS1ValidationResult",
    "ParsedApplicationIdentifier",
]
