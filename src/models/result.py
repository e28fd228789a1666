"""
Verification result models.
"""

from datetime import datetime

from pydantic import Field

from src.models.base import FrozenModel, utc_now
from src.models.grade import QualityGrade
from src.models.symbology import BarcodeType, Standard


class ParameterResult(FrozenModel):
    """One graded quantity."""

    name: str
    value: float
    grade: QualityGrade
    threshold: float = Field(..., description="Boundary for the acceptable (C) grade")
    unit: str | None = None
    description: str | None = None


class ScanLineResult(FrozenModel):
    """Linear parameters measured along a single scan line."""

    line_number: int = Field(..., ge=1)
    y_position: int
    decode: bool
    symbol_contrast: float
    min_reflectance: float
    max_reflectance: float
    edge_contrast: float
    modulation: float
    defects: float
    decodability: float
    quiet_zone_left: int = Field(0, description="Light samples before the first bar")
    quiet_zone_right: int = Field(0, description="Light samples after the last bar")
    quiet_zone_compliant: bool = False
    overall_grade: QualityGrade
    sample_count: int = Field(0, ge=0)


class CaptureConditions(FrozenModel):
    """Measurement conditions the grade was obtained under."""

    aperture: int
    wavelength: int
    angle: int


class VerificationResult(FrozenModel):
    """
    Complete outcome of one verification call.

    overall_grade is the worst parameter grade; numeric_grade is the mean of
    the parameter grades and is only informational.
    """

    barcode_type: BarcodeType | None
    decoded_data: str | None = None
    overall_grade: QualityGrade
    numeric_grade: float = Field(..., ge=0.0, le=4.0)
    parameters: list[ParameterResult] = Field(default_factory=list)
    scan_lines: list[ScanLineResult] | None = None
    standard: Standard | None = None
    capture: CaptureConditions
    passed: bool
    minimum_grade: QualityGrade
    warnings: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=utc_now)

    def parameter(self, name: str) -> ParameterResult | None:
        """Look up a parameter result by name."""
        for result in self.parameters:
            if result.name == name:
                return result
        return None
