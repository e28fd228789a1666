"""
Verification options and external calibration inputs.
"""

from pydantic import Field, field_validator

from src.config import Settings, get_settings
from src.config.settings import check_aperture
from src.models.base import FrozenModel
from src.models.grade import QualityGrade


class VerificationOptions(FrozenModel):
    """
    Immutable configuration for a single verification call.

    Build one from Settings with ``from_settings`` and override fields per
    call with ``model_copy(update=...)``.
    """

    aperture: int = Field(6, description="Measuring aperture in mils")
    wavelength: int = Field(670, gt=0, description="Light wavelength in nm")
    angle: int = Field(45, ge=0, le=90, description="Angle of incidence in degrees")
    scan_lines: int = Field(10, gt=0, description="Scan lines for linear symbols")
    minimum_grade: QualityGrade = Field(QualityGrade.C, description="Minimum passing grade")
    check_quiet_zones: bool = True
    gs1_compliance: bool = True
    validate_ais: bool = True
    parallel_scan_lines: bool = Field(False, description="Analyze scan lines on a thread pool")
    max_workers: int = Field(4, gt=0, description="Thread pool size for scan lines")

    @field_validator("aperture")
    @classmethod
    def validate_aperture(cls, v: int) -> int:
        return check_aperture(v)

    @field_validator("minimum_grade", mode="before")
    @classmethod
    def normalize_grade(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "VerificationOptions":
        """Create options from application settings."""
        settings = settings or get_settings()

        return cls(
            aperture=settings.verification_aperture,
            wavelength=settings.verification_wavelength,
            angle=settings.verification_angle,
            scan_lines=settings.verification_scan_lines,
            minimum_grade=settings.verification_minimum_grade,
            check_quiet_zones=settings.verification_check_quiet_zones,
            gs1_compliance=settings.verification_gs1_compliance,
            validate_ais=settings.verification_validate_ais,
            parallel_scan_lines=settings.parallel_scan_lines,
            max_workers=settings.max_workers,
        )


class MatrixCalibration(FrozenModel):
    """
    Externally calibrated ISO 15415 inputs.

    Any value left as None is measured from the raster when the symbol
    geometry is known, otherwise an estimate is used and a warning is
    attached to the result.
    """

    axial_nonuniformity: float | None = Field(None, ge=0.0)
    grid_nonuniformity: float | None = Field(None, ge=0.0)
    unused_error_correction: float | None = Field(None, ge=0.0, le=1.0)
    fixed_pattern_damage: float | None = Field(None, ge=0.0, le=1.0)
    print_growth: float | None = None
    printer_cell_px: float = Field(1.0, gt=0.0, description="Printer cell size in pixels")


def select_aperture(x_dimension_mm: float) -> int:
    """
    Select the ISO measuring aperture for a nominal X dimension.

    Args:
        x_dimension_mm: Nominal module width in millimetres

    Returns:
        Aperture in mils (3, 5, 6, 10 or 20)
    """
    if x_dimension_mm < 0.127:
        return 3
    if x_dimension_mm < 0.254:
        return 5
    if x_dimension_mm < 0.508:
        return 6
    if x_dimension_mm < 1.016:
        return 10
    return 20
