"""
Dimensional compliance and symbol sizing helpers.
"""

from dataclasses import dataclass, field
from typing import Literal
from urllib.parse import urlparse

from src.barcode.tables import (
    BASE_BWR,
    DATA_MATRIX_MODULE_LIMITS,
    DATA_MATRIX_SIZES,
    QR_CAPACITY,
    QR_MODULE_LIMITS,
    QUIET_ZONE_REQUIREMENTS,
    SUBSTRATE_BWR_MULTIPLIER,
    X_DIMENSION_LIMITS,
)
from src.models.symbology import LinearSymbology

ErrorCorrectionLevel = Literal["L", "M", "Q", "H"]

MIN_BAR_HEIGHT_MM = 6.35
QR_MAX_CONTENT_LENGTH = 2953  # version 40-L, byte mode


@dataclass
class ComplianceReport:
    """Outcome of a dimensional check."""

    issues: list[str] = field(default_factory=list)

    @property
    def compliant(self) -> bool:
        return not self.issues


@dataclass(frozen=True)
class LinearDimensions:
    """Measured dimensions of a printed linear symbol, in mm."""

    x_dimension_mm: float
    bar_height_mm: float
    quiet_zone_left_mm: float
    quiet_zone_right_mm: float
    total_width_mm: float


def check_dimensional_compliance(
    symbology: LinearSymbology,
    dimensions: LinearDimensions,
) -> ComplianceReport:
    """
    Check X dimension, magnification, quiet zones and bar height.

    Magnification is X relative to the symbology's nominal X and must stay
    within 80-200 %. Bar height must be at least 15 % of the symbol width
    or 6.35 mm, whichever is greater.
    """
    report = ComplianceReport()
    x_min, x_max, nominal = X_DIMENSION_LIMITS[symbology]
    x = dimensions.x_dimension_mm

    if x < x_min:
        report.issues.append(f"X dimension {x}mm is below minimum {x_min}mm")
    if x > x_max:
        report.issues.append(f"X dimension {x}mm exceeds maximum {x_max}mm")

    magnification = x / nominal * 100
    if magnification < 80:
        report.issues.append(f"Magnification {magnification:.0f}% is below minimum 80%")
    if magnification > 200:
        report.issues.append(f"Magnification {magnification:.0f}% exceeds maximum 200%")

    left_x, right_x = QUIET_ZONE_REQUIREMENTS[symbology]
    min_left = left_x * x
    min_right = right_x * x
    if dimensions.quiet_zone_left_mm < min_left:
        report.issues.append(
            f"Left quiet zone {dimensions.quiet_zone_left_mm:.2f}mm is below minimum {min_left:.2f}mm"
        )
    if dimensions.quiet_zone_right_mm < min_right:
        report.issues.append(
            f"Right quiet zone {dimensions.quiet_zone_right_mm:.2f}mm is below minimum {min_right:.2f}mm"
        )

    min_height = max(dimensions.total_width_mm * 0.15, MIN_BAR_HEIGHT_MM)
    if dimensions.bar_height_mm < min_height:
        report.issues.append(
            f"Bar height {dimensions.bar_height_mm:.2f}mm is below minimum {min_height:.2f}mm"
        )

    return report


@dataclass(frozen=True)
class BWRAdvice:
    """Recommended bar width reduction."""

    bwr_mm: float
    bwr_percent: float
    notes: list[str]


def calculate_bwr(technology: str, substrate: str, x_dimension_mm: float) -> BWRAdvice:
    """
    Recommend a bar width reduction for a press/substrate combination.

    Unknown technologies fall back to 0.020 mm, unknown substrates to a
    multiplier of 1.0.
    """
    if x_dimension_mm <= 0:
        raise ValueError("X dimension must be positive")

    technology = technology.upper()
    substrate = substrate.upper()
    bwr_mm = BASE_BWR.get(technology, 0.020) * SUBSTRATE_BWR_MULTIPLIER.get(substrate, 1.0)
    bwr_percent = bwr_mm / x_dimension_mm * 100

    notes: list[str] = []
    if bwr_percent > 15:
        notes.append("BWR exceeds 15% - consider increasing X dimension")
    if technology == "FLEXO" and substrate == "CORRUGATED":
        notes.append("High ink spread expected - verify with print test")

    return BWRAdvice(bwr_mm=bwr_mm, bwr_percent=bwr_percent, notes=notes)


# ============================================
# DATA MATRIX
# ============================================


def check_data_matrix_dimensions(
    module_size_mm: float,
    symbol_width_mm: float,
    symbol_height_mm: float,
    quiet_zone_mm: float,
    size: str,
    application: str = "RETAIL",
) -> ComplianceReport:
    """Check module size, quiet zone and aspect ratio of a printed Data Matrix."""
    report = ComplianceReport()
    limits = DATA_MATRIX_MODULE_LIMITS.get(application.upper())
    if limits is None:
        report.issues.append(f"Unknown application: {application}")
        return report

    min_size, max_size, _ = limits
    if module_size_mm < min_size:
        report.issues.append(
            f"Module size {module_size_mm}mm below minimum {min_size}mm for {application}"
        )
    if module_size_mm > max_size:
        report.issues.append(
            f"Module size {module_size_mm}mm exceeds maximum {max_size}mm for {application}"
        )

    if quiet_zone_mm < module_size_mm:
        report.issues.append(
            f"Quiet zone {quiet_zone_mm}mm is less than 1 module ({module_size_mm}mm)"
        )

    spec = DATA_MATRIX_SIZES.get(size)
    if spec is not None and spec.is_square and symbol_height_mm > 0:
        aspect_ratio = symbol_width_mm / symbol_height_mm
        if aspect_ratio < 0.9 or aspect_ratio > 1.1:
            report.issues.append(f"Square symbol has non-square aspect ratio: {aspect_ratio:.2f}")

    return report


def recommend_data_matrix_size(data_length: int, prefer_square: bool = True) -> str:
    """Smallest Data Matrix size whose capacity fits the data."""
    candidates = sorted(
        (
            spec
            for spec in DATA_MATRIX_SIZES.values()
            if (spec.is_square or not prefer_square) and spec.data_capacity >= data_length
        ),
        key=lambda spec: spec.data_capacity,
    )
    if not candidates:
        return "144x144" if prefer_square else "16x48"
    return candidates[0].name


# ============================================
# QR CODE
# ============================================


def check_qr_dimensions(
    module_size_mm: float,
    quiet_zone_mm: float,
    application: str = "PRINT",
) -> ComplianceReport:
    """Check module size and the 4-module quiet zone of a printed QR Code."""
    report = ComplianceReport()
    limits = QR_MODULE_LIMITS.get(application.upper())
    if limits is None:
        report.issues.append(f"Unknown application: {application}")
        return report

    min_size, _ = limits
    if module_size_mm < min_size:
        report.issues.append(
            f"Module size {module_size_mm}mm below minimum {min_size}mm for {application}"
        )

    min_quiet_zone = 4 * module_size_mm
    if quiet_zone_mm < min_quiet_zone:
        report.issues.append(
            f"Quiet zone {quiet_zone_mm}mm is less than required {min_quiet_zone:.3f}mm (4 modules)"
        )

    return report


def recommend_qr_version(data_length: int, error_correction: ErrorCorrectionLevel = "M") -> int:
    """Smallest QR version holding data_length bytes at the given level."""
    for index, capacity in enumerate(QR_CAPACITY[error_correction]):
        if capacity >= data_length:
            return index + 1
    return 40


EC_RECOMMENDATIONS: dict[str, tuple[ErrorCorrectionLevel, str]] = {
    "CLEAN_ENVIRONMENT": ("L", "Low error correction (7%) sufficient for clean environments"),
    "NORMAL": ("M", "Medium error correction (15%) recommended for general use"),
    "INDUSTRIAL": ("Q", "Quartile error correction (25%) for industrial environments"),
    "OUTDOOR": ("H", "High error correction (30%) for outdoor/harsh conditions"),
}


def recommend_error_correction(application: str) -> tuple[ErrorCorrectionLevel, str]:
    """Error correction level and rationale for an application environment."""
    return EC_RECOMMENDATIONS.get(application.upper(), ("M", "Medium error correction as default"))


@dataclass(frozen=True)
class ContentCheck:
    """Outcome of a QR content check."""

    is_valid: bool
    detected_type: str
    issues: list[str]


def validate_qr_content(content: str, expected_type: str = "ANY") -> ContentCheck:
    """
    Detect and sanity-check QR content (URL, VCARD, WIFI or TEXT).

    A type mismatch is reported as an issue but does not invalidate the
    content.
    """
    issues: list[str] = []
    detected_type = "TEXT"
    is_valid = True

    if content.startswith(("http://", "https://")):
        detected_type = "URL"
        parsed = urlparse(content)
        if not parsed.netloc:
            issues.append("Invalid URL format")
            is_valid = False
        if " " in content:
            issues.append("URL contains spaces")
            is_valid = False
    elif content.startswith("BEGIN:VCARD"):
        detected_type = "VCARD"
        if "END:VCARD" not in content:
            issues.append("vCard missing END:VCARD")
            is_valid = False
    elif content.startswith("WIFI:"):
        detected_type = "WIFI"
        if "S:" not in content:
            issues.append("WiFi QR missing SSID")
            is_valid = False

    expected_type = expected_type.upper()
    if expected_type != "ANY" and detected_type != expected_type:
        issues.append(f"Expected {expected_type} but detected {detected_type}")

    if len(content) > QR_MAX_CONTENT_LENGTH:
        issues.append("Content exceeds maximum QR Code capacity")
        is_valid = False

    return ContentCheck(is_valid=is_valid, detected_type=detected_type, issues=issues)
