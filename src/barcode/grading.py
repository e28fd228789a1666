"""
Grade calculation, aggregation and recommendations.

The overall grade of a parameter set is its weakest grade (ISO convention),
never an average. The average is only reported as numeric_grade.
"""

from src.barcode.linear import LinearMeasurements
from src.barcode.matrix import MatrixMeasurements
from src.barcode.tables import ISO15415_THRESHOLDS, ISO15416_THRESHOLDS, PRINT_GROWTH_BOUNDS
from src.models.grade import GradeThresholds, QualityGrade
from src.models.result import ParameterResult
from src.models.symbology import MatrixSymbology

# ============================================
# GRADE CALCULATION
# ============================================


def calculate_grade(value: float, thresholds: GradeThresholds) -> QualityGrade:
    """
    Grade a value against a threshold table.

    Boundaries are checked from A to D; the first one met wins, else F.
    """
    for grade, boundary in thresholds.boundaries():
        if thresholds.higher_is_better:
            if value >= boundary:
                return grade
        elif value <= boundary:
            return grade
    return QualityGrade.F


def grade_to_numeric(grade: QualityGrade) -> float:
    """Convert letter grade to numeric."""
    return QualityGrade(grade).numeric


def numeric_to_grade(numeric: float) -> QualityGrade:
    """Convert a (possibly blended) numeric grade to a letter."""
    if numeric >= 3.5:
        return QualityGrade.A
    if numeric >= 2.5:
        return QualityGrade.B
    if numeric >= 1.5:
        return QualityGrade.C
    if numeric >= 0.5:
        return QualityGrade.D
    return QualityGrade.F


def calculate_overall_grade(grades: list[QualityGrade]) -> QualityGrade:
    """Lowest grade in the set; F for an empty set."""
    if not grades:
        return QualityGrade.F
    return min(QualityGrade(g) for g in grades)


def calculate_average_grade(grades: list[QualityGrade]) -> float:
    """Arithmetic mean of the numeric grades; 0.0 for an empty set."""
    if not grades:
        return 0.0
    return sum(grade_to_numeric(g) for g in grades) / len(grades)


def is_passing_grade(grade: QualityGrade, minimum_grade: QualityGrade) -> bool:
    """Check a grade against the minimum acceptable grade."""
    return grade_to_numeric(grade) >= grade_to_numeric(minimum_grade)


def grade_print_growth(growth: float) -> QualityGrade:
    """Grade print growth in printer cells; bounds are inclusive."""
    magnitude = abs(growth)
    for grade, bound in zip((QualityGrade.A, QualityGrade.B, QualityGrade.C, QualityGrade.D), PRINT_GROWTH_BOUNDS):
        if magnitude <= bound:
            return grade
    return QualityGrade.F


def _pass_fail(name: str, passed: bool, description: str) -> ParameterResult:
    return ParameterResult(
        name=name,
        value=1.0 if passed else 0.0,
        grade=QualityGrade.A if passed else QualityGrade.F,
        threshold=1.0,
        description=description,
    )


def _graded(
    name: str,
    value: float,
    thresholds: GradeThresholds,
    description: str,
    unit: str | None = None,
) -> ParameterResult:
    return ParameterResult(
        name=name,
        value=value,
        grade=calculate_grade(value, thresholds),
        threshold=thresholds.c,
        unit=unit,
        description=description,
    )


# ============================================
# ISO 15416 GRADING (LINEAR)
# ============================================


def grade_iso15416_parameters(
    params: LinearMeasurements,
    include_quiet_zone: bool = True,
) -> list[ParameterResult]:
    """Grade every ISO 15416 parameter."""
    t = ISO15416_THRESHOLDS
    results = [
        _pass_fail("Decode", params.decode, "Barcode successfully decoded"),
        _graded("Symbol Contrast", params.symbol_contrast, t["symbol_contrast"],
                "Difference between Rmax and Rmin", "%"),
        _graded("Edge Contrast", params.edge_contrast, t["edge_contrast"],
                "Minimum edge transition contrast", "%"),
        _graded("Modulation", params.modulation, t["modulation"],
                "ECmin / Symbol Contrast ratio"),
        _graded("Defects", params.defects, t["defects"],
                "Maximum element reflectance non-uniformity"),
        _graded("Decodability", params.decodability, t["decodability"],
                "Printing tolerance margin"),
    ]
    if include_quiet_zone:
        results.append(
            _pass_fail("Quiet Zone", params.quiet_zone_compliant,
                       "Quiet zone meets minimum requirements")
        )
    return results


# ============================================
# ISO 15415 GRADING (MATRIX)
# ============================================


def grade_iso15415_parameters(params: MatrixMeasurements) -> list[ParameterResult]:
    """Grade every ISO 15415 parameter."""
    t = ISO15415_THRESHOLDS
    results = [
        _pass_fail("Decode", params.decode, "Symbol successfully decoded"),
        _graded("Symbol Contrast", params.symbol_contrast, t["symbol_contrast"],
                "Difference between light and dark modules", "%"),
        _graded("Modulation", params.modulation, t["modulation"],
                "Module reflectance uniformity"),
        _graded("Axial Non-uniformity", params.axial_nonuniformity, t["axial_nonuniformity"],
                "X/Y dimension ratio deviation"),
        _graded("Grid Non-uniformity", params.grid_nonuniformity, t["grid_nonuniformity"],
                "Module position deviation from ideal grid"),
        _graded("Unused Error Correction", params.unused_error_correction, t["unused_error_correction"],
                "Available error correction capacity"),
        _graded("Fixed Pattern Damage", params.fixed_pattern_damage, t["fixed_pattern_damage"],
                "Finder/timing pattern integrity"),
        ParameterResult(
            name="Print Growth",
            value=params.print_growth,
            grade=grade_print_growth(params.print_growth),
            threshold=PRINT_GROWTH_BOUNDS[2],
            unit="cells",
            description="Module size deviation from nominal",
        ),
    ]
    if params.quiet_zone_compliant is not None:
        results.append(
            _pass_fail("Quiet Zone", params.quiet_zone_compliant,
                       "Quiet zone meets minimum requirements")
        )
    return results


# ============================================
# DISPLAY UTILITIES
# ============================================

GRADE_DESCRIPTIONS = {
    QualityGrade.A: "Excellent - Exceeds requirements",
    QualityGrade.B: "Good - Meets requirements with margin",
    QualityGrade.C: "Acceptable - Meets minimum requirements",
    QualityGrade.D: "Poor - Below requirements, may fail",
    QualityGrade.F: "Fail - Does not meet requirements",
}


def grade_description(grade: QualityGrade) -> str:
    """Human-readable meaning of a grade."""
    return GRADE_DESCRIPTIONS.get(grade, "Unknown")


def format_grade(grade: QualityGrade, numeric: float | None = None) -> str:
    """Format a grade for display, e.g. ``B (2.8)``."""
    letter = QualityGrade(grade).value
    if numeric is not None:
        return f"{letter} ({numeric:.1f})"
    return letter


# ============================================
# WARNINGS & RECOMMENDATIONS
# ============================================

RECOMMENDATIONS = {
    "Symbol Contrast": "Increase contrast between bars and spaces. Check ink density and substrate reflectance.",
    "Edge Contrast": "Improve edge sharpness. Check print resolution and ink spread.",
    "Modulation": "Ensure consistent bar/space widths. Check print head alignment and ink flow.",
    "Defects": "Reduce print defects. Check for voids, spots, and contamination.",
    "Decodability": "Improve dimensional accuracy. Verify X-dimension and bar width reduction settings.",
    "Quiet Zone": "Increase quiet zone size. Ensure minimum clear area around barcode.",
    "Axial Non-uniformity": "Check for distortion in print direction. Verify substrate tension and print speed.",
    "Grid Non-uniformity": "Improve module positioning accuracy. Check print registration and resolution.",
    "Unused Error Correction": "Symbol has significant damage. Reduce defects or increase error correction level.",
    "Fixed Pattern Damage": "Finder/timing patterns are damaged. Check print quality in these areas.",
    "Print Growth": "Adjust bar width reduction (BWR) to compensate for ink spread.",
}


def generate_recommendations(results: list[ParameterResult]) -> list[str]:
    """
    One fixed remediation per parameter graded D or F.

    Parameters without a known remediation are skipped; duplicates are
    dropped while keeping first-seen order.
    """
    recommendations: list[str] = []
    for result in results:
        if result.grade not in (QualityGrade.D, QualityGrade.F):
            continue
        text = RECOMMENDATIONS.get(result.name)
        if text and text not in recommendations:
            recommendations.append(text)
    return recommendations


def generate_warnings(
    results: list[ParameterResult],
    symbology: MatrixSymbology | None = None,
) -> list[str]:
    """Warnings for parameters at or just below the acceptable level."""
    warnings: list[str] = []
    for result in results:
        if result.grade == QualityGrade.C:
            warnings.append(f"{result.name} is at minimum acceptable level")
        elif result.grade == QualityGrade.D:
            warnings.append(f"{result.name} is below acceptable level")

    if symbology == MatrixSymbology.DATAMATRIX:
        for result in results:
            if result.name == "Unused Error Correction" and result.value < 0.5:
                warnings.append(
                    "Low error correction capacity remaining - symbol may be vulnerable to damage"
                )
    return warnings
