"""
Quality grade scale shared by ISO/IEC 15416 and ISO/IEC 15415.
"""

from enum import Enum

from pydantic import Field

from src.models.base import FrozenModel


class QualityGrade(str, Enum):
    """ISO/ANSI letter grade, ordered F < D < C < B < A."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"

    @property
    def numeric(self) -> float:
        """Numeric value on the 4.0 scale."""
        return GRADE_VALUES[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, QualityGrade):
            return NotImplemented
        return self.numeric < other.numeric

    def __le__(self, other: object) -> bool:
        if not isinstance(other, QualityGrade):
            return NotImplemented
        return self.numeric <= other.numeric

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, QualityGrade):
            return NotImplemented
        return self.numeric > other.numeric

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, QualityGrade):
            return NotImplemented
        return self.numeric >= other.numeric


GRADE_VALUES: dict[QualityGrade, float] = {
    QualityGrade.A: 4.0,
    QualityGrade.B: 3.0,
    QualityGrade.C: 2.0,
    QualityGrade.D: 1.0,
    QualityGrade.F: 0.0,
}


class GradeThresholds(FrozenModel):
    """
    Per-parameter grade boundaries.

    With higher_is_better the value must reach the boundary (``>=``),
    otherwise it must not exceed it (``<=``). Boundaries are checked from
    A down to D; anything else is F.
    """

    a: float
    b: float
    c: float
    d: float
    f: float
    higher_is_better: bool = Field(True, description="Direction of the scale")

    def boundaries(self) -> tuple[tuple[QualityGrade, float], ...]:
        """Boundaries from best to worst, excluding F."""
        return (
            (QualityGrade.A, self.a),
            (QualityGrade.B, self.b),
            (QualityGrade.C, self.c),
            (QualityGrade.D, self.d),
        )
