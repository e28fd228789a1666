"""
Finder, timing and alignment pattern integrity.

Each pattern is sampled at module centres and compared against its
expected dark/light layout, giving a 0-100 % match score.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import structlog

from src.barcode.raster import RasterBuffer
from src.barcode.reflectance import module_center, sample_points
from src.barcode.tables import QR_ALIGNMENT_POSITIONS
from src.models.geometry import Region, SymbolSizeSpec

logger = structlog.get_logger(__name__)

# Reflectance below this is read as a dark module
DARK_THRESHOLD = 50.0

# 7x7 QR finder pattern, 1 = dark
FINDER_PATTERN = (
    (1, 1, 1, 1, 1, 1, 1),
    (1, 0, 0, 0, 0, 0, 1),
    (1, 0, 1, 1, 1, 0, 1),
    (1, 0, 1, 1, 1, 0, 1),
    (1, 0, 1, 1, 1, 0, 1),
    (1, 0, 0, 0, 0, 0, 1),
    (1, 1, 1, 1, 1, 1, 1),
)

DM_L_SHAPE_WARNING = 90.0
DM_CLOCK_TRACK_WARNING = 85.0
DM_ALIGNMENT_WARNING = 90.0
QR_PATTERN_WARNING = 80.0


@dataclass(frozen=True)
class PatternScore:
    """Match score for one named pattern."""

    name: str
    integrity: float
    matched: int
    total: int


@dataclass(frozen=True)
class FinderPatternAnalysis:
    """Integrity of all fixed patterns of one symbol."""

    scores: tuple[PatternScore, ...]
    overall_integrity: float
    issues: list[str] = field(default_factory=list)

    def score(self, name: str) -> float | None:
        for entry in self.scores:
            if entry.name == name:
                return entry.integrity
        return None

    @property
    def fixed_pattern_damage(self) -> float:
        """Overall integrity as a 0-1 fraction."""
        return self.overall_integrity / 100.0


def match_modules(
    raster: RasterBuffer,
    region: Region,
    size: SymbolSizeSpec,
    name: str,
    modules: Iterable[tuple[int, int, bool]],
) -> PatternScore:
    """
    Compare sampled modules with their expected state.

    Args:
        modules: (row, column, should_be_dark) per module

    Returns:
        Match score; modules whose centre falls outside the raster are not
        counted, and a pattern with no countable module scores 0
    """
    matched = 0
    total = 0
    for row, column, should_be_dark in modules:
        point = module_center(region, size.rows, size.columns, row, column)
        profile = sample_points(raster, [point])
        if profile is None:
            continue
        is_dark = profile.r_min < DARK_THRESHOLD
        total += 1
        if is_dark == should_be_dark:
            matched += 1

    integrity = matched / total * 100.0 if total else 0.0
    return PatternScore(name=name, integrity=integrity, matched=matched, total=total)


def _summarize(scores: list[PatternScore], limits: dict[str, float]) -> FinderPatternAnalysis:
    issues = [
        f"{s.name} integrity: {s.integrity:.1f}%"
        for s in scores
        if s.integrity < limits[s.name]
    ]
    overall = sum(s.integrity for s in scores) / len(scores) if scores else 0.0
    return FinderPatternAnalysis(scores=tuple(scores), overall_integrity=overall, issues=issues)


# ============================================
# DATA MATRIX
# ============================================


def data_matrix_module(size: SymbolSizeSpec, row: int, column: int) -> bool:
    """
    Expected state of a Data Matrix finder/alignment module.

    Every data region has a solid L along its left and bottom edges and
    alternating clock tracks along its top and right edges. Only meaningful
    for modules on a region border.
    """
    regions_h, regions_v = size.region_grid
    region_w = size.columns // regions_h
    region_h = size.rows // regions_v

    if column % region_w == 0 or row % region_h == region_h - 1:
        return True
    if row % region_h == 0:
        return column % 2 == 0
    # Right clock track alternates up from the dark bottom-right corner
    return (size.rows - 1 - row) % 2 == 0


def _dm_modules(size: SymbolSizeSpec, select: Callable[[int, int], bool]) -> list[tuple[int, int, bool]]:
    return [
        (row, column, data_matrix_module(size, row, column))
        for row in range(size.rows)
        for column in range(size.columns)
        if select(row, column)
    ]


def analyze_data_matrix_patterns(
    raster: RasterBuffer,
    region: Region,
    size: SymbolSizeSpec,
) -> FinderPatternAnalysis:
    """Score the L-shaped finder, the clock track and internal alignment patterns."""
    last_row = size.rows - 1
    last_col = size.columns - 1

    l_shape = match_modules(
        raster, region, size, "L-shape finder pattern",
        _dm_modules(size, lambda r, c: c == 0 or r == last_row),
    )
    clock = match_modules(
        raster, region, size, "Clock track",
        _dm_modules(size, lambda r, c: (r == 0 or c == last_col) and c != 0 and r != last_row),
    )
    scores = [l_shape, clock]

    if size.data_regions > 1:
        regions_h, regions_v = size.region_grid
        region_w = size.columns // regions_h
        region_h = size.rows // regions_v

        def interior(r: int, c: int) -> bool:
            if r in (0, last_row) or c in (0, last_col):
                return False
            return c % region_w in (0, region_w - 1) or r % region_h in (0, region_h - 1)

        scores.append(
            match_modules(raster, region, size, "Alignment pattern", _dm_modules(size, interior))
        )

    analysis = _summarize(
        scores,
        {
            "L-shape finder pattern": DM_L_SHAPE_WARNING,
            "Clock track": DM_CLOCK_TRACK_WARNING,
            "Alignment pattern": DM_ALIGNMENT_WARNING,
        },
    )
    logger.debug(
        "Data Matrix pattern analysis",
        size=size.name,
        overall=round(analysis.overall_integrity, 1),
        issues=len(analysis.issues),
    )
    return analysis


# ============================================
# QR CODE
# ============================================


def _finder_modules(top: int, left: int) -> list[tuple[int, int, bool]]:
    return [
        (top + r, left + c, FINDER_PATTERN[r][c] == 1)
        for r in range(7)
        for c in range(7)
    ]


def _timing_modules(modules: int) -> list[tuple[int, int, bool]]:
    horizontal = [(6, c, c % 2 == 0) for c in range(8, modules - 8)]
    vertical = [(r, 6, r % 2 == 0) for r in range(8, modules - 8)]
    return horizontal + vertical


def qr_alignment_centers(version: int) -> list[tuple[int, int]]:
    """Alignment pattern centres (row, column), excluding finder corners."""
    positions = QR_ALIGNMENT_POSITIONS.get(version, ())
    if len(positions) < 2:
        return []
    first, last = positions[0], positions[-1]
    corners = {(first, first), (first, last), (last, first)}
    return [(r, c) for r in positions for c in positions if (r, c) not in corners]


def _alignment_modules(version: int) -> list[tuple[int, int, bool]]:
    modules = []
    for center_row, center_col in qr_alignment_centers(version):
        for dr in range(-2, 3):
            for dc in range(-2, 3):
                # Dark outer ring and centre, light inner ring
                modules.append((center_row + dr, center_col + dc, max(abs(dr), abs(dc)) != 1))
    return modules


def analyze_qr_patterns(
    raster: RasterBuffer,
    region: Region,
    size: SymbolSizeSpec,
) -> FinderPatternAnalysis:
    """Score the three finder patterns, both timing patterns and the alignment patterns."""
    if size.version is None:
        raise ValueError(f"{size.name} is not a QR version")

    modules = size.rows
    scores = [
        match_modules(raster, region, size, "Top-left finder pattern", _finder_modules(0, 0)),
        match_modules(raster, region, size, "Top-right finder pattern", _finder_modules(0, modules - 7)),
        match_modules(raster, region, size, "Bottom-left finder pattern", _finder_modules(modules - 7, 0)),
        match_modules(raster, region, size, "Timing patterns", _timing_modules(modules)),
    ]
    if size.version >= 2:
        scores.append(
            match_modules(raster, region, size, "Alignment patterns", _alignment_modules(size.version))
        )

    analysis = _summarize(scores, {s.name: QR_PATTERN_WARNING for s in scores})
    logger.debug(
        "QR pattern analysis",
        version=size.version,
        overall=round(analysis.overall_integrity, 1),
        issues=len(analysis.issues),
    )
    return analysis
