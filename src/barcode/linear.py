"""
ISO/IEC 15416 parameter engine for linear symbols.

Each scan line is measured independently from its reflectance profile, so
lines can be analyzed concurrently against a shared read-only raster.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np
import structlog

from src.barcode.raster import RasterBuffer
from src.barcode.reflectance import ReflectanceProfile, sample_scan_line
from src.barcode.tables import SAMPLES_PER_MODULE

logger = structlog.get_logger(__name__)

# Adjacent-sample differences at or below this are treated as noise
EDGE_NOISE_FLOOR = 5.0

# Decode proxy: a symbol below these is not considered readable
DECODE_MIN_CONTRAST = 20.0
DECODE_MIN_MODULATION = 0.4


@dataclass(frozen=True)
class LinearMeasurements:
    """Raw ISO 15416 measurements for one scan line or a whole symbol."""

    symbol_contrast: float
    min_reflectance: float
    max_reflectance: float
    edge_contrast: float
    modulation: float
    defects: float
    decodability: float
    decode: bool
    quiet_zone_left: int
    quiet_zone_right: int
    quiet_zone_compliant: bool
    sample_count: int = 0

    @classmethod
    def degraded(cls) -> "LinearMeasurements":
        """Measurements for a scan line with no valid samples."""
        return cls(
            symbol_contrast=0.0,
            min_reflectance=0.0,
            max_reflectance=0.0,
            edge_contrast=0.0,
            modulation=0.0,
            defects=0.0,
            decodability=0.0,
            decode=False,
            quiet_zone_left=0,
            quiet_zone_right=0,
            quiet_zone_compliant=False,
        )


def edge_contrast(values: np.ndarray) -> float:
    """Smallest adjacent-sample transition above the noise floor, 0 if none."""
    if values.size < 2:
        return 0.0
    transitions = np.abs(np.diff(values))
    significant = transitions[transitions > EDGE_NOISE_FLOOR]
    if significant.size == 0:
        return 0.0
    return float(significant.min())


def element_bounds(values: np.ndarray, threshold: float) -> list[tuple[int, int, bool]]:
    """
    Segment a profile into alternating elements.

    Returns:
        (start, end, is_bar) per element, end exclusive. A sample below the
        threshold belongs to a bar.
    """
    is_bar = values < threshold
    change = np.flatnonzero(is_bar[1:] != is_bar[:-1]) + 1
    starts = np.concatenate(([0], change))
    ends = np.concatenate((change, [values.size]))
    return [(int(s), int(e), bool(is_bar[s])) for s, e in zip(starts, ends)]


def defects(values: np.ndarray, r_min: float, r_max: float) -> float:
    """
    Worst in-element reflectance deviation normalized by symbol contrast.

    Bars are compared against Rmin and spaces against Rmax.
    """
    contrast = r_max - r_min
    if contrast <= 0:
        return 0.0

    threshold = (r_min + r_max) / 2
    worst = 0.0
    for start, end, is_bar in element_bounds(values, threshold):
        expected = r_min if is_bar else r_max
        deviation = float(np.abs(values[start:end] - expected).max()) / contrast
        worst = max(worst, deviation)
    return worst


def find_edges(values: np.ndarray, threshold: float) -> np.ndarray:
    """Indices where the profile crosses the threshold."""
    above = values > threshold
    return np.flatnonzero(above[1:] != above[:-1]) + 1


def decodability(values: np.ndarray, threshold: float) -> float:
    """
    Edge-spacing regularity: 1 - worst relative deviation from the mean spacing.

    Fewer than four edges means the profile is undecodable (0).
    """
    edges = find_edges(values, threshold)
    if edges.size < 4:
        return 0.0

    widths = np.diff(edges).astype(np.float64)
    mean_width = float(widths.mean())
    max_deviation = float((np.abs(widths - mean_width) / mean_width).max())
    return max(0.0, 1.0 - max_deviation)


def quiet_zone_counts(values: np.ndarray, threshold: float) -> tuple[int, int]:
    """Contiguous light samples from the left and right ends of the profile."""
    light = values > threshold
    if light.all():
        return int(values.size), int(values.size)
    left = int(np.argmin(light))
    right = int(np.argmin(light[::-1]))
    return left, right


def check_quiet_zones(
    values: np.ndarray,
    threshold: float,
    requirement: tuple[int, int],
    samples_per_module: int = SAMPLES_PER_MODULE,
) -> tuple[int, int, bool]:
    """
    Compare the light margins against a (left, right) requirement in X.

    Returns:
        (left samples, right samples, compliant)
    """
    left, right = quiet_zone_counts(values, threshold)
    required_left, required_right = requirement
    compliant = (
        left >= required_left * samples_per_module
        and right >= required_right * samples_per_module
    )
    return left, right, compliant


def analyze_profile(
    profile: ReflectanceProfile,
    quiet_zone: tuple[int, int],
    samples_per_module: int = SAMPLES_PER_MODULE,
) -> LinearMeasurements:
    """Measure every ISO 15416 parameter on one reflectance profile."""
    values = profile.values
    r_min = profile.r_min
    r_max = profile.r_max
    contrast = r_max - r_min
    threshold = profile.global_threshold

    ec = edge_contrast(values)
    modulation = ec / contrast if contrast > 0 else 0.0
    qz_left, qz_right, qz_ok = check_quiet_zones(values, threshold, quiet_zone, samples_per_module)

    return LinearMeasurements(
        symbol_contrast=contrast,
        min_reflectance=r_min,
        max_reflectance=r_max,
        edge_contrast=ec,
        modulation=modulation,
        defects=defects(values, r_min, r_max),
        decodability=decodability(values, threshold),
        decode=contrast >= DECODE_MIN_CONTRAST and modulation >= DECODE_MIN_MODULATION,
        quiet_zone_left=qz_left,
        quiet_zone_right=qz_right,
        quiet_zone_compliant=qz_ok,
        sample_count=len(profile),
    )


def scan_line_positions(height: int, count: int) -> list[int]:
    """Evenly spaced rows: floor(height / (count + 1) * (i + 1))."""
    return [int(height / (count + 1) * (i + 1)) for i in range(count)]


def measure_scan_line(
    raster: RasterBuffer,
    y: int,
    quiet_zone: tuple[int, int],
    samples_per_module: int = SAMPLES_PER_MODULE,
) -> LinearMeasurements | None:
    """Sample and measure one scan line; None when the row has no valid samples."""
    profile = sample_scan_line(raster, y)
    if profile is None:
        logger.debug("Scan line outside raster", y=y, height=raster.height)
        return None
    return analyze_profile(profile, quiet_zone, samples_per_module)


def measure_scan_lines(
    raster: RasterBuffer,
    positions: list[int],
    quiet_zone: tuple[int, int],
    parallel: bool = False,
    max_workers: int = 4,
) -> list[LinearMeasurements | None]:
    """
    Measure several scan lines, preserving the order of ``positions``.

    With parallel=True the lines run on a thread pool; the raster is shared
    read-only between workers.
    """
    if parallel and len(positions) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(lambda y: measure_scan_line(raster, y, quiet_zone), positions))
    return [measure_scan_line(raster, y, quiet_zone) for y in positions]


def aggregate_measurements(lines: list[LinearMeasurements]) -> LinearMeasurements:
    """
    Combine per-line measurements into symbol-level values.

    Contrast, edge contrast, modulation and decodability are averaged;
    defects take the worst line; decode and quiet-zone compliance require
    every line.
    """
    if not lines:
        return LinearMeasurements.degraded()

    n = len(lines)
    return LinearMeasurements(
        symbol_contrast=sum(m.symbol_contrast for m in lines) / n,
        min_reflectance=min(m.min_reflectance for m in lines),
        max_reflectance=max(m.max_reflectance for m in lines),
        edge_contrast=sum(m.edge_contrast for m in lines) / n,
        modulation=sum(m.modulation for m in lines) / n,
        defects=max(m.defects for m in lines),
        decodability=sum(m.decodability for m in lines) / n,
        decode=all(m.decode for m in lines),
        quiet_zone_left=min(m.quiet_zone_left for m in lines),
        quiet_zone_right=min(m.quiet_zone_right for m in lines),
        quiet_zone_compliant=all(m.quiet_zone_compliant for m in lines),
        sample_count=sum(m.sample_count for m in lines),
    )
