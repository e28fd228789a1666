"""
Reflectance sampling.

Converts pixels to reflectance percentages (0-100) using ITU-R BT.601
luminance weights and collects them along a scan path. Samples that fall
outside the raster are skipped, never zero-filled.
"""

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np

from src.barcode.raster import RasterBuffer
from src.models.geometry import Region

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


@dataclass(frozen=True, eq=False)
class ReflectanceProfile:
    """Ordered reflectance samples along one scan path (never empty)."""

    values: np.ndarray

    def __post_init__(self) -> None:
        if self.values.ndim != 1 or self.values.size == 0:
            raise ValueError("Reflectance profile needs at least one sample")

    def __len__(self) -> int:
        return int(self.values.size)

    def __iter__(self) -> Iterator[float]:
        return iter(self.values.tolist())

    @property
    def r_min(self) -> float:
        return float(self.values.min())

    @property
    def r_max(self) -> float:
        return float(self.values.max())

    @property
    def global_threshold(self) -> float:
        return (self.r_min + self.r_max) / 2


def _reflectance(pixels: np.ndarray) -> np.ndarray:
    """Reflectance of RGBA pixels along the last axis, alpha ignored."""
    rgb = pixels[..., :3].astype(np.float64)
    return rgb @ LUMA_WEIGHTS / 255.0 * 100.0


def _profile(values: np.ndarray) -> ReflectanceProfile | None:
    if values.size == 0:
        return None
    values = np.array(values, dtype=np.float64, copy=True)
    values.setflags(write=False)
    return ReflectanceProfile(values)


def luminance_map(raster: RasterBuffer) -> np.ndarray:
    """Reflectance of every pixel as a ``(height, width)`` array."""
    return _reflectance(raster.pixels)


def sample_scan_line(
    raster: RasterBuffer,
    y: int,
    x_start: int = 0,
    x_end: int | None = None,
) -> ReflectanceProfile | None:
    """
    Sample a horizontal scan line.

    Args:
        raster: Source raster
        y: Row to sample
        x_start: First column (inclusive)
        x_end: Last column (exclusive), defaults to the raster width

    Returns:
        Profile of the in-bounds samples, or None if none are in bounds
    """
    if x_end is None:
        x_end = raster.width
    if y < 0 or y >= raster.height:
        return None

    start = max(x_start, 0)
    end = min(x_end, raster.width)
    if start >= end:
        return None
    return _profile(_reflectance(raster.pixels[y, start:end]))


def sample_column(
    raster: RasterBuffer,
    x: int,
    y_start: int = 0,
    y_end: int | None = None,
) -> ReflectanceProfile | None:
    """Sample a vertical scan path; same bounds policy as sample_scan_line."""
    if y_end is None:
        y_end = raster.height
    if x < 0 or x >= raster.width:
        return None

    start = max(y_start, 0)
    end = min(y_end, raster.height)
    if start >= end:
        return None
    return _profile(_reflectance(raster.pixels[start:end, x]))


def sample_points(raster: RasterBuffer, points: list[tuple[int, int]]) -> ReflectanceProfile | None:
    """Sample arbitrary (x, y) points in order, skipping those out of bounds."""
    inside = [
        (x, y) for x, y in points if 0 <= x < raster.width and 0 <= y < raster.height
    ]
    if not inside:
        return None
    xs = np.array([p[0] for p in inside], dtype=np.intp)
    ys = np.array([p[1] for p in inside], dtype=np.intp)
    return _profile(_reflectance(raster.pixels[ys, xs]))


def sample_grid(
    raster: RasterBuffer,
    region: Region,
    step_x: float = 1.0,
    step_y: float = 1.0,
) -> ReflectanceProfile | None:
    """
    Sample the centres of a regular grid laid over a region.

    The grid is traversed row by row. A step of 1 samples every pixel.
    """
    if step_x <= 0 or step_y <= 0:
        raise ValueError("Grid steps must be positive")

    xs = np.floor(region.x + (np.arange(int(region.width / step_x)) + 0.5) * step_x).astype(np.intp)
    ys = np.floor(region.y + (np.arange(int(region.height / step_y)) + 0.5) * step_y).astype(np.intp)
    xs = xs[(xs >= 0) & (xs < raster.width)]
    ys = ys[(ys >= 0) & (ys < raster.height)]
    if xs.size == 0 or ys.size == 0:
        return None

    block = raster.pixels[np.ix_(ys, xs)]
    return _profile(_reflectance(block).ravel())


def sample_module_centers(
    raster: RasterBuffer,
    region: Region,
    rows: int,
    columns: int,
) -> ReflectanceProfile | None:
    """Sample one point at the centre of every module of a rows x columns symbol."""
    return sample_grid(raster, region, region.width / columns, region.height / rows)


def module_center(region: Region, rows: int, columns: int, row: int, column: int) -> tuple[int, int]:
    """Pixel coordinates of a module centre."""
    x = region.x + int((column + 0.5) * region.width / columns)
    y = region.y + int((row + 0.5) * region.height / rows)
    return x, y


def locate_symbol(raster: RasterBuffer) -> Region | None:
    """
    Bounding box of the dark pixels in a raster.

    Dark means below the midpoint between the lightest and darkest pixel.
    Returns None for a raster with no contrast.
    """
    reflectance = luminance_map(raster)
    r_min, r_max = float(reflectance.min()), float(reflectance.max())
    if r_max - r_min <= 0:
        return None

    dark = reflectance < (r_min + r_max) / 2
    rows = np.flatnonzero(dark.any(axis=1))
    cols = np.flatnonzero(dark.any(axis=0))
    return Region(
        x=int(cols[0]),
        y=int(rows[0]),
        width=int(cols[-1] - cols[0] + 1),
        height=int(rows[-1] - rows[0] + 1),
    )
