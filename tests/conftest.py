"""
Synthetic raster fixtures.

Rasters are built from numpy arrays: 0 is a black pixel (reflectance 0),
255 a white one (reflectance 100).
"""

import numpy as np
import pytest

from src.barcode.patterns import FINDER_PATTERN, data_matrix_module, qr_alignment_centers
from src.barcode.raster import RasterBuffer
from src.models import Region, SymbolSizeSpec

BLACK = 0
WHITE = 255


def stripes(
    bars: int,
    module_px: int = 10,
    margin_left: int = 120,
    margin_right: int = 120,
    height: int = 40,
) -> RasterBuffer:
    """Alternating bars and spaces of equal width, starting and ending with a bar."""
    elements = 2 * bars - 1
    width = margin_left + elements * module_px + margin_right
    gray = np.full((height, width), WHITE, dtype=np.uint8)
    for element in range(0, elements, 2):
        start = margin_left + element * module_px
        gray[:, start:start + module_px] = BLACK
    return RasterBuffer.from_array(gray)


def module_raster(
    modules: np.ndarray,
    module_px: int = 10,
    margin_modules: int = 1,
) -> tuple[RasterBuffer, Region]:
    """Paint a boolean module matrix (True = dark) with a light margin."""
    rows, columns = modules.shape
    margin = margin_modules * module_px
    gray = np.full(
        (rows * module_px + 2 * margin, columns * module_px + 2 * margin),
        WHITE,
        dtype=np.uint8,
    )
    block = np.kron(modules.astype(np.uint8), np.ones((module_px, module_px), dtype=np.uint8))
    gray[margin:margin + rows * module_px, margin:margin + columns * module_px] = np.where(
        block == 1, BLACK, WHITE
    )
    region = Region(x=margin, y=margin, width=columns * module_px, height=rows * module_px)
    return RasterBuffer.from_array(gray), region


def data_matrix_modules(size: SymbolSizeSpec) -> np.ndarray:
    """Finder, clock and alignment modules of a Data Matrix; data area left light."""
    regions_h, regions_v = size.region_grid
    region_w = size.columns // regions_h
    region_h = size.rows // regions_v
    modules = np.zeros((size.rows, size.columns), dtype=bool)
    for row in range(size.rows):
        for column in range(size.columns):
            on_border = column % region_w in (0, region_w - 1) or row % region_h in (0, region_h - 1)
            if on_border:
                modules[row, column] = data_matrix_module(size, row, column)
    return modules


def qr_modules(size: SymbolSizeSpec) -> np.ndarray:
    """Finder, timing and alignment modules of a QR Code; data area left light."""
    n = size.rows
    modules = np.zeros((n, n), dtype=bool)
    finder = np.array(FINDER_PATTERN, dtype=bool)
    modules[0:7, 0:7] = finder
    modules[0:7, n - 7:n] = finder
    modules[n - 7:n, 0:7] = finder
    for i in range(8, n - 8):
        modules[6, i] = i % 2 == 0
        modules[i, 6] = i % 2 == 0
    for center_row, center_col in qr_alignment_centers(size.version):
        for dr in range(-2, 3):
            for dc in range(-2, 3):
                modules[center_row + dr, center_col + dc] = max(abs(dr), abs(dc)) != 1
    return modules


@pytest.fixture
def stripe_raster():
    """Factory for alternating bar/space rasters."""
    return stripes


@pytest.fixture
def matrix_raster():
    """Factory painting a module matrix into a raster."""
    return module_raster


@pytest.fixture
def dm_modules():
    """Factory for ideal Data Matrix fixed-pattern modules."""
    return data_matrix_modules


@pytest.fixture
def qr_pattern_modules():
    """Factory for ideal QR fixed-pattern modules."""
    return qr_modules
