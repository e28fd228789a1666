"""
Geometry and symbol size specifications.
"""

from pydantic import Field

from src.models.base import FrozenModel


class Region(FrozenModel):
    """Axis-aligned rectangle in pixel coordinates."""

    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    @property
    def right(self) -> int:
        """Exclusive right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """Exclusive bottom edge."""
        return self.y + self.height


class SymbolSizeSpec(FrozenModel):
    """
    Static description of one Data Matrix size or QR version.

    QR versions are square: rows == columns == modules.
    """

    name: str
    rows: int = Field(..., gt=0)
    columns: int = Field(..., gt=0)
    data_capacity: int = Field(0, ge=0)
    error_correction_capacity: int = Field(0, ge=0)
    data_regions: int = Field(1, ge=1)
    version: int | None = Field(None, description="QR version, None for Data Matrix")

    @property
    def is_square(self) -> bool:
        return self.rows == self.columns

    @property
    def region_grid(self) -> tuple[int, int]:
        """Data regions as (horizontal, vertical) counts."""
        if self.data_regions == 1:
            return 1, 1
        if self.is_square:
            side = int(round(self.data_regions**0.5))
            return side, side
        # Rectangular Data Matrix sizes stack their regions horizontally
        return self.data_regions, 1
