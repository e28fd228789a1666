"""
Read-only raster input for verification.
"""

from dataclasses import dataclass
from io import BytesIO

import numpy as np
from PIL import Image

CHANNELS = 4


@dataclass(frozen=True, eq=False)
class RasterBuffer:
    """
    Captured image of a printed symbol.

    Pixels are stored as a read-only ``(height, width, 4)`` uint8 array in
    row-major RGBA order. The engine never writes to it, so one buffer can be
    shared across threads.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if not isinstance(self.pixels, np.ndarray):
            raise TypeError(f"Unsupported pixel container: {type(self.pixels)}")
        if self.pixels.ndim != 3 or self.pixels.shape[2] != CHANNELS:
            raise ValueError(f"Expected (height, width, 4) pixels, got {self.pixels.shape}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {self.pixels.dtype}")
        if self.pixels.shape[0] == 0 or self.pixels.shape[1] == 0:
            raise ValueError("Raster must have at least one pixel")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @classmethod
    def from_rgba_bytes(cls, width: int, height: int, data: bytes | bytearray | memoryview) -> "RasterBuffer":
        """
        Wrap an interleaved RGBA8 buffer.

        Args:
            width: Pixels per row
            height: Number of rows
            data: width * height * 4 bytes, row-major

        Returns:
            RasterBuffer over a read-only copy of the data
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid raster size: {width}x{height}")
        expected = width * height * CHANNELS
        buf = bytes(data)
        if len(buf) != expected:
            raise ValueError(f"Expected {expected} bytes for {width}x{height} RGBA, got {len(buf)}")

        pixels = np.frombuffer(buf, dtype=np.uint8).reshape(height, width, CHANNELS)
        return cls._readonly(pixels)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "RasterBuffer":
        """
        Wrap a numpy image.

        Accepts grayscale ``(H, W)``, RGB ``(H, W, 3)`` or RGBA ``(H, W, 4)``
        uint8 arrays.
        """
        if not isinstance(array, np.ndarray):
            raise TypeError(f"Unsupported image type: {type(array)}")
        if array.dtype != np.uint8:
            raise ValueError(f"Expected uint8 array, got {array.dtype}")

        if array.ndim == 2:
            rgb = np.repeat(array[:, :, np.newaxis], 3, axis=2)
            alpha = np.full(array.shape + (1,), 255, dtype=np.uint8)
            pixels = np.concatenate([rgb, alpha], axis=2)
        elif array.ndim == 3 and array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            pixels = np.concatenate([array, alpha], axis=2)
        elif array.ndim == 3 and array.shape[2] == CHANNELS:
            pixels = array.copy()
        else:
            raise ValueError(f"Unsupported array shape: {array.shape}")

        return cls._readonly(pixels)

    @classmethod
    def from_image(cls, image_data: bytes | BytesIO | np.ndarray | Image.Image) -> "RasterBuffer":
        """Load a raster from encoded image bytes, a numpy array or a PIL Image."""
        if isinstance(image_data, np.ndarray):
            return cls.from_array(image_data)

        pil_image = cls._to_pil_image(image_data)
        if pil_image.mode != "RGBA":
            pil_image = pil_image.convert("RGBA")
        return cls._readonly(np.asarray(pil_image, dtype=np.uint8))

    @staticmethod
    def _to_pil_image(image_data: bytes | BytesIO | Image.Image) -> Image.Image:
        """Convert various image formats to PIL Image."""
        if isinstance(image_data, Image.Image):
            return image_data
        elif isinstance(image_data, bytes):
            return Image.open(BytesIO(image_data))
        elif isinstance(image_data, BytesIO):
            return Image.open(image_data)
        else:
            raise TypeError(f"Unsupported image type: {type(image_data)}")

    @classmethod
    def _readonly(cls, pixels: np.ndarray) -> "RasterBuffer":
        pixels = np.array(pixels, dtype=np.uint8, copy=True)
        pixels.setflags(write=False)
        return cls(pixels)
