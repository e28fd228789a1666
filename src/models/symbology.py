"""
Barcode type tags.

A barcode type is either a LinearSymbology (graded under ISO/IEC 15416)
or a MatrixSymbology (graded under ISO/IEC 15415).
"""

from enum import Enum
from typing import Union


class LinearSymbology(str, Enum):
    """Supported 1D symbologies."""

    CODE128 = "CODE128"
    EAN13 = "EAN13"
    EAN8 = "EAN8"
    UPCA = "UPCA"
    UPCE = "UPCE"
    ITF14 = "ITF14"
    CODE39 = "CODE39"
    CODE93 = "CODE93"
    CODABAR = "CODABAR"
    GS1128 = "GS1128"
    GS1DATABAR = "GS1DATABAR"


class MatrixSymbology(str, Enum):
    """Supported 2D symbologies."""

    DATAMATRIX = "DATAMATRIX"
    QR = "QR"
    PDF417 = "PDF417"
    AZTEC = "AZTEC"
    MAXICODE = "MAXICODE"


class Standard(str, Enum):
    """Grading standard applied to a symbol."""

    ISO15416 = "ISO15416"
    ISO15415 = "ISO15415"


BarcodeType = Union[LinearSymbology, MatrixSymbology]

# Common spellings seen in decoder output
_ALIASES = {
    "EAN-13": LinearSymbology.EAN13,
    "EAN-8": LinearSymbology.EAN8,
    "UPC-A": LinearSymbology.UPCA,
    "UPC-E": LinearSymbology.UPCE,
    "ITF-14": LinearSymbology.ITF14,
    "GS1-128": LinearSymbology.GS1128,
    "DATA MATRIX": MatrixSymbology.DATAMATRIX,
    "QRCODE": MatrixSymbology.QR,
    "QR-CODE": MatrixSymbology.QR,
}


def parse_barcode_type(tag: "str | BarcodeType") -> BarcodeType | None:
    """
    Resolve a barcode type tag.

    Args:
        tag: Enum member or tag string (case-insensitive)

    Returns:
        The matching symbology, or None if the tag is not recognized
    """
    if isinstance(tag, (LinearSymbology, MatrixSymbology)):
        return tag

    normalized = str(tag).strip().upper()
    if normalized in _ALIASES:
        return _ALIASES[normalized]
    try:
        return LinearSymbology(normalized)
    except ValueError:
        pass
    try:
        return MatrixSymbology(normalized)
    except ValueError:
        return None


def standard_for(barcode_type: BarcodeType) -> Standard:
    """Grading standard for a barcode type."""
    if isinstance(barcode_type, LinearSymbology):
        return Standard.ISO15416
    if isinstance(barcode_type, MatrixSymbology):
        return Standard.ISO15415
    raise TypeError(f"Unsupported barcode type: {barcode_type!r}")
