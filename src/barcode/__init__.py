"""
Barcode quality verification (ISO/IEC 15416 and ISO/IEC 15415).
"""

from src.barcode.dimensions import (
    calculate_bwr,
    check_data_matrix_dimensions,
    check_dimensional_compliance,
    check_qr_dimensions,
    recommend_data_matrix_size,
    recommend_error_correction,
    recommend_qr_version,
    validate_qr_content,
)
from src.barcode.gs1 import parse_gs1, validate_gs1_datamatrix
from src.barcode.grading import (
    calculate_average_grade,
    calculate_grade,
    calculate_overall_grade,
    generate_recommendations,
    numeric_to_grade,
)
from src.barcode.raster import RasterBuffer
from src.barcode.reflectance import ReflectanceProfile, sample_grid, sample_scan_line
from src.barcode.validator import (
    calculate_check_digit,
    validate_date,
    validate_gtin,
    validate_sscc,
    verify_structure,
)
from src.barcode.verifier import BarcodeVerifier, verify_barcode

__all__ = [
    "BarcodeVerifier",
    "RasterBuffer",
    "ReflectanceProfile",
    "calculate_average_grade",
    "calculate_bwr",
    "calculate_check_digit",
    "calculate_grade",
    "calculate_overall_grade",
    "check_data_matrix_dimensions",
    "check_dimensional_compliance",
    "check_qr_dimensions",
    "generate_recommendations",
    "numeric_to_grade",
    "parse_gs1",
    "recommend_data_matrix_size",
    "recommend_error_correction",
    "recommend_qr_version",
    "sample_grid",
    "sample_scan_line",
    "validate_date",
    "validate_gs1_datamatrix",
    "validate_gtin",
    "validate_qr_content",
    "validate_sscc",
    "verify_barcode",
    "verify_structure",
]
