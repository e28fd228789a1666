"""
Static lookup tables.

All tables are built once at import time and exposed through read-only
mappings or tuples.
"""

from types import MappingProxyType

from src.models.geometry import SymbolSizeSpec
from src.models.grade import GradeThresholds
from src.models.gs1 import AIFormat, ApplicationIdentifierDefinition
from src.models.symbology import LinearSymbology, MatrixSymbology

# ============================================
# ISO 15416 / ISO 15415 GRADE THRESHOLDS
# ============================================

ISO15416_THRESHOLDS = MappingProxyType(
    {
        "symbol_contrast": GradeThresholds(a=70, b=55, c=40, d=20, f=0),
        "edge_contrast": GradeThresholds(a=15, b=15, c=15, d=15, f=0),
        "modulation": GradeThresholds(a=0.70, b=0.60, c=0.50, d=0.40, f=0),
        "defects": GradeThresholds(a=0.15, b=0.20, c=0.25, d=0.30, f=1.0, higher_is_better=False),
        "decodability": GradeThresholds(a=0.62, b=0.50, c=0.37, d=0.25, f=0),
    }
)

ISO15415_THRESHOLDS = MappingProxyType(
    {
        "symbol_contrast": GradeThresholds(a=70, b=55, c=40, d=20, f=0),
        "modulation": GradeThresholds(a=0.50, b=0.40, c=0.30, d=0.20, f=0),
        "axial_nonuniformity": GradeThresholds(
            a=0.06, b=0.08, c=0.10, d=0.12, f=1.0, higher_is_better=False
        ),
        "grid_nonuniformity": GradeThresholds(
            a=0.38, b=0.50, c=0.63, d=0.75, f=1.0, higher_is_better=False
        ),
        "unused_error_correction": GradeThresholds(a=0.62, b=0.50, c=0.37, d=0.25, f=0),
        "fixed_pattern_damage": GradeThresholds(a=0.87, b=0.75, c=0.62, d=0.50, f=0),
    }
)

# Print growth is graded in printer cells on its own scale: |growth| <= bound
PRINT_GROWTH_BOUNDS = (0.5, 1.0, 1.5, 2.0)

# ============================================
# QUIET ZONES
# ============================================

# Minimum quiet zone as multiples of X, (left, right)
QUIET_ZONE_REQUIREMENTS = MappingProxyType(
    {
        LinearSymbology.CODE128: (10, 10),
        LinearSymbology.EAN13: (11, 7),
        LinearSymbology.EAN8: (7, 7),
        LinearSymbology.UPCA: (9, 9),
        LinearSymbology.UPCE: (9, 7),
        LinearSymbology.ITF14: (10, 10),
        LinearSymbology.CODE39: (10, 10),
        LinearSymbology.CODE93: (10, 10),
        LinearSymbology.CODABAR: (10, 10),
        LinearSymbology.GS1128: (10, 10),
        LinearSymbology.GS1DATABAR: (1, 1),  # varies by DataBar type
    }
)

# Minimum quiet zone on every side, in modules
MATRIX_QUIET_ZONES = MappingProxyType(
    {
        MatrixSymbology.DATAMATRIX: 1,
        MatrixSymbology.QR: 4,
        MatrixSymbology.PDF417: 2,
        MatrixSymbology.AZTEC: 0,
        MatrixSymbology.MAXICODE: 1,
    }
)

# Reflectance samples per module in the simplified linear sampling grid
SAMPLES_PER_MODULE = 10

# ============================================
# DIMENSIONAL LIMITS
# ============================================

# X dimension in mm: (min, max, nominal)
X_DIMENSION_LIMITS = MappingProxyType(
    {
        LinearSymbology.CODE128: (0.250, 1.016, 0.330),
        LinearSymbology.EAN13: (0.264, 0.660, 0.330),
        LinearSymbology.EAN8: (0.264, 0.660, 0.330),
        LinearSymbology.UPCA: (0.264, 0.660, 0.330),
        LinearSymbology.UPCE: (0.264, 0.660, 0.330),
        LinearSymbology.ITF14: (0.495, 1.016, 0.635),
        LinearSymbology.CODE39: (0.191, 1.270, 0.330),
        LinearSymbology.CODE93: (0.191, 1.270, 0.330),
        LinearSymbology.CODABAR: (0.191, 1.270, 0.330),
        LinearSymbology.GS1128: (0.250, 1.016, 0.495),
        LinearSymbology.GS1DATABAR: (0.264, 0.660, 0.330),
    }
)

# Data Matrix module size in mm by application: (min, max, recommended)
DATA_MATRIX_MODULE_LIMITS = MappingProxyType(
    {
        "HEALTHCARE": (0.254, 0.990, 0.380),
        "RETAIL": (0.254, 0.990, 0.380),
        "INDUSTRIAL": (0.191, 1.524, 0.508),
        "DIRECT_PART_MARK": (0.127, 0.508, 0.254),
    }
)

# QR module size in mm by application: (min, recommended)
QR_MODULE_LIMITS = MappingProxyType(
    {
        "PRINT": (0.254, 0.423),
        "SCREEN": (0.169, 0.339),
        "PACKAGING": (0.339, 0.508),
        "INDUSTRIAL": (0.508, 0.762),
    }
)

# Bar width reduction in mm by printing technology
BASE_BWR = MappingProxyType(
    {
        "FLEXO": 0.025,
        "OFFSET": 0.015,
        "DIGITAL": 0.010,
        "GRAVURE": 0.020,
        "LETTERPRESS": 0.030,
    }
)

SUBSTRATE_BWR_MULTIPLIER = MappingProxyType(
    {
        "COATED": 1.0,
        "UNCOATED": 1.3,
        "FILM": 0.8,
        "CORRUGATED": 1.5,
    }
)

# ============================================
# DATA MATRIX SIZES (ISO/IEC 16022)
# ============================================


def _dm(rows: int, columns: int, data: int, ecc: int, regions: int) -> SymbolSizeSpec:
    return SymbolSizeSpec(
        name=f"{rows}x{columns}",
        rows=rows,
        columns=columns,
        data_capacity=data,
        error_correction_capacity=ecc,
        data_regions=regions,
    )


DATA_MATRIX_SIZES = MappingProxyType(
    {
        spec.name: spec
        for spec in (
            _dm(10, 10, 3, 5, 1),
            _dm(12, 12, 5, 7, 1),
            _dm(14, 14, 8, 10, 1),
            _dm(16, 16, 12, 12, 1),
            _dm(18, 18, 18, 14, 1),
            _dm(20, 20, 22, 18, 1),
            _dm(22, 22, 30, 20, 1),
            _dm(24, 24, 36, 24, 1),
            _dm(26, 26, 44, 28, 1),
            _dm(32, 32, 62, 36, 4),
            _dm(36, 36, 86, 42, 4),
            _dm(40, 40, 114, 48, 4),
            _dm(44, 44, 144, 56, 4),
            _dm(48, 48, 174, 68, 4),
            _dm(52, 52, 204, 84, 4),
            _dm(64, 64, 280, 112, 16),
            _dm(72, 72, 368, 144, 16),
            _dm(80, 80, 456, 192, 16),
            _dm(88, 88, 576, 224, 16),
            _dm(96, 96, 696, 272, 16),
            _dm(104, 104, 816, 336, 16),
            _dm(120, 120, 1050, 408, 36),
            _dm(132, 132, 1304, 496, 36),
            _dm(144, 144, 1558, 620, 36),
            # Rectangular
            _dm(8, 18, 5, 7, 1),
            _dm(8, 32, 10, 11, 2),
            _dm(12, 26, 16, 14, 1),
            _dm(12, 36, 22, 18, 2),
            _dm(16, 36, 32, 24, 2),
            _dm(16, 48, 49, 28, 2),
        )
    }
)

# ============================================
# QR CODE VERSIONS (ISO/IEC 18004)
# ============================================

QR_VERSIONS = MappingProxyType(
    {
        version: SymbolSizeSpec(
            name=f"V{version}",
            rows=17 + 4 * version,
            columns=17 + 4 * version,
            version=version,
        )
        for version in range(1, 41)
    }
)

# Alignment pattern centre coordinates per version (Annex E)
QR_ALIGNMENT_POSITIONS = MappingProxyType(
    {
        1: (),
        2: (6, 18),
        3: (6, 22),
        4: (6, 26),
        5: (6, 30),
        6: (6, 34),
        7: (6, 22, 38),
        8: (6, 24, 42),
        9: (6, 26, 46),
        10: (6, 28, 50),
        11: (6, 30, 54),
        12: (6, 32, 58),
        13: (6, 34, 62),
        14: (6, 26, 46, 66),
        15: (6, 26, 48, 70),
        16: (6, 26, 50, 74),
        17: (6, 30, 54, 78),
        18: (6, 30, 56, 82),
        19: (6, 30, 58, 86),
        20: (6, 34, 62, 90),
        21: (6, 28, 50, 72, 94),
        22: (6, 26, 50, 74, 98),
        23: (6, 30, 54, 78, 102),
        24: (6, 28, 54, 80, 106),
        25: (6, 32, 58, 84, 110),
        26: (6, 30, 58, 86, 114),
        27: (6, 34, 62, 90, 118),
        28: (6, 26, 50, 74, 98, 122),
        29: (6, 30, 54, 78, 102, 126),
        30: (6, 26, 52, 78, 104, 130),
        31: (6, 30, 56, 82, 108, 134),
        32: (6, 34, 60, 86, 112, 138),
        33: (6, 30, 58, 86, 114, 142),
        34: (6, 34, 62, 90, 118, 146),
        35: (6, 30, 54, 78, 102, 126, 150),
        36: (6, 24, 50, 76, 102, 128, 154),
        37: (6, 28, 54, 80, 106, 132, 158),
        38: (6, 32, 58, 84, 110, 136, 162),
        39: (6, 26, 54, 82, 110, 138, 166),
        40: (6, 30, 58, 86, 114, 142, 170),
    }
)

# Byte-mode capacity per version, indexed by version - 1
QR_CAPACITY = MappingProxyType(
    {
        "L": (17, 32, 53, 78, 106, 134, 154, 192, 230, 271, 321, 367, 425, 458, 520, 586, 644, 718, 792, 858,
              929, 1003, 1091, 1171, 1273, 1367, 1465, 1528, 1628, 1732, 1840, 1952, 2068, 2188, 2303, 2431,
              2563, 2699, 2809, 2953),
        "M": (14, 26, 42, 62, 84, 106, 122, 152, 180, 213, 251, 287, 331, 362, 412, 450, 504, 560, 624, 666,
              711, 779, 857, 911, 997, 1059, 1125, 1190, 1264, 1370, 1452, 1538, 1628, 1722, 1809, 1911,
              1989, 2099, 2213, 2331),
        "Q": (11, 20, 32, 46, 60, 74, 86, 108, 130, 151, 177, 203, 241, 258, 292, 322, 364, 394, 442, 482,
              509, 565, 611, 661, 715, 751, 805, 868, 908, 982, 1030, 1112, 1168, 1228, 1283, 1351, 1423,
              1499, 1579, 1663),
        "H": (7, 14, 24, 34, 44, 58, 64, 84, 98, 119, 137, 155, 177, 194, 220, 250, 280, 310, 338, 382,
              403, 439, 461, 511, 535, 593, 625, 658, 698, 742, 790, 842, 898, 958, 983, 1051, 1093, 1139,
              1219, 1273),
    }
)

# ============================================
# GS1 APPLICATION IDENTIFIERS
# ============================================


def _ai(
    ai: str,
    name: str,
    fmt: AIFormat,
    min_length: int,
    max_length: int,
) -> ApplicationIdentifierDefinition:
    fixed = min_length == max_length
    return ApplicationIdentifierDefinition(
        ai=ai,
        name=name,
        format=fmt,
        min_length=min_length,
        max_length=max_length,
        is_fixed_length=fixed,
        fnc1_required=not fixed,
    )


N = AIFormat.NUMERIC
X = AIFormat.ALPHANUMERIC

# Scanned in this order, first prefix match wins. Keep it a tuple: moving an
# entry can change how an ambiguous payload is split.
GS1_APPLICATION_IDENTIFIERS: tuple[ApplicationIdentifierDefinition, ...] = (
    _ai("00", "SSCC", N, 18, 18),
    _ai("01", "GTIN", N, 14, 14),
    _ai("02", "CONTENT", N, 14, 14),
    _ai("10", "BATCH/LOT", X, 1, 20),
    _ai("11", "PROD DATE", N, 6, 6),
    _ai("13", "PACK DATE", N, 6, 6),
    _ai("15", "BEST BEFORE", N, 6, 6),
    _ai("17", "USE BY", N, 6, 6),
    _ai("20", "VARIANT", N, 2, 2),
    _ai("21", "SERIAL", X, 1, 20),
    _ai("22", "CPV", X, 1, 20),
    _ai("30", "VAR COUNT", N, 1, 8),
    _ai("37", "COUNT", N, 1, 8),
    _ai("240", "ADDITIONAL ID", X, 1, 30),
    _ai("241", "CUST PART NO", X, 1, 30),
    _ai("250", "SECONDARY SERIAL", X, 1, 30),
    # Net weight AIs are four digits with an implied decimal place; a bare
    # "310"/"320" prefix would leave the decimal digit in the value.
    *(_ai(f"310{d}", "NET WEIGHT (kg)", N, 6, 6) for d in range(6)),
    *(_ai(f"320{d}", "NET WEIGHT (lb)", N, 6, 6) for d in range(6)),
    _ai("400", "ORDER NUMBER", X, 1, 30),
    _ai("410", "SHIP TO LOC", N, 13, 13),
    _ai("414", "LOC No", N, 13, 13),
    _ai("420", "SHIP TO POST", X, 1, 20),
    _ai("8020", "REF No", X, 1, 25),
)

DATE_AIS = frozenset({"11", "13", "15", "17"})
