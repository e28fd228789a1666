"""
GS1 check-digit and payload structure validation.

All GS1 keys (GTIN-8/12/13/14, SSCC) share one mod-10 scheme: weights
alternate 3, 1, 3, ... from the digit just left of the check digit.
"""

from src.models.symbology import LinearSymbology


def calculate_check_digit(digits: str) -> int:
    """
    Calculate the GS1 mod-10 check digit for a string of data digits.

    Algorithm:
    1. Multiply the rightmost data digit by 3, the next by 1, alternating
    2. Sum all results
    3. Check digit = (10 - (sum mod 10)) mod 10
    """
    if not digits:
        raise ValueError("Code must have at least one data digit")

    total = 0
    for i, digit in enumerate(reversed(digits)):
        if not digit.isdigit():
            raise ValueError(f"Invalid character in code: {digit}")
        weight = 3 if i % 2 == 0 else 1
        total += int(digit) * weight

    return (10 - (total % 10)) % 10


def _has_valid_check_digit(code: str) -> bool:
    return int(code[-1]) == calculate_check_digit(code[:-1])


def validate_gtin(gtin: str) -> bool:
    """
    Validate a GTIN-8, GTIN-12, GTIN-13 or GTIN-14.

    The code is left-padded with zeros to 14 digits, so weights start with 3
    at the most significant padded digit.

    Args:
        gtin: 8, 12, 13 or 14 digit code

    Returns:
        True if checksum is valid
    """
    if len(gtin) not in (8, 12, 13, 14):
        return False
    if not gtin.isdigit():
        return False

    return _has_valid_check_digit(gtin.zfill(14))


def validate_sscc(sscc: str) -> bool:
    """Validate an 18-digit Serial Shipping Container Code."""
    if len(sscc) != 18:
        return False
    if not sscc.isdigit():
        return False

    return _has_valid_check_digit(sscc)


def validate_date(date: str) -> bool:
    """
    Validate a GS1 YYMMDD date.

    Month must be 01-12. Day may be 00 (no specific day) up to 31.
    """
    if len(date) != 6 or not date.isdigit():
        return False

    month = int(date[2:4])
    day = int(date[4:6])

    if month < 1 or month > 12:
        return False
    if day < 0 or day > 31:
        return False
    return True


def verify_structure(code: str, symbology: LinearSymbology) -> tuple[bool, list[str]]:
    """
    Verify a decoded payload against its symbology's structure.

    EAN-13, EAN-8, UPC-A and ITF-14 carry a fixed number of digits and a
    GS1 check digit; other symbologies are accepted as-is.

    Returns:
        Tuple of (is_valid, errors)
    """
    lengths = {
        LinearSymbology.EAN13: 13,
        LinearSymbology.EAN8: 8,
        LinearSymbology.UPCA: 12,
        LinearSymbology.ITF14: 14,
    }
    if symbology not in lengths:
        return True, []

    expected = lengths[symbology]
    label = symbology.value
    if len(code) != expected:
        return False, [f"Invalid length: {len(code)} (expected {expected})"]
    if not code.isdigit():
        return False, [f"{label} must contain only digits"]

    errors: list[str] = []
    if symbology == LinearSymbology.ITF14 and int(code[0]) > 8:
        # Packaging indicator 9 is reserved for variable measure items
        errors.append(f"Invalid packaging indicator: {code[0]} (should be 0-8)")

    check_digit = calculate_check_digit(code[:-1])
    if check_digit != int(code[-1]):
        errors.append(f"Invalid check digit: expected {check_digit}, got {code[-1]}")
        return False, errors

    return not errors, errors
