"""
GS1 Application Identifier parser.

Parsing is a single left-to-right pass over the element string. At each
position the AI table is scanned in table order and the first definition
whose code prefixes the remaining data is taken. This is first-match, not
longest-match: the order of GS1_APPLICATION_IDENTIFIERS decides how an
ambiguous payload splits, so that tuple must not be re-sorted.
"""

import re

import structlog

from src.barcode.tables import DATE_AIS, GS1_APPLICATION_IDENTIFIERS
from src.barcode.validator import validate_date, validate_gtin, validate_sscc
from src.models.gs1 import (
    AIFormat,
    ApplicationIdentifierDefinition,
    GS1ValidationResult,
    ParsedApplicationIdentifier,
)

logger = structlog.get_logger(__name__)

GROUP_SEPARATOR = "\x1d"

# Symbology identifiers announcing GS1 data: GS1-128, GS1 DataMatrix, GS1 QR
SYMBOLOGY_IDENTIFIERS = ("]C1", "]d2", "]Q3")

# GS1 character set 82
_CSET82 = re.compile(r"^[!\"%&'()*+,\-./0-9:;<=>?A-Z_a-z]+$")


def strip_fnc1_prefix(data: str) -> tuple[str, bool]:
    """
    Remove a leading FNC1 representation.

    Returns:
        Tuple of (remaining data, whether a prefix was present)
    """
    for identifier in SYMBOLOGY_IDENTIFIERS:
        if data.startswith(identifier):
            data = data[len(identifier):]
            if data.startswith(GROUP_SEPARATOR):
                data = data[1:]
            return data, True
    if data.startswith(GROUP_SEPARATOR):
        return data[1:], True
    return data, False


def match_definition(data: str, position: int) -> ApplicationIdentifierDefinition | None:
    """First AI definition, in table order, that prefixes data[position:]."""
    for definition in GS1_APPLICATION_IDENTIFIERS:
        if data.startswith(definition.ai, position):
            return definition
    return None


def validate_ai_value(
    definition: ApplicationIdentifierDefinition,
    value: str,
) -> tuple[bool, str | None]:
    """
    Validate a value against its AI definition.

    Checks length, character set, then AI-specific rules (GTIN and SSCC
    check digits, YYMMDD dates).

    Returns:
        Tuple of (is_valid, error_message)
    """
    if len(value) < definition.min_length:
        return False, f"Value too short (min {definition.min_length})"
    if len(value) > definition.max_length:
        return False, f"Value too long (max {definition.max_length})"

    if definition.format == AIFormat.NUMERIC:
        if not value.isdigit():
            return False, "Must be numeric"
    elif not _CSET82.match(value):
        return False, "Contains characters outside GS1 character set 82"

    if definition.ai == "01" and not validate_gtin(value):
        return False, "Invalid GTIN check digit"
    if definition.ai == "00" and not validate_sscc(value):
        return False, "Invalid SSCC check digit"
    if definition.ai in DATE_AIS and not validate_date(value):
        return False, "Invalid date format (YYMMDD)"

    return True, None


def check_required_ais(elements: list[ParsedApplicationIdentifier]) -> list[str]:
    """Warnings for AI combinations expected alongside each other."""
    ais = {element.ai for element in elements}
    warnings: list[str] = []

    if "01" in ais and "10" not in ais and "21" not in ais:
        warnings.append("GTIN present but no batch/lot (10) or serial (21) number")

    if "21" in ais and "01" not in ais:
        warnings.append("Serial number (21) present without GTIN (01)")

    # EU Falsified Medicines Directive unique identifier
    if "01" in ais and not {"17", "10", "21"} <= ais:
        warnings.append("EU FMD requires GTIN + Expiry + Batch + Serial")

    return warnings


def parse_gs1(data: str) -> GS1ValidationResult:
    """
    Parse and validate a GS1 element string.

    Parsing stops at the first position where no AI matches; the result is
    then invalid and carries an ``Unknown AI at position N`` error. Cross-AI
    warnings are only produced when the whole string was parsed.

    Args:
        data: Decoded payload, optionally starting with ]C1, ]d2, ]Q3 or GS

    Returns:
        GS1ValidationResult
    """
    clean, has_prefix = strip_fnc1_prefix(data)
    elements: list[ParsedApplicationIdentifier] = []
    errors: list[str] = []
    is_valid = True
    complete = True

    position = 0
    while position < len(clean):
        definition = match_definition(clean, position)
        if definition is None:
            is_valid = False
            complete = False
            errors.append(f"Unknown AI at position {position}: {clean[position:position + 4]}")
            break

        data_start = position + len(definition.ai)
        if definition.is_fixed_length:
            data_end = min(data_start + definition.max_length, len(clean))
        else:
            separator = clean.find(GROUP_SEPARATOR, data_start)
            data_end = separator if separator >= 0 else len(clean)

        value = clean[data_start:data_end]
        valid, error = validate_ai_value(definition, value)
        elements.append(
            ParsedApplicationIdentifier(
                ai=definition.ai,
                name=definition.name,
                value=value,
                is_valid=valid,
                error=error,
            )
        )
        if not valid:
            is_valid = False
            errors.append(f"AI ({definition.ai}) {definition.name}: {error}")

        position = data_end
        if clean.startswith(GROUP_SEPARATOR, position):
            position += 1

    warnings = check_required_ais(elements) if complete else []

    logger.debug(
        "Parsed GS1 element string",
        elements=len(elements),
        is_valid=is_valid,
        errors=len(errors),
    )

    return GS1ValidationResult(
        is_valid=is_valid,
        has_gs1_prefix=has_prefix,
        application_identifiers=elements,
        errors=errors,
        warnings=warnings,
    )


def validate_gs1_datamatrix(data: str) -> GS1ValidationResult:
    """
    Validate GS1 DataMatrix content.

    Adds warnings for a missing FNC1 prefix and a missing GTIN on top of
    parse_gs1.
    """
    result = parse_gs1(data)
    warnings = list(result.warnings)

    if not result.has_gs1_prefix:
        warnings.insert(0, "Missing GS1 FNC1 prefix - may not be recognized as GS1 DataMatrix")
    if result.get("01") is None:
        warnings.append("Missing GTIN (01) - required for most applications")

    return result.model_copy(update={"warnings": warnings})
