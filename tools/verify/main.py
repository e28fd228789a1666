"""
CLI tool to grade a barcode image or validate a GS1 element string.

Usage:
    python -m tools.verify.main label.png --type EAN13 --data 4006381333931
    python -m tools.verify.main dm.png --type DATAMATRIX --size 16x16 --format json
    python -m tools.verify.main --gs1 "]d20104006381333931" --format json
"""

import argparse
import json
import sys
from pathlib import Path

from src.barcode import parse_gs1, verify_barcode
from src.barcode.grading import format_grade
from src.config import configure_logging, get_settings
from src.models import GS1ValidationResult, QualityGrade, VerificationOptions, VerificationResult


def print_result(result: VerificationResult, output_format: str = "table") -> None:
    """Display a verification result."""
    if output_format == "json":
        print(json.dumps(result.to_dict(), indent=2))
        return

    barcode_type = result.barcode_type.value if result.barcode_type else "N/A"
    standard = result.standard.value if result.standard else "N/A"

    print(f"\nVerification: {barcode_type} ({standard})")
    print("-" * 80)
    print(f"{'Parameter':<26} {'Value':>10} {'Grade':<6} {'Threshold':>10} {'Unit':<8}")
    print("-" * 80)

    for p in result.parameters:
        print(
            f"{p.name:<26} {p.value:>10.3f} {p.grade.value:<6} "
            f"{p.threshold:>10.3f} {p.unit or '':<8}"
        )

    print("-" * 80)
    status = "PASS" if result.passed else "FAIL"
    print(f"Overall: {format_grade(result.overall_grade, result.numeric_grade)}  [{status}]")
    print(f"Minimum grade: {result.minimum_grade.value}")
    if result.decoded_data:
        print(f"Data: {result.decoded_data}")

    for warning in result.warnings:
        print(f"  ! {warning}")
    for recommendation in result.recommendations:
        print(f"  > {recommendation}")


def print_gs1(result: GS1ValidationResult, output_format: str = "table") -> None:
    """Display a GS1 validation result."""
    if output_format == "json":
        print(json.dumps(result.to_dict(), indent=2))
        return

    print("\nGS1 element string")
    print("-" * 80)
    print(f"{'AI':<6} {'Name':<20} {'Value':<30} {'Valid':<6}")
    print("-" * 80)

    for element in result.application_identifiers:
        valid = "✓" if element.is_valid else "✗"
        print(f"{element.ai:<6} {element.name:<20} {element.value:<30} {valid:<6}")

    print("-" * 80)
    print(f"Valid: {'yes' if result.is_valid else 'no'}  FNC1 prefix: {'yes' if result.has_gs1_prefix else 'no'}")
    for error in result.errors:
        print(f"  ✗ {error}")
    for warning in result.warnings:
        print(f"  ! {warning}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Grade barcode print quality (ISO/IEC 15416 / 15415)"
    )
    parser.add_argument(
        "image",
        nargs="?",
        type=Path,
        help="Image file containing the symbol and its quiet zone"
    )
    parser.add_argument(
        "--type", "-t",
        dest="barcode_type",
        help="Barcode type (EAN13, CODE128, DATAMATRIX, QR, ...)"
    )
    parser.add_argument(
        "--data", "-d",
        help="Decoded payload from an external decoder"
    )
    parser.add_argument(
        "--min-grade",
        choices=["A", "B", "C", "D", "F"],
        help="Minimum passing grade (default: from settings)"
    )
    parser.add_argument(
        "--x-dimension",
        type=float,
        help="Nominal X dimension in mm, selects the aperture"
    )
    parser.add_argument(
        "--size",
        help="Data Matrix size (e.g. 16x16) or QR version (e.g. 4)"
    )
    parser.add_argument(
        "--scan-lines",
        type=int,
        help="Scan lines for linear symbols (default: from settings)"
    )
    parser.add_argument(
        "--gs1",
        metavar="PAYLOAD",
        help="Validate a GS1 element string instead of grading an image"
    )
    parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)"
    )

    args = parser.parse_args()
    configure_logging()

    if args.gs1 is not None:
        gs1 = parse_gs1(args.gs1)
        print_gs1(gs1, args.format)
        sys.exit(0 if gs1.is_valid else 1)

    if args.image is None or not args.barcode_type:
        parser.error("an image and --type are required unless --gs1 is given")

    overrides = {}
    if args.min_grade:
        overrides["minimum_grade"] = QualityGrade(args.min_grade)
    if args.scan_lines:
        overrides["scan_lines"] = args.scan_lines
    options = VerificationOptions.from_settings(get_settings()).model_copy(update=overrides)

    result = verify_barcode(
        args.image.read_bytes(),
        args.barcode_type,
        options=options,
        x_dimension_mm=args.x_dimension,
        symbol_size=args.size,
        decoded_data=args.data,
    )
    print_result(result, args.format)
    sys.exit(0 if result.passed else 1)


if __name__ == "__main__":
    main()
