"""CI gate for authored scenario content.

Validates every YAML document under a scenarios directory and exits non-zero
if any document fails, so invalid content can never be published.

Usage:
    # Human-readable report
    careersim-validate content/scenarios

    # Machine-readable report
    careersim-validate content/scenarios --json

Exit status:
    0  every document passed
    1  at least one document failed validation
    2  the scenarios directory does not exist
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from careersim.content.validator import ContentValidator, ValidationReport

DEFAULT_SCENARIOS_DIR = "content/scenarios"

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_NO_DIRECTORY = 2


def print_validation_report(report: ValidationReport) -> None:
    """Print one line per document, indented errors, then a summary."""
    for doc in report.documents:
        mark = "✓" if doc.passed else "✗"
        print(f"{mark} {doc.file} [doc {doc.doc_index}] ({doc.kind})")
        for error in doc.errors:
            print(f"    {error}")

    print(f"\n{report.passed_count}/{report.total} documents passed validation")
    if not report.passed:
        print("VALIDATION FAILED - fix the errors above before publishing content")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="careersim-validate",
        description="Validate CareerSim scenario and overlay content",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "scenarios_dir",
        nargs="?",
        default=os.environ.get("CAREERSIM_SCENARIOS_PATH", DEFAULT_SCENARIOS_DIR),
        help=f"Directory of YAML content (default: {DEFAULT_SCENARIOS_DIR})",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    scenarios_dir = Path(args.scenarios_dir)
    if not scenarios_dir.is_dir():
        print(f"Error: Scenarios directory not found: {scenarios_dir}", file=sys.stderr)
        return EXIT_NO_DIRECTORY

    report = ContentValidator().validate_directory(scenarios_dir)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print_validation_report(report)

    return EXIT_OK if report.passed else EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
