#!/usr/bin/env python3
"""
Format /*tsx*/-marked template literals in a source file.

Each template literal preceded by a comment containing the marker token is
formatted with Prettier and spliced back; the result goes to a new file.

Usage:
    tsxlint exhibitA.ts                      # writes exhibitA-linted.ts
    tsxlint exhibitA.ts --output out.ts
    tsxlint exhibitA.ts --inplace
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from tsxlint.errors import LintError
from tsxlint.formatter import PrettierFormatter
from tsxlint.pipeline import lint_file
from tsxlint.utils.config import Settings, get_settings
from tsxlint.utils.logging import configure_logging, get_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tsxlint",
        description="Format marked template literals with an external formatter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Write exhibitA-linted.ts next to the input
    tsxlint exhibitA.ts

    # Write to a different file
    tsxlint exhibitA.ts --output formatted.ts

    # Replace the input file (atomically)
    tsxlint exhibitA.ts --inplace

    # Use a different marker and a per-region timeout
    tsxlint app.ts --marker html --timeout 10
        """,
    )
    parser.add_argument("input", type=Path, help="Source file with marked template literals")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file (default: <name>-linted<ext> beside the input)",
    )
    parser.add_argument(
        "--inplace",
        "-i",
        action="store_true",
        help="Replace the input file",
    )
    parser.add_argument("--marker", help="Comment token marking literals (default: tsx)")
    parser.add_argument(
        "--language",
        choices=["typescript", "tsx", "javascript"],
        help="Grammar for the input file (default: from file extension)",
    )
    parser.add_argument("--parser", help="Formatter parser/dialect (default: typescript)")
    parser.add_argument(
        "--timeout",
        type=float,
        help="Per-region formatter timeout in seconds (0 = no limit)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: from settings)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return a copy of settings with CLI flags applied."""
    locator = {}
    formatter = {}
    if args.marker:
        locator["marker"] = args.marker
    if args.parser:
        formatter["parser"] = args.parser
    if args.timeout is not None:
        formatter["timeout_seconds"] = args.timeout

    return settings.model_copy(
        update={
            "locator": settings.locator.model_copy(update=locator),
            "formatter": settings.formatter.model_copy(update=formatter),
        }
    )


def main(args: list[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    parsed = parser.parse_args(args)

    if parsed.inplace and parsed.output:
        print("Error: Cannot use both --inplace and --output", file=sys.stderr)
        return 1

    settings = apply_overrides(get_settings(), parsed)
    configure_logging(
        log_level=parsed.log_level,
        json_format=True if parsed.json_logs else None,
    )
    logger = get_logger(__name__)

    output_path = parsed.input if parsed.inplace else parsed.output

    try:
        report = asyncio.run(
            lint_file(
                parsed.input,
                output_path,
                formatter=PrettierFormatter.from_config(settings.formatter),
                settings=settings,
                language=parsed.language,
            )
        )
    except LintError as e:
        logger.error("Lint failed", **e.to_dict())
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if report.regions == 0:
        print(f"No marked template literals in {report.input_path}", file=sys.stderr)
    else:
        print(
            f"Formatted {report.regions} region(s): {report.input_path} -> {report.output_path}",
            file=sys.stderr,
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
