"""
tsxlint - format marked template literals in TypeScript/JavaScript sources.
"""

from tsxlint.errors import LintError, LintErrorCode
from tsxlint.formatter import CallableFormatter, Formatter, PrettierFormatter
from tsxlint.locator import Region, locate, parse_source
from tsxlint.pipeline import Document, LintReport, lint_file, lint_source
from tsxlint.splicer import TransformResult, splice, transform_regions

__all__ = [
    # Errors
    "LintError",
    "LintErrorCode",
    # Locator
    "Region",
    "locate",
    "parse_source",
    # Formatters
    "Formatter",
    "CallableFormatter",
    "PrettierFormatter",
    # Splicing
    "TransformResult",
    "transform_regions",
    "splice",
    # Pipeline
    "Document",
    "LintReport",
    "lint_source",
    "lint_file",
]
