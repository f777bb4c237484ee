"""
Error definitions for tsxlint.

Error codes follow the pattern:
- *_NOT_FOUND: Input is missing or unreadable (abort before any transform)
- *_ERROR: Parsing, formatting, splicing or writing failed
- *_TIMEOUT: A region transform did not finish in time
"""

from enum import Enum
from typing import Any


class LintErrorCode(str, Enum):
    """Error codes reported by the lint pipeline and the CLI."""

    INPUT_NOT_FOUND = "INPUT_NOT_FOUND"
    """Source file is missing or unreadable."""

    PARSE_ERROR = "PARSE_ERROR"
    """Source is not valid syntax for the selected grammar."""

    TRANSFORM_ERROR = "TRANSFORM_ERROR"
    """The formatter rejected or failed on one region."""

    TRANSFORM_TIMEOUT = "TRANSFORM_TIMEOUT"
    """A region transform exceeded its timeout."""

    SPLICE_ERROR = "SPLICE_ERROR"
    """Regions and results do not line up."""

    WRITE_ERROR = "WRITE_ERROR"
    """Output file could not be written."""


class LintError(Exception):
    """
    Base exception for tsxlint errors.

    Carries a code and structured details so the CLI and logs can report
    failures uniformly.
    """

    def __init__(
        self,
        code: LintErrorCode,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize error.

        Args:
            code: Error code from LintErrorCode enum.
            message: Human-readable error message.
            details: Optional additional error details.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a serializable dictionary."""
        result: dict[str, Any] = {
            "ok": False,
            "error_code": self.code.value,
            "error": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class InputNotFoundError(LintError):
    """Raised when the source file is missing or unreadable."""

    def __init__(self, path: str, *, reason: str | None = None):
        details: dict[str, Any] = {"path": path}
        if reason:
            details["reason"] = reason
        super().__init__(
            LintErrorCode.INPUT_NOT_FOUND,
            f"File not found: {path}",
            details=details,
        )


class ParseError(LintError):
    """Raised when the source cannot be parsed."""

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
        language: str | None = None,
    ):
        details: dict[str, Any] = {}
        if line is not None:
            details["line"] = line
        if column is not None:
            details["column"] = column
        if language:
            details["language"] = language
        super().__init__(
            LintErrorCode.PARSE_ERROR,
            message,
            details=details if details else None,
        )


class FormatterError(Exception):
    """Raised by a formatter that could not format one piece of text.

    Formatters know nothing about regions; the coordinator wraps this
    into a TransformError naming the region.
    """


class TransformError(LintError):
    """Raised when transforming a single region fails."""

    code_for_kind = LintErrorCode.TRANSFORM_ERROR

    def __init__(self, index: int, start: int, end: int, reason: str):
        self.index = index
        self.start = start
        self.end = end
        self.reason = reason
        super().__init__(
            self.code_for_kind,
            f"Region {index} [{start}:{end}] failed: {reason}",
            details={"index": index, "start": start, "end": end, "reason": reason},
        )


class TransformTimeoutError(TransformError):
    """Raised when a region transform does not finish in time."""

    code_for_kind = LintErrorCode.TRANSFORM_TIMEOUT


class SpliceError(LintError):
    """Raised when results cannot be spliced into the source."""

    def __init__(self, message: str, **details: Any):
        super().__init__(
            LintErrorCode.SPLICE_ERROR,
            message,
            details=details if details else None,
        )


class WriteError(LintError):
    """Raised when the output file cannot be written."""

    def __init__(self, path: str, *, reason: str | None = None):
        details: dict[str, Any] = {"path": path}
        if reason:
            details["reason"] = reason
        super().__init__(
            LintErrorCode.WRITE_ERROR,
            f"Cannot write output: {path}",
            details=details,
        )
