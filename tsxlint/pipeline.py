"""
Lint pipeline: read, parse, locate, transform, splice, write.

Usage:
    report = await lint_file(Path("exhibitA.ts"))
    # -> exhibitA-linted.ts next to the input
"""

from __future__ import annotations

import os
import stat
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tsxlint.errors import InputNotFoundError, WriteError
from tsxlint.formatter import Formatter, PrettierFormatter
from tsxlint.locator import Region, language_for_path, locate, parse_source
from tsxlint.splicer import splice, transform_regions
from tsxlint.utils.config import Settings, get_settings
from tsxlint.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


@dataclass
class Document:
    """Original text, its marked regions and, once transformed, the output."""

    text: str
    regions: list[Region] = field(default_factory=list)
    output: str | None = None

    @property
    def changed(self) -> bool:
        return self.output is not None and self.output != self.text


@dataclass
class LintReport:
    """Outcome of linting one file."""

    input_path: Path
    output_path: Path | None
    regions: int
    changed: bool
    elapsed_ms: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": True,
            "input_path": str(self.input_path),
            "output_path": str(self.output_path) if self.output_path else None,
            "regions": self.regions,
            "changed": self.changed,
            "elapsed_ms": round(self.elapsed_ms, 1),
        }


def default_output_path(input_path: Path, suffix: str = "-linted") -> Path:
    """exhibitA.ts -> exhibitA-linted.ts"""
    return input_path.with_name(f"{input_path.stem}{suffix}{input_path.suffix}")


def read_source(path: Path) -> str:
    """Read a source file, keeping its line endings untouched."""
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except FileNotFoundError as e:
        raise InputNotFoundError(str(path)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise InputNotFoundError(str(path), reason=str(e)) from e


def _new_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_atomic(path: Path, text: str) -> None:
    """Write text to path via a temporary file in the same directory.

    The destination either keeps its previous state or receives the
    complete text; a partially written file is never left behind. An
    existing destination keeps its permission bits, a new one gets the
    usual umask-derived mode.
    """
    tmp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            newline="",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(text)
        try:
            mode = stat.S_IMODE(os.stat(path).st_mode)
        except FileNotFoundError:
            mode = _new_file_mode()
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
        tmp_name = None
    except (OSError, UnicodeEncodeError) as e:
        raise WriteError(str(path), reason=str(e)) from e
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)


async def lint_source(
    text: str,
    formatter: Formatter,
    *,
    language: str | None = None,
    settings: Settings | None = None,
) -> Document:
    """Format every marked template literal in a source string.

    Args:
        text: Source code.
        formatter: Formatter applied to each marked region.
        language: tree-sitter grammar; defaults to settings.locator.default_language.
        settings: Settings to use (defaults to get_settings()).

    Returns:
        Document with regions and spliced output.

    Raises:
        ParseError: Source is not valid syntax.
        TransformError: A region failed to format.
    """
    settings = settings or get_settings()
    language = language or settings.locator.default_language

    tree = parse_source(text, language)
    document = Document(
        text=text,
        regions=locate(
            text,
            tree,
            marker=settings.locator.marker,
            node_types=settings.locator.node_types,
        ),
    )

    if not document.regions:
        logger.info("No marked template literals detected", marker=settings.locator.marker)
        document.output = text
        return document

    results = await transform_regions(
        text,
        document.regions,
        formatter,
        timeout=settings.formatter.timeout_seconds,
        max_concurrency=settings.formatter.max_concurrency,
    )
    document.output = splice(text, document.regions, results)
    return document


async def lint_file(
    input_path: Path,
    output_path: Path | None = None,
    *,
    formatter: Formatter | None = None,
    settings: Settings | None = None,
    language: str | None = None,
) -> LintReport:
    """Lint one file and write the result exactly once.

    Args:
        input_path: Source file.
        output_path: Destination (default: <stem>-linted<suffix> beside the input).
        formatter: Formatter to use (default: Prettier from settings).
        settings: Settings to use (defaults to get_settings()).
        language: Grammar override; otherwise chosen from the input suffix.

    Returns:
        LintReport describing the run.

    Raises:
        LintError: Any failure; nothing is written at output_path in that case.
    """
    settings = settings or get_settings()
    start_time = time.time()

    if output_path is None:
        output_path = default_output_path(input_path, settings.output.suffix)
    if formatter is None:
        formatter = PrettierFormatter.from_config(settings.formatter)
    if language is None:
        language = language_for_path(input_path, settings.locator.default_language)

    with LogContext(input=str(input_path)):
        text = read_source(input_path)
        document = await lint_source(text, formatter, language=language, settings=settings)

        write_atomic(output_path, document.output if document.output is not None else text)

        report = LintReport(
            input_path=input_path,
            output_path=output_path,
            regions=len(document.regions),
            changed=document.changed,
            elapsed_ms=(time.time() - start_time) * 1000,
        )
        logger.info("Output written", **report.to_dict())

    return report
