"""
Formatter abstraction layer for tsxlint.

A formatter turns the raw text of one region into formatted text. The
default backend runs Prettier as an external process; any plain or async
callable can be adapted for library use and tests.
"""

from __future__ import annotations

import asyncio
import inspect
import random
import shutil
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol, runtime_checkable

from tsxlint.errors import FormatterError
from tsxlint.utils.config import FormatterConfig
from tsxlint.utils.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class Formatter(Protocol):
    """Protocol for region formatters.

    Implementations must be safe to call concurrently: the coordinator
    issues every region's call before awaiting any of them.
    """

    @property
    def name(self) -> str: ...

    async def format(self, text: str) -> str: ...


class BaseFormatter:
    """Shared behaviour: optional random start delay before each call."""

    def __init__(self, name: str, *, jitter_max_seconds: float = 0.0):
        self._name = name
        self._jitter_max_seconds = jitter_max_seconds

    @property
    def name(self) -> str:
        return self._name

    async def format(self, text: str) -> str:
        if self._jitter_max_seconds > 0:
            await asyncio.sleep(random.uniform(0, self._jitter_max_seconds))
        return await self._format(text)

    async def _format(self, text: str) -> str:
        raise NotImplementedError


class CallableFormatter(BaseFormatter):
    """Adapts a sync or async ``str -> str`` callable.

    Example:
        >>> formatter = CallableFormatter(str.upper)
    """

    def __init__(
        self,
        func: Callable[[str], str] | Callable[[str], Awaitable[str]],
        *,
        name: str | None = None,
        jitter_max_seconds: float = 0.0,
    ):
        super().__init__(
            name or getattr(func, "__name__", "callable"),
            jitter_max_seconds=jitter_max_seconds,
        )
        self._func = func

    async def _format(self, text: str) -> str:
        result = self._func(text)
        if inspect.isawaitable(result):
            result = await result
        return result


class PrettierFormatter(BaseFormatter):
    """Formats text by piping it through an external Prettier process.

    The command receives the text on stdin and must print the formatted
    text on stdout, e.g. ``npx --no-install prettier --parser typescript``.
    """

    def __init__(
        self,
        command: Sequence[str] = ("npx", "--no-install", "prettier"),
        *,
        parser: str = "typescript",
        jitter_max_seconds: float = 0.0,
    ):
        super().__init__("prettier", jitter_max_seconds=jitter_max_seconds)
        if not command:
            raise ValueError("Formatter command must not be empty")
        self.command = list(command)
        self.parser = parser

    @classmethod
    def from_config(cls, config: FormatterConfig) -> PrettierFormatter:
        return cls(
            config.command,
            parser=config.parser,
            jitter_max_seconds=config.jitter_max_seconds,
        )

    def build_command(self) -> list[str]:
        return [*self.command, "--parser", self.parser]

    async def _format(self, text: str) -> str:
        cmd = self.build_command()
        executable = shutil.which(cmd[0])
        if executable is None:
            raise FormatterError(f"Formatter executable not found: {cmd[0]}")

        try:
            payload = text.encode("utf-8")
            process = await asyncio.create_subprocess_exec(
                executable,
                *cmd[1:],
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except UnicodeEncodeError as e:
            raise FormatterError(f"Region text is not valid UTF-8: {e}") from e
        except OSError as e:
            raise FormatterError(f"Cannot start {cmd[0]}: {e}") from e

        try:
            stdout, stderr = await process.communicate(payload)
        except asyncio.CancelledError:
            # Timeout or a sibling failure; do not leave the process behind
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        if process.returncode != 0:
            error_msg = stderr.decode("utf-8", errors="replace").strip() or "Unknown error"
            logger.debug(
                "Formatter process failed",
                command=cmd,
                returncode=process.returncode,
            )
            raise FormatterError(f"{cmd[0]} exited with {process.returncode}: {error_msg}")

        try:
            return stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FormatterError(f"{cmd[0]} produced invalid UTF-8 output: {e}") from e
