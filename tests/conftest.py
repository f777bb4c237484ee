"""
Pytest fixtures and configuration for tsxlint tests.

Markers:
- @pytest.mark.unit: Single class/function, no external processes (DEFAULT)
- @pytest.mark.integration: Several components together, real subprocesses
  built from the running Python interpreter (never Node/Prettier)

Tests without a classification marker are auto-classified as unit.

Mock Strategy:
- Formatter: CallableFormatter / scripted formatters with controlled delays
- File I/O: tmp_path fixture
- Prettier: replaced by a small Python script passed as the formatter command
"""

import asyncio
import os
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

# Set test environment before importing anything else
os.environ["TSXLINT_CONFIG_DIR"] = str(Path(__file__).parent.parent / "config")
os.environ["TSXLINT_GENERAL__LOG_LEVEL"] = "DEBUG"

from tsxlint.formatter import BaseFormatter  # noqa: E402
from tsxlint.utils.config import FormatterConfig, Settings, get_settings  # noqa: E402


def pytest_configure(config):
    """Register custom markers for test classification."""
    config.addinivalue_line(
        "markers", "unit: Unit tests with no external processes (fast, <1s/test)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests using real subprocesses (<5s/test)"
    )


def pytest_collection_modifyitems(config, items):
    """Tests without explicit markers are assumed to be unit tests."""
    for item in items:
        has_classification = any(
            marker.name in ("unit", "integration") for marker in item.iter_markers()
        )
        if not has_classification:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Clear cached settings so env/monkeypatch changes take effect per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class ScriptedFormatter(BaseFormatter):
    """Formatter with per-input delays, failures and a call log.

    Attributes:
        calls: Raw texts in the order calls started.
        completed: Raw texts in the order calls finished.
        max_in_flight: Highest number of simultaneous calls observed.
    """

    def __init__(
        self,
        transform: Callable[[str], str] = str.upper,
        *,
        delays: dict[str, float] | None = None,
        delay_sequence: list[float] | None = None,
        fail_on: set[str] | None = None,
        hang_on: set[str] | None = None,
    ):
        super().__init__("scripted")
        self._transform = transform
        self._delays = delays or {}
        self._delay_sequence = list(delay_sequence or [])
        self._fail_on = fail_on or set()
        self._hang_on = hang_on or set()
        self.calls: list[str] = []
        self.completed: list[str] = []
        self.cancelled = 0
        self._in_flight = 0
        self.max_in_flight = 0

    async def _format(self, text: str) -> str:
        from tsxlint.errors import FormatterError

        call_number = len(self.calls)
        self.calls.append(text)
        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            if text in self._hang_on:
                await asyncio.Event().wait()
            delay = self._delays.get(text)
            if delay is None and call_number < len(self._delay_sequence):
                delay = self._delay_sequence[call_number]
            await asyncio.sleep(delay or 0)
            if text in self._fail_on:
                raise FormatterError(f"cannot format {text!r}")
            self.completed.append(text)
            return self._transform(text)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        finally:
            self._in_flight -= 1


@pytest.fixture
def scripted_formatter() -> type[ScriptedFormatter]:
    """Factory for ScriptedFormatter instances."""
    return ScriptedFormatter


@pytest.fixture
def settings() -> Settings:
    """Default settings with a short timeout and no jitter."""
    return Settings(formatter=FormatterConfig(timeout_seconds=5.0, jitter_max_seconds=0.0))


@pytest.fixture
def fake_prettier(tmp_path: Path) -> list[str]:
    """Command that behaves like `prettier --parser X` reading stdin.

    Uppercases its input; exits 2 with a message when the input contains "!!".
    """
    script = tmp_path / "fake_prettier.py"
    script.write_text(
        "import sys\n"
        "args = sys.argv[1:]\n"
        "assert args[:1] == ['--parser'], args\n"
        "data = sys.stdin.buffer.read().decode('utf-8')\n"
        "if '!!' in data:\n"
        "    sys.stderr.write('SyntaxError: Unexpected token (1:1)')\n"
        "    sys.exit(2)\n"
        "sys.stdout.buffer.write(data.upper().encode('utf-8'))\n",
        encoding="utf-8",
    )
    return [sys.executable, str(script)]
