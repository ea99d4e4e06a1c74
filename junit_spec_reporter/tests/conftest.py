"""
Pytest configuration and fixtures for the JUnit spec reporter.
"""

from datetime import datetime, timezone
from typing import Callable, List, Optional

import pytest

from junit_spec_reporter.core.config import CONFIG_ENV_VAR, OUTPUT_ENV_VAR, ReporterConfig
from junit_spec_reporter.reporting.reporter import JUnitSpecReporter
from junit_spec_reporter.reporting.sink import OutputSink

FIXED_NOW = datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)
FIXED_TIMESTAMP = "Sat, 17 Oct 2026 12:00:00 GMT"


class MemorySink(OutputSink):
    """Sink that keeps written lines in memory."""

    def __init__(self):
        self.lines: List[str] = []

    def write(self, line: str) -> None:
        self.lines.append(line)

    def close(self, callback: Optional[Callable[[], None]] = None) -> None:
        self.closed = True
        if callback is not None:
            callback()

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep host configuration out of the tests."""
    monkeypatch.delenv(OUTPUT_ENV_VAR, raising=False)
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def reporter(memory_sink) -> JUnitSpecReporter:
    """Reporter writing into memory, without console output and with a frozen clock."""
    config = ReporterConfig(spec_output=False)
    return JUnitSpecReporter(config, sink=memory_sink, clock=lambda: FIXED_NOW)
