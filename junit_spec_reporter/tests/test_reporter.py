import io
from pathlib import Path
from typing import Callable, Optional

import pytest
from conftest import FIXED_NOW, MemorySink

from junit_spec_reporter.core.config import ReporterConfig
from junit_spec_reporter.core.errors import OutputDirectoryError
from junit_spec_reporter.reporting.console import SpecPrinter
from junit_spec_reporter.reporting.events import EventKind, LifecycleEvent
from junit_spec_reporter.reporting.models import ErrorDetail, Speed, SuiteNode, TestRecord
from junit_spec_reporter.reporting.reporter import JUnitSpecReporter
from junit_spec_reporter.reporting.sink import ConsoleSink, FileSink


class DeferredSink(MemorySink):
    """Sink whose close completes only when the test says so."""

    def __init__(self):
        super().__init__()
        self.pending: Optional[Callable[[], None]] = None

    def close(self, callback: Optional[Callable[[], None]] = None) -> None:
        self.pending = callback

    def finish(self) -> None:
        self.closed = True
        if self.pending is not None:
            self.pending()


def _run_math(reporter: JUnitSpecReporter) -> None:
    reporter.on_run_begin()
    reporter.on_suite_begin(reporter.root_suite)
    math = SuiteNode(title="Math", parent=reporter.root_suite)
    reporter.on_suite_begin(math)
    reporter.on_test_pass(TestRecord(title="adds", parent=math, duration=3))
    reporter.on_test_fail(
        TestRecord(title="divides", parent=math, duration=4),
        ErrorDetail(message="division by zero", kind="ZeroDivisionError"),
    )
    reporter.on_test_pending(TestRecord(title="later", parent=math))
    reporter.on_suite_end(math)
    reporter.on_suite_end(reporter.root_suite)
    reporter.on_run_end()


def test_done_waits_for_sink_close():
    sink = DeferredSink()
    reporter = JUnitSpecReporter(ReporterConfig(spec_output=False), sink=sink, clock=lambda: FIXED_NOW)
    _run_math(reporter)

    completed = []
    reporter.done(reporter.stats.failures, completed.append)
    assert completed == []

    sink.finish()
    assert completed == [1]


def test_done_after_file_is_fully_written(tmp_path: Path):
    target = tmp_path / "out" / "junit.xml"
    reporter = JUnitSpecReporter(ReporterConfig(output_path=target, spec_output=False))
    assert isinstance(reporter.sink, FileSink)
    _run_math(reporter)

    observed = []
    reporter.done(reporter.stats.failures, lambda failures: observed.append(target.read_text()))

    assert len(observed) == 1
    assert observed[0].rstrip("\n").endswith("</testsuite>")
    assert observed[0].startswith('<testsuite name="Test Run"')


def test_console_destination_completes_synchronously(capsys):
    reporter = JUnitSpecReporter(ReporterConfig(spec_output=False))
    assert isinstance(reporter.sink, ConsoleSink)
    _run_math(reporter)

    completed = []
    reporter.done(0, completed.append)
    assert completed == [0]
    assert capsys.readouterr().out.rstrip("\n").endswith("</testsuite>")


def test_bad_output_directory_fails_at_construction(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    with pytest.raises(OutputDirectoryError):
        JUnitSpecReporter(ReporterConfig(output_path=blocker / "junit.xml"))


def test_counters_track_states(reporter):
    _run_math(reporter)
    stats = reporter.stats
    assert (stats.tests, stats.passes, stats.failures, stats.pending) == (3, 1, 1, 1)
    assert stats.suites == 1
    assert [t.title for t in reporter.tests] == ["adds", "divides", "later"]


def test_run_end_is_handled_once(reporter, memory_sink):
    _run_math(reporter)
    written = list(memory_sink.lines)
    reporter.on_run_end()
    assert memory_sink.lines == written


def test_flat_lists_are_append_only(reporter):
    _run_math(reporter)
    assert len(reporter.suites) == 2
    assert reporter.suites[0] is reporter.root_suite


def test_handle_dispatches_by_kind(reporter, memory_sink):
    suite = SuiteNode(title="S", parent=reporter.root_suite)
    reporter.handle(EventKind.RUN_BEGIN)
    reporter.handle(EventKind.SUITE_BEGIN, suite)
    reporter.handle(EventKind.TEST_FAIL, TestRecord(title="t", parent=suite), err=ErrorDetail(message="m"))
    reporter.handle(EventKind.SUITE_END, suite)
    reporter.handle(EventKind.RUN_END)
    assert reporter.stats.failures == 1
    assert memory_sink.lines[-1] == "</testsuite>"


def test_pass_speed_is_classified(reporter):
    slow = TestRecord(title="slow", parent=reporter.root_suite, duration=500)
    fast = TestRecord(title="fast", parent=reporter.root_suite, duration=1)
    reporter.on_test_pass(slow)
    reporter.on_test_pass(fast)
    assert slow.speed == Speed.SLOW
    assert fast.speed == Speed.FAST


def test_spec_output_is_printed(memory_sink):
    stream = io.StringIO()
    reporter = JUnitSpecReporter(
        ReporterConfig(),
        sink=memory_sink,
        printer=SpecPrinter(file=stream),
        clock=lambda: FIXED_NOW,
    )
    _run_math(reporter)

    out = stream.getvalue()
    assert "Math" in out
    assert "✓ adds" in out
    assert "1) divides" in out
    assert "- later" in out
    assert "1 passing" in out
    assert "1 pending" in out
    assert "1 failing" in out
    assert "Math divides:" in out
    assert "ZeroDivisionError: division by zero" in out
    assert "<testsuite" not in out


def test_run_without_run_end_writes_nothing(memory_sink):
    reporter = JUnitSpecReporter(ReporterConfig(spec_output=False), sink=memory_sink)
    events = [
        LifecycleEvent(kind=EventKind.RUN_BEGIN),
        LifecycleEvent(kind=EventKind.TEST_PASS, title="t"),
    ]
    assert reporter.run(events) is None
    assert memory_sink.lines == []
    assert memory_sink.closed


class BrokenSink(MemorySink):
    def write(self, line: str) -> None:
        raise OSError("disk full")


def test_run_releases_sink_when_writing_fails():
    sink = BrokenSink()
    reporter = JUnitSpecReporter(ReporterConfig(spec_output=False), sink=sink)
    events = [LifecycleEvent(kind=EventKind.RUN_BEGIN), LifecycleEvent(kind=EventKind.RUN_END)]

    with pytest.raises(OSError):
        reporter.run(events)

    assert sink.closed
