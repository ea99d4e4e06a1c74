"""
JUnit reporter with simultaneous spec-style console output.

Lifecycle events are collected flat while the run progresses; at run end
the suite tree is rebuilt from the completed tests and written as one XML
document. Completion is signalled through `done()` only after the report
destination has been released.
"""

import sys
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional

from junit_spec_reporter.core.config import ReporterConfig
from junit_spec_reporter.core.logging import get_logger
from junit_spec_reporter.reporting.collector import EventCollector
from junit_spec_reporter.reporting.console import SpecPrinter
from junit_spec_reporter.reporting.events import EventKind, LifecycleEvent, replay
from junit_spec_reporter.reporting.models import (
    ErrorDetail,
    RunStats,
    SuiteNode,
    TestRecord,
    TestState,
    classify_speed,
)
from junit_spec_reporter.reporting.serializer import XmlSerializer
from junit_spec_reporter.reporting.sink import ConsoleSink, OutputSink, create_sink


class JUnitSpecReporter:
    """Event intake, report writing and completion for one run."""

    def __init__(
        self,
        config: Optional[ReporterConfig] = None,
        root_suite: Optional[SuiteNode] = None,
        sink: Optional[OutputSink] = None,
        printer: Optional[SpecPrinter] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the reporter.

        Args:
            config: Reporter configuration (defaults are loaded when omitted)
            root_suite: The run-level suite; a fresh one is created when omitted
            sink: Report destination; created from `config.output_path` when omitted
            printer: Spec printer; created from config when omitted
            clock: Time source for run duration and timestamps

        Raises:
            UnsupportedDestinationError, OutputDirectoryError: the destination is
                unusable; raised here, before any event is accepted
        """
        self.config = config if config is not None else ReporterConfig()
        self.logger = get_logger(__name__)
        self.root_suite = root_suite if root_suite is not None else SuiteNode.create_root()

        # Acquire the destination up front so fatal errors surface immediately
        self.sink = sink if sink is not None else create_sink(self.config.output_path)

        if printer is None and self.config.spec_output:
            # Keep standard output clean when the XML itself goes there
            stream = sys.stderr if isinstance(self.sink, ConsoleSink) else None
            printer = SpecPrinter(use_colors=self.config.color, file=stream)
        self.printer = printer

        self.collector = EventCollector(clock=clock)
        self.serializer = XmlSerializer(
            self.sink,
            suite_name=self.config.suite_name,
            hide_diff=self.config.hide_diff,
            clock=clock,
        )
        self.finished = False

    @property
    def stats(self) -> RunStats:
        return self.collector.stats

    @property
    def tests(self) -> List[TestRecord]:
        return self.collector.tests

    @property
    def suites(self) -> List[SuiteNode]:
        return self.collector.suites

    def on_run_begin(self) -> None:
        self.collector.on_run_begin()
        if self.printer:
            self.printer.run_begin()

    def on_suite_begin(self, suite: SuiteNode) -> None:
        self.collector.on_suite_begin(suite)
        if self.printer:
            self.printer.suite_begin(suite)

    def on_suite_end(self, suite: Optional[SuiteNode] = None) -> None:
        self.collector.on_suite_end(suite)
        if self.printer:
            self.printer.suite_end(suite)

    def on_test_pending(self, test: TestRecord) -> None:
        test.state = TestState.PENDING
        self.collector.on_test_observed(test)
        if self.printer:
            self.printer.test_pending(test)

    def on_test_pass(self, test: TestRecord) -> None:
        test.state = TestState.PASSED
        if test.speed is None:
            test.speed = classify_speed(test.duration or 0)
        self.collector.on_test_observed(test)
        if self.printer:
            self.printer.test_pass(test)

    def on_test_fail(self, test: TestRecord, err: Optional[ErrorDetail] = None) -> None:
        test.state = TestState.FAILED
        if err is not None:
            test.err = err
        self.collector.on_test_observed(test)
        if self.printer:
            self.printer.test_fail(test)

    def on_run_end(self) -> None:
        """Write the report, then the console epilogue. Later calls are ignored."""
        if self.finished:
            self.logger.debug("Run end already handled; ignoring repeat")
            return
        self.finished = True

        stats = self.collector.on_run_end()
        self.logger.info(f"Run finished: {stats.to_dict()}")
        self.serializer.output_xml(
            self.root_suite, self.collector.suites, self.collector.tests, stats
        )

        if self.printer:
            failed = [t for t in self.collector.tests if t.failed]
            self.printer.epilogue(stats, failed)

    def handle(self, kind: EventKind, payload: Any = None, err: Optional[ErrorDetail] = None) -> None:
        """Dispatch one lifecycle event to its intake operation."""
        if kind == EventKind.RUN_BEGIN:
            self.on_run_begin()
        elif kind == EventKind.RUN_END:
            self.on_run_end()
        elif kind == EventKind.SUITE_BEGIN:
            self.on_suite_begin(payload)
        elif kind == EventKind.SUITE_END:
            self.on_suite_end(payload)
        elif kind == EventKind.TEST_PENDING:
            self.on_test_pending(payload)
        elif kind == EventKind.TEST_PASS:
            self.on_test_pass(payload)
        elif kind == EventKind.TEST_FAIL:
            self.on_test_fail(payload, err)
        else:
            raise ValueError(f"Unknown event kind: {kind}")

    def done(self, failures: int, fn: Callable[[int], Any]) -> None:
        """Release the destination; `fn(failures)` runs from the close callback."""
        self.sink.close(lambda: fn(failures))

    def run(self, events: Iterable[LifecycleEvent]) -> Optional[int]:
        """
        Replay recorded events and finish the run.

        Returns the failure count once the destination is released, or None
        when the events never reached run end (no report is written).
        """
        outcome = {}
        completed = False
        try:
            completed = replay(events, self)
        finally:
            # Incomplete or failed replays still release the destination
            if not completed and not self.sink.closed:
                self.sink.close()
        if completed:
            self.done(self.stats.failures, lambda failures: outcome.update(failures=failures))
        return outcome.get("failures")
