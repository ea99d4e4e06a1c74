"""
Flat, arrival-ordered accumulation of lifecycle events.
"""

from datetime import datetime, timezone
from typing import Callable, List, Optional

from junit_spec_reporter.core.logging import get_logger
from junit_spec_reporter.reporting.models import RunStats, SuiteNode, TestRecord, TestState


class EventCollector:
    """
    Records every suite and test seen during a run, independent of nesting.

    Both lists are append-only for the lifetime of the run. Suite depth is
    tracked for console indentation only.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.tests: List[TestRecord] = []
        self.suites: List[SuiteNode] = []
        self.stats = RunStats()
        self.depth = 0
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = get_logger(__name__)

    def on_run_begin(self) -> None:
        self.stats.start = self._clock()

    def on_suite_begin(self, suite: SuiteNode) -> None:
        self.suites.append(suite)
        if not suite.root:
            self.stats.suites += 1
        self.depth += 1

    def on_suite_end(self, suite: Optional[SuiteNode] = None) -> None:
        self.depth = max(self.depth - 1, 0)

    def on_test_observed(self, test: TestRecord) -> None:
        """Append a finished test whatever its state and bump the counters."""
        self.tests.append(test)
        self.stats.tests += 1
        if test.state == TestState.PASSED:
            self.stats.passes += 1
        elif test.state == TestState.FAILED:
            self.stats.failures += 1
        elif test.state == TestState.PENDING:
            self.stats.pending += 1
        else:
            self.logger.debug(f"Test '{test.title}' observed without a state")

    def on_run_end(self) -> RunStats:
        """Close the run clock; returns the final counters."""
        self.stats.end = self._clock()
        if self.stats.duration is None and self.stats.start is not None:
            elapsed = self.stats.end - self.stats.start
            self.stats.duration = elapsed.total_seconds() * 1000
        return self.stats
