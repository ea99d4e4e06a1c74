"""
JUnit XML serialization of the reconstructed suite tree.
"""

from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Sequence, Tuple

from junit_spec_reporter.core.logging import get_logger
from junit_spec_reporter.reporting.diff import generate_diff, show_diff
from junit_spec_reporter.reporting.escape import cdata, escape, format_seconds, utc_timestamp
from junit_spec_reporter.reporting.models import RunStats, SuiteNode, TestRecord, TestState
from junit_spec_reporter.reporting.reconstruct import reconstruct_hierarchy, unreported_suites
from junit_spec_reporter.reporting.sink import OutputSink

Attributes = Sequence[Tuple[str, Any]]


def tag(name: str, attrs: Attributes, close: bool = False, content: Optional[str] = None) -> str:
    """
    Build an element tag from ordered (key, value) pairs.

    Values are escaped; pairs whose value is None are left out.
    """
    end = "/>" if close else ">"
    pairs = [f'{key}="{escape(value)}"' for key, value in attrs if value is not None]
    text = "<" + name + (" " + " ".join(pairs) if pairs else "") + end
    if content:
        text += content + "</" + name + end
    return text


class XmlSerializer:
    """Depth-first writer of the report document into a sink."""

    def __init__(
        self,
        sink: OutputSink,
        suite_name: str = "Test Run",
        hide_diff: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.sink = sink
        self.suite_name = suite_name
        self.hide_diff = hide_diff
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = get_logger(__name__)

    def write(self, line: str) -> None:
        self.sink.write(line)

    def output_xml(
        self,
        root: SuiteNode,
        suites: List[SuiteNode],
        tests: List[TestRecord],
        stats: RunStats,
    ) -> None:
        """Reconstruct the tree under `root` and write the whole document."""
        self.write(
            tag(
                "testsuite",
                [
                    ("name", self.suite_name),
                    ("tests", stats.tests),
                    # Real failures are reported under `errors`; `failures` stays 0
                    ("failures", 0),
                    ("errors", stats.failures),
                    ("skipped", stats.tests - stats.failures - stats.passes),
                    ("timestamp", utc_timestamp(self._clock())),
                    ("time", format_seconds(stats.duration)),
                ],
            )
        )

        self.logger.debug(f"Observed tests: {[t.full_title() for t in tests]}")
        self.logger.debug(f"Observed suites: {[s.title for s in suites]}")

        reconstruct_hierarchy(root, tests)

        for dropped in unreported_suites(suites, root):
            self.logger.debug(f"Suite '{dropped.title}' has no completed tests; omitted")

        self._output_children(root)

        self.write("</testsuite>")

    def _output_children(self, suite: SuiteNode) -> None:
        # Child suites take precedence: direct tests are only written for leaf suites
        if suite.suites:
            for child in suite.suites:
                self.output_suite(child)
        elif suite.tests:
            for test in suite.tests:
                self.output_test(test)

    def output_suite(self, suite: SuiteNode) -> None:
        self.write(
            tag(
                "testsuite",
                [
                    ("name", suite.title),
                    ("tests", len(suite.tests or [])),
                    ("failures", suite.failures),
                    ("timestamp", utc_timestamp(self._clock())),
                    ("time", format_seconds(suite.duration)),
                ],
            )
        )
        self._output_children(suite)
        self.write("</testsuite>")

    def output_test(self, test: TestRecord) -> None:
        self.write(
            tag(
                "testcase",
                [
                    ("name", test.full_title()),
                    ("classname", test.title),
                    ("time", format_seconds(test.duration)),
                ],
            )
        )

        if test.state == TestState.FAILED:
            self._output_failure(test)

        self.write("</testcase>")

    def _output_failure(self, test: TestRecord) -> None:
        err = test.err
        if err is None:
            self.logger.debug(f"Failed test '{test.title}' carries no error detail")
            message, kind, stack, diff = "", None, "", ""
        else:
            message, kind, stack = err.message, err.kind, err.stack
            diff = ""
            if not self.hide_diff and show_diff(err):
                diff = "\n" + generate_diff(err.actual, err.expected)

        self.write(tag("failure", [("message", escape(message)), ("type", kind)]))
        self.write(cdata(f"{message}\n{diff}\n{stack}"))
        self.write("</failure>")
