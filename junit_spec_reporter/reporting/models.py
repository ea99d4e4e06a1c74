"""
Data models for test reporting.
"""

import traceback
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class TestState(Enum):
    """Outcome of an observed test execution."""
    __test__ = False

    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"


class Speed(Enum):
    """Console speed class of a passed test, relative to the slow threshold."""
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"


DEFAULT_SLOW_MS = 75.0


def classify_speed(duration: float, slow: float = DEFAULT_SLOW_MS) -> Speed:
    """Classify a duration the way spec-style consoles colour it."""
    if duration > slow:
        return Speed.SLOW
    if duration > slow / 2:
        return Speed.MEDIUM
    return Speed.FAST


@dataclass
class ErrorDetail:
    """Failure detail carried by a failed test."""
    message: str = ""
    kind: Optional[str] = None  # "AssertionError", "TypeError", ...
    actual: Any = None
    expected: Any = None
    stack: str = ""
    show_diff: bool = True
    has_expected: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorDetail":
        """Build from an event payload (accepts `type` or `name` for the kind)."""
        return cls(
            message=str(data.get("message", "")),
            kind=data.get("type") or data.get("name") or data.get("kind"),
            actual=data.get("actual"),
            expected=data.get("expected"),
            stack=str(data.get("stack") or ""),
            show_diff=data.get("showDiff", data.get("show_diff", True)) is not False,
            has_expected="expected" in data,
        )

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorDetail":
        """Build from a live exception."""
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(
            message=str(exc),
            kind=type(exc).__name__,
            stack=stack.rstrip("\n"),
        )


@dataclass(eq=False)
class SuiteNode:
    """
    One suite of the run.

    `suites` and `tests` are the owned children; either may be None when the
    engine never materialized the container (suites created in an isolated
    worker). `parent` is a lookup handle only: ownership runs top-down.
    Equality is identity so membership checks never compare by value.
    """
    title: str
    parent: Optional["SuiteNode"] = field(default=None, repr=False)
    suites: Optional[List["SuiteNode"]] = field(default=None, repr=False)
    tests: Optional[List["TestRecord"]] = field(default=None, repr=False)
    duration: float = 0.0  # cumulative, ms
    failures: int = 0
    root: bool = False

    @classmethod
    def create_root(cls, title: str = "") -> "SuiteNode":
        """Create the run-level suite with materialized containers."""
        return cls(title=title, suites=[], tests=[], root=True)

    def title_path(self) -> List[str]:
        """Titles from the outermost non-root ancestor down to this suite."""
        path = self.parent.title_path() if self.parent is not None else []
        if not self.root:
            path.append(self.title)
        return path

    def full_title(self) -> str:
        return " ".join(self.title_path())

    def add_suite(self, suite: "SuiteNode") -> "SuiteNode":
        """Attach a child suite (live-run containment)."""
        if self.suites is None:
            self.suites = []
        suite.parent = self
        self.suites.append(suite)
        return suite

    def add_test(self, test: "TestRecord") -> "TestRecord":
        """Attach a declared test (live-run containment)."""
        if self.tests is None:
            self.tests = []
        test.parent = self
        self.tests.append(test)
        return test


@dataclass(eq=False)
class TestRecord:
    """One observed test execution."""
    __test__ = False

    title: str
    parent: Optional[SuiteNode] = field(default=None, repr=False)
    state: Optional[TestState] = None
    duration: float = 0.0  # ms
    err: Optional[ErrorDetail] = None
    speed: Optional[Speed] = None

    def title_path(self) -> List[str]:
        path = self.parent.title_path() if self.parent is not None else []
        path.append(self.title)
        return path

    def full_title(self) -> str:
        """Ancestor titles and this test's title joined by spaces."""
        return " ".join(self.title_path())

    @property
    def failed(self) -> bool:
        return self.state == TestState.FAILED


@dataclass
class RunStats:
    """Running counters for one run."""
    suites: int = 0
    tests: int = 0
    passes: int = 0
    pending: int = 0
    failures: int = 0
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    duration: Optional[float] = None  # ms

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging and inspection."""
        result = {
            "suites": self.suites,
            "tests": self.tests,
            "passes": self.passes,
            "pending": self.pending,
            "failures": self.failures,
        }
        if self.start is not None:
            result["start"] = self.start.isoformat()
        if self.end is not None:
            result["end"] = self.end.isoformat()
        if self.duration is not None:
            result["duration"] = self.duration
        return result
