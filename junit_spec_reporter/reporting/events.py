"""
Lifecycle events and event-log replay.

An event log is a recorded run: JSON lines, a JSON array, or a YAML list
of mappings such as

    {"event": "suite-begin", "id": "s1", "title": "Math", "parent": "root"}
    {"event": "test-fail", "title": "adds", "parent": "s1", "duration": 5,
     "err": {"message": "expected 2 got 3", "type": "AssertionError"}}

Replay materializes suites and tests the way an isolated worker hands them
over: parent references only, no child containers. A suite whose parent is
missing, unknown or the reserved id "root" hangs off the run's root suite; a
test with an unresolved parent stays detached.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml

from junit_spec_reporter.core.errors import EventLogError
from junit_spec_reporter.core.logging import get_logger
from junit_spec_reporter.reporting.models import ErrorDetail, Speed, SuiteNode, TestRecord

logger = get_logger(__name__)


class EventKind(Enum):
    """Lifecycle event kinds emitted by a test engine."""
    RUN_BEGIN = "run-begin"
    RUN_END = "run-end"
    SUITE_BEGIN = "suite-begin"
    SUITE_END = "suite-end"
    TEST_PENDING = "test-pending"
    TEST_PASS = "test-pass"
    TEST_FAIL = "test-fail"

    @classmethod
    def parse(cls, name: str) -> "EventKind":
        key = str(name).strip().lower()
        kind = EVENT_ALIASES.get(key)
        if kind is None:
            try:
                kind = cls(key)
            except ValueError:
                raise EventLogError(f"Unknown event kind: {name!r}") from None
        return kind


# Runner-native event names
EVENT_ALIASES = {
    "start": EventKind.RUN_BEGIN,
    "end": EventKind.RUN_END,
    "suite": EventKind.SUITE_BEGIN,
    "suite end": EventKind.SUITE_END,
    "pending": EventKind.TEST_PENDING,
    "pass": EventKind.TEST_PASS,
    "fail": EventKind.TEST_FAIL,
}

ROOT_SUITE_ID = "root"

TEST_EVENTS = frozenset({EventKind.TEST_PENDING, EventKind.TEST_PASS, EventKind.TEST_FAIL})


@dataclass
class LifecycleEvent:
    """One recorded lifecycle event."""
    kind: EventKind
    id: Optional[str] = None
    title: str = ""
    parent: Optional[str] = None
    root: bool = False
    duration: float = 0.0
    speed: Optional[Speed] = None
    err: Optional[ErrorDetail] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LifecycleEvent":
        if not isinstance(data, dict):
            raise EventLogError(f"Event must be a mapping, got {type(data).__name__}")
        if "event" not in data:
            raise EventLogError(f"Event without an 'event' field: {data}")

        kind = EventKind.parse(data["event"])

        duration = data.get("duration") or 0
        try:
            duration = float(duration)
        except (TypeError, ValueError):
            raise EventLogError(f"Invalid duration {duration!r} in event: {data}") from None

        speed = None
        if data.get("speed"):
            try:
                speed = Speed(data["speed"])
            except ValueError:
                logger.debug(f"Ignoring unknown speed {data['speed']!r}")

        err = None
        if kind == EventKind.TEST_FAIL:
            raw_err = data.get("err") or data.get("error") or {}
            if isinstance(raw_err, str):
                raw_err = {"message": raw_err}
            err = ErrorDetail.from_dict(raw_err)

        known = {"event", "id", "title", "parent", "root", "duration", "speed", "err", "error"}
        return cls(
            kind=kind,
            id=None if data.get("id") is None else str(data["id"]),
            title=str(data.get("title") or ""),
            parent=None if data.get("parent") is None else str(data["parent"]),
            root=bool(data.get("root", False)),
            duration=duration,
            speed=speed,
            err=err,
            extra={k: v for k, v in data.items() if k not in known},
        )


def parse_events(text: str) -> List[LifecycleEvent]:
    """Parse an event log from text (JSON lines, JSON array or YAML list)."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if lines and all(line.startswith("{") for line in lines):
        try:
            records = [json.loads(line) for line in lines]
        except json.JSONDecodeError as e:
            raise EventLogError(f"Invalid JSON line in event log: {e}") from e
    else:
        try:
            records = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise EventLogError(f"Invalid event log: {e}") from e

    if records is None:
        return []
    if not isinstance(records, list):
        raise EventLogError("Event log must be a list of events")
    return [LifecycleEvent.from_dict(record) for record in records]


def load_events(path: Union[str, Path]) -> List[LifecycleEvent]:
    """Read and parse an event log file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise EventLogError(f"Could not read event log {path}: {e}") from e
    return parse_events(text)


def replay(events: Iterable[LifecycleEvent], reporter) -> bool:
    """
    Feed recorded events to `reporter` in order.

    Returns True when the log contained a run end (and the report was written).
    """
    suites_by_id: Dict[str, SuiteNode] = {}
    ended = False

    def lookup(parent_id: Optional[str]) -> Optional[SuiteNode]:
        if parent_id is None:
            return None
        suite = suites_by_id.get(parent_id)
        if suite is None:
            logger.debug(f"Unknown parent suite id {parent_id!r}; treating as detached")
        return suite

    def suite_parent(parent_id: Optional[str]) -> SuiteNode:
        # A suite without a declared parent is top-level
        if parent_id is None:
            return reporter.root_suite
        suite = suites_by_id.get(parent_id)
        if suite is None:
            if parent_id != ROOT_SUITE_ID:
                logger.debug(f"Unknown parent suite id {parent_id!r}; attaching to the root suite")
            return reporter.root_suite
        return suite

    for event in events:
        if event.kind == EventKind.SUITE_BEGIN:
            if event.root:
                suite = reporter.root_suite
                if event.title:
                    suite.title = event.title
            else:
                suite = SuiteNode(title=event.title, parent=suite_parent(event.parent))
            if event.id is not None:
                suites_by_id[event.id] = suite
            reporter.handle(event.kind, suite)
        elif event.kind == EventKind.SUITE_END:
            reporter.handle(event.kind, suites_by_id.get(event.id) if event.id else None)
        elif event.kind in TEST_EVENTS:
            test = TestRecord(
                title=event.title,
                parent=lookup(event.parent),
                duration=event.duration,
                speed=event.speed,
            )
            reporter.handle(event.kind, test, err=event.err)
        else:
            reporter.handle(event.kind)
            if event.kind == EventKind.RUN_END:
                ended = True

    if not ended:
        logger.warning("Event log has no run end; no report was written")
    return ended
