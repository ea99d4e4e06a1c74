"""
Test reporting module for the JUnit spec reporter.

This module provides:
- Test and suite data structures
- Flat event collection and suite tree reconstruction
- JUnit XML serialization into a file or standard output
- Spec-style console output
"""

from junit_spec_reporter.reporting.models import (
    ErrorDetail,
    RunStats,
    SuiteNode,
    TestRecord,
    TestState,
)
from junit_spec_reporter.reporting.collector import EventCollector
from junit_spec_reporter.reporting.reconstruct import reconstruct_hierarchy
from junit_spec_reporter.reporting.serializer import XmlSerializer
from junit_spec_reporter.reporting.sink import ConsoleSink, FileSink, OutputSink, create_sink, open_sink
from junit_spec_reporter.reporting.events import EventKind, LifecycleEvent, load_events, replay
from junit_spec_reporter.reporting.reporter import JUnitSpecReporter

__all__ = [
    "ErrorDetail",
    "RunStats",
    "SuiteNode",
    "TestRecord",
    "TestState",
    "EventCollector",
    "reconstruct_hierarchy",
    "XmlSerializer",
    "ConsoleSink",
    "FileSink",
    "OutputSink",
    "create_sink",
    "open_sink",
    "EventKind",
    "LifecycleEvent",
    "load_events",
    "replay",
    "JUnitSpecReporter",
]
