"""
JUnit Spec Reporter Package

Turns a test engine's lifecycle events into a hierarchical JUnit XML report
while printing spec-style progress to the console.
"""

__version__ = "0.1.0"
__author__ = "JUnit Spec Reporter Team"

from junit_spec_reporter.core.config import ReporterConfig
from junit_spec_reporter.reporting.reporter import JUnitSpecReporter

__all__ = [
    "ReporterConfig",
    "JUnitSpecReporter",
]
