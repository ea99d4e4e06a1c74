"""
Core modules for the JUnit spec reporter.
"""

from junit_spec_reporter.core.config import ReporterConfig, resolve_output_path
from junit_spec_reporter.core.errors import (
    JUnitSpecError,
    ConfigurationError,
    OutputDirectoryError,
    UnsupportedDestinationError,
    EventLogError,
)

__all__ = [
    "ReporterConfig",
    "resolve_output_path",
    "JUnitSpecError",
    "ConfigurationError",
    "OutputDirectoryError",
    "UnsupportedDestinationError",
    "EventLogError",
]
