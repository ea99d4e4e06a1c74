"""
Custom exceptions for the JUnit spec reporter.
"""


class JUnitSpecError(Exception):
    """Base exception for all reporter errors."""
    pass


class ConfigurationError(JUnitSpecError):
    """Raised when configuration is invalid."""
    pass


class OutputDirectoryError(ConfigurationError):
    """Raised when the report's parent directory cannot be created."""
    pass


class UnsupportedDestinationError(JUnitSpecError):
    """Raised when a report destination is not available in this runtime."""
    pass


class EventLogError(JUnitSpecError):
    """Raised when an event log cannot be read or parsed."""
    pass
