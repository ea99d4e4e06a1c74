"""
Actual-vs-expected diffs for failure details.
"""

import difflib
import json
from typing import Any, List, Optional

from junit_spec_reporter.reporting.models import ErrorDetail

MAX_DIFF_SIZE = 8192
DIFF_INDENT = "      "


def _same_type(a: Any, b: Any) -> bool:
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b)
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return True
    return type(a) is type(b)


def show_diff(err: Optional[ErrorDetail]) -> bool:
    """Whether a failure carries comparable actual/expected values."""
    if err is None or not err.show_diff:
        return False
    if not err.has_expected and err.expected is None:
        return False
    return _same_type(err.actual, err.expected)


def stringify(value: Any) -> str:
    """Render a value for diffing; structures become sorted, indented JSON."""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, indent=2, sort_keys=True, default=repr)
    except (TypeError, ValueError):
        return repr(value)


def _truncate(text: str) -> str:
    if len(text) > MAX_DIFF_SIZE:
        return text[:MAX_DIFF_SIZE] + "\n[truncated]"
    return text


def generate_diff(actual: Any, expected: Any) -> str:
    """Unified line diff, `-` lines from actual and `+` lines from expected."""
    actual_lines = _truncate(stringify(actual)).splitlines()
    expected_lines = _truncate(stringify(expected)).splitlines()

    lines = list(difflib.unified_diff(actual_lines, expected_lines, lineterm=""))
    # Drop the two file header lines; hunks and content remain
    body: List[str] = [DIFF_INDENT + line for line in lines[2:]]

    header = f"{DIFF_INDENT}+ expected - actual\n\n"
    return header + "\n".join(body) + "\n"
