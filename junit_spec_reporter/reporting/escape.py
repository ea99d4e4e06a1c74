"""
XML escaping and value formatting for the report writer.
"""

import math
import re
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any, Optional

# An ampersand that already starts a character or entity reference
_BARE_AMPERSAND = re.compile(r"&(?!(?:amp|lt|gt|quot|apos|#[0-9]+|#[xX][0-9a-fA-F]+);)")

_REPLACEMENTS = (
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
)


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def escape(value: Any) -> str:
    """
    Escape the five XML special characters.

    Existing references are preserved, so escaping an already escaped value
    returns it unchanged.
    """
    text = _BARE_AMPERSAND.sub("&amp;", _to_text(value))
    for char, entity in _REPLACEMENTS:
        text = text.replace(char, entity)
    return text


def cdata(text: str) -> str:
    """Wrap text in a CDATA section; an embedded `]]>` is split across two sections."""
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def format_seconds(ms: Optional[float]) -> str:
    """Milliseconds to seconds in natural float form; 0 for missing or non-finite values."""
    if ms is None:
        return "0"
    try:
        seconds = float(ms) / 1000
    except (TypeError, ValueError):
        return "0"
    if not math.isfinite(seconds) or seconds == 0:
        return "0"
    if seconds.is_integer():
        return str(int(seconds))
    return repr(seconds)


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """RFC 1123 timestamp in GMT, e.g. `Sat, 17 Oct 2026 12:00:00 GMT`."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return format_datetime(now.astimezone(timezone.utc), usegmt=True)
