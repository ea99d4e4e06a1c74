"""
Report destinations.

A sink is acquired before the first line is written and closed after the
last one. `close()` takes a callback that runs once the destination has
been flushed and released; callers gate their own completion on it.
"""

import sys
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, TextIO

from junit_spec_reporter.core.errors import OutputDirectoryError, UnsupportedDestinationError
from junit_spec_reporter.core.logging import get_logger

SINK_KINDS = ("auto", "file", "console")


class OutputSink(ABC):
    """Line-oriented report destination."""

    closed = False

    @abstractmethod
    def write(self, line: str) -> None:
        """Write one line; the newline is appended by the sink."""
        pass

    @abstractmethod
    def close(self, callback: Optional[Callable[[], None]] = None) -> None:
        """Release the destination, then invoke `callback`."""
        pass


class FileSink(OutputSink):
    """Sink backed by a file; parent directories are created on open."""

    def __init__(self, path: Path, encoding: str = "utf-8"):
        self.path = Path(path)
        self.logger = get_logger(__name__)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputDirectoryError(
                f"Could not create report directory {self.path.parent}: {e}"
            ) from e
        self._stream = open(self.path, "w", encoding=encoding)
        self.logger.info(f"Writing JUnit report to {self.path}")

    def write(self, line: str) -> None:
        self._stream.write(line + "\n")

    def close(self, callback: Optional[Callable[[], None]] = None) -> None:
        if not self.closed:
            self._stream.flush()
            self._stream.close()
            self.closed = True
        if callback is not None:
            callback()


class ConsoleSink(OutputSink):
    """Sink writing to standard output (or any text stream)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so a replaced sys.stdout is honoured
        return self._stream if self._stream is not None else sys.stdout

    def write(self, line: str) -> None:
        self.stream.write(line + "\n")

    def close(self, callback: Optional[Callable[[], None]] = None) -> None:
        # Standard output is not ours to close; completion is immediate
        self.stream.flush()
        self.closed = True
        if callback is not None:
            callback()


def create_sink(output_path: Optional[Path] = None, kind: str = "auto") -> OutputSink:
    """
    Create the sink for a run.

    Raises:
        UnsupportedDestinationError: unknown kind, or a file sink without a path
        OutputDirectoryError: the report directory cannot be created
    """
    if kind not in SINK_KINDS:
        raise UnsupportedDestinationError(
            f"Unsupported report destination '{kind}' (expected one of: {', '.join(SINK_KINDS)})"
        )
    if kind == "file" and not output_path:
        raise UnsupportedDestinationError("File destination requested without an output path")
    if kind == "console" or not output_path:
        return ConsoleSink()
    return FileSink(Path(output_path))


@contextmanager
def open_sink(output_path: Optional[Path] = None, kind: str = "auto") -> Iterator[OutputSink]:
    """Scoped sink: closed on exit even when writing fails."""
    sink = create_sink(output_path, kind)
    try:
        yield sink
    finally:
        if not sink.closed:
            sink.close()
