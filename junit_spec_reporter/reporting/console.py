"""
Human-readable spec output printed while the run progresses.
"""

from typing import List, Optional, TextIO

import typer

from junit_spec_reporter.reporting.diff import generate_diff, show_diff
from junit_spec_reporter.reporting.models import RunStats, Speed, SuiteNode, TestRecord

OK_SYMBOL = "✓"

# typer colour per output role
COLORS = {
    "suite": None,
    "pass": typer.colors.BRIGHT_BLACK,
    "checkmark": typer.colors.GREEN,
    "pending": typer.colors.CYAN,
    "fail": typer.colors.RED,
    "medium": typer.colors.YELLOW,
    "slow": typer.colors.RED,
    "fast": typer.colors.BRIGHT_BLACK,
    "error title": typer.colors.RED,
    "error message": typer.colors.RED,
    "error stack": typer.colors.BRIGHT_BLACK,
    "diff added": typer.colors.GREEN,
    "diff removed": typer.colors.RED,
}


def humanize_ms(ms: Optional[float]) -> str:
    if not ms:
        return "0ms"
    if ms >= 1000:
        seconds = ms / 1000
        return f"{seconds:g}s"
    return f"{int(round(ms))}ms"


class SpecPrinter:
    """Indented suite/test lines plus the end-of-run epilogue."""

    def __init__(self, use_colors: bool = False, file: Optional[TextIO] = None):
        self.use_colors = use_colors
        self.file = file
        self.indents = 0
        self.failure_count = 0

    def color(self, role: str, text: str) -> str:
        fg = COLORS.get(role)
        if not self.use_colors or fg is None:
            return text
        return typer.style(text, fg=fg)

    def log(self, line: str = "") -> None:
        typer.echo(line, file=self.file)

    def indent(self) -> str:
        return "  " * max(self.indents - 1, 0)

    def run_begin(self) -> None:
        self.log()

    def suite_begin(self, suite: SuiteNode) -> None:
        self.indents += 1
        self.log(self.color("suite", f"{self.indent()}{suite.title}"))

    def suite_end(self, suite: Optional[SuiteNode] = None) -> None:
        self.indents -= 1
        if self.indents == 1:
            self.log()

    def test_pending(self, test: TestRecord) -> None:
        self.log(self.indent() + self.color("pending", f"  - {test.title}"))

    def test_pass(self, test: TestRecord) -> None:
        line = (
            self.indent()
            + self.color("checkmark", f"  {OK_SYMBOL}")
            + self.color("pass", f" {test.title}")
        )
        speed = test.speed or Speed.FAST
        if speed != Speed.FAST:
            line += self.color(speed.value, f" ({humanize_ms(test.duration)})")
        self.log(line)

    def test_fail(self, test: TestRecord) -> None:
        self.failure_count += 1
        self.log(self.indent() + self.color("fail", f"  {self.failure_count}) {test.title}"))

    def epilogue(self, stats: RunStats, failures: List[TestRecord]) -> None:
        """Summary counts followed by the detail of each failure."""
        self.log()
        self.log(
            self.color("checkmark", f"  {stats.passes} passing")
            + self.color("fast", f" ({humanize_ms(stats.duration)})")
        )
        if stats.pending:
            self.log(self.color("pending", f"  {stats.pending} pending"))
        if stats.failures:
            self.log(self.color("fail", f"  {stats.failures} failing"))
            self.log()
            self.list_failures(failures)
        self.log()

    def list_failures(self, failures: List[TestRecord]) -> None:
        for index, test in enumerate(failures, start=1):
            err = test.err
            message = err.message if err else ""
            kind = (err.kind if err else None) or "Error"
            lines = [
                self.color("error title", f"  {index}) {test.full_title()}:"),
                self.color("error message", f"     {kind}: {message}"),
            ]
            if err is not None and show_diff(err):
                lines.append(self._colorize_diff(generate_diff(err.actual, err.expected)))
            if err is not None and err.stack:
                lines.append(self.color("error stack", "  " + err.stack.replace("\n", "\n  ")))
            self.log("\n".join(lines))
            self.log()

    def _colorize_diff(self, diff: str) -> str:
        out = []
        for line in diff.split("\n"):
            stripped = line.lstrip()
            if stripped.startswith("+") and not stripped.startswith("+ expected"):
                out.append(self.color("diff added", line))
            elif stripped.startswith("-"):
                out.append(self.color("diff removed", line))
            else:
                out.append(line)
        return "\n".join(out)
