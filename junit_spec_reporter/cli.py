"""
Command-line interface for the JUnit spec reporter.

This module provides a subcommand-based CLI using Typer.
"""

import io
import os
import sys
from pathlib import Path
from typing import Optional

import typer
import yaml

from junit_spec_reporter.core.config import CONFIG_ENV_VAR, OUTPUT_ENV_VAR, ReporterConfig
from junit_spec_reporter.core.errors import ConfigurationError, JUnitSpecError
from junit_spec_reporter.core.logging import setup_logger
from junit_spec_reporter.reporting.events import load_events
from junit_spec_reporter.reporting.reconstruct import suite_tree
from junit_spec_reporter.reporting.reporter import JUnitSpecReporter
from junit_spec_reporter.reporting.sink import ConsoleSink

EXIT_OK = 0
EXIT_TEST_FAILURES = 1
EXIT_ERROR = 2

app = typer.Typer(
    name="junit-spec",
    help="JUnit XML reporter - Rebuild suite hierarchies from test lifecycle events",
    add_completion=False,
)


def get_config(verbosity: Optional[int] = None, **kwargs) -> ReporterConfig:
    """Create and configure ReporterConfig object."""
    init_kwargs = {}
    for key, value in kwargs.items():
        if key in ReporterConfig.__dataclass_fields__ and value is not None:
            init_kwargs[key] = value
    config = ReporterConfig(**init_kwargs)
    if verbosity is not None:
        if not 0 <= verbosity <= 3:
            raise ConfigurationError(f"verbosity must be between 0 and 3, got {verbosity}")
        config.verbosity = verbosity
    return config


@app.command()
def report(
    events: Path = typer.Argument(..., help="Event log (JSON lines, JSON array or YAML list)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help=f"Report file (overridden by ${OUTPUT_ENV_VAR})"),
    suite_name: Optional[str] = typer.Option(None, "--suite-name", help="Name of the root testsuite element"),
    hide_diff: bool = typer.Option(False, "--hide-diff", help="Leave actual/expected diffs out of failures"),
    no_spec: bool = typer.Option(False, "--no-spec", help="Disable spec-style console output"),
    color: bool = typer.Option(False, "--color", help="Colorize spec-style console output"),
    verbosity: Optional[int] = typer.Option(None, "--verbosity", "-v", help="Verbosity level (0-3)"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write a DEBUG trace of the run to this file"),
):
    """Replay an event log and write the JUnit XML report."""
    try:
        config = get_config(
            verbosity=verbosity,
            output_path=output,
            suite_name=suite_name,
            hide_diff=hide_diff or None,
            spec_output=False if no_spec else None,
            color=color or None,
        )
        setup_logger(verbosity=config.verbosity, log_file=log_file)
        recorded = load_events(events)
        reporter = JUnitSpecReporter(config)
        failures = reporter.run(recorded)
    except JUnitSpecError as e:
        typer.echo(f"✗ {e}", err=True)
        sys.exit(EXIT_ERROR)
    except OSError as e:
        typer.echo(f"✗ Report could not be written: {e}", err=True)
        sys.exit(EXIT_ERROR)

    if failures is None:
        typer.echo("✗ Event log ended before the run finished; no report written", err=True)
        sys.exit(EXIT_ERROR)
    if config.output_path and config.verbosity >= 1:
        typer.echo(f"✓ Report written to {config.output_path}", err=True)
    sys.exit(EXIT_TEST_FAILURES if failures else EXIT_OK)


@app.command()
def tree(
    events: Path = typer.Argument(..., help="Event log (JSON lines, JSON array or YAML list)"),
    verbosity: Optional[int] = typer.Option(None, "--verbosity", "-v", help="Verbosity level (0-3)"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write a DEBUG trace of the run to this file"),
):
    """Print the reconstructed suite hierarchy as YAML."""
    try:
        config = get_config(verbosity=verbosity, spec_output=False)
        setup_logger(verbosity=config.verbosity, log_file=log_file)
        recorded = load_events(events)
        reporter = JUnitSpecReporter(config, sink=ConsoleSink(io.StringIO()))
        failures = reporter.run(recorded)
    except JUnitSpecError as e:
        typer.echo(f"✗ {e}", err=True)
        sys.exit(EXIT_ERROR)
    except OSError as e:
        typer.echo(f"✗ Log file could not be written: {e}", err=True)
        sys.exit(EXIT_ERROR)

    if failures is None:
        typer.echo("✗ Event log ended before the run finished", err=True)
        sys.exit(EXIT_ERROR)

    root = reporter.root_suite
    document = {
        "name": config.suite_name,
        "stats": reporter.stats.to_dict(),
        "root_tests": len(root.tests or []),
        "suites": [suite_tree(child) for child in root.suites or []],
    }
    typer.echo(yaml.safe_dump(document, sort_keys=False, default_flow_style=False), nl=False)


@app.command()
def doctor():
    """Show the effective configuration and where it came from."""
    typer.echo("Running configuration checks...")
    try:
        config = get_config()
    except JUnitSpecError as e:
        typer.echo(f"✗ Configuration error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    if config.config_file and config.config_file.exists():
        typer.echo(f"✓ Config file: {config.config_file}")
    else:
        typer.echo("⊘ No config file found (using defaults)")
    if os.environ.get(CONFIG_ENV_VAR):
        typer.echo(f"✓ ${CONFIG_ENV_VAR} is set")
    if os.environ.get(OUTPUT_ENV_VAR):
        typer.echo(f"✓ ${OUTPUT_ENV_VAR} overrides the report path")

    for key, value in config.to_dict().items():
        typer.echo(f"  {key}: {value}")

    if config.output_path:
        parent = Path(config.output_path).parent
        if parent.exists() and not parent.is_dir():
            typer.echo(f"✗ Report directory is not a directory: {parent}", err=True)
            sys.exit(EXIT_ERROR)
        typer.echo(f"✓ Report destination: {config.output_path}")
    else:
        typer.echo("✓ Report destination: standard output")
    sys.exit(EXIT_OK)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
