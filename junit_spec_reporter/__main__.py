"""
Entry point for running junit_spec_reporter as a module.

Usage:
    python -m junit_spec_reporter [command] [options]
"""

from junit_spec_reporter.cli import main

if __name__ == "__main__":
    main()
