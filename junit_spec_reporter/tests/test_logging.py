import logging
from pathlib import Path

from junit_spec_reporter.core.logging import (
    ColoredFormatter,
    get_logger,
    level_for_verbosity,
    setup_logger,
)


def _record(level: int) -> logging.LogRecord:
    return logging.LogRecord("junit_spec_reporter.test", level, __file__, 1, "suite dropped", None, None)


def test_level_for_verbosity():
    assert level_for_verbosity(0) == logging.WARNING
    assert level_for_verbosity(1) == logging.INFO
    assert level_for_verbosity(2) == logging.INFO
    assert level_for_verbosity(3) == logging.DEBUG


def test_colored_formatter_restores_levelname():
    record = _record(logging.WARNING)
    formatted = ColoredFormatter("%(levelname)s %(message)s").format(record)

    assert "\033[93mWARNING\033[0m suite dropped" == formatted
    assert record.levelname == "WARNING"


def test_setup_logger_replaces_handlers(tmp_path: Path):
    logger = setup_logger(verbosity=1, log_file=tmp_path / "first.log")
    try:
        logger = setup_logger(verbosity=1)
        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO
    finally:
        setup_logger()


def test_log_file_receives_debug_from_child_loggers(tmp_path: Path):
    log_file = tmp_path / "nested" / "trace.log"
    setup_logger(verbosity=0, log_file=log_file)
    try:
        get_logger("junit_spec_reporter.reporting.reconstruct").debug("Suite 'Math' is detached")
    finally:
        setup_logger()

    assert "DEBUG" in log_file.read_text()
    assert "Suite 'Math' is detached" in log_file.read_text()
