"""Tests for logging setup."""

import logging
from pathlib import Path

from rich.logging import RichHandler

from shellkit.core.logging import setup_logging


def test_setup_logging_levels() -> None:
    """Test root logger level and handlers."""
    setup_logging()
    root = logging.getLogger()
    assert root.level == logging.INFO
    assert any(isinstance(h, RichHandler) for h in root.handlers)

    setup_logging(debug=True)
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1


def test_setup_logging_file(tmp_path: Path) -> None:
    """Test that the log file receives debug records."""
    log_file = tmp_path / "logs" / "shellkit.log"

    setup_logging(log_file=str(log_file))
    logging.getLogger("shellkit.test").debug("Moved %s", "report.txt")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "shellkit.test - DEBUG - Moved report.txt" in log_file.read_text()
