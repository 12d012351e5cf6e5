"""Logging configuration for shellkit.

Console output goes through rich so log records and user-facing messages
share the same terminal styling. An optional log file receives everything
at DEBUG level in a plain format.

Example:
    ```python
    from shellkit.core.logging import setup_logging

    setup_logging(debug=True, log_file="~/logs/shellkit.log")

    import logging
    logger = logging.getLogger(__name__)
    logger.info("Moved %s to trash", path)
    ```
"""

import logging
import sys
from pathlib import Path
from types import TracebackType
from typing import Optional, Type

from rich.console import Console
from rich.logging import RichHandler

# Log records go to stderr so rendered output on stdout stays clean
console = Console(stderr=True)


def setup_logging(
    debug: bool = False,
    log_file: Optional[str] = None,
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
) -> None:
    """Set up logging configuration.

    Args:
        debug: Whether to enable debug logging (default: False).
        log_file: Optional path to log file. If provided, logs will be
                 written to this file in addition to console output.
                 The path is expanded to handle ~ for home directory.
        log_format: Format string for file log messages.
    """
    root_logger = logging.getLogger()
    # The file handler always records DEBUG, so the root must let it through
    root_logger.setLevel(logging.DEBUG if debug or log_file else logging.INFO)

    root_logger.handlers.clear()

    console_handler = RichHandler(
        console=console,
        show_path=debug,
        enable_link_path=debug,
        markup=True,
        rich_tracebacks=True,
        tracebacks_show_locals=debug,
    )
    # User-facing messages are printed directly, so outside debug mode the
    # handler only surfaces uncaught exceptions.
    console_handler.setLevel(logging.DEBUG if debug else logging.CRITICAL)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(log_format))
        root_logger.addHandler(file_handler)

    logger = logging.getLogger(__name__)
    logger.debug("Logging initialized (debug=%s)", debug)
    if log_file:
        logger.debug("Log file: %s", log_file)

    def handle_exception(
        exc_type: Type[BaseException],
        exc_value: BaseException,
        exc_traceback: Optional[TracebackType],
    ) -> None:
        """Handle uncaught exceptions by logging them."""
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logger.critical(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback),
        )

    sys.excepthook = handle_exception
