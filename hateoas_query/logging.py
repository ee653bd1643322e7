"""Package logging for hateoas_query.

Every module logs through ``get_logger(__name__)``, so all records end up
under the ``hateoas_query`` logger. That logger has one handler, which writes
to stderr so the CLI can keep stdout for JSON results. Traversal details
(requests, fan-out sizes, pruned branches) are logged at DEBUG.
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "hateoas_query"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def setup_root_logger(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Install the package handler once; later calls are ignored.

    Args:
        level: Initial level of the package logger.
        format_string: Record format, ``DEFAULT_FORMAT`` when omitted.
        handler: Destination, a stderr stream handler when omitted.
    """
    global _configured
    if _configured:
        return

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(level)
    package_logger.handlers.clear()

    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    package_logger.addHandler(handler)
    # pytest's caplog listens on the root logger
    package_logger.propagate = True

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger that defers its level to the package logger."""
    setup_root_logger()
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: int) -> None:
    """Set the level of the package logger and its handlers."""
    setup_root_logger()
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(level)
    for handler in package_logger.handlers:
        handler.setLevel(level)


def enable_debug_logging() -> None:
    """Show every request and fan-out a traversal performs."""
    set_global_log_level(logging.DEBUG)


def disable_debug_logging() -> None:
    set_global_log_level(logging.INFO)


def reset_logging() -> None:
    """Drop the package handler so the next ``setup_root_logger`` reinstalls it."""
    global _configured
    _configured = False
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


setup_root_logger()
