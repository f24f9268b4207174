"""
Logging configuration for the map tools.
"""

import logging
import sys
from typing import Optional, TextIO

ROOT_LOGGER = "tmj_tools"


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name for console output."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",  # Reset
    }

    def __init__(self, fmt: Optional[str] = None, use_color: bool = True):
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        if not self.use_color:
            return formatted

        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]
        # Colour only the level name
        if record.levelname in formatted:
            formatted = formatted.replace(
                record.levelname, f"{color}{record.levelname}{reset}", 1
            )
        return formatted


def level_for_verbosity(verbosity: int) -> int:
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(verbosity: int = 0, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configure the package logger with a single console handler.

    Calling it again replaces the handler instead of adding another one.
    """
    stream = stream if stream is not None else sys.stderr
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level_for_verbosity(verbosity))

    for handler in list(logger.handlers):
        if getattr(handler, "_tmj_tools_console", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler._tmj_tools_console = True  # type: ignore[attr-defined]
    use_color = hasattr(stream, "isatty") and stream.isatty()
    handler.setFormatter(ColoredFormatter("%(levelname)s: %(message)s", use_color=use_color))
    logger.addHandler(handler)
    return logger
