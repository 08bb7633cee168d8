"""
Logging configuration. Library modules log through loguru's `logger`;
only entry points call `configure_logging`.
"""
import sys
from typing import Optional, TextIO

from loguru import logger

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <cyan>{name}</cyan> - {message}"


def configure_logging(level: str = "INFO", sink: Optional[TextIO] = None) -> int:
    """
    Replaces loguru's default handler with a single stream sink.

    Args:
        level (str): Minimum level to emit.
        sink (Optional[TextIO]): Stream to write to, stderr by default.

    Returns:
        int: The handler id, usable with `logger.remove`.
    """
    logger.remove()
    return logger.add(
        sink or sys.stderr,
        level=level.upper(),
        format=LOG_FORMAT,
        colorize=None,
        backtrace=False,
        diagnose=False,
    )
