"""
Logging configuration for tagver.

Centralized logging setup. Log lines go to standard error so standard
output only ever carries the computed version.
"""

import sys
from typing import Optional

from loguru import logger
from rich.console import Console

# verbosity aliases accepted on the command line and in the environment
VERBOSITY_LEVELS = {
    'e': 'ERROR', 'error': 'ERROR', 'q': 'ERROR', 'quiet': 'ERROR',
    'w': 'WARNING', 'warn': 'WARNING', 'm': 'WARNING', 'minimal': 'WARNING',
    'i': 'INFO', 'info': 'INFO', 'n': 'INFO', 'normal': 'INFO',
    'd': 'DEBUG', 'debug': 'DEBUG', 'detailed': 'DEBUG',
    't': 'TRACE', 'trace': 'TRACE', 'diag': 'TRACE', 'diagnostic': 'TRACE',
}
VERBOSITY_VALID_VALUES = 'e[rror] or q[uiet], w[arn] or m[inimal], i[nfo] or n[ormal] (default), d[ebug] or detailed, t[race] or diag[nostic]'

LOG_FORMAT = '<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <level>{message}</level>'


def parse_verbosity(verbosity: Optional[str]) -> Optional[str]:
    """
    Map a verbosity alias to a loguru level name.

    Args:
        verbosity: e.g. "quiet", "n", "Diagnostic"

    Returns:
        str: Level name such as "INFO", or None if the value is not recognized
    """
    if not verbosity:
        return None
    return VERBOSITY_LEVELS.get(verbosity.strip().lower())


def setup_logging(log_level: str = 'INFO', console: Console = None) -> None:
    """
    Set up logging with a shared Rich console.

    Args:
        log_level: Logging level (TRACE, DEBUG, INFO, WARNING, ERROR)
        console: Rich Console instance writing to stderr (optional)
    """
    logger.remove()

    if console:
        logger.add(
            lambda msg: console.print(msg, end='', markup=False, highlight=False),
            level=log_level,
            format=LOG_FORMAT,
            colorize=False
        )
    else:
        logger.add(
            sys.stderr,
            level=log_level,
            format=LOG_FORMAT,
            colorize=True
        )
