"""
Logging setup for the growth chart.

Modules log through ``logging.getLogger(__name__)``; this attaches a rich
console handler to the package logger.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "growthchart"


def setup_logging(level: Optional[str] = None, console: Optional[Console] = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Log level name. Defaults to the configured GROWTHCHART_LOG_LEVEL.
        console: Rich console to write to. Defaults to stderr.

    Returns:
        The configured ``growthchart`` logger.
    """
    if level is None:
        from growthchart.config import get_config
        level = get_config().log_level

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level.upper())

    # Replace a handler from an earlier call instead of stacking them
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    return logger
