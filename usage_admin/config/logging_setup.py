"""
Logging setup for the command line.

Records go through rich so they share the console with the rendered views.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "WARNING") -> None:
    """Route the package's log records to stderr through rich.

    Args:
        level: Name of the minimum level to emit, e.g. "INFO"

    Raises:
        ValueError: If the level name is unknown
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger("usage_admin")
    logger.setLevel(numeric_level)
    # Reconfiguring replaces the previous handler instead of stacking
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=False))
