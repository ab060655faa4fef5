"""Console logging for the CLI. The library itself never configures logging."""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "ixdecoder"


def configure_logging(level: Union[int, str] = "WARNING",
                      console: Optional[Console] = None) -> logging.Logger:
    """Attach a RichHandler to the package logger, replacing any earlier one."""
    logger = logging.getLogger(PACKAGE_LOGGER)
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
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False
    return logger
