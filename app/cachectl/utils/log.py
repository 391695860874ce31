"""Logging setup for the command line.

Library modules only create loggers; the CLI decides where records go.
"""

import logging

from rich.logging import RichHandler

from cachectl.utils.formatting import console

LOGGER_NAME = "cachectl"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Route ``cachectl`` log records to the console.

    Args:
        verbose: Emit DEBUG records; otherwise only WARNING and above.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
    return logger
