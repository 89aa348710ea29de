"""Logging setup for the permguard daemon.

Modules log through ``logging.getLogger(__name__)``; this module only wires
the root logger to a Rich handler on stderr.
"""

import logging

from rich.logging import RichHandler

from permguard.utils.formatting import err_console

LOG_FORMAT = "%(message)s"
DATE_FORMAT = "[%X]"


def resolve_level(*, verbose: bool = False, quiet: bool = False) -> int:
    """Map the global CLI flags to a logging level.

    ``verbose`` wins over ``quiet`` when both are given.
    """
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Configure the root logger with a Rich handler.

    Calling this more than once replaces the previous handler.

    Args:
        verbose: Log debug messages (e.g. every ignored path).
        quiet: Only log warnings and errors.
    """
    handler = RichHandler(
        console=err_console,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    logging.basicConfig(
        level=resolve_level(verbose=verbose, quiet=quiet),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[handler],
        force=True,
    )
    # watchdog is chatty at debug level
    logging.getLogger("watchdog").setLevel(logging.WARNING)
