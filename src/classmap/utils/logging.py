"""Logging helpers built on Rich.

Every classmap module obtains its logger through
``configure_module_logger`` so resolver activity renders consistently
on stderr without touching the host application's root logger.
"""

import logging
import sys
from typing import Union

from rich.console import Console
from rich.logging import RichHandler

_HIGHLIGHT_KEYWORDS = ["symbol", "table", "loaded", "registered", "vendor"]


def configure_module_logger(
    module_name: str,
    level: int = logging.WARNING,
    use_colors: bool = True,
) -> logging.Logger:
    """
    Configure a module-specific logger.

    Args:
        module_name: Module name (typically __name__).
        level: Logging level.
        use_colors: Use a Rich handler; a plain stderr handler otherwise.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(module_name)
    logger.setLevel(level)
    logger.handlers.clear()

    handler: Union[RichHandler, logging.Handler]
    if use_colors:
        console = Console(stderr=True, legacy_windows=False)
        handler = RichHandler(
            console=console,
            show_path=False,
            show_time=True,
            rich_tracebacks=True,
            markup=True,
            show_level=True,
            level=logging.NOTSET,  # logger controls filtering
            omit_repeated_times=False,
            keywords=_HIGHLIGHT_KEYWORDS,
        )
        handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def set_verbose(verbose: bool) -> None:
    """Switch every ``classmap.*`` logger between DEBUG and WARNING."""
    level = logging.DEBUG if verbose else logging.WARNING
    for name in list(logging.Logger.manager.loggerDict):
        if name == "classmap" or name.startswith("classmap."):
            logging.getLogger(name).setLevel(level)
