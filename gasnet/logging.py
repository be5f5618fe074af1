"""Logging for gasnet.

Every package logger sits under the ``gasnet`` logger, which owns a single
console handler. The CLI picks the level once per invocation from
``--verbose``/``--quiet``; analysis and CLI modules only emit debug lines.

File loggers (the operation journal) are children of the same hierarchy but
do not propagate, so their lines never reach the console handler and the
console level never filters them.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple, Union

ROOT_LOGGER_NAME = "gasnet"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_console_handler: Optional[logging.Handler] = None


def setup_root_logger(
    level: int = logging.INFO, handler: Optional[logging.Handler] = None
) -> logging.Handler:
    """Attach the console handler to the ``gasnet`` logger.

    Only the first call after import (or after ``reset_logging()``) does
    anything; later calls return the handler already installed.

    Args:
        level: Level for the ``gasnet`` logger.
        handler: Replacement for the default stdout stream handler.

    Returns:
        The console handler.
    """
    global _console_handler

    if _console_handler is not None:
        return _console_handler

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    # pytest's caplog listens on the Python root logger
    root_logger.propagate = True

    _console_handler = handler
    return handler


def get_logger(name: str) -> logging.Logger:
    """Logger for a gasnet module.

    Names outside the package are nested under ``gasnet`` so the console
    level applies to them too.

    Examples:
        >>> get_logger("gasnet.analysis").name
        'gasnet.analysis'
        >>> get_logger("plugin").name
        'gasnet.plugin'
    """
    setup_root_logger()
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def level_for_flags(verbose: bool = False, quiet: bool = False) -> int:
    """Console level for the CLI flags; ``verbose`` wins over ``quiet``."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def set_global_log_level(level: int) -> None:
    """Set the level of the ``gasnet`` logger and its console handler."""
    handler = setup_root_logger()
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)
    handler.setLevel(level)


def get_file_logger(
    name: str,
    path: Union[str, Path],
    format_string: str,
    datefmt: Optional[str] = None,
) -> Tuple[logging.Logger, logging.FileHandler]:
    """Logger under ``gasnet`` that appends to ``path`` and nowhere else.

    The logger keeps INFO level of its own, so ``--quiet`` does not silence
    it. The caller owns the returned handler and must remove and close it.

    Returns:
        The logger and its file handler.
    """
    logger = get_logger(name)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(format_string, datefmt=datefmt))
    logger.addHandler(handler)
    return logger, handler


def reset_logging() -> None:
    """Remove the console handler and the ``gasnet`` level (for tests)."""
    global _console_handler

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    if _console_handler is not None:
        root_logger.removeHandler(_console_handler)
        _console_handler = None
    root_logger.setLevel(logging.NOTSET)


setup_root_logger()
