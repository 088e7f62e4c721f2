"""Logging setup for the CLI and the detached timer processes."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from focuscycle.options import OptionsStore
from focuscycle.workspace import log_dir, workspace_root


LOGGER_NAME = "focuscycle"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(process)d | %(name)s | %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"

_installed: list[logging.Handler] = []


def configure_logging(
    root: Path | None = None,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Attach file and stderr handlers to the package logger.

    Calling it again replaces the handlers it installed before. The file
    handler records INFO and above; the console level comes from the
    log_level option unless given explicitly.
    """
    if root is None:
        root = workspace_root()
    logger = logging.getLogger(LOGGER_NAME)
    while _installed:
        handler = _installed.pop()
        logger.removeHandler(handler)
        handler.close()

    options = OptionsStore(root)
    console_level = (level or options.get("log_level")).upper()
    logger.setLevel(logging.DEBUG if console_level == "DEBUG" else logging.INFO)

    if options.get("log_to_file"):
        directory = log_dir(root)
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            directory / "focuscycle.log",
            maxBytes=options.get("log_max_size"),
            backupCount=options.get("log_max_files"),
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _installed.append(file_handler)

    if console:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setLevel(console_level)
        stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        _installed.append(stream_handler)

    for handler in _installed:
        logger.addHandler(handler)
    return logger
