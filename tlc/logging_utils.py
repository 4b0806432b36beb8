"""Logging configuration helpers for TLC."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "tlc"


def _close_handlers(logger: logging.Logger) -> None:
    """Detach and close all handlers currently bound to the logger."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def configure_logging(*, log_file: Path, verbose: bool) -> logging.Logger:
    """Configure file logging for the TLC CLI and return the logger.

    Logging is reconfigured on every CLI invocation and the target file is
    truncated so each run has an isolated log history.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    _close_handlers(logger)

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    log_path = log_file.expanduser().resolve()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the TLC logger, or a child of it for a module name.

    Child loggers carry no handlers of their own and propagate to the TLC
    logger, so records from every module land in the configured log file
    under their own name. A null handler is attached while unconfigured.
    """
    root = logging.getLogger(_LOGGER_NAME)
    if not root.handlers:
        root.addHandler(logging.NullHandler())
    if name is None or name == _LOGGER_NAME:
        return root
    if name.startswith(f"{_LOGGER_NAME}."):
        return logging.getLogger(name)
    return root.getChild(name)
