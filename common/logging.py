"""Logging setup shared by the fixer engine and the command line.

Every module logs under the ``reqfix`` logger tree, so ``--log-level`` (or
``REQFIX_LOG_LEVEL``) tunes the engine without turning on debug output for
whatever else runs in the same process.
"""
from __future__ import annotations

import logging
import os
from typing import Optional


ROOT_LOGGER = "reqfix"
_ENV_VAR = "REQFIX_LOG_LEVEL"
_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _parse_level(value: int | str | None) -> Optional[int]:
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip():
        candidate = logging.getLevelName(value.strip().upper())
        if isinstance(candidate, int):
            return candidate
    return None


def resolve_level(value: int | str | None = None) -> int:
    """Explicit level first, then ``REQFIX_LOG_LEVEL``, then INFO."""

    for candidate in (value, os.environ.get(_ENV_VAR)):
        level = _parse_level(candidate)
        if level is not None:
            return level
    return logging.INFO


def configure_logging(level: int | str | None = None) -> logging.Logger:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(format=_FORMAT)
    logger = logging.getLogger(ROOT_LOGGER)
    # an explicit level always wins; module imports only fill in the default
    if level is not None or logger.level == logging.NOTSET:
        logger.setLevel(resolve_level(level))
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    configure_logging()
    if not name or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
