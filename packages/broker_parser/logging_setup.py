"""Logging configuration for ``broker_parser``.

Every module logs through ``get_logger("broker_parser.<module>")``. Nothing is
printed until the host calls :func:`configure_logging`; before that the package
root logger carries a ``NullHandler`` only. The CLI configures once per
process, deriving the level from ``-v``/``-q`` or ``BROKER_PARSER_LOG_LEVEL``.

Log records go to stderr so that command output on stdout stays clean.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "broker_parser"
LOG_LEVEL_ENV = "BROKER_PARSER_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
DEFAULT_LEVEL = logging.WARNING

# Marks the handler installed by configure_logging so reconfiguration replaces it.
_HANDLER_NAME = "broker_parser.stream"


def resolve_level(level: int | str | None = None) -> int:
    """Turn a level number, number string or level name into an ``int``.

    ``None`` (or an unrecognized name) falls back to ``BROKER_PARSER_LOG_LEVEL``
    and then to ``WARNING``.
    """

    if isinstance(level, int):
        return level
    if isinstance(level, str) and level.strip():
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        mapped = logging.getLevelNamesMapping().get(name)
        if mapped is not None:
            return mapped
    env_val = os.getenv(LOG_LEVEL_ENV)
    if env_val and env_val.strip() and env_val != level:
        return resolve_level(env_val)
    return DEFAULT_LEVEL


def level_from_verbosity(verbose: int = 0, *, quiet: bool = False) -> int | None:
    """Map CLI flags to a level: ``-q`` → ERROR, ``-v`` → INFO, ``-vv`` → DEBUG.

    Returns ``None`` when no flag was given so the environment decides.
    """

    if quiet:
        return logging.ERROR
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return None


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach one stream handler to the package root logger and set its level.

    Calling again replaces the handler from the previous call, so the level can
    be changed after startup. ``stream`` defaults to the current ``sys.stderr``.
    Returns the package root logger.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler) or h.get_name() == _HANDLER_NAME:
            logger.removeHandler(h)

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(resolved)
    # Records stop at the package logger; the host's root handlers don't see them twice.
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return ``logging.getLogger(name)``, keeping the package silent until configured."""

    root = logging.getLogger(PACKAGE_LOGGER)
    if not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = [
    "DEFAULT_LEVEL",
    "LOG_LEVEL_ENV",
    "configure_logging",
    "get_logger",
    "level_from_verbosity",
    "resolve_level",
]
