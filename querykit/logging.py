"""Logger helpers.

Every module logs through ``get_logger(__name__)`` so that records end up
under the ``querykit`` namespace. Messages are written as an event name
followed by ``key=value`` pairs.
"""

from __future__ import annotations

import logging

ROOT_LOGGER_NAME = "querykit"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def get_logger(name: str) -> logging.Logger:
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Attach a single stream handler to the package logger.

    Safe to call more than once; the handler is only installed the first time.
    """
    from querykit.config import settings

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    resolved = level if level is not None else settings.log_level
    if isinstance(resolved, str):
        resolved = logging.getLevelName(resolved.upper())
    logger.setLevel(resolved)
    if not any(getattr(handler, "_querykit", False) for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._querykit = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
