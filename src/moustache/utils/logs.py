"""Structured logging helpers.

Moustache logs through the standard library. The package logger
(``logging.getLogger("moustache")``) carries a ``NullHandler``, so nothing is
emitted until the host application configures logging.

Every event is logged with a ``%(field)s`` style message and a dict of
fields. The same dict is attached to the record as ``record.moustache`` so
structured handlers can read the fields without parsing the message.

Example:
    >>> log_event(logger, logging.WARNING, 'Partial not found: "%(name)s"', name="nav")

"""

from __future__ import annotations

import logging
from typing import Any

LOGGER_NAME = "moustache"

logger = logging.getLogger(LOGGER_NAME)

LoggerLike = logging.Logger | logging.LoggerAdapter


def is_logger(value: Any) -> bool:
    """Return True for objects accepted as an Engine logger."""
    return isinstance(value, (logging.Logger, logging.LoggerAdapter))


def log_event(target: LoggerLike, level: int, message: str, **fields: Any) -> None:
    """Log a structured event if the level is enabled.

    Adapters are unwrapped through their ``process()`` so their message
    rewriting and ``extra`` still apply; ``record.moustache`` is always set.
    """
    if not target.isEnabledFor(level):
        return
    extra: dict[str, Any] = {"moustache": fields}
    while isinstance(target, logging.LoggerAdapter):
        message, kwargs = target.process(message, {"extra": extra})
        extra = {**(kwargs.get("extra") or {}), "moustache": fields}
        target = target.logger
    if fields:
        target.log(level, message, fields, extra=extra)
    else:
        target.log(level, message, extra=extra)
