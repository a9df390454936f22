"""Structured JSON logger for deltamd.

Every log record is emitted as a single-line JSON object so that hosts
embedding the converter can ship editor diagnostics to their log pipeline
without additional parsing.

Typical structured output::

    {"ts": "2026-03-01T12:00:00.123456+00:00", "level": "WARNING",
     "logger": "deltamd.converter", "message": "falling back to plain text",
     "direction": "delta_to_markdown", "operations": 12}

Usage::

    from deltamd.observability import get_logger, log_event

    log = get_logger("deltamd.converter")
    log_event(log, logging.INFO, "delta converted", operations=12)
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Guaranteed keys are ``ts`` (ISO-8601 UTC), ``level``, ``logger`` and
    ``message``.  Fields passed through ``extra={"extra_fields": {...}}``
    are merged into the top-level object; ``exception`` and ``stack_info``
    appear when the record carries them.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(record, "extra_fields", None)
        if extra_fields is not None:
            entry.update(extra_fields)

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str)


# One handler per logger name so that ``get_logger`` stays idempotent when
# several converter modules ask for the same logger.
_configured_loggers: set[str] = set()


def get_logger(
    name: str = "deltamd",
    *,
    level: int | str = logging.DEBUG,
    stream: Any | None = None,
) -> logging.Logger:
    """Get or create a structured JSON logger.

    Parameters
    ----------
    name:
        Logger name.  Converter modules use ``"deltamd.converter"``, the
        editor adapter ``"deltamd.adapter"``; both ask for ``WARNING`` so
        a successful conversion writes nothing.  Hosts lower the level
        with ``logging.getLogger(name).setLevel(...)``.
    level:
        Minimum log level, as an ``int`` or a case-insensitive name.
    stream:
        Output stream for the handler.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        A logger with a :class:`StructuredFormatter` handler attached.
        Repeated calls with the same *name* return the same logger and do
        **not** add duplicate handlers.
    """
    logger = logging.getLogger(name)

    if name not in _configured_loggers:
        resolved_level = (
            logging.getLevelName(level.upper())
            if isinstance(level, str)
            else level
        )
        logger.setLevel(resolved_level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.propagate = False

        _configured_loggers.add(name)

    return logger


def log_event(
    logger: logging.Logger,
    level: int,
    message: str,
    *,
    exc_info: bool = False,
    **fields: Any,
) -> None:
    """Log *message* with *fields* merged into the JSON record."""
    logger.log(level, message, exc_info=exc_info, extra={"extra_fields": fields})
