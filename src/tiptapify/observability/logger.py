"""Structured JSON logger for tiptapify.

Every log record is emitted as a single-line JSON object so batch imports
can be audited by log aggregation pipelines without additional parsing.

Typical structured output::

    {"ts": "2025-07-01T12:00:00.123+00:00", "level": "WARNING",
     "logger": "tiptapify.synology", "message": "attachment upload failed",
     "op": "upload_attachment", "name": "scan.pdf", "error": "disk full"}

One handler is attached to the ``tiptapify`` package logger; module loggers
such as ``tiptapify.exporter`` carry no handler and propagate to it.

Usage::

    from tiptapify.observability import configure_logging, get_logger

    log = get_logger("tiptapify.synology")
    log.info("archive imported", extra={"extra_fields": {"notes": 12}})

    # Route package output elsewhere, or change its level
    configure_logging(level="WARNING", stream=sys.stdout)
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any

PACKAGE_LOGGER = "tiptapify"


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    The formatter produces a JSON object with the following guaranteed keys:

    * ``ts`` -- ISO-8601 UTC time the record was created, in milliseconds
    * ``level`` -- Python log level name (``DEBUG``, ``INFO``, ...)
    * ``logger`` -- Logger name
    * ``message`` -- Formatted log message

    Extra structured fields passed via ``extra={"extra_fields": {...}}`` are
    merged into the top-level object.  Note titles and file names are kept
    as written rather than ``\\u``-escaped.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_entry: dict[str, Any] = {
            "ts": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(
            record, "extra_fields", None
        )
        if extra_fields is not None:
            log_entry.update(extra_fields)

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


_handler: logging.Handler | None = None


def configure_logging(
    level: int | str = logging.INFO,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Attach the structured handler to the package logger.

    Calling it again replaces the handler installed by the previous call,
    so the package logger never holds more than one.

    Parameters
    ----------
    level:
        Minimum log level, as an ``int`` or a case-insensitive string.
    stream:
        Output stream for the handler.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Handler
        The installed handler.
    """
    global _handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        logger.removeHandler(_handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False

    _handler = handler
    return handler


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """Return the logger called *name* inside the ``tiptapify`` namespace.

    The first call configures the package logger with
    :func:`configure_logging` defaults.

    Raises
    ------
    ValueError
        If *name* is outside the ``tiptapify`` namespace, where records
        would never reach the structured handler.
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        raise ValueError(f"logger name must be within {PACKAGE_LOGGER!r}, got {name!r}")
    if _handler is None:
        configure_logging()
    return logging.getLogger(name)
