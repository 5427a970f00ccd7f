"""Logging setup for SurrealKit processes.

Two modes are supported:

* human-readable lines (the default), and
* one JSON object per line for log aggregators, enabled with
  ``SURREALKIT_STRUCTURED_LOGGING=true``.

Output schema per line in structured mode::

    {
        "timestamp": "2025-05-15T12:34:56.789012+00:00",
        "level": "INFO",
        "logger": "surrealkit.migration.sync",
        "message": "Applied database/schema/user.surql",
        "context": { ... },          // present when logged with extra={"context": ...}
        "exc_info": "Traceback ..."  // present only on exceptions
    }
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import UTC, datetime
from typing import Any, TextIO

TEXT_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context is not None:
            payload["context"] = context

        if record.exc_info and record.exc_info[0] is not None:
            payload["exc_info"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(
    structured: bool = False,
    debug: bool = False,
    *,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Replace the root logger's handlers with a single stream handler.

    Parameters
    ----------
    structured:
        Emit JSON lines through :class:`JSONFormatter` instead of text.
    debug:
        Lower the root level from ``INFO`` to ``DEBUG``.
    stream:
        Destination stream; defaults to ``sys.stderr`` so that stdout stays
        free for machine-readable command output.

    Returns
    -------
    logging.Handler
        The installed handler.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    if structured:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)
    return handler
