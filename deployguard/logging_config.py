"""Structured logging setup for the command-line entry points.

Every record is emitted as one JSON object per line on stderr, carrying
``timestamp``, ``level``, ``logger`` and ``message`` plus any fields
passed through ``extra=``.  Human-facing summaries go through Rich on
stdout, so the two streams never interleave.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord has; anything else came from ``extra=``.
_RESERVED = set(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str = "INFO", *, verbose: bool = False) -> logging.Logger:
    """Install the JSON handler on the ``deployguard`` logger.

    ``verbose`` forces DEBUG.  Calling this again replaces the handler
    rather than stacking a second one.
    """
    logger = logging.getLogger("deployguard")
    for handler in list(logger.handlers):
        if getattr(handler, "_deployguard", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    handler._deployguard = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else level.upper())
    return logger
