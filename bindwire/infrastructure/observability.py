"""Structured Logging — JSON formatter and setup for client-side observability.

Invariants:
    - All logs include timestamp (record creation time), level, logger name, and message
    - Pipeline extra fields (operation, request_id, elapsed_ms, ...) surfaced when present
    - A logged BindwireError is nested under "error" as its to_dict() form;
      the traceback stays under "exception"
    - JSON format by default, human-readable when fmt != "json"

Design Decisions:
    - A library never configures logging on import: setup_logging is called by
      create_item_service only when settings.configure_logging is on
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any

from bindwire.core.errors import BindwireError

EXTRA_FIELDS = (
    "operation", "request_id", "elapsed_ms", "status_code",
    "error_code", "item_count", "anchor_mailbox",
)


def pipeline_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Extra fields attached by the pipeline via `extra=`, skipping unset ones."""
    return {
        key: getattr(record, key)
        for key in EXTRA_FIELDS
        if getattr(record, key, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record: base fields, pipeline fields, error details."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **pipeline_fields(record),
        }
        if record.exc_info:
            error = record.exc_info[1]
            if isinstance(error, BindwireError):
                payload["error"] = error.to_dict()
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Attach one stream handler to the bindwire logger and return it."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    package_logger = logging.getLogger("bindwire")
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
