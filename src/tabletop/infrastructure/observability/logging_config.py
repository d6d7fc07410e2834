from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

from opentelemetry import trace

from tabletop.api.middleware.request_id import get_request_id

DEFAULT_SERVICE_NAME = "tabletop-backend"

# keys accepted through ``extra=``; anything else stays off the JSON line
EXTRA_FIELDS = (
    "method",
    "path",
    "status_code",
    "duration_ms",
    "order_id",
    "restaurant_id",
    "channel",
    "columns",
    "error_code",
)

_LOGGING_CONFIGURED = False


def _trace_fields() -> dict[str, str | None]:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return {"trace_id": None, "span_id": None}
    return {
        "trace_id": format(span_context.trace_id, "032x"),
        "span_id": format(span_context.span_id, "016x"),
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per record, stamped with request and trace ids."""

    def __init__(self, service_name: str = DEFAULT_SERVICE_NAME) -> None:
        super().__init__()
        self._service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self._service_name,
            "request_id": get_request_id(),
            **_trace_fields(),
        }
        for key in EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(service_name: str | None = None) -> None:
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        JsonFormatter(service_name or os.getenv("OTEL_SERVICE_NAME") or DEFAULT_SERVICE_NAME)
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    # AccessLogMiddleware already emits one line per request
    logging.getLogger("uvicorn.access").disabled = True

    _LOGGING_CONFIGURED = True
