from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tabletop.api.middleware.request_id import request_id_context
from tabletop.infrastructure.observability.logging_config import JsonFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="tabletop.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="order_rollback_failed %s",
        args=("ord_1",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_emits_known_extras_and_request_id() -> None:
    token = request_id_context.set("req-7")
    try:
        line = JsonFormatter(service_name="tabletop-test").format(
            _record(order_id="ord_1", restaurant_id="rst_001", password="nope")
        )
    finally:
        request_id_context.reset(token)

    payload = json.loads(line)
    assert payload["message"] == "order_rollback_failed ord_1"
    assert payload["level"] == "WARNING"
    assert payload["service"] == "tabletop-test"
    assert payload["request_id"] == "req-7"
    assert payload["order_id"] == "ord_1"
    assert payload["restaurant_id"] == "rst_001"
    assert payload["trace_id"] is None
    assert "password" not in payload


def test_json_formatter_includes_exception_text() -> None:
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()

    payload = json.loads(JsonFormatter().format(record))

    assert "ValueError: boom" in payload["exception"]
    assert payload["service"] == "tabletop-backend"
