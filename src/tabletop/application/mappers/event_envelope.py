from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from tabletop.domain.order.entities import Order


def _serialize_event(
    *,
    event_type: str,
    occurred_at: datetime,
    restaurant_id: str,
    payload: dict[str, Any],
    trace_id: str | None,
    request_id: str | None,
) -> str:
    envelope = {
        "event_id": str(uuid4()),
        "event_type": event_type,
        "occurred_at": occurred_at.isoformat(),
        "request_id": request_id,
        "trace_id": trace_id,
        "restaurant_id": restaurant_id,
        "payload": payload,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def serialize_order_event(
    *,
    event_type: str,
    occurred_at: datetime,
    order: Order,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    return _serialize_event(
        event_type=event_type,
        occurred_at=occurred_at,
        restaurant_id=str(order.restaurant_id),
        trace_id=trace_id,
        request_id=request_id,
        payload={
            "orderId": str(order.order_id),
            "tableId": str(order.table_id),
            "tableNumber": order.table_number,
            "status": order.status.value,
            "totalMoney": {
                "amountCents": order.total.amount_cents,
                "currency": order.total.currency,
            },
            "createdAt": order.created_at.isoformat(),
            "lines": [
                {
                    "lineId": str(line.line_id),
                    "menuItemId": str(line.item_id),
                    "name": line.name,
                    "quantity": line.quantity,
                    "lineTotalCents": line.line_total.amount_cents,
                    "specialInstructions": line.special_instructions,
                }
                for line in order.lines
            ],
        },
    )


def serialize_waiter_call_event(
    *,
    occurred_at: datetime,
    restaurant_id: str,
    call_id: str,
    table_number: str,
    status: str,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    return _serialize_event(
        event_type=f"waiter_call.{status}",
        occurred_at=occurred_at,
        restaurant_id=restaurant_id,
        trace_id=trace_id,
        request_id=request_id,
        payload={
            "callId": call_id,
            "tableNumber": table_number,
            "status": status,
        },
    )
