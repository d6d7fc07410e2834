from __future__ import annotations

import logging
from datetime import datetime

from tabletop.application.mappers.event_envelope import serialize_order_event
from tabletop.application.metrics.order_lifecycle import record_order_created
from tabletop.application.ports.publisher import EventPublisher, restaurant_channel
from tabletop.application.use_cases.context import TraceContext
from tabletop.domain.order.entities import Order
from tabletop.domain.order.events import OrderPlaced

logger = logging.getLogger(__name__)


def publish_best_effort(publisher: EventPublisher, restaurant_id: str, message: str) -> None:
    channel = restaurant_channel(restaurant_id)
    try:
        publisher.publish(channel=channel, message=message)
    except Exception:
        logger.warning("event_publish_failed", exc_info=True, extra={"channel": channel})


def publish_order_event(
    publisher: EventPublisher,
    event_type: str,
    occurred_at: datetime,
    order: Order,
    trace_ctx: TraceContext,
) -> None:
    message = serialize_order_event(
        event_type=event_type,
        occurred_at=occurred_at,
        order=order,
        trace_id=trace_ctx.trace_id,
        request_id=trace_ctx.request_id,
    )
    publish_best_effort(publisher, str(order.restaurant_id), message)


def announce_order_placed(
    publisher: EventPublisher,
    order: Order,
    source: str,
    trace_ctx: TraceContext,
) -> OrderPlaced:
    event = OrderPlaced(
        order_id=order.order_id,
        restaurant_id=order.restaurant_id,
        table_id=order.table_id,
        total=order.total,
        source=source,
        occurred_at=order.created_at,
    )
    record_order_created(order, source=event.source)
    publish_order_event(
        publisher,
        event_type=event.event_type,
        occurred_at=event.occurred_at,
        order=order,
        trace_ctx=trace_ctx,
    )
    return event
