from __future__ import annotations

from datetime import datetime, timezone

from prometheus_client import Counter, Histogram

from tabletop.domain.order.entities import Order, OrderStatus

ORDERS_TOTAL = Counter(
    "tabletop_orders_total",
    "Total number of orders observed by status.",
    ["restaurant_id", "status"],
)

ORDERS_PLACED_TOTAL = Counter(
    "tabletop_orders_placed_total",
    "Total number of orders placed by source.",
    ["restaurant_id", "source"],
)

ORDER_TRANSITION_TOTAL = Counter(
    "tabletop_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["from", "to"],
)

ORDER_ROLLBACK_TOTAL = Counter(
    "tabletop_order_rollback_total",
    "Order headers removed after their line items failed to persist.",
    ["outcome"],
)

ORDER_TIME_TO_ACCEPT_SECONDS = Histogram(
    "tabletop_order_time_to_accept_seconds",
    "Time between order placement and acceptance.",
)

ORDER_TIME_TO_FINISH_SECONDS = Histogram(
    "tabletop_order_time_to_finish_seconds",
    "Time between order placement and completion.",
)

WAITER_CALLS_TOTAL = Counter(
    "tabletop_waiter_calls_total",
    "Total number of waiter calls by status change.",
    ["restaurant_id", "status"],
)


def record_order_status(order: Order) -> None:
    ORDERS_TOTAL.labels(
        restaurant_id=str(order.restaurant_id),
        status=order.status.value,
    ).inc()


def record_order_created(order: Order, source: str) -> None:
    ORDERS_PLACED_TOTAL.labels(restaurant_id=str(order.restaurant_id), source=source).inc()
    record_order_status(order)


def record_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_rollback(outcome: str) -> None:
    ORDER_ROLLBACK_TOTAL.labels(outcome=outcome).inc()


def record_time_to_accept(order: Order, now: datetime | None = None) -> None:
    current = now or datetime.now(timezone.utc)
    ORDER_TIME_TO_ACCEPT_SECONDS.observe(max((current - order.created_at).total_seconds(), 0.0))


def record_time_to_finish(order: Order, now: datetime | None = None) -> None:
    current = now or datetime.now(timezone.utc)
    ORDER_TIME_TO_FINISH_SECONDS.observe(max((current - order.created_at).total_seconds(), 0.0))


def record_waiter_call(restaurant_id: str, status: str) -> None:
    WAITER_CALLS_TOTAL.labels(restaurant_id=restaurant_id, status=status).inc()
