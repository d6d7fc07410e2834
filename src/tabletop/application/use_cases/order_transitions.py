from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from tabletop.application.dto.responses import OrderResponse
from tabletop.application.errors import ConflictError, NotFoundError
from tabletop.application.mappers.order_mapper import to_order_response
from tabletop.application.metrics.order_lifecycle import (
    record_order_status,
    record_time_to_accept,
    record_time_to_finish,
    record_transition,
)
from tabletop.application.ports.publisher import EventPublisher
from tabletop.application.ports.repositories import OrderRepository, OrderStatusConflictError
from tabletop.application.use_cases.context import TenantContext, TraceContext
from tabletop.application.use_cases.publishing import publish_order_event
from tabletop.domain.common.ids import OrderId
from tabletop.domain.order.entities import (
    Order,
    OrderStatus,
    OrderTransitionError,
    allowed_sources,
)
from tabletop.domain.order.events import OrderStatusChanged


class OrderNotFoundError(NotFoundError):
    code = "ORDER_NOT_FOUND"


class InvalidOrderTransitionError(ConflictError):
    code = "INVALID_ORDER_TRANSITION"


class OrderConflictError(ConflictError):
    code = "ORDER_CONFLICT"


class _OrderTransition:
    target: OrderStatus

    def __init__(self, order_repository: OrderRepository, publisher: EventPublisher) -> None:
        self._order_repository = order_repository
        self._publisher = publisher

    def _run(
        self,
        tenant: TenantContext,
        order_id: OrderId,
        trace_ctx: TraceContext,
        apply: Callable[[Order, datetime], Order],
    ) -> OrderResponse:
        order = self._load(tenant, order_id)
        if order.status == self.target:
            return to_order_response(order)

        now = datetime.now(timezone.utc)
        try:
            changed = apply(order, now)
        except OrderTransitionError as exc:
            raise InvalidOrderTransitionError(
                str(exc),
                details={"orderId": str(order_id), "status": order.status.value},
            ) from exc

        try:
            persisted_order = self._order_repository.transition(
                changed,
                from_statuses=allowed_sources(self.target),
            )
        except OrderStatusConflictError:
            current = self._order_repository.get(order_id, tenant.restaurant_id)
            if current is None:
                raise OrderNotFoundError("Order not found", details={"orderId": str(order_id)})
            if current.status == self.target:
                return to_order_response(current)
            raise OrderConflictError(
                "Order status changed concurrently",
                details={"orderId": str(order_id), "status": current.status.value},
            )

        event = OrderStatusChanged(
            order_id=persisted_order.order_id,
            restaurant_id=persisted_order.restaurant_id,
            table_id=persisted_order.table_id,
            from_status=order.status,
            to_status=self.target,
            occurred_at=now,
        )
        record_transition(from_status=event.from_status, to_status=event.to_status)
        record_order_status(persisted_order)
        self._observe_timing(persisted_order, now)
        publish_order_event(
            self._publisher,
            event_type=event.event_type,
            occurred_at=event.occurred_at,
            order=persisted_order,
            trace_ctx=trace_ctx,
        )
        return to_order_response(persisted_order)

    def _load(self, tenant: TenantContext, order_id: OrderId) -> Order:
        order = self._order_repository.get(order_id, tenant.restaurant_id)
        if order is None:
            raise OrderNotFoundError("Order not found", details={"orderId": str(order_id)})
        return order

    def _observe_timing(self, order: Order, now: datetime) -> None:
        return None


class AcceptOrder(_OrderTransition):
    target = OrderStatus.ACCEPTED

    def execute(
        self,
        tenant: TenantContext,
        order_id: OrderId,
        trace_ctx: TraceContext,
        preparation_time: int | None = None,
    ) -> OrderResponse:
        return self._run(
            tenant,
            order_id,
            trace_ctx,
            lambda order, now: order.accept(now, preparation_time=preparation_time),
        )

    def _observe_timing(self, order: Order, now: datetime) -> None:
        record_time_to_accept(order, now=now)


class RejectOrder(_OrderTransition):
    target = OrderStatus.REJECTED

    def execute(
        self,
        tenant: TenantContext,
        order_id: OrderId,
        trace_ctx: TraceContext,
        reason: str | None = None,
    ) -> OrderResponse:
        return self._run(
            tenant,
            order_id,
            trace_ctx,
            lambda order, now: order.reject(now, reason=reason),
        )


class StartCooking(_OrderTransition):
    target = OrderStatus.COOKING

    def execute(
        self,
        tenant: TenantContext,
        order_id: OrderId,
        trace_ctx: TraceContext,
    ) -> OrderResponse:
        return self._run(tenant, order_id, trace_ctx, lambda order, now: order.start_cooking(now))


class FinishOrder(_OrderTransition):
    target = OrderStatus.FINISHED

    def execute(
        self,
        tenant: TenantContext,
        order_id: OrderId,
        trace_ctx: TraceContext,
    ) -> OrderResponse:
        return self._run(tenant, order_id, trace_ctx, lambda order, now: order.finish(now))

    def _observe_timing(self, order: Order, now: datetime) -> None:
        record_time_to_finish(order, now=now)
