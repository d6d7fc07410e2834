from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from tabletop.application.dto.requests import RespondWaiterCallRequest, WaiterCallRequest
from tabletop.application.dto.responses import WaiterCallEnvelope, WaiterCallListResponse
from tabletop.application.errors import InvalidInputError, NotFoundError
from tabletop.application.mappers.event_envelope import serialize_waiter_call_event
from tabletop.application.mappers.waiter_mapper import to_waiter_call_response
from tabletop.application.metrics.order_lifecycle import record_waiter_call
from tabletop.application.ports.publisher import EventPublisher
from tabletop.application.ports.repositories import TableRepository, WaiterCallRepository
from tabletop.application.use_cases.context import TenantContext, TraceContext
from tabletop.application.use_cases.place_order import (
    RestaurantMismatchError,
    TableNotFoundError,
    ensure_table_accepts_orders,
)
from tabletop.application.use_cases.publishing import publish_best_effort
from tabletop.domain.common.ids import TableId, WaiterCallId
from tabletop.domain.waiter.entities import (
    RESPONSE_MESSAGE_MAX_LENGTH,
    WaiterCall,
    WaiterCallStatus,
    sanitize_message,
)

STAFF_LIST_LIMIT = 50


class WaiterCallNotFoundError(NotFoundError):
    code = "WAITER_CALL_NOT_FOUND"


def _announce(
    publisher: EventPublisher,
    call: WaiterCall,
    occurred_at: datetime,
    trace_ctx: TraceContext,
) -> None:
    record_waiter_call(str(call.restaurant_id), call.status.value)
    message = serialize_waiter_call_event(
        occurred_at=occurred_at,
        restaurant_id=str(call.restaurant_id),
        call_id=str(call.call_id),
        table_number=call.table_number,
        status=call.status.value,
        trace_id=trace_ctx.trace_id,
        request_id=trace_ctx.request_id,
    )
    publish_best_effort(publisher, str(call.restaurant_id), message)


class CallWaiter:
    def __init__(
        self,
        table_repository: TableRepository,
        waiter_call_repository: WaiterCallRepository,
        publisher: EventPublisher,
    ) -> None:
        self._table_repository = table_repository
        self._waiter_call_repository = waiter_call_repository
        self._publisher = publisher

    def execute(
        self,
        request_dto: WaiterCallRequest,
        trace_ctx: TraceContext,
    ) -> WaiterCallEnvelope:
        if not request_dto.table_id:
            raise InvalidInputError("Table ID is required")

        table = self._table_repository.get_by_id(TableId(request_dto.table_id))
        if table is None:
            raise TableNotFoundError("Table not found", details={"tableId": request_dto.table_id})
        ensure_table_accepts_orders(table)
        if request_dto.restaurant_id and request_dto.restaurant_id != table.restaurant_id:
            raise RestaurantMismatchError("Table does not belong to the given restaurant")

        now = datetime.now(timezone.utc)
        call = WaiterCall(
            call_id=WaiterCallId(f"wcl_{uuid4().hex[:12]}"),
            restaurant_id=table.restaurant_id,
            table_id=table.table_id,
            table_number=table.table_number,
            status=WaiterCallStatus.OPEN,
            created_at=now,
            customer_message=sanitize_message(request_dto.message),
        )
        self._waiter_call_repository.add(call)
        _announce(self._publisher, call, now, trace_ctx)
        return WaiterCallEnvelope(call=to_waiter_call_response(call))


class GetWaiterCallStatus:
    def __init__(self, waiter_call_repository: WaiterCallRepository) -> None:
        self._waiter_call_repository = waiter_call_repository

    def execute(self, call_id: WaiterCallId, table_id: str | None) -> WaiterCallEnvelope:
        if not table_id:
            raise InvalidInputError("Table ID is required")
        call = self._waiter_call_repository.get_for_table(call_id, TableId(table_id))
        if call is None:
            raise WaiterCallNotFoundError("Waiter call not found")
        return WaiterCallEnvelope(call=to_waiter_call_response(call))


class ListWaiterCalls:
    def __init__(self, waiter_call_repository: WaiterCallRepository) -> None:
        self._waiter_call_repository = waiter_call_repository

    def execute(self, tenant: TenantContext, status: str | None = None) -> WaiterCallListResponse:
        status_filter = None
        if status:
            try:
                status_filter = WaiterCallStatus(status.strip().lower())
            except ValueError as exc:
                raise InvalidInputError(f"Invalid status: {status}") from exc

        calls = self._waiter_call_repository.list_for_restaurant(
            restaurant_id=tenant.restaurant_id,
            status=status_filter,
            limit=STAFF_LIST_LIMIT,
        )
        return WaiterCallListResponse(calls=[to_waiter_call_response(call) for call in calls])


class RespondToWaiterCall:
    def __init__(
        self,
        waiter_call_repository: WaiterCallRepository,
        publisher: EventPublisher,
    ) -> None:
        self._waiter_call_repository = waiter_call_repository
        self._publisher = publisher

    def execute(
        self,
        tenant: TenantContext,
        call_id: WaiterCallId,
        request_dto: RespondWaiterCallRequest,
        trace_ctx: TraceContext,
    ) -> WaiterCallEnvelope:
        response_message = sanitize_message(request_dto.response_text, RESPONSE_MESSAGE_MAX_LENGTH)
        if response_message is None:
            raise InvalidInputError("Response text is required")

        now = datetime.now(timezone.utc)
        call = self._waiter_call_repository.respond(
            call_id=call_id,
            restaurant_id=tenant.restaurant_id,
            response_message=response_message,
            now=now,
        )
        if call is None:
            raise WaiterCallNotFoundError("Waiter call not found")
        _announce(self._publisher, call, now, trace_ctx)
        return WaiterCallEnvelope(call=to_waiter_call_response(call))


class ResolveWaiterCall:
    def __init__(
        self,
        waiter_call_repository: WaiterCallRepository,
        publisher: EventPublisher,
    ) -> None:
        self._waiter_call_repository = waiter_call_repository
        self._publisher = publisher

    def execute(
        self,
        tenant: TenantContext,
        call_id: WaiterCallId,
        trace_ctx: TraceContext,
    ) -> WaiterCallEnvelope:
        now = datetime.now(timezone.utc)
        call = self._waiter_call_repository.resolve(
            call_id=call_id,
            restaurant_id=tenant.restaurant_id,
            now=now,
        )
        if call is None:
            raise WaiterCallNotFoundError("Waiter call not found")
        _announce(self._publisher, call, now, trace_ctx)
        return WaiterCallEnvelope(call=to_waiter_call_response(call))
