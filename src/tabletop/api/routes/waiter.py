from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from tabletop.api.dependencies.auth import require_tenant
from tabletop.api.dependencies.tracing import current_trace_context
from tabletop.application.dto.requests import RespondWaiterCallRequest, WaiterCallRequest
from tabletop.application.dto.responses import WaiterCallEnvelope, WaiterCallListResponse
from tabletop.application.use_cases.context import TenantContext
from tabletop.application.use_cases.waiter_calls import (
    CallWaiter,
    GetWaiterCallStatus,
    ListWaiterCalls,
    RespondToWaiterCall,
    ResolveWaiterCall,
)
from tabletop.domain.common.ids import WaiterCallId
from tabletop.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from tabletop.infrastructure.db.repositories.waiter_repo import SqlAlchemyWaiterCallRepository
from tabletop.infrastructure.messaging.redis_publisher import RedisEventPublisher

router = APIRouter(prefix="/api/waiter", tags=["waiter"])


def _call_waiter_use_case() -> CallWaiter:
    return CallWaiter(
        table_repository=SqlAlchemyTableRepository(),
        waiter_call_repository=SqlAlchemyWaiterCallRepository(),
        publisher=RedisEventPublisher(),
    )


def _waiter_call_repository() -> SqlAlchemyWaiterCallRepository:
    return SqlAlchemyWaiterCallRepository()


@router.post("/call", response_model=WaiterCallEnvelope, status_code=status.HTTP_201_CREATED)
def call_waiter(request_dto: WaiterCallRequest) -> WaiterCallEnvelope:
    return _call_waiter_use_case().execute(request_dto, trace_ctx=current_trace_context())


@router.get("/call/{call_id}", response_model=WaiterCallEnvelope)
def waiter_call_status(
    call_id: str,
    table_id: str | None = Query(default=None, alias="tableId"),
) -> WaiterCallEnvelope:
    return GetWaiterCallStatus(_waiter_call_repository()).execute(WaiterCallId(call_id), table_id)


@router.get("/calls", response_model=WaiterCallListResponse)
def list_waiter_calls(
    call_status: str | None = Query(default=None, alias="status"),
    tenant: TenantContext = Depends(require_tenant),
) -> WaiterCallListResponse:
    return ListWaiterCalls(_waiter_call_repository()).execute(tenant, call_status)


@router.put("/calls/{call_id}/respond", response_model=WaiterCallEnvelope)
def respond_to_call(
    call_id: str,
    request_dto: RespondWaiterCallRequest,
    tenant: TenantContext = Depends(require_tenant),
) -> WaiterCallEnvelope:
    use_case = RespondToWaiterCall(_waiter_call_repository(), publisher=RedisEventPublisher())
    return use_case.execute(
        tenant,
        WaiterCallId(call_id),
        request_dto,
        trace_ctx=current_trace_context(),
    )


@router.put("/calls/{call_id}/resolve", response_model=WaiterCallEnvelope)
def resolve_call(
    call_id: str,
    tenant: TenantContext = Depends(require_tenant),
) -> WaiterCallEnvelope:
    use_case = ResolveWaiterCall(_waiter_call_repository(), publisher=RedisEventPublisher())
    return use_case.execute(tenant, WaiterCallId(call_id), trace_ctx=current_trace_context())
