from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Query, status

from tabletop.api.dependencies.auth import require_tenant
from tabletop.api.dependencies.tracing import current_trace_context
from tabletop.application.dto.requests import (
    AcceptOrderRequest,
    PlaceManualOrderRequest,
    PlaceOrderRequest,
    PrintOrderRequest,
    RejectOrderRequest,
)
from tabletop.application.dto.responses import (
    OrderEnvelope,
    OrderListResponse,
    OrderStatsResponse,
    PrintEnvelope,
)
from tabletop.application.use_cases.context import TenantContext
from tabletop.application.use_cases.list_orders import ListOrders
from tabletop.application.use_cases.order_stats import GetOrderStats
from tabletop.application.use_cases.order_transitions import (
    AcceptOrder,
    FinishOrder,
    RejectOrder,
    StartCooking,
)
from tabletop.application.use_cases.place_manual_order import PlaceManualOrder
from tabletop.application.use_cases.place_order import PlaceOrder
from tabletop.application.use_cases.print_order import PrintOrder
from tabletop.domain.common.ids import OrderId
from tabletop.infrastructure.db.repositories.kitchen_repo import SqlAlchemyPrinterRepository
from tabletop.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from tabletop.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from tabletop.infrastructure.db.repositories.restaurant_repo import SqlAlchemyRestaurantRepository
from tabletop.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from tabletop.infrastructure.db.session import store_currency
from tabletop.infrastructure.messaging.redis_publisher import RedisEventPublisher
from tabletop.infrastructure.printing.plain_text import PlainTextReceiptRenderer

router = APIRouter(prefix="/api/orders", tags=["orders"])


def _place_order_use_case() -> PlaceOrder:
    return PlaceOrder(
        menu_repository=SqlAlchemyMenuRepository(),
        table_repository=SqlAlchemyTableRepository(),
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
        currency=store_currency(),
    )


def _place_manual_order_use_case() -> PlaceManualOrder:
    return PlaceManualOrder(
        menu_repository=SqlAlchemyMenuRepository(),
        table_repository=SqlAlchemyTableRepository(),
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
        currency=store_currency(),
    )


def _list_orders_use_case() -> ListOrders:
    return ListOrders(order_repository=SqlAlchemyOrderRepository())


def _order_stats_use_case() -> GetOrderStats:
    return GetOrderStats(order_repository=SqlAlchemyOrderRepository())


def _accept_order_use_case() -> AcceptOrder:
    return AcceptOrder(
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
    )


def _reject_order_use_case() -> RejectOrder:
    return RejectOrder(
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
    )


def _start_cooking_use_case() -> StartCooking:
    return StartCooking(
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
    )


def _finish_order_use_case() -> FinishOrder:
    return FinishOrder(
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
    )


def _print_order_use_case() -> PrintOrder:
    return PrintOrder(
        order_repository=SqlAlchemyOrderRepository(),
        printer_repository=SqlAlchemyPrinterRepository(),
        restaurant_repository=SqlAlchemyRestaurantRepository(),
        renderer=PlainTextReceiptRenderer(),
    )


@router.post("", response_model=OrderEnvelope, status_code=status.HTTP_201_CREATED)
def place_order(request_dto: PlaceOrderRequest) -> OrderEnvelope:
    order = _place_order_use_case().execute(
        request_dto=request_dto,
        trace_ctx=current_trace_context(),
    )
    return OrderEnvelope(message="Order placed successfully", order=order)


@router.post("/manual", response_model=OrderEnvelope, status_code=status.HTTP_201_CREATED)
def place_manual_order(
    request_dto: PlaceManualOrderRequest,
    tenant: TenantContext = Depends(require_tenant),
) -> OrderEnvelope:
    order = _place_manual_order_use_case().execute(
        tenant=tenant,
        request_dto=request_dto,
        trace_ctx=current_trace_context(),
    )
    return OrderEnvelope(message="Manual order created successfully", order=order)


@router.get("/status", response_model=OrderListResponse)
@router.get("/status/{order_status}", response_model=OrderListResponse)
def list_orders(
    order_status: str | None = None,
    limit: int = Query(default=50),
    cursor: str | None = Query(default=None),
    tenant: TenantContext = Depends(require_tenant),
) -> OrderListResponse:
    return _list_orders_use_case().execute(
        tenant=tenant,
        status=order_status,
        limit=limit,
        cursor=cursor,
    )


@router.get("/stats", response_model=OrderStatsResponse)
def order_stats(
    day: str | None = Query(default=None, alias="date"),
    tenant: TenantContext = Depends(require_tenant),
) -> OrderStatsResponse:
    return _order_stats_use_case().execute(tenant=tenant, day=day)


@router.put("/{order_id}/accept", response_model=OrderEnvelope)
def accept_order(
    order_id: str,
    request_dto: AcceptOrderRequest | None = Body(default=None),
    tenant: TenantContext = Depends(require_tenant),
) -> OrderEnvelope:
    order = _accept_order_use_case().execute(
        tenant=tenant,
        order_id=OrderId(order_id),
        trace_ctx=current_trace_context(),
        preparation_time=request_dto.preparation_time if request_dto else None,
    )
    return OrderEnvelope(message="Order accepted", order=order)


@router.put("/{order_id}/reject", response_model=OrderEnvelope)
def reject_order(
    order_id: str,
    request_dto: RejectOrderRequest | None = Body(default=None),
    tenant: TenantContext = Depends(require_tenant),
) -> OrderEnvelope:
    order = _reject_order_use_case().execute(
        tenant=tenant,
        order_id=OrderId(order_id),
        trace_ctx=current_trace_context(),
        reason=request_dto.reason if request_dto else None,
    )
    return OrderEnvelope(message="Order rejected", order=order)


@router.put("/{order_id}/start-cooking", response_model=OrderEnvelope)
def start_cooking(
    order_id: str,
    tenant: TenantContext = Depends(require_tenant),
) -> OrderEnvelope:
    order = _start_cooking_use_case().execute(
        tenant=tenant,
        order_id=OrderId(order_id),
        trace_ctx=current_trace_context(),
    )
    return OrderEnvelope(message="Order is now cooking", order=order)


@router.put("/{order_id}/finish", response_model=OrderEnvelope)
def finish_order(
    order_id: str,
    tenant: TenantContext = Depends(require_tenant),
) -> OrderEnvelope:
    order = _finish_order_use_case().execute(
        tenant=tenant,
        order_id=OrderId(order_id),
        trace_ctx=current_trace_context(),
    )
    return OrderEnvelope(message="Order finished", order=order)


@router.post("/{order_id}/print", response_model=PrintEnvelope)
def print_order(
    order_id: str,
    request_dto: PrintOrderRequest,
    tenant: TenantContext = Depends(require_tenant),
) -> PrintEnvelope:
    return _print_order_use_case().execute(
        tenant=tenant,
        order_id=OrderId(order_id),
        printer_id=request_dto.printer_id,
    )
