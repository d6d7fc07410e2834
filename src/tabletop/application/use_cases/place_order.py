from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from tabletop.application.dto.requests import PlaceOrderRequest
from tabletop.application.dto.responses import OrderResponse
from tabletop.application.errors import ConflictError, InvalidInputError, NotFoundError
from tabletop.application.mappers.order_mapper import to_order_response
from tabletop.application.ports.publisher import EventPublisher
from tabletop.application.ports.repositories import (
    MenuRepository,
    OrderRepository,
    TableRepository,
)
from tabletop.application.use_cases.context import TraceContext
from tabletop.application.use_cases.order_composition import (
    persist_order_with_lines,
    price_order_lines,
)
from tabletop.application.use_cases.publishing import announce_order_placed
from tabletop.domain.common.ids import OrderId, TableId
from tabletop.domain.order.entities import create_pending_order
from tabletop.domain.table.entities import Table, TableInactiveError as DomainTableInactiveError


class TableNotFoundError(NotFoundError):
    code = "TABLE_NOT_FOUND"


class TableInactiveError(InvalidInputError):
    code = "TABLE_INACTIVE"


class RestaurantMismatchError(ConflictError):
    code = "RESTAURANT_MISMATCH"


def new_order_id() -> OrderId:
    return OrderId(f"ord_{uuid4().hex[:12]}")


def ensure_table_accepts_orders(table: Table) -> None:
    try:
        table.ensure_active()
    except DomainTableInactiveError as exc:
        raise TableInactiveError(
            "Table is not active",
            details={"tableId": str(table.table_id)},
        ) from exc


class PlaceOrder:
    """Customer-facing order creation; the table decides which tenant is billed."""

    def __init__(
        self,
        menu_repository: MenuRepository,
        table_repository: TableRepository,
        order_repository: OrderRepository,
        publisher: EventPublisher,
        currency: str,
    ) -> None:
        self._menu_repository = menu_repository
        self._table_repository = table_repository
        self._order_repository = order_repository
        self._publisher = publisher
        self._currency = currency

    def execute(self, request_dto: PlaceOrderRequest, trace_ctx: TraceContext) -> OrderResponse:
        if not request_dto.table_id or not request_dto.items:
            raise InvalidInputError("Table ID and at least one item are required")

        table = self._table_repository.get_by_id(TableId(request_dto.table_id))
        if table is None:
            raise TableNotFoundError(
                "Table not found",
                details={"tableId": request_dto.table_id},
            )
        ensure_table_accepts_orders(table)
        if request_dto.restaurant_id and request_dto.restaurant_id != table.restaurant_id:
            raise RestaurantMismatchError("Table does not belong to the given restaurant")

        lines = price_order_lines(
            menu_repository=self._menu_repository,
            restaurant_id=table.restaurant_id,
            requested=request_dto.items,
        )

        now = datetime.now(timezone.utc)
        order = create_pending_order(
            order_id=new_order_id(),
            restaurant_id=table.restaurant_id,
            table_id=table.table_id,
            table_number=table.table_number,
            lines=lines,
            now=now,
            currency=self._currency,
            customer_name=request_dto.customer_name,
            customer_phone=request_dto.customer_phone,
            notes=request_dto.notes,
        )
        persisted_order = persist_order_with_lines(self._order_repository, order)

        announce_order_placed(self._publisher, persisted_order, "customer", trace_ctx)
        return to_order_response(persisted_order)
