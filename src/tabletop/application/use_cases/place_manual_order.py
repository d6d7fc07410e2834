from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from tabletop.application.dto.requests import PlaceManualOrderRequest
from tabletop.application.dto.responses import OrderResponse
from tabletop.application.errors import InvalidInputError
from tabletop.application.mappers.order_mapper import to_order_response
from tabletop.application.ports.publisher import EventPublisher
from tabletop.application.ports.repositories import (
    MenuRepository,
    OrderRepository,
    TableRepository,
)
from tabletop.application.use_cases.context import TenantContext, TraceContext
from tabletop.application.use_cases.order_composition import (
    persist_order_with_lines,
    price_order_lines,
)
from tabletop.application.use_cases.place_order import (
    TableNotFoundError,
    ensure_table_accepts_orders,
    new_order_id,
)
from tabletop.application.use_cases.publishing import announce_order_placed
from tabletop.domain.common.ids import TableId
from tabletop.domain.common.money import Money
from tabletop.domain.order.entities import create_pending_order
from tabletop.domain.table.entities import Table

MANUAL_ORDER_NOTE = "Manual order"


def build_manual_notes(summary: str | None, payment_method: str | None) -> str:
    parts = [MANUAL_ORDER_NOTE]
    if summary and summary.strip():
        parts.append(summary.strip())
    if payment_method and payment_method.strip():
        parts.append(f"Payment: {payment_method.strip()}")
    return " • ".join(parts)


def _explicit_total(amount: Decimal | None, currency: str) -> Money:
    try:
        if amount is None or not amount.is_finite() or amount <= 0:
            raise InvalidInputError("Total amount must be greater than zero")
        money = Money.from_decimal(amount, currency)
    except InvalidOperation as exc:
        raise InvalidInputError("Total amount must be greater than zero") from exc
    # sub-cent amounts round down to nothing
    if money.amount_cents <= 0:
        raise InvalidInputError("Total amount must be greater than zero")
    return money


class PlaceManualOrder:
    """Staff-entered order for the authenticated tenant's own table."""

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

    def execute(
        self,
        tenant: TenantContext,
        request_dto: PlaceManualOrderRequest,
        trace_ctx: TraceContext,
    ) -> OrderResponse:
        table = self._find_table(tenant, request_dto)
        ensure_table_accepts_orders(table)

        lines = price_order_lines(
            menu_repository=self._menu_repository,
            restaurant_id=tenant.restaurant_id,
            requested=request_dto.items,
            enforce_availability=False,
        )
        total = None if lines else _explicit_total(request_dto.total_amount, self._currency)

        order = create_pending_order(
            order_id=new_order_id(),
            restaurant_id=tenant.restaurant_id,
            table_id=table.table_id,
            table_number=table.table_number,
            lines=lines,
            now=datetime.now(timezone.utc),
            currency=self._currency,
            total=total,
            customer_name=request_dto.customer_name,
            notes=build_manual_notes(request_dto.summary, request_dto.payment_method),
        )
        persisted_order = persist_order_with_lines(self._order_repository, order)

        announce_order_placed(self._publisher, persisted_order, "manual", trace_ctx)
        return to_order_response(persisted_order)

    def _find_table(self, tenant: TenantContext, request_dto: PlaceManualOrderRequest) -> Table:
        table_number = (
            str(request_dto.table_number).strip() if request_dto.table_number is not None else ""
        )
        if request_dto.table_id:
            table = self._table_repository.get(
                table_id=TableId(request_dto.table_id),
                restaurant_id=tenant.restaurant_id,
            )
        elif table_number:
            table = self._table_repository.get_by_number(
                table_number=table_number,
                restaurant_id=tenant.restaurant_id,
            )
        else:
            raise InvalidInputError("Table ID or table number is required")

        if table is None:
            raise TableNotFoundError(
                "Table not found",
                details={"tableId": request_dto.table_id, "tableNumber": table_number or None},
            )
        return table
