from __future__ import annotations

from tabletop.application.dto.responses import OrderListResponse
from tabletop.application.errors import InvalidInputError
from tabletop.application.mappers.order_mapper import to_order_response
from tabletop.application.ports.repositories import InvalidCursorError, OrderRepository
from tabletop.application.use_cases.context import TenantContext
from tabletop.domain.order.entities import OrderStatus

MAX_PAGE_SIZE = 200


class InvalidOrderStatusFilterError(InvalidInputError):
    code = "INVALID_ORDER_STATUS_FILTER"


class InvalidOrderCursorError(InvalidInputError):
    code = "INVALID_ORDER_CURSOR"


def parse_status_filter(status: str | None) -> OrderStatus | None:
    if status is None or status.strip().lower() in ("", "all"):
        return None
    try:
        return OrderStatus(status.strip().lower())
    except ValueError as exc:
        raise InvalidOrderStatusFilterError(
            f"Invalid status: {status}",
            details={"allowed": [value.value for value in OrderStatus]},
        ) from exc


class ListOrders:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(
        self,
        tenant: TenantContext,
        status: str | None = None,
        limit: int = 50,
        cursor: str | None = None,
    ) -> OrderListResponse:
        status_filter = parse_status_filter(status)
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise InvalidInputError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

        try:
            orders, next_cursor = self._order_repository.list_for_restaurant(
                restaurant_id=tenant.restaurant_id,
                status=status_filter,
                limit=limit,
                cursor=cursor,
            )
        except InvalidCursorError as exc:
            raise InvalidOrderCursorError("Invalid cursor") from exc

        return OrderListResponse(
            orders=[to_order_response(order) for order in orders],
            nextCursor=next_cursor,
        )
