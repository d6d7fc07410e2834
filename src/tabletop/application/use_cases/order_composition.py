from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import uuid4

from tabletop.application.dto.requests import OrderItemRequest
from tabletop.application.errors import InternalError, InvalidInputError, NotFoundError
from tabletop.application.metrics.order_lifecycle import record_rollback
from tabletop.application.ports.repositories import MenuRepository, OrderRepository
from tabletop.domain.common.ids import MenuItemId, OrderLineId, RestaurantId
from tabletop.domain.order.entities import Order, OrderLine

logger = logging.getLogger(__name__)


class MenuItemNotFoundError(NotFoundError):
    code = "MENU_ITEM_NOT_FOUND"


class MenuItemUnavailableError(InvalidInputError):
    code = "MENU_ITEM_UNAVAILABLE"


class OrderPersistenceError(InternalError):
    code = "ORDER_PERSISTENCE"


def new_line_id() -> OrderLineId:
    return OrderLineId(f"orl_{uuid4().hex[:12]}")


def price_order_lines(
    menu_repository: MenuRepository,
    restaurant_id: RestaurantId,
    requested: Iterable[OrderItemRequest],
    enforce_availability: bool = True,
) -> list[OrderLine]:
    """Price each requested line against the restaurant's own menu.

    Name and unit price are captured by value so later menu edits never change
    an existing order.
    """
    lines: list[OrderLine] = []
    for request_line in requested:
        if not request_line.menu_item_id:
            raise InvalidInputError("Each item requires a menuItemId")
        if request_line.quantity < 1:
            raise InvalidInputError(
                "Quantity must be at least 1",
                details={"menuItemId": request_line.menu_item_id},
            )

        menu_item = menu_repository.get_item(
            item_id=MenuItemId(request_line.menu_item_id),
            restaurant_id=restaurant_id,
        )
        if menu_item is None:
            raise MenuItemNotFoundError(
                f"Menu item {request_line.menu_item_id} not found",
                details={"menuItemId": request_line.menu_item_id},
            )
        if enforce_availability and not menu_item.is_available:
            raise MenuItemUnavailableError(
                f"Menu item {menu_item.name} is not available",
                details={"menuItemId": request_line.menu_item_id},
            )

        lines.append(
            OrderLine(
                line_id=new_line_id(),
                item_id=menu_item.item_id,
                name=menu_item.name,
                quantity=request_line.quantity,
                unit_price=menu_item.price_money,
                line_total=menu_item.price_money.times(request_line.quantity),
                special_instructions=request_line.special_instructions,
            )
        )
    return lines


def persist_order_with_lines(order_repository: OrderRepository, order: Order) -> Order:
    """Write the order header and its lines as one logical unit.

    The store gives no multi-statement transaction here, so a failed line
    insert is compensated by deleting the header. A crash between the two
    writes can still leave a header without lines; the failed-compensation
    path logs the orphan id for manual cleanup.
    """
    order_repository.add(order)
    if order.lines:
        try:
            order_repository.add_lines(order, order.lines)
        except Exception as exc:
            try:
                order_repository.delete(order.order_id, order.restaurant_id)
            except Exception:
                record_rollback("failed")
                logger.exception(
                    "order_rollback_failed",
                    extra={"order_id": str(order.order_id)},
                )
            else:
                record_rollback("completed")
                logger.warning(
                    "order_rolled_back",
                    extra={"order_id": str(order.order_id)},
                )
            raise OrderPersistenceError(
                "Failed to create order",
                details={"orderId": str(order.order_id)},
            ) from exc

    stored = order_repository.get(order.order_id, order.restaurant_id)
    if stored is None:
        raise OrderPersistenceError(
            "Failed to load created order",
            details={"orderId": str(order.order_id)},
        )
    return stored
