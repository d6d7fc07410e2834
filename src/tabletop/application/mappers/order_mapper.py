from __future__ import annotations

from tabletop.application.dto.responses import OrderLineResponse, OrderResponse
from tabletop.application.mappers.money_mapper import to_money_response
from tabletop.domain.order.entities import Order


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        orderId=str(order.order_id),
        restaurantId=str(order.restaurant_id),
        tableId=str(order.table_id),
        tableNumber=order.table_number,
        status=order.status.value,
        customerName=order.customer_name,
        customerPhone=order.customer_phone,
        items=[
            OrderLineResponse(
                lineId=str(line.line_id),
                menuItemId=str(line.item_id),
                itemName=line.name,
                quantity=line.quantity,
                unitPrice=to_money_response(line.unit_price),
                totalPrice=to_money_response(line.line_total),
                specialInstructions=line.special_instructions,
            )
            for line in order.lines
        ],
        total=to_money_response(order.total),
        notes=order.notes,
        preparationTime=order.preparation_time,
        rejectionReason=order.rejection_reason,
        createdAt=order.created_at,
        acceptedAt=order.accepted_at,
        rejectedAt=order.rejected_at,
        cookingStartedAt=order.cooking_started_at,
        finishedAt=order.finished_at,
    )
