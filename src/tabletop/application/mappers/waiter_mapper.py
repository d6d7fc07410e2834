from __future__ import annotations

from tabletop.application.dto.responses import WaiterCallResponse
from tabletop.domain.waiter.entities import WaiterCall


def to_waiter_call_response(call: WaiterCall) -> WaiterCallResponse:
    return WaiterCallResponse(
        callId=str(call.call_id),
        restaurantId=str(call.restaurant_id),
        tableId=str(call.table_id),
        tableNumber=call.table_number,
        status=call.status.value,
        customerMessage=call.customer_message,
        responseMessage=call.response_message,
        createdAt=call.created_at,
        respondedAt=call.responded_at,
        resolvedAt=call.resolved_at,
    )
