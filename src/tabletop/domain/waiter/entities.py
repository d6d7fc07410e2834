from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from tabletop.domain.common.ids import RestaurantId, TableId, WaiterCallId

CUSTOMER_MESSAGE_MAX_LENGTH = 280
RESPONSE_MESSAGE_MAX_LENGTH = 180


class WaiterCallStatus(str, Enum):
    OPEN = "open"
    RESPONDED = "responded"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class WaiterCall:
    call_id: WaiterCallId
    restaurant_id: RestaurantId
    table_id: TableId
    table_number: str
    status: WaiterCallStatus
    created_at: datetime
    customer_message: str | None = None
    response_message: str | None = None
    responded_at: datetime | None = None
    resolved_at: datetime | None = None


def sanitize_message(value: object, max_length: int = CUSTOMER_MESSAGE_MAX_LENGTH) -> str | None:
    if value is None:
        return None
    cleaned = str(value).strip()[:max_length]
    return cleaned or None
