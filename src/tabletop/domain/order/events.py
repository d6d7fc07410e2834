from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tabletop.domain.common.ids import OrderId, RestaurantId, TableId
from tabletop.domain.common.money import Money
from tabletop.domain.order.entities import OrderStatus


@dataclass(frozen=True)
class OrderPlaced:
    order_id: OrderId
    restaurant_id: RestaurantId
    table_id: TableId
    total: Money
    source: str
    occurred_at: datetime

    @property
    def event_type(self) -> str:
        return "order.placed"


@dataclass(frozen=True)
class OrderStatusChanged:
    order_id: OrderId
    restaurant_id: RestaurantId
    table_id: TableId
    from_status: OrderStatus
    to_status: OrderStatus
    occurred_at: datetime

    @property
    def event_type(self) -> str:
        return f"order.{self.to_status.value}"
