from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from tabletop.domain.common.ids import MenuItemId, OrderId, OrderLineId, RestaurantId, TableId
from tabletop.domain.common.money import Money, sum_money

DEFAULT_REJECTION_REASON = "No reason provided"


class OrderStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    COOKING = "cooking"
    FINISHED = "finished"
    REJECTED = "rejected"


# target status -> statuses it may be entered from
_ALLOWED_SOURCES: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.ACCEPTED: frozenset({OrderStatus.PENDING}),
    OrderStatus.REJECTED: frozenset({OrderStatus.PENDING}),
    OrderStatus.COOKING: frozenset({OrderStatus.ACCEPTED}),
    OrderStatus.FINISHED: frozenset({OrderStatus.ACCEPTED, OrderStatus.COOKING}),
}


def allowed_sources(target: OrderStatus) -> frozenset[OrderStatus]:
    return _ALLOWED_SOURCES.get(target, frozenset())


@dataclass(frozen=True)
class OrderLine:
    line_id: OrderLineId
    item_id: MenuItemId
    name: str
    quantity: int
    unit_price: Money
    line_total: Money
    special_instructions: str | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        if self.unit_price.currency != self.line_total.currency:
            raise ValueError("line_total currency must match unit_price currency")
        if self.line_total.amount_cents != self.unit_price.amount_cents * self.quantity:
            raise ValueError("line_total must equal unit_price * quantity")


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    restaurant_id: RestaurantId
    table_id: TableId
    table_number: str
    status: OrderStatus
    lines: list[OrderLine]
    total: Money
    created_at: datetime
    customer_name: str | None = None
    customer_phone: str | None = None
    notes: str | None = None
    preparation_time: int | None = None
    rejection_reason: str | None = None
    accepted_at: datetime | None = None
    rejected_at: datetime | None = None
    cooking_started_at: datetime | None = None
    finished_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.lines:
            return
        currency = self.lines[0].line_total.currency
        if self.total.currency != currency:
            raise ValueError("order total currency must match line currency")
        expected = sum_money([line.line_total for line in self.lines], currency)
        if self.total.amount_cents != expected.amount_cents:
            raise ValueError("order total must equal sum of line totals")

    @property
    def is_terminal(self) -> bool:
        return self.status in (OrderStatus.FINISHED, OrderStatus.REJECTED)

    def accept(self, now: datetime, preparation_time: int | None = None) -> Order:
        self._ensure_can_enter(OrderStatus.ACCEPTED)
        return replace(
            self,
            status=OrderStatus.ACCEPTED,
            accepted_at=now,
            preparation_time=preparation_time,
        )

    def reject(self, now: datetime, reason: str | None = None) -> Order:
        self._ensure_can_enter(OrderStatus.REJECTED)
        return replace(
            self,
            status=OrderStatus.REJECTED,
            rejected_at=now,
            rejection_reason=(reason or "").strip() or DEFAULT_REJECTION_REASON,
        )

    def start_cooking(self, now: datetime) -> Order:
        self._ensure_can_enter(OrderStatus.COOKING)
        return replace(self, status=OrderStatus.COOKING, cooking_started_at=now)

    def finish(self, now: datetime) -> Order:
        self._ensure_can_enter(OrderStatus.FINISHED)
        return replace(self, status=OrderStatus.FINISHED, finished_at=now)

    def _ensure_can_enter(self, target: OrderStatus) -> None:
        if self.status not in allowed_sources(target):
            raise OrderTransitionError(
                f"cannot move order from status={self.status.value} to status={target.value}"
            )


def create_pending_order(
    order_id: OrderId,
    restaurant_id: RestaurantId,
    table_id: TableId,
    table_number: str,
    lines: list[OrderLine],
    now: datetime,
    currency: str,
    total: Money | None = None,
    customer_name: str | None = None,
    customer_phone: str | None = None,
    notes: str | None = None,
) -> Order:
    if lines:
        total = sum_money([line.line_total for line in lines], currency)
    elif total is None or total.amount_cents <= 0:
        raise ValueError("an order without lines needs a positive explicit total")

    return Order(
        order_id=order_id,
        restaurant_id=restaurant_id,
        table_id=table_id,
        table_number=table_number,
        status=OrderStatus.PENDING,
        lines=lines,
        total=total,
        created_at=now,
        customer_name=customer_name,
        customer_phone=customer_phone,
        notes=notes,
    )


class OrderTransitionError(Exception):
    pass
