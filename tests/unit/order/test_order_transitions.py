from __future__ import annotations

import json
import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tabletop.application.ports.repositories import OrderStatusConflictError
from tabletop.application.use_cases.context import TenantContext, TraceContext
from tabletop.application.use_cases.order_transitions import (
    AcceptOrder,
    FinishOrder,
    InvalidOrderTransitionError,
    OrderConflictError,
    OrderNotFoundError,
    RejectOrder,
    StartCooking,
)
from tabletop.domain.common.ids import MenuItemId, OrderId, OrderLineId, RestaurantId, TableId
from tabletop.domain.common.money import Money
from tabletop.domain.order.entities import (
    DEFAULT_REJECTION_REASON,
    Order,
    OrderLine,
    OrderStatus,
    create_pending_order,
)

TRACE = TraceContext(trace_id=None, request_id="req-7")
TENANT = TenantContext(restaurant_id=RestaurantId("rst_001"))
ORDER_ID = OrderId("ord_001")


class FakeOrderRepository:
    def __init__(self, order: Order) -> None:
        self.order = order
        self.transitions = 0
        # simulates another request winning the race before our update lands
        self.concurrent_status: OrderStatus | None = None

    def get(self, order_id, restaurant_id) -> Order | None:
        if order_id != self.order.order_id or restaurant_id != self.order.restaurant_id:
            return None
        return self.order

    def transition(self, order: Order, from_statuses: frozenset[OrderStatus]) -> Order:
        if self.concurrent_status is not None:
            self.order = replace(self.order, status=self.concurrent_status)
        if self.order.status not in from_statuses:
            raise OrderStatusConflictError("stale")
        self.transitions += 1
        self.order = order
        return order


class FakePublisher:
    def __init__(self) -> None:
        self.event_types: list[str] = []

    def publish(self, channel: str, message: str) -> None:
        self.event_types.append(json.loads(message)["event_type"])


def _order() -> Order:
    line = OrderLine(
        line_id=OrderLineId("orl_001"),
        item_id=MenuItemId("itm_001"),
        name="Burger",
        quantity=1,
        unit_price=Money(amount_cents=950, currency="USD"),
        line_total=Money(amount_cents=950, currency="USD"),
    )
    return create_pending_order(
        order_id=ORDER_ID,
        restaurant_id=RestaurantId("rst_001"),
        table_id=TableId("tbl_001"),
        table_number="T001",
        lines=[line],
        now=datetime(2026, 10, 19, 11, 50, tzinfo=timezone.utc),
        currency="USD",
    )


@pytest.fixture
def repository() -> FakeOrderRepository:
    return FakeOrderRepository(_order())


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


def test_accept_then_cook_then_finish(repository, publisher) -> None:
    accepted = AcceptOrder(repository, publisher).execute(
        TENANT, ORDER_ID, TRACE, preparation_time=20
    )
    cooking = StartCooking(repository, publisher).execute(TENANT, ORDER_ID, TRACE)
    finished = FinishOrder(repository, publisher).execute(TENANT, ORDER_ID, TRACE)

    assert accepted.status == "accepted"
    assert accepted.preparationTime == 20
    assert accepted.acceptedAt is not None
    assert cooking.status == "cooking"
    assert finished.status == "finished"
    assert finished.finishedAt is not None
    assert publisher.event_types == ["order.accepted", "order.cooking", "order.finished"]


def test_reject_without_reason_stores_default(repository, publisher) -> None:
    rejected = RejectOrder(repository, publisher).execute(TENANT, ORDER_ID, TRACE)

    assert rejected.status == "rejected"
    assert rejected.rejectionReason == DEFAULT_REJECTION_REASON
    assert publisher.event_types == ["order.rejected"]


def test_reject_after_accept_is_a_conflict(repository, publisher) -> None:
    AcceptOrder(repository, publisher).execute(TENANT, ORDER_ID, TRACE)

    with pytest.raises(InvalidOrderTransitionError) as exc_info:
        RejectOrder(repository, publisher).execute(TENANT, ORDER_ID, TRACE, reason="late")

    assert exc_info.value.code == "INVALID_ORDER_TRANSITION"
    assert repository.order.status == OrderStatus.ACCEPTED


def test_start_cooking_requires_accepted(repository, publisher) -> None:
    with pytest.raises(InvalidOrderTransitionError):
        StartCooking(repository, publisher).execute(TENANT, ORDER_ID, TRACE)


def test_repeating_a_transition_is_a_no_op(repository, publisher) -> None:
    AcceptOrder(repository, publisher).execute(TENANT, ORDER_ID, TRACE)
    FinishOrder(repository, publisher).execute(TENANT, ORDER_ID, TRACE)
    again = FinishOrder(repository, publisher).execute(TENANT, ORDER_ID, TRACE)

    assert again.status == "finished"
    assert repository.transitions == 2
    assert publisher.event_types == ["order.accepted", "order.finished"]


def test_other_tenant_cannot_see_the_order(repository, publisher) -> None:
    intruder = TenantContext(restaurant_id=RestaurantId("rst_002"))

    with pytest.raises(OrderNotFoundError):
        AcceptOrder(repository, publisher).execute(intruder, ORDER_ID, TRACE)

    assert repository.order.status == OrderStatus.PENDING


def test_lost_race_to_same_target_returns_current_order(repository, publisher) -> None:
    repository.concurrent_status = OrderStatus.ACCEPTED

    response = AcceptOrder(repository, publisher).execute(TENANT, ORDER_ID, TRACE)

    assert response.status == "accepted"
    assert publisher.event_types == []


def test_lost_race_to_other_target_is_a_conflict(repository, publisher) -> None:
    repository.concurrent_status = OrderStatus.REJECTED

    with pytest.raises(OrderConflictError):
        AcceptOrder(repository, publisher).execute(TENANT, ORDER_ID, TRACE)

    assert publisher.event_types == []
