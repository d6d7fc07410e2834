from __future__ import annotations

import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tabletop.domain.common.ids import MenuItemId, OrderId, OrderLineId, RestaurantId, TableId
from tabletop.domain.common.money import Money
from tabletop.domain.order.entities import (
    DEFAULT_REJECTION_REASON,
    Order,
    OrderLine,
    OrderStatus,
    OrderTransitionError,
    allowed_sources,
    create_pending_order,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _line(quantity: int = 2, unit_cents: int = 950) -> OrderLine:
    return OrderLine(
        line_id=OrderLineId("orl_001"),
        item_id=MenuItemId("itm_001"),
        name="Burger",
        quantity=quantity,
        unit_price=Money(amount_cents=unit_cents, currency="USD"),
        line_total=Money(amount_cents=unit_cents * quantity, currency="USD"),
    )


def _pending_order() -> Order:
    return create_pending_order(
        order_id=OrderId("ord_001"),
        restaurant_id=RestaurantId("rst_001"),
        table_id=TableId("tbl_001"),
        table_number="T001",
        lines=[_line()],
        now=NOW,
        currency="USD",
    )


def test_money_from_decimal_rounds_half_up_to_cents() -> None:
    assert Money.from_decimal(Decimal("9.505"), "USD").amount_cents == 951
    assert Money.from_decimal("12", "USD").to_decimal() == Decimal("12.00")


def test_money_rejects_negative_amounts_and_bad_currency() -> None:
    with pytest.raises(ValueError):
        Money(amount_cents=-1, currency="USD")
    with pytest.raises(ValueError):
        Money(amount_cents=100, currency="usd")


def test_order_line_quantity_must_be_gte_one() -> None:
    with pytest.raises(ValueError):
        OrderLine(
            line_id=OrderLineId("orl_001"),
            item_id=MenuItemId("itm_001"),
            name="Item",
            quantity=0,
            unit_price=Money(amount_cents=100, currency="USD"),
            line_total=Money(amount_cents=0, currency="USD"),
        )


def test_order_total_must_match_lines() -> None:
    with pytest.raises(ValueError):
        Order(
            order_id=OrderId("ord_001"),
            restaurant_id=RestaurantId("rst_001"),
            table_id=TableId("tbl_001"),
            table_number="T001",
            status=OrderStatus.PENDING,
            lines=[_line()],
            total=Money(amount_cents=90, currency="USD"),
            created_at=NOW,
        )


def test_create_pending_order_sums_line_totals() -> None:
    order = _pending_order()

    assert order.status == OrderStatus.PENDING
    assert order.total == Money(amount_cents=1900, currency="USD")
    assert order.created_at == NOW


def test_create_pending_order_without_lines_needs_positive_total() -> None:
    with pytest.raises(ValueError):
        create_pending_order(
            order_id=OrderId("ord_002"),
            restaurant_id=RestaurantId("rst_001"),
            table_id=TableId("tbl_001"),
            table_number="T001",
            lines=[],
            now=NOW,
            currency="USD",
            total=Money(amount_cents=0, currency="USD"),
        )

    order = create_pending_order(
        order_id=OrderId("ord_002"),
        restaurant_id=RestaurantId("rst_001"),
        table_id=TableId("tbl_001"),
        table_number="T001",
        lines=[],
        now=NOW,
        currency="USD",
        total=Money(amount_cents=2500, currency="USD"),
    )
    assert order.total.amount_cents == 2500


def test_full_kitchen_flow_sets_timestamps() -> None:
    accepted = _pending_order().accept(NOW, preparation_time=15)
    cooking = accepted.start_cooking(NOW)
    finished = cooking.finish(NOW)

    assert accepted.preparation_time == 15
    assert accepted.accepted_at == NOW
    assert cooking.cooking_started_at == NOW
    assert finished.status == OrderStatus.FINISHED
    assert finished.finished_at == NOW
    assert finished.is_terminal


def test_finish_allowed_straight_from_accepted() -> None:
    finished = _pending_order().accept(NOW).finish(NOW)
    assert finished.status == OrderStatus.FINISHED


def test_reject_uses_default_reason_when_blank() -> None:
    rejected = _pending_order().reject(NOW, reason="   ")

    assert rejected.status == OrderStatus.REJECTED
    assert rejected.rejection_reason == DEFAULT_REJECTION_REASON
    assert rejected.rejected_at == NOW


@pytest.mark.parametrize(
    "move",
    [
        lambda order: order.start_cooking(NOW),
        lambda order: order.finish(NOW),
        lambda order: order.accept(NOW).reject(NOW),
        lambda order: order.reject(NOW).accept(NOW),
        lambda order: order.accept(NOW).finish(NOW).start_cooking(NOW),
    ],
)
def test_illegal_transitions_raise(move) -> None:
    with pytest.raises(OrderTransitionError):
        move(_pending_order())


def test_allowed_sources_table() -> None:
    assert allowed_sources(OrderStatus.ACCEPTED) == frozenset({OrderStatus.PENDING})
    assert allowed_sources(OrderStatus.FINISHED) == frozenset(
        {OrderStatus.ACCEPTED, OrderStatus.COOKING}
    )
    assert allowed_sources(OrderStatus.PENDING) == frozenset()
