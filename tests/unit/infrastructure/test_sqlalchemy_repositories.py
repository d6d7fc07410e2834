from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tabletop.application.ports.repositories import (
    DuplicateKeyError,
    InvalidCursorError,
    OrderStatusConflictError,
)
from tabletop.domain.common.ids import (
    CategoryId,
    MenuItemId,
    OrderId,
    OrderLineId,
    RestaurantId,
    TableId,
)
from tabletop.domain.common.money import Money
from tabletop.domain.order.entities import OrderLine, OrderStatus, create_pending_order
from tabletop.domain.table.entities import Table
from tabletop.infrastructure.db.models import kitchen, menu, order, table, waiter  # noqa: F401
from tabletop.infrastructure.db.models.menu import MenuCategoryModel, MenuItemModel
from tabletop.infrastructure.db.models.restaurant import Base, RestaurantModel
from tabletop.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from tabletop.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from tabletop.infrastructure.db.repositories.restaurant_repo import SqlAlchemyRestaurantRepository
from tabletop.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository

START = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


def _engine() -> Engine:
    return create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


@pytest.fixture
def engine() -> Engine:
    engine = _engine()
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        for restaurant_id in ("rst_001", "rst_002"):
            session.add(
                RestaurantModel(
                    id=restaurant_id,
                    name=f"Restaurant {restaurant_id}",
                    email=f"{restaurant_id}@example.com",
                    is_active=True,
                    is_accepting_orders=True,
                    created_at=START,
                    updated_at=START,
                )
            )
        session.add(
            MenuCategoryModel(
                id="cat_001",
                restaurant_id="rst_001",
                name="Mains",
                sort_order=0,
                is_active=True,
            )
        )
        session.add(
            MenuItemModel(
                id="itm_001",
                restaurant_id="rst_001",
                category_id="cat_001",
                name="Burger",
                price=Decimal("9.50"),
                is_available=True,
                is_vegetarian=False,
                is_vegan=False,
                sort_order=0,
            )
        )
        session.commit()
    return engine


def _order(order_id: str, created_at: datetime, restaurant_id: str = "rst_001"):
    line = OrderLine(
        line_id=OrderLineId(f"orl_{order_id}"),
        item_id=MenuItemId("itm_001"),
        name="Burger",
        quantity=2,
        unit_price=Money(amount_cents=950, currency="USD"),
        line_total=Money(amount_cents=1900, currency="USD"),
    )
    return create_pending_order(
        order_id=OrderId(order_id),
        restaurant_id=RestaurantId(restaurant_id),
        table_id=TableId("tbl_001"),
        table_number="T001",
        lines=[line],
        now=created_at,
        currency="USD",
    )


def _store(repository: SqlAlchemyOrderRepository, *orders) -> None:
    for item in orders:
        repository.add(item)
        repository.add_lines(item, item.lines)


def test_order_round_trip_keeps_cents_and_lines(engine) -> None:
    repository = SqlAlchemyOrderRepository(engine, currency="USD")
    _store(repository, _order("ord_001", START))

    stored = repository.get(OrderId("ord_001"), RestaurantId("rst_001"))

    assert stored is not None
    assert stored.total == Money(amount_cents=1900, currency="USD")
    assert stored.lines[0].unit_price.amount_cents == 950
    assert stored.created_at == START
    assert repository.get(OrderId("ord_001"), RestaurantId("rst_002")) is None


def test_delete_is_tenant_scoped_and_removes_lines(engine) -> None:
    repository = SqlAlchemyOrderRepository(engine, currency="USD")
    _store(repository, _order("ord_001", START))

    repository.delete(OrderId("ord_001"), RestaurantId("rst_002"))
    assert repository.get(OrderId("ord_001"), RestaurantId("rst_001")) is not None

    repository.delete(OrderId("ord_001"), RestaurantId("rst_001"))
    assert repository.get(OrderId("ord_001"), RestaurantId("rst_001")) is None
    with engine.connect() as connection:
        remaining = connection.execute(text("SELECT COUNT(*) FROM order_items")).scalar_one()
    assert remaining == 0


def test_conditional_transition_rejects_stale_source(engine) -> None:
    repository = SqlAlchemyOrderRepository(engine, currency="USD")
    pending = _order("ord_001", START)
    _store(repository, pending)

    accepted = repository.transition(
        pending.accept(START, preparation_time=10),
        from_statuses=frozenset({OrderStatus.PENDING}),
    )
    assert accepted.status == OrderStatus.ACCEPTED
    assert accepted.preparation_time == 10

    with pytest.raises(OrderStatusConflictError):
        repository.transition(
            pending.reject(START),
            from_statuses=frozenset({OrderStatus.PENDING}),
        )


def test_list_orders_pages_newest_first(engine) -> None:
    repository = SqlAlchemyOrderRepository(engine, currency="USD")
    _store(
        repository,
        *[_order(f"ord_00{index}", START + timedelta(minutes=index)) for index in range(1, 6)],
        _order("ord_other", START, restaurant_id="rst_002"),
    )

    first_page, cursor = repository.list_for_restaurant(
        RestaurantId("rst_001"), status=None, limit=2, cursor=None
    )
    second_page, second_cursor = repository.list_for_restaurant(
        RestaurantId("rst_001"), status=None, limit=2, cursor=cursor
    )
    last_page, last_cursor = repository.list_for_restaurant(
        RestaurantId("rst_001"), status=None, limit=2, cursor=second_cursor
    )

    assert [str(item.order_id) for item in first_page] == ["ord_005", "ord_004"]
    assert [str(item.order_id) for item in second_page] == ["ord_003", "ord_002"]
    assert [str(item.order_id) for item in last_page] == ["ord_001"]
    assert last_cursor is None


def test_list_orders_filters_by_status_and_rejects_bad_cursor(engine) -> None:
    repository = SqlAlchemyOrderRepository(engine, currency="USD")
    first = _order("ord_001", START)
    _store(repository, first, _order("ord_002", START + timedelta(minutes=1)))
    repository.transition(first.accept(START), from_statuses=frozenset({OrderStatus.PENDING}))

    accepted, _ = repository.list_for_restaurant(
        RestaurantId("rst_001"), status=OrderStatus.ACCEPTED, limit=10, cursor=None
    )
    assert [str(item.order_id) for item in accepted] == ["ord_001"]

    with pytest.raises(InvalidCursorError):
        repository.list_for_restaurant(
            RestaurantId("rst_001"), status=None, limit=10, cursor="not-a-cursor"
        )


def test_stats_count_statuses_and_sum_finished_revenue(engine) -> None:
    repository = SqlAlchemyOrderRepository(engine, currency="USD")
    finished = _order("ord_001", START)
    _store(
        repository,
        finished,
        _order("ord_002", START + timedelta(hours=1)),
        _order("ord_003", START - timedelta(days=1)),
    )
    repository.transition(
        finished.accept(START).finish(START),
        from_statuses=frozenset({OrderStatus.PENDING}),
    )

    stats = repository.stats_for_period(
        RestaurantId("rst_001"),
        start=datetime(2026, 10, 19, tzinfo=timezone.utc),
        end=datetime(2026, 10, 20, tzinfo=timezone.utc),
    )

    assert stats.counts["finished"] == 1
    assert stats.counts["pending"] == 1
    assert stats.counts["rejected"] == 0
    assert stats.revenue_cents == 1900


def test_menu_item_lookup_is_tenant_scoped(engine) -> None:
    repository = SqlAlchemyMenuRepository(engine, currency="USD")

    item = repository.get_item(MenuItemId("itm_001"), RestaurantId("rst_001"))

    assert item is not None
    assert item.price_money.amount_cents == 950
    assert item.category_id == CategoryId("cat_001")
    assert repository.get_item(MenuItemId("itm_001"), RestaurantId("rst_002")) is None


def test_table_numbers_are_unique_per_restaurant(engine) -> None:
    repository = SqlAlchemyTableRepository(engine)
    repository.add(
        Table(
            table_id=TableId("tbl_001"),
            restaurant_id=RestaurantId("rst_001"),
            table_number="T001",
            is_active=True,
        )
    )
    repository.add(
        Table(
            table_id=TableId("tbl_002"),
            restaurant_id=RestaurantId("rst_002"),
            table_number="T001",
            is_active=True,
        )
    )

    with pytest.raises(DuplicateKeyError):
        repository.add(
            Table(
                table_id=TableId("tbl_003"),
                restaurant_id=RestaurantId("rst_001"),
                table_number="T001",
                is_active=True,
            )
        )

    assert repository.get_by_id(TableId("tbl_002")).restaurant_id == "rst_002"
    assert repository.get(TableId("tbl_002"), RestaurantId("rst_001")) is None
    assert repository.delete(TableId("tbl_002"), RestaurantId("rst_001")) is False


def test_restaurant_profile_update_with_full_schema(engine) -> None:
    repository = SqlAlchemyRestaurantRepository(engine)

    updated = repository.update_profile(
        RestaurantId("rst_001"),
        {"name": "Renamed", "is_accepting_orders": False, "offline_notice": "Back at 6"},
    )

    assert updated is not None
    assert updated.name == "Renamed"
    assert updated.is_accepting_orders is False
    assert updated.offline_notice == "Back at 6"
    assert repository.supports_optional_columns


@pytest.fixture
def legacy_engine() -> Engine:
    engine = _engine()
    with engine.begin() as connection:
        connection.execute(
            text(
                "CREATE TABLE restaurants ("
                "id VARCHAR(50) PRIMARY KEY, name VARCHAR(255) NOT NULL, "
                "email VARCHAR(255) NOT NULL, password_hash VARCHAR(255), phone VARCHAR(50), "
                "address VARCHAR(500), logo_url VARCHAR(1000), theme_color VARCHAR(20), "
                "is_active BOOLEAN NOT NULL, created_at DATETIME NOT NULL, "
                "updated_at DATETIME NOT NULL)"
            )
        )
        connection.execute(
            text(
                "INSERT INTO restaurants (id, name, email, is_active, created_at, updated_at) "
                "VALUES ('rst_old', 'Old Diner', 'old@example.com', 1, "
                "'2026-01-01 00:00:00', '2026-01-01 00:00:00')"
            )
        )
    return engine


def test_reads_fall_back_when_optional_columns_are_missing(legacy_engine, caplog) -> None:
    repository = SqlAlchemyRestaurantRepository(legacy_engine)

    restaurant = repository.get(RestaurantId("rst_old"))

    assert restaurant is not None
    assert restaurant.name == "Old Diner"
    assert restaurant.is_accepting_orders is True
    assert restaurant.service_hours is None
    assert restaurant.offline_notice is None
    assert not repository.supports_optional_columns
    assert any(
        record.getMessage() == "restaurant_optional_columns_missing" for record in caplog.records
    )

    # a fresh repository on the same engine skips the failing attempt
    assert not SqlAlchemyRestaurantRepository(legacy_engine).supports_optional_columns


def test_profile_update_drops_optional_fields_on_legacy_schema(legacy_engine) -> None:
    repository = SqlAlchemyRestaurantRepository(legacy_engine)

    updated = repository.update_profile(
        RestaurantId("rst_old"),
        {"phone": "555-0100", "is_accepting_orders": False, "offline_notice": "Closed"},
    )

    assert updated is not None
    assert updated.phone == "555-0100"
    assert updated.is_accepting_orders is True


def test_degraded_state_is_per_engine(legacy_engine, engine) -> None:
    SqlAlchemyRestaurantRepository(legacy_engine).get(RestaurantId("rst_old"))

    assert SqlAlchemyRestaurantRepository(engine).supports_optional_columns


class _BrokenLinesRepository(SqlAlchemyOrderRepository):
    def add_lines(self, order, lines) -> None:
        raise RuntimeError("order_items unavailable")


def test_failed_line_write_leaves_no_header_behind(engine) -> None:
    from tabletop.application.use_cases.order_composition import (
        OrderPersistenceError,
        persist_order_with_lines,
    )

    repository = _BrokenLinesRepository(engine, currency="USD")

    with pytest.raises(OrderPersistenceError):
        persist_order_with_lines(repository, _order("ord_001", START))

    with engine.connect() as connection:
        headers = connection.execute(text("SELECT COUNT(*) FROM orders")).scalar_one()
    assert headers == 0
