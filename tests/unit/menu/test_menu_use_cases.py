from __future__ import annotations

import sys
from dataclasses import replace
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tabletop.application.dto.requests import (
    CreateCategoryRequest,
    CreateMenuItemRequest,
    UpdateMenuItemRequest,
)
from tabletop.application.errors import InvalidInputError
from tabletop.application.use_cases.context import TenantContext
from tabletop.application.use_cases.get_menu import GetPublicMenu, RestaurantInactiveError
from tabletop.application.use_cases.manage_menu import (
    CategoryNotFoundError,
    CreateCategory,
    CreateMenuItem,
    DeleteMenuItem,
    UpdateMenuItem,
)
from tabletop.application.use_cases.order_composition import MenuItemNotFoundError
from tabletop.application.use_cases.resolve_restaurant import (
    ResolveRestaurantContext,
    RestaurantNotFoundError,
)
from tabletop.domain.common.ids import CategoryId, MenuItemId, RestaurantId, TableId
from tabletop.domain.common.money import Money
from tabletop.domain.menu.entities import MenuCategory, MenuItem
from tabletop.domain.restaurant.entities import Restaurant
from tabletop.domain.table.entities import Table

TENANT = TenantContext(restaurant_id=RestaurantId("rst_001"))


def _restaurant(restaurant_id: str, is_active: bool = True) -> Restaurant:
    return Restaurant(
        restaurant_id=RestaurantId(restaurant_id),
        name=f"Restaurant {restaurant_id}",
        email=f"{restaurant_id}@example.com",
        is_active=is_active,
        password_hash="secret-hash",
    )


class FakeRestaurantRepository:
    def __init__(self, restaurants: list[Restaurant]) -> None:
        self._restaurants = {restaurant.restaurant_id: restaurant for restaurant in restaurants}

    def get(self, restaurant_id: RestaurantId) -> Restaurant | None:
        return self._restaurants.get(restaurant_id)


class FakeTableRepository:
    def __init__(self, tables: list[Table]) -> None:
        self._tables = {table.table_id: table for table in tables}

    def get_by_id(self, table_id: TableId) -> Table | None:
        return self._tables.get(table_id)


class FakeMenuRepository:
    def __init__(self) -> None:
        self.categories: dict[str, MenuCategory] = {}
        self.items: dict[str, MenuItem] = {}

    def list_categories(self, restaurant_id, active_only=False, with_items=False):
        categories = [
            category
            for category in self.categories.values()
            if category.restaurant_id == restaurant_id and (category.is_active or not active_only)
        ]
        if not with_items:
            return categories
        return [
            replace(
                category,
                items=[
                    item
                    for item in self.items.values()
                    if item.category_id == category.category_id
                    and item.restaurant_id == restaurant_id
                ],
            )
            for category in categories
        ]

    def add_category(self, category: MenuCategory) -> None:
        self.categories[str(category.category_id)] = category

    def add_item(self, item: MenuItem) -> None:
        self.items[str(item.item_id)] = item

    def update_item(self, item_id, restaurant_id, changes):
        item = self.items.get(str(item_id))
        if item is None or item.restaurant_id != restaurant_id:
            return None
        if "price" in changes:
            changes = dict(changes)
            changes["price_money"] = Money.from_decimal(changes.pop("price"), "USD")
        item = replace(item, **changes)
        self.items[str(item_id)] = item
        return item

    def delete_item(self, item_id, restaurant_id) -> bool:
        item = self.items.get(str(item_id))
        if item is None or item.restaurant_id != restaurant_id:
            return False
        del self.items[str(item_id)]
        return True


def _seeded_menu() -> FakeMenuRepository:
    menu = FakeMenuRepository()
    menu.add_category(
        MenuCategory(
            category_id=CategoryId("cat_001"),
            restaurant_id=RestaurantId("rst_001"),
            name="Mains",
        )
    )
    menu.add_category(
        MenuCategory(
            category_id=CategoryId("cat_hidden"),
            restaurant_id=RestaurantId("rst_001"),
            name="Seasonal",
            is_active=False,
        )
    )
    for item_id, available in (("itm_burger", True), ("itm_soup", False)):
        menu.add_item(
            MenuItem(
                item_id=MenuItemId(item_id),
                restaurant_id=RestaurantId("rst_001"),
                category_id=CategoryId("cat_001"),
                name=item_id.removeprefix("itm_").title(),
                description=None,
                price_money=Money(amount_cents=950, currency="USD"),
                is_available=available,
            )
        )
    return menu


def _resolver() -> ResolveRestaurantContext:
    return ResolveRestaurantContext(
        restaurant_repository=FakeRestaurantRepository(
            [_restaurant("rst_001"), _restaurant("rst_closed", is_active=False)]
        ),
        table_repository=FakeTableRepository(
            [
                Table(
                    table_id=TableId("tbl_001"),
                    restaurant_id=RestaurantId("rst_001"),
                    table_number="T001",
                    is_active=True,
                ),
                Table(
                    table_id=TableId("tbl_orphan"),
                    restaurant_id=RestaurantId("rst_gone"),
                    table_number="T404",
                    is_active=True,
                ),
            ]
        ),
    )


def test_resolver_prefers_restaurant_id() -> None:
    context = _resolver().execute("rst_001")

    assert context.restaurant.restaurant_id == "rst_001"
    assert context.table is None


def test_resolver_falls_back_to_table_owner() -> None:
    context = _resolver().execute("tbl_001")

    assert context.restaurant.restaurant_id == "rst_001"
    assert context.table is not None
    assert context.table.table_number == "T001"


@pytest.mark.parametrize("identifier", ["nope", "tbl_orphan"])
def test_resolver_unknown_identifier(identifier: str) -> None:
    with pytest.raises(RestaurantNotFoundError):
        _resolver().execute(identifier)


def test_public_menu_shows_only_active_categories_and_available_items() -> None:
    response = GetPublicMenu(_resolver(), _seeded_menu()).execute("tbl_001")

    assert response.table is not None
    assert response.table.tableNumber == "T001"
    assert [category.name for category in response.menu] == ["Mains"]
    assert [item.name for item in response.menu[0].items] == ["Burger"]
    assert "passwordHash" not in response.restaurant.model_dump()


def test_public_menu_for_inactive_restaurant_is_forbidden() -> None:
    with pytest.raises(RestaurantInactiveError):
        GetPublicMenu(_resolver(), _seeded_menu()).execute("rst_closed")


def test_create_category_and_item_for_tenant() -> None:
    menu = FakeMenuRepository()
    category = CreateCategory(menu).execute(TENANT, CreateCategoryRequest(name=" Drinks "))

    created = CreateMenuItem(menu, currency="USD").execute(
        TENANT,
        CreateMenuItemRequest.model_validate(
            {
                "categoryId": category.category.categoryId,
                "name": "Lemonade",
                "price": "3.25",
                "isVegan": True,
            }
        ),
    )

    assert category.category.name == "Drinks"
    assert created.item.price.amountCents == 325
    assert created.item.isVegan is True
    assert created.item.isAvailable is True


def test_create_item_validates_category_and_price() -> None:
    menu = _seeded_menu()
    use_case = CreateMenuItem(menu, currency="USD")

    with pytest.raises(CategoryNotFoundError):
        use_case.execute(
            TenantContext(restaurant_id=RestaurantId("rst_002")),
            CreateMenuItemRequest(category_id="cat_001", name="Tea", price=Decimal("2")),
        )
    with pytest.raises(InvalidInputError):
        use_case.execute(
            TENANT,
            CreateMenuItemRequest(category_id="cat_001", name="Tea", price=Decimal("-1")),
        )
    with pytest.raises(InvalidInputError):
        use_case.execute(TENANT, CreateMenuItemRequest(category_id="cat_001", price=Decimal("2")))


def test_update_item_applies_only_provided_fields() -> None:
    menu = _seeded_menu()

    updated = UpdateMenuItem(menu).execute(
        TENANT,
        MenuItemId("itm_soup"),
        UpdateMenuItemRequest.model_validate({"isAvailable": True, "price": "4.10"}),
    )

    assert updated.item.isAvailable is True
    assert updated.item.price.amountCents == 410
    assert updated.item.name == "Soup"


def test_item_writes_are_tenant_scoped() -> None:
    menu = _seeded_menu()
    intruder = TenantContext(restaurant_id=RestaurantId("rst_002"))

    with pytest.raises(MenuItemNotFoundError):
        UpdateMenuItem(menu).execute(
            intruder,
            MenuItemId("itm_burger"),
            UpdateMenuItemRequest(name="Stolen"),
        )
    with pytest.raises(MenuItemNotFoundError):
        DeleteMenuItem(menu).execute(intruder, MenuItemId("itm_burger"))

    assert DeleteMenuItem(menu).execute(TENANT, MenuItemId("itm_burger")).message
    assert "itm_burger" not in menu.items
