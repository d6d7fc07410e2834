from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from tabletop.domain.common.ids import (
    CategoryId,
    LabelId,
    MenuItemId,
    OrderId,
    PrinterId,
    RecipeId,
    RestaurantId,
    TableId,
    WaiterCallId,
)
from tabletop.domain.kitchen.entities import ItemLabel, Printer, Recipe
from tabletop.domain.menu.entities import MenuCategory, MenuItem
from tabletop.domain.order.entities import Order, OrderLine, OrderStatus
from tabletop.domain.restaurant.entities import Restaurant, StaffSession
from tabletop.domain.table.entities import Table
from tabletop.domain.waiter.entities import WaiterCall, WaiterCallStatus


class RestaurantRepository(Protocol):
    def get(self, restaurant_id: RestaurantId) -> Restaurant | None: ...

    def update_profile(
        self,
        restaurant_id: RestaurantId,
        changes: dict[str, Any],
    ) -> Restaurant | None: ...


class SessionRepository(Protocol):
    def get_by_token(self, token: str) -> StaffSession | None: ...

    def add(self, staff_session: StaffSession) -> None: ...

    def delete_by_token(self, token: str) -> None: ...


class TableRepository(Protocol):
    def get(self, table_id: TableId, restaurant_id: RestaurantId) -> Table | None: ...

    def get_by_id(self, table_id: TableId) -> Table | None: ...

    def get_by_number(self, table_number: str, restaurant_id: RestaurantId) -> Table | None: ...

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Table]: ...

    def add(self, table: Table) -> None: ...

    def update(self, table: Table) -> Table | None: ...

    def delete(self, table_id: TableId, restaurant_id: RestaurantId) -> bool: ...


class MenuRepository(Protocol):
    def get_item(self, item_id: MenuItemId, restaurant_id: RestaurantId) -> MenuItem | None: ...

    def list_categories(
        self,
        restaurant_id: RestaurantId,
        active_only: bool = False,
        with_items: bool = False,
    ) -> list[MenuCategory]: ...

    def list_items(
        self,
        restaurant_id: RestaurantId,
        category_id: CategoryId | None = None,
    ) -> list[MenuItem]: ...

    def add_category(self, category: MenuCategory) -> None: ...

    def update_category(
        self,
        category_id: CategoryId,
        restaurant_id: RestaurantId,
        changes: dict[str, Any],
    ) -> MenuCategory | None: ...

    def delete_category(self, category_id: CategoryId, restaurant_id: RestaurantId) -> bool: ...

    def add_item(self, item: MenuItem) -> None: ...

    def update_item(
        self,
        item_id: MenuItemId,
        restaurant_id: RestaurantId,
        changes: dict[str, Any],
    ) -> MenuItem | None: ...

    def delete_item(self, item_id: MenuItemId, restaurant_id: RestaurantId) -> bool: ...


class OrderRepository(Protocol):
    def add(self, order: Order) -> None:
        """Insert the order header only; lines are written by ``add_lines``."""

    def add_lines(self, order: Order, lines: list[OrderLine]) -> None: ...

    def delete(self, order_id: OrderId, restaurant_id: RestaurantId) -> None: ...

    def get(self, order_id: OrderId, restaurant_id: RestaurantId) -> Order | None: ...

    def transition(self, order: Order, from_statuses: frozenset[OrderStatus]) -> Order:
        """Persist ``order``'s status fields if the stored status is still in ``from_statuses``.

        Raises ``OrderStatusConflictError`` when no row matched.
        """

    def list_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        status: OrderStatus | None,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Order], str | None]: ...

    def stats_for_period(
        self,
        restaurant_id: RestaurantId,
        start: datetime,
        end: datetime,
    ) -> OrderStatsData: ...


class WaiterCallRepository(Protocol):
    def add(self, call: WaiterCall) -> None: ...

    def get_for_table(self, call_id: WaiterCallId, table_id: TableId) -> WaiterCall | None: ...

    def list_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        status: WaiterCallStatus | None,
        limit: int,
    ) -> list[WaiterCall]:
        """Newest first; ``status=None`` means every call that is not resolved yet."""

    def respond(
        self,
        call_id: WaiterCallId,
        restaurant_id: RestaurantId,
        response_message: str,
        now: datetime,
    ) -> WaiterCall | None: ...

    def resolve(
        self,
        call_id: WaiterCallId,
        restaurant_id: RestaurantId,
        now: datetime,
    ) -> WaiterCall | None: ...


class PrinterRepository(Protocol):
    def list_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        active_only: bool = True,
    ) -> list[Printer]: ...

    def get_active(self, printer_id: PrinterId, restaurant_id: RestaurantId) -> Printer | None: ...


class LabelRepository(Protocol):
    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[ItemLabel]: ...

    def add(self, label: ItemLabel) -> None: ...

    def update(self, label: ItemLabel) -> ItemLabel | None: ...

    def delete(self, label_id: LabelId, restaurant_id: RestaurantId) -> bool: ...


class RecipeRepository(Protocol):
    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Recipe]: ...

    def get(self, recipe_id: RecipeId, restaurant_id: RestaurantId) -> Recipe | None: ...

    def add(self, recipe: Recipe) -> None: ...

    def update(
        self,
        recipe_id: RecipeId,
        restaurant_id: RestaurantId,
        changes: dict[str, Any],
    ) -> Recipe | None: ...

    def delete(self, recipe_id: RecipeId, restaurant_id: RestaurantId) -> bool: ...


class DuplicateKeyError(Exception):
    pass


class OrderStatusConflictError(Exception):
    pass


class InvalidCursorError(Exception):
    pass


@dataclass(frozen=True)
class OrderStatsData:
    revenue_cents: int
    currency: str
    counts: dict[str, int] = field(default_factory=dict)
