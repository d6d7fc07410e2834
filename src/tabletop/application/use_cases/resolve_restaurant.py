from __future__ import annotations

from dataclasses import dataclass

from tabletop.application.errors import NotFoundError
from tabletop.application.ports.repositories import RestaurantRepository, TableRepository
from tabletop.domain.common.ids import RestaurantId, TableId
from tabletop.domain.restaurant.entities import Restaurant
from tabletop.domain.table.entities import Table


class RestaurantNotFoundError(NotFoundError):
    code = "RESTAURANT_NOT_FOUND"


@dataclass(frozen=True)
class RestaurantContext:
    restaurant: Restaurant
    table: Table | None = None


class ResolveRestaurantContext:
    """Turn a public identifier (restaurant id or table id) into a tenant context."""

    def __init__(
        self,
        restaurant_repository: RestaurantRepository,
        table_repository: TableRepository,
    ) -> None:
        self._restaurant_repository = restaurant_repository
        self._table_repository = table_repository

    def execute(self, identifier: str) -> RestaurantContext:
        restaurant = self._restaurant_repository.get(RestaurantId(identifier))
        if restaurant is not None:
            return RestaurantContext(restaurant=restaurant)

        table = self._table_repository.get_by_id(TableId(identifier))
        if table is not None:
            owner = self._restaurant_repository.get(table.restaurant_id)
            if owner is not None:
                return RestaurantContext(restaurant=owner, table=table)

        raise RestaurantNotFoundError("Restaurant not found")
