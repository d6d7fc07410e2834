from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from tabletop.domain.common.ids import RestaurantId, TableId


@dataclass(frozen=True)
class Table:
    table_id: TableId
    restaurant_id: RestaurantId
    table_number: str
    is_active: bool
    created_at: datetime | None = None
    qr_code_url: str | None = None

    def __post_init__(self) -> None:
        if not self.table_number.strip():
            raise ValueError("table_number must be non-empty")

    def ensure_active(self) -> None:
        if not self.is_active:
            raise TableInactiveError(f"table {self.table_id} is inactive")

    def ensure_belongs_to(self, restaurant_id: RestaurantId | None) -> None:
        if restaurant_id and restaurant_id != self.restaurant_id:
            raise TableOwnershipError(
                f"table {self.table_id} does not belong to restaurant {restaurant_id}"
            )

    def with_changes(self, table_number: str | None, is_active: bool | None) -> Table:
        return replace(
            self,
            table_number=self.table_number if table_number is None else table_number,
            is_active=self.is_active if is_active is None else is_active,
        )


class TableInactiveError(Exception):
    pass


class TableOwnershipError(Exception):
    pass
