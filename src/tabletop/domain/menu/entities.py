from __future__ import annotations

from dataclasses import dataclass, field

from tabletop.domain.common.ids import CategoryId, MenuItemId, RestaurantId
from tabletop.domain.common.money import Money


@dataclass(frozen=True)
class MenuItem:
    item_id: MenuItemId
    restaurant_id: RestaurantId
    category_id: CategoryId
    name: str
    description: str | None
    price_money: Money
    is_available: bool = True
    image_url: str | None = None
    is_vegetarian: bool = False
    is_vegan: bool = False
    allergens: list[str] = field(default_factory=list)
    sort_order: int = 0

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")


@dataclass(frozen=True)
class MenuCategory:
    category_id: CategoryId
    restaurant_id: RestaurantId
    name: str
    description: str | None = None
    sort_order: int = 0
    is_active: bool = True
    items: list[MenuItem] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")

    def available_items(self) -> list[MenuItem]:
        return [item for item in self.items if item.is_available]
