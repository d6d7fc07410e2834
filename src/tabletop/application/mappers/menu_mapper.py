from __future__ import annotations

from tabletop.application.dto.responses import CategoryResponse, MenuItemResponse
from tabletop.application.mappers.money_mapper import to_money_response
from tabletop.domain.menu.entities import MenuCategory, MenuItem


def to_menu_item_response(item: MenuItem) -> MenuItemResponse:
    return MenuItemResponse(
        itemId=str(item.item_id),
        categoryId=str(item.category_id),
        name=item.name,
        description=item.description,
        price=to_money_response(item.price_money),
        imageUrl=item.image_url,
        isAvailable=item.is_available,
        isVegetarian=item.is_vegetarian,
        isVegan=item.is_vegan,
        allergens=list(item.allergens),
        sortOrder=item.sort_order,
    )


def to_category_response(
    category: MenuCategory,
    available_only: bool = False,
) -> CategoryResponse:
    items = category.available_items() if available_only else category.items
    return CategoryResponse(
        categoryId=str(category.category_id),
        name=category.name,
        description=category.description,
        sortOrder=category.sort_order,
        isActive=category.is_active,
        items=[to_menu_item_response(item) for item in items],
    )
