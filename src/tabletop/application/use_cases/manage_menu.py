from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import uuid4

from tabletop.application.dto.requests import (
    CreateCategoryRequest,
    CreateMenuItemRequest,
    UpdateCategoryRequest,
    UpdateMenuItemRequest,
)
from tabletop.application.dto.responses import (
    CategoryEnvelope,
    CategoryListResponse,
    MenuItemEnvelope,
    MenuItemListResponse,
    MessageResponse,
)
from tabletop.application.errors import InvalidInputError, NotFoundError
from tabletop.application.mappers.menu_mapper import to_category_response, to_menu_item_response
from tabletop.application.ports.repositories import MenuRepository
from tabletop.application.use_cases.context import TenantContext
from tabletop.application.use_cases.order_composition import MenuItemNotFoundError
from tabletop.domain.common.ids import CategoryId, MenuItemId
from tabletop.domain.common.money import Money
from tabletop.domain.menu.entities import MenuCategory, MenuItem


class CategoryNotFoundError(NotFoundError):
    code = "CATEGORY_NOT_FOUND"


def _required_text(value: str | None, field_name: str) -> str:
    if value is None or not value.strip():
        raise InvalidInputError(f"{field_name} is required")
    return value.strip()


def _validated_price(value: Decimal | None) -> Decimal:
    if value is None:
        raise InvalidInputError("price is required")
    if not value.is_finite() or value < 0:
        raise InvalidInputError("price must be a non-negative number")
    return value


class ListCategories:
    def __init__(self, menu_repository: MenuRepository) -> None:
        self._menu_repository = menu_repository

    def execute(self, tenant: TenantContext) -> CategoryListResponse:
        categories = self._menu_repository.list_categories(tenant.restaurant_id)
        return CategoryListResponse(
            categories=[to_category_response(category) for category in categories]
        )


class CreateCategory:
    def __init__(self, menu_repository: MenuRepository) -> None:
        self._menu_repository = menu_repository

    def execute(
        self,
        tenant: TenantContext,
        request_dto: CreateCategoryRequest,
    ) -> CategoryEnvelope:
        category = MenuCategory(
            category_id=CategoryId(f"cat_{uuid4().hex[:12]}"),
            restaurant_id=tenant.restaurant_id,
            name=_required_text(request_dto.name, "name"),
            description=request_dto.description,
            sort_order=request_dto.sort_order or 0,
        )
        self._menu_repository.add_category(category)
        return CategoryEnvelope(
            message="Category created successfully",
            category=to_category_response(category),
        )


class UpdateCategory:
    def __init__(self, menu_repository: MenuRepository) -> None:
        self._menu_repository = menu_repository

    def execute(
        self,
        tenant: TenantContext,
        category_id: CategoryId,
        request_dto: UpdateCategoryRequest,
    ) -> CategoryEnvelope:
        changes: dict[str, Any] = request_dto.model_dump(exclude_unset=True, by_alias=False)
        if "name" in changes:
            changes["name"] = _required_text(changes["name"], "name")
        if changes.get("sort_order") is None:
            changes.pop("sort_order", None)
        if changes.get("is_active") is None:
            changes.pop("is_active", None)

        category = self._menu_repository.update_category(
            category_id=category_id,
            restaurant_id=tenant.restaurant_id,
            changes=changes,
        )
        if category is None:
            raise CategoryNotFoundError("Category not found")
        return CategoryEnvelope(
            message="Category updated successfully",
            category=to_category_response(category),
        )


class DeleteCategory:
    def __init__(self, menu_repository: MenuRepository) -> None:
        self._menu_repository = menu_repository

    def execute(self, tenant: TenantContext, category_id: CategoryId) -> MessageResponse:
        if not self._menu_repository.delete_category(category_id, tenant.restaurant_id):
            raise CategoryNotFoundError("Category not found")
        return MessageResponse(message="Category deleted successfully")


class ListMenuItems:
    def __init__(self, menu_repository: MenuRepository) -> None:
        self._menu_repository = menu_repository

    def execute(
        self,
        tenant: TenantContext,
        category_id: str | None = None,
    ) -> MenuItemListResponse:
        items = self._menu_repository.list_items(
            restaurant_id=tenant.restaurant_id,
            category_id=CategoryId(category_id) if category_id else None,
        )
        return MenuItemListResponse(items=[to_menu_item_response(item) for item in items])


class CreateMenuItem:
    def __init__(self, menu_repository: MenuRepository, currency: str) -> None:
        self._menu_repository = menu_repository
        self._currency = currency

    def execute(
        self,
        tenant: TenantContext,
        request_dto: CreateMenuItemRequest,
    ) -> MenuItemEnvelope:
        category_id = _required_text(request_dto.category_id, "categoryId")
        name = _required_text(request_dto.name, "name")
        price = _validated_price(request_dto.price)
        _ensure_category(self._menu_repository, tenant, CategoryId(category_id))

        item = MenuItem(
            item_id=MenuItemId(f"itm_{uuid4().hex[:12]}"),
            restaurant_id=tenant.restaurant_id,
            category_id=CategoryId(category_id),
            name=name,
            description=request_dto.description,
            price_money=Money.from_decimal(price, self._currency),
            image_url=request_dto.image_url,
            is_vegetarian=bool(request_dto.is_vegetarian),
            is_vegan=bool(request_dto.is_vegan),
            allergens=list(request_dto.allergens or []),
            sort_order=request_dto.sort_order or 0,
        )
        self._menu_repository.add_item(item)
        return MenuItemEnvelope(
            message="Menu item created successfully",
            item=to_menu_item_response(item),
        )


class UpdateMenuItem:
    def __init__(self, menu_repository: MenuRepository) -> None:
        self._menu_repository = menu_repository

    def execute(
        self,
        tenant: TenantContext,
        item_id: MenuItemId,
        request_dto: UpdateMenuItemRequest,
    ) -> MenuItemEnvelope:
        changes: dict[str, Any] = request_dto.model_dump(exclude_unset=True, by_alias=False)
        if "name" in changes:
            changes["name"] = _required_text(changes["name"], "name")
        if "price" in changes:
            changes["price"] = _validated_price(changes["price"])
        if "category_id" in changes:
            category_id = CategoryId(_required_text(changes["category_id"], "categoryId"))
            _ensure_category(self._menu_repository, tenant, category_id)
            changes["category_id"] = category_id
        for flag in ("is_available", "is_vegetarian", "is_vegan", "sort_order"):
            if flag in changes and changes[flag] is None:
                changes.pop(flag)
        if "allergens" in changes:
            changes["allergens"] = list(changes["allergens"] or [])

        item = self._menu_repository.update_item(
            item_id=item_id,
            restaurant_id=tenant.restaurant_id,
            changes=changes,
        )
        if item is None:
            raise MenuItemNotFoundError("Menu item not found")
        return MenuItemEnvelope(
            message="Menu item updated successfully",
            item=to_menu_item_response(item),
        )


class DeleteMenuItem:
    def __init__(self, menu_repository: MenuRepository) -> None:
        self._menu_repository = menu_repository

    def execute(self, tenant: TenantContext, item_id: MenuItemId) -> MessageResponse:
        if not self._menu_repository.delete_item(item_id, tenant.restaurant_id):
            raise MenuItemNotFoundError("Menu item not found")
        return MessageResponse(message="Menu item deleted successfully")


def _ensure_category(
    menu_repository: MenuRepository,
    tenant: TenantContext,
    category_id: CategoryId,
) -> None:
    categories = menu_repository.list_categories(tenant.restaurant_id)
    if not any(category.category_id == category_id for category in categories):
        raise CategoryNotFoundError(
            "Category not found",
            details={"categoryId": str(category_id)},
        )
