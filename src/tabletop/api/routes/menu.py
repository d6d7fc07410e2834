from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from tabletop.api.dependencies.auth import require_tenant
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
    PublicMenuResponse,
)
from tabletop.application.use_cases.context import TenantContext
from tabletop.application.use_cases.get_menu import GetPublicMenu, GetRestaurantMenu
from tabletop.application.use_cases.manage_menu import (
    CreateCategory,
    CreateMenuItem,
    DeleteCategory,
    DeleteMenuItem,
    ListCategories,
    ListMenuItems,
    UpdateCategory,
    UpdateMenuItem,
)
from tabletop.application.use_cases.resolve_restaurant import ResolveRestaurantContext
from tabletop.domain.common.ids import CategoryId, MenuItemId
from tabletop.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from tabletop.infrastructure.db.repositories.restaurant_repo import SqlAlchemyRestaurantRepository
from tabletop.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from tabletop.infrastructure.db.session import store_currency

router = APIRouter(prefix="/api/menu", tags=["menu"])


def _public_menu_use_case() -> GetPublicMenu:
    return GetPublicMenu(
        resolver=ResolveRestaurantContext(
            restaurant_repository=SqlAlchemyRestaurantRepository(),
            table_repository=SqlAlchemyTableRepository(),
        ),
        menu_repository=SqlAlchemyMenuRepository(),
    )


def _menu_repository() -> SqlAlchemyMenuRepository:
    return SqlAlchemyMenuRepository()


@router.get("/public/{identifier}", response_model=PublicMenuResponse)
def get_public_menu(identifier: str) -> PublicMenuResponse:
    return _public_menu_use_case().execute(identifier)


@router.get("", response_model=CategoryListResponse)
def get_restaurant_menu(tenant: TenantContext = Depends(require_tenant)) -> CategoryListResponse:
    return GetRestaurantMenu(_menu_repository()).execute(tenant)


@router.get("/categories", response_model=CategoryListResponse)
def list_categories(tenant: TenantContext = Depends(require_tenant)) -> CategoryListResponse:
    return ListCategories(_menu_repository()).execute(tenant)


@router.post(
    "/categories",
    response_model=CategoryEnvelope,
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    request_dto: CreateCategoryRequest,
    tenant: TenantContext = Depends(require_tenant),
) -> CategoryEnvelope:
    return CreateCategory(_menu_repository()).execute(tenant, request_dto)


@router.put("/categories/{category_id}", response_model=CategoryEnvelope)
def update_category(
    category_id: str,
    request_dto: UpdateCategoryRequest,
    tenant: TenantContext = Depends(require_tenant),
) -> CategoryEnvelope:
    return UpdateCategory(_menu_repository()).execute(tenant, CategoryId(category_id), request_dto)


@router.delete("/categories/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: str,
    tenant: TenantContext = Depends(require_tenant),
) -> MessageResponse:
    return DeleteCategory(_menu_repository()).execute(tenant, CategoryId(category_id))


@router.get("/items", response_model=MenuItemListResponse)
def list_items(
    category_id: str | None = Query(default=None, alias="categoryId"),
    tenant: TenantContext = Depends(require_tenant),
) -> MenuItemListResponse:
    return ListMenuItems(_menu_repository()).execute(tenant, category_id)


@router.get("/categories/{category_id}/items", response_model=MenuItemListResponse)
def list_category_items(
    category_id: str,
    tenant: TenantContext = Depends(require_tenant),
) -> MenuItemListResponse:
    return ListMenuItems(_menu_repository()).execute(tenant, category_id)


@router.post("/items", response_model=MenuItemEnvelope, status_code=status.HTTP_201_CREATED)
def create_item(
    request_dto: CreateMenuItemRequest,
    tenant: TenantContext = Depends(require_tenant),
) -> MenuItemEnvelope:
    use_case = CreateMenuItem(_menu_repository(), currency=store_currency())
    return use_case.execute(tenant, request_dto)


@router.put("/items/{item_id}", response_model=MenuItemEnvelope)
def update_item(
    item_id: str,
    request_dto: UpdateMenuItemRequest,
    tenant: TenantContext = Depends(require_tenant),
) -> MenuItemEnvelope:
    return UpdateMenuItem(_menu_repository()).execute(tenant, MenuItemId(item_id), request_dto)


@router.delete("/items/{item_id}", response_model=MessageResponse)
def delete_item(
    item_id: str,
    tenant: TenantContext = Depends(require_tenant),
) -> MessageResponse:
    return DeleteMenuItem(_menu_repository()).execute(tenant, MenuItemId(item_id))
