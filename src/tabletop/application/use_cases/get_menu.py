from __future__ import annotations

from tabletop.application.dto.responses import CategoryListResponse, PublicMenuResponse
from tabletop.application.errors import ForbiddenError
from tabletop.application.mappers.menu_mapper import to_category_response
from tabletop.application.mappers.restaurant_mapper import to_restaurant_response
from tabletop.application.mappers.table_mapper import to_table_ref_response
from tabletop.application.ports.repositories import MenuRepository
from tabletop.application.use_cases.context import TenantContext
from tabletop.application.use_cases.resolve_restaurant import ResolveRestaurantContext
from tabletop.domain.restaurant.entities import RestaurantInactiveError as DomainInactiveError


class RestaurantInactiveError(ForbiddenError):
    code = "RESTAURANT_INACTIVE"


class GetPublicMenu:
    """Menu a customer sees after scanning a restaurant or table QR code."""

    def __init__(self, resolver: ResolveRestaurantContext, menu_repository: MenuRepository) -> None:
        self._resolver = resolver
        self._menu_repository = menu_repository

    def execute(self, identifier: str) -> PublicMenuResponse:
        context = self._resolver.execute(identifier)
        try:
            context.restaurant.ensure_active()
        except DomainInactiveError as exc:
            raise RestaurantInactiveError("Restaurant is not active") from exc

        categories = self._menu_repository.list_categories(
            restaurant_id=context.restaurant.restaurant_id,
            active_only=True,
            with_items=True,
        )
        return PublicMenuResponse(
            restaurant=to_restaurant_response(context.restaurant),
            table=to_table_ref_response(context.table) if context.table is not None else None,
            menu=[to_category_response(category, available_only=True) for category in categories],
        )


class GetRestaurantMenu:
    def __init__(self, menu_repository: MenuRepository) -> None:
        self._menu_repository = menu_repository

    def execute(self, tenant: TenantContext) -> CategoryListResponse:
        categories = self._menu_repository.list_categories(
            restaurant_id=tenant.restaurant_id,
            with_items=True,
        )
        return CategoryListResponse(
            categories=[to_category_response(category) for category in categories]
        )
