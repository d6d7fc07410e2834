from __future__ import annotations

from typing import Any

from tabletop.application.dto.requests import UpdateProfileRequest
from tabletop.application.dto.responses import MessageResponse, RestaurantEnvelope
from tabletop.application.mappers.restaurant_mapper import to_restaurant_response
from tabletop.application.ports.repositories import RestaurantRepository, SessionRepository
from tabletop.application.use_cases.context import TenantContext
from tabletop.application.use_cases.resolve_restaurant import RestaurantNotFoundError

_PROFILE_FIELDS = (
    "name",
    "phone",
    "address",
    "theme_color",
    "logo_url",
    "is_accepting_orders",
    "service_hours",
    "offline_notice",
)


class GetRestaurantProfile:
    def __init__(self, restaurant_repository: RestaurantRepository) -> None:
        self._restaurant_repository = restaurant_repository

    def execute(self, tenant: TenantContext) -> RestaurantEnvelope:
        restaurant = self._restaurant_repository.get(tenant.restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundError("Restaurant not found")
        return RestaurantEnvelope(restaurant=to_restaurant_response(restaurant))


class UpdateRestaurantProfile:
    """Write only the provided profile fields.

    Availability columns may be missing on older schemas; the repository
    drops them from the write in that case.
    """

    def __init__(self, restaurant_repository: RestaurantRepository) -> None:
        self._restaurant_repository = restaurant_repository

    def execute(
        self,
        tenant: TenantContext,
        request_dto: UpdateProfileRequest,
    ) -> RestaurantEnvelope:
        changes: dict[str, Any] = {
            field_name: getattr(request_dto, field_name)
            for field_name in _PROFILE_FIELDS
            if field_name in request_dto.model_fields_set
        }
        if "is_accepting_orders" in changes:
            changes["is_accepting_orders"] = bool(changes["is_accepting_orders"])
        if "name" in changes and not (changes["name"] or "").strip():
            changes.pop("name")

        if changes:
            restaurant = self._restaurant_repository.update_profile(tenant.restaurant_id, changes)
        else:
            restaurant = self._restaurant_repository.get(tenant.restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundError("Restaurant not found")
        return RestaurantEnvelope(
            message="Profile updated successfully",
            restaurant=to_restaurant_response(restaurant),
        )


class Logout:
    def __init__(self, session_repository: SessionRepository) -> None:
        self._session_repository = session_repository

    def execute(self, tenant: TenantContext) -> MessageResponse:
        if tenant.token:
            self._session_repository.delete_by_token(tenant.token)
        return MessageResponse(message="Logged out successfully")
