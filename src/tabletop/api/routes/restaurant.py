from __future__ import annotations

from fastapi import APIRouter, Depends

from tabletop.api.dependencies.auth import require_tenant
from tabletop.application.dto.requests import UpdateProfileRequest
from tabletop.application.dto.responses import MessageResponse, RestaurantEnvelope
from tabletop.application.use_cases.context import TenantContext
from tabletop.application.use_cases.restaurant_profile import (
    GetRestaurantProfile,
    Logout,
    UpdateRestaurantProfile,
)
from tabletop.infrastructure.db.repositories.restaurant_repo import SqlAlchemyRestaurantRepository
from tabletop.infrastructure.db.repositories.session_repo import SqlAlchemySessionRepository

router = APIRouter(prefix="/api", tags=["restaurant"])


def _restaurant_repository() -> SqlAlchemyRestaurantRepository:
    return SqlAlchemyRestaurantRepository()


def _session_repository() -> SqlAlchemySessionRepository:
    return SqlAlchemySessionRepository()


@router.get("/restaurant/profile", response_model=RestaurantEnvelope)
def get_profile(tenant: TenantContext = Depends(require_tenant)) -> RestaurantEnvelope:
    return GetRestaurantProfile(_restaurant_repository()).execute(tenant)


@router.put("/restaurant/profile", response_model=RestaurantEnvelope)
def update_profile(
    request_dto: UpdateProfileRequest,
    tenant: TenantContext = Depends(require_tenant),
) -> RestaurantEnvelope:
    return UpdateRestaurantProfile(_restaurant_repository()).execute(tenant, request_dto)


@router.post("/auth/logout", response_model=MessageResponse)
def logout(tenant: TenantContext = Depends(require_tenant)) -> MessageResponse:
    return Logout(_session_repository()).execute(tenant)
