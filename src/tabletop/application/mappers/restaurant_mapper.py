from __future__ import annotations

from tabletop.application.dto.responses import RestaurantResponse
from tabletop.domain.restaurant.entities import Restaurant


def to_restaurant_response(restaurant: Restaurant) -> RestaurantResponse:
    # password_hash never leaves the service
    return RestaurantResponse(
        restaurantId=str(restaurant.restaurant_id),
        name=restaurant.name,
        email=restaurant.email,
        phone=restaurant.phone,
        address=restaurant.address,
        logoUrl=restaurant.logo_url,
        themeColor=restaurant.theme_color,
        isActive=restaurant.is_active,
        isAcceptingOrders=restaurant.is_accepting_orders,
        serviceHours=restaurant.service_hours,
        offlineNotice=restaurant.offline_notice,
        createdAt=restaurant.created_at,
        updatedAt=restaurant.updated_at,
    )
