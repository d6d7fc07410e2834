from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from tabletop.domain.common.ids import RestaurantId, SessionId


@dataclass(frozen=True)
class Restaurant:
    restaurant_id: RestaurantId
    name: str
    email: str
    is_active: bool = True
    is_accepting_orders: bool = True
    service_hours: Any = None
    offline_notice: str | None = None
    phone: str | None = None
    address: str | None = None
    logo_url: str | None = None
    theme_color: str | None = None
    password_hash: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def ensure_active(self) -> None:
        if not self.is_active:
            raise RestaurantInactiveError(f"restaurant {self.restaurant_id} is inactive")


@dataclass(frozen=True)
class StaffSession:
    session_id: SessionId
    restaurant_id: RestaurantId
    token: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class RestaurantInactiveError(Exception):
    pass
