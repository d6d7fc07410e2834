from __future__ import annotations

from dataclasses import dataclass

from tabletop.domain.common.ids import RestaurantId


@dataclass(frozen=True)
class TraceContext:
    trace_id: str | None
    request_id: str | None


@dataclass(frozen=True)
class TenantContext:
    """Authenticated tenant a staff request acts on behalf of."""

    restaurant_id: RestaurantId
    token: str | None = None
