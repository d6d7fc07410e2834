from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from tabletop.application.dto.responses import OrderStatsBody, OrderStatsResponse
from tabletop.application.errors import InvalidInputError
from tabletop.application.mappers.money_mapper import to_money_response
from tabletop.application.ports.repositories import OrderRepository
from tabletop.application.use_cases.context import TenantContext
from tabletop.domain.common.money import Money


class GetOrderStats:
    """Per-status counts and finished revenue for one UTC calendar day."""

    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, tenant: TenantContext, day: str | None = None) -> OrderStatsResponse:
        target_day = _parse_day(day)
        start = datetime.combine(target_day, time.min, tzinfo=timezone.utc)
        end = start + timedelta(days=1)

        data = self._order_repository.stats_for_period(
            restaurant_id=tenant.restaurant_id,
            start=start,
            end=end,
        )
        return OrderStatsResponse(
            date=target_day.isoformat(),
            stats=OrderStatsBody(
                **{status: count for status, count in data.counts.items()},
                totalRevenue=to_money_response(
                    Money(amount_cents=data.revenue_cents, currency=data.currency)
                ),
            ),
        )


def _parse_day(value: str | None) -> date:
    if not value:
        return datetime.now(timezone.utc).date()
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidInputError("Invalid date, expected YYYY-MM-DD") from exc
