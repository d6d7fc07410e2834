from __future__ import annotations

from tabletop.application.dto.responses import MoneyResponse
from tabletop.domain.common.money import Money


def to_money_response(money: Money) -> MoneyResponse:
    return MoneyResponse(
        amountCents=money.amount_cents,
        amount=money.to_decimal(),
        currency=money.currency,
    )
