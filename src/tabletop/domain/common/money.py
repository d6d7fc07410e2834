from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    amount_cents: int
    currency: str

    def __post_init__(self) -> None:
        if self.amount_cents < 0:
            raise ValueError("amount_cents must be >= 0")
        if len(self.currency) != 3 or not self.currency.isalpha() or not self.currency.isupper():
            raise ValueError("currency must be a 3-letter uppercase code")

    @classmethod
    def from_decimal(cls, amount: Decimal | int | str, currency: str) -> Money:
        value = Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP)
        return cls(amount_cents=int(value * 100), currency=currency)

    def to_decimal(self) -> Decimal:
        return (Decimal(self.amount_cents) / 100).quantize(_CENT)

    def times(self, quantity: int) -> Money:
        return Money(amount_cents=self.amount_cents * quantity, currency=self.currency)


def sum_money(values: list[Money], currency: str) -> Money:
    for value in values:
        if value.currency != currency:
            raise ValueError("cannot sum money with mixed currencies")
    return Money(amount_cents=sum(value.amount_cents for value in values), currency=currency)
