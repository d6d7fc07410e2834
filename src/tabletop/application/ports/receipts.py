from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class ReceiptLine:
    name: str
    quantity: int
    unit_price_cents: int
    total_price_cents: int
    special_instructions: str | None = None


@dataclass(frozen=True)
class ReceiptTicket:
    order_number: str
    restaurant_name: str
    table_number: str
    total_cents: int
    currency: str
    created_at: datetime
    customer_name: str | None = None
    customer_phone: str | None = None
    notes: str | None = None
    lines: list[ReceiptLine] = field(default_factory=list)


class ReceiptRenderer(Protocol):
    def render(self, ticket: ReceiptTicket) -> bytes: ...
