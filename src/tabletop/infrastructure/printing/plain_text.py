from __future__ import annotations

from decimal import Decimal

from tabletop.application.ports.receipts import ReceiptRenderer, ReceiptTicket

RECEIPT_WIDTH = 42


def _amount(cents: int, currency: str) -> str:
    return f"{Decimal(cents) / 100:.2f} {currency}"


def _row(left: str, right: str, width: int = RECEIPT_WIDTH) -> str:
    space = max(width - len(left) - len(right), 1)
    return f"{left}{' ' * space}{right}"


class PlainTextReceiptRenderer(ReceiptRenderer):
    """Fixed-width text ticket; printer-specific byte formatting lives outside."""

    def __init__(self, width: int = RECEIPT_WIDTH) -> None:
        self._width = width

    def render(self, ticket: ReceiptTicket) -> bytes:
        rule = "-" * self._width
        lines = [
            ticket.restaurant_name.center(self._width).rstrip(),
            rule,
            f"Order #{ticket.order_number}",
            f"Table {ticket.table_number}",
            ticket.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        ]
        if ticket.customer_name:
            lines.append(f"Customer: {ticket.customer_name}")
        if ticket.customer_phone:
            lines.append(f"Phone: {ticket.customer_phone}")
        lines.append(rule)

        for line in ticket.lines:
            lines.append(
                _row(
                    f"{line.quantity} x {line.name}",
                    _amount(line.total_price_cents, ticket.currency),
                    self._width,
                )
            )
            if line.special_instructions:
                lines.append(f"  * {line.special_instructions}")

        lines.append(rule)
        lines.append(_row("TOTAL", _amount(ticket.total_cents, ticket.currency), self._width))
        if ticket.notes:
            lines.append(rule)
            lines.append(f"Notes: {ticket.notes}")
        lines.append("")
        return "\n".join(lines).encode("utf-8")
