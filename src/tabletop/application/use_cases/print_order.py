from __future__ import annotations

import base64

from tabletop.application.dto.responses import (
    PrintEnvelope,
    PrinterListResponse,
    PrintResultResponse,
)
from tabletop.application.errors import InvalidInputError, NotFoundError
from tabletop.application.mappers.kitchen_mapper import to_printer_response
from tabletop.application.ports.receipts import ReceiptLine, ReceiptRenderer, ReceiptTicket
from tabletop.application.ports.repositories import (
    OrderRepository,
    PrinterRepository,
    RestaurantRepository,
)
from tabletop.application.use_cases.context import TenantContext
from tabletop.application.use_cases.order_transitions import OrderNotFoundError
from tabletop.domain.common.ids import OrderId, PrinterId
from tabletop.domain.kitchen.entities import PrinterType
from tabletop.domain.order.entities import Order


class PrinterNotFoundError(NotFoundError):
    code = "PRINTER_NOT_FOUND"


class UnsupportedPrinterError(InvalidInputError):
    code = "UNSUPPORTED_PRINTER"


def order_number(order_id: str) -> str:
    _, _, suffix = order_id.partition("_")
    return (suffix or order_id)[:8].upper()


def build_receipt_ticket(order: Order, restaurant_name: str) -> ReceiptTicket:
    return ReceiptTicket(
        order_number=order_number(str(order.order_id)),
        restaurant_name=restaurant_name,
        table_number=order.table_number,
        total_cents=order.total.amount_cents,
        currency=order.total.currency,
        created_at=order.created_at,
        customer_name=order.customer_name,
        customer_phone=order.customer_phone,
        notes=order.notes,
        lines=[
            ReceiptLine(
                name=line.name,
                quantity=line.quantity,
                unit_price_cents=line.unit_price.amount_cents,
                total_price_cents=line.line_total.amount_cents,
                special_instructions=line.special_instructions,
            )
            for line in order.lines
        ],
    )


class PrintOrder:
    def __init__(
        self,
        order_repository: OrderRepository,
        printer_repository: PrinterRepository,
        restaurant_repository: RestaurantRepository,
        renderer: ReceiptRenderer,
    ) -> None:
        self._order_repository = order_repository
        self._printer_repository = printer_repository
        self._restaurant_repository = restaurant_repository
        self._renderer = renderer

    def execute(self, tenant: TenantContext, order_id: OrderId, printer_id: str) -> PrintEnvelope:
        order = self._order_repository.get(order_id, tenant.restaurant_id)
        if order is None:
            raise OrderNotFoundError("Order not found", details={"orderId": str(order_id)})

        printer = self._printer_repository.get_active(PrinterId(printer_id), tenant.restaurant_id)
        if printer is None:
            raise PrinterNotFoundError(
                "Printer not found or inactive",
                details={"printerId": printer_id},
            )
        if printer.printer_type != PrinterType.ESCPOS.value:
            raise UnsupportedPrinterError(
                f"Printer type {printer.printer_type} is not supported",
                details={"printerId": printer_id},
            )

        restaurant = self._restaurant_repository.get(tenant.restaurant_id)
        restaurant_name = restaurant.name if restaurant is not None else ""
        payload = self._renderer.render(build_receipt_ticket(order, restaurant_name))

        return PrintEnvelope(
            message="Print job prepared",
            printResult=PrintResultResponse(
                success=True,
                type=printer.printer_type,
                data=base64.b64encode(payload).decode("ascii"),
                connectionString=printer.connection_string,
                message=f"Receipt for order {order_number(str(order.order_id))} ready",
            ),
        )


class ListPrinters:
    def __init__(self, printer_repository: PrinterRepository) -> None:
        self._printer_repository = printer_repository

    def execute(self, tenant: TenantContext) -> PrinterListResponse:
        printers = self._printer_repository.list_for_restaurant(tenant.restaurant_id)
        return PrinterListResponse(printers=[to_printer_response(printer) for printer in printers])
