from __future__ import annotations

from tabletop.application.dto.responses import TableRefResponse, TableResponse
from tabletop.domain.table.entities import Table


def to_table_response(table: Table) -> TableResponse:
    return TableResponse(
        tableId=str(table.table_id),
        restaurantId=str(table.restaurant_id),
        tableNumber=table.table_number,
        isActive=table.is_active,
        qrCodeUrl=table.qr_code_url,
        createdAt=table.created_at,
    )


def to_table_ref_response(table: Table) -> TableRefResponse:
    return TableRefResponse(tableId=str(table.table_id), tableNumber=table.table_number)
