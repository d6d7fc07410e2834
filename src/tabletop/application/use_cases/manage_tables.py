from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from tabletop.application.dto.requests import CreateTableRequest, UpdateTableRequest
from tabletop.application.dto.responses import MessageResponse, TableEnvelope, TableListResponse
from tabletop.application.errors import ConflictError, InvalidInputError
from tabletop.application.mappers.table_mapper import to_table_response
from tabletop.application.ports.repositories import DuplicateKeyError, TableRepository
from tabletop.application.use_cases.context import TenantContext
from tabletop.application.use_cases.place_order import TableNotFoundError
from tabletop.domain.common.ids import TableId
from tabletop.domain.table.entities import Table


class DuplicateTableNumberError(ConflictError):
    code = "DUPLICATE_TABLE_NUMBER"


def _normalize_number(value: str | int | None) -> str:
    normalized = "" if value is None else str(value).strip()
    if not normalized:
        raise InvalidInputError("Table number is required")
    return normalized


def _duplicate(table_number: str) -> DuplicateTableNumberError:
    return DuplicateTableNumberError(
        "Table number already exists",
        details={"tableNumber": table_number},
    )


class ListTables:
    def __init__(self, table_repository: TableRepository) -> None:
        self._table_repository = table_repository

    def execute(self, tenant: TenantContext) -> TableListResponse:
        tables = self._table_repository.list_for_restaurant(tenant.restaurant_id)
        return TableListResponse(tables=[to_table_response(table) for table in tables])


class CreateTable:
    def __init__(self, table_repository: TableRepository) -> None:
        self._table_repository = table_repository

    def execute(self, tenant: TenantContext, request_dto: CreateTableRequest) -> TableEnvelope:
        table_number = _normalize_number(request_dto.table_number)
        if self._table_repository.get_by_number(table_number, tenant.restaurant_id) is not None:
            raise _duplicate(table_number)

        table = Table(
            table_id=TableId(f"tbl_{uuid4().hex[:12]}"),
            restaurant_id=tenant.restaurant_id,
            table_number=table_number,
            is_active=True,
            created_at=datetime.now(timezone.utc),
        )
        # a concurrent insert with the same number still trips the unique constraint
        try:
            self._table_repository.add(table)
        except DuplicateKeyError as exc:
            raise _duplicate(table_number) from exc

        return TableEnvelope(message="Table created successfully", table=to_table_response(table))


class UpdateTable:
    def __init__(self, table_repository: TableRepository) -> None:
        self._table_repository = table_repository

    def execute(
        self,
        tenant: TenantContext,
        table_id: TableId,
        request_dto: UpdateTableRequest,
    ) -> TableEnvelope:
        table = self._table_repository.get(table_id, tenant.restaurant_id)
        if table is None:
            raise TableNotFoundError("Table not found", details={"tableId": str(table_id)})

        table_number = None
        if request_dto.table_number is not None:
            table_number = _normalize_number(request_dto.table_number)
            existing = self._table_repository.get_by_number(table_number, tenant.restaurant_id)
            if existing is not None and existing.table_id != table.table_id:
                raise _duplicate(table_number)

        try:
            updated = self._table_repository.update(
                table.with_changes(table_number=table_number, is_active=request_dto.is_active)
            )
        except DuplicateKeyError as exc:
            raise _duplicate(table_number or table.table_number) from exc
        if updated is None:
            raise TableNotFoundError("Table not found", details={"tableId": str(table_id)})

        return TableEnvelope(message="Table updated successfully", table=to_table_response(updated))


class DeleteTable:
    def __init__(self, table_repository: TableRepository) -> None:
        self._table_repository = table_repository

    def execute(self, tenant: TenantContext, table_id: TableId) -> MessageResponse:
        if not self._table_repository.delete(table_id, tenant.restaurant_id):
            raise TableNotFoundError("Table not found", details={"tableId": str(table_id)})
        return MessageResponse(message="Table deleted successfully")
