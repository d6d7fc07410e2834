from __future__ import annotations

from fastapi import APIRouter, Depends, status

from tabletop.api.dependencies.auth import require_tenant
from tabletop.application.dto.requests import CreateTableRequest, UpdateTableRequest
from tabletop.application.dto.responses import MessageResponse, TableEnvelope, TableListResponse
from tabletop.application.use_cases.context import TenantContext
from tabletop.application.use_cases.manage_tables import (
    CreateTable,
    DeleteTable,
    ListTables,
    UpdateTable,
)
from tabletop.domain.common.ids import TableId
from tabletop.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository

router = APIRouter(prefix="/api/tables", tags=["tables"])


def _table_repository() -> SqlAlchemyTableRepository:
    return SqlAlchemyTableRepository()


@router.get("", response_model=TableListResponse)
def list_tables(tenant: TenantContext = Depends(require_tenant)) -> TableListResponse:
    return ListTables(_table_repository()).execute(tenant)


@router.post("", response_model=TableEnvelope, status_code=status.HTTP_201_CREATED)
def create_table(
    request_dto: CreateTableRequest,
    tenant: TenantContext = Depends(require_tenant),
) -> TableEnvelope:
    return CreateTable(_table_repository()).execute(tenant, request_dto)


@router.put("/{table_id}", response_model=TableEnvelope)
def update_table(
    table_id: str,
    request_dto: UpdateTableRequest,
    tenant: TenantContext = Depends(require_tenant),
) -> TableEnvelope:
    return UpdateTable(_table_repository()).execute(tenant, TableId(table_id), request_dto)


@router.delete("/{table_id}", response_model=MessageResponse)
def delete_table(
    table_id: str,
    tenant: TenantContext = Depends(require_tenant),
) -> MessageResponse:
    return DeleteTable(_table_repository()).execute(tenant, TableId(table_id))
