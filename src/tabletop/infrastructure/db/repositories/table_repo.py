from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tabletop.application.ports.repositories import DuplicateKeyError, TableRepository
from tabletop.domain.common.ids import RestaurantId, TableId
from tabletop.domain.table.entities import Table
from tabletop.infrastructure.db.models.table import TableModel
from tabletop.infrastructure.db.repositories.common import as_utc
from tabletop.infrastructure.db.session import get_engine


class SqlAlchemyTableRepository(TableRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, table_id: TableId, restaurant_id: RestaurantId) -> Table | None:
        return self._first(
            select(TableModel).where(
                TableModel.id == str(table_id),
                TableModel.restaurant_id == str(restaurant_id),
            )
        )

    def get_by_id(self, table_id: TableId) -> Table | None:
        # public QR flows: the table row itself decides the tenant
        return self._first(select(TableModel).where(TableModel.id == str(table_id)))

    def get_by_number(self, table_number: str, restaurant_id: RestaurantId) -> Table | None:
        return self._first(
            select(TableModel).where(
                TableModel.table_number == table_number,
                TableModel.restaurant_id == str(restaurant_id),
            )
        )

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Table]:
        statement = (
            select(TableModel)
            .where(TableModel.restaurant_id == str(restaurant_id))
            .order_by(TableModel.table_number)
        )
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def add(self, table: Table) -> None:
        with Session(self._engine) as session:
            session.add(
                TableModel(
                    id=str(table.table_id),
                    restaurant_id=str(table.restaurant_id),
                    table_number=table.table_number,
                    is_active=table.is_active,
                    qr_code_url=table.qr_code_url,
                    created_at=table.created_at or datetime.now(timezone.utc),
                )
            )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateKeyError(
                    f"table number {table.table_number} already exists"
                ) from exc

    def update(self, table: Table) -> Table | None:
        statement = (
            update(TableModel)
            .where(
                TableModel.id == str(table.table_id),
                TableModel.restaurant_id == str(table.restaurant_id),
            )
            .values(table_number=table.table_number, is_active=table.is_active)
        )
        with Session(self._engine) as session:
            try:
                updated = session.execute(statement).rowcount == 1
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateKeyError(
                    f"table number {table.table_number} already exists"
                ) from exc
        if not updated:
            return None
        return self.get(table.table_id, table.restaurant_id)

    def delete(self, table_id: TableId, restaurant_id: RestaurantId) -> bool:
        statement = delete(TableModel).where(
            TableModel.id == str(table_id),
            TableModel.restaurant_id == str(restaurant_id),
        )
        with Session(self._engine) as session:
            deleted = session.execute(statement).rowcount > 0
            session.commit()
        return deleted

    def _first(self, statement) -> Table | None:
        with Session(self._engine) as session:
            model = session.execute(statement.limit(1)).scalar_one_or_none()

        if model is None:
            return None

        return self._to_domain(model)

    def _to_domain(self, model: TableModel) -> Table:
        return Table(
            table_id=TableId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            table_number=model.table_number,
            is_active=model.is_active,
            created_at=as_utc(model.created_at),
            qr_code_url=model.qr_code_url,
        )
