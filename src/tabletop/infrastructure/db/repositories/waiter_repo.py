from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, select, update
from sqlalchemy.orm import Session

from tabletop.application.ports.repositories import WaiterCallRepository
from tabletop.domain.common.ids import RestaurantId, TableId, WaiterCallId
from tabletop.domain.waiter.entities import WaiterCall, WaiterCallStatus
from tabletop.infrastructure.db.models.waiter import WaiterCallModel
from tabletop.infrastructure.db.repositories.common import as_utc
from tabletop.infrastructure.db.session import get_engine


class SqlAlchemyWaiterCallRepository(WaiterCallRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, call: WaiterCall) -> None:
        with Session(self._engine) as session:
            session.add(
                WaiterCallModel(
                    id=str(call.call_id),
                    restaurant_id=str(call.restaurant_id),
                    table_id=str(call.table_id),
                    table_number=call.table_number,
                    status=call.status.value,
                    customer_message=call.customer_message,
                    response_message=call.response_message,
                    created_at=call.created_at,
                    responded_at=call.responded_at,
                    resolved_at=call.resolved_at,
                )
            )
            session.commit()

    def get_for_table(self, call_id: WaiterCallId, table_id: TableId) -> WaiterCall | None:
        statement = select(WaiterCallModel).where(
            WaiterCallModel.id == str(call_id),
            WaiterCallModel.table_id == str(table_id),
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
        return None if model is None else self._to_domain(model)

    def list_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        status: WaiterCallStatus | None,
        limit: int,
    ) -> list[WaiterCall]:
        statement = select(WaiterCallModel).where(
            WaiterCallModel.restaurant_id == str(restaurant_id)
        )
        if status is None:
            statement = statement.where(WaiterCallModel.status != WaiterCallStatus.RESOLVED.value)
        else:
            statement = statement.where(WaiterCallModel.status == status.value)
        statement = statement.order_by(
            WaiterCallModel.created_at.desc(),
            WaiterCallModel.id.desc(),
        ).limit(limit)

        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def respond(
        self,
        call_id: WaiterCallId,
        restaurant_id: RestaurantId,
        response_message: str,
        now: datetime,
    ) -> WaiterCall | None:
        return self._apply(
            call_id,
            restaurant_id,
            status=WaiterCallStatus.RESPONDED.value,
            response_message=response_message,
            responded_at=now,
        )

    def resolve(
        self,
        call_id: WaiterCallId,
        restaurant_id: RestaurantId,
        now: datetime,
    ) -> WaiterCall | None:
        return self._apply(
            call_id,
            restaurant_id,
            status=WaiterCallStatus.RESOLVED.value,
            resolved_at=now,
        )

    def _apply(
        self,
        call_id: WaiterCallId,
        restaurant_id: RestaurantId,
        **values: object,
    ) -> WaiterCall | None:
        scope = (
            WaiterCallModel.id == str(call_id),
            WaiterCallModel.restaurant_id == str(restaurant_id),
        )
        with Session(self._engine) as session:
            statement = update(WaiterCallModel).where(*scope).values(**values)
            updated = session.execute(statement).rowcount == 1
            session.commit()
            if not updated:
                return None
            model = session.execute(select(WaiterCallModel).where(*scope)).scalar_one()
            return self._to_domain(model)

    def _to_domain(self, model: WaiterCallModel) -> WaiterCall:
        return WaiterCall(
            call_id=WaiterCallId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            table_id=TableId(model.table_id),
            table_number=model.table_number,
            status=WaiterCallStatus(model.status),
            created_at=as_utc(model.created_at) or datetime.now(timezone.utc),
            customer_message=model.customer_message,
            response_message=model.response_message,
            responded_at=as_utc(model.responded_at),
            resolved_at=as_utc(model.resolved_at),
        )
