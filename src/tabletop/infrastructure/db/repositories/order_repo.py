from __future__ import annotations

import base64
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Engine, and_, delete, func, or_, select, update
from sqlalchemy.orm import Session, joinedload

from tabletop.application.ports.repositories import (
    InvalidCursorError,
    OrderRepository,
    OrderStatsData,
    OrderStatusConflictError,
)
from tabletop.domain.common.ids import MenuItemId, OrderId, OrderLineId, RestaurantId, TableId
from tabletop.domain.common.money import Money
from tabletop.domain.order.entities import Order, OrderLine, OrderStatus
from tabletop.infrastructure.db.models.order import OrderLineModel, OrderModel
from tabletop.infrastructure.db.repositories.common import as_utc
from tabletop.infrastructure.db.session import get_engine, store_currency


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, engine: Engine | None = None, currency: str | None = None) -> None:
        self._engine = engine or get_engine()
        self._currency = currency or store_currency()

    def add(self, order: Order) -> None:
        with Session(self._engine) as session:
            session.add(self._to_model(order))
            session.commit()

    def add_lines(self, order: Order, lines: list[OrderLine]) -> None:
        with Session(self._engine) as session:
            session.add_all([self._line_to_model(order.order_id, line) for line in lines])
            session.commit()

    def delete(self, order_id: OrderId, restaurant_id: RestaurantId) -> None:
        statement = delete(OrderModel).where(
            OrderModel.id == str(order_id),
            OrderModel.restaurant_id == str(restaurant_id),
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount:
                session.execute(
                    delete(OrderLineModel).where(OrderLineModel.order_id == str(order_id))
                )
            session.commit()

    def get(self, order_id: OrderId, restaurant_id: RestaurantId) -> Order | None:
        statement = (
            select(OrderModel)
            .options(joinedload(OrderModel.lines))
            .where(
                OrderModel.id == str(order_id),
                OrderModel.restaurant_id == str(restaurant_id),
            )
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).unique().scalar_one_or_none()

        if model is None:
            return None

        return self._to_domain(model)

    def transition(self, order: Order, from_statuses: frozenset[OrderStatus]) -> Order:
        statement = (
            update(OrderModel)
            .where(
                OrderModel.id == str(order.order_id),
                OrderModel.restaurant_id == str(order.restaurant_id),
                OrderModel.status.in_(sorted(status.value for status in from_statuses)),
            )
            .values(
                status=order.status.value,
                preparation_time=order.preparation_time,
                rejection_reason=order.rejection_reason,
                accepted_at=order.accepted_at,
                rejected_at=order.rejected_at,
                cooking_started_at=order.cooking_started_at,
                finished_at=order.finished_at,
            )
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise OrderStatusConflictError(
                    f"order {order.order_id} is no longer in one of {sorted(from_statuses)}"
                )
            session.commit()

        updated = self.get(order.order_id, order.restaurant_id)
        if updated is None:
            raise OrderStatusConflictError(f"order {order.order_id} disappeared during update")
        return updated

    def list_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        status: OrderStatus | None,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Order], str | None]:
        statement = (
            select(OrderModel)
            .options(joinedload(OrderModel.lines))
            .where(OrderModel.restaurant_id == str(restaurant_id))
        )
        if status is not None:
            statement = statement.where(OrderModel.status == status.value)

        cursor_parts = _decode_cursor(cursor) if cursor else None
        if cursor_parts is not None:
            cursor_created_at, cursor_order_id = cursor_parts
            statement = statement.where(
                or_(
                    OrderModel.created_at < cursor_created_at,
                    and_(
                        OrderModel.created_at == cursor_created_at,
                        OrderModel.id < cursor_order_id,
                    ),
                )
            )

        statement = statement.order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).limit(
            limit + 1
        )

        with Session(self._engine) as session:
            models = list(session.execute(statement).unique().scalars().all())

        has_more = len(models) > limit
        page_models = models[:limit]
        orders = [self._to_domain(model) for model in page_models]
        next_cursor: str | None = None
        if has_more and page_models:
            last = page_models[-1]
            next_cursor = _encode_cursor(as_utc(last.created_at) or last.created_at, last.id)
        return orders, next_cursor

    def stats_for_period(
        self,
        restaurant_id: RestaurantId,
        start: datetime,
        end: datetime,
    ) -> OrderStatsData:
        in_period = (
            OrderModel.restaurant_id == str(restaurant_id),
            OrderModel.created_at >= start,
            OrderModel.created_at < end,
        )
        counts_statement = (
            select(OrderModel.status, func.count(OrderModel.id))
            .where(*in_period)
            .group_by(OrderModel.status)
        )
        revenue_statement = select(
            func.coalesce(func.sum(OrderModel.total_amount), 0)
        ).where(*in_period, OrderModel.status == OrderStatus.FINISHED.value)

        with Session(self._engine) as session:
            rows = session.execute(counts_statement).all()
            revenue = session.execute(revenue_statement).scalar_one()

        counts = {status.value: 0 for status in OrderStatus}
        for status_value, count in rows:
            if status_value in counts:
                counts[status_value] = int(count)
        revenue_money = Money.from_decimal(Decimal(str(revenue or 0)), self._currency)
        return OrderStatsData(
            revenue_cents=revenue_money.amount_cents,
            currency=self._currency,
            counts=counts,
        )

    def _to_model(self, order: Order) -> OrderModel:
        return OrderModel(
            id=str(order.order_id),
            restaurant_id=str(order.restaurant_id),
            table_id=str(order.table_id),
            table_number=order.table_number,
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            total_amount=order.total.to_decimal(),
            status=order.status.value,
            notes=order.notes,
            preparation_time=order.preparation_time,
            rejection_reason=order.rejection_reason,
            created_at=order.created_at,
            accepted_at=order.accepted_at,
            rejected_at=order.rejected_at,
            cooking_started_at=order.cooking_started_at,
            finished_at=order.finished_at,
        )

    def _line_to_model(self, order_id: OrderId, line: OrderLine) -> OrderLineModel:
        return OrderLineModel(
            id=str(line.line_id),
            order_id=str(order_id),
            menu_item_id=str(line.item_id),
            item_name=line.name,
            quantity=line.quantity,
            unit_price=line.unit_price.to_decimal(),
            total_price=line.line_total.to_decimal(),
            special_instructions=line.special_instructions,
        )

    def _to_domain(self, model: OrderModel) -> Order:
        lines = [
            OrderLine(
                line_id=OrderLineId(line.id),
                item_id=MenuItemId(line.menu_item_id),
                name=line.item_name,
                quantity=line.quantity,
                unit_price=Money.from_decimal(line.unit_price, self._currency),
                line_total=Money.from_decimal(line.total_price, self._currency),
                special_instructions=line.special_instructions,
            )
            for line in model.lines
        ]
        return Order(
            order_id=OrderId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            table_id=TableId(model.table_id),
            table_number=model.table_number,
            status=OrderStatus(model.status),
            lines=lines,
            total=Money.from_decimal(model.total_amount, self._currency),
            created_at=as_utc(model.created_at) or datetime.now(timezone.utc),
            customer_name=model.customer_name,
            customer_phone=model.customer_phone,
            notes=model.notes,
            preparation_time=model.preparation_time,
            rejection_reason=model.rejection_reason,
            accepted_at=as_utc(model.accepted_at),
            rejected_at=as_utc(model.rejected_at),
            cooking_started_at=as_utc(model.cooking_started_at),
            finished_at=as_utc(model.finished_at),
        )


def _encode_cursor(created_at: datetime, order_id: str) -> str:
    payload = f"{created_at.isoformat()}|{order_id}"
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")


def _decode_cursor(cursor: str) -> tuple[datetime, str]:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
        created_at_raw, order_id = raw.split("|", 1)
        created_at = datetime.fromisoformat(created_at_raw)
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return created_at, order_id
    except Exception as exc:
        raise InvalidCursorError("invalid cursor") from exc
