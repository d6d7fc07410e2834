from __future__ import annotations

import logging
import weakref
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Engine, select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from tabletop.application.ports.repositories import RestaurantRepository
from tabletop.domain.common.ids import RestaurantId
from tabletop.domain.restaurant.entities import Restaurant
from tabletop.infrastructure.db.models.restaurant import (
    OPTIONAL_RESTAURANT_COLUMNS,
    RestaurantModel,
)
from tabletop.infrastructure.db.repositories.common import as_utc
from tabletop.infrastructure.db.session import get_engine

UNDEFINED_COLUMN_SQLSTATE = "42703"

logger = logging.getLogger(__name__)

# engines whose schema predates the availability columns
_DEGRADED_ENGINES: weakref.WeakSet[Engine] = weakref.WeakSet()

_OPTIONAL_DEFAULTS: dict[str, Any] = {
    "is_accepting_orders": True,
    "service_hours": None,
    "offline_notice": None,
}


def is_missing_column_error(exc: DBAPIError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == UNDEFINED_COLUMN_SQLSTATE:
        return True
    message = str(orig).lower()
    return "no such column" in message or "has no column named" in message


class SqlAlchemyRestaurantRepository(RestaurantRepository):
    """Restaurant reads and profile writes.

    Databases that have not run the availability migration lack the optional
    columns; reads and writes are retried without them and the engine is
    remembered as degraded so later calls skip the failing attempt.
    """

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    @property
    def supports_optional_columns(self) -> bool:
        return self._engine not in _DEGRADED_ENGINES

    def get(self, restaurant_id: RestaurantId) -> Restaurant | None:
        if self.supports_optional_columns:
            try:
                return self._select(restaurant_id, include_optional=True)
            except DBAPIError as exc:
                if not is_missing_column_error(exc):
                    raise
                self._mark_degraded()
        return self._select(restaurant_id, include_optional=False)

    def update_profile(
        self,
        restaurant_id: RestaurantId,
        changes: dict[str, Any],
    ) -> Restaurant | None:
        if self.supports_optional_columns:
            try:
                self._update(restaurant_id, changes)
                return self.get(restaurant_id)
            except DBAPIError as exc:
                if not is_missing_column_error(exc):
                    raise
                self._mark_degraded()

        reduced = {
            key: value for key, value in changes.items() if key not in OPTIONAL_RESTAURANT_COLUMNS
        }
        self._update(restaurant_id, reduced)
        return self.get(restaurant_id)

    def _mark_degraded(self) -> None:
        logger.warning(
            "restaurant_optional_columns_missing",
            extra={"columns": ",".join(OPTIONAL_RESTAURANT_COLUMNS)},
        )
        _DEGRADED_ENGINES.add(self._engine)

    def _select(self, restaurant_id: RestaurantId, include_optional: bool) -> Restaurant | None:
        table = RestaurantModel.__table__
        columns = [
            column
            for column in table.c
            if include_optional or column.name not in OPTIONAL_RESTAURANT_COLUMNS
        ]
        statement = select(*columns).where(table.c.id == str(restaurant_id)).limit(1)
        with Session(self._engine) as session:
            row = session.execute(statement).mappings().first()

        if row is None:
            return None

        return self._to_domain(dict(row))

    def _update(self, restaurant_id: RestaurantId, changes: dict[str, Any]) -> None:
        values = dict(changes)
        values["updated_at"] = datetime.now(timezone.utc)
        statement = (
            update(RestaurantModel.__table__)
            .where(RestaurantModel.__table__.c.id == str(restaurant_id))
            .values(**values)
        )
        with Session(self._engine) as session:
            session.execute(statement)
            session.commit()

    def _to_domain(self, row: dict[str, Any]) -> Restaurant:
        for key, default in _OPTIONAL_DEFAULTS.items():
            row.setdefault(key, default)
        return Restaurant(
            restaurant_id=RestaurantId(row["id"]),
            name=row["name"],
            email=row["email"],
            is_active=bool(row["is_active"]),
            is_accepting_orders=(
                True if row["is_accepting_orders"] is None else bool(row["is_accepting_orders"])
            ),
            service_hours=row["service_hours"],
            offline_notice=row["offline_notice"],
            phone=row.get("phone"),
            address=row.get("address"),
            logo_url=row.get("logo_url"),
            theme_color=row.get("theme_color"),
            password_hash=row.get("password_hash"),
            created_at=as_utc(row.get("created_at")),
            updated_at=as_utc(row.get("updated_at")),
        )
