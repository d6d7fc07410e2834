from __future__ import annotations

from sqlalchemy import Engine, delete, select
from sqlalchemy.orm import Session

from tabletop.application.ports.repositories import SessionRepository
from tabletop.domain.common.ids import RestaurantId, SessionId
from tabletop.domain.restaurant.entities import StaffSession
from tabletop.infrastructure.db.models.restaurant import SessionModel
from tabletop.infrastructure.db.repositories.common import as_utc
from tabletop.infrastructure.db.session import get_engine


class SqlAlchemySessionRepository(SessionRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get_by_token(self, token: str) -> StaffSession | None:
        statement = select(SessionModel).where(SessionModel.token == token).limit(1)
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()

        if model is None:
            return None

        return StaffSession(
            session_id=SessionId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            token=model.token,
            expires_at=as_utc(model.expires_at) or model.expires_at,
        )

    def add(self, staff_session: StaffSession) -> None:
        with Session(self._engine) as session:
            session.add(
                SessionModel(
                    id=str(staff_session.session_id),
                    restaurant_id=str(staff_session.restaurant_id),
                    token=staff_session.token,
                    expires_at=staff_session.expires_at,
                )
            )
            session.commit()

    def delete_by_token(self, token: str) -> None:
        with Session(self._engine) as session:
            session.execute(delete(SessionModel).where(SessionModel.token == token))
            session.commit()
