from __future__ import annotations

from datetime import datetime, timezone

from tabletop.application.errors import UnauthorizedError
from tabletop.application.ports.repositories import SessionRepository
from tabletop.application.use_cases.context import TenantContext


class AuthenticateSession:
    """Validate an opaque staff session token; issuing tokens happens elsewhere."""

    def __init__(self, session_repository: SessionRepository) -> None:
        self._session_repository = session_repository

    def execute(self, token: str | None) -> TenantContext:
        if not token:
            raise UnauthorizedError("Access denied. No token provided.")

        session = self._session_repository.get_by_token(token)
        if session is None:
            raise UnauthorizedError("Invalid session")
        if session.is_expired(datetime.now(timezone.utc)):
            raise UnauthorizedError("Session expired")
        return TenantContext(restaurant_id=session.restaurant_id, token=token)
