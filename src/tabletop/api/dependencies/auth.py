from __future__ import annotations

from fastapi import Header

from tabletop.application.errors import UnauthorizedError
from tabletop.application.use_cases.authenticate import AuthenticateSession
from tabletop.application.use_cases.context import TenantContext
from tabletop.infrastructure.db.repositories.session_repo import SqlAlchemySessionRepository

BEARER_PREFIX = "Bearer "


def _authenticate_use_case() -> AuthenticateSession:
    return AuthenticateSession(session_repository=SqlAlchemySessionRepository())


def get_bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise UnauthorizedError("Access denied. No token provided.")
    if not authorization.startswith(BEARER_PREFIX):
        raise UnauthorizedError("Invalid Authorization header format. Expected: Bearer <token>")
    return authorization[len(BEARER_PREFIX) :].strip()


def require_tenant(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> TenantContext:
    """Resolve the staff session behind the bearer token into the acting tenant."""
    token = get_bearer_token(authorization)
    return _authenticate_use_case().execute(token)
