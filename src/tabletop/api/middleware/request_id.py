from __future__ import annotations

import re
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

REQUEST_ID_HEADER = "X-Request-Id"
MAX_REQUEST_ID_LENGTH = 64

# echoed into logs, event envelopes and error bodies
_REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9._:\-]+")

request_id_context: ContextVar[str | None] = ContextVar("tabletop_request_id", default=None)


def get_request_id() -> str | None:
    return request_id_context.get()


def resolve_request_id(candidate: str | None) -> str:
    """Keep a caller-supplied id when it is short and printable, else mint one."""
    if candidate:
        candidate = candidate.strip()
        if (
            len(candidate) <= MAX_REQUEST_ID_LENGTH
            and _REQUEST_ID_PATTERN.fullmatch(candidate) is not None
        ):
            return candidate
    return str(uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_context.set(request_id)
        request.state.request_id = request_id
        try:
            response = await call_next(request)
        finally:
            request_id_context.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
