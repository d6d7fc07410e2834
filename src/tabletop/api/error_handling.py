from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tabletop.api.middleware.request_id import get_request_id
from tabletop.application.errors import (
    ApplicationError,
    ConflictError,
    ForbiddenError,
    InternalError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)

INTERNAL_ERROR_MESSAGE = "Internal server error"

logger = logging.getLogger(__name__)


def _error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    content: dict[str, Any] = {
        "error": message,
        "code": code,
        "requestId": get_request_id() or getattr(request.state, "request_id", None),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _application_error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        app_exc = cast(ApplicationError, exc)
        if status_code >= 500:
            logger.error(
                "application_error",
                exc_info=exc,
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "error_code": app_exc.code,
                },
            )
        return _error_response(
            request,
            status_code=status_code,
            code=app_exc.code,
            message=str(app_exc),
            details=app_exc.details,
        )

    return handler


async def _http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 405:
        code = "METHOD_NOT_ALLOWED"
    elif http_exc.status_code == 400:
        code = "BAD_REQUEST"
    return _error_response(
        request,
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    errors = validation_exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else "Request validation failed"
    return _error_response(
        request,
        status_code=400,
        code=InvalidInputError.code,
        message=message,
        details={"errors": jsonable_encoder(errors, exclude={"ctx"})},
    )


async def _unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_error",
        exc_info=exc,
        extra={"method": request.method, "path": request.url.path},
    )
    return _error_response(
        request,
        status_code=500,
        code=InternalError.code,
        message=INTERNAL_ERROR_MESSAGE,
    )


def register_exception_handlers(app: FastAPI) -> None:
    mappings: list[tuple[type[ApplicationError], int]] = [
        (InvalidInputError, 400),
        (UnauthorizedError, 401),
        (ForbiddenError, 403),
        (NotFoundError, 404),
        (ConflictError, 409),
        (InternalError, 500),
    ]

    for exc_cls, status_code in mappings:
        app.add_exception_handler(exc_cls, _application_error_handler(status_code))

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, _unexpected_exception_handler)
    app.add_exception_handler(Exception, _unexpected_exception_handler)
