from __future__ import annotations


class ApplicationError(Exception):
    """Base class for failures a use case reports to its caller."""

    code = "APPLICATION_ERROR"

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class InvalidInputError(ApplicationError):
    code = "INVALID_INPUT"


class NotFoundError(ApplicationError):
    code = "NOT_FOUND"


class ConflictError(ApplicationError):
    code = "CONFLICT"


class UnauthorizedError(ApplicationError):
    code = "UNAUTHORIZED"


class ForbiddenError(ApplicationError):
    code = "FORBIDDEN"


class InternalError(ApplicationError):
    code = "INTERNAL"
