"""Domain error taxonomy shared by all modules.

Every service raises a subclass of one of the six categories below. The HTTP
layer maps a category to a status code in exactly one place (``STATUS_BY_CATEGORY``)
so routers never translate errors themselves.
"""

from typing import Any

from fastapi import status


class DomainError(Exception):
    """Base domain error."""

    category = "server_error"

    def __init__(
        self,
        message: str,
        code: str = "domain_error",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(DomainError):
    """Referenced entity does not exist."""

    category = "not_found"

    def __init__(self, message: str = "Resource not found", code: str = "not_found"):
        super().__init__(message, code)


class ForbiddenError(DomainError):
    """Caller is not allowed to perform the operation."""

    category = "forbidden"

    def __init__(
        self,
        message: str = "Insufficient permissions",
        code: str = "forbidden",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


class ValidationError(DomainError):
    """Input is outside the accepted domain."""

    category = "validation_error"

    def __init__(self, message: str = "Invalid input", code: str = "validation_error"):
        super().__init__(message, code)


class ConflictError(DomainError):
    """Uniqueness violation or lost concurrent update."""

    category = "conflict"

    def __init__(self, message: str = "Conflicting update", code: str = "conflict"):
        super().__init__(message, code)


class InvalidStateError(DomainError):
    """Entity is in a state that does not allow the operation."""

    category = "invalid_state"

    def __init__(
        self, message: str = "Operation not allowed", code: str = "invalid_state"
    ):
        super().__init__(message, code)


class ServerError(DomainError):
    """Storage or other internal failure. Never exposed verbatim."""

    category = "server_error"

    def __init__(
        self, message: str = "Internal server error", code: str = "server_error"
    ):
        super().__init__(message, code)


STATUS_BY_CATEGORY: dict[str, int] = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "validation_error": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "conflict": status.HTTP_409_CONFLICT,
    "invalid_state": status.HTTP_400_BAD_REQUEST,
    "server_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_code_for(error: DomainError) -> int:
    """Get the HTTP status code for a domain error."""
    return STATUS_BY_CATEGORY.get(
        error.category, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
