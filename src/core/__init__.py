# Core infrastructure
from src.core.context import clear_context, get_context, get_request_id, set_user_id
from src.core.errors import DomainError
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware


__all__ = [
    "DomainError",
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_logger",
    "get_request_id",
    "set_user_id",
]
