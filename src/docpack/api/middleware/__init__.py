"""FastAPI error handling."""

from .error_handlers import (
    archive_not_ready_handler,
    http_exception_handler,
    internal_exception_handler,
    malformed_archive_handler,
    register_error_handlers,
    unknown_shape_handler,
    validation_exception_handler,
)

__all__ = [
    "register_error_handlers",
    "validation_exception_handler",
    "http_exception_handler",
    "malformed_archive_handler",
    "unknown_shape_handler",
    "archive_not_ready_handler",
    "internal_exception_handler",
]
