"""FastAPI exception handlers aligned with the HTTP API contract."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...core.archive import MalformedArchive, UnknownShape
from ...core.service import ArchiveNotReady

logger = logging.getLogger(__name__)

DEFAULT_ERRORS: Dict[int, Tuple[str, str]] = {
    status.HTTP_400_BAD_REQUEST: ("validation_error", "Invalid request payload"),
    status.HTTP_404_NOT_FOUND: ("not_found", "Resource not found"),
    status.HTTP_409_CONFLICT: ("archive_not_ready", "Docpack build has not completed"),
    status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: (
        "payload_too_large",
        "Payload exceeds allowed size",
    ),
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: ("unknown_shape", "Unrecognised docpack layout"),
    status.HTTP_422_UNPROCESSABLE_ENTITY: ("malformed_archive", "Docpack archive is malformed"),
    status.HTTP_500_INTERNAL_SERVER_ERROR: ("internal_error", "Internal server error"),
}


def _normalize_error(
    status_code: int, detail: Any
) -> Tuple[str, str, Optional[Dict[str, Any]]]:
    default_error, default_message = DEFAULT_ERRORS.get(
        status_code, DEFAULT_ERRORS[status.HTTP_500_INTERNAL_SERVER_ERROR]
    )
    if isinstance(detail, dict):
        error = detail.get("error", default_error)
        message = detail.get("message", default_message)
        detail_payload = detail.get("detail")
        if detail_payload is None:
            remainder = {
                k: v for k, v in detail.items() if k not in {"error", "message", "detail"}
            }
            detail_payload = remainder or None
        return error, message, detail_payload
    if isinstance(detail, str) and detail:
        return default_error, detail, None
    return default_error, default_message, None


def _response(status_code: int, detail: Any) -> JSONResponse:
    error, message, extra = _normalize_error(status_code, detail)
    return JSONResponse(
        status_code=status_code, content={"error": error, "message": message, "detail": extra}
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    detail = {"detail": {"errors": exc.errors()}}
    return _response(status.HTTP_400_BAD_REQUEST, detail)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return _response(exc.status_code, exc.detail)


async def malformed_archive_handler(request: Request, exc: MalformedArchive) -> JSONResponse:
    logger.warning("Rejected malformed docpack: %s", exc)
    return _response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        {"message": str(exc), "detail": {"member": exc.member}},
    )


async def unknown_shape_handler(request: Request, exc: UnknownShape) -> JSONResponse:
    logger.warning("Rejected docpack of unknown shape: %s", exc)
    return _response(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, str(exc))


async def archive_not_ready_handler(request: Request, exc: ArchiveNotReady) -> JSONResponse:
    return _response(
        status.HTTP_409_CONFLICT,
        {"message": str(exc), "detail": {"status": exc.status.value}},
    )


async def internal_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return _response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.args[0] if exc.args else None)


def register_error_handlers(app: FastAPI) -> None:
    """Attach shared exception handlers to the FastAPI application."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(MalformedArchive, malformed_archive_handler)
    app.add_exception_handler(UnknownShape, unknown_shape_handler)
    app.add_exception_handler(ArchiveNotReady, archive_not_ready_handler)
    app.add_exception_handler(Exception, internal_exception_handler)


__all__ = [
    "register_error_handlers",
    "validation_exception_handler",
    "http_exception_handler",
    "malformed_archive_handler",
    "unknown_shape_handler",
    "archive_not_ready_handler",
    "internal_exception_handler",
]
