"""Exception handlers rendering the `{"error": ...}` envelope."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import Settings
from ..domain.entries import EntryServiceError, StoreError
from ..infra.logging import get_logger

__all__ = ["GENERIC_ERROR_MESSAGE", "register_error_handlers"]

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"


def register_error_handlers(application: FastAPI, settings: Settings) -> None:
    """Map domain, request-shape, and unexpected errors to JSON responses."""

    async def handle_service_error(
        request: Request, exc: EntryServiceError
    ) -> JSONResponse:
        if isinstance(exc, StoreError):
            logger.error(
                "entry_store_request_failed",
                extra={"path": request.url.path, "details": exc.details},
            )
            return _internal_error(settings, exc.message, exc.error_code, exc.details)
        return _error_response(
            exc.status_code, exc.message, exc.error_code, exc.details
        )

    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        fields: Dict[str, str] = {}
        for error in exc.errors():
            location = [str(part) for part in error.get("loc", ()) if part != "body"]
            fields[".".join(location) or "body"] = str(error.get("msg", "invalid"))
        message = "; ".join(
            f"{name}: {detail}" for name, detail in fields.items()
        ) or "Invalid request"
        return _error_response(
            HTTPStatus.BAD_REQUEST,
            message,
            "ENTRY-INVALID-REQUEST",
            {"fields": fields},
        )

    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == HTTPStatus.NOT_FOUND and _is_unmatched_route(request):
            message = "Route not found"
        else:
            message = str(exc.detail)
        return _error_response(
            exc.status_code, message, f"HTTP-{exc.status_code}", {}, exc.headers
        )

    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unhandled_request_error",
            extra={"path": request.url.path, "method": request.method},
        )
        return _internal_error(settings, str(exc), "INTERNAL-ERROR", {})

    application.add_exception_handler(EntryServiceError, handle_service_error)
    application.add_exception_handler(RequestValidationError, handle_request_validation)
    application.add_exception_handler(StarletteHTTPException, handle_http_exception)
    application.add_exception_handler(Exception, handle_unexpected)


def _internal_error(
    settings: Settings,
    message: str,
    error_code: str,
    details: Dict[str, Any],
) -> JSONResponse:
    if settings.is_production:
        return _error_response(
            HTTPStatus.INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE, error_code, {}
        )
    return _error_response(
        HTTPStatus.INTERNAL_SERVER_ERROR, message, error_code, details
    )


def _error_response(
    status_code: int,
    message: str,
    error_code: str,
    details: Dict[str, Any],
    headers: Dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=int(status_code),
        content={"error": message, "error_code": error_code, "details": details},
        headers=headers,
    )


def _is_unmatched_route(request: Request) -> bool:
    return request.scope.get("endpoint") is None
