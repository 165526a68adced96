"""
Domain errors and their HTTP mapping.

Gateways raise these; routers never build error responses by hand.
`register_exception_handlers(app)` turns them into a stable JSON shape:

    {"error": "<ERROR_CODE>", "message": "...", "details": {...}}
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from estatehub.settings import get_settings

logger = logging.getLogger(__name__)


class EstateHubError(Exception):
    """Base class for every error the service reports to a client."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.error_code, "message": self.message, "details": self.details}


class InvalidInput(EstateHubError):
    """Malformed id, out-of-range amount, unknown enum value or missing field."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_INPUT"

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, {"field": field} if field else None)


class Unauthenticated(EstateHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHENTICATED"

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class Forbidden(EstateHubError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"

    def __init__(self, message: str = "Operation not permitted") -> None:
        super().__init__(message)


class NotFound(EstateHubError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} not found", {"resource": resource})


class Conflict(EstateHubError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"


def _estatehub_error_handler(request: Request, exc: EstateHubError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed bodies are client errors; reported before any ownership lookup happens.
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": InvalidInput.error_code,
            "message": "Request validation failed",
            "details": {"errors": _safe_errors(exc)},
        },
    )


def _safe_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    # Drop echoed input values; they may contain passwords.
    return [{"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")} for err in exc.errors()]


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail, "details": {}},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception path=%s method=%s", request.url.path, request.method)
    message = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "INTERNAL_ERROR", "message": message, "details": {}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EstateHubError, _estatehub_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
