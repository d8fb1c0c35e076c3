"""Error Handlers — global exception handlers rendering every failure through normalize_error.

Invariants:
    - TodoApiError → its own status and {error, message, errors?} body; logged at its
      severity with code, category and severity as structured extras
    - RequestValidationError (malformed JSON, bad path id) → 400 VALIDATION_FAILED with per-field messages
    - Starlette HTTPException (unknown route, wrong method) → same body shape
    - Exception (catch-all) → 500 generic body; detail and traceback only in logs

Design Decisions:
    - Four-layer handler: domain, request validation, HTTP, catch-all
    - Handlers stay thin: status/body come from core/normalize_error (single mapping)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from todo_api.core.errors import ErrorSeverity, TodoApiError
from todo_api.core.normalize_error import (
    http_error_body,
    normalize_error,
    validation_error_from_pydantic,
)

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(TodoApiError)
    async def domain_error_handler(request: Request, exc: TodoApiError):
        """Handle all pipeline and infrastructure errors."""
        status_code, body = normalize_error(exc)
        extra = {
            "error_code": exc.code, "category": exc.category.value,
            "severity": exc.severity.value, "path": request.url.path,
            "method": request.method,
        }
        logger.log(
            _LOG_LEVELS[exc.severity], f"TodoApiError: {exc.message}",
            exc_info=exc if status_code >= 500 else None, extra=extra,
        )
        return JSONResponse(status_code=status_code, content=body)


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle request parsing errors raised before the route runs."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"error_code": "VALIDATION_FAILED", "path": request.url.path},
        )
        status_code, body = normalize_error(
            validation_error_from_pydantic(exc.errors()),
        )
        return JSONResponse(status_code=status_code, content=body)


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(
            f"HTTP {exc.status_code} on {request.method} {request.url.path}",
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=http_error_body(exc.status_code, exc.detail),
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all that never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=exc,
            extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
        )
        status_code, body = normalize_error(exc)
        return JSONResponse(status_code=status_code, content=body)
