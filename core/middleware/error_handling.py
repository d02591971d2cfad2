"""
Error handling for the backend simulator.

Turns every failure into the error body the dashboard client understands:
``{"error": {"code", "message", "path", "method"}}``. Candidate PII is
scrubbed from messages before they leave the process.
"""

import logging
import re
import traceback
from typing import Any, Callable

from fastapi import Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Patterns for values that should never appear in an error response
SENSITIVE_PATTERNS = [
    re.compile(r'token["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'api[_-]?key["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'secret["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'),
]


class SimulatedFault(Exception):
    """Failure injected on purpose by the simulator's fault injector."""

    def __init__(self, message: str = "Internal server error", endpoint: str = "default"):
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint


class StorageNotReady(Exception):
    """Simulator storage has not finished initializing and seeding."""


def sanitize_error_message(message: str) -> str:
    """
    Remove sensitive information from error messages.

    Args:
        message: Original error message

    Returns:
        Sanitized error message
    """
    sanitized = str(message)
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub('[REDACTED]', sanitized)
    return sanitized


def get_safe_error_details(exc: Exception, include_details: bool = False) -> dict[str, Any]:
    """Type and sanitized message of an exception, plus traceback in debug."""
    details = {
        "type": type(exc).__name__,
        "message": sanitize_error_message(str(exc)),
    }
    if include_details:
        details["traceback"] = traceback.format_exc()
    return details


def error_body(code: str, message: str, path: str, method: str, details: Any = None) -> dict:
    """Build the error envelope returned by every failing endpoint."""
    body = {
        "error": {
            "code": code,
            "message": message,
            "path": path,
            "method": method,
        }
    }
    if details is not None:
        body["error"]["details"] = details
    return body


def format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Format validation errors into a flat ``field/message/type`` list."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": sanitize_error_message(error["msg"]),
            "type": error["type"],
        })
    return errors


class ErrorHandlingMiddleware:
    """
    Outermost ASGI guard: anything that escapes the exception handlers is
    converted into a JSON error response instead of a dropped connection.
    """

    def __init__(self, app: Callable, debug: bool = False):
        self.app = app
        self.debug = debug

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            response = self._handle_exception(exc, scope)
            await response(scope, receive, send)

    def _handle_exception(self, exc: Exception, scope: dict) -> Response:
        request_path = scope.get("path", "unknown")
        request_method = scope.get("method", "unknown")

        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        error_code = "INTERNAL_SERVER_ERROR"
        message = "An unexpected error occurred"
        details = None

        if isinstance(exc, SimulatedFault):
            error_code = "SIMULATED_FAILURE"
            message = exc.message
            logger.warning(f"Injected failure: {request_method} {request_path}")

        elif isinstance(exc, StorageNotReady):
            status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            error_code = "NOT_READY"
            message = "Storage is still initializing"

        elif isinstance(exc, IntegrityError):
            status_code = status.HTTP_409_CONFLICT
            error_code = "INTEGRITY_ERROR"
            message = "Database integrity constraint violated"
            logger.error(f"Database integrity error: {request_method} {request_path}")

        elif isinstance(exc, SQLAlchemyError):
            error_code = "DATABASE_ERROR"
            message = "A database error occurred"
            if self.debug:
                details = get_safe_error_details(exc, include_details=True)
            logger.error(f"SQLAlchemy error: {request_method} {request_path}", exc_info=True)

        elif isinstance(exc, ValueError):
            status_code = status.HTTP_400_BAD_REQUEST
            error_code = "INVALID_INPUT"
            message = sanitize_error_message(str(exc)) or "Invalid input provided"
            logger.warning(f"Value error: {request_method} {request_path} - {message}")

        else:
            if self.debug:
                details = get_safe_error_details(exc, include_details=True)
            logger.error(
                f"Unhandled exception: {request_method} {request_path} - "
                f"{type(exc).__name__}: {sanitize_error_message(str(exc))}",
                exc_info=True,
            )

        return JSONResponse(
            status_code=status_code,
            content=error_body(error_code, message, request_path, request_method, details),
        )


def setup_error_handlers(app):
    """
    Set up exception handlers for the simulator application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions raised by routes (404, 400, 409)."""
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(
                "HTTP_EXCEPTION",
                sanitize_error_message(exc.detail),
                str(request.url.path),
                request.method,
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request body/query validation errors."""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=error_body(
                "VALIDATION_ERROR",
                "Request validation failed",
                str(request.url.path),
                request.method,
                format_validation_errors(exc),
            ),
        )

    @app.exception_handler(SimulatedFault)
    async def simulated_fault_handler(request: Request, exc: SimulatedFault):
        """Injected failures look like ordinary server errors."""
        logger.info(f"Injected {exc.endpoint} failure: {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                "SIMULATED_FAILURE", exc.message, str(request.url.path), request.method
            ),
        )

    @app.exception_handler(StorageNotReady)
    async def not_ready_handler(request: Request, exc: StorageNotReady):
        """Cold-start window: storage not seeded yet."""
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error_body(
                "NOT_READY",
                "Storage is still initializing",
                str(request.url.path),
                request.method,
            ),
        )
