# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized error taxonomy for the API, the seed script and the config
# loader, plus the FastAPI handlers that turn errors into JSON responses.
#
# Response shape is always {"error": <message>}. Internal error text never
# reaches the client for 500s.
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from app.middleware import REQUEST_ID_HEADER, apply_security_headers

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


class KoriException(Exception):
    """
    Base exception for Kori.

    All custom exceptions inherit from this class.
    Carries an HTTP status so the global handler can map it, and an
    actionable suggestion for operators.
    """

    def __init__(
        self,
        message: str,
        code: str = "KORI_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a log/debug dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Configuration Exceptions
# =============================================================================

class ConfigValidationError(KoriException):
    """Raised when one or more environment variables fail validation."""

    def __init__(self, issues: list[str]):
        super().__init__(
            message="Environment validation failed:\n" + "\n".join(issues),
            code="CONFIG_INVALID",
            suggestion="Fix the listed variables in your environment or .env file",
            details={"issues": issues},
        )
        self.issues = issues


# =============================================================================
# Seed Exceptions
# =============================================================================

class MissingCredentialError(KoriException):
    """Raised when the administrator email or password is not configured."""

    def __init__(self, missing: list[str]):
        super().__init__(
            message=f"{' and '.join(missing)} must be set in the environment (.env).",
            code="MISSING_CREDENTIAL",
            suggestion="Set ADMIN_EMAIL and ADMIN_PASSWORD before seeding",
            details={"missing": missing},
        )


class WeakCredentialError(KoriException):
    """Raised when ADMIN_PASSWORD does not meet the strength policy."""

    def __init__(self):
        super().__init__(
            message=(
                "ADMIN_PASSWORD must be at least 10 chars and include 3 of: "
                "lower/upper/digit/symbol."
            ),
            code="WEAK_CREDENTIAL",
            suggestion="Choose a longer password mixing character classes",
        )


class UpstreamWriteError(KoriException):
    """Raised when a non-critical database write is rejected."""

    def __init__(self, table: str, error: str):
        super().__init__(
            message=f"Write to {table} failed: {error}",
            code="UPSTREAM_WRITE_FAILED",
            status_code=502,
            details={"table": table, "error": error},
        )


# =============================================================================
# Server Exceptions
# =============================================================================

class HandlerError(KoriException):
    """
    Raised inside route handlers to reply with a specific status.

    A status_code >= 400 is sent with the message; anything else becomes a
    generic 500.
    """

    def __init__(self, message: str, status_code: int = 500, **kwargs: Any):
        super().__init__(message, code="HANDLER_ERROR", status_code=status_code, **kwargs)


class BindError(KoriException):
    """Raised when the server cannot acquire its listening address."""

    def __init__(self, host: str, port: int, error: str):
        super().__init__(
            message=f"Cannot listen on {host}:{port}: {error}",
            code="BIND_FAILED",
            suggestion="Check that the port is free or set PORT to another value",
            details={"host": host, "port": port},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

def _error_response(
    request: Request,
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    response = JSONResponse(status_code=status_code, content={"error": message}, headers=headers)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id
    apply_security_headers(response)
    return response


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """
    Convert HTTPException to {"error": ...}.

    Unmatched routes arrive here as a 404 whose detail is "Not Found".
    """
    return _error_response(request, exc.status_code, str(exc.detail), headers=exc.headers)


async def unhandled_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Last-resort handler for anything a route lets escape.

    Uses the exception's status_code when it is an error status, otherwise 500.
    500 responses never include the exception text.
    """
    declared = getattr(exc, "status_code", None)
    status_code = declared if isinstance(declared, int) and declared >= 400 else 500

    logger.error(
        "Unhandled error on %s %s (request_id=%s)",
        request.method,
        request.url.path,
        getattr(request.state, "request_id", None),
        exc_info=exc,
        extra={"error_context": exc.to_dict()} if isinstance(exc, KoriException) else None,
    )

    if status_code == 500:
        return _error_response(request, 500, INTERNAL_ERROR_MESSAGE)
    message = getattr(exc, "message", None) or str(exc)
    return _error_response(request, status_code, message)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """
    Answer unhandled route errors from inside the middleware stack.

    Installed innermost so the reply still passes through the request-id,
    CORS and security-header layers. Starlette's own Exception handler runs
    outside all of them.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return await unhandled_exception_handler(request, exc)
