# =============================================================================
# app/middleware.py - Cross-Cutting HTTP Middleware
# =============================================================================
# Installed by app.main.create_app() in this order (outermost first):
# 1. SecurityHeadersMiddleware - hardening headers on every response
# 2. PermissiveCORSMiddleware  - origin allow-list, lenient preflight
# 3. RateLimitMiddleware       - sliding-window budget per client address
# 4. RequestIdMiddleware       - x-request-id echo or generation
# =============================================================================

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from threading import Lock
from uuid import uuid4

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"

CORS_METHODS = ["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE", "OPTIONS"]

# Same defaults helmet applies to a Node server
SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self';base-uri 'self';font-src 'self' https: data:;"
        "form-action 'self';frame-ancestors 'self';img-src 'self' data:;"
        "object-src 'none';script-src 'self';script-src-attr 'none';"
        "style-src 'self' https: 'unsafe-inline';upgrade-insecure-requests"
    ),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


def apply_security_headers(response: Response) -> Response:
    """Add security headers, keeping any value a handler already set."""
    for name, value in SECURITY_HEADERS.items():
        if name not in response.headers:
            response.headers[name] = value
    return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp SECURITY_HEADERS on every response."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        return apply_security_headers(response)


# =============================================================================
# CORS
# =============================================================================

class PermissiveCORSMiddleware(CORSMiddleware):
    """
    CORSMiddleware that never rejects a preflight with 400.

    Starlette answers a preflight from an unknown origin (or with an
    unexpected method/header) with "400 Disallowed CORS ...", and fails on
    OPTIONS requests that carry an Origin but no Access-Control-Request-Method.
    Here both cases get an empty 204 without any grant headers, so the
    browser blocks the real request on its own.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] == "OPTIONS":
            headers = Headers(scope=scope)
            if "origin" in headers:
                if "access-control-request-method" in headers:
                    response = self.preflight_response(request_headers=headers)
                    if response.status_code >= 400:
                        response = Response(status_code=204, headers={"Vary": "Origin"})
                else:
                    response = Response(status_code=204, headers={"Vary": "Origin"})
                await response(scope, receive, send)
                return
        await super().__call__(scope, receive, send)


# =============================================================================
# Rate Limiting
# =============================================================================

class RateLimiter:
    """
    Sliding-window rate limiter keyed by client.

    Keeps the timestamps of accepted requests per key; a key may have at most
    `limit` timestamps inside the last `window_seconds`.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] | None = None,
    ):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock if clock is not None else time.monotonic
        self._history: dict[str, list[float]] = {}
        self._lock = Lock()
        self._last_sweep = self._clock()

    def _cleanup(self, key: str, now: float) -> None:
        cutoff = now - self.window_seconds
        if key in self._history:
            self._history[key] = [t for t in self._history[key] if t > cutoff]
            if not self._history[key]:
                del self._history[key]

    def _sweep(self, now: float) -> None:
        """Drop every key whose requests have all left the window."""
        for key in list(self._history):
            self._cleanup(key, now)
        self._last_sweep = now

    def allow_request(self, key: str) -> bool:
        """
        Check if a request is allowed.

        If allowed, records the attempt and returns True.
        If denied, returns False without recording anything.
        """
        if self.limit <= 0:
            return False

        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            self._cleanup(key, now)
            history = self._history.setdefault(key, [])
            if len(history) >= self.limit:
                return False
            history.append(now)
            return True

    def retry_after(self, key: str) -> int:
        """Seconds until the oldest recorded request for `key` leaves the window."""
        with self._lock:
            history = self._history.get(key)
            if not history:
                return 0
            remaining = history[0] + self.window_seconds - self._clock()
        return max(1, int(remaining + 0.999))


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reply 429 once a client address exhausts its RateLimiter budget."""

    def __init__(self, app: ASGIApp, limiter: RateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next):
        key = request.client.host if request.client else "anonymous"
        if not self.limiter.allow_request(key):
            logger.warning(f"Rate limit exceeded for {key} on {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={"error": "Too Many Requests"},
                headers={
                    "Retry-After": str(self.limiter.retry_after(key)),
                    # RequestIdMiddleware sits inside this layer and never sees a 429
                    REQUEST_ID_HEADER: request.headers.get(REQUEST_ID_HEADER) or uuid4().hex,
                },
            )
        return await call_next(request)


# =============================================================================
# Request Correlation
# =============================================================================

class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Echo the inbound x-request-id (or generate one) on the response.

    The id is also stored on request.state.request_id for log context.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
