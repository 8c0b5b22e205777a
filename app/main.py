# =============================================================================
# app/main.py - FastAPI Application Factory
# =============================================================================
# Builds the Kori API: middleware, routers and error handlers.
#
# Usage:
#   python scripts/start_api.py
#   uvicorn app.main:create_app --factory --port 4000
# =============================================================================

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, load_configuration
from app.exceptions import (
    KoriException,
    UnhandledErrorMiddleware,
    http_exception_handler,
    unhandled_exception_handler,
)
from app.middleware import (
    CORS_METHODS,
    REQUEST_ID_HEADER,
    PermissiveCORSMiddleware,
    RateLimiter,
    RateLimitMiddleware,
    RequestIdMiddleware,
    SecurityHeadersMiddleware,
)
from app.routers import health, openapi
from core.constants import APP_NAME

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and shutdown of the ASGI application."""
    settings: Settings = app.state.settings
    logger.info(f"Starting {APP_NAME} API {settings.APP_VERSION} in {settings.NODE_ENV} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    yield
    logger.info(f"Shutting down {APP_NAME} API")


def create_app(
    settings: Settings | None = None,
    *,
    clock: Callable[[], float] | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Validated configuration. Loaded from the environment
            when omitted (uvicorn --factory).
        clock: Monotonic time source for the rate limiter (tests).

    Returns:
        FastAPI: The configured application
    """
    if settings is None:
        settings = load_configuration()

    # FastAPI's generated schema and docs are off: /openapi.json is served
    # from the YAML document instead
    application = FastAPI(
        title=f"{APP_NAME} API",
        version=settings.APP_VERSION,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    application.state.settings = settings
    application.state.rate_limiter = RateLimiter(
        limit=settings.RATE_LIMIT_MAX,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        clock=clock,
    )

    # =========================================================================
    # Middleware
    # =========================================================================
    # add_middleware() wraps the current stack, so the last one added runs
    # first. Effective order: security headers -> CORS -> rate limit -> request id
    # -> unhandled-error boundary.

    application.add_middleware(UnhandledErrorMiddleware)
    application.add_middleware(RequestIdMiddleware)
    application.add_middleware(RateLimitMiddleware, limiter=application.state.rate_limiter)
    application.add_middleware(
        PermissiveCORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    application.add_middleware(SecurityHeadersMiddleware)

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(KoriException, unhandled_exception_handler)
    application.add_exception_handler(Exception, unhandled_exception_handler)

    # =========================================================================
    # Routers
    # =========================================================================

    application.include_router(health.router, tags=["Health"])
    application.include_router(openapi.router, tags=["OpenAPI"])

    return application
