# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.config import Settings


def get_settings(request: Request) -> Settings:
    """
    Get the configuration the app was created with.

    create_app() stores it on app.state; nothing reads a global.
    """
    return request.app.state.settings


# Type alias for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
