# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module validates configuration from environment variables using
# pydantic-settings. It provides a single frozen Settings class plus:
# - load_configuration(): validate a mapping (default: os.environ + .env)
# - render_masked(): JSON dump with secrets masked for logs
#
# Usage:
#   from app.config import load_configuration
#   settings = load_configuration()
#   print(settings.DATABASE_URL)
#
# Run standalone to check an environment:
#   python -m app.config           # validates, prints "env loaded OK"
#   python -m app.config --print   # prints the masked configuration
#
# There is no global settings instance. Entry points build the configuration
# once and pass it to whatever needs it.
# =============================================================================

from __future__ import annotations

import json
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import AnyUrl, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.exceptions import ConfigValidationError

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Fields replaced by mask_secret() in render_masked()
SECRET_FIELDS = frozenset({
    "R2_ACCESS_KEY_ID",
    "R2_SECRET_ACCESS_KEY",
    "ADMIN_PASSWORD",
    "ML_JWT_SECRET",
    "ADMIN_JWT_SECRET",
    "SUPABASE_SERVICE_KEY",
})


class Settings(BaseSettings):
    """
    Application settings validated from environment variables.

    Instances are frozen: once load_configuration() returns, nothing can
    change a value. Values come only from the mapping handed to the
    constructor (see settings_customise_sources).
    """

    # -------------------------------------------------------------------------
    # Runtime
    # -------------------------------------------------------------------------

    NODE_ENV: Literal["development", "test", "production"] = Field(
        default="development",
        description="Current environment"
    )

    PORT: int = Field(
        default=4000,
        gt=0,
        le=65535,
        description="Port for the API server"
    )

    HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    APP_VERSION: str = Field(
        default="0.1.0",
        min_length=1,
        description="Version string reported by GET /version"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug logging"
    )

    # -------------------------------------------------------------------------
    # Database
    # -------------------------------------------------------------------------
    # DATABASE_URL is the Supabase project URL (e.g., https://xxx.supabase.co)

    DATABASE_URL: str = Field(
        ...,
        min_length=1,
        description="Database connection URL"
    )

    SUPABASE_SERVICE_KEY: str | None = Field(
        default=None,
        description="Supabase service_role key, required by the seed script"
    )

    # -------------------------------------------------------------------------
    # Object Storage (Cloudflare R2)
    # -------------------------------------------------------------------------
    # Optional in local development

    R2_ENDPOINT: AnyUrl | None = Field(default=None, description="R2 endpoint URL")
    R2_ACCESS_KEY_ID: str | None = Field(default=None, description="R2 access key id")
    R2_SECRET_ACCESS_KEY: str | None = Field(default=None, description="R2 secret access key")
    R2_BUCKET: str | None = Field(default=None, description="R2 bucket name")

    # -------------------------------------------------------------------------
    # Auth & Secrets
    # -------------------------------------------------------------------------

    ADMIN_EMAIL: str | None = Field(
        default=None,
        description="Administrator login, required by the seed script"
    )

    ADMIN_PASSWORD: str = Field(
        ...,
        min_length=8,
        description="Administrator password"
    )

    ML_JWT_SECRET: str = Field(
        ...,
        min_length=10,
        description="Secret for signing ML service tokens"
    )

    ADMIN_JWT_SECRET: str = Field(
        ...,
        min_length=10,
        description="Secret for signing admin tokens"
    )

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    CORS_ORIGIN: str = Field(
        default="http://localhost:5173",
        min_length=1,
        description="Allowed CORS origins (comma-separated)"
    )

    RATE_LIMIT_MAX: int = Field(
        default=300,
        ge=1,
        description="Requests allowed per client within one window"
    )

    RATE_LIMIT_WINDOW_SECONDS: int = Field(
        default=60,
        ge=1,
        description="Length of the rate-limit window in seconds"
    )

    OPENAPI_SPEC_PATH: Path = Field(
        default=PROJECT_ROOT / "openapi.yaml",
        description="YAML OpenAPI document served as /openapi.json"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        case_sensitive=True,
        frozen=True,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Only the mapping passed to load_configuration() is consulted
        return (init_settings,)

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGIN into a list.

        Example: "http://localhost:5173, https://kori.app" -> ["http://localhost:5173", "https://kori.app"]
        """
        return [origin.strip() for origin in self.CORS_ORIGIN.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.NODE_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.NODE_ENV == "production"


# =============================================================================
# Loader
# =============================================================================

def _format_issue(error: dict[str, Any]) -> str:
    field = ".".join(str(part) for part in error["loc"]) or "<root>"
    if error["type"] == "missing":
        return f"• {field}: {field} is required"
    return f"• {field}: {error['msg']}"


def load_configuration(source: Mapping[str, str] | None = None) -> Settings:
    """
    Validate a mapping of environment variables into Settings.

    Args:
        source: Variables to read. Defaults to os.environ after hydrating it
            from a .env file (existing variables are not overridden).

    Returns:
        Settings: Fully validated, frozen configuration

    Raises:
        ConfigValidationError: Listing every field that failed, not just the
            first one. Values are never echoed back.
    """
    if source is None:
        load_dotenv()
        source = os.environ

    # Undeclared keys are ignored and blank values count as missing
    values = {
        name: value
        for name, value in source.items()
        if name in Settings.model_fields and value is not None and str(value).strip() != ""
    }

    try:
        return Settings(**values)
    except ValidationError as e:
        issues = [_format_issue(error) for error in e.errors(include_input=False)]
        raise ConfigValidationError(issues) from None


# =============================================================================
# Masking
# =============================================================================

def mask_secret(value: str, visible_tail: int = 4) -> str:
    """
    Replace all but the last `visible_tail` characters with asterisks.

    Values no longer than `visible_tail` are masked completely.

    Example:
        mask_secret("supersecret-123") -> "***********-123"
        mask_secret("abc") -> "***"
    """
    if not value:
        return ""
    if len(value) <= visible_tail:
        return "*" * len(value)
    return "*" * (len(value) - visible_tail) + value[-visible_tail:]


def render_masked(config: Settings) -> str:
    """Render the configuration as JSON with every secret field masked."""
    masked: dict[str, Any] = {}
    for name, value in config.model_dump(mode="json").items():
        if name in SECRET_FIELDS and value is not None:
            value = mask_secret(str(value))
        masked[name] = value
    return json.dumps(masked, indent=2)


# =============================================================================
# CLI
# =============================================================================

def main(argv: list[str] | None = None) -> int:
    """Validate the current environment; print it masked with --print."""
    args = sys.argv[1:] if argv is None else argv

    try:
        config = load_configuration()
    except ConfigValidationError as e:
        print(e.message, file=sys.stderr)
        return 1

    if "--print" in args:
        print(render_masked(config))
    else:
        print("env loaded OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
