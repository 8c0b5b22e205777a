# =============================================================================
# core/models/seed.py - Seed Outcome Schemas
# =============================================================================
# Results reported by the seed service:
# - AdminSeedResult: whether the administrator was created or refreshed
# - SampleClientResult: upserted, or skipped with the reason
#
# The sample-client step never raises; a rejected write is reported as
# SeedStatus.SKIPPED so callers and tests can see it happened.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class AdminSeedResult(BaseModel):
    """
    Outcome of ensure_administrator().

    Example:
        {"created": true, "email": "admin@kori.test"}
    """

    created: bool = Field(..., description="True if a new record was inserted")
    email: str = Field(..., description="Administrator email that was seeded")


class SeedStatus(str, Enum):
    """Outcome of an idempotent, non-critical seed write."""
    UPSERTED = "upserted"
    SKIPPED = "skipped"


class SampleClientResult(BaseModel):
    """Outcome of ensure_sample_client()."""

    status: SeedStatus
    client_id: str
    reason: str | None = Field(
        default=None,
        description="Why the write was skipped (only for SKIPPED)"
    )

    @property
    def skipped(self) -> bool:
        return self.status == SeedStatus.SKIPPED
