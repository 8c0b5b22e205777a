# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas:
# - seed.py: Results of the administrator and sample-client seed steps
# =============================================================================

from .seed import (
    AdminSeedResult,
    SampleClientResult,
    SeedStatus,
)

__all__ = [
    "AdminSeedResult",
    "SampleClientResult",
    "SeedStatus",
]
