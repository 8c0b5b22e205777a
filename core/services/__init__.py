# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .seed_service import (
    SAMPLE_CLIENT,
    ensure_administrator,
    ensure_sample_client,
    run_seed,
)

__all__ = [
    "SAMPLE_CLIENT",
    "ensure_administrator",
    "ensure_sample_client",
    "run_seed",
]
