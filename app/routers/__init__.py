# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: /healthz, /readyz, /version
# - openapi.py: /openapi.json served from the YAML document
#
# Each router is mounted in main.py without a prefix.
# =============================================================================

from . import health
from . import openapi

__all__ = [
    "health",
    "openapi",
]
