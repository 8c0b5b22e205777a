# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the Kori HTTP API:
# - config.py: Environment validation and masked printing
# - exceptions.py: Error taxonomy and JSON error handlers
# - middleware.py: Security headers, CORS, rate limiting, request ids
# - main.py: App factory wiring middleware, handlers and routers
# - server.py: Process entry point (bind, listen, exit codes)
# - routers/: API endpoint definitions
#
# The app layer is thin - it handles HTTP concerns and delegates
# everything else to core/ and lib/.
# =============================================================================
