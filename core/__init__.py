# =============================================================================
# core/ - Domain Package
# =============================================================================
# This package contains framework-agnostic pieces:
# - constants.py: App name, table names, fixed record keys
# - models/: Pydantic schemas for seed outcomes
# - services/: Database seeding
# =============================================================================
