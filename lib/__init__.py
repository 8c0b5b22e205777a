# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - passwords.py: Password strength policy and Argon2id hashing
# - supabase_client.py: Cached Supabase client and seed queries
# - utils.py: Logging setup shared by every entry point
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.passwords import hash_password, is_strong_password, verify_password
from lib.utils import configure_logging

__all__ = [
    # Passwords
    "hash_password",
    "is_strong_password",
    "verify_password",
    # Utils
    "configure_logging",
]
