#!/usr/bin/env python3
# =============================================================================
# scripts/seed.py - Database Seed
# =============================================================================
# Idempotent seed: bootstraps a single administrator and a sample client.
#
# Usage:
#   python scripts/seed.py
#
# Prerequisites:
#   - ADMIN_EMAIL, ADMIN_PASSWORD (10+ chars, 3 of lower/upper/digit/symbol)
#   - DATABASE_URL and SUPABASE_SERVICE_KEY
#   - The admin_users and clients tables exist
#   All read from the environment or the .env file.
# =============================================================================

import logging
import os
import sys

import httpx
from postgrest.exceptions import APIError

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config import load_configuration
from app.exceptions import KoriException
from core.services.seed_service import run_seed
from lib.supabase_client import SupabaseClientError
from lib.utils import configure_logging

logger = logging.getLogger("seed")


def main() -> int:
    """Run the seed. Returns the process exit code."""
    configure_logging()
    logger.info("[seed] Starting...")

    try:
        settings = load_configuration()
        admin, _sample = run_seed(settings)
    except (KoriException, SupabaseClientError) as e:
        logger.error(f"[seed] FAILED: {e.message}")
        return 1
    except (APIError, httpx.HTTPError) as e:
        # Database rejected the administrator write or was unreachable
        logger.error(f"[seed] FAILED: {getattr(e, 'message', None) or e}")
        return 1

    if admin.created:
        logger.info(f"[seed] Admin user created: {admin.email}")
    else:
        logger.info(f"[seed] Admin user ready: {admin.email} (password updated)")
    logger.info("[seed] Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
