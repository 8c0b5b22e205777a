# =============================================================================
# core/services/seed_service.py - Database Seeding
# =============================================================================
# Idempotent bootstrap of the database:
# - ensure_administrator(): create the admin user or refresh its hash
# - ensure_sample_client(): create the sample client once, never fail
# - run_seed(): both steps, in order, without a shared transaction
#
# Credentials come from the validated configuration (ADMIN_EMAIL,
# ADMIN_PASSWORD) and are never logged.
# =============================================================================

import logging

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from app.config import Settings
from app.exceptions import MissingCredentialError, UpstreamWriteError, WeakCredentialError
from core.constants import CLIENTS_TABLE, SAMPLE_CLIENT_ID
from core.models.seed import AdminSeedResult, SampleClientResult, SeedStatus
from lib.passwords import hash_password, is_strong_password
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

SAMPLE_CLIENT = {
    "id": SAMPLE_CLIENT_ID,
    "name": "Sample Client",
    "type": "company",
    "email": "sample-client@example.test",
    "phone": "+0 0000 000000",
}


def _clean(value: str | None) -> str | None:
    return (value.strip() if isinstance(value, str) else None) or None


def ensure_administrator(settings: Settings, client: Client | None = None) -> AdminSeedResult:
    """
    Create the administrator account, or refresh its password hash.

    The hash is recomputed on every run: the stored hash cannot tell us
    whether the configured plaintext changed.

    Args:
        settings: Validated configuration with ADMIN_EMAIL and ADMIN_PASSWORD
        client: Supabase client (defaults to the shared instance)

    Returns:
        AdminSeedResult: created=True for a new record, False for an update

    Raises:
        MissingCredentialError: If ADMIN_EMAIL or ADMIN_PASSWORD is empty
        WeakCredentialError: If ADMIN_PASSWORD fails is_strong_password()
    """
    email = _clean(settings.ADMIN_EMAIL)
    password = _clean(settings.ADMIN_PASSWORD)

    missing = [
        name for name, value in (("ADMIN_EMAIL", email), ("ADMIN_PASSWORD", password))
        if not value
    ]
    if missing:
        raise MissingCredentialError(missing)
    if not is_strong_password(password):
        raise WeakCredentialError()

    if client is None:
        client = SupabaseClient.get_client(settings)

    existing = SupabaseClient.find_admin_by_email(client, email)
    password_hash = hash_password(password)

    if existing:
        SupabaseClient.update_admin_password(client, existing["id"], password_hash)
        logger.debug(f"Refreshed password hash for admin {existing['id']}")
        return AdminSeedResult(created=False, email=email)

    SupabaseClient.insert_admin(client, email, password_hash)
    return AdminSeedResult(created=True, email=email)


def ensure_sample_client(settings: Settings, client: Client | None = None) -> SampleClientResult:
    """
    Create the sample client record if it does not exist yet.

    A rejected write (conflict, constraint violation, transport error) is
    logged and reported as SKIPPED instead of raised, so seeding succeeds
    whenever the administrator step did.
    """
    if client is None:
        client = SupabaseClient.get_client(settings)

    try:
        SupabaseClient.upsert_client_if_absent(client, dict(SAMPLE_CLIENT))
    except (APIError, httpx.HTTPError) as e:
        error = UpstreamWriteError(CLIENTS_TABLE, getattr(e, "message", None) or str(e))
        logger.warning(f"Sample client skipped: {error.message}")
        return SampleClientResult(
            status=SeedStatus.SKIPPED,
            client_id=SAMPLE_CLIENT_ID,
            reason=error.message,
        )

    return SampleClientResult(status=SeedStatus.UPSERTED, client_id=SAMPLE_CLIENT_ID)


def run_seed(
    settings: Settings,
    client: Client | None = None,
) -> tuple[AdminSeedResult, SampleClientResult]:
    """
    Run the administrator step, then the sample-client step.

    Credential errors surface before any client is created.
    """
    admin = ensure_administrator(settings, client)
    sample = ensure_sample_client(settings, client)
    return admin, sample
