# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a cached Supabase client plus the few queries the
# seed script needs:
# - Administrator lookup, insert and password-hash update
# - Idempotent upsert of the sample client record
#
# The client is built from the validated configuration (DATABASE_URL and
# SUPABASE_SERVICE_KEY) and reused for the rest of the process.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   client = SupabaseClient.get_client(settings)
#   admin = SupabaseClient.find_admin_by_email(client, "admin@kori.test")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from supabase import Client, create_client

from app.config import Settings
from core.constants import ADMIN_USERS_TABLE, CLIENTS_TABLE

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(Exception):
    """
    Error while creating the Supabase client.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for the Supabase operations used by the seed script.

    One client instance is shared across the process. Query methods take the
    client explicitly so tests can pass an in-memory fake.

    Example:
        client = SupabaseClient.get_client(settings)
        existing = SupabaseClient.find_admin_by_email(client, email)
        if existing:
            SupabaseClient.update_admin_password(client, existing["id"], new_hash)
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls, settings: Settings) -> Client:
        """
        Get or create the Supabase client.

        Uses the service_role key, which bypasses Row Level Security (RLS).
        This is appropriate for server-side seeding.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If the key is missing or client creation fails
        """
        if cls._instance is None:
            if not settings.SUPABASE_SERVICE_KEY:
                raise SupabaseClientError(
                    message="SUPABASE_SERVICE_KEY is not set",
                    code="MISSING_SERVICE_KEY",
                    suggestion="Add SUPABASE_SERVICE_KEY to your .env file"
                )
            try:
                cls._instance = create_client(
                    settings.DATABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check DATABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                ) from e
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached client (tests, reconfiguration)."""
        cls._instance = None

    # -------------------------------------------------------------------------
    # Administrator Accounts
    # -------------------------------------------------------------------------

    @staticmethod
    def find_admin_by_email(client: Client, email: str) -> dict[str, Any] | None:
        """
        Fetch the administrator row for an email.

        Returns:
            Row dict with id and email, or None if no record exists
        """
        response = (
            client.table(ADMIN_USERS_TABLE)
            .select("id, email")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    @staticmethod
    def insert_admin(client: Client, email: str, password_hash: str) -> dict[str, Any]:
        """Create an administrator record."""
        response = (
            client.table(ADMIN_USERS_TABLE)
            .insert({"email": email, "password_hash": password_hash})
            .execute()
        )
        return response.data[0] if response.data else {}

    @staticmethod
    def update_admin_password(client: Client, admin_id: str, password_hash: str) -> None:
        """Overwrite the password hash of an existing administrator."""
        (
            client.table(ADMIN_USERS_TABLE)
            .update({"password_hash": password_hash})
            .eq("id", admin_id)
            .execute()
        )

    # -------------------------------------------------------------------------
    # Clients
    # -------------------------------------------------------------------------

    @staticmethod
    def upsert_client_if_absent(client: Client, record: dict[str, Any]) -> None:
        """
        Insert a client record unless one with the same id exists.

        An existing row is left untouched (ignore_duplicates).
        """
        (
            client.table(CLIENTS_TABLE)
            .upsert(record, on_conflict="id", ignore_duplicates=True)
            .execute()
        )
