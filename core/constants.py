# =============================================================================
# core/constants.py - Shared Constants
# =============================================================================
# Values shared by the API, the seed script and the web shell.
# =============================================================================

APP_NAME = "Kori"

# Fixed key of the sample client record created by the seed script
SAMPLE_CLIENT_ID = "seed-sample-client"

# Table names in the relational store
ADMIN_USERS_TABLE = "admin_users"
CLIENTS_TABLE = "clients"
