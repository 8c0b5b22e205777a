# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Kori API scaffold:
# - test_config.py: Environment validation, masking and the config CLI
# - test_passwords.py: Password policy and Argon2id hashing
# - test_seed_service.py: Administrator and sample-client seeding
# - test_api.py: Routes, error shapes, headers, request ids and CORS
# - test_rate_limit.py: Sliding-window limiter and 429 responses
# - test_server.py: Bind/listen lifecycle and exit codes
# - test_web_shell.py: Health check status page
# - test_api_integration.py: Real server process polled over HTTP
#
# Run tests with: pytest
# =============================================================================
