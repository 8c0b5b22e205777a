# =============================================================================
# web/ - Web Shell
# =============================================================================
# A single status page that checks the API health endpoint once per view.
# =============================================================================
