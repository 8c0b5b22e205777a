#!/usr/bin/env python3
# =============================================================================
# scripts/start_api.py - API Server Entry Point
# =============================================================================
# Starts the Kori API on HOST:PORT (default 0.0.0.0:4000).
#
# Usage:
#   python scripts/start_api.py
#
# Exits 1 if the configuration is invalid or the port cannot be bound.
# =============================================================================

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.server import main


if __name__ == "__main__":
    sys.exit(main())
