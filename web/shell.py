# =============================================================================
# web/shell.py - Web Shell
# =============================================================================
# Minimal front end: each page view issues one request to the API health
# endpoint and shows "API OK" or "API DOWN". No retry, no polling.
#
# Usage:
#   uvicorn web.shell:app --port 5173
#
# The API base URL comes from KORI_API_URL (default http://localhost:4000).
# =============================================================================

import html
import logging
import os

import httpx
from fastapi import FastAPI
from fastapi.responses import HTMLResponse

from core.constants import APP_NAME

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:4000"
STATUS_OK = "API OK"
STATUS_DOWN = "API DOWN"


def check_api_status(client: httpx.Client, api_url: str) -> str:
    """
    Ask the API whether it is healthy.

    Returns:
        "API OK" if GET /healthz answers with {"ok": true}, otherwise
        "API DOWN" (bad payload, non-JSON body or network failure)
    """
    try:
        response = client.get(f"{api_url.rstrip('/')}/healthz")
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.info(f"Health check against {api_url} failed: {e}")
        return STATUS_DOWN

    return STATUS_OK if isinstance(data, dict) and data.get("ok") is True else STATUS_DOWN


def render_status_page(status: str) -> str:
    """Render the status view as a complete HTML document."""
    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{APP_NAME}</title>
</head>
<body>
  <div style="font-family: ui-sans-serif, system-ui; padding: 24px">
    <h1 style="margin-bottom: 8px">{APP_NAME}</h1>
    <p>Backend status: <strong>{html.escape(status)}</strong></p>
  </div>
</body>
</html>
"""


def create_app(
    api_url: str | None = None,
    transport: httpx.BaseTransport | None = None,
) -> FastAPI:
    """
    Create the web shell application.

    Args:
        api_url: API base URL (defaults to KORI_API_URL)
        transport: httpx transport override (tests)
    """
    api_url = api_url or os.getenv("KORI_API_URL", DEFAULT_API_URL)
    application = FastAPI(title=f"{APP_NAME} Web", openapi_url=None, docs_url=None, redoc_url=None)

    @application.get("/", response_class=HTMLResponse)
    def index():
        with httpx.Client(transport=transport, timeout=5.0) as client:
            status = check_api_status(client, api_url)
        return HTMLResponse(render_status_page(status))

    return application


# Module-level instance used by uvicorn
app = create_app()
