# =============================================================================
# app/routers/openapi.py - OpenAPI Document Endpoint
# =============================================================================
# Serves the hand-written OpenAPI YAML document as JSON.
# The file is read on every request so edits show up without a restart.
# =============================================================================

import logging

import yaml
from fastapi import APIRouter
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.dependencies import SettingsDep
from app.exceptions import HandlerError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/openapi.json", include_in_schema=False)
def openapi_document(settings: SettingsDep):
    """
    Read OPENAPI_SPEC_PATH, parse it as YAML and return it as JSON.

    A missing file is a server-side problem and surfaces as a generic 500.
    """
    path = settings.OPENAPI_SPEC_PATH
    raw = path.read_text(encoding="utf-8")

    document = yaml.safe_load(raw)
    if not isinstance(document, dict):
        raise HandlerError(f"OpenAPI document at {path} is not a mapping")

    logger.debug(f"Served OpenAPI document from {path}")
    return JSONResponse(content=jsonable_encoder(document))
