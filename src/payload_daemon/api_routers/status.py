"""
Manages API routes for daemon status and configuration.

This module provides FastAPI endpoints for:
- Liveness checks.
- Prometheus metrics exposition.
- Server and decoder status (version, catalog, uptime, history).
- Retrieving the field catalog file in use.
"""

import logging
import os
import time

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from payload_daemon import app_state
from payload_daemon._version import VERSION
from payload_daemon.models import DaemonStatus
from telemetry_decoder import get_default_catalog

logger = logging.getLogger(__name__)

api_router_status = APIRouter()  # Router for status, metrics and configuration endpoints


@api_router_status.get("/healthz")
async def healthz():
    """Liveness probe."""
    return {"status": "ok"}


@api_router_status.get("/metrics")
def metrics():
    """Prometheus metrics endpoint."""
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@api_router_status.get("/status", response_model=DaemonStatus)
async def get_status():
    """Returns server and decoder status information."""
    catalog = app_state.catalog or get_default_catalog()
    return DaemonStatus(
        version=VERSION,
        catalog_path=catalog.source,
        field_count=len(catalog),
        max_flag=catalog.max_flag,
        uptime_seconds=time.time() - app_state.SERVER_START_TIME,
        history_size=len(app_state.history),
        history_length=app_state.history.maxlen or 0,
    )


@api_router_status.get("/config/catalog", response_class=PlainTextResponse)
async def get_catalog_config_content():
    """Returns the field catalog YAML file the daemon decodes with."""
    catalog_path = (app_state.catalog or get_default_catalog()).source
    if not catalog_path or not os.path.exists(catalog_path):
        raise HTTPException(status_code=404, detail="Field catalog file not found.")
    try:
        with open(catalog_path, "r") as f:
            return PlainTextResponse(f.read())
    except OSError as e:
        logger.error(f"API Error: Could not read field catalog from '{catalog_path}': {e}")
        raise HTTPException(status_code=500, detail=f"Error reading field catalog file: {e}")
