#!/usr/bin/env python3
"""
Main entry point for the telemetry payload decoder daemon.

This script initializes and runs the FastAPI application that receives binary
telemetry payloads from cellular sensor devices and decodes them into readings.

Key responsibilities include:
- Configuring application-wide logging.
- Loading the field catalog (bundled default or PAYLOAD_CATALOG_PATH override).
- Initializing shared application state (see app_state.py).
- Initializing the FastAPI application, including:
    - Setting up Prometheus metrics middleware.
    - Mapping decode errors to 422 responses.
    - Registering API routers (payloads, catalog, status).
- Providing a command-line entry point to start the Uvicorn server.
"""

import logging
import sys

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import ResponseValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from payload_daemon.app_state import initialize_app_from_config
from payload_daemon.config import (
    configure_logger,
    get_catalog_path,
    get_decoder_config,
    get_fastapi_config,
    get_server_config,
)
from payload_daemon.middleware import prometheus_http_middleware
from payload_daemon.models import DecodeErrorResponse
from telemetry_decoder import CatalogError, PayloadDecodeError, load_field_catalog

from .api_routers import api_router_catalog, api_router_payloads, api_router_status

# ── Logging ──────────────────────────────────────────────────────────────────
logger = configure_logger()

logger.info("telemetry decoder daemon starting up...")

# ── Load field catalog ───────────────────────────────────────────────────────
try:
    field_catalog = load_field_catalog(get_catalog_path())
except CatalogError as e:
    logger.error(f"Cannot load field catalog: {e}")
    sys.exit(1)

decoder_config = get_decoder_config()
initialize_app_from_config(
    field_catalog,
    history_length=decoder_config["history_length"],
    apply_scaling=decoder_config["apply_scaling"],
)


def create_app():
    fastapi_config = get_fastapi_config()

    app = FastAPI(
        title=fastapi_config["title"],
        servers=[{"url": "/", "description": fastapi_config["server_description"]}],
        root_path=fastapi_config["root_path"],
    )

    # ── Middleware ─────────────────────────────────────────────────────────────
    @app.middleware("http")
    async def prometheus_middleware_handler(request, call_next):
        """Prometheus metrics middleware for HTTP requests."""
        return await prometheus_http_middleware(request, call_next)

    # ── Exception Handlers ─────────────────────────────────────────────────────
    @app.exception_handler(PayloadDecodeError)
    async def payload_decode_exception_handler(request: Request, exc: PayloadDecodeError):
        """Reports an undecodable payload as 422 with the error kind and offsets."""
        body = DecodeErrorResponse(**exc.to_dict())
        return JSONResponse(status_code=422, content=body.model_dump())

    @app.exception_handler(ResponseValidationError)
    async def validation_exception_handler(request, exc):
        """Handles response validation errors with a plain text message."""
        return PlainTextResponse(f"Validation error: {exc}", status_code=500)

    # ── API Routers ────────────────────────────────────────────────────────────
    app.include_router(api_router_payloads, prefix="/api")
    app.include_router(api_router_catalog, prefix="/api")
    app.include_router(api_router_status, prefix="/api")

    return app


app = create_app()


# ── Entrypoint ─────────────────────────────────────────────────────────────
def main():
    """
    Runs the Uvicorn server for the decoder daemon.

    Host, port and log level come from PAYLOAD_DECODER_HOST, PAYLOAD_DECODER_PORT
    and PAYLOAD_DECODER_LOG_LEVEL.
    """
    server_config = get_server_config()
    logger.info(
        f"Starting Uvicorn server on {server_config['host']}:{server_config['port']} "
        f"with log level '{server_config['log_level']}'"
    )
    uvicorn.run(
        app,
        host=server_config["host"],
        port=server_config["port"],
        log_level=server_config["log_level"],
    )


if __name__ == "__main__":
    main()
