"""
Handles application configuration for the payload decoder daemon.

This module is responsible for:
- Configuring logging for the application.
- Reading the PAYLOAD_CATALOG_PATH field catalog override.
- Providing FastAPI application settings (title, description, root_path).
- Providing Uvicorn server settings (host, port, log level).
- Providing decoder settings (history length, default scaling) from environment variables.
"""

import logging
import os

import coloredlogs

# ── Logging Configuration ──────────────────────────────────────────────────
# This logger is for messages originating from the config.py module itself.
module_logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


def configure_logger():
    root_logger = logging.getLogger()
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()

    log_level_int = getattr(logging, log_level_str, None)
    if not isinstance(log_level_int, int):
        module_logger.warning(f"Invalid LOG_LEVEL '{log_level_str}'. Defaulting to INFO.")
        log_level_int = logging.INFO

    log_format = "%(asctime)s %(name)s[%(process)d] %(levelname)s %(message)s"

    # Root captures everything; the coloredlogs handler filters by level.
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    coloredlogs.install(
        level=log_level_int,
        fmt=log_format,
        logger=root_logger,
        reconfigure=True,
    )

    return root_logger


# ── Field catalog path ─────────────────────────────────────────────────────
def get_catalog_path():
    """
    Returns the field catalog override from PAYLOAD_CATALOG_PATH, or None.

    The value is passed through unchecked; load_field_catalog() falls back to
    the bundled catalog when the override is missing or unreadable.
    """
    return os.getenv("PAYLOAD_CATALOG_PATH") or None


# ── FastAPI Configuration ──────────────────────────────────────────────────
def get_fastapi_config():
    """
    Retrieves FastAPI application settings from environment variables.

    Returns:
        dict: title, server_description and root_path for the FastAPI application.
    """
    return {
        "title": os.getenv("PAYLOAD_DECODER_TITLE", "telemetry-decoder"),
        "server_description": os.getenv(
            "PAYLOAD_DECODER_SERVER_DESCRIPTION", "Cellular telemetry payload decoder"
        ),
        "root_path": os.getenv("PAYLOAD_DECODER_ROOT_PATH", ""),
    }


def get_server_config():
    """
    Retrieves Uvicorn settings from environment variables.

    Returns:
        dict: host, port (int) and log_level (lowercase str).
    """
    return {
        "host": os.getenv("PAYLOAD_DECODER_HOST", "0.0.0.0"),
        "port": int(os.getenv("PAYLOAD_DECODER_PORT", "8000")),
        "log_level": os.getenv("PAYLOAD_DECODER_LOG_LEVEL", "info").lower(),
    }


# ── Decoder Configuration ──────────────────────────────────────────────────
def get_decoder_config():
    """
    Retrieves decoding settings from environment variables.

    Returns:
        dict: A dictionary containing:
              - 'history_length': How many decoded payloads to keep for /payloads/recent.
              - 'apply_scaling': Default scaling for payloads posted as raw bytes.
    """
    history_length_str = os.getenv("PAYLOAD_HISTORY_LENGTH", "100")
    try:
        history_length = int(history_length_str)
    except ValueError:
        module_logger.warning(
            f"Invalid PAYLOAD_HISTORY_LENGTH '{history_length_str}'. Defaulting to 100."
        )
        history_length = 100
    if history_length < 1:
        module_logger.warning(
            f"PAYLOAD_HISTORY_LENGTH must be positive, got {history_length}. Using 1."
        )
        history_length = 1

    return {
        "history_length": history_length,
        "apply_scaling": os.getenv("PAYLOAD_APPLY_SCALING", "true").strip().lower()
        in _TRUE_VALUES,
    }
