"""
Manages the in-memory application state for the payload decoder daemon.

This module holds the field catalog the daemon decodes with and a bounded
history of recently decoded payloads. It provides functions to initialize,
update, and access this shared state.
"""

import logging
import time
from collections import deque
from typing import Deque, List, Optional

from payload_daemon.metrics import HISTORY_SIZE
from payload_daemon.models import PayloadRecord
from telemetry_decoder.catalog import FieldCatalog

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LENGTH: int = 100

# Field catalog used for every decode, populated by initialize_app_from_config
catalog: Optional[FieldCatalog] = None

# Default scaling for payloads posted as raw bytes
apply_scaling_default: bool = True

# Most recent decoded payloads, newest last
history: Deque[PayloadRecord] = deque(maxlen=DEFAULT_HISTORY_LENGTH)

SERVER_START_TIME: float = time.time()


def initialize_app_from_config(
    field_catalog: FieldCatalog,
    history_length: int = DEFAULT_HISTORY_LENGTH,
    apply_scaling: bool = True,
) -> None:
    """
    Installs the field catalog and resets the payload history.

    Args:
        field_catalog: Catalog loaded at startup.
        history_length: Maximum number of decoded payloads kept in memory.
        apply_scaling: Default scaling for raw-body submissions.
    """
    global catalog, history, apply_scaling_default

    catalog = field_catalog
    apply_scaling_default = apply_scaling
    history = deque(maxlen=history_length)
    HISTORY_SIZE.set(0)
    logger.info(
        f"Application state initialized: {len(field_catalog)} fields, "
        f"history length {history_length}, scaling default {apply_scaling}"
    )


def record_payload(record: PayloadRecord) -> None:
    """Appends a decoded payload to the history, evicting the oldest when full."""
    history.append(record)
    HISTORY_SIZE.set(len(history))


def get_recent_payloads(limit: Optional[int] = None) -> List[PayloadRecord]:
    """Returns decoded payloads newest first, at most ``limit`` of them."""
    records = list(reversed(history))
    if limit is not None:
        records = records[:limit]
    return records


def clear_history() -> None:
    history.clear()
    HISTORY_SIZE.set(0)
