"""
Handles the processing of incoming telemetry payloads for the decoder daemon.

This module is responsible for:
- Decoding raw payload bytes with `telemetry_decoder` against the daemon's catalog.
- Recording the decoded payload in the application state history.
- Recording relevant metrics (payload counts and sizes, decode latency,
  readings and field usage, errors by kind).

Decode errors are counted and logged, then re-raised for the caller (the API
layer turns them into 422 responses).
"""

import logging
import time
from typing import Optional

from payload_daemon import app_state
from payload_daemon.metrics import (
    DECODE_ERRORS,
    DECODE_LATENCY,
    FIELD_USAGE_COUNTER,
    PAYLOAD_SIZE_BYTES,
    PAYLOADS_RECEIVED,
    READINGS_DECODED,
    SUCCESSFUL_DECODES,
)
from payload_daemon.models import PayloadRecord
from telemetry_decoder import PayloadDecodeError, decode_payload

logger = logging.getLogger(__name__)


def process_payload(
    raw: bytes,
    apply_scaling: bool = True,
    device_id: Optional[str] = None,
) -> PayloadRecord:
    """
    Decode one payload and record it.

    Args:
        raw: Payload bytes as received from the device.
        apply_scaling: Convert raw values to engineering units.
        device_id: Optional identifier of the sender, kept with the record.

    Returns:
        PayloadRecord for the decoded payload.

    Raises:
        PayloadDecodeError: If the payload is malformed.
    """
    PAYLOADS_RECEIVED.inc()
    PAYLOAD_SIZE_BYTES.observe(len(raw))

    start_time = time.perf_counter()
    try:
        decoded = decode_payload(raw, apply_scaling=apply_scaling, catalog=app_state.catalog)
    except PayloadDecodeError as e:
        DECODE_ERRORS.labels(kind=e.kind).inc()
        logger.warning(
            f"Rejected payload from {device_id or 'unknown device'} "
            f"({len(raw)} bytes, {raw.hex()}): {e.kind}: {e}"
        )
        raise
    finally:
        DECODE_LATENCY.observe(time.perf_counter() - start_time)

    SUCCESSFUL_DECODES.inc()
    READINGS_DECODED.inc(decoded.reading_count)
    for reading in decoded.readings:
        for field_name in reading.fields:
            FIELD_USAGE_COUNTER.labels(field=field_name).inc()

    record = PayloadRecord(
        device_id=device_id,
        received_at=time.time(),
        payload_hex=raw.hex(),
        decoded=decoded,
    )
    app_state.record_payload(record)

    logger.debug(
        f"Decoded payload from {device_id or 'unknown device'}: "
        f"{decoded.reading_count} readings, interval {decoded.header.interval_minutes}min"
    )
    return record
