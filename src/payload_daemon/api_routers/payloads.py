"""
Defines FastAPI APIRouter for payload decoding.

Devices (or the gateway relaying them) post payloads either as text in a JSON
body (hex or base64) or as the raw bytes themselves. Decoded payloads are
returned and kept in a short in-memory history.

Decode failures propagate as PayloadDecodeError; the application-level
exception handler turns them into 422 responses.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Request

from payload_daemon import app_state
from payload_daemon.models import PayloadRecord, PayloadSubmission
from payload_daemon.payload_processing import process_payload

logger = logging.getLogger(__name__)

api_router_payloads = APIRouter()  # FastAPI router for payload decoding endpoints


@api_router_payloads.post("/payloads/decode", response_model=PayloadRecord)
async def decode_submitted_payload(submission: PayloadSubmission):
    """Decodes a hex or base64 encoded payload."""
    try:
        raw = submission.payload_bytes()
    except ValueError as e:
        logger.info(f"Rejected payload submission from {submission.device_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    return process_payload(
        raw, apply_scaling=submission.apply_scaling, device_id=submission.device_id
    )


@api_router_payloads.post("/payloads/raw", response_model=PayloadRecord)
async def decode_raw_payload(
    request: Request,
    device_id: Optional[str] = Query(None, description="Identifier of the sending device."),
    apply_scaling: Optional[bool] = Query(
        None, description="Override the daemon's default scaling for this payload."
    ),
):
    """Decodes a payload posted as the raw request body (application/octet-stream)."""
    raw = await request.body()
    if apply_scaling is None:
        apply_scaling = app_state.apply_scaling_default
    return process_payload(raw, apply_scaling=apply_scaling, device_id=device_id)


@api_router_payloads.get("/payloads/recent", response_model=List[PayloadRecord])
async def list_recent_payloads(limit: int = Query(20, ge=1, le=1000)):
    """Returns the most recently decoded payloads, newest first."""
    return app_state.get_recent_payloads(limit)
