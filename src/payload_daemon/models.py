"""
Defines Pydantic models for API request/response validation and serialization.

These models are used throughout the FastAPI application to ensure data consistency
and provide clear API documentation for request bodies and response payloads.

Models:
    - PayloadSubmission: Text-encoded payload posted for decoding
    - PayloadRecord: A decoded payload with ingest metadata
    - DecodeErrorResponse: Body returned when a payload cannot be decoded
    - FieldCatalogEntry: One field of the decoding catalog
    - DaemonStatus: Server and decoder status summary
    - DecodedPayload, Reading, PayloadHeader: (re-exported from common.models)
"""

import base64
import binascii
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from common.models import DecodedPayload, PayloadHeader, Reading  # noqa: F401


class PayloadEncoding(str, Enum):
    HEX = "hex"
    BASE64 = "base64"


class PayloadSubmission(BaseModel):
    """Payload text posted by a device gateway, plus decoding options."""

    payload: str = Field(..., min_length=1, description="Encoded payload bytes.")
    encoding: PayloadEncoding = Field(
        PayloadEncoding.HEX, description="How 'payload' is encoded: 'hex' or 'base64'."
    )
    apply_scaling: bool = Field(
        True, description="Convert raw values to engineering units using the field scale."
    )
    device_id: Optional[str] = Field(None, description="Identifier of the sending device.")

    def payload_bytes(self) -> bytes:
        """
        Returns the submitted payload as bytes.

        Raises:
            ValueError: If the text is not valid for the declared encoding.
        """
        text = self.payload.strip()
        try:
            if self.encoding == PayloadEncoding.BASE64:
                return base64.b64decode(text, validate=True)
            return bytes.fromhex(text.replace(" ", "").replace(":", ""))
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Payload is not valid {self.encoding.value}: {e}") from e


class PayloadRecord(BaseModel):
    """A decoded payload together with when and from whom it was received."""

    device_id: Optional[str] = None
    received_at: float
    payload_hex: str
    decoded: DecodedPayload


class DecodeErrorResponse(BaseModel):
    """Describes why a payload was rejected."""

    error: str
    detail: str
    offset: Optional[int] = None
    expected: Optional[Any] = None
    actual: Optional[Any] = None


class FieldCatalogEntry(BaseModel):
    """One field of the decoding catalog."""

    ordinal: int
    name: str
    wire_type: str
    width: int
    scale: float
    unit: str = ""
    description: str = ""


class DaemonStatus(BaseModel):
    """Server and decoder status summary."""

    version: str
    catalog_path: Optional[str] = None
    field_count: int
    max_flag: int
    uptime_seconds: float
    history_size: int
    history_length: int
