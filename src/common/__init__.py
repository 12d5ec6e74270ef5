"""
common

This package contains shared models used across the telemetry decoder project.

Modules:
    - models: Pydantic value models produced by the decoder and served by the daemon
"""

from .models import DecodedPayload, PayloadHeader, PresenceMask, Reading

__all__ = ["DecodedPayload", "PayloadHeader", "PresenceMask", "Reading"]
