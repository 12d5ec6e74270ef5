"""
payload_daemon

Ingest service for telemetry payloads: a FastAPI-based daemon that receives
binary payloads from cellular sensor devices, decodes them with
telemetry_decoder and exposes the results, the field catalog and Prometheus
metrics over HTTP.

Modules:
    - app_state: Field catalog and recent-payload history
    - cli: `payload-decode` command-line decoder
    - config: Logging setup and environment configuration
    - main: FastAPI application setup and server entry point
    - metrics: Prometheus metric definitions
    - middleware: HTTP metrics middleware
    - models: Pydantic models for API request/response validation
    - payload_processing: Decode, record and measure one payload
"""

from ._version import VERSION

__all__ = ["VERSION"]
