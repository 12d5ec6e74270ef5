"""
tests

Test suite for the telemetry decoder project.

Subpackages:
    - payload_daemon: Tests for the FastAPI ingest daemon and CLI
    - integration: End-to-end tests through the HTTP API
"""
