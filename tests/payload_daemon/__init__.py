"""
tests.payload_daemon

Unit tests for the payload_daemon package: configuration, metrics, middleware,
state, processing, models, CLI and API routers.
"""
