"""
tests.integration

Integration tests that send payloads through the HTTP API and check the
decoded results, history and metrics together.
"""
