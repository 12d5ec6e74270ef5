import pytest
from fastapi.testclient import TestClient

from payload_daemon.main import app
from telemetry_decoder import get_default_catalog

from tests.helpers import META_PER_READING, META_SHARED, mask64_le


@pytest.fixture(scope="session")
def client() -> TestClient:
    """
    Synchronous TestClient fixture for FastAPI.
    Use this for standard API endpoint testing.
    """
    with TestClient(app=app, base_url="http://test") as c:
        yield c


@pytest.fixture
def shared_temp_co2_payload() -> bytes:
    """Shared-mask payload with one reading: temperature 25.00 C and CO2 400 ppm."""
    return bytes([META_SHARED, 0x05, *mask64_le(0x00000005), 0xC4, 0x09, 0x90, 0x01])


@pytest.fixture
def per_reading_payload() -> bytes:
    """Per-reading payload: a temperature reading followed by a CO2 reading."""
    return bytes(
        [
            META_PER_READING,
            0x05,
            *mask64_le(0x00000001),
            0xC4,
            0x09,
            *mask64_le(0x00000004),
            0x90,
            0x01,
        ]
    )


# --- Global state reset fixtures for test isolation ---


@pytest.fixture(autouse=True)
def reset_app_state():
    """
    Re-initializes the daemon state (bundled catalog, empty history, scaling on)
    before each test.
    """
    from payload_daemon import app_state

    app_state.initialize_app_from_config(
        get_default_catalog(), history_length=100, apply_scaling=True
    )
    yield
    app_state.clear_history()
