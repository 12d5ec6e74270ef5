"""
api_routers

This package contains FastAPI APIRouter modules that define the API endpoints
of the payload decoder daemon. Each router handles a specific domain of
functionality.

Routers:
    - payloads: Decoding submitted payloads and listing recent ones
    - catalog: Browsing the field catalog
    - status: Health, metrics, status and configuration endpoints
"""

from .catalog import api_router_catalog
from .payloads import api_router_payloads
from .status import api_router_status

__all__ = ["api_router_catalog", "api_router_payloads", "api_router_status"]
