"""
Defines FastAPI APIRouter for browsing the field catalog.

Routes list every field the daemon can decode and look up a single field by
its presence-mask ordinal.
"""

from typing import List

from fastapi import APIRouter, HTTPException, Path

from payload_daemon import app_state
from payload_daemon.models import FieldCatalogEntry
from telemetry_decoder import FieldDescriptor, get_default_catalog

api_router_catalog = APIRouter()  # FastAPI router for field catalog endpoints


def _to_entry(descriptor: FieldDescriptor) -> FieldCatalogEntry:
    return FieldCatalogEntry(
        ordinal=descriptor.ordinal,
        name=descriptor.name,
        wire_type=descriptor.wire_type.value,
        width=descriptor.width,
        scale=descriptor.scale,
        unit=descriptor.unit,
        description=descriptor.description,
    )


@api_router_catalog.get("/catalog", response_model=List[FieldCatalogEntry])
async def list_catalog_fields():
    """Lists every catalog field in ascending ordinal order."""
    catalog = app_state.catalog or get_default_catalog()
    return [_to_entry(d) for d in catalog]


@api_router_catalog.get("/catalog/{ordinal}", response_model=FieldCatalogEntry)
async def get_catalog_field(ordinal: int = Path(..., ge=0, le=63)):
    """Returns the field assigned to a presence-mask ordinal."""
    catalog = app_state.catalog or get_default_catalog()
    descriptor = catalog.descriptor_for(ordinal)
    if descriptor is None:
        raise HTTPException(status_code=404, detail=f"No field assigned to ordinal {ordinal}")
    return _to_entry(descriptor)
