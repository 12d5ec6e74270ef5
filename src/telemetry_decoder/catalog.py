"""
telemetry_decoder.catalog

Static sensor field table: maps a presence-mask ordinal to the field name,
wire type and scale used to decode it.

The table ships as package data (``config/field_catalog.yml``) and is loaded and
validated once. A ``FieldCatalog`` is read-only after construction: descriptors
live in a fixed 64-slot tuple indexed by ordinal, so lookups are O(1) and the
catalog can be shared freely between threads.

Classes:
    - WireType: On-the-wire integer encodings and their widths
    - FieldDescriptor: One catalog entry
    - FieldCatalog: Immutable ordinal -> descriptor table

Functions:
    - wire_width: Byte width of a wire type
    - load_field_catalog: Load and validate a catalog YAML file
    - get_default_catalog: Cached catalog bundled with the package
"""

import functools
import logging
import os
from dataclasses import dataclass
from enum import Enum
from importlib import resources
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Tuple

import yaml

from .errors import CatalogError

logger = logging.getLogger(__name__)

# Presence masks are 64 bits wide on the wire.
MASK_BITS = 64


class WireType(str, Enum):
    """Integer encodings used for sensor fields (multi-byte types are little-endian)."""

    INT8 = "int8"
    UINT16 = "uint16"
    INT16 = "int16"
    UINT32 = "uint32"

    @property
    def width(self) -> int:
        return _WIRE_WIDTHS[self]

    @property
    def struct_format(self) -> str:
        return _WIRE_FORMATS[self]

    @property
    def signed(self) -> bool:
        return self in (WireType.INT8, WireType.INT16)


_WIRE_WIDTHS = {
    WireType.INT8: 1,
    WireType.UINT16: 2,
    WireType.INT16: 2,
    WireType.UINT32: 4,
}

_WIRE_FORMATS = {
    WireType.INT8: "<b",
    WireType.UINT16: "<H",
    WireType.INT16: "<h",
    WireType.UINT32: "<I",
}


def wire_width(wire_type: WireType) -> int:
    """Returns the number of bytes a field of ``wire_type`` occupies."""
    return WireType(wire_type).width


@dataclass(frozen=True)
class FieldDescriptor:
    ordinal: int
    name: str
    wire_type: WireType
    scale: float
    unit: str = ""
    description: str = ""

    @property
    def width(self) -> int:
        return self.wire_type.width


class FieldCatalog:
    """
    Read-only table of field descriptors indexed by presence-mask ordinal.

    Raises:
        CatalogError: If ordinals fall outside 0..63, ordinals or names repeat,
            or a scale is not positive.
    """

    __slots__ = ("_slots", "_by_name", "_max_flag", "source")

    def __init__(self, descriptors: Iterable[FieldDescriptor], source: Optional[str] = None):
        slots: list = [None] * MASK_BITS
        by_name = {}
        for desc in descriptors:
            if not 0 <= desc.ordinal < MASK_BITS:
                raise CatalogError(
                    f"Field '{desc.name}' has ordinal {desc.ordinal}; expected 0..{MASK_BITS - 1}"
                )
            if slots[desc.ordinal] is not None:
                raise CatalogError(f"Duplicate ordinal {desc.ordinal} in field catalog")
            if desc.name in by_name:
                raise CatalogError(f"Duplicate field name '{desc.name}' in field catalog")
            if not desc.scale > 0:
                raise CatalogError(f"Field '{desc.name}' has non-positive scale {desc.scale}")
            slots[desc.ordinal] = desc
            by_name[desc.name] = desc

        if not by_name:
            raise CatalogError("Field catalog defines no fields")

        self._slots: Tuple[Optional[FieldDescriptor], ...] = tuple(slots)
        self._by_name: Mapping[str, FieldDescriptor] = MappingProxyType(by_name)
        self._max_flag = max(d.ordinal for d in by_name.values())
        self.source = source

    def descriptor_for(self, ordinal: int) -> Optional[FieldDescriptor]:
        """Returns the descriptor for ``ordinal`` or None when it is unassigned."""
        if 0 <= ordinal < MASK_BITS:
            return self._slots[ordinal]
        return None

    def by_name(self, name: str) -> Optional[FieldDescriptor]:
        return self._by_name.get(name)

    @staticmethod
    def ordinals() -> range:
        """Every ordinal a presence mask can carry, ascending."""
        return range(MASK_BITS)

    @property
    def max_flag(self) -> int:
        """Highest ordinal with a catalog entry."""
        return self._max_flag

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(d.name for d in self)

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return (d for d in self._slots if d is not None)

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, ordinal: object) -> bool:
        return isinstance(ordinal, int) and self.descriptor_for(ordinal) is not None

    def __repr__(self) -> str:
        return f"FieldCatalog(fields={len(self)}, max_flag={self._max_flag}, source={self.source!r})"


def default_catalog_path() -> str:
    """Path of the field catalog bundled as package data."""
    return str(resources.files(__package__) / "config" / "field_catalog.yml")


def _parse_entry(entry: dict) -> FieldDescriptor:
    if not isinstance(entry, dict):
        raise CatalogError(f"Catalog entry {entry!r} is not a mapping")
    try:
        return FieldDescriptor(
            ordinal=int(entry["ordinal"]),
            name=str(entry["name"]),
            wire_type=WireType(entry["type"]),
            scale=float(entry.get("scale", 1)),
            unit=str(entry.get("unit", "")),
            description=str(entry.get("description", "")),
        )
    except KeyError as e:
        raise CatalogError(f"Catalog entry {entry!r} is missing key {e}") from e
    except (TypeError, ValueError) as e:
        raise CatalogError(f"Invalid catalog entry {entry!r}: {e}") from e


def load_field_catalog(catalog_path_override: str | None = None) -> FieldCatalog:
    """
    Load and validate a field catalog YAML file.

    Path selection:
      - If ``catalog_path_override`` is provided and readable, use it.
      - Otherwise log a warning (for an unreadable override) and use the
        bundled default.

    Returns:
        FieldCatalog built from the file's ``fields`` list.

    Raises:
        CatalogError: If the selected file cannot be read or is malformed.
    """
    default_path = default_catalog_path()
    catalog_path = default_path
    if catalog_path_override:
        if os.path.exists(catalog_path_override) and os.access(catalog_path_override, os.R_OK):
            logger.info(f"Using field catalog override: {catalog_path_override}")
            catalog_path = catalog_path_override
        else:
            logger.warning(
                f"Field catalog override path provided but not found/readable: "
                f"{catalog_path_override}. Using default: {default_path}"
            )

    try:
        with open(catalog_path) as f:
            content = yaml.safe_load(f) or {}
    except OSError as e:
        raise CatalogError(f"Cannot read field catalog: {catalog_path}") from e
    except yaml.YAMLError as e:
        raise CatalogError(f"Field catalog is not valid YAML: {catalog_path}: {e}") from e

    entries = content.get("fields") if isinstance(content, dict) else None
    if not isinstance(entries, list):
        raise CatalogError(f"Field catalog {catalog_path} has no 'fields' list")

    catalog = FieldCatalog((_parse_entry(e) for e in entries), source=catalog_path)
    logger.debug(f"Loaded {len(catalog)} field descriptors from {catalog_path}")
    return catalog


@functools.lru_cache(maxsize=1)
def get_default_catalog() -> FieldCatalog:
    """Returns the bundled field catalog, loading it on first use."""
    return load_field_catalog()
