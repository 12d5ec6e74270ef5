"""Byte-building helpers shared by the test suite."""

import struct

META_SHARED = 0x20
META_PER_READING = 0x00


def mask64_le(lo: int, hi: int = 0) -> list:
    """Presence mask wire bytes: low word then high word, little-endian."""
    return list(lo.to_bytes(4, "little") + hi.to_bytes(4, "little"))


def mask_for_bits(*bits: int) -> list:
    value = 0
    for bit in bits:
        value |= 1 << bit
    return mask64_le(value & 0xFFFFFFFF, value >> 32)


def pack_fields(catalog, raw_values: dict) -> bytes:
    """Packs raw field values (by name) in ascending ordinal order."""
    descriptors = sorted((catalog.by_name(name) for name in raw_values), key=lambda d: d.ordinal)
    return b"".join(struct.pack(d.wire_type.struct_format, raw_values[d.name]) for d in descriptors)
