"""
telemetry_decoder.decode

Core decoding logic for cellular telemetry payloads.

Payload layout (version 0):
    - Byte 0: metadata. Bits 0-4 version, bit 5 shared presence mask, bits 6-7 reserved.
    - Byte 1: sampling interval in minutes.
    - Shared mask mode: bytes 2-9 hold one presence mask, followed by N equally
      sized field blocks.
    - Per-reading mode: bytes 2.. hold repeated (8-byte mask, fields) records
      until the buffer ends.

Fields inside a block appear in ascending ordinal order, little-endian, with
no padding.

Functions:
    - decode_metadata: Split the metadata byte into version and framing flag
    - calculate_sensor_data_size: Byte size of the fields selected by a mask
    - decode_sensor_data: Extract the fields selected by a mask
    - decode_reading: Decode one (mask, fields) record
    - decode_payload: Decode a complete payload
    - decode_payload_raw: decode_payload without scaling
    - decode_payload_to_json: decode_payload rendered as JSON text
"""

import logging
import struct
from typing import Dict, Optional, Tuple

from common.models import DecodedPayload, FieldValue, PayloadHeader, PresenceMask, Reading

from .catalog import FieldCatalog, FieldDescriptor, get_default_catalog
from .errors import (
    EmptyPresenceMaskError,
    InternalSizeMismatchError,
    InvalidPayloadLengthError,
    MalformedHeaderError,
    TruncatedReadingDataError,
    TruncatedSharedMaskError,
    UnknownSensorFlagError,
    UnsupportedVersionError,
)
from .mask import PRESENCE_MASK_SIZE, is_bit_set, read_presence_mask

logger = logging.getLogger(__name__)

PAYLOAD_VERSION = 0
HEADER_SIZE = 2

METADATA_VERSION_MASK = 0x1F
METADATA_SHARED_PRESENCE_MASK_BIT = 5


def decode_metadata(metadata: int) -> Tuple[int, bool]:
    """
    Decode the metadata byte.

    Returns:
        tuple(version, shared_presence_mask). Reserved bits 6-7 are ignored.
    """
    version = metadata & METADATA_VERSION_MASK
    shared_presence_mask = (metadata & (1 << METADATA_SHARED_PRESENCE_MASK_BIT)) != 0
    return version, shared_presence_mask


def _read_field(buffer: bytes, offset: int, descriptor: FieldDescriptor) -> int:
    width = descriptor.width
    available = len(buffer) - offset
    if available < width:
        raise TruncatedReadingDataError(
            f"Field '{descriptor.name}' at offset {offset} needs {width} bytes, "
            f"{max(available, 0)} available",
            offset=offset,
            expected=width,
            actual=max(available, 0),
        )
    (raw,) = struct.unpack_from(descriptor.wire_type.struct_format, buffer, offset)
    return raw


def calculate_sensor_data_size(
    presence_mask: PresenceMask, catalog: Optional[FieldCatalog] = None
) -> int:
    """
    Sum of the wire widths of every field selected by ``presence_mask``.

    Touches no buffer contents.

    Raises:
        UnknownSensorFlagError: If a set bit has no catalog entry.
    """
    if catalog is None:
        catalog = get_default_catalog()

    size = 0
    for flag in catalog.ordinals():
        if not is_bit_set(presence_mask, flag):
            continue
        descriptor = catalog.descriptor_for(flag)
        if descriptor is None:
            raise UnknownSensorFlagError(flag)
        size += descriptor.width
    return size


def decode_sensor_data(
    buffer: bytes,
    offset: int,
    presence_mask: PresenceMask,
    apply_scaling: bool = True,
    catalog: Optional[FieldCatalog] = None,
) -> Tuple[Dict[str, FieldValue], int]:
    """
    Decode the fields selected by ``presence_mask`` starting at ``offset``.

    Fields are read in ascending ordinal order. With ``apply_scaling`` each value
    is ``raw / scale`` as a float, otherwise the raw integer.

    Returns:
      tuple(fields: dict[str, int | float], bytes_read: int)

    Raises:
        UnknownSensorFlagError: If a set bit has no catalog entry.
        TruncatedReadingDataError: If a field runs past the end of ``buffer``.
    """
    if catalog is None:
        catalog = get_default_catalog()

    cursor = offset
    data: Dict[str, FieldValue] = {}

    for flag in catalog.ordinals():
        if not is_bit_set(presence_mask, flag):
            continue

        descriptor = catalog.descriptor_for(flag)
        if descriptor is None:
            raise UnknownSensorFlagError(flag, offset=cursor)

        raw = _read_field(buffer, cursor, descriptor)
        data[descriptor.name] = raw / descriptor.scale if apply_scaling else raw
        cursor += descriptor.width

    return data, cursor - offset


def decode_reading(
    buffer: bytes,
    offset: int,
    apply_scaling: bool = True,
    catalog: Optional[FieldCatalog] = None,
) -> Tuple[Reading, int]:
    """
    Decode a single reading (8-byte presence mask followed by its fields).

    Returns:
      tuple(reading: Reading, bytes_read: int)
    """
    presence_mask = read_presence_mask(buffer, offset)
    data, data_size = decode_sensor_data(
        buffer, offset + PRESENCE_MASK_SIZE, presence_mask, apply_scaling, catalog
    )
    reading = Reading(presence_mask=presence_mask, fields=data)
    return reading, PRESENCE_MASK_SIZE + data_size


def _decode_shared_mask_readings(
    buffer: bytes, apply_scaling: bool, catalog: FieldCatalog
) -> list:
    if len(buffer) < HEADER_SIZE + PRESENCE_MASK_SIZE:
        raise TruncatedSharedMaskError(
            f"Buffer too small for shared presence mask: {len(buffer)} bytes",
            offset=HEADER_SIZE,
            expected=HEADER_SIZE + PRESENCE_MASK_SIZE,
            actual=len(buffer),
        )

    offset = HEADER_SIZE
    shared_mask = read_presence_mask(buffer, offset)
    offset += PRESENCE_MASK_SIZE

    reading_size = calculate_sensor_data_size(shared_mask, catalog)
    if reading_size == 0:
        raise EmptyPresenceMaskError(
            "Shared presence mask has no fields", offset=HEADER_SIZE, actual=0
        )

    remaining = len(buffer) - offset
    if remaining % reading_size != 0:
        raise InvalidPayloadLengthError(
            f"Invalid payload length for shared presence mask: {remaining} data bytes "
            f"is not a multiple of the {reading_size}-byte reading size",
            offset=offset,
            expected=reading_size,
            actual=remaining,
        )

    reading_count = remaining // reading_size
    readings = []
    for _ in range(reading_count):
        data, bytes_read = decode_sensor_data(
            buffer, offset, shared_mask, apply_scaling, catalog
        )
        if bytes_read != reading_size:
            raise InternalSizeMismatchError(
                f"Internal error: decoded size mismatch at offset {offset}",
                offset=offset,
                expected=reading_size,
                actual=bytes_read,
            )
        readings.append(Reading(presence_mask=shared_mask, fields=data))
        offset += bytes_read

    return readings


def _decode_per_reading_masks(buffer: bytes, apply_scaling: bool, catalog: FieldCatalog) -> list:
    offset = HEADER_SIZE
    readings = []
    while offset < len(buffer):
        reading, bytes_read = decode_reading(buffer, offset, apply_scaling, catalog)
        readings.append(reading)
        offset += bytes_read
    return readings


def decode_payload(
    buffer: bytes,
    apply_scaling: bool = True,
    catalog: Optional[FieldCatalog] = None,
) -> DecodedPayload:
    """
    Decode a complete payload with one or more readings.

    Args:
        buffer: Complete payload (bytes, bytearray or memoryview).
        apply_scaling: Divide raw values by their field scale.
        catalog: Field table to decode against; the bundled catalog by default.

    Returns:
        DecodedPayload with header, readings and reading_count.

    Raises:
        TypeError: If ``buffer`` is not bytes-like.
        PayloadDecodeError: Any subclass, when the payload is malformed. No
            partial result is returned.
    """
    if not isinstance(buffer, (bytes, bytearray, memoryview)):
        raise TypeError(f"Input must be bytes-like, got {type(buffer).__name__}")
    if isinstance(buffer, memoryview):
        # Offsets and lengths below count bytes, whatever the view's item format.
        buffer = buffer.cast("B")
    if catalog is None:
        catalog = get_default_catalog()

    if len(buffer) < HEADER_SIZE:
        raise MalformedHeaderError(
            f"Buffer too small (minimum {HEADER_SIZE} bytes for header): {len(buffer)} bytes",
            offset=0,
            expected=HEADER_SIZE,
            actual=len(buffer),
        )

    version, shared_presence_mask = decode_metadata(buffer[0])
    if version != PAYLOAD_VERSION:
        raise UnsupportedVersionError(
            f"Unsupported payload version: {version}",
            offset=0,
            expected=PAYLOAD_VERSION,
            actual=version,
        )

    header = PayloadHeader(
        version=version,
        shared_presence_mask=shared_presence_mask,
        interval_minutes=buffer[1],
    )

    if shared_presence_mask:
        readings = _decode_shared_mask_readings(buffer, apply_scaling, catalog)
    else:
        readings = _decode_per_reading_masks(buffer, apply_scaling, catalog)

    logger.debug(
        f"Decoded {len(buffer)}-byte payload: shared_mask={shared_presence_mask}, "
        f"interval={header.interval_minutes}min, readings={len(readings)}"
    )
    return DecodedPayload(header=header, readings=readings, reading_count=len(readings))


def decode_payload_raw(buffer: bytes, catalog: Optional[FieldCatalog] = None) -> DecodedPayload:
    """Decode payload and return raw values (no scaling applied)."""
    return decode_payload(buffer, apply_scaling=False, catalog=catalog)


def decode_payload_to_json(
    buffer: bytes,
    pretty: bool = False,
    apply_scaling: bool = True,
    catalog: Optional[FieldCatalog] = None,
) -> str:
    """Decode payload and render it as camelCase JSON text."""
    decoded = decode_payload(buffer, apply_scaling=apply_scaling, catalog=catalog)
    return decoded.model_dump_json(by_alias=True, indent=2 if pretty else None)
