"""
telemetry_decoder
=================

Library for decoding compact binary telemetry payloads sent by air quality
sensor devices over cellular links.

A payload carries one or more readings; each reading holds the subset of sensor
fields selected by a 64-bit presence mask, packed back-to-back in ascending
field order. The field table (names, wire types, scales) ships as package data.

Functions:
    - decode_payload: Decode a complete payload into a DecodedPayload
    - decode_payload_raw: Same, without applying scale factors
    - decode_payload_to_json: Decode and render as JSON text
    - decode_reading: Decode one (mask, fields) record
    - decode_sensor_data: Decode the fields selected by a mask
    - calculate_sensor_data_size: Byte size of the fields selected by a mask
    - load_field_catalog / get_default_catalog: Field table loading
"""

from .catalog import (
    FieldCatalog,
    FieldDescriptor,
    WireType,
    get_default_catalog,
    load_field_catalog,
    wire_width,
)
from .decode import (
    calculate_sensor_data_size,
    decode_metadata,
    decode_payload,
    decode_payload_raw,
    decode_payload_to_json,
    decode_reading,
    decode_sensor_data,
)
from .errors import CatalogError, PayloadDecodeError
from .mask import is_bit_set, read_presence_mask

__all__ = [
    "FieldCatalog",
    "FieldDescriptor",
    "WireType",
    "get_default_catalog",
    "load_field_catalog",
    "wire_width",
    "calculate_sensor_data_size",
    "decode_metadata",
    "decode_payload",
    "decode_payload_raw",
    "decode_payload_to_json",
    "decode_reading",
    "decode_sensor_data",
    "CatalogError",
    "PayloadDecodeError",
    "is_bit_set",
    "read_presence_mask",
]
