"""
common.models

Shared Pydantic models for use across the telemetry decoder and the ingest daemon.

All models are frozen: once the decoder produces them they are plain values.
They serialize with camelCase aliases (``sharedPresenceMask``, ``readingCount``)
which is the JSON rendering consumed by dashboards and log tooling.

PresenceMask:
    64-bit field-presence bit-vector stored as two unsigned 32-bit halves.

PayloadHeader:
    Version, framing mode and sampling interval parsed from the first two bytes.

Reading:
    One decoded reading: its presence mask and the field values it carried.

DecodedPayload:
    Header plus the ordered readings of one payload.
"""

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

_UINT32_MAX = 0xFFFFFFFF

FieldValue = Union[int, float]


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class PresenceMask(_FrozenModel):
    """
    PresenceMask

    Bit *i* set means the field with ordinal *i* is present.

    Attributes:
        lo (int): Bits 0-31.
        hi (int): Bits 32-63.
    """

    lo: int = Field(0, ge=0, le=_UINT32_MAX)
    hi: int = Field(0, ge=0, le=_UINT32_MAX)

    @classmethod
    def from_value(cls, value: int) -> "PresenceMask":
        """Builds a mask from a 64-bit integer."""
        if not 0 <= value < (1 << 64):
            raise ValueError(f"Presence mask value out of range: {value}")
        return cls(lo=value & _UINT32_MAX, hi=(value >> 32) & _UINT32_MAX)

    @classmethod
    def from_bits(cls, *bits: int) -> "PresenceMask":
        value = 0
        for bit in bits:
            if not 0 <= bit < 64:
                raise ValueError(f"Presence mask bit out of range: {bit}")
            value |= 1 << bit
        return cls.from_value(value)

    @property
    def value(self) -> int:
        return (self.hi << 32) | self.lo

    def is_set(self, bit: int) -> bool:
        if not 0 <= bit < 64:
            raise ValueError(f"Presence mask bit out of range: {bit}")
        if bit < 32:
            return ((self.lo >> bit) & 1) != 0
        return ((self.hi >> (bit - 32)) & 1) != 0

    def set_bits(self) -> List[int]:
        """Ordinals of all set bits, ascending."""
        return [bit for bit in range(64) if self.is_set(bit)]

    def is_empty(self) -> bool:
        return self.lo == 0 and self.hi == 0

    def to_bytes(self) -> bytes:
        """Wire form: low word then high word, each little-endian."""
        return self.lo.to_bytes(4, "little") + self.hi.to_bytes(4, "little")


class PayloadHeader(_FrozenModel):
    """
    PayloadHeader

    Attributes:
        version (int): Payload schema version (bits 0-4 of byte 0).
        shared_presence_mask (bool): One mask for the whole batch (bit 5 of byte 0).
        interval_minutes (int): Sampling interval in minutes (byte 1).
    """

    version: int = Field(..., ge=0, le=0x1F)
    shared_presence_mask: bool
    interval_minutes: int = Field(..., ge=0, le=0xFF)


class Reading(_FrozenModel):
    """
    Reading

    Attributes:
        presence_mask (PresenceMask): Mask the reading was decoded with.
        fields (Mapping[str, int | float]): Read-only field name -> value, in ascending
            ordinal order. Values are floats when scaling was applied, raw integers otherwise.
    """

    presence_mask: PresenceMask
    fields: Mapping[str, FieldValue] = Field(default_factory=dict, validate_default=True)

    @field_validator("fields", mode="after")
    @classmethod
    def _freeze_fields(cls, value: Mapping[str, FieldValue]) -> Mapping[str, FieldValue]:
        return MappingProxyType(dict(value))

    @field_serializer("fields")
    def _serialize_fields(self, value: Mapping[str, FieldValue]) -> Dict[str, FieldValue]:
        return dict(value)

    def __getitem__(self, name: str) -> FieldValue:
        return self.fields[name]

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


class DecodedPayload(_FrozenModel):
    """
    DecodedPayload

    Attributes:
        header (PayloadHeader): Parsed header.
        readings (Tuple[Reading, ...]): Readings in wire order.
        reading_count (int): Number of readings.
    """

    header: PayloadHeader
    readings: Tuple[Reading, ...] = Field(default_factory=tuple)
    reading_count: int = 0

    @model_validator(mode="after")
    def _check_reading_count(self) -> "DecodedPayload":
        if self.reading_count != len(self.readings):
            raise ValueError(
                f"reading_count {self.reading_count} does not match "
                f"{len(self.readings)} readings"
            )
        return self
