"""
telemetry_decoder.mask

Reading and testing 64-bit presence masks.

On the wire a mask is 8 bytes: two little-endian uint32 words, low word first.
"""

import struct

from common.models import PresenceMask

from .errors import TruncatedReadingDataError

PRESENCE_MASK_SIZE = 8

_MASK_STRUCT = struct.Struct("<II")


def read_presence_mask(buffer: bytes, offset: int) -> PresenceMask:
    """
    Read an 8-byte presence mask at ``offset``.

    Raises:
        TruncatedReadingDataError: If fewer than 8 bytes remain.
    """
    available = len(buffer) - offset
    if available < PRESENCE_MASK_SIZE:
        raise TruncatedReadingDataError(
            f"Presence mask at offset {offset} needs {PRESENCE_MASK_SIZE} bytes, "
            f"{max(available, 0)} available",
            offset=offset,
            expected=PRESENCE_MASK_SIZE,
            actual=max(available, 0),
        )
    lo, hi = _MASK_STRUCT.unpack_from(buffer, offset)
    return PresenceMask(lo=lo, hi=hi)


def is_bit_set(mask: PresenceMask, bit: int) -> bool:
    """True when ``bit`` (0..63) is set in ``mask``."""
    return mask.is_set(bit)
