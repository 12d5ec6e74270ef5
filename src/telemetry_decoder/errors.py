"""
telemetry_decoder.errors

Exception hierarchy raised while decoding a telemetry payload.

Every decode failure is fatal for the payload being decoded: the decoder never
returns a partial result. Each exception carries the machine-readable ``kind``
plus the buffer ``offset`` and the ``expected``/``actual`` values that tripped
the check, so callers (the ingest daemon, the CLI) can report them verbatim.

Classes:
    - PayloadDecodeError: Base class for all decode failures
    - MalformedHeaderError, UnsupportedVersionError, TruncatedSharedMaskError,
      EmptyPresenceMaskError, InvalidPayloadLengthError, UnknownSensorFlagError,
      TruncatedReadingDataError, InternalSizeMismatchError
    - CatalogError: Invalid or unreadable field catalog file
"""

from typing import Any, Dict, Optional


class PayloadDecodeError(ValueError):
    """Base class for errors raised while decoding a payload."""

    kind: str = "PayloadDecodeError"

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        expected: Optional[Any] = None,
        actual: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.expected = expected
        self.actual = actual

    def to_dict(self) -> Dict[str, Any]:
        """Returns the error as a JSON-friendly dictionary."""
        return {
            "error": self.kind,
            "detail": self.message,
            "offset": self.offset,
            "expected": self.expected,
            "actual": self.actual,
        }


class MalformedHeaderError(PayloadDecodeError):
    """Buffer is too short to hold the 2-byte header."""

    kind = "MalformedHeader"


class UnsupportedVersionError(PayloadDecodeError):
    """Header carries a payload version this decoder does not interpret."""

    kind = "UnsupportedVersion"


class TruncatedSharedMaskError(PayloadDecodeError):
    """Shared-mask flag is set but the 8 mask bytes are missing."""

    kind = "TruncatedSharedMask"


class EmptyPresenceMaskError(PayloadDecodeError):
    """Shared presence mask selects no fields."""

    kind = "EmptyPresenceMask"


class InvalidPayloadLengthError(PayloadDecodeError):
    """Batch data is not a whole number of readings."""

    kind = "InvalidPayloadLength"


class UnknownSensorFlagError(PayloadDecodeError):
    """A presence mask bit is set for an ordinal missing from the field catalog."""

    kind = "UnknownSensorFlag"

    def __init__(self, flag: int, offset: Optional[int] = None):
        super().__init__(f"Unknown sensor flag {flag}", offset=offset, actual=flag)
        self.flag = flag


class TruncatedReadingDataError(PayloadDecodeError):
    """A mask or field read would run past the end of the buffer."""

    kind = "TruncatedReadingData"


class InternalSizeMismatchError(PayloadDecodeError):
    """Computed field-set size disagrees with the bytes actually consumed."""

    kind = "InternalSizeMismatch"


class CatalogError(ValueError):
    """The field catalog file is missing, unreadable or inconsistent."""
