"""
Firmware Updater Error Hierarchy
================================

This module defines the exception hierarchy for the firmware updater.
All exceptions inherit from UpdaterError, allowing callers to catch every
updater-related failure with a single except clause.

Exception Hierarchy
-------------------
UpdaterError (base)
├── IHexError (Intel HEX loading)
│   ├── MalformedLineError - line does not have the shape of a record
│   ├── ChecksumMismatchError - declared checksum does not cancel the sum
│   ├── AddressOutOfRangeError - data record would write past the image
│   ├── UnsupportedRecordTypeError - extended addressing record (types 2-5)
│   ├── InvalidRecordTypeError - record type outside the format entirely
│   ├── UnexpectedEndOfInputError - input ended before the EOF record
│   ├── TrailingDataError - input continues after the EOF record
│   ├── IoFailureError - the input source could not be read
│   └── LoaderStateError - loader used after it finished or failed
└── DeviceError (device discovery and upload)
    ├── DeviceNotFoundError - no matching device connected
    ├── AmbiguousDeviceError - more than one matching device connected
    └── UploadError - the image could not be handed to the device

Every loading error is terminal. A firmware image is either parsed
completely and correctly or rejected outright, so nothing here is ever
retried or skipped by the loader.

Error messages follow this format:
    source:line: error: description
"""

from dataclasses import dataclass
from typing import Optional, Sequence


# =============================================================================
# Base Exception Class
# =============================================================================

class UpdaterError(Exception):
    """
    Base exception for all firmware updater errors.

        try:
            image = load_ihex_file("firmware.hex")
        except UpdaterError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Location of a line in an Intel HEX input.

    Attributes:
        source: Name of the input (file path, or "<input>" for streams)
        line: Line number (1-indexed)
    """
    source: str
    line: int

    def __str__(self) -> str:
        """Format as 'source:line' for error messages."""
        return f"{self.source}:{self.line}"


# =============================================================================
# Intel HEX Exceptions
# =============================================================================

class IHexError(UpdaterError):
    """
    Base exception for Intel HEX loading errors.

    Attributes:
        message: The error description
        location: Where in the input the error was detected (optional)
    """

    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    @property
    def line_number(self) -> Optional[int]:
        """The 1-based input line, or None when no line applies."""
        return self.location.line if self.location else None

    def _format_message(self) -> str:
        """
        Format the message with its location prefix.

        Example output:
            firmware.hex:12: error: checksum mismatch (expected 0x3C, got 0x3D)
        """
        if self.location:
            return f"{self.location}: error: {self.message}"
        return f"error: {self.message}"


class MalformedLineError(IHexError):
    """
    Line does not have the syntactic shape of an Intel HEX record.

    The reason is one of:
        - "too short"
        - "bad start code"
        - "bad header"
        - "length/size mismatch"
        - "bad data"
        - "bad checksum digits"
    """

    def __init__(self, reason: str, location: Optional[SourceLocation] = None):
        self.reason = reason
        super().__init__(f"malformed line: {reason}", location=location)


class ChecksumMismatchError(IHexError):
    """
    Record checksum does not cancel the sum of the record fields.

    Attributes:
        expected: The checksum byte that would make the record valid
        actual: The checksum byte declared in the record
    """

    def __init__(
        self,
        expected: int,
        actual: int,
        location: Optional[SourceLocation] = None,
    ):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"checksum mismatch (expected 0x{expected:02X}, got 0x{actual:02X})",
            location=location,
        )


class AddressOutOfRangeError(IHexError):
    """
    Data record span reaches or passes the image capacity.

    The capacity is an exclusive bound and the check is strict: a record
    whose end address equals the capacity is already rejected.
    """

    def __init__(
        self,
        address: int,
        size: int,
        capacity: int,
        location: Optional[SourceLocation] = None,
    ):
        self.address = address
        self.size = size
        self.capacity = capacity
        super().__init__(
            f"address too high to upload: 0x{address:04X}+{size} "
            f"exceeds image capacity of {capacity} bytes",
            location=location,
        )


class UnsupportedRecordTypeError(IHexError):
    """
    Extended addressing record (types 2-5).

    Only the 8-bit addressing subset of Intel HEX is supported.
    """

    def __init__(self, record_type: int, location: Optional[SourceLocation] = None):
        self.record_type = record_type
        super().__init__(
            f"only 8-bit Intel HEX is supported (record type 0x{record_type:02X})",
            location=location,
        )


class InvalidRecordTypeError(IHexError):
    """Record type outside the Intel HEX type space."""

    def __init__(self, record_type: int, location: Optional[SourceLocation] = None):
        self.record_type = record_type
        super().__init__(
            f"invalid record type 0x{record_type:02X}",
            location=location,
        )


class UnexpectedEndOfInputError(IHexError):
    """Input ended before an end-of-file record was seen."""

    def __init__(self, location: Optional[SourceLocation] = None):
        super().__init__("unexpected end of file", location=location)


class TrailingDataError(IHexError):
    """Input continues after the end-of-file record."""

    def __init__(self, location: Optional[SourceLocation] = None):
        super().__init__("data after last record", location=location)


class IoFailureError(IHexError):
    """
    The input source could not be read.

    Always raised from the underlying exception, which stays available
    as __cause__.
    """
    pass


class LoaderStateError(IHexError):
    """Loader was fed after it already finished or failed."""
    pass


# =============================================================================
# Device Exceptions
# =============================================================================

class DeviceError(UpdaterError):
    """Base exception for device discovery and upload errors."""
    pass


class DeviceNotFoundError(DeviceError):
    """
    No connected device matches the requested identifiers.

    Raised when:
    - The device is unplugged
    - The device is in a different mode (different product id)
    - The user lacks permission to enumerate USB devices
    """
    pass


class AmbiguousDeviceError(DeviceError):
    """
    More than one connected device matches the requested identifiers.

    The updater refuses to guess which device to flash.
    """

    def __init__(self, message: str, candidates: Sequence[str] = ()):
        self.candidates = list(candidates)
        if self.candidates:
            message = f"{message}: {', '.join(self.candidates)}"
        super().__init__(message)


class UploadError(DeviceError):
    """The image could not be handed over to the device."""
    pass
