"""
Intel HEX Record Definitions
============================

This module defines the Intel HEX record structure and the reader that
turns one line of text into a Record.

Record Format
-------------
Every record is a single line of ASCII text:

    :LLAAAATT[DD...]CC

    :     Start code
    LL    Byte count, 2 hex digits (0-255)
    AAAA  Load offset, 4 hex digits, big-endian
    TT    Record type, 2 hex digits
    DD    LL data bytes, 2 hex digits each
    CC    Checksum, 2 hex digits

The shortest legal line is therefore 11 characters (an empty data field),
and a line carrying LL data bytes is exactly 11 + 2*LL characters long.

Record Types
------------
- 00: Data
- 01: End Of File
- 02: Extended Segment Address
- 03: Start Segment Address
- 04: Extended Linear Address
- 05: Start Linear Address

Only types 00 and 01 make up the 8-bit addressing subset the updater
accepts. Types 02-05 are recognised so they can be reported as
unsupported instead of invalid.

Reference
---------
- Intel Hexadecimal Object File Format Specification, Rev. A (1988)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional
import string

from tek_updater.errors import MalformedLineError, SourceLocation
from tek_updater.ihex.checksum import calculate_checksum


# =============================================================================
# Format Constants
# =============================================================================

START_CODE = ":"

# 1 start code + 2 size + 4 address + 2 type + 2 checksum
MIN_RECORD_LENGTH = 11

# Longest legal line: 255 data bytes plus a CR LF terminator. Reads are
# bounded by this so a file without newlines is never read whole.
MAX_LINE_LENGTH = MIN_RECORD_LENGTH + 2 * 0xFF + 2

# Offsets of the fixed fields within a line
_SIZE_FIELD = slice(1, 3)
_ADDRESS_FIELD = slice(3, 7)
_TYPE_FIELD = slice(7, 9)
_DATA_OFFSET = 9

_HEX_DIGITS = frozenset(string.hexdigits)


# =============================================================================
# Enumeration Types
# =============================================================================

class RecordType(IntEnum):
    """Intel HEX record type identifiers."""
    DATA = 0x00
    END_OF_FILE = 0x01
    EXTENDED_SEGMENT_ADDRESS = 0x02
    START_SEGMENT_ADDRESS = 0x03
    EXTENDED_LINEAR_ADDRESS = 0x04
    START_LINEAR_ADDRESS = 0x05

    @classmethod
    def is_extended(cls, type_byte: int) -> bool:
        """Check if a type byte belongs to the 16/32-bit addressing records."""
        return cls.EXTENDED_SEGMENT_ADDRESS <= type_byte <= cls.START_LINEAR_ADDRESS

    @classmethod
    def get_name(cls, type_byte: int) -> str:
        """Get a human-readable name for a record type."""
        names = {
            0x00: "Data",
            0x01: "End Of File",
            0x02: "Extended Segment Address",
            0x03: "Start Segment Address",
            0x04: "Extended Linear Address",
            0x05: "Start Linear Address",
        }
        return names.get(type_byte, f"Unknown (0x{type_byte:02X})")


# =============================================================================
# Record
# =============================================================================

@dataclass(frozen=True)
class Record:
    """
    One parsed Intel HEX line.

    Records are built fresh for every input line and never retained by the
    loader once their bytes have been applied to the image.

    Attributes:
        size: Number of data bytes (0-255)
        address: 16-bit load offset
        type: Record type byte (see RecordType)
        data: The data bytes, exactly `size` of them
        checksum: The checksum byte declared on the line
    """
    size: int
    address: int
    type: int
    data: bytes = b""
    checksum: int = 0

    @property
    def end(self) -> int:
        """Address one past the last byte this record covers."""
        return self.address + self.size

    @classmethod
    def build(cls, address: int, record_type: int, data: bytes = b"") -> "Record":
        """
        Create a record with a correct checksum.

        Args:
            address: 16-bit load offset
            record_type: Record type byte
            data: Data bytes (at most 255)

        Raises:
            ValueError: If a field does not fit its encoding
        """
        if len(data) > 0xFF:
            raise ValueError(f"Record data too long: {len(data)} bytes (max 255)")
        if not 0 <= address <= 0xFFFF:
            raise ValueError(f"Address out of 16-bit range: {address}")
        if not 0 <= record_type <= 0xFF:
            raise ValueError(f"Record type out of range: {record_type}")

        checksum = calculate_checksum(len(data), address, record_type, data)
        return cls(
            size=len(data),
            address=address,
            type=record_type,
            data=bytes(data),
            checksum=checksum,
        )

    def to_line(self) -> str:
        """Encode the record as an Intel HEX line, without line terminator."""
        return (
            f"{START_CODE}{self.size:02X}{self.address:04X}{self.type:02X}"
            f"{self.data.hex().upper()}{self.checksum:02X}"
        )


# =============================================================================
# Record Reader
# =============================================================================

def _parse_hex(text: str) -> Optional[int]:
    """Decode a fixed-width hex field, or return None on any non-hex digit."""
    if not text or not _HEX_DIGITS.issuperset(text):
        return None
    return int(text, 16)


def parse_record(line: str, location: Optional[SourceLocation] = None) -> Record:
    """
    Parse one line of Intel HEX text into a Record.

    Trailing line terminators (CR and LF) are stripped before parsing. The
    checksum is decoded but not verified; see checksum.validate_record().

    Args:
        line: One line of input
        location: Input location used in error messages

    Returns:
        The parsed Record

    Raises:
        MalformedLineError: If the line does not have the shape of a record

    Example:
        >>> record = parse_record(":04000000DEADBEEFC4\\n")
        >>> record.size, record.address, record.data.hex()
        (4, 0, 'deadbeef')
    """
    line = line.rstrip("\r\n")

    if len(line) < MIN_RECORD_LENGTH:
        raise MalformedLineError("too short", location)

    if line[0] != START_CODE:
        raise MalformedLineError("bad start code", location)

    size = _parse_hex(line[_SIZE_FIELD])
    address = _parse_hex(line[_ADDRESS_FIELD])
    record_type = _parse_hex(line[_TYPE_FIELD])
    if size is None or address is None or record_type is None:
        raise MalformedLineError("bad header", location)

    if len(line) != MIN_RECORD_LENGTH + 2 * size:
        raise MalformedLineError("length/size mismatch", location)

    data = bytearray()
    for offset in range(_DATA_OFFSET, _DATA_OFFSET + 2 * size, 2):
        datum = _parse_hex(line[offset:offset + 2])
        if datum is None:
            raise MalformedLineError("bad data", location)
        data.append(datum)

    checksum = _parse_hex(line[-2:])
    if checksum is None:
        raise MalformedLineError("bad checksum digits", location)

    return Record(
        size=size,
        address=address,
        type=record_type,
        data=bytes(data),
        checksum=checksum,
    )
