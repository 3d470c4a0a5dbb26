"""
Intel HEX Record Checksums
==========================

Every Intel HEX record ends with a one-byte checksum chosen so that the
8-bit sum of all record bytes, checksum included, is zero:

    (size + addr_hi + addr_lo + type + data[0] + ... + data[n-1] + checksum)
        & 0xFF == 0

The checksum is therefore the two's complement of the 8-bit sum of the
other fields. It is cheap and self-describing, and catches every
single-bit corruption picked up by manual transcription or a noisy serial
capture.

Example
-------
    :04000000DEADBEEFC4

    0x04 + 0x00 + 0x00 + 0x00 + 0xDE + 0xAD + 0xBE + 0xEF = 0x33C
    low byte 0x3C, so the checksum is 0x100 - 0x3C = 0xC4.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

from tek_updater.errors import ChecksumMismatchError, SourceLocation

if TYPE_CHECKING:
    from tek_updater.ihex.records import Record


def record_sum(size: int, address: int, record_type: int, data: Iterable[int]) -> int:
    """
    Calculate the 8-bit sum of the checksummed record fields.

    The 16-bit address contributes its high and low bytes separately.

    Args:
        size: Data byte count (0-255)
        address: 16-bit load offset
        record_type: Record type byte
        data: The data bytes

    Returns:
        The sum of all fields modulo 256
    """
    total = size + ((address >> 8) & 0xFF) + (address & 0xFF) + record_type
    total += sum(data)
    return total & 0xFF


def calculate_checksum(size: int, address: int, record_type: int, data: Iterable[int]) -> int:
    """
    Calculate the checksum byte for a record.

    Example:
        >>> calculate_checksum(0, 0x0000, 0x01, b"")
        255
        >>> calculate_checksum(4, 0x0000, 0x00, bytes.fromhex("DEADBEEF"))
        196
    """
    return (-record_sum(size, address, record_type, data)) & 0xFF


def verify_record(record: Record) -> bool:
    """
    Return True if the record's declared checksum cancels its field sum.
    """
    total = record_sum(record.size, record.address, record.type, record.data)
    return (total + record.checksum) & 0xFF == 0


def validate_record(record: Record, location: Optional[SourceLocation] = None) -> None:
    """
    Validate a parsed record's checksum.

    Args:
        record: The parsed record
        location: Input location used in the error message

    Raises:
        ChecksumMismatchError: If the checksum does not cancel the sum
    """
    if verify_record(record):
        return

    expected = calculate_checksum(record.size, record.address, record.type, record.data)
    raise ChecksumMismatchError(expected, record.checksum, location=location)
