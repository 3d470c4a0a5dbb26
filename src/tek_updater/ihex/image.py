"""
Firmware Image Buffer and Record Assembly
=========================================

This module holds the destination memory image and applies validated
records to it.

ImageBuffer
-----------
A flat, fixed-capacity byte image, typically sized to the target's
programmable flash (16KB on the Megawin MG84FL54B). It wraps a mutable
buffer owned by the caller; the loader only writes into it and never
reads what was there before. Every write is bounds checked before a
single byte is copied, so an out-of-range record leaves the image
untouched.

The image tracks a high-water mark: the highest address+1 written so
far. Bytes in [0, high_water_mark) are the loaded image; bytes beyond it
are whatever the caller's buffer held (zero for a freshly allocated one).

Record Assembly
---------------
assemble_record() dispatches a validated record by type:
- Data records are written at their load offset
- The End Of File record ends the stream
- Extended addressing records are rejected as unsupported
- Anything else is rejected as invalid
"""

from typing import Optional, Union
import logging

from tek_updater.errors import (
    AddressOutOfRangeError,
    InvalidRecordTypeError,
    SourceLocation,
    UnsupportedRecordTypeError,
)
from tek_updater.ihex.records import Record, RecordType

logger = logging.getLogger(__name__)


# MG84FL54B: 16KB of onboard ISP/IAP flash
DEFAULT_CAPACITY = 16384


class ImageBuffer:
    """
    Capacity-aware view of a firmware image buffer.

    Attributes:
        capacity: Size of the buffer; an exclusive bound for every write
        high_water_mark: Highest address+1 written so far

    Example:
        >>> image = ImageBuffer(capacity=16384)
        >>> image.write(0x0000, b"\\x02\\x00\\x30")
        >>> image.high_water_mark
        3
        >>> image.image
        b'\\x02\\x000'
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        buffer: Optional[Union[bytearray, memoryview]] = None,
    ):
        """
        Create an image buffer.

        Args:
            capacity: Capacity in bytes, used when no buffer is given
            buffer: Caller-owned mutable buffer to write into; its length
                is the capacity

        Raises:
            ValueError: If the capacity is not positive, or the buffer is
                read-only
        """
        if buffer is None:
            if capacity <= 0:
                raise ValueError(f"Image capacity must be positive: {capacity}")
            buffer = bytearray(capacity)
        else:
            buffer = memoryview(buffer).cast("B")
            if buffer.readonly:
                raise ValueError("Image buffer must be writable")
            if len(buffer) == 0:
                raise ValueError("Image buffer must not be empty")

        self._buffer = buffer
        self.high_water_mark = 0

    @property
    def capacity(self) -> int:
        return len(self._buffer)

    @property
    def buffer(self) -> Union[bytearray, memoryview]:
        """The whole underlying buffer, used and unused bytes alike."""
        return self._buffer

    @property
    def image(self) -> bytes:
        """The loaded image: bytes [0, high_water_mark)."""
        return bytes(self._buffer[:self.high_water_mark])

    def __len__(self) -> int:
        return self.high_water_mark

    def write(
        self,
        address: int,
        data: bytes,
        location: Optional[SourceLocation] = None,
    ) -> None:
        """
        Write bytes at an address and raise the high-water mark.

        The bound is strict: the span's end address must be below the
        capacity, so a span ending exactly at the capacity is rejected.

        Raises:
            AddressOutOfRangeError: If address + len(data) >= capacity.
                Nothing is written in that case.
        """
        end = address + len(data)
        if address < 0 or end >= self.capacity:
            raise AddressOutOfRangeError(address, len(data), self.capacity, location)

        self._buffer[address:end] = data
        if end > self.high_water_mark:
            self.high_water_mark = end


def assemble_record(
    record: Record,
    image: ImageBuffer,
    location: Optional[SourceLocation] = None,
) -> bool:
    """
    Apply a validated record to the image.

    Args:
        record: A record that has passed checksum validation
        image: The destination image
        location: Input location used in error messages

    Returns:
        True if the record terminates the stream (End Of File), else False

    Raises:
        AddressOutOfRangeError: Data record reaches the image capacity
        UnsupportedRecordTypeError: Extended addressing record (types 2-5)
        InvalidRecordTypeError: Any other unknown record type
    """
    if record.type == RecordType.DATA:
        image.write(record.address, record.data, location)
        logger.debug(
            "Data record: %d bytes at 0x%04X (high-water mark %d)",
            record.size, record.address, image.high_water_mark,
        )
        return False

    if record.type == RecordType.END_OF_FILE:
        logger.debug("End Of File record")
        return True

    if RecordType.is_extended(record.type):
        raise UnsupportedRecordTypeError(record.type, location)

    raise InvalidRecordTypeError(record.type, location)
