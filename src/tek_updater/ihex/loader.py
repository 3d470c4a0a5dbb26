"""
Intel HEX Loader
================

This module drives the record reader, validator and assembler over a
stream of lines and enforces the rules of the record stream as a whole.

State Machine
-------------
    READING ──(EOF record)──> TERMINATED ──(end of input)──> DONE
       │                          │
       │ (any error,              │ (another line: TrailingDataError)
       │  end of input)           v
       └─────────────────────> FAILED

- Exactly one End Of File record must appear, and it must be last.
- End of input before the End Of File record is an error.
- The first error stops the load. There is no partial recovery: a
  partially applied firmware image can brick the target, so an image is
  loaded correctly in full or not at all.

Usage Examples
--------------
Loading a file:
    >>> from tek_updater.ihex import load_ihex_file
    >>> image = load_ihex_file("firmware.hex")
    >>> print(f"Loaded {image.high_water_mark} bytes")

Feeding lines by hand:
    >>> loader = IHexLoader(ImageBuffer(capacity=16384))
    >>> loader.feed_line(":04000000DEADBEEFC4")
    >>> loader.feed_line(":00000001FF")
    >>> loader.finish()
    4
"""

from enum import Enum
from pathlib import Path
from typing import Optional, TextIO, Union
import logging

from tek_updater.errors import (
    IHexError,
    IoFailureError,
    LoaderStateError,
    SourceLocation,
    TrailingDataError,
    UnexpectedEndOfInputError,
)
from tek_updater.ihex.checksum import validate_record
from tek_updater.ihex.image import DEFAULT_CAPACITY, ImageBuffer, assemble_record
from tek_updater.ihex.records import MAX_LINE_LENGTH, parse_record

logger = logging.getLogger(__name__)


class LoadState(Enum):
    """States of the record stream."""
    READING = "reading"
    TERMINATED = "terminated"
    FAILED = "failed"
    DONE = "done"


class IHexLoader:
    """
    Loads one Intel HEX record stream into an ImageBuffer.

    A loader is single use: once it reaches DONE or FAILED it accepts no
    further input.

    Attributes:
        image: The destination image
        source: Name of the input, used in error messages
        state: Current LoadState
        line_number: Number of lines consumed so far (1-based once reading)
    """

    def __init__(self, image: ImageBuffer, source: Optional[str] = None):
        self.image = image
        self.source = source or "<input>"
        self.state = LoadState.READING
        self.line_number = 0
        self._terminated = False

    @property
    def terminated(self) -> bool:
        """True once the End Of File record has been seen, even if the load later failed."""
        return self._terminated

    def _location(self) -> SourceLocation:
        return SourceLocation(self.source, self.line_number)

    def _check_active(self) -> None:
        if self.state in (LoadState.DONE, LoadState.FAILED):
            raise LoaderStateError(f"loader already {self.state.value}")

    def _fail(self, error: IHexError) -> IHexError:
        self.state = LoadState.FAILED
        logger.debug("Load of %s failed: %s", self.source, error)
        return error

    def feed_line(self, line: str) -> None:
        """
        Consume one line of input.

        Raises:
            TrailingDataError: If the End Of File record was already seen
            IHexError: Any reader, validator or assembler error
            LoaderStateError: If the loader already finished or failed
        """
        self._check_active()
        self.line_number += 1
        location = self._location()

        if self.state == LoadState.TERMINATED:
            raise self._fail(TrailingDataError(location))

        try:
            record = parse_record(line, location)
            validate_record(record, location)
            if assemble_record(record, self.image, location):
                self._terminated = True
                self.state = LoadState.TERMINATED
        except IHexError as e:
            self._fail(e)
            raise

    def finish(self) -> int:
        """
        Signal end of input.

        Returns:
            The image high-water mark, i.e. the used length of the image

        Raises:
            UnexpectedEndOfInputError: If no End Of File record was seen
            LoaderStateError: If the loader already finished or failed
        """
        self._check_active()

        if self.state != LoadState.TERMINATED:
            location = SourceLocation(self.source, self.line_number + 1)
            raise self._fail(UnexpectedEndOfInputError(location))

        self.state = LoadState.DONE
        logger.info(
            "Loaded %s: %d lines, %d bytes",
            self.source, self.line_number, self.image.high_water_mark,
        )
        return self.image.high_water_mark

    def load(self, stream: TextIO) -> int:
        """
        Consume a whole stream of lines.

        Args:
            stream: Readable text stream

        Returns:
            The image high-water mark

        Raises:
            IoFailureError: If reading the stream fails
            IHexError: The first loading error encountered
        """
        self._check_active()
        while True:
            try:
                line = stream.readline(MAX_LINE_LENGTH)
            except (OSError, UnicodeError) as e:
                error = IoFailureError(
                    f"error reading input: {e}",
                    SourceLocation(self.source, self.line_number + 1),
                )
                raise self._fail(error) from e

            if not line:
                return self.finish()
            self.feed_line(line)


def load_ihex(
    stream: TextIO,
    image: Optional[ImageBuffer] = None,
    capacity: int = DEFAULT_CAPACITY,
    source: Optional[str] = None,
) -> ImageBuffer:
    """
    Load an Intel HEX stream into an image.

    Args:
        stream: Readable text stream
        image: Destination image; a zeroed image of `capacity` bytes is
            created when omitted
        capacity: Capacity of the created image
        source: Name of the input, used in error messages;
            "<input>" when omitted

    Returns:
        The populated image

    Raises:
        IHexError: The first loading error encountered
    """
    if image is None:
        image = ImageBuffer(capacity=capacity)
    IHexLoader(image, source=source).load(stream)
    return image


def load_ihex_file(
    filepath: Union[str, Path],
    capacity: int = DEFAULT_CAPACITY,
    image: Optional[ImageBuffer] = None,
) -> ImageBuffer:
    """
    Read and load an Intel HEX file from disk.

    Non-ASCII bytes are decoded to U+FFFD so that they surface as malformed
    lines with a line number rather than as decode failures.

    Raises:
        FileNotFoundError: If the file doesn't exist
        IHexError: The first loading error encountered
    """
    filepath = Path(filepath)
    with filepath.open("r", encoding="ascii", errors="replace", newline="") as f:
        return load_ihex(f, image=image, capacity=capacity, source=str(filepath))
