"""
Intel HEX Firmware Loading
==========================

This module loads firmware images in the 8-bit addressing subset of the
Intel HEX format into a flat, fixed-capacity byte image, validating every
record before the image is trusted for flashing.

This module provides:
- **parse_record**: Turn one line of text into a Record
- **validate_record**: Check a record's checksum
- **ImageBuffer / assemble_record**: Apply records to the image
- **IHexLoader**: Drive the whole record stream, one line at a time
- **load_ihex / load_ihex_file**: One-call loading of a stream or file

Quick Start
-----------
    >>> from tek_updater.ihex import load_ihex_file
    >>> image = load_ihex_file("firmware.hex", capacity=16384)
    >>> firmware = image.image   # bytes [0, high_water_mark)

Supported Records
-----------------
- 00 Data
- 01 End Of File

Extended addressing records (02-05) are rejected.
"""

# =============================================================================
# Public API Exports
# =============================================================================

from tek_updater.ihex.records import (
    MAX_LINE_LENGTH,
    MIN_RECORD_LENGTH,
    START_CODE,
    Record,
    RecordType,
    parse_record,
)

from tek_updater.ihex.checksum import (
    calculate_checksum,
    record_sum,
    validate_record,
    verify_record,
)

from tek_updater.ihex.image import (
    DEFAULT_CAPACITY,
    ImageBuffer,
    assemble_record,
)

from tek_updater.ihex.loader import (
    IHexLoader,
    LoadState,
    load_ihex,
    load_ihex_file,
)

__all__ = [
    # Records
    "MAX_LINE_LENGTH",
    "MIN_RECORD_LENGTH",
    "START_CODE",
    "Record",
    "RecordType",
    "parse_record",
    # Checksum
    "calculate_checksum",
    "record_sum",
    "validate_record",
    "verify_record",
    # Image
    "DEFAULT_CAPACITY",
    "ImageBuffer",
    "assemble_record",
    # Loader
    "IHexLoader",
    "LoadState",
    "load_ihex",
    "load_ihex_file",
]
