"""
TEK Firmware Updater
====================

Firmware update tool for keyboard controllers built on the Megawin
MG84FL54B microcontroller.

The MG84FL54B carries 16KB of ISP/IAP flash. Firmware is distributed as
8-bit Intel HEX files, which are loaded and fully validated before the
device is touched.

Main Components
---------------
- **ihex**: Intel HEX loader
    Parses, checksums and assembles records into a fixed-capacity image

- **device**: Device discovery and upload
    Locates exactly one controller by USB id and hands the image over

- **config**: Device ids and image capacity, with environment overrides

Quick Start
-----------
Load a firmware file:
    >>> from tek_updater import load_ihex_file
    >>> image = load_ihex_file("firmware.hex")
    >>> print(f"{image.high_water_mark} bytes loaded")

Or use the command-line tool:
    $ tekflash firmware.hex
"""

__version__ = "0.1.0"

# =============================================================================
# Public API Exports
# =============================================================================

from tek_updater.errors import (
    UpdaterError,
    SourceLocation,
    IHexError,
    MalformedLineError,
    ChecksumMismatchError,
    AddressOutOfRangeError,
    UnsupportedRecordTypeError,
    InvalidRecordTypeError,
    UnexpectedEndOfInputError,
    TrailingDataError,
    IoFailureError,
    LoaderStateError,
    DeviceError,
    DeviceNotFoundError,
    AmbiguousDeviceError,
    UploadError,
)

from tek_updater.ihex import (
    DEFAULT_CAPACITY,
    Record,
    RecordType,
    ImageBuffer,
    IHexLoader,
    LoadState,
    parse_record,
    validate_record,
    assemble_record,
    load_ihex,
    load_ihex_file,
)

from tek_updater.config import DeviceMode, UpdaterConfig

from tek_updater.device import (
    DeviceHandle,
    find_device,
    find_device_in_mode,
    upload_image,
)

__all__ = [
    "__version__",
    # Exception hierarchy
    "UpdaterError",
    "SourceLocation",
    "IHexError",
    "MalformedLineError",
    "ChecksumMismatchError",
    "AddressOutOfRangeError",
    "UnsupportedRecordTypeError",
    "InvalidRecordTypeError",
    "UnexpectedEndOfInputError",
    "TrailingDataError",
    "IoFailureError",
    "LoaderStateError",
    "DeviceError",
    "DeviceNotFoundError",
    "AmbiguousDeviceError",
    "UploadError",
    # Intel HEX
    "DEFAULT_CAPACITY",
    "Record",
    "RecordType",
    "ImageBuffer",
    "IHexLoader",
    "LoadState",
    "parse_record",
    "validate_record",
    "assemble_record",
    "load_ihex",
    "load_ihex_file",
    # Configuration
    "DeviceMode",
    "UpdaterConfig",
    # Device
    "DeviceHandle",
    "find_device",
    "find_device_in_mode",
    "upload_image",
]
