"""
Device Discovery and Upload
===========================

- **find_device / find_device_in_mode**: Locate exactly one target device
- **upload_image**: Hand a loaded image over to the device
"""

from tek_updater.config import DeviceMode
from tek_updater.device.discovery import (
    DeviceHandle,
    find_device,
    find_device_in_mode,
    list_devices,
)
from tek_updater.device.upload import upload_image

__all__ = [
    "DeviceMode",
    "DeviceHandle",
    "find_device",
    "find_device_in_mode",
    "list_devices",
    "upload_image",
]
