"""
Device Discovery
================

This module locates the target device among the USB serial devices the
system knows about. A device is identified by its USB vendor and product
ids; the product id changes with the firmware the device is running
(application or bootloader), so the mode selects which id to look for.

Exactly one device must match. Flashing the wrong board can brick it, so
when several match the updater refuses to guess and asks the user to
unplug the others.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import serial.tools.list_ports

from tek_updater.config import DeviceMode, UpdaterConfig
from tek_updater.errors import AmbiguousDeviceError, DeviceNotFoundError

logger = logging.getLogger(__name__)


# =============================================================================
# Device Information
# =============================================================================

@dataclass(frozen=True)
class DeviceHandle:
    """
    A connected USB device that matched a discovery request.

    Attributes:
        device: System device path (e.g., '/dev/ttyACM0', 'COM3')
        description: Human-readable description from the driver
        vid: USB Vendor ID
        pid: USB Product ID
        serial_number: Device serial number (if available)
        location: USB bus location (if available)
    """

    device: str
    description: str
    vid: int
    pid: int
    serial_number: Optional[str] = None
    location: Optional[str] = None

    def __str__(self) -> str:
        """Format device info for display."""
        parts = [self.device, f"[{self.vid:04X}:{self.pid:04X}]"]
        if self.description:
            parts.append(f"- {self.description}")
        return " ".join(parts)


# =============================================================================
# Enumeration
# =============================================================================

def list_devices() -> list[DeviceHandle]:
    """
    List all USB devices exposed as serial ports.

    Ports without a USB vendor id (hardware UARTs, Bluetooth) are skipped.

    Returns:
        List of DeviceHandle objects, one per USB port.
    """
    devices = []

    for port in serial.tools.list_ports.comports():
        if port.vid is None:
            continue
        devices.append(DeviceHandle(
            device=port.device,
            description=port.description or "",
            vid=port.vid,
            pid=port.pid,
            serial_number=port.serial_number,
            location=port.location,
        ))
        logger.debug("Found USB port: %s (%04X:%04X)", port.device, port.vid, port.pid)

    return devices


def find_device(vendor_id: int, product_id: int) -> DeviceHandle:
    """
    Find the single connected device with the given USB ids.

    Args:
        vendor_id: USB vendor id
        product_id: USB product id

    Returns:
        The matching device

    Raises:
        DeviceNotFoundError: If no device matches
        AmbiguousDeviceError: If more than one device matches
    """
    matches = [
        d for d in list_devices()
        if d.vid == vendor_id and d.pid == product_id
    ]

    if not matches:
        raise DeviceNotFoundError(
            f"No device found with USB id {vendor_id:04X}:{product_id:04X}"
        )

    if len(matches) > 1:
        raise AmbiguousDeviceError(
            f"{len(matches)} devices found with USB id "
            f"{vendor_id:04X}:{product_id:04X}, connect only one",
            candidates=[d.device for d in matches],
        )

    logger.info("Found device: %s", matches[0])
    return matches[0]


def find_device_in_mode(
    mode: DeviceMode,
    config: Optional[UpdaterConfig] = None,
) -> DeviceHandle:
    """
    Find the single connected device running in the given mode.

    Args:
        mode: Application or bootloader
        config: Device ids to use (default: UpdaterConfig())

    Raises:
        DeviceNotFoundError: If no device matches
        AmbiguousDeviceError: If more than one device matches
    """
    if config is None:
        config = UpdaterConfig()

    logger.debug("Looking for device in %s mode", mode.value)
    return find_device(config.vendor_id, config.product_id_for(mode))
