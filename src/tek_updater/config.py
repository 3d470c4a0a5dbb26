"""
Firmware Updater Configuration
==============================

Settings for the target device and its firmware image. Configuration can
come from:
- Default values (defined here)
- Environment variables
- Command-line options (applied by the CLI on top of the above)

The defaults describe a keyboard controller built on the Megawin
MG84FL54B, which carries 16KB of ISP/IAP flash and enumerates with a
different USB product id while its bootloader is running.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging
import os

from tek_updater.ihex.image import DEFAULT_CAPACITY

logger = logging.getLogger(__name__)


# Megawin Technology
DEFAULT_VENDOR_ID = 0x0E6A

DEFAULT_APPLICATION_PRODUCT_ID = 0x030C
DEFAULT_BOOTLOADER_PRODUCT_ID = 0x0301


class DeviceMode(Enum):
    """Which firmware the device is running, as seen on the USB bus."""
    APPLICATION = "application"
    BOOTLOADER = "bootloader"


def _parse_int(name: str, value: str) -> Optional[int]:
    """Parse a decimal or 0x-prefixed integer, or warn and return None."""
    try:
        return int(value, 0)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", name, value)
        return None


def _parse_usb_id(name: str, value: str) -> Optional[int]:
    """Parse a 16-bit USB vendor or product id, or warn and return None."""
    parsed = _parse_int(name, value)
    if parsed is not None and not 0 <= parsed <= 0xFFFF:
        logger.warning("Ignoring invalid %s=%r", name, value)
        return None
    return parsed


@dataclass
class UpdaterConfig:
    """
    Configuration for a firmware update.

    Attributes:
        capacity: Image buffer size in bytes (default: 16384)
        vendor_id: USB vendor id of the device
        application_product_id: USB product id while running firmware
        bootloader_product_id: USB product id while in the bootloader
    """

    capacity: int = DEFAULT_CAPACITY
    vendor_id: int = DEFAULT_VENDOR_ID
    application_product_id: int = DEFAULT_APPLICATION_PRODUCT_ID
    bootloader_product_id: int = DEFAULT_BOOTLOADER_PRODUCT_ID

    @classmethod
    def from_env(cls) -> "UpdaterConfig":
        """
        Create UpdaterConfig from environment variables.

        Environment variables (all optional, decimal or 0x hex):
            TEK_UPDATER_CAPACITY: Image capacity in bytes
            TEK_UPDATER_VID: USB vendor id
            TEK_UPDATER_PID: USB product id in application mode
            TEK_UPDATER_BOOT_PID: USB product id in bootloader mode

        Returns:
            UpdaterConfig with values from environment variables
        """
        config = cls()

        if capacity := os.environ.get("TEK_UPDATER_CAPACITY"):
            value = _parse_int("TEK_UPDATER_CAPACITY", capacity)
            if value is not None and value > 0:
                config.capacity = value

        if vid := os.environ.get("TEK_UPDATER_VID"):
            value = _parse_usb_id("TEK_UPDATER_VID", vid)
            if value is not None:
                config.vendor_id = value

        if pid := os.environ.get("TEK_UPDATER_PID"):
            value = _parse_usb_id("TEK_UPDATER_PID", pid)
            if value is not None:
                config.application_product_id = value

        if boot_pid := os.environ.get("TEK_UPDATER_BOOT_PID"):
            value = _parse_usb_id("TEK_UPDATER_BOOT_PID", boot_pid)
            if value is not None:
                config.bootloader_product_id = value

        return config

    def product_id_for(self, mode: DeviceMode) -> int:
        """Return the USB product id the device uses in a given mode."""
        if mode == DeviceMode.BOOTLOADER:
            return self.bootloader_product_id
        return self.application_product_id
