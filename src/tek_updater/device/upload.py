"""
Firmware Upload
===============

Hands a loaded firmware image over to the device.

The transfer protocol of the MG84FL54B ISP bootloader is not implemented:
upload_image() checks its inputs, logs what would be sent and reports
success without writing to the device. Callers should still treat it as
the device-mutating step and only call it with a fully loaded image.
"""

import logging

from tek_updater.device.discovery import DeviceHandle
from tek_updater.errors import UploadError
from tek_updater.ihex.image import ImageBuffer

logger = logging.getLogger(__name__)


def upload_image(image: ImageBuffer, device: DeviceHandle) -> int:
    """
    Upload the used part of an image to a device.

    Args:
        image: A fully loaded image; bytes [0, high_water_mark) are sent
        device: The device to flash

    Returns:
        Number of bytes handed over

    Raises:
        UploadError: If there is no device to upload to
    """
    if device is None:
        raise UploadError("No device to upload to")

    size = image.high_water_mark
    if size == 0:
        logger.warning("Image is empty, nothing to upload to %s", device.device)
        return 0

    logger.info("Uploading %d bytes to %s", size, device)
    return size
