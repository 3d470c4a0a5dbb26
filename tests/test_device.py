"""
Device Module Unit Tests
========================

Test Categories
---------------
1. Configuration: Defaults and environment overrides
2. Discovery: USB device matching (pyserial enumeration mocked)
3. Upload: Image hand-over
"""

from unittest.mock import Mock

import pytest
import serial.tools.list_ports

from tek_updater.config import (
    DEFAULT_APPLICATION_PRODUCT_ID,
    DEFAULT_BOOTLOADER_PRODUCT_ID,
    DEFAULT_VENDOR_ID,
    DeviceMode,
    UpdaterConfig,
)
from tek_updater.device import (
    DeviceHandle,
    find_device,
    find_device_in_mode,
    list_devices,
    upload_image,
)
from tek_updater.errors import (
    AmbiguousDeviceError,
    DeviceError,
    DeviceNotFoundError,
    UploadError,
)
from tek_updater.ihex import ImageBuffer


# =============================================================================
# Test Fixtures
# =============================================================================

def make_port(device, vid, pid, description="USB Device"):
    """Create a stand-in for a pyserial ListPortInfo."""
    return Mock(
        device=device,
        description=description,
        vid=vid,
        pid=pid,
        serial_number=None,
        location="1-1",
    )


@pytest.fixture
def ports(monkeypatch):
    """Replace pyserial port enumeration with a settable list."""
    available = []
    monkeypatch.setattr(serial.tools.list_ports, "comports", lambda: list(available))
    return available


@pytest.fixture
def clean_env(monkeypatch):
    """Remove updater settings from the environment."""
    for name in ("TEK_UPDATER_CAPACITY", "TEK_UPDATER_VID",
                 "TEK_UPDATER_PID", "TEK_UPDATER_BOOT_PID"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def handle() -> DeviceHandle:
    return DeviceHandle(
        device="/dev/ttyACM0",
        description="Keyboard",
        vid=DEFAULT_VENDOR_ID,
        pid=DEFAULT_BOOTLOADER_PRODUCT_ID,
    )


# =============================================================================
# Configuration Tests
# =============================================================================

class TestUpdaterConfig:
    """Tests for UpdaterConfig."""

    def test_defaults(self):
        """Defaults describe a 16KB MG84FL54B controller."""
        config = UpdaterConfig()
        assert config.capacity == 16384
        assert config.vendor_id == DEFAULT_VENDOR_ID

    def test_product_id_for_mode(self):
        """Each mode has its own product id."""
        config = UpdaterConfig()
        assert config.product_id_for(DeviceMode.APPLICATION) == DEFAULT_APPLICATION_PRODUCT_ID
        assert config.product_id_for(DeviceMode.BOOTLOADER) == DEFAULT_BOOTLOADER_PRODUCT_ID

    def test_from_env_defaults(self, clean_env):
        """Without environment variables the defaults apply."""
        assert UpdaterConfig.from_env() == UpdaterConfig()

    def test_from_env_overrides(self, clean_env):
        """Environment variables accept decimal and hex."""
        clean_env.setenv("TEK_UPDATER_CAPACITY", "8192")
        clean_env.setenv("TEK_UPDATER_VID", "0x1234")
        clean_env.setenv("TEK_UPDATER_PID", "0x0001")
        clean_env.setenv("TEK_UPDATER_BOOT_PID", "2")

        config = UpdaterConfig.from_env()
        assert config.capacity == 8192
        assert config.vendor_id == 0x1234
        assert config.application_product_id == 1
        assert config.bootloader_product_id == 2

    def test_from_env_ignores_invalid(self, clean_env):
        """Unparseable or non-positive values are ignored."""
        clean_env.setenv("TEK_UPDATER_CAPACITY", "lots")
        clean_env.setenv("TEK_UPDATER_VID", "vendor")
        config = UpdaterConfig.from_env()
        assert config.capacity == 16384
        assert config.vendor_id == DEFAULT_VENDOR_ID

        clean_env.setenv("TEK_UPDATER_CAPACITY", "0")
        assert UpdaterConfig.from_env().capacity == 16384

    def test_from_env_ignores_out_of_range_ids(self, clean_env):
        """USB ids must fit in 16 bits."""
        clean_env.setenv("TEK_UPDATER_VID", "-1")
        clean_env.setenv("TEK_UPDATER_PID", "0x10000")
        clean_env.setenv("TEK_UPDATER_BOOT_PID", "70000")
        config = UpdaterConfig.from_env()
        assert config.vendor_id == DEFAULT_VENDOR_ID
        assert config.application_product_id == DEFAULT_APPLICATION_PRODUCT_ID
        assert config.bootloader_product_id == DEFAULT_BOOTLOADER_PRODUCT_ID

        clean_env.setenv("TEK_UPDATER_PID", "0xFFFF")
        assert UpdaterConfig.from_env().application_product_id == 0xFFFF


# =============================================================================
# Discovery Tests
# =============================================================================

class TestDiscovery:
    """Tests for device discovery."""

    def test_list_devices_skips_non_usb(self, ports):
        """Ports without a USB vendor id are not devices."""
        ports.extend([
            make_port("/dev/ttyS0", None, None, "ttyS0"),
            make_port("/dev/ttyACM0", 0x0E6A, 0x0301),
        ])
        devices = list_devices()
        assert [d.device for d in devices] == ["/dev/ttyACM0"]
        assert devices[0].vid == 0x0E6A
        assert devices[0].location == "1-1"

    def test_find_single_device(self, ports):
        """Exactly one match is returned."""
        ports.extend([
            make_port("/dev/ttyUSB0", 0x0403, 0x6001),
            make_port("/dev/ttyACM0", 0x0E6A, 0x0301),
        ])
        device = find_device(0x0E6A, 0x0301)
        assert device.device == "/dev/ttyACM0"

    def test_find_no_device(self, ports):
        """Zero matches is an error."""
        ports.append(make_port("/dev/ttyUSB0", 0x0403, 0x6001))
        with pytest.raises(DeviceNotFoundError) as exc_info:
            find_device(0x0E6A, 0x0301)
        assert "0E6A:0301" in str(exc_info.value)

    def test_find_wrong_mode(self, ports):
        """A device in application mode is not found as a bootloader."""
        ports.append(make_port("/dev/ttyACM0", DEFAULT_VENDOR_ID,
                               DEFAULT_APPLICATION_PRODUCT_ID))
        assert find_device_in_mode(DeviceMode.APPLICATION).device == "/dev/ttyACM0"
        with pytest.raises(DeviceNotFoundError):
            find_device_in_mode(DeviceMode.BOOTLOADER)

    def test_find_ambiguous(self, ports):
        """More than one match is an error naming the candidates."""
        ports.extend([
            make_port("/dev/ttyACM0", 0x0E6A, 0x0301),
            make_port("/dev/ttyACM1", 0x0E6A, 0x0301),
        ])
        with pytest.raises(AmbiguousDeviceError) as exc_info:
            find_device(0x0E6A, 0x0301)
        assert exc_info.value.candidates == ["/dev/ttyACM0", "/dev/ttyACM1"]
        assert isinstance(exc_info.value, DeviceError)

    def test_find_in_mode_uses_config(self, ports):
        """Configured ids override the defaults."""
        ports.append(make_port("/dev/ttyACM3", 0x1234, 0x0002))
        config = UpdaterConfig(vendor_id=0x1234, bootloader_product_id=0x0002)
        assert find_device_in_mode(DeviceMode.BOOTLOADER, config).device == "/dev/ttyACM3"

    def test_handle_str(self, handle):
        """Handles show path and USB id."""
        text = str(handle)
        assert "/dev/ttyACM0" in text
        assert "0E6A:0301" in text


# =============================================================================
# Upload Tests
# =============================================================================

class TestUpload:
    """Tests for upload_image()."""

    def test_upload_reports_used_length(self, handle):
        """The used part of the image is handed over."""
        image = ImageBuffer(capacity=64)
        image.write(0, bytes(range(10)))
        assert upload_image(image, handle) == 10

    def test_upload_empty_image(self, handle):
        """An empty image uploads nothing."""
        assert upload_image(ImageBuffer(capacity=64), handle) == 0

    def test_upload_without_device(self):
        """A missing device is an upload error."""
        with pytest.raises(UploadError):
            upload_image(ImageBuffer(capacity=64), None)
