"""
Tests for tekflash - Firmware Updater CLI
=========================================

These tests drive the command through click's CliRunner with pyserial
port enumeration mocked, so no device is needed.
"""

from unittest.mock import Mock

import pytest
import serial.tools.list_ports
from click.testing import CliRunner

from tek_updater.cli.errors import ExitCode
from tek_updater.cli.tekflash import format_hex_dump, main
from tek_updater.config import DEFAULT_BOOTLOADER_PRODUCT_ID, DEFAULT_VENDOR_ID


# =============================================================================
# Test Fixtures
# =============================================================================

FIRMWARE = ":04000000DEADBEEFC4\n:00000001FF\n"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep local environment settings out of the tests."""
    for name in ("TEK_UPDATER_CAPACITY", "TEK_UPDATER_VID",
                 "TEK_UPDATER_PID", "TEK_UPDATER_BOOT_PID"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def ports(monkeypatch):
    """Replace pyserial port enumeration with a settable list."""
    available = []
    monkeypatch.setattr(serial.tools.list_ports, "comports", lambda: list(available))
    return available


@pytest.fixture
def bootloader_port():
    return Mock(
        device="/dev/ttyACM0",
        description="MG84FL54B ISP",
        vid=DEFAULT_VENDOR_ID,
        pid=DEFAULT_BOOTLOADER_PRODUCT_ID,
        serial_number=None,
        location="1-1",
    )


@pytest.fixture
def hex_file(tmp_path):
    path = tmp_path / "firmware.hex"
    path.write_text(FIRMWARE)
    return path


# =============================================================================
# Hex Dump Tests
# =============================================================================

class TestFormatHexDump:
    """Tests for format_hex_dump()."""

    def test_single_line(self):
        assert format_hex_dump(bytes([0xDE, 0xAD])) == "0000: DE AD"

    def test_wraps_at_width(self):
        lines = format_hex_dump(bytes(20)).splitlines()
        assert len(lines) == 2
        assert lines[1].startswith("0010: ")

    def test_empty(self):
        assert format_hex_dump(b"") == ""


# =============================================================================
# CLI Tests
# =============================================================================

class TestTekflashCLI:
    """Tests for the tekflash command."""

    def test_cli_help(self):
        """Help describes the tool."""
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Intel HEX" in result.output

    def test_cli_version(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0

    def test_cli_requires_file(self):
        """No positional argument is a usage error."""
        runner = CliRunner()
        result = runner.invoke(main, [])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_cli_rejects_extra_arguments(self, hex_file):
        """More than one positional argument is a usage error."""
        runner = CliRunner()
        result = runner.invoke(main, [str(hex_file), str(hex_file)])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_cli_missing_file(self, tmp_path):
        """An unopenable file is reported before anything else."""
        runner = CliRunner()
        result = runner.invoke(main, [str(tmp_path / "missing.hex")])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "Unable to open ihex file" in result.output

    def test_cli_dry_run(self, hex_file, ports):
        """Dry run loads the file and never looks for a device."""
        runner = CliRunner()
        result = runner.invoke(main, ["--dry-run", str(hex_file)])
        assert result.exit_code == ExitCode.SUCCESS
        assert "4 bytes" in result.output

    def test_cli_dump(self, hex_file):
        """Dump prints the loaded image."""
        runner = CliRunner()
        result = runner.invoke(main, ["--dry-run", "--dump", str(hex_file)])
        assert result.exit_code == ExitCode.SUCCESS
        assert "0000: DE AD BE EF" in result.output

    def test_cli_load_error(self, tmp_path, ports, bootloader_port):
        """A bad file fails without touching the device."""
        path = tmp_path / "bad.hex"
        path.write_text(":04000000DEADBEEF00\n:00000001FF\n")
        ports.append(bootloader_port)

        runner = CliRunner()
        result = runner.invoke(main, [str(path)])
        assert result.exit_code == ExitCode.UPDATE_ERROR
        assert "Unable to load hex file" in result.output
        assert "checksum mismatch" in result.output
        assert "Uploaded" not in result.output

    def test_cli_capacity_option(self, tmp_path):
        """The capacity option bounds the image."""
        path = tmp_path / "firmware.hex"
        path.write_text(FIRMWARE)

        runner = CliRunner()
        result = runner.invoke(main, ["--dry-run", "--capacity", "4", str(path)])
        assert result.exit_code == ExitCode.UPDATE_ERROR
        assert "address too high" in result.output

    def test_cli_capacity_from_env(self, hex_file, monkeypatch):
        """The capacity can come from the environment."""
        monkeypatch.setenv("TEK_UPDATER_CAPACITY", "4")
        runner = CliRunner()
        result = runner.invoke(main, ["--dry-run", str(hex_file)])
        assert result.exit_code == ExitCode.UPDATE_ERROR

    def test_cli_no_device(self, hex_file, ports):
        """A missing device fails the update."""
        runner = CliRunner()
        result = runner.invoke(main, [str(hex_file)])
        assert result.exit_code == ExitCode.UPDATE_ERROR
        assert "Unable to upload buffer to device" in result.output

    def test_cli_upload(self, hex_file, ports, bootloader_port):
        """With one bootloader device connected the image is uploaded."""
        ports.append(bootloader_port)
        runner = CliRunner()
        result = runner.invoke(main, [str(hex_file)])
        assert result.exit_code == ExitCode.SUCCESS
        assert "Uploaded 4 bytes to /dev/ttyACM0" in result.output
