"""
tekflash - Firmware Updater Command-Line Interface
===================================================

This module implements the command-line interface for the firmware
updater. It loads an Intel HEX firmware image, locates the keyboard
controller in bootloader mode and uploads the image.

Update Sequence
---------------
1. Load and fully validate the HEX file. Any error stops here, before the
   device is touched, so a bad file can never leave the controller in a
   half-programmed state.
2. Locate exactly one device in bootloader mode.
3. Upload the loaded image.

Usage Examples
--------------
Flash a firmware image:
    $ tekflash firmware.hex

Check a file without touching the device:
    $ tekflash --dry-run firmware.hex

Show the loaded image:
    $ tekflash --dry-run --dump firmware.hex

Exit Codes
----------
0 - Success
1 - Load, discovery, or upload error
2 - Invalid arguments or unreadable file
3 - Internal error
"""

import logging
from pathlib import Path
from typing import Optional

import click

from tek_updater import __version__
from tek_updater.cli.errors import handle_cli_exception
from tek_updater.config import DeviceMode, UpdaterConfig
from tek_updater.device import find_device_in_mode, upload_image
from tek_updater.ihex import load_ihex_file


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def format_hex_dump(data: bytes, width: int = 16) -> str:
    """
    Format bytes as an address-prefixed hex dump.

    Example:
        >>> print(format_hex_dump(bytes(range(4))))
        0000: 00 01 02 03
    """
    lines = []
    for offset in range(0, len(data), width):
        chunk = data[offset:offset + width]
        lines.append(f"{offset:04X}: {chunk.hex(' ').upper()}")
    return "\n".join(lines)


@click.command()
@click.argument(
    "hex_file",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "--capacity",
    type=click.IntRange(min=1),
    default=None,
    help="Image capacity in bytes (default: 16384, or $TEK_UPDATER_CAPACITY)",
)
@click.option(
    "--dump",
    is_flag=True,
    help="Print the loaded image as hex",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Load and validate only, do not touch the device",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.version_option(__version__, "--version", "-V", prog_name="tekflash")
def main(
    hex_file: Path,
    capacity: Optional[int],
    dump: bool,
    dry_run: bool,
    verbose: bool,
) -> None:
    """
    Flash an Intel HEX firmware image to the keyboard controller.

    HEX_FILE must be in 8-bit Intel HEX format (record types 00 and 01).
    """
    setup_logging(verbose)

    config = UpdaterConfig.from_env()
    if capacity is not None:
        config.capacity = capacity

    try:
        image = load_ihex_file(hex_file, capacity=config.capacity)

        if dump:
            click.echo(format_hex_dump(image.image))

        if dry_run:
            click.echo(f"Loaded {hex_file} ({image.high_water_mark} bytes)")
            return

        device = find_device_in_mode(DeviceMode.BOOTLOADER, config)
        sent = upload_image(image, device)
        click.echo(f"Uploaded {sent} bytes to {device.device}")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
