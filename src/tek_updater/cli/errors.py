"""
CLI Error Handling
==================

Maps exceptions to messages and exit codes for the command-line tool.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from tek_updater.errors import DeviceError, IHexError, UpdaterError


class ExitCode(IntEnum):
    """Standard exit codes for the CLI."""
    SUCCESS = 0
    UPDATE_ERROR = 1     # Load, discovery, or upload failure
    INVALID_ARGS = 2     # Invalid arguments or unreadable input file
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an exception on stderr and exit with the matching exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors

    Raises:
        SystemExit: Always
    """
    if isinstance(error, IHexError):
        click.echo(f"Unable to load hex file: {error}", err=True)
        sys.exit(ExitCode.UPDATE_ERROR)

    elif isinstance(error, DeviceError):
        click.echo(f"Unable to upload buffer to device: {error}", err=True)
        sys.exit(ExitCode.UPDATE_ERROR)

    elif isinstance(error, UpdaterError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.UPDATE_ERROR)

    elif isinstance(error, (FileNotFoundError, PermissionError, IsADirectoryError)):
        filename = error.filename if error.filename is not None else error
        click.echo(f'Unable to open ihex file "{filename}"', err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
