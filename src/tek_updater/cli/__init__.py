"""
Firmware Updater Command-Line Interface
=======================================

- **tekflash**: Load an Intel HEX image and flash it to the device

Implemented as a Click-based CLI application.
"""

__all__ = ["tekflash"]
