"""Backup target volume module initialization."""

from .usb import UsbVolume, VolumeError

__all__ = [
    "UsbVolume",
    "VolumeError",
]
