"""ADB module initialization."""

from .bridge import DeviceBridge
from .device import (
    ADBDevice,
    ADBError,
    DeviceDisconnectedError,
    DeviceUnavailableError,
    EnumerationError,
    check_adb_available,
    list_devices,
    wait_for_device,
)
from .pull import FilePuller, create_pull_progress_bar
from .shell import ShellCommand

__all__ = [
    # bridge
    "DeviceBridge",
    # device
    "ADBDevice",
    "ADBError",
    "DeviceDisconnectedError",
    "DeviceUnavailableError",
    "EnumerationError",
    "check_adb_available",
    "list_devices",
    "wait_for_device",
    # shell
    "ShellCommand",
    # pull
    "FilePuller",
    "create_pull_progress_bar",
]
