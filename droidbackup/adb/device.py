"""ADB device management and communication."""

import re
import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from tenacity import (
    RetryError,
    Retrying,
    retry,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    stop_any,
    stop_never,
    wait_exponential,
    wait_fixed,
)

from ..util.cancel import CancelToken
from ..util.logging import get_logger
from ..util.paths import FALLBACK_DEVICE_LABEL, device_label_from_model

logger = get_logger(__name__)

# adb stderr that means the phone went away rather than the command failing
DISCONNECT_PATTERN = re.compile(
    r"no devices/emulators found|device offline|device '[^']*' not found|unauthorized",
    re.IGNORECASE,
)


class ADBError(Exception):
    """ADB command execution error."""
    pass


class DeviceUnavailableError(ADBError):
    """No device answered within the allowed wait."""
    pass


class EnumerationError(ADBError):
    """The device could not list its files."""
    pass


class DeviceDisconnectedError(ADBError):
    """The device dropped off the bridge while a command was running."""
    pass


class ADBDevice:
    """Represents an ADB-connected Android device.

    With ``serial=None`` commands go to adb's default device, which is
    what a plain ``adb pull`` does when exactly one phone is attached.
    """

    def __init__(self, serial: Optional[str] = None, adb_path: str = "adb"):
        self.serial = serial
        self.adb_path = adb_path
        self._label: Optional[str] = None

    def _base_command(self) -> List[str]:
        if self.serial:
            return [self.adb_path, "-s", self.serial]
        return [self.adb_path]

    def _run_command(self, command: List[str], timeout: int = 30) -> str:
        """Run an ADB command and return its stdout."""
        cmd = self._base_command() + command

        try:
            logger.debug(f"Running ADB command: {' '.join(cmd)}")
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                # undecodable bytes in device file names survive the round trip
                errors="surrogateescape",
                timeout=timeout,
                check=True
            )
            return result.stdout.strip()
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            error_msg = f"ADB command failed: {' '.join(cmd)}\nError: {stderr}"
            logger.debug(error_msg)
            if DISCONNECT_PATTERN.search(stderr):
                raise DeviceDisconnectedError(error_msg) from e
            raise ADBError(error_msg) from e
        except subprocess.TimeoutExpired as e:
            error_msg = f"ADB command timed out: {' '.join(cmd)}"
            logger.debug(error_msg)
            raise ADBError(error_msg) from e
        except FileNotFoundError as e:
            raise ADBError("ADB not found. Please install Android platform tools.") from e

    def is_connected(self) -> bool:
        """Check if the device answers on the bridge, without waiting."""
        try:
            return self._run_command(["get-state"], timeout=10) == "device"
        except ADBError:
            return False

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(ADBError),
        reraise=True,
    )
    def get_property(self, prop: str) -> str:
        """Read a system property with retry logic."""
        return self._run_command(["shell", "getprop", prop]).replace("\r", "")

    def device_label(self) -> str:
        """Folder-safe model name, e.g. ``Pixel_7``; falls back to ``My_Phone``."""
        if self._label is not None:
            return self._label

        try:
            model = self.get_property("ro.product.model")
        except ADBError as e:
            logger.warning(f"Could not read device model: {e}")
            return FALLBACK_DEVICE_LABEL

        self._label = device_label_from_model(model)
        logger.info(f"Connected to {self._label}")
        return self._label

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(EnumerationError),
        reraise=True,
    )
    def list_files(self, roots: Iterable[str]):
        """List regular, non-hidden files under ``roots``, recursively."""
        from .shell import ShellCommand

        return ShellCommand(self).list_files(roots)

    def fetch(self, remote_path: str, local_path: Path, expected_size: Optional[int] = None) -> bool:
        """Copy one file off the device; a single attempt, never retried."""
        from .pull import FilePuller

        return FilePuller(self).pull_file(remote_path, local_path, expected_size=expected_size)


def check_adb_available(adb_path: str = "adb") -> bool:
    """Check if ADB is available and working."""
    try:
        result = subprocess.run(
            [adb_path, "version"],
            capture_output=True,
            text=True,
            timeout=10
        )
        return result.returncode == 0
    except (subprocess.TimeoutExpired, FileNotFoundError):
        return False


def list_devices(adb_path: str = "adb") -> List[ADBDevice]:
    """List all connected ADB devices in the ``device`` state."""
    if not check_adb_available(adb_path):
        raise ADBError("ADB is not available or not in PATH")

    try:
        result = subprocess.run(
            [adb_path, "devices"],
            capture_output=True,
            text=True,
            timeout=10,
            check=True
        )
    except subprocess.CalledProcessError as e:
        raise ADBError(f"Failed to list devices: {e.stderr}") from e
    except subprocess.TimeoutExpired as e:
        raise ADBError("Listing devices timed out") from e

    devices = []
    lines = result.stdout.strip().split("\n")[1:]  # Skip header

    for line in lines:
        if line.strip():
            parts = line.split("\t")
            if len(parts) >= 2 and parts[1].strip() == "device":
                devices.append(ADBDevice(parts[0], adb_path))

    return devices


def wait_for_device(
    device,
    interval: float = 3.0,
    timeout: Optional[float] = None,
    cancel_token: Optional[CancelToken] = None,
    on_attempt: Optional[Callable[[int], None]] = None,
) -> None:
    """Block until ``device.is_connected()`` answers true.

    Polls every ``interval`` seconds. ``timeout=None`` waits forever, but
    the wait still ends early when ``cancel_token`` is cancelled. Raises
    :class:`DeviceUnavailableError` on timeout or cancellation.
    """
    stops = [stop_never if timeout is None else stop_after_delay(timeout)]
    sleep = None
    if cancel_token is not None:
        stops.append(lambda retry_state: cancel_token.cancelled)
        # returns as soon as the token is cancelled
        sleep = cancel_token.wait

    def probe() -> bool:
        if on_attempt is not None:
            on_attempt(probe.attempts)
        probe.attempts += 1
        return device.is_connected()

    probe.attempts = 0

    kwargs = {}
    if sleep is not None:
        kwargs["sleep"] = sleep

    retrying = Retrying(
        retry=retry_if_result(lambda connected: not connected),
        wait=wait_fixed(interval),
        stop=stop_any(*stops),
        **kwargs,
    )

    try:
        retrying(probe)
    except RetryError as e:
        if cancel_token is not None and cancel_token.cancelled:
            raise DeviceUnavailableError("Stopped waiting for the phone") from e
        raise DeviceUnavailableError(
            f"No phone answered within {timeout:g}s. Is USB debugging allowed?"
        ) from e
